"""
Unit Tests for the Confirmation Gate
"""

import io

import pytest

from orchestrator.confirmation import ConfirmationGate, PromptSession, confirm


class RecordingSession(PromptSession):
    """Prompt session over in-memory streams that remembers being closed"""

    instances = []

    def __init__(self, answer="", fail=False):
        super().__init__(io.StringIO(answer), io.StringIO())
        self.fail = fail
        RecordingSession.instances.append(self)

    def ask(self, question):
        if self.fail:
            raise OSError("terminal went away")
        return super().ask(question)


def session_with(answer, fail=False):
    return lambda: RecordingSession(answer, fail)


@pytest.fixture(autouse=True)
def reset_sessions():
    RecordingSession.instances = []
    yield


class TestConfirm:

    def test_skip_does_no_io(self):
        def explode():
            raise AssertionError("prompt opened")

        assert confirm("Proceed?", skip=True, session_factory=explode) is True

    @pytest.mark.parametrize("answer", ["y\n", "Y\n", "  y  \n", "y"])
    def test_yes(self, answer):
        assert confirm("Proceed?", False, session_with(answer)) is True

    @pytest.mark.parametrize("answer", ["n\n", "\n", "", "yes\n", "N\n", "yy\n"])
    def test_everything_else_is_no(self, answer):
        assert confirm("Proceed?", False, session_with(answer)) is False

    def test_prompt_text(self):
        confirm("Deploy now?", False, session_with("n\n"))

        session = RecordingSession.instances[0]
        assert session.output_stream.getvalue() == "Deploy now? (y/N): "

    def test_session_closed_after_answer(self):
        confirm("Proceed?", False, session_with("y\n"))

        assert RecordingSession.instances[0].closed

    def test_session_closed_when_read_fails(self):
        with pytest.raises(OSError):
            confirm("Proceed?", False, session_with("", fail=True))

        assert RecordingSession.instances[0].closed


class TestPromptSession:

    def test_owned_streams_are_closed(self):
        input_stream, output_stream = io.StringIO("y\n"), io.StringIO()

        with PromptSession(input_stream, output_stream, owns_streams=True) as session:
            session.ask("?")

        assert input_stream.closed
        assert output_stream.closed

    def test_shared_streams_stay_open(self):
        input_stream, output_stream = io.StringIO("y\n"), io.StringIO()

        with PromptSession(input_stream, output_stream) as session:
            session.ask("?")

        assert session.closed
        assert not input_stream.closed
        assert not output_stream.closed

    def test_closed_session_rejects_prompts(self):
        session = PromptSession(io.StringIO(), io.StringIO())
        session.close()

        with pytest.raises(ValueError):
            session.ask("?")


class TestConfirmationGate:

    def test_callable_provider(self):
        gate = ConfirmationGate(session_with("y\n"))

        assert gate("Proceed?") is True
        assert gate("Proceed?", skip=True) is True
        assert len(RecordingSession.instances) == 1

    def test_declined(self):
        assert ConfirmationGate(session_with("n\n"))("Proceed?") is False
