"""
Confirmation Gate
Interactive yes/no prompt guarding every state-changing call
"""

import sys
from typing import Callable, Optional, TextIO

from loguru import logger


class PromptSession:
    """
    Scoped input/output pair used for a single prompt

    Streams passed in with `owns_streams=True` are closed with the session;
    the process-wide stdin/stdout are only flushed and released.
    """

    def __init__(self, input_stream: TextIO, output_stream: TextIO, owns_streams: bool = False):
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.owns_streams = owns_streams
        self.closed = False

    @classmethod
    def stdio(cls) -> "PromptSession":
        return cls(sys.stdin, sys.stdout)

    def ask(self, question: str) -> str:
        if self.closed:
            raise ValueError("Prompt session is closed")
        self.output_stream.write(question)
        self.output_stream.flush()
        line = self.input_stream.readline()
        # EOF reads as an empty answer
        return line.rstrip("\r\n")

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            self.output_stream.flush()
        finally:
            if self.owns_streams:
                self.input_stream.close()
                self.output_stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def confirm(
    message: str,
    skip: bool,
    session_factory: Optional[Callable[[], PromptSession]] = None,
) -> bool:
    """
    Ask the operator to confirm an action

    Args:
        message: Question shown before the "(y/N)" suffix
        skip: Bypass the prompt and approve without any I/O
        session_factory: Builds the prompt session (defaults to stdin/stdout)

    Returns:
        True only when the answer is "y" (case-insensitive, trimmed)
    """
    if skip:
        return True

    factory = session_factory or PromptSession.stdio
    with factory() as session:
        answer = session.ask(f"{message} (y/N): ")

    return answer.strip().lower() == 'y'


class ConfirmationGate:
    """
    Confirmation provider injected into the orchestrator

    Callable as `gate(message, skip) -> bool`.
    """

    def __init__(self, session_factory: Optional[Callable[[], PromptSession]] = None):
        self.session_factory = session_factory or PromptSession.stdio

    def __call__(self, message: str, skip: bool = False) -> bool:
        approved = confirm(message, skip, self.session_factory)
        if skip:
            logger.debug("Confirmation skipped (--noconfirm)")
        else:
            logger.debug(f"Operator answer accepted: {approved}")
        return approved
