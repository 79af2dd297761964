"""
Unit Tests for the Signer Selector
"""

import pytest

from orchestrator.errors import ChainQueryError, SignerOutOfRange
from orchestrator.signer_selector import SignerSelector

from conftest import DEPLOYER, SECOND


class TestSignerSelector:

    def test_selects_by_index(self, provider):
        signer, balance = SignerSelector(provider).select(1)

        assert signer.address == SECOND
        assert balance == 10**17

    def test_default_index(self, provider):
        signer, balance = SignerSelector(provider).select(0)

        assert signer.address == DEPLOYER
        assert balance == 5 * 10**18

    @pytest.mark.parametrize("index", [2, 3, 100])
    def test_out_of_range(self, provider, index):
        with pytest.raises(SignerOutOfRange) as exc_info:
            SignerSelector(provider).select(index)

        assert exc_info.value.index == index
        assert exc_info.value.available == 2
        assert "out of range" in str(exc_info.value)
        assert provider.sent == []

    def test_empty_signer_set(self, provider):
        provider.signers = []

        with pytest.raises(SignerOutOfRange):
            SignerSelector(provider).select(0)

    def test_signers_enumerated_once(self, provider):
        SignerSelector(provider).select(0)

        assert provider.queries.count('get_signers') == 1

    def test_balance_failure_propagates(self, provider):
        provider.balance_error = ConnectionError("node down")

        with pytest.raises(ChainQueryError, match="node down"):
            SignerSelector(provider).select(0)
