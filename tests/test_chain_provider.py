"""
Unit Tests for the web3 Chain Provider
"""

from unittest.mock import Mock, PropertyMock

import pytest
from web3 import Web3
from web3.exceptions import TransactionNotFound

from blockchain.chain_provider import Web3ChainProvider
from orchestrator.errors import ChainQueryError
from orchestrator.models import Signer
from utils.config import NetworkConfig

from conftest import DEPLOYER, SECOND

# Hardhat's first development key
HARDHAT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
HARDHAT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def w3():
    w3 = Mock()
    w3.eth.accounts = [DEPLOYER.lower(), SECOND]
    w3.eth.gas_price = 30 * 10**9
    w3.eth.get_block.return_value = {'baseFeePerGas': 20 * 10**9}
    w3.eth.max_priority_fee = 2 * 10**9
    w3.eth.chain_id = 31337
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = b'\x11' * 32
    return w3


class TestSigners:

    def test_node_accounts(self, w3):
        signers = Web3ChainProvider(w3, "localhost").get_signers()

        assert [s.address for s in signers] == [DEPLOYER, SECOND]
        assert not signers[0].is_local

    def test_private_keys_take_precedence(self, w3):
        signers = Web3ChainProvider(w3, "sepolia", [HARDHAT_KEY]).get_signers()

        assert [s.address for s in signers] == [HARDHAT_ADDRESS]
        assert signers[0].is_local


class TestFeeData:

    def test_eip1559(self, w3):
        fee_data = Web3ChainProvider(w3, "sepolia").get_fee_data()

        assert fee_data == {
            'gas_price': 30 * 10**9,
            'base_fee_per_gas': 20 * 10**9,
            'max_fee_per_gas': 42 * 10**9,
            'max_priority_fee_per_gas': 2 * 10**9,
        }

    def test_priority_fee_fallback(self, w3):
        type(w3.eth).max_priority_fee = PropertyMock(side_effect=ValueError("method not found"))

        fee_data = Web3ChainProvider(w3, "sepolia").get_fee_data()

        assert fee_data['max_priority_fee_per_gas'] == 10**9
        assert fee_data['max_fee_per_gas'] == 41 * 10**9

    def test_legacy_chain(self, w3):
        w3.eth.get_block.return_value = {}

        fee_data = Web3ChainProvider(w3, "bsc").get_fee_data()

        assert fee_data['base_fee_per_gas'] is None
        assert fee_data['max_fee_per_gas'] is None
        assert fee_data['gas_price'] == 30 * 10**9


class TestSend:

    def test_node_signer_transacts(self, w3):
        contract_call = Mock()
        contract_call.transact.return_value = b'\x22' * 32

        tx_hash = Web3ChainProvider(w3, "localhost")._send(
            contract_call, Signer(DEPLOYER), {'gas': 100000}
        )

        assert tx_hash == "0x" + "22" * 32
        contract_call.transact.assert_called_once_with({'from': DEPLOYER, 'gas': 100000})

    def test_local_signer_signs(self, w3):
        provider = Web3ChainProvider(w3, "sepolia", [HARDHAT_KEY], chain_id=11155111)
        signer = provider.get_signers()[0]
        contract_call = Mock()
        contract_call.build_transaction.side_effect = lambda params: {
            'to': DEPLOYER,
            'value': 0,
            'gas': 100000,
            'gasPrice': 10**9,
            'nonce': params['nonce'],
            'chainId': params['chainId'],
            'data': '0x',
        }

        tx_hash = provider._send(contract_call, signer, None)

        assert tx_hash == "0x" + "11" * 32
        params = contract_call.build_transaction.call_args.args[0]
        assert params['nonce'] == 7
        assert params['chainId'] == 11155111
        w3.eth.get_transaction_count.assert_called_once_with(HARDHAT_ADDRESS, 'pending')
        assert w3.eth.send_raw_transaction.call_count == 1


class TestReceipts:

    def test_pending(self, w3):
        w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not yet")

        assert Web3ChainProvider(w3, "sepolia").get_receipt("0x01") is None

    def test_mined(self, w3):
        w3.eth.get_transaction_receipt.return_value = {
            'gasUsed': 21000, 'blockNumber': 12, 'status': 0, 'contractAddress': None,
        }

        receipt = Web3ChainProvider(w3, "sepolia").get_receipt("0x01")

        assert receipt.gas_used == 21000
        assert receipt.confirmed_block == 12
        assert not receipt.success

    def test_block_number(self, w3):
        w3.eth.block_number = 99

        assert Web3ChainProvider(w3, "sepolia").block_number() == 99


def test_connection_failure(monkeypatch):
    monkeypatch.setattr(Web3, "is_connected", lambda self: False)

    with pytest.raises(ChainQueryError, match="Failed to connect"):
        Web3ChainProvider.from_network_config(NetworkConfig("sepolia", "http://127.0.0.1:1"))
