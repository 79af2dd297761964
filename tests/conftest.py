"""
Shared fixtures: an in-memory chain provider and a compiled Token artifact
"""

import json

import pytest

from blockchain.contract_manager import ContractManager
from orchestrator.models import KnownInterface, Receipt, Signer

DEPLOYER = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
SECOND = "0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2"
TOKEN_ADDRESS = "0xd9145CCE52D386f254917e481eB44e9943F39138"
RECIPIENT = "0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db"

TOKEN_ABI = [
    {
        "type": "constructor",
        "inputs": [{"name": "initialSupply", "type": "uint256"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
]
TOKEN_BYTECODE = "0x6080604052348015600f57600080fd5b50"


class FakeChainProvider:
    """
    In-memory chain: every call is recorded, each block_number() query mines a block
    """

    def __init__(self, network_name="sepolia", signers=None, balances=None):
        self.network_name = network_name
        self.signers = signers if signers is not None else [Signer(DEPLOYER), Signer(SECOND)]
        self.balances = balances or {DEPLOYER: 5 * 10**18, SECOND: 10**17}

        self.gas_estimate = 1_200_000
        self.gas_error = None
        self.fee_data = {
            'gas_price': 30 * 10**9,
            'base_fee_per_gas': 20 * 10**9,
            'max_fee_per_gas': 42 * 10**9,
            'max_priority_fee_per_gas': 2 * 10**9,
        }
        self.fee_error = None
        self.balance_error = None
        self.revert = False
        self.pending_polls = 0

        self.block = 100
        self.sent = []
        self.receipts = {}
        self.queries = []

    def get_signers(self):
        self.queries.append('get_signers')
        return list(self.signers)

    def get_balance(self, address):
        self.queries.append('get_balance')
        if self.balance_error:
            raise self.balance_error
        return self.balances.get(address, 0)

    def get_fee_data(self):
        self.queries.append('get_fee_data')
        if self.fee_error:
            raise self.fee_error
        return dict(self.fee_data)

    def estimate_deploy_gas(self, abi, bytecode, args, sender):
        self.queries.append('estimate_deploy_gas')
        if self.gas_error:
            raise self.gas_error
        return self.gas_estimate

    def estimate_call_gas(self, address, abi, method, args, sender):
        self.queries.append('estimate_call_gas')
        if self.gas_error:
            raise self.gas_error
        return self.gas_estimate

    def _mine(self, tx_hash, contract_address=None):
        self.block += 1
        self.receipts[tx_hash] = Receipt(
            tx_hash=tx_hash,
            gas_used=self.gas_estimate - 1000,
            confirmed_block=self.block,
            success=not self.revert,
            contract_address=contract_address,
        )

    def deploy(self, abi, bytecode, args, signer, overrides=None):
        tx_hash = f"0x{len(self.sent) + 1:064x}"
        self.sent.append(('deploy', args, signer.address, overrides))
        self._mine(tx_hash, TOKEN_ADDRESS)
        return tx_hash

    def call(self, address, abi, method, args, signer, overrides=None):
        tx_hash = f"0x{len(self.sent) + 1:064x}"
        self.sent.append(('call', address, method, args, signer.address, overrides))
        self._mine(tx_hash)
        return tx_hash

    def get_receipt(self, tx_hash):
        if self.pending_polls > 0:
            self.pending_polls -= 1
            return None
        return self.receipts.get(tx_hash)

    def block_number(self):
        self.block += 1
        return self.block


@pytest.fixture
def provider():
    return FakeChainProvider()


@pytest.fixture
def token_interface():
    return KnownInterface(
        name="Token",
        abi=tuple(TOKEN_ABI),
        bytecode=TOKEN_BYTECODE,
        source_name="contracts/Token.sol",
    )


@pytest.fixture
def artifacts_dir(tmp_path):
    """Hardhat-layout artifacts for contracts/Token.sol:Token"""
    root = tmp_path / "artifacts"
    contract_dir = root / "contracts" / "Token.sol"
    contract_dir.mkdir(parents=True)
    build_dir = root / "build-info"
    build_dir.mkdir()

    (contract_dir / "Token.json").write_text(json.dumps({
        "_format": "hh-sol-artifact-1",
        "contractName": "Token",
        "sourceName": "contracts/Token.sol",
        "abi": TOKEN_ABI,
        "bytecode": TOKEN_BYTECODE,
    }))
    (contract_dir / "Token.dbg.json").write_text(json.dumps({
        "_format": "hh-sol-dbg-1",
        "buildInfo": "../../build-info/abc123.json",
    }))
    (build_dir / "abc123.json").write_text(json.dumps({
        "_format": "hh-sol-build-info-1",
        "id": "abc123",
        "solcVersion": "0.8.24",
        "solcLongVersion": "0.8.24+commit.e11b9ed9",
        "input": {
            "language": "Solidity",
            "sources": {"contracts/Token.sol": {"content": "contract Token {}"}},
            "settings": {},
        },
    }))

    return root


@pytest.fixture
def contracts(artifacts_dir):
    return ContractManager(str(artifacts_dir))


class AutomineProvider(FakeChainProvider):
    """
    Development node behaviour: a block is mined only when a transaction arrives
    """

    def block_number(self):
        return self.block
