"""
Chain Provider
web3-backed access to signers, balances, fees, gas estimates and transactions
"""

from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from web3 import Web3
from web3.exceptions import TransactionNotFound
from loguru import logger

from orchestrator.errors import ChainQueryError
from orchestrator.models import Receipt, Signer

# Fallback tip when the node does not answer eth_maxPriorityFeePerGas
DEFAULT_PRIORITY_FEE_GWEI = 1


class Web3ChainProvider:
    """
    Chain provider collaborator used by the orchestrator

    Signers are the configured private keys when present, otherwise the
    accounts unlocked on the node (Hardhat / localhost development nodes).
    """

    def __init__(
        self,
        w3: Web3,
        network_name: str,
        private_keys: Sequence[str] = (),
        chain_id: Optional[int] = None,
    ):
        """
        Initialize Chain Provider

        Args:
            w3: Web3 instance
            network_name: Name of the active network
            private_keys: Hex private keys of local signers, in index order
            chain_id: Expected chain id (queried from the node when None)
        """
        self.w3 = w3
        self.network_name = network_name
        self.chain_id = chain_id
        self.local_accounts = [Account.from_key(key) for key in private_keys]

        logger.info(
            f"Chain provider ready for '{network_name}' "
            f"({len(self.local_accounts)} local signer(s))"
        )

    @classmethod
    def from_network_config(cls, network) -> "Web3ChainProvider":
        """
        Connect to the network described by a NetworkConfig

        Args:
            network: utils.config.NetworkConfig

        Returns:
            Web3ChainProvider
        """
        w3 = Web3(Web3.HTTPProvider(network.rpc_url))

        if not w3.is_connected():
            raise ChainQueryError(f"Failed to connect to {network.name} at {network.rpc_url}")

        return cls(w3, network.name, network.private_keys, network.chain_id)

    def get_signers(self) -> List[Signer]:
        if self.local_accounts:
            return [Signer(account.address, account) for account in self.local_accounts]
        return [Signer(Web3.to_checksum_address(address)) for address in self.w3.eth.accounts]

    def get_balance(self, address: str) -> int:
        return self.w3.eth.get_balance(Web3.to_checksum_address(address))

    def get_fee_data(self) -> Dict[str, Optional[int]]:
        """
        Current fee data

        Returns:
            Dict with gas_price, base_fee_per_gas, max_fee_per_gas and
            max_priority_fee_per_gas in wei (EIP-1559 fields None on legacy chains)
        """
        gas_price = self.w3.eth.gas_price
        latest_block = self.w3.eth.get_block('latest')
        base_fee = latest_block.get('baseFeePerGas')

        fee_data = {
            'gas_price': gas_price,
            'base_fee_per_gas': base_fee,
            'max_fee_per_gas': None,
            'max_priority_fee_per_gas': None,
        }

        if base_fee is not None:
            try:
                priority_fee = self.w3.eth.max_priority_fee
            except Exception as e:
                logger.debug(f"eth_maxPriorityFeePerGas unavailable: {e}")
                priority_fee = Web3.to_wei(DEFAULT_PRIORITY_FEE_GWEI, 'gwei')

            # Max fee = base fee * 2 + priority fee
            fee_data['max_priority_fee_per_gas'] = int(priority_fee)
            fee_data['max_fee_per_gas'] = int(base_fee) * 2 + int(priority_fee)

        return fee_data

    def _constructor(self, abi: List[Dict], bytecode: str, args: Sequence[Any]):
        return self.w3.eth.contract(abi=abi, bytecode=bytecode).constructor(*args)

    def _function(self, address: str, abi: List[Dict], method: str, args: Sequence[Any]):
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        return getattr(contract.functions, method)(*args)

    def estimate_deploy_gas(self, abi, bytecode, args, sender: str) -> int:
        return self._constructor(abi, bytecode, args).estimate_gas({'from': sender})

    def estimate_call_gas(self, address, abi, method, args, sender: str) -> int:
        return self._function(address, abi, method, args).estimate_gas({'from': sender})

    def deploy(self, abi, bytecode, args, signer: Signer, overrides: Dict = None) -> str:
        return self._send(self._constructor(abi, bytecode, args), signer, overrides)

    def call(self, address, abi, method, args, signer: Signer, overrides: Dict = None) -> str:
        return self._send(self._function(address, abi, method, args), signer, overrides)

    def _send(self, contract_call, signer: Signer, overrides: Optional[Dict]) -> str:
        """
        Sign (locally or on the node) and broadcast a contract call

        Returns:
            Transaction hash as 0x-prefixed hex
        """
        tx_params = {'from': signer.address}
        tx_params.update(overrides or {})

        if not signer.is_local:
            tx_hash = contract_call.transact(tx_params)
            return Web3.to_hex(tx_hash)

        tx_params.setdefault(
            'nonce', self.w3.eth.get_transaction_count(signer.address, 'pending')
        )
        tx_params.setdefault('chainId', self.chain_id or self.w3.eth.chain_id)

        transaction = contract_call.build_transaction(tx_params)
        signed_tx = signer.account.sign_transaction(transaction)
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        return Web3.to_hex(tx_hash)

    def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """Receipt for a mined transaction, None while it is still pending"""
        try:
            receipt = self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

        if receipt is None:
            return None

        return Receipt(
            tx_hash=tx_hash,
            gas_used=int(receipt['gasUsed']),
            confirmed_block=int(receipt['blockNumber']),
            success=receipt['status'] == 1,
            contract_address=receipt.get('contractAddress'),
        )

    def block_number(self) -> int:
        return self.w3.eth.block_number
