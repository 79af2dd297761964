"""
Blockchain Interaction Package
Chain provider, compiled artifacts, compilation and explorer verification
"""

from .chain_provider import Web3ChainProvider
from .compiler import ContractCompiler
from .contract_manager import ContractManager
from .explorer import EtherscanVerifier

__all__ = ['Web3ChainProvider', 'ContractCompiler', 'ContractManager', 'EtherscanVerifier']
