"""
Configuration
Network and toolchain settings resolved once at process start
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv
from loguru import logger

from orchestrator.errors import InvalidParameter

load_dotenv()

DEFAULT_CONFIG_PATH = "config/network_config.json"
LOCAL_RPC_URL = "http://127.0.0.1:8545"

# Development networks usable without a config file
DEFAULT_NETWORKS = {
    'hardhat': {'rpc_url': LOCAL_RPC_URL},
    'localhost': {'rpc_url': LOCAL_RPC_URL},
}


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    rpc_url: str
    chain_id: Optional[int] = None
    explorer_api_url: Optional[str] = None
    explorer_api_key: Optional[str] = None
    private_keys: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    network: NetworkConfig
    solc_version: str = "0.8.24"
    optimizer_runs: Optional[int] = 200
    contracts_dir: str = "contracts"
    artifacts_dir: str = "artifacts"
    poll_interval: float = 2.0
    confirmation_timeout: Optional[float] = None
    tx_overrides: Dict[str, int] = field(default_factory=dict)
    log_file: Optional[str] = None


def _split_keys(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(key.strip() for key in raw.split(',') if key.strip())


def _network_config(name: str, entry: Dict) -> NetworkConfig:
    rpc_url = entry.get('rpc_url')
    if not rpc_url and entry.get('rpc_url_env'):
        rpc_url = os.getenv(entry['rpc_url_env'])
    if not rpc_url:
        raise InvalidParameter(
            f"No RPC URL for network '{name}' "
            f"(set {entry.get('rpc_url_env', 'rpc_url')})"
        )

    api_key = entry.get('explorer_api_key')
    if not api_key and entry.get('explorer_api_key_env'):
        api_key = os.getenv(entry['explorer_api_key_env'])

    private_keys = _split_keys(os.getenv(entry['private_keys_env'])) if entry.get('private_keys_env') else ()

    return NetworkConfig(
        name=name,
        rpc_url=rpc_url,
        chain_id=entry.get('chain_id'),
        explorer_api_url=entry.get('explorer_api_url'),
        explorer_api_key=api_key,
        private_keys=private_keys,
    )


def load_config(path: str = DEFAULT_CONFIG_PATH, network: Optional[str] = None) -> AppConfig:
    """
    Load configuration for one network

    Args:
        path: JSON config file; a missing file leaves only hardhat/localhost
        network: Network name (defaults to the file's default_network)

    Returns:
        AppConfig
    """
    raw: Dict = {}
    config_path = Path(path)

    if config_path.is_file():
        with open(config_path, 'r') as f:
            raw = json.load(f)
    else:
        logger.debug(f"Config file {path} not found, using defaults")

    networks = dict(DEFAULT_NETWORKS)
    networks.update(raw.get('networks', {}))

    name = network or raw.get('default_network') or 'hardhat'
    if name not in networks:
        raise InvalidParameter(
            f"Unknown network '{name}'. Available networks: {', '.join(sorted(networks))}"
        )

    solidity = raw.get('solidity', {})
    paths = raw.get('paths', {})
    confirmation = raw.get('confirmation', {})

    return AppConfig(
        network=_network_config(name, networks[name]),
        solc_version=solidity.get('version', AppConfig.solc_version),
        optimizer_runs=solidity.get('optimizer_runs', AppConfig.optimizer_runs),
        contracts_dir=paths.get('contracts', AppConfig.contracts_dir),
        artifacts_dir=paths.get('artifacts', AppConfig.artifacts_dir),
        poll_interval=float(confirmation.get('poll_interval', AppConfig.poll_interval)),
        confirmation_timeout=confirmation.get('timeout'),
        tx_overrides={key: int(value) for key, value in raw.get('tx_overrides', {}).items()},
        log_file=raw.get('logging', {}).get('file'),
    )
