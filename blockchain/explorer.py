"""
Explorer Verification Client
Submits contract sources to an Etherscan-compatible API
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
from eth_abi import encode
from loguru import logger

from orchestrator.errors import VerificationFailed

PENDING_RESULTS = ('pending in queue', 'in progress')
ALREADY_VERIFIED = 'already verified'


def abi_type(entry: Dict[str, Any]) -> str:
    """Canonical ABI type of a constructor input, expanding tuples"""
    type_str = entry['type']
    if not type_str.startswith('tuple'):
        return type_str
    inner = ",".join(abi_type(component) for component in entry.get('components', []))
    return f"({inner}){type_str[len('tuple'):]}"


def abi_value(entry: Dict[str, Any], value: Any) -> Any:
    """
    Shape a decoded JSON value for eth-abi

    Structs arrive as JSON objects; eth-abi takes tuples ordered by the
    ABI components.
    """
    type_str = entry['type']
    if type_str.endswith(']'):
        element = dict(entry, type=type_str[:type_str.rindex('[')])
        return [abi_value(element, item) for item in value]

    if not type_str.startswith('tuple'):
        return value

    components = entry.get('components', [])
    if isinstance(value, dict):
        missing = [c['name'] for c in components if c['name'] not in value]
        if missing:
            raise VerificationFailed(f"Struct argument is missing field(s): {', '.join(missing)}")
        value = [value[c['name']] for c in components]

    return tuple(abi_value(component, item) for component, item in zip(components, value))


def encode_constructor_args(inputs: List[Dict[str, Any]], args: Sequence[Any]) -> str:
    """ABI-encoded constructor arguments as hex without 0x, as explorers expect"""
    if not inputs:
        return ""
    types = [abi_type(entry) for entry in inputs]
    values = [abi_value(entry, arg) for entry, arg in zip(inputs, args)]
    return encode(types, values).hex()


class EtherscanVerifier:
    """
    Source-verification collaborator

    Uses the build-info written at compile time, so the explorer recompiles
    exactly the standard JSON input that produced the deployed bytecode.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str],
        contracts,
        chain_id: Optional[int] = None,
        poll_interval: float = 5.0,
        max_polls: int = 24,
    ):
        """
        Initialize Etherscan Verifier

        Args:
            api_url: Explorer API endpoint (e.g. https://api.etherscan.io/v2/api)
            api_key: Explorer API key
            contracts: ContractManager for artifacts and build-info
            chain_id: Chain id, sent to multichain (v2) endpoints
            poll_interval: Seconds between status checks
            max_polls: Status checks before giving up
        """
        self.api_url = api_url
        self.api_key = api_key
        self.contracts = contracts
        self.chain_id = chain_id
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    def _params(self, **extra) -> Dict[str, Any]:
        params = {'apikey': self.api_key, 'module': 'contract'}
        if self.chain_id is not None:
            params['chainid'] = str(self.chain_id)
        params.update(extra)
        return params

    def build_submission(self, address: str, contract_name: str, constructor_args) -> Dict:
        """Form fields of a verifysourcecode request"""
        interface = self.contracts.load_interface(contract_name)
        build_info = self.contracts.load_build_info(contract_name)

        qualified = self.contracts.qualified_name(contract_name) or interface.name

        return self._params(
            action='verifysourcecode',
            contractaddress=address,
            sourceCode=json.dumps(build_info['input']),
            codeformat='solidity-standard-json-input',
            contractname=qualified,
            compilerversion=f"v{build_info.get('solcLongVersion') or build_info['solcVersion']}",
            # Etherscan's own spelling of the field
            constructorArguements=encode_constructor_args(
                interface.constructor_inputs(), constructor_args
            ),
        )

    async def verify(self, address: str, contract_name: str, constructor_args) -> bool:
        """
        Verify a deployed contract

        Args:
            address: Deployed address
            contract_name: Contract name in the artifacts
            constructor_args: Arguments used at deployment

        Returns:
            True when the explorer reports the contract verified
        """
        if not self.api_url or not self.api_key:
            raise VerificationFailed("Explorer API URL or API key not configured")

        data = self.build_submission(address, contract_name, constructor_args)
        timeout = aiohttp.ClientTimeout(total=30)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.api_url, data=data) as response:
                payload = await response.json(content_type=None)

            result = str(payload.get('result', ''))

            if payload.get('status') != '1':
                if ALREADY_VERIFIED in result.lower():
                    logger.info(f"{address} is already verified")
                    return True
                raise VerificationFailed(result or payload.get('message', 'unknown error'))

            logger.info(f"Verification submitted, GUID: {result}")
            return await self._wait_for_status(session, result)

    async def _wait_for_status(self, session: aiohttp.ClientSession, guid: str) -> bool:
        for _ in range(self.max_polls):
            await asyncio.sleep(self.poll_interval)

            params = self._params(action='checkverifystatus', guid=guid)
            async with session.get(self.api_url, params=params) as response:
                payload = await response.json(content_type=None)

            result = str(payload.get('result', ''))
            lowered = result.lower()

            if any(state in lowered for state in PENDING_RESULTS):
                logger.debug(f"Verification pending: {result}")
                continue

            if payload.get('status') == '1' or ALREADY_VERIFIED in lowered:
                return True

            raise VerificationFailed(result)

        raise VerificationFailed(f"Verification still pending after {self.max_polls} checks")
