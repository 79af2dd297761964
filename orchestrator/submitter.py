"""
Submitter
Prepares and sends the single state-changing transaction of a request
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from web3 import Web3
from loguru import logger

from .errors import InvalidParameter, MethodNotFound, OrchestrationError, SubmissionError
from .models import (
    ActionKind,
    ActionRequest,
    ArgKind,
    ArgValue,
    ContractInterface,
    InferredSingleMethod,
    KnownInterface,
    PendingAction,
    Signer,
)
from .params import parse_arg

_HEX_RE = re.compile(r'^0x([0-9a-fA-F]{2})*$')


@dataclass(frozen=True)
class PreparedCall:
    """Fully encoded call, ready for estimation and submission"""

    kind: ActionKind
    abi: List[Dict[str, Any]]
    args: List[Any]
    bytecode: Optional[str] = None
    address: Optional[str] = None
    method: Optional[str] = None


def infer_abi_type(arg: ArgValue) -> str:
    """
    Guess the Solidity type of an argument when no ABI is known

    Args:
        arg: Tagged argument

    Returns:
        ABI type string
    """
    if arg.kind == ArgKind.BOOLEAN:
        return 'bool'
    if arg.kind == ArgKind.INTEGER:
        return 'uint256' if arg.value >= 0 else 'int256'
    if arg.kind == ArgKind.STRING:
        value = arg.value
        if len(value) == 42 and Web3.is_address(value):
            return 'address'
        if _HEX_RE.match(value):
            return 'bytes'
        return 'string'

    # Structured: only homogeneous arrays can be expressed without an ABI
    if not isinstance(arg.value, list) or not arg.value:
        raise InvalidParameter(
            f"Cannot infer an ABI type for {arg.display()}; compile the contract to use it"
        )
    element_types = {infer_abi_type(parse_arg(item)) for item in arg.value}
    if len(element_types) != 1:
        raise InvalidParameter(f"Array elements have mixed types: {arg.display()}")
    return f"{element_types.pop()}[]"


def build_single_method_abi(method: str, args: List[ArgValue]) -> List[Dict[str, Any]]:
    """Minimal one-function ABI for calling `method` with `args`"""
    return [{
        "type": "function",
        "name": method,
        "inputs": [
            {"name": f"arg{index}", "type": infer_abi_type(arg)}
            for index, arg in enumerate(args)
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    }]


def _coerce(abi_type: str, value: Any) -> Any:
    """Adapt a decoded argument to what the ABI encoder expects"""
    if abi_type.endswith(']') and isinstance(value, list):
        inner = abi_type[:abi_type.rindex('[')]
        return [_coerce(inner, item) for item in value]

    if abi_type == 'address':
        if not isinstance(value, str) or not Web3.is_address(value):
            raise InvalidParameter(f"Invalid address argument: {value!r}")
        return Web3.to_checksum_address(value)

    if abi_type.startswith(('uint', 'int')) and isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            raise InvalidParameter(f"Invalid {abi_type} argument: {value!r}") from None

    return value


def _encode_args(inputs: List[Dict[str, Any]], args: List[ArgValue]) -> List[Any]:
    return [
        _coerce(entry.get('type', ''), arg.to_native())
        for entry, arg in zip(inputs, args)
    ]


class Submitter:
    """
    Sends exactly one deploy or method-call transaction per request
    """

    def __init__(self, provider, tx_overrides: Optional[Dict[str, int]] = None):
        """
        Initialize Submitter

        Args:
            provider: Chain provider collaborator
            tx_overrides: Optional gas / fee fields applied to every transaction
        """
        self.provider = provider
        self.tx_overrides = dict(tx_overrides or {})

    def prepare(self, request: ActionRequest, interface: ContractInterface) -> PreparedCall:
        """
        Resolve and encode the call described by a request

        No network I/O: a missing method is reported before anything is sent.

        Args:
            request: Action request
            interface: Known ABI or inferred single method

        Returns:
            PreparedCall
        """
        args = list(request.args)

        if request.kind == ActionKind.DEPLOY:
            if not isinstance(interface, KnownInterface):
                raise InvalidParameter(
                    f"Cannot deploy {request.contract_name} without a compiled artifact"
                )
            if not interface.bytecode or interface.bytecode in ('0x', ''):
                raise InvalidParameter(
                    f"{request.contract_name} has no deployable bytecode (abstract or interface?)"
                )
            inputs = interface.constructor_inputs()
            if len(inputs) != len(args):
                raise InvalidParameter(
                    f"{request.contract_name} constructor expects {len(inputs)} "
                    f"argument(s), got {len(args)}"
                )
            return PreparedCall(
                kind=ActionKind.DEPLOY,
                abi=list(interface.abi),
                args=_encode_args(inputs, args),
                bytecode=interface.bytecode,
            )

        method = request.method_name
        address = _coerce('address', request.contract_address)

        if isinstance(interface, KnownInterface):
            candidates = interface.functions_named(method)
            if not candidates:
                raise MethodNotFound(method, request.contract_name)
            matching = [c for c in candidates if len(c.get('inputs', [])) == len(args)]
            if not matching:
                arities = sorted({len(c.get('inputs', [])) for c in candidates})
                raise InvalidParameter(
                    f"{method} expects {' or '.join(map(str, arities))} "
                    f"argument(s), got {len(args)}"
                )
            # Overloads of equal arity are left to web3's own resolution
            fragment = matching[0]
            abi = list(interface.abi) if len(matching) > 1 else [fragment]
            encoded = _encode_args(fragment.get('inputs', []), args)

        elif isinstance(interface, InferredSingleMethod):
            abi = build_single_method_abi(interface.method_name, args)
            encoded = _encode_args(abi[0]['inputs'], args)
            method = interface.method_name

        else:
            raise TypeError(f"Unknown contract interface: {interface!r}")

        return PreparedCall(
            kind=ActionKind.WRITE,
            abi=abi,
            args=encoded,
            address=address,
            method=method,
        )

    async def submit(self, prepared: PreparedCall, signer: Signer) -> PendingAction:
        """
        Send the prepared transaction

        Args:
            prepared: Encoded call
            signer: Selected signer

        Returns:
            PendingAction carrying the transaction hash
        """
        try:
            if prepared.kind == ActionKind.DEPLOY:
                logger.info("Deploying contract...")
                tx_hash = self.provider.deploy(
                    prepared.abi, prepared.bytecode, prepared.args, signer, self.tx_overrides
                )
            else:
                logger.info("Sending transaction...")
                tx_hash = self.provider.call(
                    prepared.address, prepared.abi, prepared.method,
                    prepared.args, signer, self.tx_overrides
                )

        except OrchestrationError:
            raise
        except Exception as e:
            raise SubmissionError(f"Failed to send transaction: {e}") from e

        logger.info(f"Transaction hash: {tx_hash}")
        return PendingAction(tx_hash=tx_hash)
