"""
Parameter Resolver
Validates and normalizes operator input into an ActionRequest
"""

import json
from typing import Any, Iterable, Optional, Sequence

from .errors import InvalidParameter
from .models import ActionKind, ActionRequest, ArgKind, ArgValue

DEFAULT_DEPLOY_CONFIRMATIONS = 5
WRITE_CONFIRMATIONS = 1


def parse_arg(raw: Any) -> ArgValue:
    """
    Convert one positional argument into a tagged value

    Command line tokens are decoded as JSON when possible so `1000`, `true`
    and `[1,2]` keep their types; anything else (addresses, words) stays a
    string.

    Args:
        raw: Token from the command line, or an already-typed Python value

    Returns:
        ArgValue
    """
    if isinstance(raw, ArgValue):
        return raw

    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return ArgValue(ArgKind.STRING, raw)
        if isinstance(decoded, str):
            return ArgValue(ArgKind.STRING, decoded)
        if isinstance(decoded, (bool, int, list, dict)):
            return parse_arg(decoded)
        # floats and null have no ABI counterpart; keep what the operator typed
        return ArgValue(ArgKind.STRING, raw)

    # bool is a subclass of int, check it first
    if isinstance(raw, bool):
        return ArgValue(ArgKind.BOOLEAN, raw)
    if isinstance(raw, int):
        return ArgValue(ArgKind.INTEGER, raw)
    if isinstance(raw, (list, tuple, dict)):
        return ArgValue(ArgKind.STRUCTURED, list(raw) if isinstance(raw, tuple) else raw)

    raise InvalidParameter(f"Unsupported argument type: {type(raw).__name__}")


def parse_args(raw_args: Optional[Iterable[Any]]) -> tuple:
    if raw_args is None:
        return ()
    return tuple(parse_arg(raw) for raw in raw_args)


def _parse_int(value: Any, name: str, minimum: int) -> int:
    if isinstance(value, bool):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}") from None
    if isinstance(value, float) and number != value:
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    if number < minimum:
        raise InvalidParameter(f"{name} must be >= {minimum}, got {number}")
    return number


def _require_name(value: Optional[str], name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidParameter(f"{name} is required")
    return value.strip()


def resolve_deploy_request(
    contract: str,
    constructor_args: Optional[Sequence[Any]] = None,
    account: Any = 0,
    noconfirm: bool = False,
    noverify: bool = False,
    confirmations: Any = DEFAULT_DEPLOY_CONFIRMATIONS,
) -> ActionRequest:
    """
    Build the request for a contract deployment

    Args:
        contract: Contract name as found in the compiled artifacts
        constructor_args: Positional constructor arguments
        account: Signer index
        noconfirm: Skip the interactive confirmation
        noverify: Skip explorer source verification
        confirmations: Blocks to wait for after inclusion

    Returns:
        ActionRequest
    """
    return ActionRequest(
        kind=ActionKind.DEPLOY,
        contract_name=_require_name(contract, "contract"),
        args=parse_args(constructor_args),
        signer_index=_parse_int(account, "account", 0),
        skip_confirmation=bool(noconfirm),
        skip_verification=bool(noverify),
        required_confirmations=_parse_int(confirmations, "confirmations", 1),
    )


def resolve_write_request(
    contract: str,
    address: str,
    method: str,
    args: Optional[Sequence[Any]] = None,
    account: Any = 0,
    noconfirm: bool = False,
) -> ActionRequest:
    """
    Build the request for a state-changing method call

    Whether `address` holds code or `method` exists is checked later, by the
    chain and the Submitter.
    """
    return ActionRequest(
        kind=ActionKind.WRITE,
        contract_name=_require_name(contract, "contract"),
        args=parse_args(args),
        signer_index=_parse_int(account, "account", 0),
        skip_confirmation=bool(noconfirm),
        skip_verification=True,
        required_confirmations=WRITE_CONFIRMATIONS,
        method_name=_require_name(method, "method"),
        contract_address=_require_name(address, "address"),
    )
