"""
Preview Renderer
Human-readable summary of a pending deploy or write action
"""

from typing import List, Optional, Sequence

from web3 import Web3

from .models import ActionKind, ActionRequest, ArgValue, CostEstimate, Signer

UNAVAILABLE = "unavailable"


def format_args(args: Sequence[ArgValue]) -> str:
    """Numbered argument list, one `index: value (type)` line per argument"""
    if not args:
        return "  (none)"
    return "\n".join(
        f"  {index}: {arg.display()} ({arg.type_name})"
        for index, arg in enumerate(args)
    )


def _ether(value: Optional[int]) -> str:
    if value is None:
        return UNAVAILABLE
    return f"{Web3.from_wei(value, 'ether')} ETH"


def _gwei(value: Optional[int]) -> str:
    if value is None:
        return UNAVAILABLE
    return f"{Web3.from_wei(value, 'gwei')} gwei"


def _heading(title: str) -> List[str]:
    return [title, "=" * len(title)]


def render_preview(
    request: ActionRequest,
    signer: Signer,
    balance_wei: int,
    estimate: CostEstimate,
    network: str,
) -> str:
    """
    Render the pre-confirmation report

    Pure function of its inputs; missing cost figures render as
    "unavailable".

    Args:
        request: Resolved action request
        signer: Selected signer
        balance_wei: Signer balance in wei
        estimate: Cost estimate (possibly partial)
        network: Active network name

    Returns:
        Multi-line report
    """
    if request.kind == ActionKind.DEPLOY:
        lines = _heading("DEPLOYMENT INFORMATION")
        lines.append(f"Network: {network}")
        lines.append(f"Contract: {request.contract_name}")
        lines.append(f"Deployer: {signer.address}")
        args_title = "Constructor Arguments:"
    else:
        lines = _heading("TRANSACTION INFORMATION")
        lines.append(f"Network: {network}")
        lines.append(f"Contract: {request.contract_name}")
        lines.append(f"Contract Address: {request.contract_address}")
        lines.append(f"Method: {request.method_name}")
        lines.append(f"Sender: {signer.address}")
        args_title = "Arguments:"

    lines.append(f"Balance: {_ether(balance_wei)}")
    lines.append("")
    lines.append(args_title)
    lines.append(format_args(request.args))
    lines.append("")

    lines.extend(_heading("GAS INFORMATION"))
    gas_units = estimate.gas_units if estimate.gas_units is not None else UNAVAILABLE
    lines.append(f"Estimated Gas: {gas_units}")
    lines.append(f"Gas Price: {_gwei(estimate.gas_price)}")
    lines.append(f"Base Fee Per Gas: {_gwei(estimate.base_fee_per_gas)}")
    lines.append(f"Max Fee Per Gas: {_gwei(estimate.max_fee_per_gas)}")
    lines.append(f"Max Priority Fee Per Gas: {_gwei(estimate.max_priority_fee_per_gas)}")
    lines.append(f"Estimated Cost: {_ether(estimate.estimated_total_cost)}")

    return "\n".join(lines)
