"""
Orchestration Models
Immutable request, estimate and result types passed between pipeline steps
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ActionKind(Enum):
    DEPLOY = "deploy"
    WRITE = "write"


class ArgKind(Enum):
    """Closed set of argument types accepted from the operator"""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class ArgValue:
    """
    Tagged positional argument

    Structured values (lists / objects) are held in their decoded form and
    rendered as canonical JSON.
    """

    kind: ArgKind
    value: Any

    @property
    def type_name(self) -> str:
        return self.kind.value

    def display(self) -> str:
        if self.kind == ArgKind.STRUCTURED:
            return json.dumps(self.value, sort_keys=True, separators=(",", ":"))
        if self.kind == ArgKind.BOOLEAN:
            return "true" if self.value else "false"
        return str(self.value)

    def to_native(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ActionRequest:
    """One operator invocation, created once and never mutated"""

    kind: ActionKind
    contract_name: str
    args: Tuple[ArgValue, ...] = ()
    signer_index: int = 0
    skip_confirmation: bool = False
    skip_verification: bool = False
    required_confirmations: int = 5
    method_name: Optional[str] = None
    contract_address: Optional[str] = None


@dataclass(frozen=True)
class Signer:
    """
    Signing identity

    `account` is an eth-account LocalAccount when the key is held locally;
    None means the node signs for `address`.
    """

    address: str
    account: Any = None

    @property
    def is_local(self) -> bool:
        return self.account is not None


@dataclass(frozen=True)
class CostEstimate:
    """Advisory gas and fee figures; every field may be missing"""

    gas_units: Optional[int] = None
    gas_price: Optional[int] = None
    base_fee_per_gas: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    warnings: Tuple[str, ...] = ()

    @property
    def fee_per_gas(self) -> Optional[int]:
        # Legacy chains have no base fee
        if self.base_fee_per_gas is not None:
            return self.base_fee_per_gas
        return self.gas_price

    @property
    def estimated_total_cost(self) -> Optional[int]:
        fee = self.fee_per_gas
        if self.gas_units is None or fee is None:
            return None
        return int(self.gas_units) * int(fee)


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    gas_used: int
    confirmed_block: int
    success: bool
    contract_address: Optional[str] = None


@dataclass
class PendingAction:
    """Submitted transaction handle; `receipt` is filled in after waiting"""

    tx_hash: str
    contract_address: Optional[str] = None
    receipt: Optional[Receipt] = None


class VerificationStatus(Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationOutcome:
    status: VerificationStatus
    reason: Optional[str] = None

    @classmethod
    def skipped(cls, reason: str) -> "VerificationOutcome":
        return cls(VerificationStatus.SKIPPED, reason)

    @classmethod
    def succeeded(cls) -> "VerificationOutcome":
        return cls(VerificationStatus.SUCCEEDED)

    @classmethod
    def failed(cls, reason: str) -> "VerificationOutcome":
        return cls(VerificationStatus.FAILED, reason)


@dataclass(frozen=True)
class KnownInterface:
    """Interface loaded from compiled artifacts"""

    name: str
    abi: Tuple[Dict[str, Any], ...]
    bytecode: Optional[str] = None
    source_name: Optional[str] = None

    def functions_named(self, method: str) -> List[Dict[str, Any]]:
        return [
            entry for entry in self.abi
            if entry.get("type") == "function" and entry.get("name") == method
        ]

    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return list(entry.get("inputs", []))
        return []


@dataclass(frozen=True)
class InferredSingleMethod:
    """Stand-in interface when no ABI is available for the target address"""

    method_name: str


ContractInterface = Union[KnownInterface, InferredSingleMethod]


class PipelineState(Enum):
    RESOLVING = "resolving"
    SIGNING_READY = "signing_ready"
    ESTIMATING = "estimating"
    PREVIEWED = "previewed"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CANCELLED = "cancelled"
    SUBMITTING = "submitting"
    AWAITING_RECEIPT = "awaiting_receipt"
    COMPLETED = "completed"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"


@dataclass
class OrchestrationResult:
    request: ActionRequest
    state: PipelineState
    history: List[PipelineState] = field(default_factory=list)
    pending: Optional[PendingAction] = None
    estimate: Optional[CostEstimate] = None
    verification: Optional[VerificationOutcome] = None

    @property
    def receipt(self) -> Optional[Receipt]:
        return self.pending.receipt if self.pending else None

    @property
    def contract_address(self) -> Optional[str]:
        if self.pending is None:
            return None
        return self.pending.contract_address

    @property
    def cancelled(self) -> bool:
        return self.state == PipelineState.CANCELLED
