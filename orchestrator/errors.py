"""
Orchestration Errors
Failure taxonomy shared by the deploy and write pipelines
"""


class OrchestrationError(Exception):
    """Base class for every pipeline failure"""


class InvalidParameter(OrchestrationError):
    """Operator input is structurally malformed"""


class SignerOutOfRange(OrchestrationError):
    """Requested signer index does not exist in the signer set"""

    def __init__(self, index: int, available: int):
        self.index = index
        self.available = available
        super().__init__(
            f"Account index {index} is out of range. Available accounts: {available}"
        )


class ChainQueryError(OrchestrationError):
    """A read-only chain query failed"""


class MethodNotFound(OrchestrationError):
    """Method is not part of the resolved contract interface"""

    def __init__(self, method: str, contract: str):
        self.method = method
        self.contract = contract
        super().__init__(f"Method '{method}' not found on contract {contract}")


class SubmissionError(OrchestrationError):
    """The state-changing transaction could not be sent"""


class TransactionReverted(OrchestrationError):
    """Transaction was mined but reverted on-chain"""

    def __init__(self, tx_hash: str, block: int = None):
        self.tx_hash = tx_hash
        self.block = block
        where = f" in block {block}" if block is not None else ""
        super().__init__(f"Transaction {tx_hash} reverted{where}")


class CompilationError(OrchestrationError):
    """Contract sources failed to compile"""


class ArtifactNotFound(OrchestrationError):
    """No compiled artifact exists for the requested contract"""


class AmbiguousArtifact(OrchestrationError):
    """Several compiled artifacts share the requested contract name"""


class VerificationFailed(OrchestrationError):
    """Explorer rejected or could not process a source verification"""
