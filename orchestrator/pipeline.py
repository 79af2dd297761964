"""
Transaction Orchestrator
Drives the deploy and write pipelines through their state machine
"""

import asyncio
from typing import Callable, Dict, FrozenSet, Optional

from loguru import logger

from .cost_estimator import CostEstimator
from .errors import ArtifactNotFound, OrchestrationError
from .models import (
    ActionKind,
    ActionRequest,
    ContractInterface,
    InferredSingleMethod,
    OrchestrationResult,
    PipelineState,
    VerificationStatus,
)
from .preview import render_preview
from .signer_selector import SignerSelector
from .submitter import Submitter
from .verifier import Verifier
from .waiter import ConfirmationWaiter

S = PipelineState

TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    S.RESOLVING: frozenset({S.SIGNING_READY}),
    S.SIGNING_READY: frozenset({S.ESTIMATING}),
    S.ESTIMATING: frozenset({S.PREVIEWED}),
    S.PREVIEWED: frozenset({S.AWAITING_CONFIRMATION}),
    S.AWAITING_CONFIRMATION: frozenset({S.CANCELLED, S.SUBMITTING}),
    S.SUBMITTING: frozenset({S.AWAITING_RECEIPT}),
    S.AWAITING_RECEIPT: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset({S.VERIFYING}),
    S.VERIFYING: frozenset({S.VERIFIED, S.VERIFICATION_FAILED}),
    S.CANCELLED: frozenset(),
    S.VERIFIED: frozenset(),
    S.VERIFICATION_FAILED: frozenset(),
}


class TransactionOrchestrator:
    """
    Runs one request through compile, signer, estimate, preview, confirm,
    submit, wait and (deploy only) verify
    """

    def __init__(
        self,
        provider,
        contracts,
        confirm: Callable[[str, bool], bool],
        verifier: Optional[Verifier] = None,
        compiler=None,
        report: Callable[[str], None] = print,
        poll_interval: float = 2.0,
        confirmation_timeout: Optional[float] = None,
        tx_overrides: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize Transaction Orchestrator

        Args:
            provider: Chain provider collaborator
            contracts: ContractManager resolving compiled interfaces
            confirm: Confirmation provider, `confirm(message, skip) -> bool`
            verifier: Verifier for the deploy path
            compiler: Optional compile step run before deployments
            report: Sink for the preview report
            poll_interval: Seconds between receipt / block polls
            confirmation_timeout: Optional limit on confirmation waits
            tx_overrides: Optional gas / fee fields for submitted transactions
        """
        self.provider = provider
        self.contracts = contracts
        self.confirm = confirm
        self.verifier = verifier or Verifier(None, provider.network_name)
        self.compiler = compiler
        self.report = report

        self.signer_selector = SignerSelector(provider)
        self.cost_estimator = CostEstimator(provider)
        self.submitter = Submitter(provider, tx_overrides)
        self.waiter = ConfirmationWaiter(provider, poll_interval, confirmation_timeout)

    @property
    def network(self) -> str:
        return self.provider.network_name

    def _transition(self, result: OrchestrationResult, state: PipelineState):
        if state not in TRANSITIONS[result.state]:
            raise RuntimeError(f"Illegal pipeline transition {result.state.value} -> {state.value}")
        result.state = state
        result.history.append(state)
        logger.debug(f"Pipeline state: {state.value}")

    def _resolve_interface(self, request: ActionRequest) -> ContractInterface:
        if request.kind == ActionKind.DEPLOY:
            return self.contracts.load_interface(request.contract_name)

        try:
            logger.info("Attempting to load contract from artifacts...")
            return self.contracts.load_interface(request.contract_name)
        except ArtifactNotFound as e:
            logger.info(f"{e}; using a minimal interface for '{request.method_name}'")
            return InferredSingleMethod(request.method_name)

    async def deploy(self, request: ActionRequest) -> OrchestrationResult:
        """
        Compile and deploy a contract

        Args:
            request: Deploy request

        Returns:
            OrchestrationResult (COMPLETED / VERIFIED / VERIFICATION_FAILED or CANCELLED)
        """
        if request.kind != ActionKind.DEPLOY:
            raise ValueError("deploy() requires a deploy request")

        try:
            return await self._run(request)
        except OrchestrationError as e:
            logger.error(f"Deployment of {request.contract_name} failed: {e}")
            raise

    async def write(self, request: ActionRequest) -> OrchestrationResult:
        """
        Call a state-changing method on a deployed contract

        Args:
            request: Write request

        Returns:
            OrchestrationResult (COMPLETED or CANCELLED)
        """
        if request.kind != ActionKind.WRITE:
            raise ValueError("write() requires a write request")

        try:
            return await self._run(request)
        except OrchestrationError as e:
            logger.error(
                f"Transaction {request.method_name} on {request.contract_address} failed: {e}"
            )
            raise

    async def _run(self, request: ActionRequest) -> OrchestrationResult:
        result = OrchestrationResult(request=request, state=S.RESOLVING, history=[S.RESOLVING])
        deploying = request.kind == ActionKind.DEPLOY

        if deploying and self.compiler is not None:
            logger.info("Compiling contracts...")
            self.compiler.compile()
            logger.info("Compilation completed successfully")

        interface = self._resolve_interface(request)
        prepared = self.submitter.prepare(request, interface)

        signer, balance = self.signer_selector.select(request.signer_index)
        self._transition(result, S.SIGNING_READY)

        self._transition(result, S.ESTIMATING)
        result.estimate = await self.cost_estimator.estimate(prepared, signer.address)

        self.report(render_preview(request, signer, balance, result.estimate, self.network))
        self._transition(result, S.PREVIEWED)

        self._transition(result, S.AWAITING_CONFIRMATION)
        action = "deployment" if deploying else "transaction"
        approved = await asyncio.to_thread(
            self.confirm, f"\nDo you want to proceed with the {action}?", request.skip_confirmation
        )
        if not approved:
            logger.info(f"{action.capitalize()} cancelled")
            self._transition(result, S.CANCELLED)
            return result

        self._transition(result, S.SUBMITTING)
        result.pending = await self.submitter.submit(prepared, signer)

        self._transition(result, S.AWAITING_RECEIPT)
        logger.info("Waiting for confirmation...")
        confirmations = request.required_confirmations
        if deploying and not self.verifier.should_run(request.skip_verification):
            # Block depth only matters before an explorer submission
            confirmations = 1
        receipt = await self.waiter.wait(result.pending, confirmations)
        self._transition(result, S.COMPLETED)

        if not deploying:
            logger.success("Transaction successful!")
            logger.info(f"Gas used: {receipt.gas_used}")
            return result

        logger.success("Deployment successful!")
        logger.success(f"Contract {request.contract_name} deployed to: {result.contract_address}")
        logger.info(f"Transaction hash: {result.pending.tx_hash}")

        if not self.verifier.should_run(request.skip_verification):
            # Skipped verification leaves the pipeline in COMPLETED
            result.verification = await self.verifier.verify(
                result.contract_address, request.contract_name, prepared.args,
                skip=request.skip_verification,
            )
            return result

        self._transition(result, S.VERIFYING)
        result.verification = await self.verifier.verify(
            result.contract_address, request.contract_name, prepared.args
        )
        if result.verification.status == VerificationStatus.FAILED:
            self._transition(result, S.VERIFICATION_FAILED)
        else:
            self._transition(result, S.VERIFIED)

        return result
