"""
Transaction Orchestration Package
Deploy and write pipelines: resolve, sign, estimate, preview, confirm, submit, wait, verify
"""

from .confirmation import ConfirmationGate, PromptSession, confirm
from .cost_estimator import CostEstimator
from .params import resolve_deploy_request, resolve_write_request
from .pipeline import TransactionOrchestrator
from .preview import render_preview
from .signer_selector import SignerSelector
from .submitter import Submitter
from .verifier import Verifier
from .waiter import ConfirmationWaiter

__all__ = [
    'ConfirmationGate',
    'ConfirmationWaiter',
    'CostEstimator',
    'PromptSession',
    'SignerSelector',
    'Submitter',
    'TransactionOrchestrator',
    'Verifier',
    'confirm',
    'render_preview',
    'resolve_deploy_request',
    'resolve_write_request',
]
