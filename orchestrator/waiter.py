"""
Confirmation Waiter
Blocks until a submitted transaction is buried under enough blocks
"""

import asyncio
import time
from typing import Optional

from loguru import logger

from .errors import ChainQueryError, TransactionReverted
from .models import PendingAction, Receipt


class ConfirmationWaiter:
    """
    Polls the chain for a receipt and then for block depth

    No timeout unless one is configured; the operator ends the process to
    abort a wait.
    """

    def __init__(self, provider, poll_interval: float = 2.0, timeout: Optional[float] = None):
        """
        Initialize Confirmation Waiter

        Args:
            provider: Chain provider collaborator
            poll_interval: Seconds between polls
            timeout: Optional overall limit in seconds
        """
        self.provider = provider
        self.poll_interval = poll_interval
        self.timeout = timeout

    def _query(self, fn, *args):
        try:
            return fn(*args)
        except Exception as e:
            raise ChainQueryError(f"Chain query failed while waiting: {e}") from e

    def _check_deadline(self, started: float, tx_hash: str):
        if self.timeout is not None and time.monotonic() - started > self.timeout:
            raise ChainQueryError(
                f"Timed out after {self.timeout}s waiting for transaction {tx_hash}"
            )

    async def wait(self, pending: PendingAction, confirmations: int = 1) -> Receipt:
        """
        Wait for the receipt and the requested number of confirmations

        The inclusion block counts as the first confirmation.

        Args:
            pending: Submitted transaction
            confirmations: Blocks required, at least 1

        Returns:
            Receipt (also stored on `pending`)
        """
        confirmations = max(1, int(confirmations))
        started = time.monotonic()

        receipt = None
        while receipt is None:
            receipt = self._query(self.provider.get_receipt, pending.tx_hash)
            if receipt is None:
                self._check_deadline(started, pending.tx_hash)
                await asyncio.sleep(self.poll_interval)

        if not receipt.success:
            raise TransactionReverted(pending.tx_hash, receipt.confirmed_block)

        if confirmations > 1:
            logger.info(f"Waiting for {confirmations} block confirmations...")
            target = receipt.confirmed_block + confirmations - 1
            while True:
                current = self._query(self.provider.block_number)
                if current >= target:
                    break
                logger.debug(f"Block {current}/{target}")
                self._check_deadline(started, pending.tx_hash)
                await asyncio.sleep(self.poll_interval)

        pending.receipt = receipt
        if receipt.contract_address and not pending.contract_address:
            pending.contract_address = receipt.contract_address

        return receipt
