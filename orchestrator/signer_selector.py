"""
Signer Selector
Picks the signing identity for a request and reads its balance
"""

from typing import Tuple

from loguru import logger

from .errors import ChainQueryError, OrchestrationError, SignerOutOfRange
from .models import Signer


class SignerSelector:
    """
    Resolves a signer index against the provider's signer set
    """

    def __init__(self, provider):
        """
        Initialize Signer Selector

        Args:
            provider: Chain provider exposing get_signers() and get_balance()
        """
        self.provider = provider

    def select(self, index: int) -> Tuple[Signer, int]:
        """
        Select signer by index

        Args:
            index: Position in the signer set

        Returns:
            (signer, balance in wei)
        """
        try:
            signers = list(self.provider.get_signers())
        except OrchestrationError:
            raise
        except Exception as e:
            raise ChainQueryError(f"Failed to enumerate signers: {e}") from e

        if index < 0 or index >= len(signers):
            raise SignerOutOfRange(index, len(signers))

        signer = signers[index]

        try:
            balance = int(self.provider.get_balance(signer.address))
        except OrchestrationError:
            raise
        except Exception as e:
            raise ChainQueryError(f"Failed to read balance of {signer.address}: {e}") from e

        logger.debug(f"Selected signer #{index}: {signer.address}")
        return signer, balance
