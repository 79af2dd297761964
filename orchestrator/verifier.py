"""
Verifier
Best-effort source verification of freshly deployed contracts
"""

from typing import Any, FrozenSet, Sequence

from loguru import logger

from .models import VerificationOutcome

LOCAL_NETWORKS: FrozenSet[str] = frozenset({"hardhat", "localhost"})


def is_local_network(network: str) -> bool:
    return network.lower() in LOCAL_NETWORKS


class Verifier:
    """
    Wraps the explorer verification client so it can never fail a deployment
    """

    def __init__(self, client, network: str):
        """
        Initialize Verifier

        Args:
            client: Source-verification collaborator with
                `async verify(address, contract_name, constructor_args) -> bool`
            network: Active network name
        """
        self.client = client
        self.network = network

    def should_run(self, skip: bool = False) -> bool:
        """True when a verification attempt will actually reach the explorer"""
        return not skip and not is_local_network(self.network) and self.client is not None

    async def verify(
        self,
        address: str,
        contract_name: str,
        constructor_args: Sequence[Any],
        skip: bool = False,
    ) -> VerificationOutcome:
        """
        Submit a deployed contract for verification

        Args:
            address: Deployed contract address
            contract_name: Contract name in the compiled artifacts
            constructor_args: Arguments the contract was deployed with
            skip: Operator opted out (--noverify)

        Returns:
            VerificationOutcome; never raises
        """
        if skip:
            return VerificationOutcome.skipped("verification disabled (--noverify)")

        if is_local_network(self.network):
            logger.info("Skipping contract verification for local network")
            return VerificationOutcome.skipped(f"local network '{self.network}'")

        if self.client is None:
            logger.warning("No verification client configured, skipping verification")
            return VerificationOutcome.skipped("no verification client configured")

        logger.info("Starting contract verification...")
        try:
            verified = await self.client.verify(address, contract_name, list(constructor_args))
        except Exception as e:
            logger.warning(f"Verification failed: {e}")
            return VerificationOutcome.failed(str(e))

        if not verified:
            logger.warning("Verification failed: explorer did not accept the source")
            return VerificationOutcome.failed("explorer did not accept the source")

        logger.success("Contract verified successfully")
        return VerificationOutcome.succeeded()
