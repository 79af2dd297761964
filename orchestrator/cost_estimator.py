"""
Cost Estimator
Best-effort gas and fee estimation for the prepared transaction
"""

from typing import Dict, List, Optional

from loguru import logger

from .models import ActionKind, CostEstimate


class CostEstimator:
    """
    Queries gas units and current fee data

    Both queries are advisory: a failure becomes a warning on the estimate and
    never stops the pipeline.
    """

    def __init__(self, provider):
        """
        Initialize Cost Estimator

        Args:
            provider: Chain provider collaborator
        """
        self.provider = provider

    async def estimate(self, prepared, sender: str) -> CostEstimate:
        """
        Estimate the cost of a prepared deploy or write call

        Args:
            prepared: PreparedCall from the Submitter
            sender: Address the transaction will be sent from

        Returns:
            CostEstimate (fields are None where a query failed)
        """
        warnings: List[str] = []

        gas_units = self._estimate_gas(prepared, sender, warnings)
        fee_data = self._get_fee_data(warnings)

        estimate = CostEstimate(
            gas_units=gas_units,
            gas_price=fee_data.get('gas_price'),
            base_fee_per_gas=fee_data.get('base_fee_per_gas'),
            max_fee_per_gas=fee_data.get('max_fee_per_gas'),
            max_priority_fee_per_gas=fee_data.get('max_priority_fee_per_gas'),
            warnings=tuple(warnings),
        )

        if estimate.estimated_total_cost is not None:
            logger.debug(f"Estimated cost: {estimate.estimated_total_cost} wei")

        return estimate

    def _estimate_gas(self, prepared, sender: str, warnings: List[str]) -> Optional[int]:
        try:
            if prepared.kind == ActionKind.DEPLOY:
                gas = self.provider.estimate_deploy_gas(
                    prepared.abi, prepared.bytecode, prepared.args, sender
                )
            else:
                gas = self.provider.estimate_call_gas(
                    prepared.address, prepared.abi, prepared.method, prepared.args, sender
                )
            return int(gas)

        except Exception as e:
            message = f"Failed to estimate gas. The transaction might fail. ({e})"
            logger.warning(message)
            warnings.append(message)
            return None

    def _get_fee_data(self, warnings: List[str]) -> Dict[str, Optional[int]]:
        try:
            fee_data = self.provider.get_fee_data() or {}
            return {
                key: (int(value) if value is not None else None)
                for key, value in fee_data.items()
            }

        except Exception as e:
            message = f"Failed to fetch fee data ({e})"
            logger.warning(message)
            warnings.append(message)
            return {}
