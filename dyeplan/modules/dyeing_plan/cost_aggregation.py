import math
from typing import Iterable

from dyeplan.core.models.production.dyeing_plan import ChemicalRequirement


class CostAggregation:
    """
    Line-item and plan-level chemical cost.

    - Line cost = need_to_purchase x unit_price
    - Plan estimated cost = sum of line costs
    """

    @staticmethod
    def line_total(need_to_purchase: float, unit_price: float) -> float:
        """
        Examples:
            >>> CostAggregation.line_total(5, 120)
            600.0
        """
        return float(need_to_purchase * unit_price)

    @staticmethod
    def aggregate_cost(items: Iterable[ChemicalRequirement]) -> float:
        """
        Sum of total_cost across line-items.

        math.fsum is exactly rounded, so the result does not depend on the
        order the items are listed in.
        """
        return math.fsum(item.total_cost for item in items)
