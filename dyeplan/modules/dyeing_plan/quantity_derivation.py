import logging
from typing import Any, Optional

from dyeplan.core.models.production.dyeing_plan import (
    ChemicalRequirement,
    LiquorDosing,
    ShadeDosing,
)
from dyeplan.modules.dyeing_plan.cost_aggregation import CostAggregation
from dyeplan.shared.numeric import parse_number, parse_optional_number

logger = logging.getLogger(__name__)

GRAMS_PER_KILOGRAM = 1000.0

# Fields that accept a number and fall back to 0 on bad input
NUMERIC_FIELDS = frozenset({"required_quantity", "available_stock", "unit_price"})

# Free-text fields stored as given
TEXT_FIELDS = frozenset({"chemical_name", "supplier", "notes"})

EDITABLE_FIELDS = NUMERIC_FIELDS | TEXT_FIELDS | {"dosing", "shade"}


class QuantityDerivation:
    """
    Derivation rules for a chemical line-item.

    Handles:
    - Required quantity from dosing (g/l against total liquor)
    - Required quantity from shade (% of fabric weight)
    - Purchase gap (required vs. available stock)

    Every method returns a new item; the input is never mutated.
    """

    @staticmethod
    def required_from_dosing(dosing: Optional[float], total_water: float) -> Optional[float]:
        """
        Required kg for a dosing in g/l, or None when either input is zero/unset.

        Examples:
            >>> QuantityDerivation.required_from_dosing(2, 4000)
            8.0
            >>> QuantityDerivation.required_from_dosing(0, 4000)
        """
        if not dosing or not total_water:
            return None
        return dosing * total_water / GRAMS_PER_KILOGRAM

    @staticmethod
    def required_from_shade(shade: Optional[float], fabric_weight: float) -> Optional[float]:
        """
        Required kg for a shade %, or None when either input is zero/unset.

        Examples:
            >>> QuantityDerivation.required_from_shade(2, 500)
            10.0
        """
        if not shade or not fabric_weight:
            return None
        return (shade / 100) * fabric_weight

    @staticmethod
    def calculate_need_to_purchase(required_quantity: float, available_stock: float) -> float:
        """
        Shortfall floored at zero.

        Examples:
            >>> QuantityDerivation.calculate_need_to_purchase(8, 3)
            5.0
            >>> QuantityDerivation.calculate_need_to_purchase(3, 8)
            0.0
        """
        return float(max(0.0, required_quantity - available_stock))

    @staticmethod
    def refresh_totals(item: ChemicalRequirement) -> ChemicalRequirement:
        """Recompute need_to_purchase and total_cost from the item's own fields."""
        need = QuantityDerivation.calculate_need_to_purchase(
            item.required_quantity, item.available_stock
        )
        return item.model_copy(update={
            "need_to_purchase": need,
            "total_cost": CostAggregation.line_total(need, item.unit_price),
        })

    @staticmethod
    def apply_edit(
        item: ChemicalRequirement,
        field: str,
        value: Any,
        fabric_weight: float,
        total_water: float,
    ) -> ChemicalRequirement:
        """
        Apply one field edit to a line-item and re-derive its dependents.

        - dosing / shade: empty or invalid input means "unset"; setting one
          always clears the other. A zero or unset value, or a zero
          prerequisite (total_water / fabric_weight), keeps the current
          required_quantity.
        - required_quantity / available_stock / unit_price: invalid input is 0,
          stored verbatim (manual override, no re-derivation).
        - chemical_name / supplier / notes: stored as given.

        Raises:
            ValueError: If field is not an editable line-item field
        """
        updates = {}

        if field == "dosing":
            dosing = parse_optional_number(value)
            updates["basis"] = LiquorDosing(value=dosing) if dosing is not None else None
            required = QuantityDerivation.required_from_dosing(dosing, total_water)
            if required is not None:
                updates["required_quantity"] = required

        elif field == "shade":
            shade = parse_optional_number(value)
            updates["basis"] = ShadeDosing(value=shade) if shade is not None else None
            required = QuantityDerivation.required_from_shade(shade, fabric_weight)
            if required is not None:
                updates["required_quantity"] = required

        elif field in NUMERIC_FIELDS:
            updates[field] = parse_number(value)

        elif field in TEXT_FIELDS:
            updates[field] = "" if value is None else str(value)

        else:
            raise ValueError(f"Unknown chemical requirement field: '{field}'")

        return QuantityDerivation.refresh_totals(item.model_copy(update=updates))

    @staticmethod
    def derive_quantity(
        item: ChemicalRequirement,
        fabric_weight: float,
        total_water: float,
    ) -> ChemicalRequirement:
        """
        Re-derive a line-item from its current dosing basis.

        Used when the plan's fabric weight or liquor changed after the recipe
        was entered. Items without a usable basis keep their quantity.
        """
        required = None
        if item.dosing is not None:
            required = QuantityDerivation.required_from_dosing(item.dosing, total_water)
        elif item.shade is not None:
            required = QuantityDerivation.required_from_shade(item.shade, fabric_weight)

        if required is not None:
            item = item.model_copy(update={"required_quantity": required})
        else:
            logger.debug(
                f"Keeping required quantity for '{item.chemical_name}' "
                f"(basis={item.basis}, fabric={fabric_weight}, water={total_water})"
            )

        return QuantityDerivation.refresh_totals(item)
