"""
Edit events on a dyeing plan snapshot.

Each operation takes the current plan and returns its replacement with
total_water, scheduled_end_time, line-item quantities and estimated_cost
consistent. Nothing here touches the database.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional
from zoneinfo import ZoneInfo
import logging

from dyeplan.core.models.production.dyeing_plan import (
    ChemicalRequirement,
    DyeingPlan,
    PlanStatus,
)
from dyeplan.modules.dyeing_plan.cost_aggregation import CostAggregation
from dyeplan.modules.dyeing_plan.plan_time_derivation import PlanTimeDerivation
from dyeplan.modules.dyeing_plan.quantity_derivation import QuantityDerivation
from dyeplan.shared.plan_id import generate_plan_id
from dyeplan.shared.timezone import PLANT_TZ, get_plant_now

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


class DyeingPlanEditor:
    """Snapshot-in / snapshot-out edits for a dyeing plan."""

    # -------------------------
    # Helpers
    # -------------------------

    @staticmethod
    def _with_requirements(
        plan: DyeingPlan,
        requirements: List[ChemicalRequirement],
    ) -> DyeingPlan:
        """Replace the line-item list and recompute the plan's estimated cost."""
        estimated_cost = CostAggregation.aggregate_cost(requirements)
        logger.debug(
            f"Plan {plan.plan_id}: {len(requirements)} chemicals, "
            f"estimated cost {estimated_cost:.2f}"
        )
        return plan.model_copy(update={
            "chemical_requirements": requirements,
            "estimated_cost": estimated_cost,
        })

    @staticmethod
    def _find_index(plan: DyeingPlan, item_id: str) -> Optional[int]:
        return next(
            (i for i, req in enumerate(plan.chemical_requirements) if req.item_id == item_id),
            None
        )

    # -------------------------
    # Plan Lifecycle
    # -------------------------

    @staticmethod
    def new_plan(
        created_by: str = "",
        user_id: str = "",
        now: Optional[datetime] = None,
    ) -> DyeingPlan:
        """Blank plan with default recipe values and a generated plan_id."""
        now = now or get_plant_now()
        return DyeingPlan(
            plan_id=generate_plan_id(now),
            plan_date=now.strftime("%Y-%m-%d"),
            created_by=created_by or "Unknown User",
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def update_field(
        plan: DyeingPlan,
        field: str,
        value: Any,
        tz: ZoneInfo = PLANT_TZ,
    ) -> DyeingPlan:
        """Single plan field edit (water / end-time derivation included)."""
        return PlanTimeDerivation.derive_water_and_schedule(plan, field, value, tz)

    @staticmethod
    def change_status(
        plan: DyeingPlan,
        new_status: PlanStatus,
        now: Optional[datetime] = None,
    ) -> DyeingPlan:
        """
        Move a plan to a new status, stamping actual times.

        - in-progress: actual_start_time = now
        - completed: actual_end_time = now, actual_duration in whole hours
          when an actual start exists
        """
        now = now or get_plant_now()
        updates = {"status": new_status, "updated_at": now}

        if new_status == "in-progress":
            updates["actual_start_time"] = now
        elif new_status == "completed":
            updates["actual_end_time"] = now
            if plan.actual_start_time is not None:
                started = plan.actual_start_time
                if started.tzinfo is None:
                    # Naive timestamps read back from MongoDB are UTC
                    started = started.replace(tzinfo=timezone.utc)
                elapsed = (now - started).total_seconds()
                updates["actual_duration"] = round(elapsed / SECONDS_PER_HOUR)

        return plan.revise(**updates)

    # -------------------------
    # Chemical Requirements
    # -------------------------

    @staticmethod
    def add_requirement(plan: DyeingPlan, **fields: Any) -> DyeingPlan:
        """Append a new (empty unless fields are given) line-item."""
        requirement = QuantityDerivation.refresh_totals(ChemicalRequirement(**fields))
        return DyeingPlanEditor._with_requirements(
            plan, [*plan.chemical_requirements, requirement]
        )

    @staticmethod
    def update_requirement(
        plan: DyeingPlan,
        item_id: str,
        field: str,
        value: Any,
    ) -> DyeingPlan:
        """
        Edit one field of one line-item.

        Raises:
            KeyError: If no line-item has item_id
            ValueError: If field is not editable
        """
        index = DyeingPlanEditor._find_index(plan, item_id)
        if index is None:
            raise KeyError(item_id)

        requirements = list(plan.chemical_requirements)
        requirements[index] = QuantityDerivation.apply_edit(
            requirements[index],
            field,
            value,
            fabric_weight=plan.fabric_weight,
            total_water=plan.total_water,
        )
        return DyeingPlanEditor._with_requirements(plan, requirements)

    @staticmethod
    def remove_requirement(plan: DyeingPlan, item_id: str) -> DyeingPlan:
        """Drop a line-item; unknown ids leave the list unchanged."""
        requirements = [
            req for req in plan.chemical_requirements if req.item_id != item_id
        ]
        return DyeingPlanEditor._with_requirements(plan, requirements)

    @staticmethod
    def reorder_requirements(
        plan: DyeingPlan,
        source_index: int,
        destination_index: Optional[int],
    ) -> DyeingPlan:
        """
        Move one line-item to a new position.

        No destination, an unchanged position or an out-of-range index
        returns the plan as-is.
        """
        if destination_index is None or source_index == destination_index:
            return plan

        count = len(plan.chemical_requirements)
        if not (0 <= source_index < count and 0 <= destination_index < count):
            logger.warning(
                f"Ignoring reorder on plan {plan.plan_id}: "
                f"{source_index} -> {destination_index} with {count} chemicals"
            )
            return plan

        requirements = list(plan.chemical_requirements)
        moved = requirements.pop(source_index)
        requirements.insert(destination_index, moved)
        return DyeingPlanEditor._with_requirements(plan, requirements)

    @staticmethod
    def recalculate_requirements(plan: DyeingPlan) -> DyeingPlan:
        """Re-derive every line-item against the plan's current fabric and liquor."""
        requirements = [
            QuantityDerivation.derive_quantity(req, plan.fabric_weight, plan.total_water)
            for req in plan.chemical_requirements
        ]
        return DyeingPlanEditor._with_requirements(plan, requirements)
