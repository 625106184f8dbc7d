from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo
import logging

from dyeplan.core.models.production.dyeing_plan import DyeingPlan
from dyeplan.shared.numeric import parse_number
from dyeplan.shared.timezone import PLANT_TZ

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

WATER_FIELDS = ("fabric_weight", "liquor_ratio")
SCHEDULE_FIELDS = ("scheduled_start_time", "estimated_duration")

# Plan fields that take a number (bad input -> 0)
NUMERIC_PLAN_FIELDS = frozenset({
    "fabric_weight",
    "liquor_ratio",
    "machine_capacity",
    "estimated_duration",
})

# Plan fields settable through a single field edit
EDITABLE_PLAN_FIELDS = NUMERIC_PLAN_FIELDS | {
    "plan_name",
    "plan_date",
    "status",
    "priority",
    "customer_name",
    "order_number",
    "delivery_date",
    "fabric_type",
    "fabric_width",
    "gsm",
    "color",
    "color_code",
    "dyeing_method",
    "dyeing_type",
    "machine_no",
    "assigned_to",
    "scheduled_start_time",
    "lab_dip_no",
    "special_instructions",
    "notes",
}


class PlanTimeDerivation:
    """
    Plan-level derived fields.

    - Total liquor: total_water = fabric_weight x liquor_ratio
    - Scheduled end: plan_date + scheduled_start_time + estimated_duration,
      stored as time-of-day only (HH:MM)
    """

    @staticmethod
    def calculate_total_water(fabric_weight: float, liquor_ratio: float) -> float:
        """
        Examples:
            >>> PlanTimeDerivation.calculate_total_water(100, 8)
            800.0
        """
        return float(fabric_weight * liquor_ratio)

    @staticmethod
    def calculate_end_time(
        plan_date: str,
        start_time: str,
        duration_hours: float,
        tz: ZoneInfo = PLANT_TZ,
    ) -> Optional[str]:
        """
        Calculate the scheduled end time-of-day.

        Args:
            plan_date: Plan date (YYYY-MM-DD)
            start_time: Start time (HH:MM)
            duration_hours: Estimated duration, fractional hours allowed
            tz: Plant timezone the date and start time are read in

        Returns:
            str: End time as HH:MM, or None when start/duration is missing
            or the inputs cannot be parsed

        Examples:
            >>> PlanTimeDerivation.calculate_end_time("2026-01-20", "08:00", 8)
            '16:00'
            >>> PlanTimeDerivation.calculate_end_time("2026-01-20", "20:00", 8)
            '04:00'
        """
        if not start_time or not duration_hours or duration_hours <= 0:
            return None

        try:
            prod_date = datetime.strptime(plan_date.strip(), DATE_FORMAT).date()
            start = datetime.strptime(start_time.strip(), TIME_FORMAT).time()
        except (ValueError, AttributeError) as e:
            logger.warning(
                f"Cannot derive end time: plan_date='{plan_date}', start='{start_time}'. "
                f"Error: {e}. Keeping previous value."
            )
            return None

        start_dt = datetime.combine(prod_date, start).replace(tzinfo=tz)

        # Add elapsed time on the UTC timeline, then read the local wall clock
        end_utc = start_dt.astimezone(timezone.utc) + timedelta(hours=duration_hours)
        end_dt = end_utc.astimezone(tz)

        return end_dt.strftime(TIME_FORMAT)

    @staticmethod
    def derive_water_and_schedule(
        plan: DyeingPlan,
        changed_field: str,
        new_value: Any,
        tz: ZoneInfo = PLANT_TZ,
    ) -> DyeingPlan:
        """
        Apply one plan field edit and recompute total_water / scheduled_end_time.

        The edited field uses its new value, the other input its pre-edit
        value. Water and schedule derivations never touch each other's fields.

        Raises:
            ValueError: If changed_field is not an editable plan field, or the
                value does not fit it (e.g. an unknown status)
        """
        if changed_field not in EDITABLE_PLAN_FIELDS:
            raise ValueError(f"Field '{changed_field}' cannot be edited directly")

        if changed_field in NUMERIC_PLAN_FIELDS:
            value = parse_number(new_value)
        else:
            value = "" if new_value is None else str(new_value)

        updates = {changed_field: value}

        if changed_field in WATER_FIELDS:
            fabric_weight = value if changed_field == "fabric_weight" else plan.fabric_weight
            liquor_ratio = value if changed_field == "liquor_ratio" else plan.liquor_ratio
            updates["total_water"] = PlanTimeDerivation.calculate_total_water(
                fabric_weight, liquor_ratio
            )

        if changed_field in SCHEDULE_FIELDS:
            start_time = value if changed_field == "scheduled_start_time" else plan.scheduled_start_time
            duration = value if changed_field == "estimated_duration" else plan.estimated_duration
            end_time = PlanTimeDerivation.calculate_end_time(
                plan.plan_date, start_time, duration, tz
            )
            if end_time is not None:
                updates["scheduled_end_time"] = end_time

        return plan.revise(**updates)
