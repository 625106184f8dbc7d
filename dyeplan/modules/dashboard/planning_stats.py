from datetime import date as date_type, timedelta
from typing import List, Optional, Sequence
import math

from dyeplan.core.catalog import PlanningCatalog
from dyeplan.core.models.production.dyeing_plan import DyeingPlan
from dyeplan.core.schemas.production.dyeing_plan import DailyOutlook, PlanningSummary

OUTLOOK_DAYS = 7
SEARCH_FIELDS = ("plan_name", "customer_name", "order_number", "color", "machine_no")


class PlanningStats:
    """Dashboard figures and list filtering over a set of plans."""

    @staticmethod
    def filter_plans(
        plans: Sequence[DyeingPlan],
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[DyeingPlan]:
        """
        Case-insensitive search over name, customer, order number, color and
        machine, combined with exact status / priority filters.
        "all" (or None) disables a filter.
        """
        term = (search or "").strip().lower()

        def matches(plan: DyeingPlan) -> bool:
            if term and not any(term in (getattr(plan, f) or "").lower() for f in SEARCH_FIELDS):
                return False
            if status and status != "all" and plan.status != status:
                return False
            if priority and priority != "all" and plan.priority != priority:
                return False
            return True

        return [plan for plan in plans if matches(plan)]

    @staticmethod
    def summarize(
        plans: Sequence[DyeingPlan],
        catalog: PlanningCatalog,
        today: date_type,
    ) -> PlanningSummary:
        """Headline counts, cost/duration aggregates and a 7-day outlook starting today."""
        total = len(plans)

        status_breakdown = {
            option.value: sum(1 for p in plans if p.status == option.value)
            for option in catalog.plan_statuses
        }
        priority_breakdown = {
            option.value: sum(1 for p in plans if p.priority == option.value)
            for option in catalog.priority_levels
        }

        weekly = []
        for offset in range(OUTLOOK_DAYS):
            day = today + timedelta(days=offset)
            day_str = day.strftime("%Y-%m-%d")
            on_day = [p for p in plans if p.plan_date == day_str]
            weekly.append(DailyOutlook(
                day=day.strftime("%a"),
                date=day_str,
                plans=len(on_day),
                completed=sum(1 for p in on_day if p.status == "completed"),
            ))

        return PlanningSummary(
            total_plans=total,
            active_plans=status_breakdown.get("in-progress", 0),
            completed_plans=status_breakdown.get("completed", 0),
            urgent_plans=priority_breakdown.get("urgent", 0),
            total_estimated_cost=round(math.fsum(p.estimated_cost for p in plans), 2),
            avg_duration=(
                round(math.fsum(p.estimated_duration for p in plans) / total, 2) if total else 0.0
            ),
            status_breakdown=status_breakdown,
            priority_breakdown=priority_breakdown,
            weekly_outlook=weekly,
        )
