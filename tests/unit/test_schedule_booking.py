"""
Unit tests for the booking and edit checks in the services.

Only the synchronous helpers are exercised; nothing here touches MongoDB.
"""

import pytest
from fastapi import HTTPException

from dyeplan.core.models.production.dyeing_plan import DyeingPlan
from dyeplan.core.models.production.machine_schedule import ScheduledSlot
from dyeplan.modules.dyeing_plan.dyeing_plan_service import DyeingPlanService
from dyeplan.modules.machine_schedule.machine_schedule_service import MachineScheduleService


def slot(plan_id, start, end):
    return ScheduledSlot(plan_id=plan_id, start_time=start, end_time=end)


class TestCheckSlot:

    def test_free_machine_accepts(self):
        MachineScheduleService._check_slot([], slot("X", "08:00", "16:00"))

    @pytest.mark.parametrize("start, end", [("15:00", "18:00"), ("06:00", "09:00"), ("10:00", "11:00"), ("07:00", "17:00")])
    def test_overlap_rejected(self, day_shift_slot, start, end):
        with pytest.raises(HTTPException) as exc:
            MachineScheduleService._check_slot([day_shift_slot], slot("X", start, end))

        assert exc.value.status_code == 400
        assert "Time conflict" in exc.value.detail
        assert day_shift_slot.plan_id in exc.value.detail

    @pytest.mark.parametrize("start, end", [("10:00", "09:00"), ("10:00", "10:00"), ("22:00", "02:00")])
    def test_end_not_after_start_rejected(self, start, end):
        with pytest.raises(HTTPException) as exc:
            MachineScheduleService._check_slot([], slot("X", start, end))

        assert exc.value.status_code == 400
        assert "must be after" in exc.value.detail

    @pytest.mark.parametrize("start, end", [("16:00", "20:00"), ("04:00", "08:00")])
    def test_touching_slots_accepted(self, day_shift_slot, start, end):
        MachineScheduleService._check_slot([day_shift_slot], slot("X", start, end))


class TestApplyField:

    def test_text_value_stored_as_text(self, plan):
        updated = DyeingPlanService._apply_field(plan, "plan_name", 123)

        assert updated.plan_name == "123"
        assert DyeingPlan.model_validate(updated.model_dump()) == updated

    @pytest.mark.parametrize("field, value", [("status", "bogus"), ("priority", "critical"), ("total_water", 1)])
    def test_unstorable_value_is_422(self, plan, field, value):
        with pytest.raises(HTTPException) as exc:
            DyeingPlanService._apply_field(plan, field, value)

        assert exc.value.status_code == 422
