"""
Shared fixtures for the dyeing planning tests.

Plans are built as plain DyeingPlan snapshots; the Beanie documents are
never instantiated here (that needs an initialised database).
"""

from datetime import datetime

import pytest

from dyeplan.core.catalog import PlanningCatalog
from dyeplan.core.models.production.dyeing_plan import ChemicalRequirement, DyeingPlan, LiquorDosing, ShadeDosing
from dyeplan.core.models.production.machine_schedule import MachineSchedule, ScheduledSlot
from dyeplan.modules.machine_schedule.occupancy_resolver import MachineOccupancyResolver
from dyeplan.shared.timezone import PLANT_TZ


@pytest.fixture
def catalog():
    return PlanningCatalog()


@pytest.fixture
def resolver(catalog):
    return MachineOccupancyResolver(catalog)


@pytest.fixture
def plant_now():
    return datetime(2026, 1, 20, 9, 30, tzinfo=PLANT_TZ)


@pytest.fixture
def plan(plant_now):
    """500 kg lot at 1:8, so 4000 L of liquor, starting 08:00."""
    return DyeingPlan(
        plan_id="DP260120TEST",
        plan_name="Navy Jersey Lot 14",
        plan_date="2026-01-20",
        customer_name="Acme Knits",
        order_number="PO-7781",
        color="Navy",
        machine_no="JET-01",
        fabric_weight=500,
        liquor_ratio=8,
        total_water=4000,
        scheduled_start_time="08:00",
        scheduled_end_time="16:00",
        estimated_duration=8,
        created_at=plant_now,
        updated_at=plant_now,
    )


@pytest.fixture
def dosed_item():
    """2 g/l salt against 4000 L: 8 kg required, 3 kg in stock."""
    return ChemicalRequirement(
        item_id="salt",
        chemical_name="Glauber Salt",
        basis=LiquorDosing(value=2),
        required_quantity=8,
        available_stock=3,
        unit_price=120,
    )


@pytest.fixture
def shaded_item():
    """2 % dye on 500 kg: 10 kg required."""
    return ChemicalRequirement(
        item_id="dye",
        chemical_name="Reactive Navy",
        basis=ShadeDosing(value=2),
        required_quantity=10,
        available_stock=10,
        unit_price=900,
    )


@pytest.fixture
def day_shift_slot():
    return ScheduledSlot(
        plan_id="DP260120TEST",
        plan_name="Navy Jersey Lot 14",
        start_time="08:00",
        end_time="16:00",
        priority="high",
    )


@pytest.fixture
def machine(day_shift_slot):
    return MachineSchedule(
        machine_no="JET-01",
        machine_type="Jet Dyeing Machine",
        capacity=500,
        status="occupied",
        scheduled_plans=[day_shift_slot],
    )
