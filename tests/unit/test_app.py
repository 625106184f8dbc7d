"""
HTTP-level tests for the FastAPI app.

The client is created without entering the lifespan, so no MongoDB
connection is made; service calls are patched out.
"""

from unittest.mock import AsyncMock, patch

import pytest

pytest.importorskip("httpx")

from fastapi import HTTPException
from fastapi.testclient import TestClient

from dyeplan.core.models.production.machine_schedule import MachineSchedule
from dyeplan.core.schemas.production.dyeing_plan import PlanningSummary
from dyeplan.core.schemas.production.machine_schedule import OccupancyResponse
from main import app

PLANS = "/api/v1/production/dyeing-plans"
MACHINES = "/api/v1/production/machines"
PLAN_SERVICE = "dyeplan.api.routes.production.dyeing_plan.DyeingPlanService"
MACHINE_SERVICE = "dyeplan.api.routes.production.machine_schedule.MachineScheduleService"


@pytest.fixture
def client():
    return TestClient(app)


class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/health"

    def test_metrics(self, client):
        client.get("/health")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text

    def test_catalog(self, client):
        response = client.get("/api/v1/production/catalog")

        assert response.status_code == 200
        body = response.json()
        assert "Reactive Exhaust" in body["dyeing_methods"]
        assert body["machine_status_tones"]["breakdown"] == "critical"


class TestDyeingPlanRoutes:

    def test_get_plan(self, client, plan):
        with patch(f"{PLAN_SERVICE}.get_plan", new=AsyncMock(return_value=plan)) as get_plan:
            response = client.get(f"{PLANS}/{plan.plan_id}")

        assert response.status_code == 200
        assert response.json()["total_water"] == 4000
        get_plan.assert_awaited_once_with(plan.plan_id)

    def test_missing_plan(self, client):
        missing = AsyncMock(side_effect=HTTPException(404, detail="Dyeing plan 'X' not found"))
        with patch(f"{PLAN_SERVICE}.get_plan", new=missing):
            response = client.get(f"{PLANS}/X")

        assert response.status_code == 404

    def test_summary_route_not_shadowed(self, client):
        summary = PlanningSummary(total_plans=2)
        with patch(f"{PLAN_SERVICE}.get_summary", new=AsyncMock(return_value=summary)):
            response = client.get(f"{PLANS}/stats/summary")

        assert response.status_code == 200
        assert response.json()["total_plans"] == 2

    def test_list_filters(self, client, plan):
        with patch(f"{PLAN_SERVICE}.list_plans", new=AsyncMock(return_value=[plan])) as list_plans:
            response = client.get(PLANS, params={"search": "navy", "status": "draft"})

        assert response.status_code == 200
        assert len(response.json()) == 1
        list_plans.assert_awaited_once_with("navy", "draft", None)

    def test_field_edit(self, client, plan):
        with patch(f"{PLAN_SERVICE}.update_field", new=AsyncMock(return_value=plan)) as update:
            response = client.patch(f"{PLANS}/{plan.plan_id}/fields", json={"field": "fabric_weight", "value": "500"})

        assert response.status_code == 200
        update.assert_awaited_once_with(plan.plan_id, "fabric_weight", "500")

    @pytest.mark.parametrize("payload", [
        {"field": "total_water", "value": 10},
        {"field": "status", "value": "paused"},
        {"field": "priority", "value": "critical"},
    ])
    def test_field_edit_rejected(self, client, payload):
        response = client.patch(f"{PLANS}/DP1/fields", json=payload)
        assert response.status_code == 422

    def test_chemical_edit_rejects_derived_field(self, client):
        response = client.patch(f"{PLANS}/DP1/chemicals/abc", json={"field": "total_cost", "value": 1})
        assert response.status_code == 422

    def test_create_rejects_derived_fields(self, client):
        response = client.post(PLANS, json={"fields": {"estimated_cost": 10}})
        assert response.status_code == 422

    @pytest.mark.parametrize("fields", [{"status": "bogus"}, {"plan_name": {"text": "Lot 14"}}])
    def test_create_rejects_bad_values(self, client, fields):
        response = client.post(PLANS, json={"fields": fields})
        assert response.status_code == 422

    def test_delete(self, client):
        with patch(f"{PLAN_SERVICE}.delete_plan", new=AsyncMock(return_value=None)):
            response = client.delete(f"{PLANS}/DP1")

        assert response.status_code == 200
        assert response.json()["plan_id"] == "DP1"


class TestMachineRoutes:

    def test_occupancy(self, client, day_shift_slot):
        occupancy = OccupancyResponse(
            machine_no="JET-01", date="2026-01-20", time="09:00",
            occupied=True, slot=day_shift_slot, status="occupied", tone="informational",
        )
        with patch(f"{MACHINE_SERVICE}.get_occupancy", new=AsyncMock(return_value=occupancy)):
            response = client.get(f"{MACHINES}/JET-01/occupancy", params={"date": "2026-01-20", "time": "09:00"})

        assert response.status_code == 200
        assert response.json()["slot"]["plan_id"] == day_shift_slot.plan_id

    def test_occupancy_bad_time(self, client):
        response = client.get(f"{MACHINES}/JET-01/occupancy", params={"date": "2026-01-20", "time": "9am"})
        assert response.status_code == 422

    def test_grid(self, client, machine):
        with patch(f"{MACHINE_SERVICE}.list_machines", new=AsyncMock(return_value=[machine])):
            response = client.get(f"{MACHINES}/grid", params={"date": "2026-01-20"})

        assert response.status_code == 200
        body = response.json()
        assert len(body["time_slots"]) == 24
        assert body["status_counts"]["occupied"] == 1
        assert body["machines"][0]["cells"][8]["slot"]["plan_id"] == "DP260120TEST"

    def test_grid_bad_ticks(self, client):
        with patch(f"{MACHINE_SERVICE}.list_machines", new=AsyncMock(return_value=[])):
            response = client.get(f"{MACHINES}/grid", params={"date": "2026-01-20", "ticks": 7})

        assert response.status_code == 400

    def test_add_slot_rejects_bad_time(self, client):
        response = client.post(
            f"{MACHINES}/JET-01/slots",
            json={"plan_id": "DP1", "start_time": "8am", "end_time": "16:00"},
        )
        assert response.status_code == 422

    def test_create_machine(self, client):
        created = MachineSchedule(machine_no="JET-01", machine_type="Jet Dyeing Machine", capacity=500)
        with patch(f"{MACHINE_SERVICE}.create_machine", new=AsyncMock(return_value=created)):
            response = client.post(MACHINES, json={"machine_no": "JET-01", "capacity": 500})

        assert response.status_code == 201
        assert response.json()["status"] == "available"
