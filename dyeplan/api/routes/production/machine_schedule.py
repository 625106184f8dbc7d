from typing import List

from fastapi import APIRouter, Depends, Query, status

from dyeplan.api.deps import get_catalog, get_occupancy_resolver
from dyeplan.core.catalog import PlanningCatalog
from dyeplan.core.models.production.machine_schedule import MachineSchedule
from dyeplan.core.schemas.production.machine_schedule import (
    DATE_PATTERN,
    TIME_PATTERN,
    AddSlotRequest,
    CreateMachineRequest,
    MachineGridResponse,
    OccupancyResponse,
    UpdateMachineStatusRequest,
)
from dyeplan.modules.machine_schedule.machine_schedule_service import MachineScheduleService
from dyeplan.modules.machine_schedule.occupancy_resolver import MachineOccupancyResolver

router = APIRouter(tags=["Machine Schedule"], prefix="/production")


@router.get("/catalog", response_model=PlanningCatalog, summary="Planning Catalog")
async def get_planning_catalog(catalog: PlanningCatalog = Depends(get_catalog)):
    """Dyeing methods, types, machine types, statuses and priority levels."""
    return catalog


@router.post(
    "/machines",
    response_model=MachineSchedule,
    status_code=status.HTTP_201_CREATED,
    summary="Register Machine"
)
async def create_machine(payload: CreateMachineRequest):
    return await MachineScheduleService.create_machine(payload)


@router.get("/machines", response_model=List[MachineSchedule], summary="List Machines")
async def list_machines():
    return await MachineScheduleService.list_machines()


@router.get(
    "/machines/grid",
    response_model=MachineGridResponse,
    summary="Machine Schedule Grid"
)
async def get_schedule_grid(
    date: str = Query(..., pattern=DATE_PATTERN, description="YYYY-MM-DD"),
    ticks: int = Query(24, ge=1, le=1440, description="Grid columns per day"),
    resolver: MachineOccupancyResolver = Depends(get_occupancy_resolver),
):
    """One row per machine, one cell per tick: the occupying slot or the machine status."""
    return await MachineScheduleService.get_grid(date, resolver, ticks)


@router.get(
    "/machines/{machine_no}/occupancy",
    response_model=OccupancyResponse,
    summary="Machine Occupancy At Instant"
)
async def get_occupancy(
    machine_no: str,
    date: str = Query(..., pattern=DATE_PATTERN, description="YYYY-MM-DD"),
    time: str = Query(..., pattern=TIME_PATTERN, description="HH:MM"),
    resolver: MachineOccupancyResolver = Depends(get_occupancy_resolver),
):
    """Slot whose [start, end) contains the instant, if any."""
    return await MachineScheduleService.get_occupancy(machine_no, date, time, resolver)


@router.patch(
    "/machines/{machine_no}/status",
    response_model=MachineSchedule,
    summary="Update Machine Status"
)
async def update_machine_status(machine_no: str, payload: UpdateMachineStatusRequest):
    return await MachineScheduleService.update_status(machine_no, payload)


@router.post(
    "/machines/{machine_no}/slots",
    response_model=MachineSchedule,
    status_code=status.HTTP_201_CREATED,
    summary="Book Slot"
)
async def add_slot(machine_no: str, payload: AddSlotRequest):
    """Rejects slots that end before they start or overlap an existing booking."""
    return await MachineScheduleService.add_slot(machine_no, payload)


@router.delete(
    "/machines/{machine_no}/slots/{plan_id}",
    response_model=MachineSchedule,
    summary="Remove Slot"
)
async def remove_slot(machine_no: str, plan_id: str):
    return await MachineScheduleService.remove_slot(machine_no, plan_id)
