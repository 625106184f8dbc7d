from typing import List
import logging

from fastapi import HTTPException, status

from dyeplan.core.models.production.machine_schedule import (
    MachineSchedule,
    MachineScheduleDocument,
    ScheduledSlot,
)
from dyeplan.core.monitoring.prometheus_middleware import (
    track_db_operation,
    track_occupancy_query,
)
from dyeplan.core.schemas.production.machine_schedule import (
    AddSlotRequest,
    CreateMachineRequest,
    MachineGridResponse,
    OccupancyResponse,
    UpdateMachineStatusRequest,
)
from dyeplan.modules.machine_schedule.occupancy_resolver import (
    MachineOccupancyResolver,
    find_overlap,
    slot_minutes,
)

logger = logging.getLogger(__name__)

COLLECTION = "machine_schedules"


class MachineScheduleService:
    """Machine records, slot booking and occupancy lookups."""

    # -------------------------
    # Helper Methods
    # -------------------------

    @staticmethod
    async def _get_machine_or_404(machine_no: str) -> MachineScheduleDocument:
        machine = await MachineScheduleDocument.find_one(
            MachineScheduleDocument.machine_no == machine_no
        )
        if not machine:
            logger.warning(f"Machine not found: {machine_no}")
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                detail=f"Machine '{machine_no}' not found"
            )
        return machine

    @staticmethod
    def _check_slot(existing: List[ScheduledSlot], candidate: ScheduledSlot) -> None:
        """
        Reject slots that end before they start or overlap an existing booking.
        """
        start, end = slot_minutes(candidate)
        if end <= start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"End time {candidate.end_time} must be after start time {candidate.start_time}"
            )

        conflict = find_overlap(existing, candidate)
        if conflict is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Time conflict: plan '{conflict.plan_id}' "
                    f"({conflict.start_time}-{conflict.end_time}) overlaps with new slot."
                )
            )

    # -------------------------
    # Machines
    # -------------------------

    @staticmethod
    async def create_machine(payload: CreateMachineRequest) -> MachineSchedule:
        existing = await MachineScheduleDocument.find_one(
            MachineScheduleDocument.machine_no == payload.machine_no
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Machine '{payload.machine_no}' already exists"
            )

        machine = MachineScheduleDocument(**payload.model_dump())
        await machine.insert()
        track_db_operation("insert", COLLECTION, success=True)
        logger.info(f"Registered machine {payload.machine_no}")
        return machine.to_machine()

    @staticmethod
    async def list_machines() -> List[MachineSchedule]:
        machines = await MachineScheduleDocument.find_all().sort(
            +MachineScheduleDocument.machine_no
        ).to_list()
        return [m.to_machine() for m in machines]

    @staticmethod
    async def update_status(machine_no: str, payload: UpdateMachineStatusRequest) -> MachineSchedule:
        machine = await MachineScheduleService._get_machine_or_404(machine_no)
        machine.status = payload.status
        machine.current_plan = payload.current_plan
        await machine.save()
        track_db_operation("update", COLLECTION, success=True)
        return machine.to_machine()

    # -------------------------
    # Slots
    # -------------------------

    @staticmethod
    async def add_slot(machine_no: str, payload: AddSlotRequest) -> MachineSchedule:
        machine = await MachineScheduleService._get_machine_or_404(machine_no)
        candidate = ScheduledSlot(**payload.model_dump())

        MachineScheduleService._check_slot(machine.scheduled_plans, candidate)

        machine.scheduled_plans.append(candidate)
        await machine.save()
        track_db_operation("update", COLLECTION, success=True)
        logger.info(
            f"Booked plan {candidate.plan_id} on {machine_no} "
            f"{candidate.start_time}-{candidate.end_time}"
        )
        return machine.to_machine()

    @staticmethod
    async def remove_slot(machine_no: str, plan_id: str) -> MachineSchedule:
        machine = await MachineScheduleService._get_machine_or_404(machine_no)
        remaining = [s for s in machine.scheduled_plans if s.plan_id != plan_id]

        if len(remaining) == len(machine.scheduled_plans):
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                detail=f"No slot for plan '{plan_id}' on machine '{machine_no}'"
            )

        machine.scheduled_plans = remaining
        await machine.save()
        track_db_operation("update", COLLECTION, success=True)
        return machine.to_machine()

    # -------------------------
    # Occupancy
    # -------------------------

    @staticmethod
    async def get_occupancy(
        machine_no: str,
        date: str,
        time: str,
        resolver: MachineOccupancyResolver,
    ) -> OccupancyResponse:
        machine = await MachineScheduleService._get_machine_or_404(machine_no)
        slot = resolver.resolve_occupancy(machine.scheduled_plans, date, time)
        track_occupancy_query(slot is not None)

        return OccupancyResponse(
            machine_no=machine_no,
            date=date,
            time=time,
            occupied=slot is not None,
            slot=slot,
            status=machine.status,
            tone=resolver.status_tone("occupied" if slot else machine.status),
        )

    @staticmethod
    async def get_grid(
        date: str,
        resolver: MachineOccupancyResolver,
        ticks: int = 24,
    ) -> MachineGridResponse:
        machines = await MachineScheduleService.list_machines()
        try:
            time_slots = resolver.generate_time_slots(ticks)
        except ValueError as e:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e))

        return MachineGridResponse(
            date=date,
            time_slots=time_slots,
            status_counts=resolver.status_counts(machines),
            machines=resolver.build_grid(machines, date, ticks),
        )
