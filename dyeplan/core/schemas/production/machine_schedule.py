from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from dyeplan.core.catalog import StatusTone
from dyeplan.core.models.production.machine_schedule import (
    MachineStatus,
    MaintenanceSchedule,
    ScheduledSlot,
)

TIME_PATTERN = "^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# -----------------------------
# Machine Requests
# -----------------------------

class CreateMachineRequest(BaseModel):
    machine_no: str = Field(..., min_length=1, description="Unique machine number (e.g., 'JET-01')")
    machine_type: str = Field("", description="One of the catalog machine types")
    capacity: float = Field(0, ge=0, description="Capacity in kg")
    status: MachineStatus = "available"
    maintenance_schedule: List[MaintenanceSchedule] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "machine_no": "JET-01",
                "machine_type": "Jet Dyeing Machine",
                "capacity": 500,
                "status": "available"
            }
        }


class UpdateMachineStatusRequest(BaseModel):
    status: MachineStatus
    current_plan: Optional[str] = None


class AddSlotRequest(BaseModel):
    """Book a plan onto a machine for [start_time, end_time) of the day."""

    plan_id: str
    plan_name: str = ""
    start_time: str = Field(..., pattern=TIME_PATTERN, example="08:00")
    end_time: str = Field(..., pattern=TIME_PATTERN, example="16:00")
    color: str = ""
    priority: str = "medium"

    @field_validator("priority")
    @classmethod
    def normalize_priority(cls, v):
        return v.strip().lower()


# -----------------------------
# Occupancy / Grid Responses
# -----------------------------

class OccupancyResponse(BaseModel):
    machine_no: str
    date: str
    time: str
    occupied: bool
    slot: Optional[ScheduledSlot] = None
    status: str
    tone: StatusTone


class GridCell(BaseModel):
    """One (machine, tick) cell of the schedule grid."""

    time: str
    slot: Optional[ScheduledSlot] = None
    # Priority color when occupied, otherwise the machine-status tone
    color: Optional[str] = None
    tone: StatusTone


class MachineGridRow(BaseModel):
    machine_no: str
    machine_type: str
    capacity: float
    status: str
    tone: StatusTone
    cells: List[GridCell] = Field(default_factory=list)


class MachineGridResponse(BaseModel):
    date: str
    time_slots: List[str]
    status_counts: Dict[str, int]
    machines: List[MachineGridRow]
