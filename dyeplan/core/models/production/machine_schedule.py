from typing import List, Literal, Optional

from beanie import Document
from pydantic import BaseModel, Field
from pymongo import ASCENDING, IndexModel

from dyeplan.core.models.production.dyeing_plan import new_item_id


MachineStatus = Literal[
    "available",
    "occupied",
    "maintenance",
    "breakdown",
]

MaintenanceType = Literal["routine", "repair", "calibration"]

MaintenanceStatus = Literal["scheduled", "in-progress", "completed"]


class ScheduledSlot(BaseModel):
    """A plan's occupancy interval on a machine, [start_time, end_time) as HH:MM."""

    plan_id: str
    plan_name: str = ""
    start_time: str = Field(..., pattern="^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
    end_time: str = Field(..., pattern="^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
    color: str = ""
    # Kept as a plain string: unrecognized priorities fall back to least salient
    priority: str = "medium"


class MaintenanceSchedule(BaseModel):
    maintenance_id: str = Field(default_factory=new_item_id)
    type: MaintenanceType
    scheduled_date: str
    estimated_duration: float = 0  # hours
    description: str = ""
    status: MaintenanceStatus = "scheduled"


class MachineSchedule(BaseModel):
    """A production machine and the slots booked on it."""

    machine_no: str
    machine_type: str = ""
    capacity: float = 0  # kg
    # Plain string so legacy / unknown statuses still load (rendered neutral)
    status: str = "available"
    current_plan: Optional[str] = None
    scheduled_plans: List[ScheduledSlot] = Field(default_factory=list)
    maintenance_schedule: List[MaintenanceSchedule] = Field(default_factory=list)


class MachineScheduleDocument(MachineSchedule, Document):
    """MongoDB Document storing one machine's availability record."""

    def to_machine(self) -> MachineSchedule:
        return MachineSchedule.model_validate(
            self.model_dump(exclude={"id", "revision_id"})
        )

    class Settings:
        name = "machine_schedules"

        indexes = [
            IndexModel([("machine_no", ASCENDING)], unique=True),
        ]
