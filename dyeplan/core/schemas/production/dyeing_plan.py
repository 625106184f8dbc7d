from typing import Any, Dict, List, Optional, get_args

from pydantic import BaseModel, Field, field_validator, model_validator

from dyeplan.core.models.production.dyeing_plan import PlanStatus, PriorityLevel
from dyeplan.modules.dyeing_plan.plan_time_derivation import EDITABLE_PLAN_FIELDS
from dyeplan.modules.dyeing_plan.quantity_derivation import EDITABLE_FIELDS as EDITABLE_CHEMICAL_FIELDS

# Form cells only ever hold a single text or number value
SCALAR_TYPES = (str, int, float)


def check_plan_field_value(field: str, value: Any) -> None:
    """
    Reject a plan field edit that could not be stored.

    Raises:
        ValueError: Unknown / derived field, non-scalar value, or a status or
            priority outside the allowed values
    """
    if field not in EDITABLE_PLAN_FIELDS:
        raise ValueError(f"Field '{field}' cannot be edited directly")
    if value is not None and not isinstance(value, SCALAR_TYPES):
        raise ValueError(f"Field '{field}' takes a text or number value")
    if field == "status" and value not in get_args(PlanStatus):
        raise ValueError(f"Invalid status: {value}")
    if field == "priority" and value not in get_args(PriorityLevel):
        raise ValueError(f"Invalid priority: {value}")


# ----------------------------- Plan Create / Edit -----------------------------

class CreatePlanRequest(BaseModel):
    """
    Start a new plan. Omitted fields take the plan defaults; given fields
    are applied one by one so derived values (total water, end time) follow.
    """
    created_by: Optional[str] = Field(None, description="Display name of the planner")
    user_id: Optional[str] = Field(None, description="Owner of the plan")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Initial field values")

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v):
        unknown = sorted(set(v) - EDITABLE_PLAN_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be set directly: {', '.join(unknown)}")
        for field, value in v.items():
            check_plan_field_value(field, value)
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "created_by": "Planner Name",
                "fields": {
                    "plan_name": "Navy Jersey Lot 14",
                    "fabric_weight": 500,
                    "liquor_ratio": 8,
                    "machine_no": "JET-01",
                    "scheduled_start_time": "08:00"
                }
            }
        }


class PlanFieldUpdateRequest(BaseModel):
    """One field edit, exactly as typed in the plan form."""
    field: str = Field(..., example="fabric_weight")
    value: Any = Field(None, example=500)

    @model_validator(mode="after")
    def validate_edit(self):
        check_plan_field_value(self.field, self.value)
        return self


class StatusChangeRequest(BaseModel):
    status: PlanStatus


# ----------------------------- Chemical Requirements -----------------------------

class AddChemicalRequest(BaseModel):
    chemical_name: str = ""
    available_stock: float = Field(0, ge=0, description="Stock on hand (kg)")
    unit_price: float = Field(0, ge=0, description="Price per kg")
    supplier: Optional[str] = ""
    notes: Optional[str] = ""


class ChemicalFieldUpdateRequest(BaseModel):
    """
    One line-item field edit. Dosing/shade accept empty input to unset;
    numeric fields treat invalid input as 0.
    """
    field: str = Field(..., example="dosing")
    value: Any = Field(None, example="2")

    @field_validator("field")
    @classmethod
    def validate_field(cls, v):
        if v not in EDITABLE_CHEMICAL_FIELDS:
            raise ValueError(
                f"Field must be one of: {', '.join(sorted(EDITABLE_CHEMICAL_FIELDS))}"
            )
        return v


class ReorderChemicalsRequest(BaseModel):
    source_index: int = Field(..., ge=0)
    destination_index: Optional[int] = Field(None, ge=0, description="None cancels the move")


# ----------------------------- Dashboard -----------------------------

class DailyOutlook(BaseModel):
    day: str  # Mon, Tue, ...
    date: str
    plans: int = 0
    completed: int = 0


class PlanningSummary(BaseModel):
    total_plans: int = 0
    active_plans: int = 0
    completed_plans: int = 0
    urgent_plans: int = 0
    total_estimated_cost: float = 0.0
    avg_duration: float = 0.0
    status_breakdown: Dict[str, int] = Field(default_factory=dict)
    priority_breakdown: Dict[str, int] = Field(default_factory=dict)
    weekly_outlook: List[DailyOutlook] = Field(default_factory=list)


class DeletePlanResponse(BaseModel):
    message: str
    plan_id: str
