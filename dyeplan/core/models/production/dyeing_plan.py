import uuid
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from beanie import Document
from pydantic import BaseModel, Field, computed_field
from pymongo import ASCENDING, DESCENDING, IndexModel

from dyeplan.shared.timezone import get_plant_now, get_plant_today


# -----------------------------
# Plan Status & Priority
# -----------------------------

PlanStatus = Literal[
    "draft",
    "scheduled",
    "in-progress",
    "completed",
    "cancelled",
]

PriorityLevel = Literal[
    "low",
    "medium",
    "high",
    "urgent",
]

QualityCheckType = Literal["pre-dyeing", "during-dyeing", "post-dyeing"]

QualityCheckStatus = Literal["pending", "passed", "failed"]


def new_item_id() -> str:
    return uuid.uuid4().hex[:12]


# -----------------------------
# Dosing Basis (dosing XOR shade)
# -----------------------------

class LiquorDosing(BaseModel):
    """Concentration per liter of liquor (g/l)."""

    kind: Literal["dosing"] = "dosing"
    value: float


class ShadeDosing(BaseModel):
    """Percentage of fabric weight (%)."""

    kind: Literal["shade"] = "shade"
    value: float


DosingBasis = Annotated[Union[LiquorDosing, ShadeDosing], Field(discriminator="kind")]


# -----------------------------
# Chemical Requirement (Recipe Line-Item)
# -----------------------------

class ChemicalRequirement(BaseModel):
    """
    One recipe line-item.

    AUTO-CALCULATED: need_to_purchase, total_cost
    DERIVED (overridable): required_quantity
    """

    item_id: str = Field(default_factory=new_item_id, description="Stable identity used for reordering")
    chemical_name: str = ""

    # ---- Dosing ----
    basis: Optional[DosingBasis] = None

    # ---- Quantities (kg) ----
    required_quantity: float = 0.0
    available_stock: float = 0.0
    need_to_purchase: float = 0.0  # AUTO-CALCULATED

    # ---- Cost ----
    unit_price: float = 0.0
    total_cost: float = 0.0  # AUTO-CALCULATED

    supplier: Optional[str] = ""
    notes: Optional[str] = ""

    @computed_field
    @property
    def dosing(self) -> Optional[float]:
        """Dosing in g/l, or None when the basis is unset or a shade."""
        if isinstance(self.basis, LiquorDosing):
            return self.basis.value
        return None

    @computed_field
    @property
    def shade(self) -> Optional[float]:
        """Shade in %, or None when the basis is unset or a dosing."""
        if isinstance(self.basis, ShadeDosing):
            return self.basis.value
        return None


# -----------------------------
# Quality Check
# -----------------------------

class QualityCheck(BaseModel):
    check_id: str = Field(default_factory=new_item_id)
    check_type: QualityCheckType
    parameter: str
    expected_value: str
    actual_value: Optional[str] = None
    status: QualityCheckStatus = "pending"
    checked_by: Optional[str] = None
    check_date: Optional[str] = None
    notes: Optional[str] = None


# -----------------------------
# Dyeing Plan (Snapshot)
# -----------------------------

class DyeingPlan(BaseModel):
    """
    One production job.

    Plain snapshot used by the derivation engine; DyeingPlanDocument is the
    persisted form with the same fields.
    """

    # ---- Identity ----
    plan_id: str
    plan_name: str = ""
    plan_date: str = Field(default_factory=get_plant_today, description="YYYY-MM-DD")
    status: PlanStatus = "draft"
    priority: PriorityLevel = "medium"

    # ---- Customer & Order ----
    customer_name: str = ""
    order_number: str = ""
    delivery_date: str = ""

    # ---- Fabric ----
    fabric_type: str = ""
    fabric_weight: float = 0  # kg
    fabric_width: Optional[str] = ""
    gsm: Optional[str] = ""

    # ---- Dyeing / Recipe ----
    color: str = ""
    color_code: Optional[str] = ""
    dyeing_method: str = "Reactive Exhaust"
    dyeing_type: str = "Fresh Dyeing"
    liquor_ratio: float = 8
    total_water: float = 0  # liters, AUTO-CALCULATED

    # ---- Machine & Resources ----
    machine_no: str = ""
    machine_capacity: float = 0
    estimated_duration: float = 8  # hours
    actual_duration: Optional[float] = None

    # ---- Chemicals ----
    chemical_requirements: List[ChemicalRequirement] = Field(default_factory=list)

    # ---- Scheduling (HH:MM) ----
    scheduled_start_time: str = ""
    scheduled_end_time: str = ""  # AUTO-CALCULATED
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None

    # ---- Quality ----
    lab_dip_no: Optional[str] = None
    quality_checks: List[QualityCheck] = Field(default_factory=list)

    # ---- Cost ----
    estimated_cost: float = 0  # AUTO-CALCULATED
    actual_cost: Optional[float] = None

    # ---- Notes ----
    special_instructions: Optional[str] = ""
    notes: Optional[str] = ""

    # ---- Tracking ----
    created_by: str = ""
    assigned_to: Optional[str] = ""
    created_at: datetime = Field(default_factory=get_plant_now)
    updated_at: datetime = Field(default_factory=get_plant_now)
    user_id: str = ""

    def revise(self, **updates) -> "DyeingPlan":
        """
        Copy with updates applied, validated like a freshly loaded plan.

        Raises:
            pydantic.ValidationError: If an updated value does not fit its field
        """
        return DyeingPlan.model_validate({**self.model_dump(), **updates})


# -----------------------------
# Document
# -----------------------------

class DyeingPlanDocument(DyeingPlan, Document):
    """MongoDB Document storing a dyeing plan snapshot."""

    def to_plan(self) -> DyeingPlan:
        return DyeingPlan.model_validate(
            self.model_dump(exclude={"id", "revision_id"})
        )

    def apply_plan(self, plan: DyeingPlan) -> None:
        """Overwrite every plan field with the snapshot's values."""
        for name in DyeingPlan.model_fields:
            setattr(self, name, getattr(plan, name))

    class Settings:
        name = "dyeing_plans"

        indexes = [
            IndexModel([("plan_id", ASCENDING)], unique=True),
            [("plan_date", ASCENDING)],
            [("created_at", DESCENDING)],
            [("status", ASCENDING), ("priority", ASCENDING)],
        ]
