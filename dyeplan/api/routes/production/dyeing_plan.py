from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from dyeplan.api.deps import get_catalog
from dyeplan.core.catalog import PlanningCatalog
from dyeplan.core.models.production.dyeing_plan import DyeingPlan
from dyeplan.core.schemas.production.dyeing_plan import (
    AddChemicalRequest,
    ChemicalFieldUpdateRequest,
    CreatePlanRequest,
    DeletePlanResponse,
    PlanFieldUpdateRequest,
    PlanningSummary,
    ReorderChemicalsRequest,
    StatusChangeRequest,
)
from dyeplan.modules.dyeing_plan.dyeing_plan_service import DyeingPlanService

router = APIRouter(tags=["Dyeing Plan"], prefix="/production/dyeing-plans")


@router.post(
    "",
    response_model=DyeingPlan,
    status_code=status.HTTP_201_CREATED,
    summary="Create Dyeing Plan"
)
async def create_plan(payload: CreatePlanRequest):
    """
    Creates a plan with a generated id (DPyymmddXXXX) and default recipe values.
    Initial field values are applied in order, so total water and end time are derived.
    """
    return await DyeingPlanService.create_plan(payload)


@router.get(
    "",
    response_model=List[DyeingPlan],
    summary="List Dyeing Plans"
)
async def list_plans(
    search: Optional[str] = Query(None, description="Matches name, customer, order, color or machine"),
    status_filter: Optional[str] = Query(None, alias="status", description="Plan status or 'all'"),
    priority: Optional[str] = Query(None, description="Priority or 'all'"),
):
    """Newest plans first."""
    return await DyeingPlanService.list_plans(search, status_filter, priority)


@router.get(
    "/stats/summary",
    response_model=PlanningSummary,
    summary="Planning Dashboard Summary"
)
async def get_summary(catalog: PlanningCatalog = Depends(get_catalog)):
    return await DyeingPlanService.get_summary(catalog)


@router.get("/{plan_id}", response_model=DyeingPlan, summary="Get Dyeing Plan")
async def get_plan(plan_id: str):
    return await DyeingPlanService.get_plan(plan_id)


@router.delete("/{plan_id}", response_model=DeletePlanResponse, summary="Delete Dyeing Plan")
async def delete_plan(plan_id: str):
    await DyeingPlanService.delete_plan(plan_id)
    return DeletePlanResponse(message="Dyeing plan deleted successfully", plan_id=plan_id)


@router.patch(
    "/{plan_id}/fields",
    response_model=DyeingPlan,
    summary="Edit One Plan Field"
)
async def update_plan_field(plan_id: str, payload: PlanFieldUpdateRequest):
    """
    Applies one form edit.

    **Automatic Calculations:**
    - `fabric_weight` / `liquor_ratio` -> `total_water`
    - `scheduled_start_time` / `estimated_duration` -> `scheduled_end_time` (HH:MM, wraps past midnight)
    """
    return await DyeingPlanService.update_field(plan_id, payload.field, payload.value)


@router.patch(
    "/{plan_id}/status",
    response_model=DyeingPlan,
    summary="Change Plan Status"
)
async def change_status(plan_id: str, payload: StatusChangeRequest):
    """`in-progress` stamps the actual start; `completed` stamps the actual end and duration."""
    return await DyeingPlanService.change_status(plan_id, payload.status)


# ----------------------------- Chemical Requirements -----------------------------

@router.post(
    "/{plan_id}/chemicals",
    response_model=DyeingPlan,
    status_code=status.HTTP_201_CREATED,
    summary="Add Chemical"
)
async def add_chemical(plan_id: str, payload: AddChemicalRequest):
    return await DyeingPlanService.add_chemical(plan_id, payload)


@router.post(
    "/{plan_id}/chemicals/reorder",
    response_model=DyeingPlan,
    summary="Reorder Chemicals"
)
async def reorder_chemicals(plan_id: str, payload: ReorderChemicalsRequest):
    """Moves one line-item. Costs and quantities are unchanged by reordering."""
    return await DyeingPlanService.reorder_chemicals(
        plan_id, payload.source_index, payload.destination_index
    )


@router.post(
    "/{plan_id}/chemicals/recalculate",
    response_model=DyeingPlan,
    summary="Recalculate Chemicals"
)
async def recalculate_chemicals(plan_id: str):
    """Re-derives every line-item from its dosing/shade against current fabric weight and water."""
    return await DyeingPlanService.recalculate_chemicals(plan_id)


@router.patch(
    "/{plan_id}/chemicals/{item_id}",
    response_model=DyeingPlan,
    summary="Edit Chemical Field"
)
async def update_chemical(plan_id: str, item_id: str, payload: ChemicalFieldUpdateRequest):
    """
    Applies one line-item edit.

    **Automatic Calculations:**
    - `dosing` (g/l): required = dosing x total_water / 1000, clears shade
    - `shade` (%): required = shade / 100 x fabric_weight, clears dosing
    - `need_to_purchase` = max(0, required - available), `total_cost` = need x unit price
    - plan `estimated_cost` = sum of line costs
    """
    return await DyeingPlanService.update_chemical(plan_id, item_id, payload.field, payload.value)


@router.delete(
    "/{plan_id}/chemicals/{item_id}",
    response_model=DyeingPlan,
    summary="Remove Chemical"
)
async def remove_chemical(plan_id: str, item_id: str):
    return await DyeingPlanService.remove_chemical(plan_id, item_id)
