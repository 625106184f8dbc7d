from typing import List, Optional
import logging

from fastapi import HTTPException, status
from pymongo.errors import PyMongoError

from dyeplan.core.catalog import PlanningCatalog
from dyeplan.core.models.production.dyeing_plan import DyeingPlan, DyeingPlanDocument
from dyeplan.core.monitoring.prometheus_middleware import track_db_operation, track_plan_edit
from dyeplan.core.schemas.production.dyeing_plan import (
    AddChemicalRequest,
    CreatePlanRequest,
    PlanningSummary,
)
from dyeplan.modules.dashboard.planning_stats import PlanningStats
from dyeplan.modules.dyeing_plan.plan_editor import DyeingPlanEditor
from dyeplan.shared.plan_id import generate_plan_id
from dyeplan.shared.timezone import PLANT_TZ, get_plant_now


logger = logging.getLogger(__name__)

COLLECTION = "dyeing_plans"
MAX_ID_ATTEMPTS = 5


# -----------------------------
# Dyeing Plan Service
# -----------------------------
class DyeingPlanService:
    """Service layer: loads a plan, runs one editor operation, writes the snapshot back."""

    TIMEZONE = PLANT_TZ

    # -------------------------
    # Helper Methods
    # -------------------------

    @staticmethod
    async def _get_document_or_404(plan_id: str) -> DyeingPlanDocument:
        """Fetch plan document by plan_id or raise 404."""
        doc = await DyeingPlanDocument.find_one(DyeingPlanDocument.plan_id == plan_id)
        if not doc:
            logger.warning(f"Dyeing plan not found: {plan_id}")
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                detail=f"Dyeing plan '{plan_id}' not found"
            )
        return doc

    @staticmethod
    async def _save(doc: DyeingPlanDocument, plan: DyeingPlan, operation: str) -> DyeingPlan:
        """Write the edited snapshot through to MongoDB."""
        plan = plan.model_copy(update={"updated_at": get_plant_now(DyeingPlanService.TIMEZONE)})
        doc.apply_plan(plan)

        try:
            await doc.save()
        except PyMongoError as e:
            track_db_operation("update", COLLECTION, success=False)
            logger.error(f"Failed to save plan {plan.plan_id} after '{operation}': {e}")
            raise

        track_db_operation("update", COLLECTION, success=True)
        track_plan_edit(operation)
        return plan

    @staticmethod
    def _apply_field(plan: DyeingPlan, field: str, value) -> DyeingPlan:
        """Run one field edit; values the plan cannot hold become a 422."""
        try:
            return DyeingPlanEditor.update_field(plan, field, value, DyeingPlanService.TIMEZONE)
        except ValueError as e:
            logger.warning(f"Rejected edit on plan {plan.plan_id}: {field}={value!r}")
            raise HTTPException(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid value for '{field}': {e}"
            )

    @staticmethod
    async def _unique_plan_id() -> str:
        """Generated ids carry a short random suffix; retry on the rare collision."""
        for _ in range(MAX_ID_ATTEMPTS):
            plan_id = generate_plan_id(get_plant_now(DyeingPlanService.TIMEZONE))
            existing = await DyeingPlanDocument.find_one(DyeingPlanDocument.plan_id == plan_id)
            if not existing:
                return plan_id
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not allocate a unique plan id. Please retry."
        )

    # -------------------------
    # Create / Read / Delete
    # -------------------------

    @staticmethod
    async def create_plan(payload: CreatePlanRequest) -> DyeingPlan:
        """Create a plan from defaults plus the given initial field values."""
        tz = DyeingPlanService.TIMEZONE
        plan = DyeingPlanEditor.new_plan(
            created_by=payload.created_by or "",
            user_id=payload.user_id or "",
            now=get_plant_now(tz),
        )
        plan = plan.model_copy(update={"plan_id": await DyeingPlanService._unique_plan_id()})

        for field, value in payload.fields.items():
            plan = DyeingPlanService._apply_field(plan, field, value)

        doc = DyeingPlanDocument.model_validate(plan.model_dump())
        await doc.insert()
        track_db_operation("insert", COLLECTION, success=True)

        logger.info(f"Created dyeing plan {plan.plan_id} by '{plan.created_by}'")
        return plan

    @staticmethod
    async def get_plan(plan_id: str) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        return doc.to_plan()

    @staticmethod
    async def list_plans(
        search: Optional[str] = None,
        status_filter: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[DyeingPlan]:
        """All plans, newest first, narrowed by search / status / priority."""
        docs = await DyeingPlanDocument.find_all().sort(-DyeingPlanDocument.created_at).to_list()
        plans = [doc.to_plan() for doc in docs]
        return PlanningStats.filter_plans(plans, search, status_filter, priority)

    @staticmethod
    async def delete_plan(plan_id: str) -> None:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        await doc.delete()
        track_db_operation("delete", COLLECTION, success=True)
        logger.info(f"Deleted dyeing plan {plan_id}")

    @staticmethod
    async def get_summary(catalog: PlanningCatalog) -> PlanningSummary:
        plans = await DyeingPlanService.list_plans()
        today = get_plant_now(DyeingPlanService.TIMEZONE).date()
        return PlanningStats.summarize(plans, catalog, today)

    # -------------------------
    # Plan Edits
    # -------------------------

    @staticmethod
    async def update_field(plan_id: str, field: str, value) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        plan = DyeingPlanService._apply_field(doc.to_plan(), field, value)
        return await DyeingPlanService._save(doc, plan, "field")

    @staticmethod
    async def change_status(plan_id: str, new_status: str) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        plan = DyeingPlanEditor.change_status(
            doc.to_plan(), new_status, get_plant_now(DyeingPlanService.TIMEZONE)
        )
        return await DyeingPlanService._save(doc, plan, "status")

    # -------------------------
    # Chemical Requirements
    # -------------------------

    @staticmethod
    async def add_chemical(plan_id: str, payload: AddChemicalRequest) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        plan = DyeingPlanEditor.add_requirement(doc.to_plan(), **payload.model_dump())
        return await DyeingPlanService._save(doc, plan, "chemical_add")

    @staticmethod
    async def update_chemical(plan_id: str, item_id: str, field: str, value) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        try:
            plan = DyeingPlanEditor.update_requirement(doc.to_plan(), item_id, field, value)
        except KeyError:
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                detail=f"Chemical '{item_id}' not found in plan '{plan_id}'"
            )
        return await DyeingPlanService._save(doc, plan, "chemical_update")

    @staticmethod
    async def remove_chemical(plan_id: str, item_id: str) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        current = doc.to_plan()

        if not any(req.item_id == item_id for req in current.chemical_requirements):
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                detail=f"Chemical '{item_id}' not found in plan '{plan_id}'"
            )

        plan = DyeingPlanEditor.remove_requirement(current, item_id)
        return await DyeingPlanService._save(doc, plan, "chemical_remove")

    @staticmethod
    async def reorder_chemicals(
        plan_id: str,
        source_index: int,
        destination_index: Optional[int],
    ) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        current = doc.to_plan()
        count = len(current.chemical_requirements)

        if source_index >= count or (destination_index is not None and destination_index >= count):
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                detail=f"Index out of range: plan has {count} chemicals"
            )

        plan = DyeingPlanEditor.reorder_requirements(current, source_index, destination_index)
        return await DyeingPlanService._save(doc, plan, "reorder")

    @staticmethod
    async def recalculate_chemicals(plan_id: str) -> DyeingPlan:
        doc = await DyeingPlanService._get_document_or_404(plan_id)
        plan = DyeingPlanEditor.recalculate_requirements(doc.to_plan())
        return await DyeingPlanService._save(doc, plan, "recalculate")
