from fastapi import APIRouter

from dyeplan.api.routes.production import dyeing_plan, machine_schedule

api_router = APIRouter()


api_router.include_router(dyeing_plan.router)
api_router.include_router(machine_schedule.router)
