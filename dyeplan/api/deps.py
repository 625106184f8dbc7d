from fastapi import Depends, Request

from dyeplan.core.catalog import DEFAULT_CATALOG, PlanningCatalog
from dyeplan.modules.machine_schedule.occupancy_resolver import MachineOccupancyResolver


def get_catalog(request: Request) -> PlanningCatalog:
    """The planning catalog loaded at startup (see main.py lifespan)."""
    return getattr(request.app.state, "catalog", DEFAULT_CATALOG)


def get_occupancy_resolver(
    catalog: PlanningCatalog = Depends(get_catalog),
) -> MachineOccupancyResolver:
    return MachineOccupancyResolver(catalog)
