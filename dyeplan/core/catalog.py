"""
Planning catalog: the fixed enumerations the planning screens choose from.

Loaded once at startup (see main.py lifespan) and handed to the components
that need it. The model is frozen; treat it as read-only configuration.
"""

import json
import logging
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

logger = logging.getLogger(__name__)


# -----------------------------
# Display classifications
# -----------------------------

StatusTone = Literal[
    "neutral",        # available / unknown
    "informational",  # occupied
    "warning",        # maintenance
    "critical",       # breakdown
]


class CatalogOption(BaseModel):
    """One selectable value with its display label and badge color."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    color: str


class PlanningCatalog(BaseModel):
    """Process-wide immutable planning configuration."""

    model_config = ConfigDict(frozen=True)

    dyeing_methods: Tuple[str, ...] = (
        "Reactive Pad-Batch",
        "Reactive Exhaust",
        "Disperse Dyeing",
        "Acid Dyeing",
        "Direct Dyeing",
        "Vat Dyeing",
        "Pigment Dyeing",
        "Cold Pad-Batch",
        "Hot Brand",
        "Continuous Dyeing",
    )

    dyeing_types: Tuple[str, ...] = (
        "Fresh Dyeing",
        "Reprocess",
        "Shade Matching",
        "Bulk Production",
        "Sample Development",
        "Color Correction",
    )

    machine_types: Tuple[str, ...] = (
        "Jet Dyeing Machine",
        "Jigger",
        "Winch",
        "Beam Dyeing",
        "Package Dyeing",
        "Hank Dyeing",
        "Continuous Range",
        "Pad-Batch",
    )

    plan_statuses: Tuple[CatalogOption, ...] = (
        CatalogOption(value="draft", label="Draft", color="gray"),
        CatalogOption(value="scheduled", label="Scheduled", color="blue"),
        CatalogOption(value="in-progress", label="In Progress", color="yellow"),
        CatalogOption(value="completed", label="Completed", color="green"),
        CatalogOption(value="cancelled", label="Cancelled", color="red"),
    )

    # Ordered least salient -> most salient
    priority_levels: Tuple[CatalogOption, ...] = (
        CatalogOption(value="low", label="Low", color="gray"),
        CatalogOption(value="medium", label="Medium", color="blue"),
        CatalogOption(value="high", label="High", color="orange"),
        CatalogOption(value="urgent", label="Urgent", color="red"),
    )

    # Read-only view; rebuilt from the validated dict
    machine_status_tones: Mapping[str, StatusTone] = Field(
        default_factory=lambda: {
            "available": "neutral",
            "occupied": "informational",
            "maintenance": "warning",
            "breakdown": "critical",
        },
        validate_default=True,
    )

    default_status_tone: StatusTone = "neutral"

    @field_validator("machine_status_tones", mode="after")
    @classmethod
    def freeze_status_tones(cls, v):
        return MappingProxyType(dict(v))

    @field_serializer("machine_status_tones")
    def serialize_status_tones(self, tones: Mapping[str, StatusTone]) -> Dict[str, str]:
        return dict(tones)

    def priority_rank(self, priority: Optional[str]) -> int:
        """0 for the least salient priority (and anything unrecognized)."""
        for rank, option in enumerate(self.priority_levels):
            if option.value == priority:
                return rank
        return 0

    def priority_color(self, priority: Optional[str]) -> str:
        return self.priority_levels[self.priority_rank(priority)].color

    def status_tone(self, status: Optional[str]) -> StatusTone:
        return self.machine_status_tones.get(status, self.default_status_tone)


DEFAULT_CATALOG = PlanningCatalog()


def load_catalog(path: Optional[str] = None) -> PlanningCatalog:
    """
    Build the catalog, optionally overriding defaults from a JSON file.

    Keys missing from the file keep their built-in values.
    """
    if not path:
        return DEFAULT_CATALOG

    with open(path, encoding="utf-8") as fh:
        overrides = json.load(fh)

    catalog = PlanningCatalog.model_validate(overrides)
    logger.info(f"Loaded planning catalog from {path}")
    return catalog
