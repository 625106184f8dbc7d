"""Unit tests for the planning catalog."""

import json

import pytest
from pydantic import ValidationError

from dyeplan.core.catalog import DEFAULT_CATALOG, PlanningCatalog, load_catalog


class TestPlanningCatalog:

    def test_defaults(self, catalog):
        assert "Reactive Exhaust" in catalog.dyeing_methods
        assert "Fresh Dyeing" in catalog.dyeing_types
        assert "Jet Dyeing Machine" in catalog.machine_types
        assert [o.value for o in catalog.plan_statuses] == [
            "draft", "scheduled", "in-progress", "completed", "cancelled"
        ]
        assert [o.value for o in catalog.priority_levels] == ["low", "medium", "high", "urgent"]

    def test_frozen(self, catalog):
        with pytest.raises(ValidationError):
            catalog.default_status_tone = "critical"

    def test_priority_rank(self, catalog):
        assert catalog.priority_rank("urgent") == 3
        assert catalog.priority_rank("unheard-of") == 0


class TestLoadCatalog:

    def test_no_path_uses_defaults(self):
        assert load_catalog(None) is DEFAULT_CATALOG

    def test_file_overrides(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({
            "machine_types": ["Soft Flow"],
            "machine_status_tones": {"available": "neutral", "idle": "warning"},
        }))

        catalog = load_catalog(str(path))

        assert catalog.machine_types == ("Soft Flow",)
        assert catalog.status_tone("idle") == "warning"
        assert catalog.dyeing_methods == PlanningCatalog().dyeing_methods

    def test_invalid_tone_rejected(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"machine_status_tones": {"available": "loud"}}))

        with pytest.raises(ValidationError):
            load_catalog(str(path))


class TestStatusTonesReadOnly:

    def test_cannot_mutate_in_place(self, catalog):
        with pytest.raises(TypeError):
            catalog.machine_status_tones["available"] = "critical"

        assert catalog.status_tone("available") == "neutral"

    def test_loaded_catalog_read_only(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"machine_status_tones": {"idle": "warning"}}))

        with pytest.raises(TypeError):
            load_catalog(str(path)).machine_status_tones["idle"] = "neutral"

    def test_serializes_as_plain_mapping(self, catalog):
        dumped = catalog.model_dump()

        assert dumped["machine_status_tones"]["breakdown"] == "critical"
        assert json.loads(catalog.model_dump_json())["machine_status_tones"]["occupied"] == "informational"
