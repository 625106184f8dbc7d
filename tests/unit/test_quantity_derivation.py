"""
Unit tests for QuantityDerivation.

Covers dosing/shade derivation, the purchase gap and line cost.
"""

import pytest

from dyeplan.core.models.production.dyeing_plan import ChemicalRequirement, LiquorDosing, ShadeDosing
from dyeplan.modules.dyeing_plan.quantity_derivation import QuantityDerivation

FABRIC_WEIGHT = 500
TOTAL_WATER = 4000


def edit(item, field, value, fabric_weight=FABRIC_WEIGHT, total_water=TOTAL_WATER):
    return QuantityDerivation.apply_edit(item, field, value, fabric_weight, total_water)


class TestRequiredQuantity:

    def test_dosing(self):
        assert QuantityDerivation.required_from_dosing(2, 4000) == pytest.approx(8.0)

    def test_shade(self):
        assert QuantityDerivation.required_from_shade(2, 500) == pytest.approx(10.0)

    @pytest.mark.parametrize("dosing, water", [(0, 4000), (None, 4000), (2, 0)])
    def test_dosing_without_inputs(self, dosing, water):
        assert QuantityDerivation.required_from_dosing(dosing, water) is None

    @pytest.mark.parametrize("shade, weight", [(0, 500), (None, 500), (2, 0)])
    def test_shade_without_inputs(self, shade, weight):
        assert QuantityDerivation.required_from_shade(shade, weight) is None


class TestNeedToPurchase:

    def test_shortfall(self):
        assert QuantityDerivation.calculate_need_to_purchase(8, 3) == 5.0

    def test_enough_stock(self):
        assert QuantityDerivation.calculate_need_to_purchase(3, 8) == 0.0


class TestApplyEdit:

    def test_dosing_edit_derives_quantity(self):
        item = edit(ChemicalRequirement(available_stock=3, unit_price=120), "dosing", "2")

        assert item.dosing == 2.0
        assert item.shade is None
        assert item.required_quantity == pytest.approx(8.0)
        assert item.need_to_purchase == pytest.approx(5.0)
        assert item.total_cost == pytest.approx(600.0)

    def test_shade_edit_derives_quantity(self):
        item = edit(ChemicalRequirement(), "shade", 2)

        assert item.shade == 2.0
        assert item.dosing is None
        assert item.required_quantity == pytest.approx(10.0)

    def test_shade_clears_dosing(self, dosed_item):
        item = edit(dosed_item, "shade", "1.5")

        assert item.dosing is None
        assert isinstance(item.basis, ShadeDosing)
        assert item.required_quantity == pytest.approx(7.5)

    def test_dosing_clears_shade(self, shaded_item):
        item = edit(shaded_item, "dosing", "1")

        assert item.shade is None
        assert isinstance(item.basis, LiquorDosing)
        assert item.required_quantity == pytest.approx(4.0)

    def test_zero_dosing_keeps_previous_quantity(self, dosed_item):
        item = edit(dosed_item, "dosing", "0")

        assert item.dosing == 0.0
        assert item.required_quantity == pytest.approx(8.0)

    def test_missing_liquor_keeps_previous_quantity(self, dosed_item):
        item = edit(dosed_item, "dosing", "3", total_water=0)

        assert item.dosing == 3.0
        assert item.required_quantity == pytest.approx(8.0)

    @pytest.mark.parametrize("value", ["", "abc", None])
    def test_invalid_dosing_unsets_basis(self, dosed_item, value):
        item = edit(dosed_item, "dosing", value)

        assert item.basis is None
        assert item.dosing is None
        assert item.shade is None
        assert item.required_quantity == pytest.approx(8.0)

    def test_invalid_numeric_input_is_zero(self, dosed_item):
        item = edit(dosed_item, "available_stock", "lots")

        assert item.available_stock == 0.0
        assert item.need_to_purchase == pytest.approx(8.0)
        assert item.total_cost == pytest.approx(960.0)

    def test_manual_required_quantity_override(self, dosed_item):
        item = edit(dosed_item, "required_quantity", "12")

        assert item.required_quantity == 12.0
        assert item.dosing == 2.0
        assert item.need_to_purchase == pytest.approx(9.0)

    def test_unit_price_updates_cost(self, dosed_item):
        item = edit(dosed_item, "unit_price", 100)
        assert item.total_cost == pytest.approx(500.0)

    def test_text_field(self, dosed_item):
        item = edit(dosed_item, "supplier", "Chemtex")

        assert item.supplier == "Chemtex"
        assert item.required_quantity == dosed_item.required_quantity

    def test_input_not_mutated(self, dosed_item):
        edit(dosed_item, "dosing", "5")

        assert dosed_item.dosing == 2.0
        assert dosed_item.required_quantity == 8

    def test_unknown_field_raises(self, dosed_item):
        with pytest.raises(ValueError):
            edit(dosed_item, "total_cost", 1)

    def test_need_never_negative(self):
        item = edit(ChemicalRequirement(available_stock=50), "shade", 2)
        assert item.need_to_purchase == 0.0
        assert item.total_cost == 0.0


class TestDeriveQuantity:

    def test_rederives_from_dosing(self, dosed_item):
        item = QuantityDerivation.derive_quantity(dosed_item, fabric_weight=250, total_water=2000)
        assert item.required_quantity == pytest.approx(4.0)
        assert item.need_to_purchase == pytest.approx(1.0)

    def test_rederives_from_shade(self, shaded_item):
        item = QuantityDerivation.derive_quantity(shaded_item, fabric_weight=250, total_water=2000)
        assert item.required_quantity == pytest.approx(5.0)
        assert item.need_to_purchase == 0.0

    def test_no_basis_keeps_quantity(self):
        item = ChemicalRequirement(required_quantity=6, available_stock=1, unit_price=10)
        derived = QuantityDerivation.derive_quantity(item, FABRIC_WEIGHT, TOTAL_WATER)

        assert derived.required_quantity == 6
        assert derived.need_to_purchase == pytest.approx(5.0)
        assert derived.total_cost == pytest.approx(50.0)

    def test_serialized_item_exposes_dosing_and_shade(self, dosed_item):
        data = dosed_item.model_dump()
        assert data["dosing"] == 2.0
        assert data["shade"] is None
        assert data["basis"] == {"kind": "dosing", "value": 2.0}

    def test_round_trip_through_dump(self, shaded_item):
        restored = ChemicalRequirement.model_validate(shaded_item.model_dump())
        assert restored == shaded_item
