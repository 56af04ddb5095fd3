"""
Selection Model Tests

Covers the headless dropdown and the two selection rules:
1. Repopulation yields the sentinel followed by the items, in source order
2. A previous choice survives only while its id is still present
"""

import pytest

from models.reference import ReferenceItem
from refsync.selection import (
    SENTINEL_LABEL,
    SENTINEL_VALUE,
    Option,
    SelectionControl,
    populate_selection,
    reconcile_selection,
)


def items(*ids):
    return [ReferenceItem(id=i, name=f"item {i}") for i in ids]


def name_label(item):
    return item.name


class TestReconcileSelection:
    """Pure selection reconciliation."""

    def test_keeps_value_present_in_new_items(self):
        assert reconcile_selection("2", items(1, 2, 3)) == "2"

    def test_missing_value_reverts_to_sentinel(self):
        assert reconcile_selection("5", items(1, 2, 3)) == SENTINEL_VALUE

    def test_sentinel_stays_sentinel(self):
        assert reconcile_selection(SENTINEL_VALUE, items(1)) == SENTINEL_VALUE
        assert reconcile_selection(None, items(1)) == SENTINEL_VALUE

    def test_compares_ids_by_string_form(self):
        """An integer id matches the string value a control holds."""
        assert reconcile_selection("7", [ReferenceItem(id=7, name="x")]) == "7"
        assert reconcile_selection("7", [ReferenceItem(id="7", name="x")]) == "7"

    def test_empty_items_revert_to_sentinel(self):
        assert reconcile_selection("1", []) == SENTINEL_VALUE

    def test_custom_id_function(self):
        records = [{"code": "A"}, {"code": "B"}]
        assert reconcile_selection("B", records, id_of=lambda r: r["code"]) == "B"


class TestSelectionControl:
    """Headless dropdown behavior."""

    def test_new_control_holds_only_sentinel(self):
        control = SelectionControl("units")
        assert control.options == [Option(SENTINEL_VALUE, SENTINEL_LABEL)]
        assert control.value == SENTINEL_VALUE
        assert not control.has_selection

    def test_select_existing_option(self):
        control = SelectionControl("units")
        populate_selection(control, items(1, 2), label_of=name_label)
        control.select(2)
        assert control.value == "2"
        assert control.selected_option.label == "item 2"

    def test_select_unknown_value_raises(self):
        control = SelectionControl("units")
        populate_selection(control, items(1), label_of=name_label)
        with pytest.raises(ValueError):
            control.select(9)
        assert control.value == SENTINEL_VALUE

    def test_reset_keeps_options(self):
        control = SelectionControl("units")
        populate_selection(control, items(1, 2), label_of=name_label)
        control.select(1)
        control.reset()
        assert control.value == SENTINEL_VALUE
        assert len(control.options) == 3


class TestPopulateSelection:
    """Repopulation of a control from a new item sequence."""

    def test_sentinel_first_then_items_in_order(self):
        control = SelectionControl("ore_types")
        populate_selection(control, items(3, 1, 2), label_of=name_label)
        assert control.values() == ["", "3", "1", "2"]
        assert control.labels() == [SENTINEL_LABEL, "item 3", "item 1", "item 2"]

    def test_duplicates_are_kept(self):
        control = SelectionControl("ore_types")
        populate_selection(control, items(1, 1), label_of=name_label)
        assert control.values() == ["", "1", "1"]

    def test_preserves_selection_when_present(self):
        control = SelectionControl("warehouses")
        populate_selection(control, items(1, 2, 3), label_of=name_label)
        control.select(3)

        selected = populate_selection(control, items(3, 4), label_of=name_label)

        assert selected == "3"
        assert control.value == "3"

    def test_selection_lost_when_id_disappears(self):
        """A control set to 5 falls back to the sentinel when 5 is gone."""
        control = SelectionControl("warehouses")
        populate_selection(control, items(4, 5), label_of=name_label)
        control.select(5)

        populate_selection(control, items(4, 6), label_of=name_label)

        assert control.value == SENTINEL_VALUE
        assert control.selected_option.is_sentinel

    def test_custom_sentinel_label(self):
        control = SelectionControl("units", sentinel_label="Choose a unit")
        populate_selection(control, items(1), label_of=name_label)
        assert control.options[0] == Option(SENTINEL_VALUE, "Choose a unit")

    def test_repeated_population_does_not_accumulate(self):
        control = SelectionControl("units")
        for _ in range(3):
            populate_selection(control, items(1, 2), label_of=name_label)
        assert len(control.options) == 3

    def test_failing_label_leaves_control_unchanged(self):
        control = SelectionControl("units")
        populate_selection(control, items(1, 2), label_of=name_label)
        control.select(2)

        def broken_label(item):
            if item.id == 3:
                raise AttributeError("no name")
            return item.name

        with pytest.raises(AttributeError):
            populate_selection(control, items(1, 3), label_of=broken_label)

        assert control.values() == ["", "1", "2"]
        assert control.value == "2"

    def test_replace_options_rejects_unknown_value(self):
        control = SelectionControl("units")
        with pytest.raises(ValueError):
            control.replace_options([Option(SENTINEL_VALUE, SENTINEL_LABEL)], "4")
        assert control.options == [Option(SENTINEL_VALUE, SENTINEL_LABEL)]
