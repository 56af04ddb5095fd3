"""Stock status and report tests."""

from models.records import EquipmentItem, OreBatch, Sale
from models.reference import ReferenceSet
from refsync.reports import (
    STATUS_CRITICAL,
    STATUS_IN_STOCK,
    build_stock_report,
    stock_rows,
    stock_status,
)


REFS = ReferenceSet.model_validate({
    "ore_types": [{"id": 1, "name": "Magnetite"}],
    "warehouses": [{"id": 2, "name": "Plant 1"}],
    "equipment_categories": [{"id": 3, "name": "Drills"}],
})


def test_stock_status_threshold():
    assert stock_status(99.9) == STATUS_CRITICAL
    assert stock_status(100) == STATUS_IN_STOCK


def test_stock_rows_resolve_names():
    rows = stock_rows(
        [OreBatch(id=1, ore_type_id=1, warehouse_id=2, quantity=50), OreBatch(id=2, ore_type_id=9, warehouse_id=2, quantity=500)],
        REFS,
    )

    assert [(r.ore_type, r.warehouse, r.critical) for r in rows] == [
        ("Magnetite", "Plant 1", True),
        ("9", "Plant 1", False),
    ]


def test_build_stock_report():
    report = build_stock_report(
        sales=[Sale(id=1, ore_type="Iron", quantity=100), Sale(id=2, ore_type="Iron", quantity=50)],
        batches=[OreBatch(id=1, quantity=400), OreBatch(id=2, quantity=25.5)],
        equipment=[EquipmentItem(id=1, name="Excavator", quantity=2), EquipmentItem(id=2, category_id=3, quantity=5)],
        period="October 2025",
        refs=REFS,
    )

    assert report.period == "October 2025"
    assert report.total_sold == 150
    assert report.total_available == 425.5
    assert report.inventory == "Excavator: 2, Drills: 5"


def test_empty_report():
    report = build_stock_report([], [], [], period="October 2025")
    assert (report.total_sold, report.total_available, report.inventory) == (0, 0, "")
