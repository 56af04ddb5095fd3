"""Stock status and the monthly stock report."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from models.records import EquipmentItem, OreBatch, Sale
from models.reference import ReferenceCategory, ReferenceSet
from refsync.labels import format_quantity

CRITICAL_STOCK_LEVEL = 100

STATUS_CRITICAL = "Critical level"
STATUS_IN_STOCK = "In stock"


def is_critical(quantity: float) -> bool:
    return quantity < CRITICAL_STOCK_LEVEL


def stock_status(quantity: float) -> str:
    return STATUS_CRITICAL if is_critical(quantity) else STATUS_IN_STOCK


@dataclass
class StockRow:
    ore_type: str
    warehouse: str
    quantity: float
    status: str
    critical: bool


@dataclass
class StockReportRow:
    period: str
    total_sold: float
    total_available: float
    inventory: str


def stock_rows(batches: Iterable[OreBatch], refs: ReferenceSet) -> List[StockRow]:
    """One row per ore batch with names resolved through the reference set."""
    rows = []
    for batch in batches:
        ore_type = refs.find(ReferenceCategory.ORE_TYPES, batch.ore_type_id)
        warehouse = refs.find(ReferenceCategory.WAREHOUSES, batch.warehouse_id)
        rows.append(StockRow(
            ore_type=ore_type.name if ore_type else str(batch.ore_type_id),
            warehouse=warehouse.name if warehouse else str(batch.warehouse_id),
            quantity=batch.quantity,
            status=stock_status(batch.quantity),
            critical=is_critical(batch.quantity),
        ))
    return rows


def build_stock_report(
    sales: Iterable[Sale],
    batches: Iterable[OreBatch],
    equipment: Iterable[EquipmentItem],
    period: str,
    refs: Optional[ReferenceSet] = None,
) -> StockReportRow:
    """Totals for the report page.

    The inventory column lists equipment as "name: quantity", falling back
    to the category name when an item has none.
    """
    refs = refs or ReferenceSet()

    inventory = []
    for item in equipment:
        name = item.name
        if not name:
            category = refs.find(ReferenceCategory.EQUIPMENT_CATEGORIES, item.category_id)
            name = category.name if category else f"#{item.id}"
        inventory.append(f"{name}: {format_quantity(item.quantity)}")

    return StockReportRow(
        period=period,
        total_sold=sum(sale.quantity for sale in sales),
        total_available=sum(batch.quantity for batch in batches),
        inventory=", ".join(inventory),
    )
