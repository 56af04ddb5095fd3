"""Display labels for options built from reference items and records."""

from typing import Any, Callable, Optional

from models.records import TransactionalCollection
from models.reference import ReferenceCategory, ReferenceItem, ReferenceSet


def format_quantity(quantity: Optional[float]) -> str:
    if quantity is None:
        return "?"
    if float(quantity).is_integer():
        return str(int(quantity))
    return str(quantity)


def _with_suffix(name: str, suffix: Optional[str]) -> str:
    return f"{name} ({suffix})" if suffix else name


def reference_label(category: ReferenceCategory, item: ReferenceItem) -> str:
    if category == ReferenceCategory.UNITS:
        return _with_suffix(item.name, item.symbol)
    if category == ReferenceCategory.WAREHOUSES:
        return _with_suffix(item.name, item.location)
    if category == ReferenceCategory.CONTRACTORS:
        return _with_suffix(item.name, item.type)
    return item.name


def ore_batch_label(batch: Any, refs: ReferenceSet) -> str:
    ore_type = refs.find(ReferenceCategory.ORE_TYPES, batch.ore_type_id)
    unit = refs.find(ReferenceCategory.UNITS, batch.unit_id)
    ore_name = ore_type.name if ore_type else f"ore type {batch.ore_type_id}"
    label = f"#{batch.id} {ore_name} {format_quantity(batch.quantity)}"
    if unit and unit.symbol:
        label += f" {unit.symbol}"
    return label


def record_label(collection: TransactionalCollection, record: Any, refs: ReferenceSet) -> str:
    if collection == TransactionalCollection.ORE_BATCHES:
        return ore_batch_label(record, refs)
    if collection == TransactionalCollection.EQUIPMENT:
        return _with_suffix(record.name or f"Equipment #{record.id}", record.serial_number)
    if collection == TransactionalCollection.ORDERS:
        return _with_suffix(f"Order #{record.id}", record.status)
    if collection == TransactionalCollection.SHIPMENTS:
        return _with_suffix(f"Shipment #{record.id}", record.status)
    if collection == TransactionalCollection.SALES:
        return f"#{record.id} {record.ore_type} {format_quantity(record.quantity)}"
    if collection == TransactionalCollection.LOGS:
        return f"{record.date} {record.user}: {record.action}"
    raise ValueError(f"{collection.value} records have no option label")


def default_label_for(source, refs_getter: Callable[[], ReferenceSet]) -> Callable[[Any], str]:
    """Label function for a source.

    Record labels resolve reference names through refs_getter at call time,
    so they always use the reference set current at repopulation.
    """
    if isinstance(source, ReferenceCategory):
        return lambda item: reference_label(source, item)
    return lambda record: record_label(source, record, refs_getter())
