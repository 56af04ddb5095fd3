"""Models Package.

Data models for the warehouse dashboard client:
- Reference data (units, warehouses, ore types...)
- Transactional records (ore batches, equipment, orders, shipments)
- Mutation responses
"""

from models.reference import (
    ReferenceCategory,
    ReferenceItem,
    ReferenceSet,
)

from models.records import (
    TransactionalCollection,
    OreBatch,
    EquipmentItem,
    Order,
    OrderLine,
    Shipment,
    LogEntry,
    Sale,
    COLLECTION_MODELS,
)

from models.api_responses import MutationResult

__all__ = [
    # Reference models
    "ReferenceCategory",
    "ReferenceItem",
    "ReferenceSet",

    # Transactional models
    "TransactionalCollection",
    "OreBatch",
    "EquipmentItem",
    "Order",
    "OrderLine",
    "Shipment",
    "LogEntry",
    "Sale",
    "COLLECTION_MODELS",

    # Responses
    "MutationResult",
]
