"""Transactional record models.

Records reference ReferenceItems by id and carry quantities and statuses.
They are created through form submission and always re-fetched in full
after a mutation.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union, List, Dict, Type

from pydantic import BaseModel, ConfigDict, Field


RecordId = Union[int, str]


class TransactionalCollection(str, Enum):
    """Lists the client keeps in memory, one endpoint each."""
    ORE_BATCHES = "ore_batches"
    EQUIPMENT = "equipment"
    ORDERS = "orders"
    SHIPMENTS = "shipments"
    LOGS = "logs"
    SALES = "sales"


class RecordBase(BaseModel):
    """Base class for payloads read from the backend."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OreBatch(RecordBase):
    """A batch of ore stored in a warehouse."""
    id: RecordId
    ore_type_id: Optional[RecordId] = None
    warehouse_id: Optional[RecordId] = None
    unit_id: Optional[RecordId] = None
    quantity: float = 0.0
    quality: Optional[float] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class EquipmentItem(RecordBase):
    """A piece of equipment or a tool set."""
    id: RecordId
    category_id: Optional[RecordId] = None
    warehouse_id: Optional[RecordId] = None
    name: Optional[str] = None
    quantity: int = 0
    serial_number: Optional[str] = None
    service_life: Optional[int] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class OrderLine(RecordBase):
    """One ore batch line of an order."""
    ore_batch_id: RecordId
    quantity: float


class Order(RecordBase):
    """A contractor order made of ore batch lines."""
    id: RecordId
    contractor_id: Optional[RecordId] = None
    status: Optional[str] = None
    lines: List[OrderLine] = Field(default_factory=list)
    created_at: Optional[str] = None


class Shipment(RecordBase):
    """Transport of an order."""
    id: RecordId
    order_id: Optional[RecordId] = None
    transport_id: Optional[RecordId] = None
    quantity: Optional[float] = None
    status: Optional[str] = None
    shipped_at: Optional[str] = None


class LogEntry(RecordBase):
    """Activity log line."""
    date: str
    user: str
    action: str


class Sale(RecordBase):
    """Legacy sale (write-off) record."""
    id: RecordId
    ore_type: str
    buyer: Optional[str] = None
    quantity: float = 0.0
    status: Optional[str] = None
    created_at: Optional[str] = None


COLLECTION_MODELS: Dict[TransactionalCollection, Type[RecordBase]] = {
    TransactionalCollection.ORE_BATCHES: OreBatch,
    TransactionalCollection.EQUIPMENT: EquipmentItem,
    TransactionalCollection.ORDERS: Order,
    TransactionalCollection.SHIPMENTS: Shipment,
    TransactionalCollection.LOGS: LogEntry,
    TransactionalCollection.SALES: Sale,
}
