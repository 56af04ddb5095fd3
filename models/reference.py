"""Reference data models.

Reference items are lookup entities (units, warehouses, ore types...) that
transactional records point at by id. The backend sends all categories in a
single payload and the client replaces its copy wholesale on every refresh.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReferenceCategory(str, Enum):
    """Categories of the reference data payload."""
    UNITS = "units"
    WAREHOUSES = "warehouses"
    ORE_TYPES = "ore_types"
    EQUIPMENT_CATEGORIES = "equipment_categories"
    CONTRACTORS = "contractors"
    TRANSPORT = "transport"


class ReferenceItem(BaseModel):
    """A lookup entity identified by id.

    Attributes:
        id: Backend identifier, referenced by transactional records
        name: Display name
        symbol: Unit symbol (units only, e.g. "t")
        location: Warehouse location (warehouses only)
        type: Contractor or transport type
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Union[int, str] = Field(..., description="Backend identifier")
    name: str = Field(..., description="Display name")
    symbol: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None


class ReferenceSet(BaseModel):
    """All reference categories, fetched atomically as one payload.

    A category that is missing from the payload or sent as null is empty.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    units: List[ReferenceItem] = Field(default_factory=list)
    warehouses: List[ReferenceItem] = Field(default_factory=list)
    ore_types: List[ReferenceItem] = Field(default_factory=list)
    equipment_categories: List[ReferenceItem] = Field(default_factory=list)
    contractors: List[ReferenceItem] = Field(default_factory=list)
    transport: List[ReferenceItem] = Field(default_factory=list)

    @field_validator(
        "units", "warehouses", "ore_types", "equipment_categories", "contractors", "transport",
        mode="before",
    )
    @classmethod
    def _null_is_empty(cls, value):
        return [] if value is None else value

    def items_for(self, category: Union[ReferenceCategory, str]) -> List[ReferenceItem]:
        """Return the ordered items of a category."""
        return getattr(self, ReferenceCategory(category).value)

    def find(self, category: Union[ReferenceCategory, str], item_id) -> Optional[ReferenceItem]:
        """Look up an item by id, comparing ids by their string form."""
        wanted = str(item_id)
        for item in self.items_for(category):
            if str(item.id) == wanted:
                return item
        return None
