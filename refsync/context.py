"""Synchronization context.

SyncContext owns everything the dashboard keeps in memory: the current
reference set, the current transactional lists, the controls bound to them
and the dynamically added order line rows. It starts empty and every
refresh replaces a collection wholesale.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from models.records import TransactionalCollection
from models.reference import ReferenceCategory, ReferenceSet
from refsync.labels import default_label_for
from refsync.selection import SelectionControl, default_id_of, populate_selection

Source = Union[ReferenceCategory, TransactionalCollection]


def resolve_source(source: Union[Source, str]) -> Source:
    """Turn a category or collection name into its enum."""
    if isinstance(source, (ReferenceCategory, TransactionalCollection)):
        return source
    try:
        return ReferenceCategory(source)
    except ValueError:
        pass
    try:
        return TransactionalCollection(source)
    except ValueError:
        raise ValueError(f"Unknown reference category or collection: {source!r}") from None


@dataclass
class Binding:
    """A control fed from one source."""
    control: SelectionControl
    source: Source
    id_of: Callable[[Any], Any]
    label_of: Callable[[Any], str]


class OrderLineRow:
    """A dynamically added order line with its own ore batch selector."""

    def __init__(self, row_id: int):
        self.row_id = row_id
        self.selector = SelectionControl(f"order_line_{row_id}.ore_batch")
        self.quantity: str = ""

    def __repr__(self) -> str:
        return f"OrderLineRow({self.row_id}, batch={self.selector.value!r}, quantity={self.quantity!r})"


class SyncContext:
    """In-memory state shared by the synchronizer and the forms."""

    def __init__(self):
        self.reference_set = ReferenceSet()
        self.collections: Dict[TransactionalCollection, List[Any]] = {
            collection: [] for collection in TransactionalCollection
        }
        self.rows: List[OrderLineRow] = []
        self._bindings: List[Binding] = []
        self._next_row_id = 1

    # =========================================================================
    # State
    # =========================================================================

    def items_for(self, source: Union[Source, str]) -> List[Any]:
        source = resolve_source(source)
        if isinstance(source, ReferenceCategory):
            return self.reference_set.items_for(source)
        return self.collections[source]

    def replace_reference_set(self, reference_set: ReferenceSet) -> None:
        self.reference_set = reference_set

    def replace_collection(self, collection: Union[TransactionalCollection, str], items: List[Any]) -> None:
        self.collections[TransactionalCollection(collection)] = list(items)

    # =========================================================================
    # Bindings
    # =========================================================================

    def bind(
        self,
        control: SelectionControl,
        source: Union[Source, str],
        id_of: Optional[Callable[[Any], Any]] = None,
        label_of: Optional[Callable[[Any], str]] = None,
    ) -> Binding:
        """Feed a control from a source and populate it right away."""
        source = resolve_source(source)
        if source == TransactionalCollection.LOGS and id_of is None:
            raise ValueError("Log entries have no id; pass id_of to bind them")

        binding = Binding(
            control=control,
            source=source,
            id_of=id_of or default_id_of,
            label_of=label_of or default_label_for(source, lambda: self.reference_set),
        )
        self._bindings.append(binding)
        self.populate(binding)
        return binding

    def unbind(self, control: SelectionControl) -> None:
        self._bindings = [b for b in self._bindings if b.control is not control]

    def bindings_for(self, source: Union[Source, str]) -> List[Binding]:
        source = resolve_source(source)
        return [b for b in self._bindings if b.source == source]

    @property
    def bindings(self) -> List[Binding]:
        return list(self._bindings)

    def populate(self, binding: Binding) -> str:
        return populate_selection(
            binding.control,
            self.items_for(binding.source),
            binding.id_of,
            binding.label_of,
        )

    def repopulate(self, source: Union[Source, str]) -> int:
        """Repopulate every control bound to a source; returns how many."""
        bindings = self.bindings_for(source)
        for binding in bindings:
            self.populate(binding)
        return len(bindings)

    def repopulate_all(self) -> int:
        for binding in self._bindings:
            self.populate(binding)
        return len(self._bindings)

    # =========================================================================
    # Dependent rows
    # =========================================================================

    def ore_batch_label(self) -> Callable[[Any], str]:
        return default_label_for(TransactionalCollection.ORE_BATCHES, lambda: self.reference_set)

    def populate_row(self, row: OrderLineRow) -> str:
        return populate_selection(
            row.selector,
            self.collections[TransactionalCollection.ORE_BATCHES],
            default_id_of,
            self.ore_batch_label(),
        )

    def add_dependent_row(self) -> OrderLineRow:
        """Add an order line row populated from the current ore batches."""
        row = OrderLineRow(self._next_row_id)
        self._next_row_id += 1
        self.populate_row(row)
        self.rows.append(row)
        return row

    def remove_dependent_row(self, row: OrderLineRow) -> None:
        self.rows = [r for r in self.rows if r is not row]

    def clear_dependent_rows(self) -> None:
        self.rows = []
