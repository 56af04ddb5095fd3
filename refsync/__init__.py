"""Reference synchronization for the warehouse dashboard.

Keeps reference data, transactional lists and the selection controls bound
to them consistent as the backend is reloaded.
"""

from refsync.selection import (
    SENTINEL_VALUE,
    SENTINEL_LABEL,
    Option,
    SelectionControl,
    reconcile_selection,
    populate_selection,
)
from refsync.context import SyncContext, Binding, OrderLineRow
from refsync.synchronizer import ReferenceSynchronizer
from refsync.forms import (
    FormState,
    FormSubmitter,
    Notifier,
    LoggingNotifier,
    MissingFieldsError,
)
from refsync.reports import stock_status, stock_rows, build_stock_report

__all__ = [
    # Selection
    "SENTINEL_VALUE",
    "SENTINEL_LABEL",
    "Option",
    "SelectionControl",
    "reconcile_selection",
    "populate_selection",
    # State
    "SyncContext",
    "Binding",
    "OrderLineRow",
    "ReferenceSynchronizer",
    # Forms
    "FormState",
    "FormSubmitter",
    "Notifier",
    "LoggingNotifier",
    "MissingFieldsError",
    # Reports
    "stock_status",
    "stock_rows",
    "build_stock_report",
]
