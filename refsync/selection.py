"""Selection controls and selection reconciliation.

A SelectionControl is a headless dropdown: an ordered list of options whose
first entry is always the "none selected" sentinel, plus the currently
selected value. Values are strings, the way a browser <select> holds them,
so an id of 5 and a previous value of "5" are the same selection.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence

SENTINEL_VALUE = ""
SENTINEL_LABEL = "Not selected"


def option_value(item_id: Any) -> str:
    """String form of an id as stored in a control."""
    return SENTINEL_VALUE if item_id is None else str(item_id)


def default_id_of(item: Any) -> Any:
    return item.id


@dataclass(frozen=True)
class Option:
    value: str
    label: str

    @property
    def is_sentinel(self) -> bool:
        return self.value == SENTINEL_VALUE


class SelectionControl:
    """A dropdown bound to a collection.

    The user picks with select(); repopulation goes through
    populate_selection(), which is the only place options change.
    """

    def __init__(self, name: str, sentinel_label: str = SENTINEL_LABEL):
        self.name = name
        self.sentinel_label = sentinel_label
        self._options: List[Option] = [Option(SENTINEL_VALUE, sentinel_label)]
        self._value: str = SENTINEL_VALUE

    def __repr__(self) -> str:
        return f"SelectionControl({self.name!r}, value={self._value!r}, options={len(self._options)})"

    @property
    def options(self) -> List[Option]:
        return list(self._options)

    @property
    def value(self) -> str:
        return self._value

    @property
    def selected_option(self) -> Option:
        for option in self._options:
            if option.value == self._value:
                return option
        return self._options[0]

    @property
    def has_selection(self) -> bool:
        return self._value != SENTINEL_VALUE

    def values(self) -> List[str]:
        return [option.value for option in self._options]

    def labels(self) -> List[str]:
        return [option.label for option in self._options]

    def select(self, value: Any) -> None:
        """Choose an option by value, as a user would.

        Raises:
            ValueError: No option carries this value
        """
        wanted = option_value(value)
        if wanted not in self.values():
            raise ValueError(f"{self.name}: no option with value {wanted!r}")
        self._value = wanted

    def reset(self) -> None:
        """Go back to the sentinel, keeping the options."""
        self._value = SENTINEL_VALUE

    def replace_options(self, options: Sequence[Option], value: str) -> None:
        """Swap in a complete option list and its selected value.

        Raises:
            ValueError: The value is not among the options
        """
        options = list(options)
        if value not in [option.value for option in options]:
            raise ValueError(f"{self.name}: no option with value {value!r}")
        self._options = options
        self._value = value


def reconcile_selection(
    previous_value: Optional[str],
    new_items: Iterable[Any],
    id_of: Callable[[Any], Any] = default_id_of,
) -> str:
    """Selected value after the items behind a control were replaced.

    The previous value survives only if some new item carries it; anything
    else, including a previous sentinel, yields the sentinel.
    """
    if not previous_value:
        return SENTINEL_VALUE
    for item in new_items:
        if option_value(id_of(item)) == previous_value:
            return previous_value
    return SENTINEL_VALUE


def populate_selection(
    control: SelectionControl,
    items: Sequence[Any],
    id_of: Callable[[Any], Any] = default_id_of,
    label_of: Callable[[Any], str] = str,
) -> str:
    """Replace a control's options with the sentinel followed by items.

    Items keep their source order and duplicates are not collapsed. The
    previous choice is re-selected by value; if it is gone the control
    falls back to the sentinel. Labels are computed before the control is
    touched, so a failing label_of leaves it as it was.

    Returns:
        The value selected after repopulation
    """
    options = [Option(SENTINEL_VALUE, control.sentinel_label)]
    options.extend(Option(option_value(id_of(item)), label_of(item)) for item in items)
    control.replace_options(options, reconcile_selection(control.value, items, id_of))
    return control.value
