import enum
import logging
from typing import Any, List, Tuple

from PyQt5.QtWidgets import QComboBox

from recgrid_qt.field_ed.base import GridCellEd

logger = logging.getLogger(__name__)


class ChoiceCellEd(QComboBox, GridCellEd):
    """Base for the editors that select the value from a list.

    Selecting an item commits its data right away. Nullable fields get an
    empty first item that stands for None.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setFrame(False)
        self.populate()
        self.currentIndexChanged.connect(self._on_index_changed)

    def choices(self) -> List[Tuple[Any, str]]:
        """The (value, label) pairs to offer.

        Reimplement this function in subclasses.
        """
        raise NotImplementedError(
            "choices() must be implemented in subclasses."
        )

    def populate(self) -> None:
        """(Re)create the items and select the current value again."""
        self._loading = True
        try:
            current = self.currentData()
            self.clear()
            if self.nullable:
                self.addItem("", None)
            for value, label in self.choices():
                self.addItem(label, value)
            self.setCurrentIndex(self.findData(current))
        finally:
            self._loading = False

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = read_only
        self.setEnabled(not read_only)

    def display_value(self, value: Any) -> None:
        if isinstance(value, enum.Enum):
            value = value.value
        index = self.findData(value)
        if index < 0 and value is not None:
            logger.debug("%r is not one of the choices", value)
            self.addItem(str(value), value)
            index = self.count() - 1
        self.setCurrentIndex(index)

    def _on_index_changed(self, index: int) -> None:
        if index < 0:
            return
        self.commit_from_ui(self.itemData(index))


class EnumCellEd(ChoiceCellEd):
    """Editor for values that come from a fixed set."""

    def choices(self) -> List[Tuple[Any, str]]:
        if self.field is None:
            return []
        return list(self.field.enum_values)


class RefCellEd(ChoiceCellEd):
    """Editor for fields that hold the location of another record.

    The list contains the records of the referenced type; it is refreshed
    each time the popup is shown.
    """

    def choices(self) -> List[Tuple[Any, str]]:
        if self.field is None or not self.field.ref_type_name:
            return []
        store = self.store
        return [
            (location, store.name_of(location))
            for location in store.find_all_of_type(self.field.ref_type_name)
        ]

    def showPopup(self):
        self.populate()
        super().showPopup()
