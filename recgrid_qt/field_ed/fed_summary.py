from typing import Any, List, Tuple

from PyQt5.QtWidgets import QLabel, QMenu, QToolButton

from recgrid.cells import ActionsCell
from recgrid.utils import summarize
from recgrid_qt.field_ed.base import GridCellEd


class SummaryCellEd(QLabel, GridCellEd):
    """Read-only presentation of a value.

    Used for the location of the records and for the fields that can not be
    edited in a cell (lists, nested records).
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setMargin(2)
        self._read_only = True

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = True

    def display_value(self, value: Any) -> None:
        self.setText(summarize(value))
        self.setToolTip("" if value is None else str(value))


class ActionsCellEd(QToolButton, GridCellEd, ActionsCell):
    """The button in the first column; opens a menu with the row actions."""

    menu_actions: QMenu

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setText("⋮")
        self.setAutoRaise(True)
        self.setPopupMode(QToolButton.ToolButtonPopupMode.InstantPopup)
        self.menu_actions = QMenu(self)
        self.setMenu(self.menu_actions)

    def set_actions(self, actions: List[Tuple[str, str]]) -> None:
        super().set_actions(actions)
        self.menu_actions.clear()
        for key, label in self.actions:
            action = self.menu_actions.addAction(label)
            action.triggered.connect(
                lambda _checked=False, k=key: self.trigger(k)
            )

    def display_value(self, value: Any) -> None:
        return
