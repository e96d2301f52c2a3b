from typing import Any

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QCheckBox

from recgrid_qt.field_ed.base import GridCellEd


class BoolCellEd(QCheckBox, GridCellEd):
    """Editor for boolean values.

    For nullable fields the control is tri-state and the partially checked
    state means None. Each click is committed right away.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setTristate(self.nullable)
        self.stateChanged.connect(self._on_check_state_changed)

    def display_value(self, value: Any) -> None:
        if value is None:
            self.setCheckState(
                Qt.CheckState.PartiallyChecked
                if self.nullable
                else Qt.CheckState.Unchecked
            )
        else:
            self.setCheckState(
                Qt.CheckState.Checked if value else Qt.CheckState.Unchecked
            )

    def _on_check_state_changed(self, state: int) -> None:
        if state == Qt.CheckState.PartiallyChecked:
            self.commit_from_ui(None)
        else:
            self.commit_from_ui(state == Qt.CheckState.Checked)
