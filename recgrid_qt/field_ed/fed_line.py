from typing import Any

from PyQt5.QtWidgets import QLineEdit

from recgrid_qt.field_ed.base import GridCellEd


class LineCellEd(QLineEdit, GridCellEd):
    """Editor for short strings.

    The value is committed when the user presses enter or when the editor
    loses the focus.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setFrame(False)
        if self.field is not None and self.field.max_length:
            self.setMaxLength(self.field.max_length)
        self.editingFinished.connect(self.on_editing_finished)

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = read_only
        self.setReadOnly(read_only)

    def display_value(self, value: Any) -> None:
        self.setText("" if value is None else str(value))
        self.setCursorPosition(0)

    def text_value(self) -> Any:
        """The value in the editor; empty text is None for nullable fields."""
        text = self.text()
        if not text and self.nullable:
            return None
        return text

    def on_editing_finished(self) -> None:
        self.commit_from_ui(self.text_value())


class NameCellEd(LineCellEd):
    """Editor for the name of the record; changing it renames the record."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setToolTip(
            self.t(
                "recgrid.grid.name.tip",
                "The name of the record; press enter to rename it",
            )
        )
