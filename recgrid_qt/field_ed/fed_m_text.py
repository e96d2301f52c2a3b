from typing import Any

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QFrame, QPlainTextEdit

from recgrid_qt.field_ed.base import GridCellEd


class MultiTextCellEd(QPlainTextEdit, GridCellEd):
    """Editor for long-form strings.

    The value is committed when the editor loses the focus or when the user
    presses Ctrl+Enter.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setTabChangesFocus(True)

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = read_only
        self.setReadOnly(read_only)

    def display_value(self, value: Any) -> None:
        self.setPlainText("" if value is None else str(value))

    def text_value(self) -> Any:
        text = self.toPlainText()
        if not text and self.nullable:
            return None
        return text

    def focusOutEvent(self, e):
        self.commit_from_ui(self.text_value())
        super().focusOutEvent(e)

    def keyPressEvent(self, e):
        if e.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter) and (
            e.modifiers() & Qt.KeyboardModifier.ControlModifier
        ):
            self.commit_from_ui(self.text_value())
            return
        super().keyPressEvent(e)
