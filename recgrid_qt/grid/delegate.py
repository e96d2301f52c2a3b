import logging
from typing import TYPE_CHECKING, Optional

from PyQt5.QtWidgets import QStyledItemDelegate

from recgrid.cells import CellElement

if TYPE_CHECKING:
    from PyQt5.QtCore import QModelIndex
    from PyQt5.QtWidgets import QStyleOptionViewItem, QWidget

    from recgrid.columns import ColumnDefinition
    from recgrid_qt.grid.model import RecordTableModel

logger = logging.getLogger(__name__)


class CellDelegate(QStyledItemDelegate):
    """Creates the cell elements and binds them to the rows.

    The view opens the editors; the delegate asks the column definition to
    create the element, to bind it to the row of the index and to unbind it
    when the editor is closed. The elements write their values themselves,
    so `setModelData()` does nothing.
    """

    def __init__(self, model: "RecordTableModel", parent=None):
        super().__init__(parent)
        self.grid_model = model

    def column_for(self, index: "QModelIndex") -> Optional["ColumnDefinition"]:
        return self.grid_model.column_at(index.column())

    def createEditor(
        self,
        parent: "QWidget",
        option: "QStyleOptionViewItem",
        index: "QModelIndex",
    ):
        column = self.column_for(index)
        if column is None:
            return None
        editor = column.make_cell(parent)
        # Remember the column; the table may be replaced before the editor
        # is destroyed.
        editor.grid_column = column  # type: ignore[attr-defined]
        return editor

    def setEditorData(self, editor: "QWidget", index: "QModelIndex"):
        column = getattr(editor, "grid_column", None)
        if column is None or not isinstance(editor, CellElement):
            return
        column.bind_cell(editor, index.row())

    def setModelData(self, editor, model, index):
        return

    def updateEditorGeometry(self, editor, option, index):
        editor.setGeometry(option.rect)

    def destroyEditor(self, editor: "QWidget", index: "QModelIndex"):
        column = getattr(editor, "grid_column", None)
        if column is not None and isinstance(editor, CellElement):
            column.unbind_cell(editor)
        super().destroyEditor(editor, index)
