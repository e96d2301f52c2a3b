import logging
from typing import Any, Optional

from PyQt5.QtCore import QAbstractTableModel, QModelIndex, QObject, Qt

from recgrid.columns import CellWidgetKind, ColumnDefinition
from recgrid.controller import TableState
from recgrid.proxy import ValueProxy
from recgrid.utils import summarize

logger = logging.getLogger(__name__)


class RecordTableModel(QAbstractTableModel):
    """Qt model that exposes a `TableState`.

    The cells are edited through persistent editors, so the model only
    provides the headers, the flags and a textual summary of the values
    (used for tool-tips and for the cells that have no editor open yet).

    Attributes:
        table: The table being shown.
    """

    table: TableState

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.table = TableState()

    def set_table(self, table: TableState) -> None:
        """Replace the table; all the indices become invalid."""
        self.beginResetModel()
        self.table = table
        self.endResetModel()

    def column_at(self, index: int) -> Optional[ColumnDefinition]:
        if 0 <= index < len(self.table.columns):
            return self.table.columns[index]
        return None

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return self.table.row_count

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return self.table.column_count

    def value_proxy(self, index: QModelIndex) -> Optional[ValueProxy]:
        """The live value shown in a cell, if the cell maps to a field."""
        column = self.column_at(index.column())
        if column is None or column.field is None:
            return None
        if not (0 <= index.row() < self.table.row_count):
            return None
        handle = self.table.rows[index.row()]
        return handle.proxy.find_property(column.field.path)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):
        if not index.isValid():
            return None
        column = self.column_at(index.column())
        if column is None or index.row() >= self.table.row_count:
            return None
        handle = self.table.rows[index.row()]

        if role == Qt.ItemDataRole.DisplayRole:
            if column.widget_kind == CellWidgetKind.NAME:
                return handle.name
            if column.widget_kind == CellWidgetKind.IDENTITY:
                return handle.location
            proxy = self.value_proxy(index)
            return summarize(proxy.value) if proxy is not None else None
        if role == Qt.ItemDataRole.ToolTipRole:
            if column.widget_kind in (
                CellWidgetKind.NAME,
                CellWidgetKind.IDENTITY,
            ):
                return handle.location
            proxy = self.value_proxy(index)
            if proxy is not None and proxy.value is not None:
                return str(proxy.value)
        return None

    def headerData(
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> Any:
        if orientation == Qt.Orientation.Vertical:
            if role == Qt.ItemDataRole.DisplayRole:
                return str(section + 1)
            return None

        column = self.column_at(section)
        if column is None:
            return None
        if role == Qt.ItemDataRole.DisplayRole:
            return column.title
        if role == Qt.ItemDataRole.ToolTipRole and column.tooltip:
            return column.tooltip
        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlags:
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsEditable
