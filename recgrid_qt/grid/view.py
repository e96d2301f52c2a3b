import logging
from typing import Dict, Optional, Set, Tuple

from PyQt5.QtCore import QTimer, pyqtSignal
from PyQt5.QtWidgets import QAbstractItemView, QHeaderView, QTableView

from recgrid.columns import CellWidgetKind
from recgrid.controller import TableState
from recgrid_qt.grid.delegate import CellDelegate
from recgrid_qt.grid.model import RecordTableModel

logger = logging.getLogger(__name__)

ROW_HEIGHT = 26

# Pixels per line of the multi-line editors and the padding around them.
LINE_HEIGHT = 18
LINE_PADDING = 10


def row_height_for(table: TableState) -> int:
    """The height of the rows; tall enough for the longest text area."""
    lines = [
        c.field.text_lines or 1
        for c in table.columns
        if c.widget_kind == CellWidgetKind.MULTILINE_TEXT and c.field
    ]
    if not lines:
        return ROW_HEIGHT
    return max(ROW_HEIGHT, LINE_HEIGHT * max(lines) + LINE_PADDING)


class RecordTableView(QTableView):
    """Table view that keeps editors open only for the visible rows.

    Each cell of a visible row gets a persistent editor. When the user
    scrolls, the editors of the rows that left the viewport are closed
    (unbinding their elements) and editors are opened for the rows that
    became visible.

    Attributes:
        grid_model: The model with the table.
        delegate: Creates and binds the cell elements.
        open_rows: The rows that have editors open.

    Signals:
        columnResized: The user changed the width of a column; receives
            the key of the column and the new width.
    """

    grid_model: RecordTableModel
    delegate: CellDelegate
    open_rows: Set[int]
    _applying_sizes: bool = False

    columnResized = pyqtSignal(str, int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.grid_model = RecordTableModel(self)
        self.delegate = CellDelegate(self.grid_model, self)
        self.open_rows = set()

        self.setModel(self.grid_model)
        self.setItemDelegate(self.delegate)
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.setAlternatingRowColors(True)
        self.setVerticalScrollMode(QAbstractItemView.ScrollMode.ScrollPerPixel)
        self.setHorizontalScrollMode(
            QAbstractItemView.ScrollMode.ScrollPerPixel
        )
        self.horizontalHeader().setStretchLastSection(True)
        self.verticalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Fixed)

        self.verticalScrollBar().valueChanged.connect(self.sync_editors)
        self.horizontalHeader().sectionResized.connect(self._on_section_resized)

    @property
    def table(self) -> TableState:
        return self.grid_model.table

    def set_table(
        self, table: TableState, widths: Optional[Dict[str, int]] = None
    ) -> None:
        """Show a new table.

        Resetting the model closes all the editors; the editors for the new
        table are opened once the view has laid out the rows.

        Args:
            table: The table to show.
            widths: Widths chosen by the user, by column key; they take
                precedence over the widths of the column definitions.
        """
        self.open_rows = set()
        self.grid_model.set_table(table)
        self.apply_column_sizes(widths or {})

        self.verticalHeader().setDefaultSectionSize(row_height_for(table))

        generation = table.generation
        QTimer.singleShot(0, lambda: self._deferred_sync(generation))

    def _deferred_sync(self, generation: int) -> None:
        if generation != self.table.generation:
            logger.log(1, "Skipping editors of table %d", generation)
            return
        self.sync_editors()

    def apply_column_sizes(self, widths: Dict[str, int]) -> None:
        self._applying_sizes = True
        try:
            self._apply_column_sizes(widths)
        finally:
            self._applying_sizes = False

    def _apply_column_sizes(self, widths: Dict[str, int]) -> None:
        header = self.horizontalHeader()
        for i, column in enumerate(self.table.columns):
            if column.is_fixed:
                header.setSectionResizeMode(i, QHeaderView.ResizeMode.Fixed)
                self.setColumnWidth(i, column.width)
                continue
            header.setSectionResizeMode(i, QHeaderView.ResizeMode.Interactive)
            width = widths.get(column.key, column.width)
            if width is not None:
                self.setColumnWidth(i, width)
            elif column.min_width is not None:
                self.setColumnWidth(
                    i, max(column.min_width, self.sizeHintForColumn(i), 100)
                )

    def _on_section_resized(self, index: int, old: int, new: int) -> None:
        if self._applying_sizes:
            return
        header = self.horizontalHeader()
        if header.stretchLastSection() and index == header.count() - 1:
            # Follows the width of the view, not the user.
            return
        column = self.grid_model.column_at(index)
        if column is not None and not column.is_fixed:
            self.columnResized.emit(column.key, new)

    def visible_rows(self) -> Optional[Tuple[int, int]]:
        """The first and the last row that are (at least partially)
        visible; None if there are no rows."""
        count = self.grid_model.rowCount()
        if count == 0:
            return None
        first = self.rowAt(0)
        if first < 0:
            first = 0
        last = self.rowAt(self.viewport().height() - 1)
        if last < 0:
            last = count - 1
        return first, last

    def sync_editors(self, *args) -> None:
        """Open the editors of the visible rows and close the others."""
        span = self.visible_rows()
        wanted = set() if span is None else set(range(span[0], span[1] + 1))

        for row in sorted(self.open_rows - wanted):
            self._set_row_editors(row, False)
        for row in sorted(wanted - self.open_rows):
            self._set_row_editors(row, True)
        self.open_rows = wanted

    def _set_row_editors(self, row: int, opened: bool) -> None:
        for column in range(self.grid_model.columnCount()):
            index = self.grid_model.index(row, column)
            if opened:
                self.openPersistentEditor(index)
            else:
                self.closePersistentEditor(index)

    def resizeEvent(self, e):
        super().resizeEvent(e)
        self.sync_editors()
