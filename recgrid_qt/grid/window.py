import logging
from typing import TYPE_CHECKING, Optional

from PyQt5.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from recgrid.controller import GridController, GridState, TableState
from recgrid.utils import count_label
from recgrid_qt.context_use import QtUseContext
from recgrid_qt.field_ed.factory import QtCellFactory
from recgrid_qt.grid.view import RecordTableView

if TYPE_CHECKING:
    from recgrid.events import Subscription
    from recgrid_qt.context import QtGridContext

logger = logging.getLogger(__name__)


class RecordGridWidget(QWidget, QtUseContext):
    """The panel that edits all the records of the selected type.

    The panel has a status line, the grid and a button that creates a new
    record of the current type. The button is only visible while a type is
    active.

    Attributes:
        controller: Decides what the grid shows.
        view: The grid.
        lbl_status: The status line.
        btn_create: Creates a new record.
    """

    controller: GridController
    view: RecordTableView
    lbl_status: QLabel
    btn_create: QPushButton
    _table_sub: Optional["Subscription"]

    def __init__(self, ctx: "QtGridContext", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.ctx = ctx
        self.controller = GridController(
            store=ctx.store,
            host=ctx,
            cells=QtCellFactory(ctx),
            sort_rows=ctx.stg.sort_rows,
            show_identity=ctx.stg.show_identity,
        )

        self.lbl_status = QLabel(self)
        self.lbl_status.setWordWrap(True)

        self.view = RecordTableView(self)
        self.view.columnResized.connect(self.on_column_resized)

        self.btn_create = QPushButton(
            self.t("recgrid.grid.create", "Create New"), self
        )
        self.btn_create.clicked.connect(self.on_create)

        ly_bottom = QHBoxLayout()
        ly_bottom.addStretch(1)
        ly_bottom.addWidget(self.btn_create)

        ly = QVBoxLayout()
        ly.setContentsMargins(2, 2, 2, 2)
        ly.addWidget(self.lbl_status)
        ly.addWidget(self.view, 1)
        ly.addLayout(ly_bottom)
        self.setLayout(ly)

        self._table_sub = self.controller.on_table_changed.connect(
            self.on_table_changed
        )
        self.show_table(self.controller.table)
        self.controller.open()

    def show_table(self, table: TableState) -> None:
        """Update the widgets for a new table."""
        widths = {}
        if table.record_type is not None:
            widths = self.ctx.stg.column_widths(table.record_type.__name__)
        self.view.set_table(table, widths)

        if table.state == GridState.EMPTY:
            self.lbl_status.setText(
                self.t(
                    "recgrid.grid.no-selection",
                    "Select a record to edit all the records of its type.",
                )
            )
            self.btn_create.setVisible(False)
            self.view.setVisible(False)
            return

        assert table.record_type is not None
        self.lbl_status.setText(
            self.t(
                "recgrid.grid.status",
                "{count} of type {name}",
                count=count_label(table.row_count, table.record_type.__name__),
                name=table.record_type.__name__,
            )
        )
        self.btn_create.setVisible(True)
        self.view.setVisible(True)

    def on_table_changed(self, table: TableState) -> None:
        self.show_table(table)

    def on_create(self) -> None:
        self.controller.create_new()

    def on_column_resized(self, key: str, width: int) -> None:
        record_type = self.controller.current_type
        if record_type is None:
            return
        self.ctx.stg.set_column_width(record_type.__name__, key, width)

    def close_grid(self) -> None:
        """Stop following the selection and the store."""
        if self._table_sub is not None:
            self._table_sub.release()
            self._table_sub = None
        self.controller.close()

    def closeEvent(self, e):
        self.close_grid()
        super().closeEvent(e)
