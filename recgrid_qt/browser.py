import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QTreeWidget, QTreeWidgetItem, QWidget

from recgrid_qt.context_use import QtUseContext

if TYPE_CHECKING:
    from recgrid.events import Subscription
    from recgrid_qt.context import QtGridContext

logger = logging.getLogger(__name__)

LOCATION_ROLE = Qt.ItemDataRole.UserRole + 1


class StoreBrowser(QTreeWidget, QtUseContext):
    """Shows the records in the store, grouped by directory.

    Clicking a record makes it the selection of the application; clicking
    a directory clears the selection. The tree is rebuilt each time the
    store changes.
    """

    _subs: List["Subscription"]
    _items: Dict[str, QTreeWidgetItem]

    def __init__(self, ctx: "QtGridContext", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.ctx = ctx
        self._items = {}
        self.setColumnCount(2)
        self.setHeaderLabels(
            [
                self.t("recgrid.browser.name", "Name"),
                self.t("recgrid.browser.type", "Type"),
            ]
        )
        self.itemClicked.connect(self.on_item_clicked)

        self._subs = [
            ctx.store.subscribe(self.populate),
            ctx.on_selection_changed.connect(self.on_selection_changed),
        ]
        self.populate()

    def populate(self) -> None:
        """Rebuild the tree from the store."""
        store = self.store
        self.clear()
        self._items = {}
        dirs: Dict[str, Any] = {"": self.invisibleRootItem()}

        def dir_item(directory: str) -> QTreeWidgetItem:
            item = dirs.get(directory)
            if item is None:
                parent = dir_item(store.directory_of(directory))
                name = directory.rsplit("/", 1)[-1]
                item = QTreeWidgetItem(parent, [name, ""])
                item.setExpanded(True)
                dirs[directory] = item
            return item

        for location in store.locations():
            record = store.load_at(location)
            type_name = type(record).__name__ if record is not None else "?"
            item = QTreeWidgetItem(
                dir_item(store.directory_of(location)),
                [store.name_of(location), type_name],
            )
            item.setData(0, LOCATION_ROLE, location)
            item.setToolTip(0, location)
            self._items[location] = item

        self.expandAll()
        self.on_selection_changed(self.ctx.current_selection)

    def on_item_clicked(self, item: QTreeWidgetItem, column: int) -> None:
        location = item.data(0, LOCATION_ROLE)
        if not location:
            self.select_record(None)
            return
        self.select_record(self.store.load_at(location))

    def on_selection_changed(self, target: Any) -> None:
        """Highlight the selected record."""
        location = None
        if target is not None:
            location = self.store.location_of(target)
        item = self._items.get(location) if location else None
        self.blockSignals(True)
        try:
            self.setCurrentItem(item)  # type: ignore[arg-type]
        finally:
            self.blockSignals(False)

    def release(self) -> None:
        """Stop following the store and the selection."""
        for sub in self._subs:
            sub.release()
        self._subs = []
