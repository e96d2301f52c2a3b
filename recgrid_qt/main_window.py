import logging
from typing import TYPE_CHECKING, Dict, Optional, Type

from PyQt5.QtCore import QFileSystemWatcher, Qt, QTimer
from PyQt5.QtWidgets import QAction, QApplication, QMainWindow, QSplitter

from recgrid.errors import StoreOperationError
from recgrid.lifecycle import LifecycleOperations
from recgrid.loader import RecordHandle
from recgrid.record import Record, creatable_types
from recgrid.utils import nicify_name
from recgrid_qt.browser import StoreBrowser
from recgrid_qt.context import QtGridContext
from recgrid_qt.grid.window import RecordGridWidget

if TYPE_CHECKING:
    from recgrid.settings import LocalSettings
    from recgrid.yaml_store import DirectoryStore

logger = logging.getLogger(__name__)

# Milliseconds to wait after a file system notification before rescanning.
REFRESH_DELAY = 300


class MainWindow(QMainWindow):
    """Main window for the application.

    The store browser is on the left, the grid on the right. Changes made
    to the store directory by other programs are picked up by a file system
    watcher.
    """

    ctx: QtGridContext
    store: "DirectoryStore"
    browser: StoreBrowser
    grid: RecordGridWidget
    watcher: QFileSystemWatcher
    lifecycle: LifecycleOperations
    new_actions: Dict[Type[Record], QAction]
    shutting_down: bool = False

    def __init__(
        self,
        store: "DirectoryStore",
        stg: "LocalSettings",
        parent=None,
    ):
        super().__init__(parent)
        self.store = store
        self.ctx = QtGridContext(store=store, stg=stg, top_widget=self)
        self.lifecycle = LifecycleOperations(store=store, host=self.ctx)

        self.browser = StoreBrowser(self.ctx, self)
        self.grid = RecordGridWidget(self.ctx, self)

        splitter = QSplitter(Qt.Orientation.Horizontal, self)
        splitter.addWidget(self.browser)
        splitter.addWidget(self.grid)
        splitter.setStretchFactor(1, 3)
        self.setCentralWidget(splitter)

        self.refresh_timer = QTimer(self)
        self.refresh_timer.setSingleShot(True)
        self.refresh_timer.setInterval(REFRESH_DELAY)
        self.refresh_timer.timeout.connect(self.refresh_store)

        self.watcher = QFileSystemWatcher(self)
        self.watcher.directoryChanged.connect(self.on_fs_changed)
        self.watcher.fileChanged.connect(self.on_fs_changed)
        self.watch_store()

        self.create_menus()
        self.setWindowTitle(
            self.ctx.t(
                "recgrid.main.title", "Record Grid - {root}", root=store.root
            )
        )
        self.resize(1100, 600)

    def create_menus(self):
        menu = self.menuBar().addMenu(self.ctx.t("recgrid.menu.file", "&File"))

        new_menu = menu.addMenu(self.ctx.t("recgrid.menu.new", "&New"))
        self.new_actions = {}
        for info, record_type in creatable_types():
            action = QAction(
                info.menu_name or nicify_name(record_type.__name__), self
            )
            action.triggered.connect(
                lambda checked=False, rt=record_type: self.create_record(rt)
            )
            new_menu.addAction(action)
            self.new_actions[record_type] = action
        new_menu.setEnabled(bool(self.new_actions))

        ac_refresh = QAction(
            self.ctx.t("recgrid.menu.refresh", "&Refresh"), self
        )
        ac_refresh.setShortcut("F5")
        ac_refresh.triggered.connect(self.refresh_store)
        menu.addAction(ac_refresh)

        menu.addSeparator()

        ac_quit = QAction(self.ctx.t("recgrid.menu.quit", "&Quit"), self)
        ac_quit.setShortcut("Ctrl+Q")
        ac_quit.triggered.connect(self.shutdown)
        menu.addAction(ac_quit)

    def create_record(
        self, record_type: Type[Record]
    ) -> Optional[RecordHandle]:
        """Create a record next to the selection and select it."""
        try:
            return self.lifecycle.create(record_type)
        except StoreOperationError as e:
            logger.error("Unable to create a %s: %s", record_type.__name__, e)
            self.ctx.show_error(
                str(e), self.ctx.t("recgrid.create.error", "Create failed")
            )
            return None

    def watch_store(self):
        """Watch the store directories and the record files."""
        paths = [self.store.root]
        for location in self.store.locations():
            paths.append(self.store.path_of(location))
            directory = self.store.directory_of(location)
            if directory:
                paths.append(self.store.path_of(directory))
        current = set(self.watcher.directories() + self.watcher.files())
        new_paths = sorted(set(paths) - current)
        if new_paths:
            self.watcher.addPaths(new_paths)

    def on_fs_changed(self, path: str):
        logger.log(1, "File system change: %s", path)
        self.refresh_timer.start()

    def refresh_store(self):
        """Look for changes made by other programs.

        The store replaces a file when it saves it, so the watcher loses the
        path; the paths are added again even if nothing changed.
        """
        self.store.refresh()
        self.watch_store()

    def closeEvent(self, e):
        self.grid.close_grid()
        self.browser.release()
        self.ctx.stg.flush()
        super().closeEvent(e)

    def shutdown(self):
        logger.info("Shutting down")
        if self.shutting_down:
            logger.error("Exiting forcefully")
            raise SystemExit
        self.shutting_down = True

        QApplication.quit()
