import logging
import logging.config
import os
from copy import deepcopy
from typing import TYPE_CHECKING, Any, Optional

from PyQt5.QtWidgets import QMessageBox
from pyrsistent import thaw

from recgrid.host import EditorHost
from recgrid.settings import LocalSettings

if TYPE_CHECKING:
    from PyQt5.QtWidgets import QWidget  # noqa: F401

    from recgrid.store import RecordStore

# Default logging configuration
DEFAULT_LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": (
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: "
                "%(message)s"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "default",
            "filename": "recgrid.log",
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf8",
        },
    },
    "loggers": {
        "": {  # Root logger
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": True,
        },
        # Binding and table rebuilds log at debug level.
        "recgrid": {"level": "INFO"},
        "recgrid_qt": {"level": "INFO"},
        "PyQt5": {"level": "WARNING"},
    },
}


class QtGridContext(EditorHost):
    """The editor host of the Qt application.

    Owns the store, the settings and the selection. Dialogs (errors and
    confirmations) are parented to `top_widget`.

    Attributes:
        store: The store with the records being edited.
        stg: The local read-write settings.
        top_widget: The main widget of the application; the default parent
            for dialogs.
    """

    store: "RecordStore"
    stg: LocalSettings
    top_widget: Optional["QWidget"]

    def __init__(
        self,
        store: "RecordStore",
        stg: Optional[LocalSettings] = None,
        top_widget: Optional["QWidget"] = None,
        configure_logging: bool = True,
    ):
        super().__init__()
        self.store = store
        self.stg = stg if stg is not None else LocalSettings()
        self.top_widget = top_widget
        if configure_logging:
            self.setup_logging()

    def setup_logging(self):
        """Apply the logging configuration stored in the settings.

        The default configuration is stored in the settings the first time,
        with the log file placed next to the settings file.
        """
        log_stg = self.stg.get_setting("logging")
        if log_stg is None:
            log_stg = deepcopy(DEFAULT_LOGGING)
            log_stg["handlers"]["file"]["filename"] = os.path.join(
                os.path.dirname(self.stg.settings_file()), "recgrid.log"
            )
            self.stg.set_setting("logging", log_stg)

        logging.config.dictConfig(thaw(log_stg))

        logger = logging.getLogger(__name__)
        logger.debug("Logging has been setup")

    def show_error(self, message: str, title: str = "Error") -> None:
        """Present an error in a modal message box.

        The message is also logged.
        """
        logging.getLogger(__name__).debug("%s: %s", title, message)
        QMessageBox.critical(self.top_widget, title, message)

    def confirm(self, title: str, message: str) -> bool:
        """Ask a yes/no question; the default answer is no."""
        answer = QMessageBox.question(
            self.top_widget,
            title,
            message,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def get_stg(self, key: str, default: Any = None) -> Any:
        """Get a local read-write setting."""
        return self.stg.get_setting(key, default)

    def set_stg(self, key: str, value: Any):
        """Set a local read-write setting."""
        self.stg.set_setting(key, value)
