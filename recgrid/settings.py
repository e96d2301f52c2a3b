import logging
import os
import shutil
import threading
from typing import Any, Dict, Optional

import yaml
from appdirs import user_config_dir
from attrs import define, field
from pyrsistent import freeze, pmap, thaw
from pyrsistent.typing import PMap

DEBOUNCE_TIME = 5
MAX_BACKUPS = 5
logger = logging.getLogger(__name__)


def rotate_backups(file_path: str, max_backups: int = MAX_BACKUPS) -> bool:
    """Keep up to ``max_backups`` copies of a file.

    The copies are named ``<file>.backup-N<ext>``; N=1 is the newest.

    Returns:
        True if a new backup was created.
    """
    root, ext = os.path.splitext(file_path)

    def backup(i: int) -> str:
        return f"{root}.backup-{i}{ext}"

    for i in range(max_backups, 0, -1):
        src = backup(i)
        if not os.path.exists(src):
            continue
        try:
            if i == max_backups:
                os.remove(src)
            else:
                os.replace(src, backup(i + 1))
        except OSError:
            logger.exception("Failed rotating the backup %s", src)

    if not os.path.exists(file_path):
        return False
    try:
        shutil.copy2(file_path, backup(1))
    except OSError:
        logger.exception("Failed creating a backup of %s", file_path)
        return False
    return True


@define
class LocalSettings:
    """Per-user settings of the application, kept in a YAML file.

    Keys are dot-separated paths (`recgrid.grid.sort_rows`). Changes are
    saved after a short delay so that bursts of changes (resizing a column)
    end up in a single write.

    Attributes:
        settings: The current values.
        config_dir: The directory of the settings file; by default the
            per-user configuration directory of the application.
        debounce: Seconds to wait before saving; 0 saves right away.
    """

    settings: PMap[str, Any] = field(default=pmap())
    config_dir: Optional[str] = field(default=None)
    debounce: float = field(default=DEBOUNCE_TIME)
    _save_timer: Optional[threading.Timer] = field(default=None, init=False)
    _save_lock: Optional[threading.Lock] = field(
        factory=threading.Lock, init=False
    )

    def __attrs_post_init__(self):
        self.load_settings()

    def __getitem__(self, key: str) -> Any:
        return self.get_setting(key)

    def __setitem__(self, key: str, value: Any):
        self.set_setting(key, value)

    def set_read_only(self, read_only: bool):
        """Prevent (or allow again) writing the settings to disk."""
        if read_only:
            self._save_lock = None
        elif self._save_lock is None:
            self._save_lock = threading.Lock()

    def _debounced_save(self):
        if self._save_lock is None:
            return
        try:
            with self._save_lock:
                self._save_timer = None
                self._do_save_settings()
        except (OSError, yaml.YAMLError) as e:
            logger.error("Error saving settings: %s", e)

    def _do_save_settings(self):
        settings_file = self.settings_file()
        tmp_settings = f"{settings_file}.tmp"
        with open(tmp_settings, "w", encoding="utf-8") as f:
            yaml.safe_dump(thaw(self.settings), f)
        os.replace(tmp_settings, settings_file)

    def save_settings(self):
        """Save the settings, after the debounce delay."""
        if self._save_lock is None:
            return
        if not self.debounce:
            self._debounced_save()
            return
        with self._save_lock:
            if self._save_timer is not None:
                self._save_timer.cancel()
            self._save_timer = threading.Timer(
                self.debounce, self._debounced_save
            )
            self._save_timer.daemon = True
            self._save_timer.start()

    def flush(self):
        """Write pending changes now."""
        timer = self._save_timer
        if timer is None:
            return
        timer.cancel()
        self._debounced_save()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting.

        Args:
            key: The dot-separated path of the setting.
            default: Returned when the setting does not exist.
        """
        current: Any = self.settings
        for part in key.split("."):
            if not hasattr(current, "get"):
                return default
            current = current.get(part)
            if current is None:
                return default
        return current

    def set_setting(self, key: str, value: Any):
        """Change a setting and schedule a save.

        Args:
            key: The dot-separated path of the setting.
            value: The new value.
        """
        parts = key.split(".")

        parents = []
        current = self.settings
        for part in parts[:-1]:
            parents.append((part, current))
            current = current.get(part, pmap())

        value = freeze(value)
        if current.get(parts[-1], None) == value:
            return

        new_current = current.set(parts[-1], value)
        for part, parent in reversed(parents):
            new_current = parent.set(part, new_current)
        self.settings = new_current

        self.save_settings()

    def load_settings(self):
        """Read the settings file, if there is one."""
        settings_file = self.settings_file()
        if not os.path.exists(settings_file):
            logger.debug("settings file %s does not exist", settings_file)
            return

        rotate_backups(settings_file)
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                tmp = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Unable to read %s: %s", settings_file, e)
            return

        if isinstance(tmp, dict):
            self.settings = freeze(tmp)
            logger.debug("settings loaded from %s", settings_file)
        else:
            logger.warning("settings file %s is empty", settings_file)

    def settings_file(self) -> str:
        """Get the path to the settings file."""
        config_dir = self.config_dir or user_config_dir("recgrid")
        if not os.path.exists(config_dir):
            os.makedirs(config_dir)
        return os.path.join(config_dir, "settings.yaml")

    # Grid settings.

    @property
    def sort_rows(self) -> bool:
        return bool(self.get_setting("recgrid.grid.sort_rows", True))

    @property
    def show_identity(self) -> bool:
        return bool(self.get_setting("recgrid.grid.show_identity", False))

    def column_widths(self, type_name: str) -> Dict[str, int]:
        """The widths the user gave to the columns of a record type."""
        return thaw(
            self.get_setting(f"recgrid.grid.widths.{type_name}", pmap())
        )

    def set_column_width(self, type_name: str, key: str, width: int):
        """Remember the width of a column."""
        self.set_setting(f"recgrid.grid.widths.{type_name}.{key}", int(width))

    @property
    def last_root(self) -> Optional[str]:
        return self.get_setting("recgrid.store.last_root")

    @last_root.setter
    def last_root(self, value: str):
        self.set_setting("recgrid.store.last_root", value)
