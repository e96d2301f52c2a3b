import os

import pytest
from PyQt5.QtWidgets import QApplication, QMessageBox

from recgrid.loader import RecordHandle
from recgrid.schema import extract_schema
from recgrid.settings import LocalSettings
from recgrid.yaml_store import DirectoryStore
from recgrid_qt.context import QtGridContext
from recgrid_tests.sample_records import HealthPotion, Item

# Ensure headless Qt on CI/CLI runs.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qt_app():
    """Ensure a single QApplication exists for Qt-based tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def store(tmp_path):
    """A store with two items (Sword and Shield) and a potion."""
    result = DirectoryStore(str(tmp_path / "records"))
    result.create_at(Item(damage=5, tag="sharp"), "Sword.yaml")
    result.create_at(Item(damage=1), "Shield.yaml")
    result.create_at(
        HealthPotion(effects=["heal"]), "potions/Potion.yaml"
    )
    return result


@pytest.fixture
def stg(tmp_path):
    return LocalSettings(config_dir=str(tmp_path / "config"), debounce=0)


@pytest.fixture
def ctx(qt_app, store, stg):
    """Context that does not touch the global logging configuration."""
    return QtGridContext(store=store, stg=stg, configure_logging=False)


@pytest.fixture
def potion(store):
    location = "potions/Potion.yaml"
    return RecordHandle.create(store, store.load_at(location), location)


@pytest.fixture
def potion_fields(potion):
    """The field descriptors of the potion, by path."""
    return {f.path: f for f in extract_schema(potion)}


@pytest.fixture
def dialogs(monkeypatch):
    """Replace the modal dialogs; `answer` is the reply to the
    questions and `shown` the (kind, title, message) of each dialog."""

    class Dialogs:
        def __init__(self):
            self.shown = []
            self.answer = QMessageBox.StandardButton.Yes

        def critical(self, parent, title, message, *args):
            self.shown.append(("critical", title, message))
            return QMessageBox.StandardButton.Ok

        def question(self, parent, title, message, *args):
            self.shown.append(("question", title, message))
            return self.answer

    result = Dialogs()
    monkeypatch.setattr(QMessageBox, "critical", result.critical)
    monkeypatch.setattr(QMessageBox, "question", result.question)
    return result
