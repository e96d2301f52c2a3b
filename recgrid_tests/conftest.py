import pytest

from recgrid.controller import GridController
from recgrid.loader import RecordHandle
from recgrid.settings import LocalSettings
from recgrid.yaml_store import DirectoryStore
from recgrid_tests.sample_records import (
    FakeCellFactory,
    FakeHost,
    HealthPotion,
    Item,
)


@pytest.fixture
def store(tmp_path):
    """An empty directory store."""
    return DirectoryStore(str(tmp_path / "records"))


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def cells():
    return FakeCellFactory()


@pytest.fixture
def items_store(store):
    """A store with two items (Sword and Shield) and a potion."""
    store.create_at(Item(damage=5, tag="sharp"), "Sword.yaml")
    store.create_at(Item(damage=1), "Shield.yaml")
    store.create_at(HealthPotion(), "potions/Potion.yaml")
    return store


@pytest.fixture
def controller(items_store, host, cells):
    ctl = GridController(store=items_store, host=host, cells=cells)
    yield ctl
    ctl.close()


@pytest.fixture
def potion_handle(store):
    record = HealthPotion()
    store.create_at(record, "Potion.yaml")
    return RecordHandle.create(store, record, "Potion.yaml")


@pytest.fixture
def settings(tmp_path):
    """Settings kept in a temporary directory and saved right away."""
    return LocalSettings(config_dir=str(tmp_path / "config"), debounce=0)
