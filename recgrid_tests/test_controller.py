from unittest.mock import Mock, patch

import pytest

from recgrid.constants import COLUMN_KEY_ACTIONS, COLUMN_KEY_NAME
from recgrid.controller import GridController, GridState, TableState
from recgrid.errors import StoreOperationError
from recgrid.plugins import hook_impl, recgrid_pm
from recgrid.yaml_store import DirectoryStore
from recgrid_tests.sample_records import (
    Empty,
    FakeHost,
    HealthPotion,
    Item,
)


def test_initial_state(controller):
    assert controller.state == GridState.EMPTY
    assert controller.table.row_count == 0
    assert controller.table.column_count == 0
    assert not controller.is_open


def test_open_evaluates_the_selection(items_store, host, cells):
    host.set_selection(items_store.load_at("Sword.yaml"))
    ctl = GridController(store=items_store, host=host, cells=cells)

    ctl.open()
    try:
        assert ctl.is_open
        assert ctl.state == GridState.LOADED
        assert ctl.current_type is Item
    finally:
        ctl.close()

    assert not ctl.is_open
    assert ctl.state == GridState.EMPTY
    assert len(host.on_selection_changed) == 0


def test_items_scenario(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))

    table = controller.table
    assert table.state == GridState.LOADED
    assert [h.name for h in table.rows] == ["Shield", "Sword"]
    assert [f.path for f in table.schema] == ["damage", "tag"]
    assert table.column_count == 4

    sword_row = [h.name for h in table.rows].index("Sword")
    column = table.columns[table.column_index("damage")]
    cell = column.make_cell(None)
    assert column.bind_cell(cell, sword_row)
    assert cell.text == 5

    assert cell.commit(7) is True

    fresh = DirectoryStore(items_store.root)
    assert fresh.load_at("Sword.yaml").damage == 7
    assert fresh.load_at("Shield.yaml").damage == 1


def test_failed_save_restores_the_cell(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    table = controller.table

    sword_row = [h.name for h in table.rows].index("Sword")
    column = table.columns[table.column_index("damage")]
    cell = column.make_cell(None)
    column.bind_cell(cell, sword_row)

    with patch.object(
        DirectoryStore,
        "_write",
        side_effect=StoreOperationError("disk full"),
    ):
        assert cell.commit(7) is False

    assert host.errors == [("Edit failed", "disk full")]
    assert cell.text == 5
    assert items_store.load_at("Sword.yaml").damage == 5
    assert DirectoryStore(items_store.root).load_at("Sword.yaml").damage == 5


def test_zero_records_scenario(store, host, cells):
    record = Empty()
    ctl = GridController(store=store, host=host, cells=cells)
    ctl.open()
    try:
        host.set_selection(record)
        assert ctl.state == GridState.EMPTY

        ctl.load_for_type(Empty)
        assert ctl.state == GridState.LOADED
        assert ctl.table.row_count == 0
        assert ctl.table.column_count == 0
    finally:
        ctl.close()


def test_delete_scenario(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    table = controller.table
    shield_row = [h.name for h in table.rows].index("Shield")

    cell = table.columns[0].make_cell(None)
    table.columns[0].bind_cell(cell, shield_row)
    cell.trigger("delete")

    assert len(host.questions) == 1
    assert controller.table is not table
    assert [h.name for h in controller.table.rows] == ["Sword"]
    assert controller.table.generation > table.generation


def test_delete_cancelled(items_store, cells):
    host = FakeHost(answer=False)
    ctl = GridController(store=items_store, host=host, cells=cells)
    ctl.open()
    try:
        host.set_selection(items_store.load_at("Sword.yaml"))
        table = ctl.table

        cell = table.columns[0].make_cell(None)
        table.columns[0].bind_cell(cell, 0)
        cell.trigger("delete")

        assert ctl.table is table
        assert items_store.exists("Shield.yaml")
    finally:
        ctl.close()


def test_failure_keeps_the_previous_table(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    table = controller.table

    with patch(
        "recgrid.controller.extract_schema",
        side_effect=RuntimeError("broken"),
    ):
        assert controller.load_for_type(HealthPotion) is False

    assert controller.table is table
    assert controller.current_type is Item
    assert len(host.errors) == 1
    assert "broken" in host.errors[0][1]


def test_other_selection_clears(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    assert controller.state == GridState.LOADED

    host.set_selection("not a record")
    assert controller.state == GridState.EMPTY

    host.set_selection(items_store.load_at("potions/Potion.yaml"))
    assert controller.current_type is HealthPotion

    host.set_selection(None)
    assert controller.state == GridState.EMPTY


def test_unsaved_record_clears(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    host.set_selection(Item())
    assert controller.state == GridState.EMPTY


def test_tables_are_published(controller, host, items_store):
    listener = Mock()
    controller.on_table_changed.connect(listener)
    controller.open()

    host.set_selection(items_store.load_at("Sword.yaml"))

    listener.assert_called_once()
    (table,) = listener.call_args.args
    assert isinstance(table, TableState)
    assert controller.is_current(table.generation)
    assert not controller.is_current(table.generation - 1)


def test_store_changes_reload(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))

    items_store.create_at(Item(damage=9), "Axe.yaml")

    assert [h.name for h in controller.table.rows] == [
        "Axe",
        "Shield",
        "Sword",
    ]


def test_store_changes_ignored_when_closed(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    table = controller.table
    controller.close()

    items_store.create_at(Item(), "Axe.yaml")

    assert controller.table is not table
    assert controller.state == GridState.EMPTY


def test_create_new(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))

    handle = controller.create_new()

    assert handle.location == "Item.yaml"
    assert host.current_selection is handle.record
    assert "Item" in [h.name for h in controller.table.rows]


def test_create_new_without_type(controller):
    assert controller.create_new() is None


def test_create_new_failure(controller, host, items_store):
    controller.open()
    host.set_selection(items_store.load_at("Sword.yaml"))
    items_store.create_at = Mock(side_effect=StoreOperationError("no room"))

    assert controller.create_new() is None
    assert host.errors == [("Create failed", "no room")]


def test_unsorted_rows(items_store, host, cells):
    ctl = GridController(
        store=items_store, host=host, cells=cells, sort_rows=False
    )
    ctl.open()
    try:
        host.set_selection(items_store.load_at("Sword.yaml"))
        locations = [h.location for h in ctl.table.rows]
        assert locations == [
            loc
            for loc in items_store.find_all_of_type("Item")
            if type(items_store.load_at(loc)) is Item
        ]
    finally:
        ctl.close()


def test_identity_column_option(items_store, host, cells):
    ctl = GridController(
        store=items_store, host=host, cells=cells, show_identity=True
    )
    ctl.open()
    try:
        host.set_selection(items_store.load_at("Sword.yaml"))
        keys = [c.key for c in ctl.table.columns]
        assert keys[0] == COLUMN_KEY_ACTIONS
        assert keys[2] == COLUMN_KEY_NAME
        assert ctl.table.column_count == len(ctl.table.schema) + 3
    finally:
        ctl.close()


class LoadWatcher:
    def __init__(self):
        self.tables = []

    @hook_impl
    def table_loaded(self, table):
        self.tables.append(table)


@pytest.fixture
def watcher():
    plugin = LoadWatcher()
    recgrid_pm.register(plugin)
    yield plugin
    recgrid_pm.unregister(plugin)


def test_table_loaded_hook(controller, host, items_store, watcher):
    controller.open()
    host.set_selection(items_store.load_at("potions/Potion.yaml"))
    assert watcher.tables == [controller.table]
