import pytest
from PyQt5.QtCore import Qt

from recgrid.controller import GridState
from recgrid_qt.field_ed.fed_line import NameCellEd
from recgrid_qt.field_ed.fed_number import IntCellEd
from recgrid_qt.field_ed.fed_summary import ActionsCellEd
from recgrid_qt.grid.view import (
    LINE_HEIGHT,
    LINE_PADDING,
    ROW_HEIGHT,
    row_height_for,
)
from recgrid_qt.grid.window import RecordGridWidget


@pytest.fixture
def grid(ctx, qt_app):
    widget = RecordGridWidget(ctx)
    widget.resize(900, 500)
    widget.show()
    yield widget
    widget.close_grid()
    widget.deleteLater()


def select(ctx, qt_app, location):
    ctx.set_selection(ctx.store.load_at(location))
    qt_app.processEvents()


def row_of(grid, name):
    return [h.name for h in grid.controller.table.rows].index(name)


def test_empty_grid(grid):
    assert grid.controller.is_open
    assert grid.controller.state == GridState.EMPTY
    assert grid.lbl_status.text().startswith("Select a record")
    assert not grid.btn_create.isVisible()
    assert not grid.view.isVisible()


def test_grid_follows_the_selection(grid, ctx, qt_app):
    select(ctx, qt_app, "Sword.yaml")

    assert grid.lbl_status.text() == "2 items of type Item"
    assert grid.btn_create.isVisible()

    model = grid.view.grid_model
    assert model.rowCount() == 2
    assert model.columnCount() == 4
    assert model.headerData(1, Qt.Orientation.Horizontal) == "Name"
    assert model.headerData(2, Qt.Orientation.Horizontal) == "Damage"
    assert model.headerData(0, Qt.Orientation.Vertical) == "1"

    sword = row_of(grid, "Sword")
    assert model.data(model.index(sword, 1)) == "Sword"
    assert model.data(model.index(sword, 2)) == "5"
    assert (
        model.data(model.index(sword, 1), Qt.ItemDataRole.ToolTipRole)
        == "Sword.yaml"
    )
    assert grid.view.verticalHeader().defaultSectionSize() == (
        LINE_HEIGHT * 3 + LINE_PADDING
    )
    assert grid.view.alternatingRowColors()

    ctx.set_selection(None)
    assert grid.controller.state == GridState.EMPTY
    assert model.rowCount() == 0


def test_editors_of_visible_rows(grid, ctx, qt_app):
    select(ctx, qt_app, "Sword.yaml")
    view = grid.view
    model = view.grid_model
    sword = row_of(grid, "Sword")

    assert view.open_rows == {0, 1}
    assert view.isPersistentEditorOpen(model.index(sword, 2))
    assert isinstance(view.indexWidget(model.index(sword, 0)), ActionsCellEd)
    assert isinstance(view.indexWidget(model.index(sword, 1)), NameCellEd)

    editor = view.indexWidget(model.index(sword, 2))
    assert isinstance(editor, IntCellEd)
    assert editor.row_index == sword
    assert editor.value() == 5

    editor.setValue(7)

    assert ctx.store.load_at("Sword.yaml").damage == 7
    assert ctx.store.load_at("Shield.yaml").damage == 1


def test_rename_from_the_grid(grid, ctx, qt_app):
    select(ctx, qt_app, "Sword.yaml")
    view = grid.view
    editor = view.indexWidget(view.grid_model.index(row_of(grid, "Sword"), 1))

    editor.setText("Blade")
    editor.on_editing_finished()
    qt_app.processEvents()

    assert ctx.store.exists("Blade.yaml")
    assert [h.name for h in grid.controller.table.rows] == [
        "Blade",
        "Shield",
    ]


def test_rename_conflict(grid, ctx, qt_app, dialogs):
    select(ctx, qt_app, "Sword.yaml")
    view = grid.view
    editor = view.indexWidget(view.grid_model.index(row_of(grid, "Sword"), 1))

    editor.setText("Shield")
    editor.on_editing_finished()

    assert [d[0] for d in dialogs.shown] == ["critical"]
    assert editor.text() == "Sword"
    assert ctx.store.exists("Sword.yaml")


def test_delete_from_the_grid(grid, ctx, qt_app, dialogs):
    select(ctx, qt_app, "Sword.yaml")
    view = grid.view
    editor = view.indexWidget(
        view.grid_model.index(row_of(grid, "Shield"), 0)
    )

    editor.trigger("delete")
    qt_app.processEvents()

    assert [d[0] for d in dialogs.shown] == ["question"]
    assert "Shield" in dialogs.shown[0][2]
    assert [h.name for h in grid.controller.table.rows] == ["Sword"]
    assert grid.lbl_status.text() == "1 item of type Item"


def test_create_new(grid, ctx, qt_app):
    select(ctx, qt_app, "Sword.yaml")

    grid.btn_create.click()
    qt_app.processEvents()

    assert ctx.store.exists("Item.yaml")
    assert grid.lbl_status.text() == "3 items of type Item"


def test_column_widths_are_remembered(grid, ctx, qt_app):
    select(ctx, qt_app, "Sword.yaml")
    header = grid.view.horizontalHeader()

    header.resizeSection(2, 150)

    assert ctx.stg.column_widths("Item")["damage"] == 150

    ctx.set_selection(None)
    select(ctx, qt_app, "Shield.yaml")
    assert grid.view.columnWidth(2) == 150


def test_actions_column_is_fixed(grid, ctx, qt_app):
    select(ctx, qt_app, "Sword.yaml")
    grid.view.horizontalHeader().resizeSection(0, 90)
    assert ctx.stg.column_widths("Item") == {}


def test_other_type(grid, ctx, qt_app):
    select(ctx, qt_app, "potions/Potion.yaml")
    assert grid.lbl_status.text() == "1 health potion of type HealthPotion"
    assert grid.controller.table.column_index("notes") > 0


def test_row_height_without_text_areas(grid):
    assert grid.controller.table.column_count == 0
    assert row_height_for(grid.controller.table) == ROW_HEIGHT
