import pytest

from recgrid.yaml_store import DirectoryStore
from recgrid_qt.browser import LOCATION_ROLE, StoreBrowser
from recgrid_tests.sample_records import Item


@pytest.fixture
def browser(ctx):
    widget = StoreBrowser(ctx)
    yield widget
    widget.release()
    widget.deleteLater()


def names(item):
    return [item.child(i).text(0) for i in range(item.childCount())]


def test_tree(browser):
    root = browser.invisibleRootItem()
    assert names(root) == ["Shield", "Sword", "potions"]

    potions = root.child(2)
    assert potions.data(0, LOCATION_ROLE) is None
    assert names(potions) == ["Potion"]
    assert potions.child(0).text(1) == "HealthPotion"
    assert potions.child(0).data(0, LOCATION_ROLE) == "potions/Potion.yaml"


def test_click_selects_the_record(browser, ctx, store):
    item = browser.invisibleRootItem().child(1)

    browser.on_item_clicked(item, 0)

    assert ctx.current_selection is store.load_at("Sword.yaml")
    assert browser.currentItem() is item


def test_click_on_a_directory(browser, ctx, store):
    ctx.set_selection(store.load_at("Sword.yaml"))
    browser.on_item_clicked(browser.invisibleRootItem().child(2), 0)
    assert ctx.current_selection is None


def test_selection_is_highlighted(browser, ctx, store):
    ctx.set_selection(store.load_at("potions/Potion.yaml"))
    assert browser.currentItem().text(0) == "Potion"


def test_store_changes_rebuild_the_tree(browser, store):
    store.create_at(Item(), "more/Axe.yaml")
    assert names(browser.invisibleRootItem()) == [
        "Shield",
        "Sword",
        "more",
        "potions",
    ]


def test_release(browser, store):
    browser.release()
    store.delete_at("Sword.yaml")
    assert "Sword" in names(browser.invisibleRootItem())


def test_external_changes(browser, store):
    DirectoryStore(store.root).create_at(Item(), "Bow.yaml")
    assert store.refresh() is True
    assert "Bow" in names(browser.invisibleRootItem())
