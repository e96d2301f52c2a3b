import pytest

from recgrid.utils import count_label, nicify_name, summarize, text_name


@pytest.mark.parametrize(
    "name, expected",
    [
        ("damage", "Damage"),
        ("damage_amount", "Damage Amount"),
        ("maxHP", "Max HP"),
        ("m_HPValue", "HP Value"),
        ("_private", "Private"),
        ("healAmount", "Heal Amount"),
    ],
)
def test_nicify_name(name, expected):
    assert nicify_name(name) == expected


def test_text_name():
    assert text_name("HealthPotion") == "health potion"
    assert text_name("Item") == "item"


def test_count_label():
    assert count_label(2, "Item") == "2 items"
    assert count_label(1, "Item") == "1 item"
    assert count_label(0, "HealthPotion") == "0 health potions"


def test_summarize():
    assert summarize(None) == ""
    assert summarize(5) == "5"
    assert summarize("two\nlines") == "two lines"
    text = summarize("x" * 100, max_len=10)
    assert text == "xxxxxxx..."
    assert len(text) == 10
