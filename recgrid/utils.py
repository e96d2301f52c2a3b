import re
from typing import Any

import inflect

inflect_e = inflect.engine()

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def nicify_name(name: str) -> str:
    """Turn the name of a field into a label.

    Leading underscores and the `m_` prefix are dropped, underscores become
    spaces and camel-case words are split:

        damage_amount -> Damage Amount
        maxHP -> Max HP
        m_HPValue -> HP Value
    """
    if name.startswith("m_"):
        name = name[2:]
    name = name.strip("_")
    words = []
    for part in name.split("_"):
        words.extend(w for w in _CAMEL_RE.split(part) if w)
    return " ".join(w[0].upper() + w[1:] for w in words)


def text_name(type_name: str) -> str:
    """Return the name of a class in `text case` (`HealthPotion` becomes
    `health potion`)."""
    return " ".join(w.lower() for w in _CAMEL_RE.split(type_name) if w)


def count_label(count: int, type_name: str) -> str:
    """A label like `2 items` or `1 health potion`."""
    noun = text_name(type_name)
    if count != 1:
        noun = inflect_e.plural_noun(noun)  # type: ignore[arg-type]
    return f"{count} {noun}"


def summarize(value: Any, max_len: int = 60) -> str:
    """Short, single-line representation of a value."""
    if value is None:
        return ""
    text = " ".join(str(value).split())
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    return text
