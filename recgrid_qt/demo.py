import enum
import logging
from typing import Annotated, List, Literal, Optional

from pydantic import Field

from recgrid.errors import RecordExistsError
from recgrid.record import Record, RefTo, TextArea, creatable
from recgrid.store import RecordStore

logger = logging.getLogger(__name__)


class Rarity(str, enum.Enum):
    common = "common"
    rare = "rare"
    legendary = "legendary"


@creatable(file_name="New Item", menu_name="Item")
class Item(Record):
    """Something the player can carry."""

    damage: int = 0
    tag: Annotated[str, TextArea()] = ""


class Weapon(Item):
    """An item that can be wielded; not shown together with plain items."""

    two_handed: bool = False


@creatable(file_name="New Potion", menu_name="Health Potion")
class HealthPotion(Record):
    heal_amount: Annotated[int, Field(ge=0, le=1000)] = 10
    cooldown: float = 1.5
    rarity: Rarity = Rarity.common
    color: Literal["red", "green", "blue"] = "red"
    label: Annotated[str, Field(max_length=32)] = ""
    description: str = Field(default="", json_schema_extra={"multiline": True})
    ingredient: Annotated[Optional[str], RefTo("Item")] = None
    effects: List[str] = Field(default_factory=list)


def populate(store: RecordStore) -> int:
    """Create a few records in the store.

    Records that already exist are left alone.

    Returns:
        The number of records created.
    """
    samples = [
        ("items/Sword", Item(damage=5, tag="A sharp blade.")),
        ("items/Shield", Item(damage=1, tag="Blocks most attacks.")),
        ("items/Bow", Weapon(damage=4, two_handed=True)),
        (
            "potions/Minor Healing",
            HealthPotion(
                heal_amount=25,
                label="Minor",
                ingredient="items/Shield.yaml",
                effects=["heal"],
            ),
        ),
        (
            "potions/Elixir",
            HealthPotion(
                heal_amount=500,
                rarity=Rarity.legendary,
                color="blue",
                description="Restores everything.\nTastes awful.",
            ),
        ),
    ]

    created = 0
    for path, record in samples:
        directory, name = path.rsplit("/", 1)
        location = store.join(directory, name)
        try:
            store.create_at(record, location)
        except RecordExistsError:
            logger.debug("%s already exists", location)
            continue
        created += 1
    logger.info("Created %d demo records", created)
    return created
