"""Record classes and test doubles shared by the tests."""

import enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from recgrid.cells import ActionsCell, CellElement, CellFactory
from recgrid.host import EditorHost
from recgrid.record import Record, RefTo, TextArea, creatable


class Item(Record):
    damage: int = 0
    tag: Annotated[str, TextArea()] = ""


class SpecialItem(Item):
    glow: bool = False


class Quality(enum.Enum):
    poor = 1
    good = 2


class Stats(BaseModel):
    strength: int = 0


@creatable(file_name="Potion")
class HealthPotion(Record):
    heal_amount: Annotated[int, Field(ge=0, le=100)] = 10
    cooldown: float = 0.5
    stackable: bool = True
    color: Literal["red", "blue"] = "red"
    quality: Quality = Quality.good
    label: Annotated[str, Field(max_length=8)] = ""
    notes: str = Field(default="", json_schema_extra={"multiline": True})
    maxHP: Optional[int] = None
    ingredient: Annotated[Optional[str], RefTo("Item")] = None
    effects: List[str] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)
    extra: Dict[str, int] = Field(default_factory=dict)
    secret: str = Field(default="", exclude=True)
    code: str = Field(default="P", frozen=True)


class Empty(Record):
    pass


class NeedsName(Record):
    name: str


class FakeHost(EditorHost):
    """Host that records the errors and answers confirmations with a
    preset value."""

    answer: bool
    errors: List[Tuple[str, str]]
    questions: List[Tuple[str, str]]

    def __init__(self, answer: bool = True):
        super().__init__()
        self.answer = answer
        self.errors = []
        self.questions = []

    def confirm(self, title: str, message: str) -> bool:
        self.questions.append((title, message))
        return self.answer

    def show_error(self, message: str, title: str = "Error") -> None:
        self.errors.append((title, message))


class FakeCell(CellElement):
    """Cell that remembers what it was asked to show."""

    def __init__(self, kind: str = "field", field: Any = None):
        self.kind = kind
        self.field = field
        self.shown: List[Any] = []

    def show_value(self, value: Any) -> None:
        self.shown.append(value)

    @property
    def text(self) -> Any:
        return self.shown[-1] if self.shown else None


class FakeActionsCell(ActionsCell):
    def __init__(self):
        self.kind = "actions"


class FakeCellFactory(CellFactory):
    """Creates fake cells and keeps them in `created`."""

    def __init__(self):
        self.created: List[CellElement] = []

    def _keep(self, cell):
        self.created.append(cell)
        return cell

    def make_actions_cell(self, parent=None):
        return self._keep(FakeActionsCell())

    def make_identity_cell(self, parent=None):
        return self._keep(FakeCell("identity"))

    def make_name_cell(self, parent=None):
        return self._keep(FakeCell("name"))

    def make_multiline_cell(self, field, parent=None):
        return self._keep(FakeCell("multiline", field))

    def make_field_cell(self, field, parent=None):
        return self._keep(FakeCell(field.value_kind, field))
