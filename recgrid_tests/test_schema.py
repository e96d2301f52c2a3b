from typing import Annotated, List, Optional, Union

import pytest
from annotated_types import Gt, Lt

from recgrid.constants import (
    SCRIPT_FIELD,
    VALUE_KIND_BOOL,
    VALUE_KIND_COMPOSITE,
    VALUE_KIND_ENUM,
    VALUE_KIND_FLOAT,
    VALUE_KIND_INTEGER,
    VALUE_KIND_LIST,
    VALUE_KIND_OTHER,
    VALUE_KIND_REFERENCE,
    VALUE_KIND_STRING,
    WIDGET_HINT_LONG_TEXT,
    WIDGET_HINT_SINGLE_LINE,
)
from recgrid.loader import RecordHandle
from recgrid.plugins import hook_impl, recgrid_pm
from recgrid.record import Record, TextArea
from recgrid.schema import (
    PydanticSchemaProvider,
    extract_schema,
    kind_of_annotation,
    unwrap_optional,
)
from recgrid_tests.sample_records import Empty, Item, SpecialItem


class Bounded(Record):
    count: Annotated[int, Gt(0), Lt(10)] = 1
    ratio: Annotated[float, Gt(0.0)] = 0.5
    story: Annotated[str, TextArea(lines=5)] = ""


@pytest.fixture
def potion_schema(potion_handle):
    return {f.path: f for f in extract_schema(potion_handle)}


def handle_for(store, record, location):
    store.create_at(record, location)
    return RecordHandle.create(store, record, location)


def test_provider_reports_the_type_marker_first(potion_handle):
    fields = PydanticSchemaProvider().fields_of(potion_handle.record)
    assert fields[0].name == SCRIPT_FIELD
    assert fields[0].read_only


def test_type_marker_is_skipped(potion_handle):
    schema = extract_schema(potion_handle)
    assert SCRIPT_FIELD not in [f.path for f in schema]


def test_declaration_order_and_exclusion(potion_handle):
    paths = [f.path for f in extract_schema(potion_handle)]
    assert paths == [
        "heal_amount",
        "cooldown",
        "stackable",
        "color",
        "quality",
        "label",
        "notes",
        "maxHP",
        "ingredient",
        "effects",
        "stats",
        "extra",
        "code",
    ]


def test_schema_is_deterministic(potion_handle):
    assert extract_schema(potion_handle) == extract_schema(potion_handle)


def test_value_kinds(potion_schema):
    kinds = {k: f.value_kind for k, f in potion_schema.items()}
    assert kinds["heal_amount"] == VALUE_KIND_INTEGER
    assert kinds["cooldown"] == VALUE_KIND_FLOAT
    assert kinds["stackable"] == VALUE_KIND_BOOL
    assert kinds["color"] == VALUE_KIND_ENUM
    assert kinds["quality"] == VALUE_KIND_ENUM
    assert kinds["label"] == VALUE_KIND_STRING
    assert kinds["maxHP"] == VALUE_KIND_INTEGER
    assert kinds["ingredient"] == VALUE_KIND_REFERENCE
    assert kinds["effects"] == VALUE_KIND_LIST
    assert kinds["stats"] == VALUE_KIND_COMPOSITE
    assert kinds["extra"] == VALUE_KIND_COMPOSITE


def test_constraints_are_copied(potion_schema):
    assert potion_schema["heal_amount"].min_value == 0
    assert potion_schema["heal_amount"].max_value == 100
    assert potion_schema["label"].max_length == 8
    assert potion_schema["cooldown"].min_value is None


def test_exclusive_bounds(store):
    schema = extract_schema(handle_for(store, Bounded(), "B.yaml"))
    by_path = {f.path: f for f in schema}
    assert by_path["count"].min_value == 1
    assert by_path["count"].max_value == 9
    assert by_path["ratio"].min_value == 0.0


def test_enum_values(potion_schema):
    assert potion_schema["color"].enum_values == [
        ("red", "Red"),
        ("blue", "Blue"),
    ]
    assert potion_schema["quality"].enum_values == [
        (1, "Poor"),
        (2, "Good"),
    ]


def test_nullable_and_reference(potion_schema):
    assert potion_schema["maxHP"].nullable
    assert not potion_schema["heal_amount"].nullable
    assert potion_schema["ingredient"].nullable
    assert potion_schema["ingredient"].ref_type_name == "Item"


def test_read_only(potion_schema):
    assert potion_schema["code"].read_only
    assert potion_schema["effects"].read_only
    assert potion_schema["stats"].read_only
    assert not potion_schema["label"].read_only


def test_display_names(potion_schema):
    assert potion_schema["heal_amount"].display_name == "Heal Amount"
    assert potion_schema["maxHP"].display_name == "Max HP"


def test_long_text_from_json_schema_extra(potion_schema):
    assert potion_schema["notes"].widget_hint == WIDGET_HINT_LONG_TEXT
    assert potion_schema["label"].widget_hint == WIDGET_HINT_SINGLE_LINE


def test_long_text_from_marker_on_base(store):
    schema = extract_schema(handle_for(store, SpecialItem(), "S.yaml"))
    by_path = {f.path: f for f in schema}
    assert [f.path for f in schema] == ["damage", "tag", "glow"]
    assert by_path["tag"].is_long_text
    assert not by_path["damage"].is_long_text
    assert by_path["tag"].text_lines == 3
    assert by_path["damage"].text_lines is None


def test_text_lines(store, potion_handle):
    schema = extract_schema(handle_for(store, Bounded(), "B.yaml"))
    assert [f.text_lines for f in schema] == [None, None, 5]
    notes = [f for f in extract_schema(potion_handle) if f.path == "notes"]
    assert notes[0].text_lines == 3


def test_item_schema(store):
    schema = extract_schema(handle_for(store, Item(), "I.yaml"))
    assert [(f.path, f.value_kind, f.widget_hint) for f in schema] == [
        ("damage", VALUE_KIND_INTEGER, WIDGET_HINT_SINGLE_LINE),
        ("tag", VALUE_KIND_STRING, WIDGET_HINT_LONG_TEXT),
    ]


def test_no_visible_fields(store):
    assert extract_schema(handle_for(store, Empty(), "E.yaml")) == []


def test_unwrap_optional():
    assert unwrap_optional(Optional[int]) == (int, True)
    assert unwrap_optional(int | None) == (int, True)
    assert unwrap_optional(int) == (int, False)
    assert unwrap_optional(Union[int, str]) == (Union[int, str], False)


def test_kind_of_annotation_fallbacks():
    assert kind_of_annotation(List[int])[0] == VALUE_KIND_LIST
    assert kind_of_annotation(bytes)[0] == VALUE_KIND_OTHER


class ColorPlugin:
    @hook_impl
    def value_kind_for(self, annotation):
        if annotation is bytes:
            return "color"
        return None


def test_plugin_can_choose_the_kind():
    plugin = ColorPlugin()
    recgrid_pm.register(plugin)
    try:
        assert kind_of_annotation(bytes)[0] == "color"
        assert kind_of_annotation(int)[0] == VALUE_KIND_INTEGER
    finally:
        recgrid_pm.unregister(plugin)
