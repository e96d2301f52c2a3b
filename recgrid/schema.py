import enum
import logging
import types
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Sequence,
    Tuple,
    Union,
    get_args,
    get_origin,
)

from annotated_types import Ge, Gt, Le, Lt, MaxLen
from attrs import define, field
from pydantic import BaseModel

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
from recgrid.plugins import recgrid_pm
from recgrid.record import RefTo, TextArea, attribute_metadata_of
from recgrid.utils import nicify_name

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo as PdFieldInfo  # noqa: F401

    from recgrid.loader import RecordHandle  # noqa: F401
    from recgrid.record import Record  # noqa: F401

logger = logging.getLogger(__name__)

# Kinds that are shown as a summary and can not be edited in a cell.
SUMMARY_KINDS = (VALUE_KIND_LIST, VALUE_KIND_COMPOSITE, VALUE_KIND_OTHER)


@define
class FieldDescriptor:
    """A top-level field of the records shown in a table.

    Attributes:
        path: The name of the field; unique inside the record and used to
            locate the field in each row.
        display_name: The label shown in the column header.
        value_kind: One of the `VALUE_KIND_*` constants.
        widget_hint: `WIDGET_HINT_LONG_TEXT` for long-form strings,
            `WIDGET_HINT_SINGLE_LINE` otherwise.
        description: A longer description, shown as tool-tip.
        read_only: The value can not be changed from the grid.
        nullable: None is an acceptable value.
        enum_values: For enumerations, the list of (value, label) pairs.
        ref_type_name: For references, the name of the referenced class.
        min_value: The minimum acceptable number (inclusive). Exclusive
            bounds of integers are converted; those of real numbers are
            kept and the record rejects the bound itself.
        max_value: The maximum acceptable number (inclusive).
        max_length: The maximum length of a string.
        text_lines: For long-form strings, the number of lines shown.
    """

    path: str
    display_name: str
    value_kind: str
    widget_hint: str = field(default=WIDGET_HINT_SINGLE_LINE)
    description: str = field(default="")
    read_only: bool = field(default=False)
    nullable: bool = field(default=False)
    enum_values: List[Tuple[Any, str]] = field(factory=list)
    ref_type_name: Optional[str] = field(default=None)
    min_value: Optional[float] = field(default=None)
    max_value: Optional[float] = field(default=None)
    max_length: Optional[int] = field(default=None)
    text_lines: Optional[int] = field(default=None)

    @property
    def is_long_text(self) -> bool:
        """Tell if the field should be edited in a multi-line editor."""
        return self.widget_hint == WIDGET_HINT_LONG_TEXT


@define
class SourceField:
    """A field as reported by a schema provider.

    Attributes:
        name: The name of the field.
        value_kind: One of the `VALUE_KIND_*` constants.
        title: An explicit label for the field, if the record type has one.
        description: A longer description of the field.
        nullable: None is an acceptable value.
        read_only: The value can not be changed.
        extra: Kind-specific information (the names match the attributes
            of `FieldDescriptor`).
    """

    name: str
    value_kind: str
    title: str = field(default="")
    description: str = field(default="")
    nullable: bool = field(default=False)
    read_only: bool = field(default=False)
    extra: Dict[str, Any] = field(factory=dict)


class SchemaProvider:
    """Knows how to list the fields of a record."""

    def fields_of(self, record: Any) -> List[SourceField]:
        """The ordered list of the top-level fields of a record."""
        raise NotImplementedError(
            "fields_of() must be implemented in subclasses"
        )

    def attribute_metadata_of(self, record_type: type, name: str) -> Any:
        """The metadata attached to the declaration of a field."""
        raise NotImplementedError(
            "attribute_metadata_of() must be implemented in subclasses"
        )


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Remove `None` from an `Optional[X]` annotation.

    Returns:
        The inner annotation and a flag that tells if None was present.
    """
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        others = [a for a in args if a is not type(None)]
        if len(others) == 1 and len(others) < len(args):
            return others[0], True
    return annotation, False


def label_of(value: Any) -> str:
    """Human label for an enumeration value."""
    return str(value).replace("_", " ").title()


def kind_of_annotation(annotation: Any) -> Tuple[str, Dict[str, Any]]:
    """Map a type annotation to a value kind.

    Returns:
        The kind and the kind-specific information.
    """
    from_plugin = recgrid_pm.hook.value_kind_for(annotation=annotation)
    if from_plugin:
        return from_plugin, {}

    # bool is a subclass of int so it must come first.
    if annotation is bool:
        return VALUE_KIND_BOOL, {}
    if annotation is str:
        return VALUE_KIND_STRING, {}
    if annotation is int:
        return VALUE_KIND_INTEGER, {}
    if annotation is float:
        return VALUE_KIND_FLOAT, {}

    origin = get_origin(annotation)
    if origin is Literal:
        return VALUE_KIND_ENUM, {
            "enum_values": [(a, label_of(a)) for a in get_args(annotation)]
        }
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return VALUE_KIND_ENUM, {
            "enum_values": [(m.value, label_of(m.name)) for m in annotation]
        }
    if annotation in (list, tuple, set, frozenset) or origin in (
        list,
        tuple,
        set,
        frozenset,
    ):
        return VALUE_KIND_LIST, {}
    if annotation is dict or origin is dict:
        return VALUE_KIND_COMPOSITE, {}
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return VALUE_KIND_COMPOSITE, {}
    return VALUE_KIND_OTHER, {}


def text_area_of(info: Optional["PdFieldInfo"]) -> Optional[TextArea]:
    """Get the long-form text marker of a field declaration.

    A `multiline` key in the JSON schema extra of the field counts as a
    marker with the default number of lines.
    """
    if info is None:
        return None
    for md in info.metadata:
        if isinstance(md, TextArea):
            return md
    extra = info.json_schema_extra
    if isinstance(extra, dict) and extra.get("multiline") is True:
        return TextArea()
    return None


class PydanticSchemaProvider(SchemaProvider):
    """Lists the fields of pydantic based records.

    The first field reported is the one the store uses to remember the class
    of the record (`SCRIPT_FIELD`); the model fields follow in declaration
    order, inherited fields first. Fields excluded from serialization are
    not reported.
    """

    def fields_of(self, record: "Record") -> List[SourceField]:
        result = [
            SourceField(
                name=SCRIPT_FIELD,
                value_kind=VALUE_KIND_STRING,
                title="Script",
                read_only=True,
            )
        ]
        for name, info in type(record).model_fields.items():
            if info.exclude:
                continue
            result.append(self.source_field(name, info))
        return result

    def source_field(self, name: str, info: "PdFieldInfo") -> SourceField:
        """Create the description of a pydantic field."""
        annotation, nullable = unwrap_optional(info.annotation)
        value_kind, extra = kind_of_annotation(annotation)

        for md in info.metadata:
            if isinstance(md, RefTo):
                value_kind = VALUE_KIND_REFERENCE
                extra["ref_type_name"] = md.type_name
            elif isinstance(md, Ge):
                extra["min_value"] = md.ge
            elif isinstance(md, Gt):
                extra["min_value"] = (
                    md.gt + 1 if value_kind == VALUE_KIND_INTEGER else md.gt
                )
            elif isinstance(md, Le):
                extra["max_value"] = md.le
            elif isinstance(md, Lt):
                extra["max_value"] = (
                    md.lt - 1 if value_kind == VALUE_KIND_INTEGER else md.lt
                )
            elif isinstance(md, MaxLen):
                extra["max_length"] = md.max_length

        return SourceField(
            name=name,
            value_kind=value_kind,
            title=info.title or "",
            description=info.description or "",
            nullable=nullable,
            read_only=bool(info.frozen) or value_kind in SUMMARY_KINDS,
            extra=extra,
        )

    def attribute_metadata_of(
        self, record_type: type, name: str
    ) -> Optional["PdFieldInfo"]:
        return attribute_metadata_of(record_type, name)


def extract_schema(
    sample: "RecordHandle",
    provider: Optional[SchemaProvider] = None,
    skip: Sequence[str] = (SCRIPT_FIELD,),
) -> List[FieldDescriptor]:
    """Create the list of field descriptors from a sample record.

    Only top-level fields are reported; composite and list fields are not
    expanded.

    Args:
        sample: The record used as the model for all the rows of the table.
        provider: The object that knows how to list the fields of the record.
            By default the pydantic provider is used.
        skip: Names of the fields that should not be reported.

    Returns:
        The ordered list of descriptors; empty if the record has no visible
        fields.
    """
    if provider is None:
        provider = PydanticSchemaProvider()

    record_type = type(sample.record)
    result = []
    for src in provider.fields_of(sample.record):
        if src.name in skip:
            continue

        widget_hint = WIDGET_HINT_SINGLE_LINE
        extra = dict(src.extra)
        if src.value_kind == VALUE_KIND_STRING:
            area = text_area_of(
                provider.attribute_metadata_of(record_type, src.name)
            )
            if area is not None:
                widget_hint = WIDGET_HINT_LONG_TEXT
                extra["text_lines"] = area.lines

        result.append(
            FieldDescriptor(
                path=src.name,
                display_name=src.title or nicify_name(src.name),
                value_kind=src.value_kind,
                widget_hint=widget_hint,
                description=src.description,
                read_only=src.read_only,
                nullable=src.nullable,
                **extra,
            )
        )

    logger.debug(
        "Schema of %s: %s",
        record_type.__name__,
        ", ".join(f.path for f in result),
    )
    return result
