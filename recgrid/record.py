import inspect
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from attrs import define, field
from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo as PdFieldInfo  # noqa: F401

R = TypeVar("R", bound=type)


@define(frozen=True)
class TextArea:
    """Marks a string field as long-form text.

    Use it inside `Annotated` metadata:

        description: Annotated[str, TextArea()] = ""

    Attributes:
        lines: The number of lines the cells of the field show; longer
            text scrolls.
    """

    lines: int = field(default=3)


@define(frozen=True)
class RefTo:
    """Marks a field that stores the location of another record.

        weapon: Annotated[Optional[str], RefTo("Item")] = None

    Attributes:
        type_name: The (short) name of the referenced record class.
    """

    type_name: str


class CreatableInfo(BaseModel):
    """Information used when the user asks for a new record of a type.

    Attributes:
        file_name: The default base name of new records. The name of the
            class is used when not provided.
        menu_name: The label to present in menus.
        order: The position in menus.
    """

    file_name: Optional[str] = None
    menu_name: Optional[str] = None
    order: int = 0


def creatable(
    file_name: Optional[str] = None,
    menu_name: Optional[str] = None,
    order: int = 0,
) -> Callable[[R], R]:
    """Class decorator that attaches `CreatableInfo` to a record class."""

    def decorator(cls: R) -> R:
        setattr(
            cls,
            "__creatable__",
            CreatableInfo(
                file_name=file_name, menu_name=menu_name, order=order
            ),
        )
        return cls

    return decorator


def creatable_info(cls: type) -> Optional[CreatableInfo]:
    """Get the creation metadata of a class, including inherited one."""
    return getattr(cls, "__creatable__", None)


def type_name_of(cls: type) -> str:
    """The name under which the store remembers the class of a record."""
    return f"{cls.__module__}.{cls.__qualname__}"


class Record(BaseModel):
    """Base class for the records that can be edited in the grid.

    Every subclass is registered (by its fully qualified name) so that the
    store can recreate records from their serialized form.

    Stored keys that the class does not declare are kept and written back
    when the record is saved; they are not shown in the grid.
    """

    model_config = ConfigDict(validate_assignment=True, extra="allow")

    _registry: ClassVar[Dict[str, Type["Record"]]] = {}

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        Record._registry[type_name_of(cls)] = cls

    @classmethod
    def get_subclasses(cls) -> List[Type["Record"]]:
        """Return all registered record classes."""
        return list(Record._registry.values())

    @classmethod
    def resolve_type(cls, name: str) -> Optional[Type["Record"]]:
        """Locate a registered class by its fully qualified name."""
        return Record._registry.get(name)


def creatable_types() -> List[Tuple[CreatableInfo, Type[Record]]]:
    """The record classes decorated with `@creatable`, in menu order.

    Only the decorated class itself is reported; its subclasses do not
    inherit a place in the menus. Classes with the same `order` are sorted
    by their menu name.
    """
    result = [
        (cls.__dict__["__creatable__"], cls)
        for cls in Record.get_subclasses()
        if "__creatable__" in cls.__dict__
    ]
    result.sort(key=lambda p: (p[0].order, p[0].menu_name or p[1].__name__))
    return result


def is_kind_of(cls: type, type_name: str) -> bool:
    """Tell if the class or one of its bases is called `type_name`.

    Both short (`Item`) and fully qualified (`game.items.Item`) names are
    accepted.
    """
    for klass in cls.__mro__:
        if klass.__name__ == type_name or type_name_of(klass) == type_name:
            return True
    return False


def attribute_metadata_of(
    record_type: type, field_name: str
) -> Optional["PdFieldInfo"]:
    """Find the declaration of a field.

    The inheritance chain is walked from the most derived class to the base
    and the pydantic field information of the first class that declares the
    field is returned.

    Args:
        record_type: The class of the record.
        field_name: The name of the field.

    Returns:
        The field information or None if no class declares the field.
    """
    for klass in record_type.__mro__:
        if not (isinstance(klass, type) and issubclass(klass, BaseModel)):
            continue
        if klass is BaseModel:
            break
        if field_name in inspect.get_annotations(klass):
            return klass.model_fields.get(field_name)
    return None
