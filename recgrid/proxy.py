import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from attrs import define, field
from pydantic import ValidationError

from recgrid.errors import FieldValueError, StoreOperationError

if TYPE_CHECKING:
    from recgrid.record import Record
    from recgrid.store import RecordStore

logger = logging.getLogger(__name__)


class ValueProxy:
    """A live value that a cell can be bound to.

    Attributes:
        path: The identifier of the value inside its record.
        read_only: The value can be shown but not changed.
    """

    path: str
    read_only: bool = False

    @property
    def value(self) -> Any:
        """The current value."""
        raise NotImplementedError("value must be implemented in subclasses")

    def set_value(self, value: Any) -> bool:
        """Change the value and make the change durable.

        Returns:
            True if the value changed, False if it already had that value.
        """
        raise NotImplementedError(
            "set_value() must be implemented in subclasses"
        )


@define(eq=False)
class FieldProxy(ValueProxy):
    """Reads and writes one field of a record.

    Writing a new value assigns it to the record (pydantic validates the
    assignment) and then saves the record through the store.

    Attributes:
        owner: The proxy of the record that holds the field.
        path: The name of the field.
        read_only: Frozen fields can not be changed.
    """

    owner: "RecordProxy" = field(repr=False)
    path: str = field()
    read_only: bool = field(default=False)

    @property
    def value(self) -> Any:
        return getattr(self.owner.record, self.path, None)

    def set_value(self, value: Any) -> bool:
        if self.read_only:
            raise FieldValueError(
                f"The field `{self.path}` is read-only", self.path, value
            )

        record = self.owner.record
        old_value = getattr(record, self.path, None)
        if old_value == value:
            return False

        try:
            setattr(record, self.path, value)
        except ValidationError as e:
            errors = "; ".join(err["msg"] for err in e.errors())
            raise FieldValueError(
                f"Invalid value for `{self.path}`: {errors}", self.path, value
            ) from e

        try:
            self.owner.apply()
        except StoreOperationError:
            # The record must keep matching what is on disk.
            setattr(record, self.path, old_value)
            raise

        logger.debug("%s.%s changed to %r", record, self.path, value)
        return True


@define(eq=False)
class RecordProxy:
    """The live, editable view of a persisted record.

    Field proxies are created on demand and cached, so asking twice for the
    same path yields the same proxy.

    Attributes:
        record: The record.
        store: The store where the record lives; used to save changes.
    """

    record: "Record" = field()
    store: "RecordStore" = field(repr=False)
    _fields: Dict[str, ValueProxy] = field(factory=dict, init=False, repr=False)

    @property
    def location(self) -> Optional[str]:
        """The current location of the record in the store."""
        return self.store.location_of(self.record)

    def find_property(self, path: str) -> Optional[FieldProxy]:
        """Get the proxy for a field.

        Returns:
            The proxy or None if the record has no field with that name.
        """
        proxy = self._fields.get(path)
        if isinstance(proxy, FieldProxy):
            return proxy

        info = type(self.record).model_fields.get(path)
        if info is None:
            return None

        proxy = FieldProxy(owner=self, path=path, read_only=bool(info.frozen))
        self._fields[path] = proxy
        return proxy

    def synthetic_property(
        self, key: str, factory: Callable[[], ValueProxy]
    ) -> ValueProxy:
        """Get (or create) a proxy that does not map to a record field.

        Args:
            key: The identifier of the proxy; should not collide with field
                names.
            factory: Creates the proxy the first time it is requested.
        """
        proxy = self._fields.get(key)
        if proxy is None:
            proxy = factory()
            self._fields[key] = proxy
        return proxy

    def apply(self) -> None:
        """Save the record through the store."""
        self.store.save(self.record)
