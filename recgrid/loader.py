import logging
from typing import TYPE_CHECKING, List, Type

from attrs import define, field

from recgrid.proxy import RecordProxy

if TYPE_CHECKING:
    from recgrid.record import Record
    from recgrid.store import RecordStore

logger = logging.getLogger(__name__)


@define(eq=False)
class RecordHandle:
    """A loaded record together with its location and its live proxy.

    Handles are valid for the lifetime of one table; any reload creates new
    ones.

    Attributes:
        record: The record.
        location: The location of the record when it was loaded.
        proxy: Used to read and write the fields of the record.
    """

    record: "Record" = field()
    location: str = field()
    proxy: RecordProxy = field(repr=False)

    @property
    def name(self) -> str:
        """The name of the record (derived from its location)."""
        return self.proxy.store.name_of(self.location)

    @classmethod
    def create(
        cls, store: "RecordStore", record: "Record", location: str
    ) -> "RecordHandle":
        """Create a handle with a new proxy."""
        return cls(
            record=record,
            location=location,
            proxy=RecordProxy(record=record, store=store),
        )


def load_records(
    store: "RecordStore",
    record_type: Type["Record"],
    sort_rows: bool = True,
) -> List[RecordHandle]:
    """Load all the records of exactly the given type.

    The store reports records of the type and of its subclasses; only the
    records whose class is `record_type` itself are kept, so that all rows
    share the same schema.

    Args:
        store: Where to look for records.
        record_type: The class of the records.
        sort_rows: Sort the rows by name. When False the store enumeration
            order is kept.

    Returns:
        The handles of the records; empty if none was found.
    """
    result = []
    for location in store.find_all_of_type(record_type.__name__):
        record = store.load_at(location)
        if record is None or type(record) is not record_type:
            continue
        result.append(RecordHandle.create(store, record, location))

    if sort_rows:
        result.sort(key=lambda h: (h.name.casefold(), h.location))

    logger.debug(
        "Loaded %d records of type %s", len(result), record_type.__name__
    )
    return result
