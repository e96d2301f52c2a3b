import posixpath
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from recgrid.constants import RECORD_FILE_EXT
from recgrid.events import CallbackList, Subscription

if TYPE_CHECKING:
    from recgrid.record import Record  # noqa: F401


class RecordStore:
    """The persistent collection of records that the grid edits.

    Records are addressed by their location: a relative, slash-separated
    path (`weapons/Sword.yaml`). The name of a record is the last component
    of its location without the extension. The empty string is the root.

    Implementations must notify the `on_changed` callbacks after any
    operation that changes the set of records (create, rename, delete,
    external modifications discovered by `refresh()`). Saving the content of
    an existing record does not notify.

    All operations are synchronous and raise `StoreOperationError` (or a
    subclass) on failure.
    """

    extension: str = RECORD_FILE_EXT
    on_changed: CallbackList

    def __init__(self) -> None:
        self.on_changed = CallbackList(name="store-changed")

    def subscribe(self, callback: Callable[[], Any]) -> Subscription:
        """Get notified after the set of records changes."""
        return self.on_changed.connect(callback)

    def notify_changed(self) -> None:
        """Inform the subscribers that the store has changed."""
        self.on_changed.emit()

    # Addressing.

    def name_of(self, location: str) -> str:
        """Get the name of the record at a location."""
        base = posixpath.basename(location)
        if self.extension and base.endswith(self.extension):
            base = base[: -len(self.extension)]
        return base

    def directory_of(self, location: str) -> str:
        """Get the directory (location prefix) of a location."""
        return posixpath.dirname(location)

    def join(self, directory: str, name: str) -> str:
        """Create the location of a record named `name` inside `directory`."""
        file_name = f"{name}{self.extension}"
        if not directory:
            return file_name
        return posixpath.join(directory, file_name)

    # Queries.

    def locations(self) -> List[str]:
        """All the record locations, in store enumeration order."""
        raise NotImplementedError(
            "locations() must be implemented in subclasses"
        )

    def find_all_of_type(self, type_name: str) -> List[str]:
        """Locate all records whose class is or derives from `type_name`.

        Args:
            type_name: The short or fully qualified name of the class.

        Returns:
            The locations, in store enumeration order.
        """
        raise NotImplementedError(
            "find_all_of_type() must be implemented in subclasses"
        )

    def load_at(self, location: str) -> Optional["Record"]:
        """Load the record at a location.

        Repeated calls for the same location return the same instance while
        the record exists.

        Returns:
            The record or None if the location holds no loadable record.
        """
        raise NotImplementedError("load_at() must be implemented in subclasses")

    def location_of(self, record: Any) -> Optional[str]:
        """Get the location of a record or None if it is not persisted."""
        raise NotImplementedError(
            "location_of() must be implemented in subclasses"
        )

    def is_persistent(self, record: Any) -> bool:
        """Tell if the record is stored in this store."""
        return self.location_of(record) is not None

    def unique_path_for(self, candidate: str) -> str:
        """Return `candidate` or, if taken, a variation that is free."""
        raise NotImplementedError(
            "unique_path_for() must be implemented in subclasses"
        )

    # Mutations.

    def create_at(self, record: "Record", location: str) -> None:
        """Persist a new record at the given location."""
        raise NotImplementedError(
            "create_at() must be implemented in subclasses"
        )

    def save(self, record: "Record") -> None:
        """Write the current content of a persisted record."""
        raise NotImplementedError("save() must be implemented in subclasses")

    def rename_at(self, location: str, new_name: str) -> str:
        """Change the name of the record at a location.

        Returns:
            The new location of the record.
        """
        raise NotImplementedError(
            "rename_at() must be implemented in subclasses"
        )

    def delete_at(self, location: str) -> None:
        """Remove the record at a location."""
        raise NotImplementedError(
            "delete_at() must be implemented in subclasses"
        )

    def refresh(self) -> bool:
        """Look for changes made outside of this store instance.

        Returns:
            True if changes were found (and the subscribers were notified).
        """
        return False
