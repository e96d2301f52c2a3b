import logging
from typing import TYPE_CHECKING, Type

from pydantic import ValidationError

from recgrid.errors import RecordCreateError, RecordNotFoundError
from recgrid.loader import RecordHandle
from recgrid.record import creatable_info

if TYPE_CHECKING:
    from recgrid.host import EditorHost
    from recgrid.record import Record
    from recgrid.store import RecordStore

logger = logging.getLogger(__name__)


class LifecycleOperations:
    """Creates, renames and deletes records.

    None of the operations reloads the table; the store notifies its
    subscribers and the controller rebuilds the table in response.

    Store failures propagate as `StoreOperationError`; the callers present
    them through `EditorHost.show_error`.

    Attributes:
        store: The store that holds the records.
        host: Provides the selection and the confirmation dialogs.
    """

    store: "RecordStore"
    host: "EditorHost"

    def __init__(self, store: "RecordStore", host: "EditorHost"):
        self.store = store
        self.host = host

    def base_name_for(self, record_type: Type["Record"]) -> str:
        """The name of new records of a type (before making it unique)."""
        info = creatable_info(record_type)
        if info is not None and info.file_name:
            return info.file_name
        return record_type.__name__

    def target_directory(self) -> str:
        """The directory where new records are created.

        That is the directory of the selected record, if the selection is a
        persisted record, or the root of the store.
        """
        selection = self.host.current_selection
        if selection is not None:
            location = self.store.location_of(selection)
            if location is not None:
                return self.store.directory_of(location)
        return ""

    def create(self, record_type: Type["Record"]) -> RecordHandle:
        """Create and persist a new record with default values.

        The new record becomes the selection of the host.

        Raises:
            RecordCreateError: The type can not be instantiated with
                default values.
        """
        location = self.store.unique_path_for(
            self.store.join(
                self.target_directory(), self.base_name_for(record_type)
            )
        )

        try:
            record = record_type()
        except ValidationError as e:
            raise RecordCreateError(
                f"Unable to create a default {record_type.__name__}: {e}",
                location,
            ) from e

        self.store.create_at(record, location)
        logger.info("Created %s", location)

        self.host.set_selection(record)
        return RecordHandle.create(self.store, record, location)

    def rename(self, handle: RecordHandle, new_name: str) -> bool:
        """Change the name of a record.

        Surrounding white space is removed from the new name.

        Returns:
            False if the name is unchanged (the store is not touched), True
            if the record was renamed.
        """
        new_name = new_name.strip()
        if new_name == handle.name:
            return False

        location = handle.proxy.location or handle.location
        new_location = self.store.rename_at(location, new_name)
        handle.location = new_location
        logger.info("Renamed %s to %s", location, new_location)
        return True

    def delete(self, handle: RecordHandle) -> bool:
        """Delete a record after the user confirms.

        Returns:
            False if the user cancelled, True if the record was deleted.
        """
        location = handle.proxy.location
        if location is None:
            raise RecordNotFoundError(
                f"{handle.location} is no longer part of the store",
                handle.location,
            )

        confirmed = self.host.confirm(
            self.host.t("recgrid.delete.title", "Delete"),
            self.host.t(
                "recgrid.delete.message",
                "Are you sure you want to delete {name}?",
                name=handle.name,
            ),
        )
        if not confirmed:
            logger.debug("Deletion of %s cancelled", location)
            return False

        self.store.delete_at(location)
        logger.info("Deleted %s", location)
        return True
