import logging
import os
import posixpath
from typing import Any, Dict, List, Optional, Type

import yaml
from pydantic import ValidationError

from recgrid.constants import SCRIPT_FIELD
from recgrid.errors import (
    InvalidNameError,
    RecordExistsError,
    RecordNotFoundError,
    StoreOperationError,
)
from recgrid.record import Record, is_kind_of, type_name_of
from recgrid.store import RecordStore

logger = logging.getLogger(__name__)


class DirectoryStore(RecordStore):
    """A store that keeps each record in its own YAML file.

    The document written for a record has two keys: `record_type`, the fully
    qualified name of the record class, and `data`, the JSON-compatible dump
    of the record.

        record_type: game.items.Item
        data:
          damage: 5
          tag: ''

    Attributes:
        root: The absolute path of the directory that holds the records.
        _cache: Records loaded so far, by location. The same instance is
            returned for a location until the file disappears or changes
            outside of this store.
        _snapshot: Modification times of the files as seen by the last scan.
            The operations of this store only update the entries they
            touch, so changes made by others are still found by `refresh`.
    """

    root: str
    _cache: Dict[str, Record]
    _snapshot: Dict[str, float]

    def __init__(self, root: str, create: bool = True):
        super().__init__()
        self.root = os.path.abspath(root)
        if create:
            os.makedirs(self.root, exist_ok=True)
        elif not os.path.isdir(self.root):
            raise StoreOperationError(
                f"The store directory {self.root} does not exist"
            )
        self._cache = {}
        self._snapshot = self._scan()

    def __repr__(self) -> str:
        return f"<DirectoryStore {self.root}>"

    def path_of(self, location: str) -> str:
        """Get the file-system path for a location."""
        parts = [p for p in location.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise InvalidNameError(
                f"Invalid record location `{location}`", location
            )
        return os.path.join(self.root, *parts)

    def exists(self, location: str) -> bool:
        """Tell if there is a file at this location."""
        return os.path.isfile(self.path_of(location))

    def locations(self) -> List[str]:
        """All record locations in enumeration order."""
        return list(self._scan().keys())

    def _scan(self) -> Dict[str, float]:
        """Walk the root directory and collect the record files."""
        result: Dict[str, float] = {}
        for dir_path, dir_names, file_names in os.walk(self.root):
            dir_names[:] = sorted(d for d in dir_names if not d.startswith("."))
            rel_dir = os.path.relpath(dir_path, self.root)
            rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/")
            for file_name in sorted(file_names):
                if file_name.startswith(".") or not file_name.endswith(
                    self.extension
                ):
                    continue
                location = (
                    posixpath.join(rel_dir, file_name) if rel_dir else file_name
                )
                try:
                    result[location] = os.path.getmtime(
                        os.path.join(dir_path, file_name)
                    )
                except OSError:
                    continue
        return result

    def _read_document(self, location: str) -> Optional[Dict[str, Any]]:
        """Read the YAML document at a location."""
        try:
            with open(self.path_of(location), "r", encoding="utf-8") as f:
                doc = yaml.safe_load(f)
        except FileNotFoundError:
            return None
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Unable to read the record at %s: %s", location, e)
            return None
        if not isinstance(doc, dict) or SCRIPT_FIELD not in doc:
            logger.warning("%s is not a record document", location)
            return None
        return doc

    def type_at(self, location: str) -> Optional[Type[Record]]:
        """Get the class of the record stored at a location."""
        cached = self._cache.get(location)
        if cached is not None:
            return type(cached)

        doc = self._read_document(location)
        if doc is None:
            return None
        cls = Record.resolve_type(str(doc[SCRIPT_FIELD]))
        if cls is None:
            logger.debug(
                "Record type %s used by %s is not registered",
                doc[SCRIPT_FIELD],
                location,
            )
        return cls

    def find_all_of_type(self, type_name: str) -> List[str]:
        result = []
        for location in self.locations():
            cls = self.type_at(location)
            if cls is not None and is_kind_of(cls, type_name):
                result.append(location)
        return result

    def load_at(self, location: str) -> Optional[Record]:
        record = self._cache.get(location)
        if record is not None:
            if self.exists(location):
                return record
            del self._cache[location]
            return None

        doc = self._read_document(location)
        if doc is None:
            return None
        cls = Record.resolve_type(str(doc[SCRIPT_FIELD]))
        if cls is None:
            logger.warning(
                "Unable to load %s: unknown record type %s",
                location,
                doc[SCRIPT_FIELD],
            )
            return None

        try:
            record = cls.model_validate(doc.get("data") or {})
        except ValidationError as e:
            logger.warning("Invalid record at %s: %s", location, e)
            return None

        self._cache[location] = record
        return record

    def location_of(self, record: Any) -> Optional[str]:
        for location, cached in self._cache.items():
            if cached is record:
                return location
        return None

    def unique_path_for(self, candidate: str) -> str:
        if not self.exists(candidate):
            return candidate
        directory = self.directory_of(candidate)
        base = self.name_of(candidate)
        index = 1
        while True:
            location = self.join(directory, f"{base} {index}")
            if not self.exists(location):
                return location
            index += 1

    def _write(self, record: Record, location: str) -> None:
        """Write the document of a record to its file."""
        path = self.path_of(location)
        doc = {
            SCRIPT_FIELD: type_name_of(type(record)),
            "data": record.model_dump(mode="json"),
        }
        tmp_path = f"{path}.tmp"
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(doc, f, sort_keys=False, allow_unicode=True)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StoreOperationError(
                f"Unable to write the record at {location}: {e}", location
            ) from e

    def _remember(self, location: str) -> None:
        """Record the modification time of a file written by this store."""
        try:
            self._snapshot[location] = os.path.getmtime(
                self.path_of(location)
            )
        except OSError:
            self._snapshot.pop(location, None)

    def create_at(self, record: Record, location: str) -> None:
        if self.location_of(record) is not None:
            raise StoreOperationError(
                f"The record is already stored at {self.location_of(record)}",
                location,
            )
        if self.exists(location):
            raise RecordExistsError(
                f"A record already exists at {location}", location
            )

        self._write(record, location)
        self._cache[location] = record
        self._remember(location)
        logger.debug("Created %s at %s", type(record).__name__, location)
        self.notify_changed()

    def save(self, record: Record) -> None:
        location = self.location_of(record)
        if location is None:
            raise RecordNotFoundError("The record is not part of this store")
        self._write(record, location)
        self._remember(location)
        logger.debug("Saved %s", location)

    def rename_at(self, location: str, new_name: str) -> str:
        if (
            not new_name
            or new_name != new_name.strip()
            or any(c in new_name for c in "/\\")
            or new_name in (".", "..")
        ):
            raise InvalidNameError(
                f"`{new_name}` can not be used as a record name", location
            )
        if not self.exists(location):
            raise RecordNotFoundError(f"No record at {location}", location)

        new_location = self.join(self.directory_of(location), new_name)
        if new_location == location:
            return location
        if self.exists(new_location):
            raise RecordExistsError(
                f"A record already exists at {new_location}", new_location
            )

        try:
            os.replace(self.path_of(location), self.path_of(new_location))
        except OSError as e:
            raise StoreOperationError(
                f"Unable to rename {location}: {e}", location
            ) from e

        record = self._cache.pop(location, None)
        if record is not None:
            self._cache[new_location] = record
        self._snapshot.pop(location, None)
        self._remember(new_location)
        logger.debug("Renamed %s to %s", location, new_location)
        self.notify_changed()
        return new_location

    def delete_at(self, location: str) -> None:
        if not self.exists(location):
            raise RecordNotFoundError(f"No record at {location}", location)
        try:
            os.remove(self.path_of(location))
        except OSError as e:
            raise StoreOperationError(
                f"Unable to delete {location}: {e}", location
            ) from e

        self._cache.pop(location, None)
        self._snapshot.pop(location, None)
        logger.debug("Deleted %s", location)
        self.notify_changed()

    def refresh(self) -> bool:
        current = self._scan()
        if current == self._snapshot:
            return False

        # Forget records that vanished or were modified by someone else.
        for location in list(self._cache.keys()):
            if self._snapshot.get(location) != current.get(location):
                del self._cache[location]

        self._snapshot = current
        logger.debug("External changes detected in %s", self.root)
        self.notify_changed()
        return True
