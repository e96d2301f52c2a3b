import logging
from typing import TYPE_CHECKING, Callable, Optional, Sequence

if TYPE_CHECKING:
    from recgrid.cells import CellElement
    from recgrid.loader import RecordHandle
    from recgrid.proxy import ValueProxy

logger = logging.getLogger(__name__)


class CellBindingMediator:
    """Connects cell elements to the live values of the rows.

    The mediator never holds on to the rows; it asks for the current list
    each time a cell is bound, so an index that is no longer valid (the
    table was rebuilt while the view kept an old index) simply unbinds the
    element.

    Binding and unbinding are idempotent: binding an element to the value it
    already shows, or unbinding an element that is not bound, does nothing.

    Attributes:
        rows_getter: Returns the rows of the current table.
    """

    rows_getter: Callable[[], Sequence["RecordHandle"]]

    def __init__(self, rows_getter: Callable[[], Sequence["RecordHandle"]]):
        self.rows_getter = rows_getter

    def resolve(self, row_index: int) -> Optional["RecordHandle"]:
        """Get the row at an index or None if the index is out of range."""
        rows = self.rows_getter()
        if 0 <= row_index < len(rows):
            return rows[row_index]
        return None

    def bind(self, element: "CellElement", row_index: int, path: str) -> bool:
        """Bind an element to a field of the record on a row.

        Args:
            element: The cell element.
            row_index: The index of the row in the current table.
            path: The name of the field.

        Returns:
            True if the element is now bound, False if the row or the field
            could not be found (the element is left unbound).
        """
        handle = self.resolve(row_index)
        if handle is None:
            logger.debug("Row %d is no longer part of the table", row_index)
            self.unbind(element)
            return False

        proxy = handle.proxy.find_property(path)
        if proxy is None:
            logger.debug("%s has no field named %s", handle.location, path)
            self.unbind(element)
            return False

        return self._attach(element, row_index, proxy)

    def bind_proxy(
        self,
        element: "CellElement",
        row_index: int,
        resolver: Callable[["RecordHandle"], Optional["ValueProxy"]],
    ) -> bool:
        """Bind an element to a value that is computed from the row.

        This is how the columns that do not map to a record field (name,
        location) are bound.
        """
        handle = self.resolve(row_index)
        proxy = resolver(handle) if handle is not None else None
        if proxy is None:
            self.unbind(element)
            return False
        return self._attach(element, row_index, proxy)

    def bind_row(self, element: "CellElement", row_index: int) -> bool:
        """Attach an element to a row without binding it to a value."""
        if self.resolve(row_index) is None:
            self.unbind(element)
            return False
        if element.row_index == row_index and element.bound is None:
            return True
        element.attach(row_index, None)
        return True

    def unbind(self, element: "CellElement") -> None:
        """Detach an element from its row; no-op if it is not bound."""
        if not element.is_bound and element.bound is None:
            return
        element.detach()

    def _attach(
        self, element: "CellElement", row_index: int, proxy: "ValueProxy"
    ) -> bool:
        if element.row_index == row_index and element.bound is proxy:
            return True
        element.attach(row_index, proxy)
        return True
