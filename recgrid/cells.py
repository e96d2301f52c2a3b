import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from recgrid.errors import RecGridError

if TYPE_CHECKING:
    from recgrid.proxy import ValueProxy
    from recgrid.schema import FieldDescriptor

logger = logging.getLogger(__name__)


class CellElement:
    """Base for the elements (widgets) that live inside grid cells.

    The class is designed to be mixed into widget classes, so it has no
    constructor; the state lives in attributes with class-level defaults.

    Attributes:
        row_index: The row the element is bound to; -1 when unbound.
        bound: The live value the element shows and edits.
        report_error: Called with a message when a commit fails.
    """

    row_index: int = -1
    bound: Optional["ValueProxy"] = None
    report_error: Optional[Callable[[str], None]] = None

    @property
    def is_bound(self) -> bool:
        """Tell if the element is attached to a row."""
        return self.row_index >= 0

    def attach(self, row_index: int, proxy: Optional["ValueProxy"]) -> None:
        """Attach the element to a row and (optionally) to a live value."""
        self.row_index = row_index
        self.bound = proxy
        if proxy is not None:
            self.show_value(proxy.value)

    def detach(self) -> None:
        """Forget the row and the value; the element shows nothing."""
        self.row_index = -1
        self.bound = None
        self.clear_value()

    def show_value(self, value: Any) -> None:
        """Present a value to the user.

        Reimplement this in subclasses.
        """
        raise NotImplementedError(
            "show_value() must be implemented in subclasses"
        )

    def clear_value(self) -> None:
        """Show no value."""
        self.show_value(None)

    def refresh(self) -> None:
        """Show the current value of the bound proxy again."""
        if self.bound is not None:
            self.show_value(self.bound.value)

    def commit(self, value: Any) -> bool:
        """Send a value edited by the user to the bound proxy.

        Failures are reported through `report_error` and the element goes
        back to showing the stored value.

        Returns:
            True if the stored value changed.
        """
        if self.bound is None:
            return False
        try:
            return self.bound.set_value(value)
        except RecGridError as e:
            logger.debug("Commit of %r failed: %s", value, e)
            if self.report_error is not None:
                self.report_error(str(e))
            else:
                logger.error("%s", e)
            self.refresh()
            return False


class ActionsCell(CellElement):
    """A cell that offers a list of actions for its row.

    Attributes:
        actions: The (key, label) pairs of the actions.
        action_handler: Called with the key of the action that the user
            triggered.
    """

    actions: List[Tuple[str, str]] = []
    action_handler: Optional[Callable[[str], None]] = None

    def set_actions(self, actions: List[Tuple[str, str]]) -> None:
        """Change the list of actions."""
        self.actions = list(actions)

    def trigger(self, key: str) -> None:
        """Run an action on the row of this cell."""
        if not self.is_bound:
            logger.debug("Action %s ignored: the cell is not bound", key)
            return
        if self.action_handler is not None:
            self.action_handler(key)

    def show_value(self, value: Any) -> None:
        """Action cells present no value."""


class CellFactory:
    """Creates the elements used inside the cells of the grid.

    The host provides the implementation; the column synthesizer decides
    which method to use for each column.
    """

    def make_actions_cell(self, parent: Any = None) -> ActionsCell:
        """The context-menu trigger shown in the first column."""
        raise NotImplementedError(
            "make_actions_cell() must be implemented in subclasses"
        )

    def make_identity_cell(self, parent: Any = None) -> CellElement:
        """A read-only presentation of the location of the record."""
        raise NotImplementedError(
            "make_identity_cell() must be implemented in subclasses"
        )

    def make_name_cell(self, parent: Any = None) -> CellElement:
        """An editor for the name, committed on enter or focus out."""
        raise NotImplementedError(
            "make_name_cell() must be implemented in subclasses"
        )

    def make_multiline_cell(
        self, field: "FieldDescriptor", parent: Any = None
    ) -> CellElement:
        """A multi-line text editor for long-form strings."""
        raise NotImplementedError(
            "make_multiline_cell() must be implemented in subclasses"
        )

    def make_field_cell(
        self, field: "FieldDescriptor", parent: Any = None
    ) -> CellElement:
        """The editor appropriate for the value kind of the field."""
        raise NotImplementedError(
            "make_field_cell() must be implemented in subclasses"
        )
