import enum
import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
)

from attrs import define, field

from recgrid.cells import CellElement
from recgrid.constants import (
    COLUMN_KEY_ACTIONS,
    COLUMN_KEY_IDENTITY,
    COLUMN_KEY_NAME,
)
from recgrid.errors import FieldValueError, StoreOperationError
from recgrid.plugins import recgrid_pm
from recgrid.proxy import ValueProxy

if TYPE_CHECKING:
    from recgrid.cells import ActionsCell, CellFactory
    from recgrid.host import EditorHost
    from recgrid.lifecycle import LifecycleOperations
    from recgrid.loader import RecordHandle
    from recgrid.mediator import CellBindingMediator
    from recgrid.schema import FieldDescriptor

logger = logging.getLogger(__name__)

ACTIONS_COLUMN_WIDTH = 25
ACTION_DELETE = "delete"


class CellWidgetKind(enum.Enum):
    """The kind of element that is placed in the cells of a column."""

    ACTIONS = "actions"
    IDENTITY = "identity"
    NAME = "name"
    MULTILINE_TEXT = "multiline-text"
    GENERIC_FIELD = "generic-field"


@define
class ColumnDefinition:
    """A column of the grid.

    Attributes:
        key: Unique identifier of the column; the path of the field for the
            columns that map to a field.
        title: The text in the header.
        widget_kind: The kind of element used in the cells.
        make_cell: Creates the element of a cell; receives the parent.
        bind_cell: Binds an element to a row; returns False if the row or
            the value could not be found.
        unbind_cell: Detaches an element from its row.
        width: The preferred width; None lets the view decide.
        min_width: The minimum width.
        max_width: The maximum width.
        tooltip: Shown when hovering the header.
        field: The field shown in the column, if any.
    """

    key: str
    title: str
    widget_kind: CellWidgetKind
    make_cell: Callable[[Any], CellElement] = field(repr=False)
    bind_cell: Callable[[CellElement, int], bool] = field(repr=False)
    unbind_cell: Callable[[CellElement], None] = field(repr=False)
    width: Optional[int] = field(default=None)
    min_width: Optional[int] = field(default=None)
    max_width: Optional[int] = field(default=None)
    tooltip: str = field(default="")
    field: Optional["FieldDescriptor"] = field(default=None)

    @property
    def is_fixed(self) -> bool:
        """Tell if the user can not resize the column."""
        return (
            self.width is not None
            and self.min_width == self.width
            and self.max_width == self.width
        )


@define(eq=False)
class NameProxy(ValueProxy):
    """The name of a record; changing it renames the record."""

    handle: "RecordHandle" = field(repr=False)
    lifecycle: "LifecycleOperations" = field(repr=False)
    path: str = field(default=COLUMN_KEY_NAME)
    read_only: bool = field(default=False)

    @property
    def value(self) -> Any:
        return self.handle.name

    def set_value(self, value: Any) -> bool:
        return self.lifecycle.rename(self.handle, str(value or ""))


@define(eq=False)
class IdentityProxy(ValueProxy):
    """The location of a record in the store (read-only)."""

    handle: "RecordHandle" = field(repr=False)
    path: str = field(default=COLUMN_KEY_IDENTITY)
    read_only: bool = field(default=True)

    @property
    def value(self) -> Any:
        return self.handle.proxy.location or self.handle.location

    def set_value(self, value: Any) -> bool:
        raise FieldValueError(
            "The location can not be edited", self.path, value
        )


class ColumnSynthesizer:
    """Creates the columns of the grid from the schema of the records.

    The columns are, in order: the actions column (a menu with the delete
    action), optionally the identity column (the location of the record),
    the name column and one column for each field.

    The kind of element used for a field is decided here, once, from the
    field descriptor.

    Attributes:
        cells: Creates the elements.
        mediator: Binds the elements to the rows.
        lifecycle: Used by the actions and name columns.
        host: Reports errors and translates labels.
        show_identity: Add a separate, read-only column for the location.
        widths: Preferred widths by column key; overrides the defaults.
    """

    cells: "CellFactory"
    mediator: "CellBindingMediator"
    lifecycle: "LifecycleOperations"
    host: "EditorHost"
    show_identity: bool
    widths: Dict[str, int]

    def __init__(
        self,
        cells: "CellFactory",
        mediator: "CellBindingMediator",
        lifecycle: "LifecycleOperations",
        host: "EditorHost",
        show_identity: bool = False,
        widths: Optional[Dict[str, int]] = None,
    ):
        self.cells = cells
        self.mediator = mediator
        self.lifecycle = lifecycle
        self.host = host
        self.show_identity = show_identity
        self.widths = dict(widths or {})

    def build_columns(
        self, schema: Sequence["FieldDescriptor"]
    ) -> List[ColumnDefinition]:
        """Create the column definitions for a schema."""
        result = [self.actions_column()]
        if self.show_identity:
            result.append(self.identity_column())
        result.append(self.name_column())
        for fld in schema:
            result.append(self.field_column(fld))
        return result

    def _prepare(self, element: CellElement) -> CellElement:
        element.report_error = self.report_error
        return element

    def report_error(self, message: str) -> None:
        """Present an error raised while editing a cell."""
        self.host.show_error(
            message, self.host.t("recgrid.grid.edit-error", "Edit failed")
        )

    def actions_column(self) -> ColumnDefinition:
        """The column with the menu of actions for each row."""

        def make_cell(parent: Any = None) -> CellElement:
            cell = self.cells.make_actions_cell(parent)
            cell.set_actions(
                [(ACTION_DELETE, self.host.t("recgrid.grid.delete", "Delete"))]
            )
            cell.action_handler = lambda key: self.run_action(cell, key)
            return self._prepare(cell)

        return ColumnDefinition(
            key=COLUMN_KEY_ACTIONS,
            title="",
            widget_kind=CellWidgetKind.ACTIONS,
            make_cell=make_cell,
            bind_cell=self.mediator.bind_row,
            unbind_cell=self.mediator.unbind,
            width=ACTIONS_COLUMN_WIDTH,
            min_width=ACTIONS_COLUMN_WIDTH,
            max_width=ACTIONS_COLUMN_WIDTH,
        )

    def run_action(self, cell: "ActionsCell", key: str) -> bool:
        """Execute an action on the row of an actions cell.

        Returns:
            True if the action completed.
        """
        handle = self.mediator.resolve(cell.row_index)
        if handle is None:
            logger.debug("Action %s on a stale row ignored", key)
            return False

        if key != ACTION_DELETE:
            logger.warning("Unknown action %s", key)
            return False

        try:
            return self.lifecycle.delete(handle)
        except StoreOperationError as e:
            logger.error("Unable to delete %s: %s", handle.location, e)
            self.host.show_error(
                str(e), self.host.t("recgrid.delete.error", "Delete failed")
            )
            return False

    def identity_column(self) -> ColumnDefinition:
        """The column that shows the location of the records."""

        def bind_cell(element: CellElement, row_index: int) -> bool:
            return self.mediator.bind_proxy(
                element,
                row_index,
                lambda h: h.proxy.synthetic_property(
                    COLUMN_KEY_IDENTITY, lambda: IdentityProxy(handle=h)
                ),
            )

        return ColumnDefinition(
            key=COLUMN_KEY_IDENTITY,
            title=self.host.t("recgrid.grid.location", "Location"),
            widget_kind=CellWidgetKind.IDENTITY,
            make_cell=lambda parent=None: self._prepare(
                self.cells.make_identity_cell(parent)
            ),
            bind_cell=bind_cell,
            unbind_cell=self.mediator.unbind,
            width=self.widths.get(COLUMN_KEY_IDENTITY),
            min_width=60,
        )

    def name_column(self) -> ColumnDefinition:
        """The column that shows (and allows changing) the record names."""

        def bind_cell(element: CellElement, row_index: int) -> bool:
            return self.mediator.bind_proxy(
                element,
                row_index,
                lambda h: h.proxy.synthetic_property(
                    COLUMN_KEY_NAME,
                    lambda: NameProxy(handle=h, lifecycle=self.lifecycle),
                ),
            )

        return ColumnDefinition(
            key=COLUMN_KEY_NAME,
            title=self.host.t("recgrid.grid.name", "Name"),
            widget_kind=CellWidgetKind.NAME,
            make_cell=lambda parent=None: self._prepare(
                self.cells.make_name_cell(parent)
            ),
            bind_cell=bind_cell,
            unbind_cell=self.mediator.unbind,
            width=self.widths.get(COLUMN_KEY_NAME),
            min_width=60,
        )

    def field_column(self, fld: "FieldDescriptor") -> ColumnDefinition:
        """The column of a record field."""
        if fld.is_long_text:
            widget_kind = CellWidgetKind.MULTILINE_TEXT

            def make_cell(parent: Any = None) -> CellElement:
                return self._prepare(
                    self.cells.make_multiline_cell(fld, parent)
                )

        else:
            widget_kind = CellWidgetKind.GENERIC_FIELD

            def make_cell(parent: Any = None) -> CellElement:
                element = recgrid_pm.hook.make_field_cell(
                    field=fld, parent=parent
                )
                if element is None:
                    element = self.cells.make_field_cell(fld, parent)
                return self._prepare(element)

        return ColumnDefinition(
            key=fld.path,
            title=fld.display_name,
            widget_kind=widget_kind,
            make_cell=make_cell,
            bind_cell=lambda element, row_index: self.mediator.bind(
                element, row_index, fld.path
            ),
            unbind_cell=self.mediator.unbind,
            field=fld,
            width=self.widths.get(fld.path),
            min_width=40,
            tooltip=fld.description,
        )
