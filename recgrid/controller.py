import enum
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Type

from attrs import define, field

from recgrid.columns import ColumnDefinition, ColumnSynthesizer
from recgrid.errors import StoreOperationError
from recgrid.events import CallbackList, Subscription
from recgrid.lifecycle import LifecycleOperations
from recgrid.loader import RecordHandle, load_records
from recgrid.mediator import CellBindingMediator
from recgrid.plugins import recgrid_pm, safe_hook_call
from recgrid.record import Record
from recgrid.schema import FieldDescriptor, SchemaProvider, extract_schema

if TYPE_CHECKING:
    from recgrid.cells import CellFactory
    from recgrid.host import EditorHost
    from recgrid.store import RecordStore

logger = logging.getLogger(__name__)


class GridState(enum.Enum):
    """The state of the grid."""

    EMPTY = "empty"
    LOADED = "loaded"


@define(frozen=True)
class TableState:
    """Everything the grid shows for one type of records.

    A table is never changed after it was published; each reload creates a
    new one with a larger generation.

    Attributes:
        record_type: The class of the records; None for the empty table.
        rows: The records, in display order.
        schema: The fields of the records.
        columns: The columns of the grid.
        generation: Increases with each published table.
    """

    record_type: Optional[Type[Record]] = field(default=None)
    rows: Tuple[RecordHandle, ...] = field(default=())
    schema: Tuple[FieldDescriptor, ...] = field(default=())
    columns: Tuple[ColumnDefinition, ...] = field(default=())
    generation: int = field(default=0)

    @property
    def state(self) -> GridState:
        if self.record_type is None:
            return GridState.EMPTY
        return GridState.LOADED

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column_index(self, key: str) -> int:
        """Find the index of a column by its key; -1 if not found."""
        for i, column in enumerate(self.columns):
            if column.key == key:
                return i
        return -1


class GridController:
    """Decides what the grid shows.

    The controller follows the selection of the host: when a persisted
    record is selected all the records of the same type are loaded and
    shown; when anything else is selected the grid becomes empty. Changes
    in the store cause the table to be rebuilt.

    Each table is built in full before being published through
    `on_table_changed`; if building fails the previous table stays.

    Attributes:
        store: The store that holds the records.
        host: Provides the selection and presents errors.
        cells: Creates the elements of the cells.
        schema_provider: Lists the fields of the records.
        sort_rows: Sort the rows by name.
        lifecycle: Creates, renames and deletes records.
        mediator: Binds the cells to the rows of the current table.
        synthesizer: Creates the columns.
        table: The table that is currently published.
        on_table_changed: Emitted with the new table after each change.
    """

    store: "RecordStore"
    host: "EditorHost"
    cells: "CellFactory"
    schema_provider: Optional[SchemaProvider]
    sort_rows: bool
    lifecycle: LifecycleOperations
    mediator: CellBindingMediator
    synthesizer: ColumnSynthesizer
    table: TableState
    on_table_changed: CallbackList
    _generation: int
    _subscriptions: List[Subscription]

    def __init__(
        self,
        store: "RecordStore",
        host: "EditorHost",
        cells: "CellFactory",
        schema_provider: Optional[SchemaProvider] = None,
        sort_rows: bool = True,
        show_identity: bool = False,
        widths: Optional[Dict[str, int]] = None,
    ):
        self.store = store
        self.host = host
        self.cells = cells
        self.schema_provider = schema_provider
        self.sort_rows = sort_rows
        self.lifecycle = LifecycleOperations(store, host)
        self.mediator = CellBindingMediator(lambda: self.table.rows)
        self.synthesizer = ColumnSynthesizer(
            cells,
            self.mediator,
            self.lifecycle,
            host,
            show_identity=show_identity,
            widths=widths,
        )
        self.table = TableState()
        self.on_table_changed = CallbackList(name="table-changed")
        self._generation = 0
        self._subscriptions = []

    @property
    def state(self) -> GridState:
        return self.table.state

    @property
    def current_type(self) -> Optional[Type[Record]]:
        """The class of the records in the grid."""
        return self.table.record_type

    @property
    def is_open(self) -> bool:
        return bool(self._subscriptions)

    def open(self) -> None:
        """Start following the selection and the store.

        The current selection is evaluated right away.
        """
        if self._subscriptions:
            return
        self._subscriptions = [
            self.host.on_selection_changed.connect(self.on_selection_changed),
            self.store.subscribe(self.on_store_changed),
        ]
        self.on_selection_changed(self.host.current_selection)

    def close(self) -> None:
        """Stop following the selection and the store; clear the grid."""
        for subscription in self._subscriptions:
            subscription.release()
        self._subscriptions = []
        self.clear()

    def on_selection_changed(self, target: Any) -> None:
        """React to a change of the selection."""
        if isinstance(target, Record) and self.store.is_persistent(target):
            self.load_for_type(type(target))
        else:
            self.clear()

    def on_store_changed(self) -> None:
        """React to a change in the store."""
        record_type = self.current_type
        if record_type is not None:
            self.load_for_type(record_type)

    def clear(self) -> None:
        """Show nothing."""
        if self.table.state == GridState.EMPTY:
            return
        self._generation += 1
        self._publish(TableState(generation=self._generation))

    def build_table(
        self, record_type: Type[Record], generation: int
    ) -> TableState:
        """Create the table for a type of records.

        When there are no records the table has no columns, as the schema
        is read from the first record.
        """
        rows = load_records(self.store, record_type, sort_rows=self.sort_rows)
        if rows:
            schema = extract_schema(rows[0], self.schema_provider)
            columns = self.synthesizer.build_columns(schema)
        else:
            schema = []
            columns = []
        return TableState(
            record_type=record_type,
            rows=tuple(rows),
            schema=tuple(schema),
            columns=tuple(columns),
            generation=generation,
        )

    def load_for_type(self, record_type: Type[Record]) -> bool:
        """Load the records of a type and publish the new table.

        Returns:
            True if the new table was published, False if building it
            failed (the previous table is kept).
        """
        generation = self._generation + 1
        try:
            table = self.build_table(record_type, generation)
        except Exception as e:
            logger.error(
                "Unable to build the table for %s",
                record_type.__name__,
                exc_info=True,
            )
            self.host.show_error(
                self.host.t(
                    "recgrid.grid.load-error",
                    "Unable to show the records of type {name}: {error}",
                    name=record_type.__name__,
                    error=e,
                ),
                self.host.t("recgrid.grid.load-error-title", "Load failed"),
            )
            return False

        self._generation = generation
        self._publish(table)
        logger.debug(
            "Table %d: %d rows, %d columns of %s",
            generation,
            table.row_count,
            table.column_count,
            record_type.__name__,
        )
        safe_hook_call(recgrid_pm.hook.table_loaded, table=table)
        return True

    def create_new(self) -> Optional[RecordHandle]:
        """Create a record of the current type.

        Errors are presented to the user.

        Returns:
            The handle of the new record or None if it was not created.
        """
        record_type = self.current_type
        if record_type is None:
            return None
        try:
            return self.lifecycle.create(record_type)
        except StoreOperationError as e:
            logger.error("Unable to create a %s: %s", record_type.__name__, e)
            self.host.show_error(
                str(e), self.host.t("recgrid.create.error", "Create failed")
            )
            return None

    def is_current(self, generation: int) -> bool:
        """Tell if a generation is the one currently published."""
        return generation == self.table.generation

    def _publish(self, table: TableState) -> None:
        self.table = table
        self.on_table_changed.emit(table)
