from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from recgrid.record import Record
    from recgrid.store import RecordStore
    from recgrid_qt.context import QtGridContext


class QtUseContext:
    """Mixin for the widgets that work through the grid context.

    The class that uses it sets `ctx` in its constructor.
    """

    ctx: "QtGridContext"

    @property
    def store(self) -> "RecordStore":
        """The store being edited."""
        return self.ctx.store

    def select_record(self, record: Optional["Record"]) -> None:
        """Make a record (or nothing) the selection of the application."""
        self.ctx.set_selection(record)

    def t(self, text: str, d: str, **kwargs: Any) -> str:
        """Translate a label.

        Args:
            text: The key of the label.
            d: The text used when no translation exists; `{name}`
                placeholders are filled from `kwargs`.
        """
        return self.ctx.t(text, d, **kwargs)

    def show_error(self, message: str, title: str = "Error"):
        """Present an error through the context."""
        self.ctx.show_error(message, title)

    def get_stg(self, key: str, default: Any = None) -> Any:
        """Read a local setting (dot-separated key)."""
        return self.ctx.get_stg(key, default)

    def set_stg(self, key: str, value: Any):
        """Change a local setting (dot-separated key)."""
        self.ctx.set_stg(key, value)
