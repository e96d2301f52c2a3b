import logging
from typing import TYPE_CHECKING, Any, Optional

from PyQt5.QtWidgets import QWidget

from recgrid.cells import CellElement
from recgrid_qt.context_use import QtUseContext

if TYPE_CHECKING:
    from recgrid.schema import FieldDescriptor
    from recgrid_qt.context import QtGridContext


logger = logging.getLogger(__name__)


class GridCellEd(QtUseContext, CellElement):
    """Base class for the editors placed in the cells of the grid.

    The editor shows the value of the proxy it is bound to (see
    `CellElement`). Changes made by the user are sent to the proxy through
    `commit_from_ui()`, which ignores the changes caused by the editor
    itself while it presents a new value.

    Attributes:
        field: The field the editor is for; None for the synthetic columns.
        description: Shown as tool-tip and in the status bar.
    """

    field: Optional["FieldDescriptor"] = None
    description: str = ""
    _loading: bool = False
    _committing: bool = False
    _read_only: bool = False

    def __init__(  # type: ignore
        self,
        ctx: "QtGridContext",
        field: Optional["FieldDescriptor"] = None,
        description: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)  # type: ignore
        self.ctx = ctx
        self.field = field
        if description is None and field is not None:
            description = field.description
        self.description = description or ""
        self.setAutoFillBackground(True)  # type: ignore
        self.apply_description()  # type: ignore
        if field is not None and field.read_only:
            self.set_read_only(True)

    @property
    def nullable(self) -> bool:
        return self.field is not None and self.field.nullable

    def apply_description(self: QWidget):  # type: ignore
        """Apply the description to the widget."""
        if self.description:
            self.setToolTip(self.description)
            self.setStatusTip(self.description)

    def set_read_only(self, read_only: bool) -> None:
        """Prevent the user from changing the value.

        The default implementation disables the widget.
        """
        self._read_only = read_only
        self.setEnabled(not read_only)  # type: ignore

    def show_value(self, value: Any) -> None:
        self._loading = True
        try:
            self.display_value(value)
        finally:
            self._loading = False

    def display_value(self, value: Any) -> None:
        """Present the value in the widget.

        Reimplement this function in subclasses.
        """
        raise NotImplementedError(
            "display_value() must be implemented in subclasses."
        )

    def commit_from_ui(self, value: Any) -> bool:
        """Send the value entered by the user to the bound proxy.

        Returns:
            True if the stored value changed.
        """
        if self._loading or self._committing or self._read_only:
            return False
        if self.bound is not None and self.bound.value == value:
            return False

        # The error dialog can take the focus away, which would make some
        # editors commit again.
        self._committing = True
        try:
            return self.commit(value)
        finally:
            self._committing = False
