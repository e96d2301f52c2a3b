import logging
from typing import TYPE_CHECKING, Any, Dict, Type

from recgrid.cells import CellFactory
from recgrid.constants import (
    VALUE_KIND_BOOL,
    VALUE_KIND_ENUM,
    VALUE_KIND_FLOAT,
    VALUE_KIND_INTEGER,
    VALUE_KIND_REFERENCE,
    VALUE_KIND_STRING,
)
from recgrid_qt.context_use import QtUseContext
from recgrid_qt.field_ed.base import GridCellEd
from recgrid_qt.field_ed.fed_bool import BoolCellEd
from recgrid_qt.field_ed.fed_choice import EnumCellEd, RefCellEd
from recgrid_qt.field_ed.fed_line import LineCellEd, NameCellEd
from recgrid_qt.field_ed.fed_m_text import MultiTextCellEd
from recgrid_qt.field_ed.fed_number import IntCellEd, RealCellEd
from recgrid_qt.field_ed.fed_summary import ActionsCellEd, SummaryCellEd

if TYPE_CHECKING:
    from recgrid.schema import FieldDescriptor
    from recgrid_qt.context import QtGridContext

logger = logging.getLogger(__name__)

# The editor used for each kind of value. Kinds that are not listed get a
# read-only summary.
EDITORS: Dict[str, Type[GridCellEd]] = {
    VALUE_KIND_STRING: LineCellEd,
    VALUE_KIND_INTEGER: IntCellEd,
    VALUE_KIND_FLOAT: RealCellEd,
    VALUE_KIND_BOOL: BoolCellEd,
    VALUE_KIND_ENUM: EnumCellEd,
    VALUE_KIND_REFERENCE: RefCellEd,
}


class QtCellFactory(CellFactory, QtUseContext):
    """Creates the Qt widgets used in the cells of the grid."""

    def __init__(self, ctx: "QtGridContext"):
        self.ctx = ctx

    def make_actions_cell(self, parent: Any = None) -> ActionsCellEd:
        return ActionsCellEd(ctx=self.ctx, parent=parent)

    def make_identity_cell(self, parent: Any = None) -> SummaryCellEd:
        return SummaryCellEd(ctx=self.ctx, parent=parent)

    def make_name_cell(self, parent: Any = None) -> NameCellEd:
        return NameCellEd(ctx=self.ctx, parent=parent)

    def make_multiline_cell(
        self, field: "FieldDescriptor", parent: Any = None
    ) -> MultiTextCellEd:
        return MultiTextCellEd(ctx=self.ctx, field=field, parent=parent)

    def make_field_cell(
        self, field: "FieldDescriptor", parent: Any = None
    ) -> GridCellEd:
        editor_class = EDITORS.get(field.value_kind, SummaryCellEd)
        logger.log(
            1, "Editor for %s: %s", field.path, editor_class.__name__
        )
        return editor_class(ctx=self.ctx, field=field, parent=parent)
