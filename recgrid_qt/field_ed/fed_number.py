from typing import Any

from PyQt5.QtWidgets import QAbstractSpinBox, QDoubleSpinBox, QSpinBox

from recgrid_qt.field_ed.base import GridCellEd

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
REAL_LIMIT = 1e12


class NumberMixin(GridCellEd):
    """Common behavior of the spin boxes.

    Keyboard tracking is disabled so the value is committed when the user
    presses enter, leaves the editor or uses the arrows, not on each key.
    """

    number_type: type = float

    def setup_number(self, low: float, high: float) -> None:
        fld = self.field
        if fld is not None and fld.min_value is not None:
            low = fld.min_value
        if fld is not None and fld.max_value is not None:
            high = fld.max_value
        self.setRange(  # type: ignore
            self.number_type(low), self.number_type(high)
        )
        self.setKeyboardTracking(False)  # type: ignore
        self.setFrame(False)  # type: ignore
        self.setButtonSymbols(  # type: ignore
            QAbstractSpinBox.ButtonSymbols.NoButtons
        )
        self.valueChanged.connect(self.commit_from_ui)  # type: ignore

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = read_only
        self.setReadOnly(read_only)  # type: ignore

    def display_value(self, value: Any) -> None:
        if value is None:
            self.setValue(self.minimum())  # type: ignore
        else:
            self.setValue(value)  # type: ignore


class IntCellEd(QSpinBox, NumberMixin):
    """Editor for integer numbers."""

    number_type = int

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setup_number(INT_MIN, INT_MAX)

    def display_value(self, value: Any) -> None:
        super().display_value(None if value is None else int(value))


class RealCellEd(QDoubleSpinBox, NumberMixin):
    """Editor for real numbers."""

    def __init__(self, decimals: int = 4, **kwargs) -> None:
        super().__init__(**kwargs)
        self.setDecimals(decimals)
        self.setup_number(-REAL_LIMIT, REAL_LIMIT)

    def display_value(self, value: Any) -> None:
        super().display_value(None if value is None else float(value))
