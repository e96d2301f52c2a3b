import logging
from typing import Any, Optional

from recgrid.events import CallbackList

logger = logging.getLogger(__name__)


class EditorHost:
    """The environment the grid runs in.

    The host owns the global selection (the record the user is looking at),
    asks the user for confirmations and presents errors. The Qt application
    context is the main implementation; tests use simple subclasses.

    Attributes:
        on_selection_changed: Emitted with the new selection each time it
            changes.
    """

    on_selection_changed: CallbackList
    _selection: Optional[Any]

    def __init__(self) -> None:
        self.on_selection_changed = CallbackList(name="selection-changed")
        self._selection = None

    @property
    def current_selection(self) -> Optional[Any]:
        """The object that is currently selected (may be None)."""
        return self._selection

    def set_selection(self, target: Optional[Any]) -> None:
        """Change the selection and inform the subscribers.

        Selecting the object that is already selected does nothing.
        """
        if target is self._selection:
            return
        self._selection = target
        logger.debug("Selection changed to %s", target)
        self.on_selection_changed.emit(target)

    def confirm(self, title: str, message: str) -> bool:
        """Ask the user to confirm a destructive operation."""
        raise NotImplementedError("confirm() must be implemented in subclasses")

    def show_error(self, message: str, title: str = "Error") -> None:
        """Present an error to the user."""
        raise NotImplementedError(
            "show_error() must be implemented in subclasses"
        )

    def t(self, key: str, d: str, **kwargs: Any) -> str:
        """Translate a string.

        Args:
            key: The key of the string.
            d: The default value of the string; may include `{name}`
                placeholders that are filled from the keyword arguments.
        """
        return d.format(**kwargs)
