import logging
from typing import Any, Callable, List, Optional

from attrs import define, field

logger = logging.getLogger(__name__)


@define(eq=False)
class Subscription:
    """A connection between a callback list and a callback.

    The subscription is released either explicitly, by calling `release()`,
    or by using it as a context manager. Releasing it twice is harmless.
    """

    source: Optional["CallbackList"] = field(default=None, repr=False)
    callback: Optional[Callable[..., Any]] = field(default=None)

    @property
    def active(self) -> bool:
        """Tell if the callback is still connected."""
        return self.source is not None

    def release(self) -> None:
        """Disconnect the callback from its source."""
        if self.source is None:
            return
        self.source.disconnect(self.callback)  # type: ignore[arg-type]
        self.source = None
        self.callback = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *args) -> None:
        self.release()


@define
class CallbackList:
    """A list of callbacks that are invoked, in order, by `emit()`.

    Attributes:
        name: A label used in log messages.
        callbacks: The connected callbacks.
    """

    name: str = field(default="")
    callbacks: List[Callable[..., Any]] = field(factory=list, repr=False)

    def __len__(self) -> int:
        return len(self.callbacks)

    def connect(self, callback: Callable[..., Any]) -> Subscription:
        """Connect a callback.

        Args:
            callback: The function to call when the list is emitted.

        Returns:
            The subscription that can be used to disconnect the callback.
        """
        self.callbacks.append(callback)
        return Subscription(source=self, callback=callback)

    def disconnect(self, callback: Callable[..., Any]) -> bool:
        """Disconnect a callback.

        Returns:
            True if the callback was connected, False otherwise.
        """
        try:
            self.callbacks.remove(callback)
            return True
        except ValueError:
            logger.debug("%s: callback %s not connected", self.name, callback)
            return False

    def emit(self, *args: Any, **kwargs: Any) -> None:
        """Invoke all the callbacks with the given arguments.

        The list is copied before iterating so callbacks can disconnect
        themselves (or others) while being called.
        """
        for callback in list(self.callbacks):
            callback(*args, **kwargs)
