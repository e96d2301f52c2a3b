from unittest.mock import Mock

from recgrid.events import CallbackList


def test_emit_calls_callbacks_in_order():
    calls = []
    cb_list = CallbackList(name="test")
    cb_list.connect(lambda x: calls.append(("a", x)))
    cb_list.connect(lambda x: calls.append(("b", x)))

    cb_list.emit(1)

    assert calls == [("a", 1), ("b", 1)]
    assert len(cb_list) == 2


def test_release_disconnects():
    callback = Mock()
    cb_list = CallbackList()
    sub = cb_list.connect(callback)
    assert sub.active

    sub.release()
    cb_list.emit()

    callback.assert_not_called()
    assert not sub.active
    assert len(cb_list) == 0


def test_release_twice_is_harmless():
    cb_list = CallbackList()
    sub = cb_list.connect(Mock())
    sub.release()
    sub.release()
    assert len(cb_list) == 0


def test_subscription_as_context_manager():
    callback = Mock()
    cb_list = CallbackList()
    with cb_list.connect(callback):
        cb_list.emit("x")
    cb_list.emit("y")
    callback.assert_called_once_with("x")


def test_disconnect_unknown_callback():
    cb_list = CallbackList()
    assert cb_list.disconnect(Mock()) is False


def test_callback_can_release_itself_while_emitting():
    calls = []
    cb_list = CallbackList()

    def once():
        calls.append("once")
        sub.release()

    sub = cb_list.connect(once)
    cb_list.connect(lambda: calls.append("always"))

    cb_list.emit()
    cb_list.emit()

    assert calls == ["once", "always", "always"]
