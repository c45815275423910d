from __future__ import annotations

import logging

from tailpoll.events import EventHook


def test_handlers_called_in_order():
    hook = EventHook("line_added")
    calls = []
    hook.connect(lambda s: calls.append(("a", s)))
    hook.connect(lambda s: calls.append(("b", s)))

    hook.emit("x")
    hook.emit("y")
    assert calls == [("a", "x"), ("b", "x"), ("a", "y"), ("b", "y")]
    assert len(hook) == 2


def test_connect_works_as_decorator():
    hook = EventHook("started")
    calls = []

    @hook.connect
    def on_started():
        calls.append(True)

    hook.emit()
    assert calls == [True]
    assert on_started is not None


def test_disconnect():
    hook = EventHook("stopped")
    calls = []
    handler = hook.connect(lambda: calls.append(1))

    assert hook.disconnect(handler) is True
    assert hook.disconnect(handler) is False
    hook.emit()
    assert calls == []


def test_failing_handler_is_logged_and_skipped(caplog):
    hook = EventHook("line_added")
    seen = []

    def boom(line):
        raise RuntimeError("handler bug")

    hook.connect(boom)
    hook.connect(seen.append)

    with caplog.at_level(logging.ERROR, logger="tailpoll.events"):
        hook.emit("42")

    assert seen == ["42"]
    assert "line_added handler" in caplog.text
    assert "handler bug" in caplog.text


def test_handler_may_disconnect_itself_during_emit():
    hook = EventHook("line_added")
    calls = []

    def once(line):
        calls.append(line)
        hook.disconnect(once)

    hook.connect(once)
    hook.emit("a")
    hook.emit("b")
    assert calls == ["a"]
