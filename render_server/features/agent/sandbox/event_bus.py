from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

EventSink = Callable[[Any], Awaitable[Any]]

_event_sink_var: ContextVar[EventSink | None] = ContextVar("render_event_sink", default=None)


@contextmanager
def bind_event_sink(sink: EventSink):
    token = _event_sink_var.set(sink)
    try:
        yield
    finally:
        _event_sink_var.reset(token)


def has_event_sink() -> bool:
    return _event_sink_var.get() is not None


async def emit_event(event: Any) -> None:
    """Hand an event to the sink bound for the current request, if any."""
    sink = _event_sink_var.get()
    if sink is None:
        return
    try:
        await sink(event)
    except Exception:
        logger.warning("Event sink rejected %s; continuing.", type(event).__name__, exc_info=True)
