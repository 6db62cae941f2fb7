"""Security audit events.

Handlers, guards and middleware report what happened (``auth.login.failure``,
``auth.token.invalid``, ...) through ``emit_security_event``. Nothing is
delivered until a sink is installed::

    from wren.security.audit import logging_sink, set_security_event_sink

    set_security_event_sink(logging_sink)
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, TypeAlias

_log = logging.getLogger("wren.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """One audit record. ``path``/``method`` come from the request, if any."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    user_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


SecurityEventSink: TypeAlias = Callable[[SecurityEvent], None]


class _SinkSlot:
    """The process-wide sink, swapped atomically."""

    __slots__ = ("_lock", "sink")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.sink: SecurityEventSink | None = None

    def swap(self, sink: SecurityEventSink | None) -> None:
        with self._lock:
            self.sink = sink

    def current(self) -> SecurityEventSink | None:
        with self._lock:
            return self.sink


_slot = _SinkSlot()


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Install *sink* for every later event; ``None`` turns delivery off."""
    _slot.swap(sink)


def logging_sink(event: SecurityEvent) -> None:
    """Write *event* to the ``wren.security`` logger at INFO."""
    _log.info(
        "%s method=%s path=%s user=%s details=%s",
        event.name,
        event.method,
        event.path,
        event.user_id,
        event.details,
    )


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    user_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Build a ``SecurityEvent`` and hand it to the installed sink, if any."""
    sink = _slot.current()
    if sink is None:
        return
    sink(
        SecurityEvent(
            name,
            path=getattr(request, "path", None),
            method=getattr(request, "method", None),
            user_id=user_id,
            details=dict(details or {}),
        )
    )
