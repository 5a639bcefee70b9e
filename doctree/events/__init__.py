"""Events emitted by a documentation control to its listeners."""

from .model import Event, EventType, Listener, NodeEvent, SignalEvent

__all__ = [
    "Event",
    "EventType",
    "Listener",
    "NodeEvent",
    "SignalEvent",
]
