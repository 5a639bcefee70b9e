from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, Union

if TYPE_CHECKING:
    from doctree.tree import DocTree, Node


class EventType(str, Enum):
    NODE = "node"
    SIGNAL = "signal"


@dataclass
class NodeEvent:
    node: "Node"
    control: Any
    type: EventType = field(default=EventType.NODE, init=False)


@dataclass
class SignalEvent:
    signal: str
    control: Any
    doc_tree: "DocTree"
    type: EventType = field(default=EventType.SIGNAL, init=False)


Event = Union[NodeEvent, SignalEvent]


class Listener(Protocol):
    def listen(self, event: Event) -> None:
        ...
