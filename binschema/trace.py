"""Bounded record of decode events (field reads, pointer hops, type choices)."""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Literal, Optional

TraceEvent = Literal["field", "pointer", "null_pointer", "type_choice", "byte_order"]


@dataclass(frozen=True)
class TraceEntry:
    event: TraceEvent
    offset: int
    key: str
    detail: str

    def describe(self) -> str:
        return f"0x{self.offset:08X} {self.event:<12} {self.key}: {self.detail}"


class TraceBuffer:
    """Keeps the most recent `capacity` entries; older ones are dropped."""

    def __init__(self, capacity: int = 256) -> None:
        self._entries: Deque[TraceEntry] = deque(maxlen=capacity)
        self.dropped = 0

    def record(self, entry: TraceEntry) -> None:
        if len(self._entries) == self._entries.maxlen:
            self.dropped += 1
        self._entries.append(entry)

    def snapshot(self, event: Optional[TraceEvent] = None) -> List[TraceEntry]:
        if event is None:
            return list(self._entries)
        return [entry for entry in self._entries if entry.event == event]

    def counts(self) -> Dict[str, int]:
        return dict(Counter(entry.event for entry in self._entries))

    def clear(self) -> None:
        self._entries.clear()
        self.dropped = 0


__all__ = ["TraceBuffer", "TraceEntry", "TraceEvent"]
