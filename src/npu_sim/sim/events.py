from __future__ import annotations

import heapq
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple

from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task


class EventKind(Enum):
    ARRIVAL = "ARRIVAL"
    COMPLETION = "COMPLETION"


@dataclass(frozen=True, order=True)
class Event:
    """
    A simulation event, ordered by ``(time, seq)``.

    ``seq`` is stamped by the ``EventQueue`` on insertion, so events with the
    same timestamp come back out in the order they went in.
    """

    time: SimTime
    seq: int = 0
    kind: EventKind = field(compare=False, default=EventKind.ARRIVAL)
    task: Optional[Task] = field(compare=False, default=None)
    npu_ids: Tuple[str, ...] = field(compare=False, default=())

    @classmethod
    def arrival(cls, task: Task) -> "Event":
        return cls(time=task.arrival_time, kind=EventKind.ARRIVAL, task=task)

    @classmethod
    def completion(cls, time: SimTime, task: Task, npu_ids) -> "Event":
        return cls(time=time, kind=EventKind.COMPLETION, task=task, npu_ids=tuple(npu_ids))

    def __str__(self) -> str:
        task_id = self.task.task_id if self.task is not None else "-"
        return f"Event({self.kind.value}, t={self.time}, seq={self.seq}, task={task_id})"


class EventQueue:
    """Min-heap of events keyed by (time, insertion sequence)."""

    def __init__(self):
        self._heap: List[Event] = []
        self._seq: int = 0

    def add(self, event: Event) -> Event:
        if event is None:
            raise ValueError("event must not be None")
        self._seq += 1
        stamped = replace(event, seq=self._seq)
        heapq.heappush(self._heap, stamped)
        return stamped

    def poll(self) -> Optional[Event]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)

    def peek(self) -> Optional[Event]:
        if not self._heap:
            return None
        return self._heap[0]

    def size(self) -> int:
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def clear(self) -> None:
        # seq keeps growing across clears
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
