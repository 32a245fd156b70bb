from __future__ import annotations

from typing import List, Sequence, Set

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy


class RoundRobinStrategy(AllocationStrategy):
    """
    Round-robin NPU selection.

    A cursor into the NPU list persists across calls (and across admission
    passes), so consecutive tasks start probing where the previous one left
    off. The cursor advances on every probe, whether or not the probed NPU is
    taken. Each task gets at most ``2 * len(npus)`` probes, which bounds the
    scan even when the pool cannot satisfy it.

    Only ``initialize()`` rewinds the cursor.
    """

    name = "Round-Robin"

    def __init__(self):
        self._cursor: int = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    def initialize(self) -> None:
        self._cursor = 0

    def select_npus(self, task: Task, npus: Sequence[Npu]) -> List[str]:
        selected: List[str] = []
        n = len(npus)
        if n == 0:
            return selected

        taken: Set[str] = set()
        probes = 0
        while len(selected) < task.npu_demand and probes < 2 * n:
            npu = npus[self._cursor % n]
            self._cursor = (self._cursor + 1) % n
            probes += 1
            if npu.npu_id in taken:
                continue
            if npu.can_accommodate(task.compute_ratio, task.memory_ratio):
                selected.append(npu.npu_id)
                taken.add(npu.npu_id)
        return selected
