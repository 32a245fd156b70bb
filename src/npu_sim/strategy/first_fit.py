from __future__ import annotations

from typing import List, Sequence

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy


class FirstFitStrategy(AllocationStrategy):
    """Take the first ``npu_demand`` NPUs, in pool order, that fit the task."""

    name = "First-Fit"

    def select_npus(self, task: Task, npus: Sequence[Npu]) -> List[str]:
        selected: List[str] = []
        for npu in npus:
            if npu.can_accommodate(task.compute_ratio, task.memory_ratio):
                selected.append(npu.npu_id)
                if len(selected) >= task.npu_demand:
                    break
        return selected
