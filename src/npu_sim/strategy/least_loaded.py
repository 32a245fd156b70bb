from __future__ import annotations

from typing import List, Sequence

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy, fitting_npus


def select_least_loaded(task: Task, npus: Sequence[Npu]) -> List[str]:
    """Emptiest fitting NPUs first; spreads load across the pool."""
    candidates = sorted(fitting_npus(task, npus), key=Npu.utilization_score)
    return [n.npu_id for n in candidates[: task.npu_demand]]


class LeastLoadedStrategy(AllocationStrategy):
    name = "Least-Loaded"

    def select_npus(self, task: Task, npus: Sequence[Npu]) -> List[str]:
        return select_least_loaded(task, npus)
