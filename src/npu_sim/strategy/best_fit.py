from __future__ import annotations

from typing import List, Sequence

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy, fitting_npus


def select_best_fit(task: Task, npus: Sequence[Npu]) -> List[str]:
    """Most-loaded NPUs that still fit first; packs work to limit fragmentation."""
    candidates = sorted(fitting_npus(task, npus), key=Npu.utilization_score, reverse=True)
    return [n.npu_id for n in candidates[: task.npu_demand]]


class BestFitStrategy(AllocationStrategy):
    name = "Best-Fit"

    def select_npus(self, task: Task, npus: Sequence[Npu]) -> List[str]:
        return select_best_fit(task, npus)
