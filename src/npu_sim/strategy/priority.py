from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy
from npu_sim.strategy.best_fit import select_best_fit
from npu_sim.strategy.least_loaded import select_least_loaded

logger = logging.getLogger(__name__)

LARGE_TASK_THRESHOLD = 3
HIGH_RESOURCE_THRESHOLD = 0.6


class PriorityAwareStrategy(AllocationStrategy):
    """
    Hybrid strategy that serves big tasks first and picks a placement rule per
    task.

    Task order: ``npu_demand`` descending, then ``compute + memory`` ratio
    descending, then arrival time ascending (FIFO among equals).

    Placement:
      - "large" (demand >= 3) or "heavy" (compute + memory > 0.6) tasks use
        the least-loaded rule to spread load;
      - everything else uses best-fit to pack small work together and keep
        whole NPUs free for the large tasks.
    """

    name = "Priority-Aware (Hybrid)"

    def __init__(self):
        self.total_allocations: int = 0
        self.large_task_proposals: int = 0
        self.small_task_proposals: int = 0

    def initialize(self) -> None:
        self.total_allocations = 0
        self.large_task_proposals = 0
        self.small_task_proposals = 0

    @staticmethod
    def is_large(task: Task) -> bool:
        return (
            task.npu_demand >= LARGE_TASK_THRESHOLD
            or task.resource_intensity > HIGH_RESOURCE_THRESHOLD
        )

    def order_tasks(self, tasks: Sequence[Task]) -> List[Task]:
        return sorted(
            tasks,
            key=lambda t: (-t.npu_demand, -t.resource_intensity, t.arrival_time),
        )

    def allocate(self, waiting_tasks: Sequence[Task], npus: Sequence[Npu]) -> Dict[str, List[str]]:
        allocations = super().allocate(waiting_tasks, npus)
        for task in waiting_tasks:
            if task.task_id not in allocations:
                continue
            if self.is_large(task):
                self.large_task_proposals += 1
            else:
                self.small_task_proposals += 1
        return allocations

    def select_npus(self, task: Task, npus: Sequence[Npu]) -> List[str]:
        if self.is_large(task):
            return select_least_loaded(task, npus)
        return select_best_fit(task, npus)

    def on_allocation_complete(self, allocated: int, remaining: int) -> None:
        self.total_allocations += allocated
        if allocated > 0:
            logger.debug("[%s] allocated %d tasks, %d remaining", self.name, allocated, remaining)

    def statistics(self) -> str:
        return (
            f"Total allocations: {self.total_allocations}, "
            f"Large task proposals: {self.large_task_proposals}, "
            f"Small task proposals: {self.small_task_proposals}"
        )
