from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Sequence

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task


def fitting_npus(task: Task, npus: Iterable[Npu]) -> List[Npu]:
    """NPUs (in pool order) that can take one share of ``task`` right now."""
    return [n for n in npus if n.can_accommodate(task.compute_ratio, task.memory_ratio)]


def by_arrival(tasks: Iterable[Task]) -> List[Task]:
    # sorted() is stable: same-time arrivals keep waiting-list order
    return sorted(tasks, key=lambda t: t.arrival_time)


class AllocationStrategy(ABC):
    """
    Proposes which NPUs each waiting task should run on.

    A strategy only *looks* at NPU state; the pool commits (or rejects) the
    proposal. Tasks whose selection comes up short of ``npu_demand`` are left
    out of the result entirely.
    """

    name: str = "Abstract"

    def allocate(self, waiting_tasks: Sequence[Task], npus: Sequence[Npu]) -> Dict[str, List[str]]:
        allocations: Dict[str, List[str]] = {}
        for task in self.order_tasks(waiting_tasks):
            selected = self.select_npus(task, npus)
            if len(selected) >= task.npu_demand:
                allocations[task.task_id] = selected[: task.npu_demand]
        return allocations

    def order_tasks(self, tasks: Sequence[Task]) -> List[Task]:
        return by_arrival(tasks)

    @abstractmethod
    def select_npus(self, task: Task, npus: Sequence[Npu]) -> List[str]:
        ...

    # Optional hooks
    def initialize(self) -> None:
        return

    def on_allocation_complete(self, allocated: int, remaining: int) -> None:
        return

    def __str__(self) -> str:
        return self.name
