from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from npu_sim.cluster.npu import Npu
from npu_sim.sim.task import Task
from npu_sim.strategy.base import AllocationStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolStatistics:
    average_compute_utilization: float
    average_memory_utilization: float
    idle_npu_count: int
    total_running_tasks: int
    npu_count: int

    def __str__(self) -> str:
        return (
            f"PoolStatistics(avg_compute={self.average_compute_utilization:.3f}, "
            f"avg_memory={self.average_memory_utilization:.3f}, "
            f"idle={self.idle_npu_count}/{self.npu_count}, "
            f"running={self.total_running_tasks})"
        )


class NpuPool:
    """
    Owns the NPUs and the active allocation strategy.

    The strategy proposes; the pool commits. Each task's commit is atomic: it
    either lands on every NPU it was given or on none of them. Capacity
    shortfalls are reported only through the returned mapping, never raised.
    """

    def __init__(self, npu_count: int, strategy: AllocationStrategy):
        if npu_count <= 0:
            raise ValueError("npu_count must be > 0")
        self._npus: List[Npu] = [Npu(f"NPU-{i}") for i in range(npu_count)]
        self._by_id: Dict[str, Npu] = {n.npu_id: n for n in self._npus}
        self._strategy: AllocationStrategy = strategy
        self._strategy.initialize()

    @property
    def npus(self) -> Sequence[Npu]:
        return tuple(self._npus)

    @property
    def strategy(self) -> AllocationStrategy:
        return self._strategy

    def set_strategy(self, strategy: AllocationStrategy) -> None:
        strategy.initialize()
        self._strategy = strategy

    def npu(self, npu_id: str) -> Optional[Npu]:
        return self._by_id.get(npu_id)

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def allocate_for_waiting_tasks(self, waiting_tasks: Sequence[Task]) -> Dict[str, List[str]]:
        """
        Ask the strategy for a proposal and commit as much of it as still fits.

        Returns ``task_id -> npu_ids`` for the tasks that fully committed, in
        the order the strategy proposed them.
        """
        valid = [t for t in waiting_tasks if t is not None and t.is_valid()]
        if not valid:
            self._strategy.on_allocation_complete(0, 0)
            return {}

        by_id = {t.task_id: t for t in valid}
        proposal = self._strategy.allocate(valid, self.npus)

        committed: Dict[str, List[str]] = {}
        for task_id, npu_ids in proposal.items():
            task = by_id.get(task_id)
            if task is None:
                logger.debug("Strategy proposed unknown task %s; ignoring", task_id)
                continue
            if self._commit(task, list(npu_ids)):
                committed[task_id] = list(npu_ids)

        self._strategy.on_allocation_complete(len(committed), len(valid) - len(committed))
        return committed

    def _commit(self, task: Task, npu_ids: List[str]) -> bool:
        if len(npu_ids) != task.npu_demand or len(set(npu_ids)) != len(npu_ids):
            logger.debug("Rejecting %s: proposal %s does not match demand %d",
                         task.task_id, npu_ids, task.npu_demand)
            return False

        targets: List[Npu] = []
        for npu_id in npu_ids:
            npu = self._by_id.get(npu_id)
            if npu is None:
                logger.debug("Rejecting %s: unknown NPU %s", task.task_id, npu_id)
                return False
            if not npu.can_accommodate(task.compute_ratio, task.memory_ratio):
                logger.debug("Rejecting %s: %s no longer fits", task.task_id, npu_id)
                return False
            targets.append(npu)

        done: List[Npu] = []
        try:
            for npu in targets:
                npu.allocate(task.task_id, task.compute_ratio, task.memory_ratio)
                done.append(npu)
        except RuntimeError as exc:
            logger.debug("Rolling back %s after partial commit on %d NPUs: %s",
                         task.task_id, len(done), exc)
            for npu in reversed(done):
                npu.deallocate(task.task_id, task.compute_ratio, task.memory_ratio)
            return False
        return True

    def deallocate_for_task(self, task: Task, npu_ids: Sequence[str]) -> None:
        for npu_id in npu_ids:
            npu = self._by_id.get(npu_id)
            if npu is None:
                raise RuntimeError(f"Unknown NPU {npu_id} for task {task.task_id}")
            npu.deallocate(task.task_id, task.compute_ratio, task.memory_ratio)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def statistics(self) -> PoolStatistics:
        n = len(self._npus)
        return PoolStatistics(
            average_compute_utilization=sum(x.compute_utilization for x in self._npus) / n,
            average_memory_utilization=sum(x.memory_utilization for x in self._npus) / n,
            idle_npu_count=sum(1 for x in self._npus if x.is_idle()),
            total_running_tasks=sum(len(x.running_tasks) for x in self._npus),
            npu_count=n,
        )

    def reset(self) -> None:
        for npu in self._npus:
            npu.reset()
        self._strategy.initialize()

    def __len__(self) -> int:
        return len(self._npus)
