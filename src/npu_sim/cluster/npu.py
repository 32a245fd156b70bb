from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set


@dataclass
class Npu:
    npu_id: str
    compute_utilization: float = 0.0
    memory_utilization: float = 0.0
    running_tasks: Set[str] = field(default_factory=set)

    def can_accommodate(self, compute_ratio: float, memory_ratio: float) -> bool:
        return (
            self.compute_utilization + compute_ratio <= 1.0
            and self.memory_utilization + memory_ratio <= 1.0
        )

    def allocate(self, task_id: str, compute_ratio: float, memory_ratio: float) -> None:
        if not self.can_accommodate(compute_ratio, memory_ratio):
            raise RuntimeError(f"NPU {self.npu_id} cannot accommodate task {task_id}")
        self.compute_utilization += compute_ratio
        self.memory_utilization += memory_ratio
        self.running_tasks.add(task_id)

    def deallocate(self, task_id: str, compute_ratio: float, memory_ratio: float) -> None:
        if task_id not in self.running_tasks:
            raise RuntimeError(f"Task {task_id} is not running on NPU {self.npu_id}")
        self.compute_utilization = max(0.0, self.compute_utilization - compute_ratio)
        self.memory_utilization = max(0.0, self.memory_utilization - memory_ratio)
        self.running_tasks.discard(task_id)
        if not self.running_tasks:
            self.compute_utilization = 0.0
            self.memory_utilization = 0.0

    def available_compute(self) -> float:
        return max(0.0, 1.0 - self.compute_utilization)

    def available_memory(self) -> float:
        return max(0.0, 1.0 - self.memory_utilization)

    def utilization_score(self) -> float:
        """Fullness of the unit: the larger of its two gauges."""
        return max(self.compute_utilization, self.memory_utilization)

    def is_idle(self) -> bool:
        return not self.running_tasks

    def reset(self) -> None:
        self.compute_utilization = 0.0
        self.memory_utilization = 0.0
        self.running_tasks.clear()
