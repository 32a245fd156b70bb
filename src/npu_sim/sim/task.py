from __future__ import annotations

from dataclasses import dataclass, field

from npu_sim.sim.clock import SimTime


@dataclass(frozen=True)
class Task:
    """
    A request for ``npu_demand`` NPUs, each loaded with the given compute and
    memory ratios, for ``duration`` of simulated time.

    Identity is the ``task_id`` alone: two records with the same id compare
    equal even if every other field differs. The engine therefore refuses a
    second submission of an id it has already seen.
    """

    task_id: str
    arrival_time: SimTime = field(compare=False)
    npu_demand: int = field(compare=False, default=1)
    compute_ratio: float = field(compare=False, default=0.0)
    memory_ratio: float = field(compare=False, default=0.0)
    duration: SimTime = field(compare=False, default=SimTime.ZERO)

    @property
    def completion_time(self) -> SimTime:
        """Completion time if the task starts the moment it arrives."""
        return self.arrival_time + self.duration

    @property
    def resource_intensity(self) -> float:
        return self.compute_ratio + self.memory_ratio

    def is_valid(self) -> bool:
        return (
            self.npu_demand > 0
            and 0.0 <= self.compute_ratio <= 1.0
            and 0.0 <= self.memory_ratio <= 1.0
            and self.duration is not None
            and self.duration.is_positive()
        )

    def total_compute_units(self) -> float:
        return self.npu_demand * self.compute_ratio

    def total_memory_units(self) -> float:
        return self.npu_demand * self.memory_ratio

    def __str__(self) -> str:
        return (
            f"Task({self.task_id}, arrival={self.arrival_time}, "
            f"npus={self.npu_demand}, compute={self.compute_ratio:.2f}, "
            f"memory={self.memory_ratio:.2f}, duration={self.duration})"
        )
