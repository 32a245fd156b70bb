from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task


@dataclass
class SimulationStatistics:
    total_tasks: int = 0
    accepted_tasks: int = 0
    completed_tasks: int = 0
    processed_events: int = 0
    admission_passes: int = 0

    # job-level stats
    response_times: List[SimTime] = field(default_factory=list)
    wait_times: List[SimTime] = field(default_factory=list)

    # time-weighted pool usage: integral of (sum of gauges) over simulated seconds
    last_time: SimTime = SimTime.ZERO
    compute_time: float = 0.0
    memory_time: float = 0.0
    busy_npu_time: float = 0.0

    # wall clock, from time.perf_counter()
    wall_start: float = 0.0
    wall_end: float = 0.0

    # ------------------------------------------------------------------
    # Hooks called by the engine
    # ------------------------------------------------------------------

    def on_task_submitted(self, task: Task) -> None:
        self.total_tasks += 1

    def on_task_accepted(self, task: Task, now: SimTime) -> None:
        self.accepted_tasks += 1
        self.wait_times.append(now - task.arrival_time)

    def on_task_completed(self, task: Task, now: SimTime) -> None:
        self.completed_tasks += 1
        self.response_times.append(now - task.arrival_time)

    def on_event(self) -> None:
        self.processed_events += 1

    def on_admission_pass(self) -> None:
        self.admission_passes += 1

    def record_interval(self, now: SimTime, npus) -> None:
        """Integrate NPU usage over [last_time, now] using the current gauges."""
        dt = (now - self.last_time).to_seconds()
        if dt < 0:
            raise ValueError("Time went backwards")
        if dt > 0:
            self.compute_time += dt * sum(n.compute_utilization for n in npus)
            self.memory_time += dt * sum(n.memory_utilization for n in npus)
            self.busy_npu_time += dt * sum(1 for n in npus if not n.is_idle())
        self.last_time = now

    def start_wall_clock(self) -> None:
        self.wall_start = time.perf_counter()

    def stop_wall_clock(self) -> None:
        self.wall_end = time.perf_counter()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def acceptance_rate(self) -> float:
        return self.accepted_tasks / self.total_tasks if self.total_tasks > 0 else 0.0

    def average_response_time(self) -> SimTime:
        if not self.response_times:
            return SimTime.ZERO
        return SimTime(int(np.mean([r.nanos for r in self.response_times])))

    def min_response_time(self) -> SimTime:
        return min(self.response_times) if self.response_times else SimTime.ZERO

    def max_response_time(self) -> SimTime:
        return max(self.response_times) if self.response_times else SimTime.ZERO

    def response_time_percentile(self, p: float) -> Optional[SimTime]:
        if not self.response_times:
            return None
        nanos = np.percentile([r.nanos for r in self.response_times], p, method="nearest")
        return SimTime(int(nanos))

    def average_wait_time(self) -> SimTime:
        if not self.wait_times:
            return SimTime.ZERO
        return SimTime(int(np.mean([w.nanos for w in self.wait_times])))

    def throughput(self, sim_time: SimTime) -> float:
        """Completed tasks per simulated second."""
        return self.completed_tasks / sim_time.to_seconds() if sim_time.is_positive() else 0.0

    def compute_utilization(self, npu_count: int) -> float:
        """Average compute gauge over [0, last_time] as a fraction in [0, 1]."""
        span = self.last_time.to_seconds()
        if span <= 0 or npu_count <= 0:
            return 0.0
        return self.compute_time / (npu_count * span)

    def memory_utilization(self, npu_count: int) -> float:
        span = self.last_time.to_seconds()
        if span <= 0 or npu_count <= 0:
            return 0.0
        return self.memory_time / (npu_count * span)

    def wall_duration_ms(self) -> float:
        return max(0.0, (self.wall_end - self.wall_start) * 1000.0)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def copy(self) -> "SimulationStatistics":
        return copy.deepcopy(self)

    def reset(self) -> None:
        fresh = SimulationStatistics()
        for name, value in vars(fresh).items():
            setattr(self, name, value)

    def __str__(self) -> str:
        return (
            f"SimulationStatistics(total={self.total_tasks}, "
            f"accepted={self.accepted_tasks}, completed={self.completed_tasks}, "
            f"acceptance_rate={self.acceptance_rate():.3f}, "
            f"avg_response={self.average_response_time()}, "
            f"events={self.processed_events})"
        )
