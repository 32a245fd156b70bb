"""Shared pytest fixtures for NPU Simulator tests."""
from __future__ import annotations

from typing import List, Sequence, Tuple

import pytest

from npu_sim.cluster.npu import Npu
from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task


def make_task(
    task_id: str,
    demand: int = 1,
    compute: float = 0.5,
    memory: float = 0.3,
    arrival: float = 0,
    duration: float = 5,
) -> Task:
    """Factory helper used across all test modules. Times are in seconds."""
    return Task(
        task_id=task_id,
        arrival_time=SimTime.of_seconds(arrival),
        npu_demand=demand,
        compute_ratio=compute,
        memory_ratio=memory,
        duration=SimTime.of_seconds(duration),
    )


def make_npus(loads: Sequence[Tuple[float, float]]) -> List[Npu]:
    """NPUs ``NPU-0..`` pre-loaded with (compute, memory) utilization."""
    return [Npu(f"NPU-{i}", compute_utilization=c, memory_utilization=m)
            for i, (c, m) in enumerate(loads)]


@pytest.fixture
def four_idle_npus() -> List[Npu]:
    return make_npus([(0.0, 0.0)] * 4)


@pytest.fixture
def simple_tasks() -> List[Task]:
    """Three tasks with known properties for deterministic tests."""
    return [
        make_task("t0", demand=1, compute=0.5, memory=0.2, arrival=0, duration=5),
        make_task("t1", demand=2, compute=0.3, memory=0.3, arrival=1, duration=2),
        make_task("t2", demand=1, compute=0.8, memory=0.1, arrival=2, duration=10),
    ]
