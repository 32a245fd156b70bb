from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task


@dataclass
class WorkloadConfig:
    n_tasks: int = 20
    arrival_rate: float = 0.2          # tasks per simulated second
    demand_choices: tuple = (1, 2, 3, 4)
    compute_range: Tuple[float, float] = (0.2, 0.8)
    memory_range: Tuple[float, float] = (0.1, 0.6)
    duration_range: Tuple[float, float] = (10.0, 50.0)  # seconds
    seed: int = 42


def generate_synthetic(cfg: WorkloadConfig) -> List[Task]:
    rng = np.random.default_rng(cfg.seed)

    inter_arrivals = rng.exponential(1.0 / cfg.arrival_rate, size=cfg.n_tasks)
    arrivals = np.cumsum(inter_arrivals)

    demands = rng.choice(cfg.demand_choices, size=cfg.n_tasks)
    compute = rng.uniform(*cfg.compute_range, size=cfg.n_tasks)
    memory = rng.uniform(*cfg.memory_range, size=cfg.n_tasks)
    durations = rng.uniform(*cfg.duration_range, size=cfg.n_tasks)

    tasks: List[Task] = []
    for i in range(cfg.n_tasks):
        tasks.append(
            Task(
                task_id=f"Task-{i + 1:03d}",
                arrival_time=SimTime.of_seconds(float(arrivals[i])),
                npu_demand=int(demands[i]),
                compute_ratio=float(compute[i]),
                memory_ratio=float(memory[i]),
                duration=SimTime.of_seconds(float(durations[i])),
            )
        )
    return tasks


def high_load_scenario() -> List[Task]:
    """Ten 3-NPU heavy tasks, one every 2s, each running 25s. Meant for 4 NPUs."""
    return [
        Task(
            task_id=f"HighLoad-{i}",
            arrival_time=SimTime.of_seconds(i * 2),
            npu_demand=3,
            compute_ratio=0.8,
            memory_ratio=0.7,
            duration=SimTime.of_seconds(25),
        )
        for i in range(10)
    ]


def mixed_workload_scenario() -> List[Task]:
    """Five small tasks followed by three 4-NPU large ones. Meant for 6 NPUs."""
    small = [
        Task(
            task_id=f"Small-{i}",
            arrival_time=SimTime.of_seconds(i),
            npu_demand=1,
            compute_ratio=0.3,
            memory_ratio=0.2,
            duration=SimTime.of_seconds(5),
        )
        for i in range(5)
    ]
    large = [
        Task(
            task_id=f"Large-{i}",
            arrival_time=SimTime.of_seconds(10 + i * 5),
            npu_demand=4,
            compute_ratio=0.9,
            memory_ratio=0.8,
            duration=SimTime.of_seconds(30),
        )
        for i in range(3)
    ]
    return small + large


SCENARIOS = {
    "high_load": (high_load_scenario, 4, "least_loaded"),
    "mixed": (mixed_workload_scenario, 6, "round_robin"),
}
