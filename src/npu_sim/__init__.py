"""npu_sim - NPU Load-Balancing Discrete-Event Simulator v0.1.0"""
from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SimEngine", "SimulationSnapshot", "Allocation",
    "SimTime", "Task", "Event", "EventKind", "EventQueue",
    "Npu", "NpuPool", "PoolStatistics",
    "AllocationStrategy",
    "FirstFitStrategy", "BestFitStrategy", "LeastLoadedStrategy",
    "RoundRobinStrategy", "PriorityAwareStrategy",
    "STRATEGIES", "make_strategy",
    "SimulationStatistics",
    "WorkloadConfig", "generate_synthetic",
    "ExperimentConfig",
]

from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task
from npu_sim.sim.events import Event, EventKind, EventQueue
from npu_sim.sim.engine import SimEngine, SimulationSnapshot, Allocation
from npu_sim.cluster.npu import Npu
from npu_sim.cluster.pool import NpuPool, PoolStatistics
from npu_sim.strategy.base import AllocationStrategy
from npu_sim.strategy.first_fit import FirstFitStrategy
from npu_sim.strategy.best_fit import BestFitStrategy
from npu_sim.strategy.least_loaded import LeastLoadedStrategy
from npu_sim.strategy.round_robin import RoundRobinStrategy
from npu_sim.strategy.priority import PriorityAwareStrategy
from npu_sim.strategy.registry import STRATEGIES, make_strategy
from npu_sim.metrics.collector import SimulationStatistics
from npu_sim.workloads.synthetic import WorkloadConfig, generate_synthetic
from npu_sim.config import ExperimentConfig
