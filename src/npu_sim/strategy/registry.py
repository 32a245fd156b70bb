from __future__ import annotations

from typing import Dict, Type

from npu_sim.strategy.base import AllocationStrategy
from npu_sim.strategy.best_fit import BestFitStrategy
from npu_sim.strategy.first_fit import FirstFitStrategy
from npu_sim.strategy.least_loaded import LeastLoadedStrategy
from npu_sim.strategy.priority import PriorityAwareStrategy
from npu_sim.strategy.round_robin import RoundRobinStrategy

STRATEGIES: Dict[str, Type[AllocationStrategy]] = {
    "first_fit":    FirstFitStrategy,
    "best_fit":     BestFitStrategy,
    "least_loaded": LeastLoadedStrategy,
    "round_robin":  RoundRobinStrategy,
    "priority":     PriorityAwareStrategy,
}


def make_strategy(key: str) -> AllocationStrategy:
    cls = STRATEGIES.get(key)
    if cls is None:
        raise ValueError(
            f"Unknown strategy '{key}'. "
            f"Valid options: {list(STRATEGIES.keys())}"
        )
    return cls()
