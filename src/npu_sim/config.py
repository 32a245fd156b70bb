"""
YAML-based experiment configuration loader.

Example config_default.yaml
----------------------------
npu_count: 8
n_tasks: 20
strategies:
  - first_fit
  - best_fit
  - least_loaded
  - round_robin
  - priority
seeds: [1, 2, 3]
arrival_rates: [0.1, 0.2, 0.4]
outdir: experiments/out
log_level: WARNING
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import yaml

from npu_sim.strategy.registry import STRATEGIES


@dataclass
class ExperimentConfig:
    """Configuration for a full experiment sweep."""

    npu_count: int = 8
    n_tasks: int = 20
    strategies: List[str] = field(default_factory=lambda: list(STRATEGIES.keys()))
    seeds: List[int] = field(default_factory=lambda: [1, 2, 3])
    arrival_rates: List[float] = field(default_factory=lambda: [0.1, 0.2, 0.4])
    outdir: str = "experiments/out"
    log_level: str = "WARNING"
    status_interval: int = 100

    def validate(self) -> "ExperimentConfig":
        if self.npu_count <= 0:
            raise ValueError("npu_count must be > 0")
        if self.n_tasks <= 0:
            raise ValueError("n_tasks must be > 0")
        unknown = [s for s in self.strategies if s not in STRATEGIES]
        if unknown:
            raise ValueError(
                f"Unknown strategies {unknown}. Valid options: {list(STRATEGIES.keys())}"
            )
        return self

    @classmethod
    def from_yaml(cls, path: str) -> "ExperimentConfig":
        """Load an ExperimentConfig from a YAML file; unknown keys are ignored."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        names = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in data.items() if k in names}).validate()
