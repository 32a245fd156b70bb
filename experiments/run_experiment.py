"""
NPU Simulator — Experiment Runner
==================================
Runs a sweep of allocation strategies across multiple arrival rates and seeds,
outputs a CSV of results, and generates comparison plots.

Usage
-----
    python experiments/run_experiment.py
    python experiments/run_experiment.py --npu_count 16 --seeds 1 2 3 4 5
    python experiments/run_experiment.py --config experiments/config_default.yaml
    python experiments/run_experiment.py --scenario high_load --log_level INFO
"""
from __future__ import annotations

import argparse
import os
from typing import Any

import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from npu_sim import __version__
from npu_sim.config import ExperimentConfig
from npu_sim.logging_setup import configure_logging
from npu_sim.sim.engine import SimEngine
from npu_sim.strategy.registry import STRATEGIES, make_strategy
from npu_sim.workloads.synthetic import SCENARIOS, WorkloadConfig, generate_synthetic

console = Console()

STRATEGY_LABELS = {
    "first_fit":    "First-Fit",
    "best_fit":     "Best-Fit",
    "least_loaded": "Least-Loaded",
    "round_robin":  "Round-Robin",
    "priority":     "Priority Hybrid",
}

COLORS = {
    "first_fit":    "#2196F3",
    "best_fit":     "#F44336",
    "least_loaded": "#4CAF50",
    "round_robin":  "#00BCD4",
    "priority":     "#9C27B0",
}


def _fmt(val: Any, decimals: int = 3) -> str:
    if val is None or (isinstance(val, float) and pd.isna(val)):
        return "-"
    if isinstance(val, float):
        return f"{val:.{decimals}f}"
    return str(val)


# ---------------------------------------------------------------------------
# Core simulation runner
# ---------------------------------------------------------------------------

def run_one(
    strategy_key: str,
    npu_count: int,
    seed: int,
    arrival_rate: float,
    n_tasks: int = 20,
    status_interval: int = 100,
) -> dict:
    cfg = WorkloadConfig(n_tasks=n_tasks, arrival_rate=arrival_rate, seed=seed)
    tasks = generate_synthetic(cfg)

    engine = SimEngine(npu_count, make_strategy(strategy_key), status_interval=status_interval)
    engine.submit_all(tasks)
    snap = engine.run()
    stats = snap.simulation_statistics

    p95 = stats.response_time_percentile(95)
    return {
        "strategy":          strategy_key,
        "strategy_label":    STRATEGY_LABELS[strategy_key],
        "seed":              seed,
        "arrival_rate":      arrival_rate,
        "npu_count":         npu_count,
        "n_tasks":           n_tasks,
        "sim_end_s":         snap.current_time.to_seconds(),
        "tasks_submitted":   stats.total_tasks,
        "tasks_accepted":    stats.accepted_tasks,
        "tasks_completed":   stats.completed_tasks,
        "acceptance_rate":   stats.acceptance_rate(),
        "avg_response_s":    stats.average_response_time().to_seconds(),
        "p95_response_s":    p95.to_seconds() if p95 is not None else None,
        "avg_wait_s":        stats.average_wait_time().to_seconds(),
        "compute_util":      stats.compute_utilization(npu_count),
        "memory_util":       stats.memory_utilization(npu_count),
        "throughput":        stats.throughput(snap.current_time),
        "admission_passes":  stats.admission_passes,
    }


def run_scenario(name: str) -> None:
    factory, npu_count, strategy_key = SCENARIOS[name]
    engine = SimEngine(npu_count, make_strategy(strategy_key))
    engine.submit_all(factory())
    snap = engine.run()
    stats = snap.simulation_statistics

    table = Table(title=f"[bold]Scenario[/bold] {name}", box=box.ROUNDED)
    table.add_column("Metric", style="bold cyan")
    table.add_column("Value", justify="right")
    table.add_row("NPUs / strategy", f"{npu_count} / {engine.pool.strategy.name}")
    table.add_row("Simulated time", str(snap.current_time))
    table.add_row("Tasks (total/accepted/completed)",
                  f"{stats.total_tasks}/{stats.accepted_tasks}/{stats.completed_tasks}")
    table.add_row("Average response", str(stats.average_response_time()))
    table.add_row("Average wait", str(stats.average_wait_time()))
    table.add_row("Compute utilization", f"{stats.compute_utilization(npu_count):.2%}")
    table.add_row("Events processed", str(stats.processed_events))
    console.print(table)


# ---------------------------------------------------------------------------
# Rich summary table
# ---------------------------------------------------------------------------

def print_banner() -> None:
    console.print(
        Panel.fit(
            f"[bold cyan]NPU Simulator[/bold cyan]  [dim]v{__version__}[/dim]\n"
            "[dim]NPU Load-Balancing Discrete-Event Simulator[/dim]",
            border_style="cyan",
            padding=(0, 2),
        )
    )


def print_summary_table(df: pd.DataFrame) -> None:
    table = Table(
        title="[bold]Results Summary[/bold] (averaged over seeds & arrival rates)",
        box=box.ROUNDED,
        highlight=True,
        show_lines=True,
    )
    table.add_column("Strategy",       style="bold cyan", no_wrap=True)
    table.add_column("Acceptance",     style="green",  justify="right")
    table.add_column("Compute Util.",  style="green",  justify="right")
    table.add_column("Avg Response",   style="yellow", justify="right")
    table.add_column("P95 Response",   style="yellow", justify="right")
    table.add_column("Avg Wait",       style="yellow", justify="right")
    table.add_column("Throughput",     style="blue",   justify="right")

    summary = df.groupby("strategy").mean(numeric_only=True).reset_index()
    order = list(STRATEGIES.keys())
    summary["_ord"] = summary["strategy"].map({k: i for i, k in enumerate(order)})
    summary = summary.sort_values("_ord").drop(columns=["_ord"])

    for _, row in summary.iterrows():
        table.add_row(
            STRATEGY_LABELS.get(row["strategy"], row["strategy"]),
            _fmt(row.get("acceptance_rate"), 3),
            _fmt(row.get("compute_util"), 4),
            _fmt(row.get("avg_response_s"), 2),
            _fmt(row.get("p95_response_s"), 2),
            _fmt(row.get("avg_wait_s"), 2),
            _fmt(row.get("throughput"), 4),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Plotting
# ---------------------------------------------------------------------------

PLOT_METRICS = [
    ("acceptance_rate", "Acceptance Rate (fraction)"),
    ("avg_response_s", "Average Response Time (s)"),
    ("p95_response_s", "P95 Response Time (s)"),
    ("avg_wait_s",     "Average Wait (s)"),
    ("compute_util",   "Compute Utilization (fraction)"),
    ("memory_util",    "Memory Utilization (fraction)"),
]


def make_plots(df: pd.DataFrame, strategies: list[str], outdir: str) -> None:
    for metric, ylabel in PLOT_METRICS:
        fig, ax = plt.subplots(figsize=(8, 5))
        for key in strategies:
            sub = (
                df[df["strategy"] == key]
                .groupby("arrival_rate")[metric]
                .mean()
                .reset_index()
            )
            if sub.empty:
                continue
            ax.plot(
                sub["arrival_rate"],
                sub[metric],
                marker="o",
                linewidth=2,
                markersize=7,
                label=STRATEGY_LABELS.get(key, key),
                color=COLORS.get(key),
            )
        ax.set_xlabel("Arrival Rate (tasks / s)", fontsize=12)
        ax.set_ylabel(ylabel, fontsize=12)
        ax.set_title(f"{ylabel} vs Load", fontsize=14, fontweight="bold")
        ax.legend(framealpha=0.9)
        ax.grid(True, alpha=0.3)
        fig.tight_layout()
        fig_path = os.path.join(outdir, f"{metric}.png")
        fig.savefig(fig_path, dpi=160, bbox_inches="tight")
        plt.close(fig)
        console.print(f"  [green]Wrote[/green] {fig_path}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    ap = argparse.ArgumentParser(
        description="NPU Simulator — allocation strategy comparison"
    )
    ap.add_argument("--outdir",        default="experiments/out")
    ap.add_argument("--npu_count",     type=int,   default=8)
    ap.add_argument("--n_tasks",       type=int,   default=20)
    ap.add_argument("--seeds",         type=int,   nargs="+", default=[1, 2, 3])
    ap.add_argument("--arrival_rates", type=float, nargs="+", default=[0.1, 0.2, 0.4])
    ap.add_argument(
        "--strategies", nargs="+",
        default=list(STRATEGIES.keys()),
        choices=list(STRATEGIES.keys()),
    )
    ap.add_argument("--log_level", default="WARNING")
    ap.add_argument("--scenario", choices=list(SCENARIOS.keys()), default=None,
                    help="Run one canned scenario instead of a sweep")
    ap.add_argument("--config", default=None,
                    help="Path to YAML experiment config (overrides CLI flags)")
    args = ap.parse_args()

    cfg = ExperimentConfig(
        npu_count=args.npu_count,
        n_tasks=args.n_tasks,
        strategies=args.strategies,
        seeds=args.seeds,
        arrival_rates=args.arrival_rates,
        outdir=args.outdir,
        log_level=args.log_level,
    )
    if args.config:
        cfg = ExperimentConfig.from_yaml(args.config)
    cfg.validate()

    configure_logging(cfg.log_level)
    print_banner()

    if args.scenario:
        run_scenario(args.scenario)
        return

    os.makedirs(cfg.outdir, exist_ok=True)
    total_runs = len(cfg.strategies) * len(cfg.arrival_rates) * len(cfg.seeds)
    rows: list[dict] = []

    console.print(
        f"\n[dim]Pool:[/dim] [bold]{cfg.npu_count}[/bold] NPUs  "
        f"[dim]Tasks/run:[/dim] [bold]{cfg.n_tasks}[/bold]  "
        f"[dim]Total runs:[/dim] [bold]{total_runs}[/bold]\n"
    )
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        bar = progress.add_task("[cyan]Running experiments...", total=total_runs)
        for key in cfg.strategies:
            for rate in cfg.arrival_rates:
                for seed in cfg.seeds:
                    progress.update(
                        bar,
                        description=(
                            f"[cyan]{STRATEGY_LABELS[key]:15s}[/cyan]"
                            f" rate=[yellow]{rate}[/yellow]"
                            f" seed=[dim]{seed}[/dim]"
                        ),
                    )
                    rows.append(run_one(key, cfg.npu_count, seed, rate,
                                        cfg.n_tasks, cfg.status_interval))
                    progress.advance(bar)

    df = pd.DataFrame(rows)
    csv_path = os.path.join(cfg.outdir, "results.csv")
    df.to_csv(csv_path, index=False)

    console.print(f"\n[green]OK[/green] Wrote [bold]{csv_path}[/bold]\n")
    print_summary_table(df)
    console.print("\n[bold]Generating plots...[/bold]")
    make_plots(df, cfg.strategies, cfg.outdir)
    console.print(
        f"\n[bold green]Done![/bold green] "
        f"Results in [cyan]{cfg.outdir}/[/cyan]"
    )


if __name__ == "__main__":
    main()
