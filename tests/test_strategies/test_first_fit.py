"""Tests for FirstFitStrategy."""
from __future__ import annotations

from npu_sim.strategy.first_fit import FirstFitStrategy
from conftest import make_npus, make_task


def test_first_fit_takes_first_fitting_npus_in_pool_order():
    npus = make_npus([(0.8, 0.0), (0.0, 0.0), (0.0, 0.0), (0.0, 0.0)])
    result = FirstFitStrategy().allocate([make_task("t", demand=2, compute=0.5)], npus)
    assert result == {"t": ["NPU-1", "NPU-2"]}


def test_first_fit_omits_task_that_cannot_be_fully_placed():
    npus = make_npus([(0.8, 0.0), (0.0, 0.0), (0.0, 0.0), (0.9, 0.0)])
    result = FirstFitStrategy().allocate([make_task("t", demand=3, compute=0.5)], npus)
    assert result == {}


def test_first_fit_processes_tasks_in_arrival_order(four_idle_npus):
    tasks = [make_task("late", arrival=5), make_task("early", arrival=1)]
    result = FirstFitStrategy().allocate(tasks, four_idle_npus)
    assert list(result) == ["early", "late"]


def test_first_fit_proposals_do_not_see_each_other(four_idle_npus):
    # Both tasks see the same untouched pool; the pool's commit resolves overlap.
    tasks = [make_task("a", arrival=0), make_task("b", arrival=1)]
    result = FirstFitStrategy().allocate(tasks, four_idle_npus)
    assert result == {"a": ["NPU-0"], "b": ["NPU-0"]}


def test_first_fit_does_not_mutate_npus(four_idle_npus):
    FirstFitStrategy().allocate([make_task("t", demand=4)], four_idle_npus)
    assert all(n.is_idle() and n.utilization_score() == 0.0 for n in four_idle_npus)


def test_first_fit_empty_inputs():
    s = FirstFitStrategy()
    assert s.allocate([], make_npus([(0.0, 0.0)])) == {}
    assert s.allocate([make_task("t")], []) == {}
