"""Tests for RoundRobinStrategy."""
from __future__ import annotations

from npu_sim.strategy.round_robin import RoundRobinStrategy
from conftest import make_npus, make_task


def test_rr_cursor_carries_across_calls(four_idle_npus):
    s = RoundRobinStrategy()
    assert s.allocate([make_task("a")], four_idle_npus) == {"a": ["NPU-0"]}
    assert s.allocate([make_task("b")], four_idle_npus) == {"b": ["NPU-1"]}
    assert s.cursor == 2


def test_rr_consecutive_tasks_in_one_pass_continue_rotation(four_idle_npus):
    s = RoundRobinStrategy()
    tasks = [make_task("a", demand=2, arrival=0), make_task("b", demand=2, arrival=1)]
    result = s.allocate(tasks, four_idle_npus)
    assert result == {"a": ["NPU-0", "NPU-1"], "b": ["NPU-2", "NPU-3"]}
    assert s.cursor == 0


def test_rr_skips_npus_that_do_not_fit():
    npus = make_npus([(0.9, 0.0), (0.0, 0.0), (0.9, 0.0), (0.0, 0.0)])
    s = RoundRobinStrategy()
    result = s.allocate([make_task("t", demand=2, compute=0.5)], npus)
    assert result == {"t": ["NPU-1", "NPU-3"]}


def test_rr_wraps_around_from_cursor():
    npus = make_npus([(0.0, 0.0)] * 3)
    s = RoundRobinStrategy()
    s.allocate([make_task("first", demand=2)], npus)  # NPU-0, NPU-1 -> cursor 2
    result = s.allocate([make_task("second", demand=2)], npus)
    assert result == {"second": ["NPU-2", "NPU-0"]}


def test_rr_never_selects_same_npu_twice():
    npus = make_npus([(0.0, 0.0), (0.9, 0.0)])
    s = RoundRobinStrategy()
    # only NPU-0 fits; probing wraps past it but must not pick it again
    assert s.allocate([make_task("t", demand=2, compute=0.5)], npus) == {}


def test_rr_probe_count_is_bounded():
    npus = make_npus([(0.9, 0.0)] * 4)
    s = RoundRobinStrategy()
    assert s.allocate([make_task("t", compute=0.5)], npus) == {}
    # 2 * 4 probes from cursor 0 wrap back to 0
    assert s.cursor == 0


def test_rr_initialize_resets_cursor(four_idle_npus):
    s = RoundRobinStrategy()
    s.allocate([make_task("a")], four_idle_npus)
    assert s.cursor == 1
    s.initialize()
    assert s.cursor == 0


def test_rr_empty_pool_returns_nothing():
    assert RoundRobinStrategy().allocate([make_task("t")], []) == {}
