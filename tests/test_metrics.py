"""Tests for SimulationStatistics."""
from __future__ import annotations

import typing

import pytest

from npu_sim.cluster.npu import Npu
from npu_sim.metrics.collector import SimulationStatistics
from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task
from conftest import make_task


def secs(value) -> SimTime:
    return SimTime.of_seconds(value)


def _completed(*response_seconds):
    stats = SimulationStatistics()
    for i, r in enumerate(response_seconds):
        stats.on_task_completed(make_task(f"t{i}", arrival=0), secs(r))
    return stats


def test_empty_statistics_defaults():
    stats = SimulationStatistics()
    assert stats.acceptance_rate() == 0.0
    assert stats.average_response_time() == SimTime.ZERO
    assert stats.min_response_time() == SimTime.ZERO
    assert stats.max_response_time() == SimTime.ZERO
    assert stats.average_wait_time() == SimTime.ZERO
    assert stats.response_time_percentile(50) is None
    assert stats.throughput(SimTime.ZERO) == 0.0
    assert stats.compute_utilization(4) == 0.0


def test_acceptance_rate():
    stats = SimulationStatistics()
    for i in range(4):
        stats.on_task_submitted(make_task(f"t{i}"))
    stats.on_task_accepted(make_task("t0"), SimTime.ZERO)
    assert stats.acceptance_rate() == pytest.approx(0.25)


def test_response_time_aggregates():
    stats = _completed(1, 2, 3, 4, 5)
    assert stats.completed_tasks == 5
    assert stats.average_response_time() == secs(3)
    assert stats.min_response_time() == secs(1)
    assert stats.max_response_time() == secs(5)


@pytest.mark.parametrize("p,expected", [(0, 1), (50, 3), (90, 5), (100, 5)])
def test_percentile_uses_nearest_rank(p, expected):
    assert _completed(5, 1, 4, 2, 3).response_time_percentile(p) == secs(expected)


def test_wait_time_measured_from_arrival():
    stats = SimulationStatistics()
    stats.on_task_accepted(make_task("a", arrival=2), secs(5))
    stats.on_task_accepted(make_task("b", arrival=4), secs(5))
    assert stats.wait_times == [secs(3), secs(1)]
    assert stats.average_wait_time() == secs(2)


def test_throughput_per_simulated_second():
    assert _completed(1, 2, 3, 4).throughput(secs(8)) == pytest.approx(0.5)


def test_record_interval_integrates_gauges():
    stats = SimulationStatistics()
    npus = [Npu("NPU-0", 0.5, 0.25), Npu("NPU-1")]
    npus[0].running_tasks.add("t")
    stats.record_interval(secs(4), npus)
    assert stats.compute_time == pytest.approx(2.0)
    assert stats.memory_time == pytest.approx(1.0)
    assert stats.busy_npu_time == pytest.approx(4.0)
    assert stats.compute_utilization(2) == pytest.approx(0.25)
    assert stats.memory_utilization(2) == pytest.approx(0.125)


def test_record_interval_rejects_time_going_backwards():
    stats = SimulationStatistics()
    stats.record_interval(secs(5), [])
    with pytest.raises(ValueError, match="backwards"):
        stats.record_interval(secs(4), [])


def test_wall_clock_is_non_negative():
    stats = SimulationStatistics()
    stats.start_wall_clock()
    stats.stop_wall_clock()
    assert stats.wall_duration_ms() >= 0.0


def test_copy_is_independent():
    stats = _completed(1, 2)
    snapshot = stats.copy()
    stats.on_task_completed(make_task("later"), secs(9))
    assert snapshot.completed_tasks == 2
    assert len(snapshot.response_times) == 2


def test_reset_clears_everything():
    stats = _completed(1, 2)
    stats.on_event()
    stats.on_admission_pass()
    stats.record_interval(secs(3), [])
    stats.reset()
    assert stats == SimulationStatistics()


def test_str_mentions_counts():
    text = str(_completed(1))
    assert "completed=1" in text


@pytest.mark.parametrize("hook", ["on_task_submitted", "on_task_accepted", "on_task_completed"])
def test_task_hooks_take_task_records(hook):
    hints = typing.get_type_hints(getattr(SimulationStatistics, hook))
    assert hints["task"] is Task
