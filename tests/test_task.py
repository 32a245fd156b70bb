"""Tests for Task validity and identity."""
from __future__ import annotations

import dataclasses

import pytest

from npu_sim.sim.clock import SimTime
from npu_sim.sim.task import Task
from conftest import make_task


def test_valid_task():
    assert make_task("t", demand=2, compute=0.5, memory=0.3, duration=9).is_valid()


def test_boundary_ratios_are_valid():
    assert make_task("t", compute=0.0, memory=1.0).is_valid()
    assert make_task("t", compute=1.0, memory=0.0).is_valid()


@pytest.mark.parametrize("kwargs", [
    {"demand": 0},
    {"demand": -1},
    {"compute": -0.1},
    {"compute": 1.1},
    {"memory": -0.01},
    {"memory": 1.5},
    {"duration": 0},
    {"duration": -3},
])
def test_invalid_tasks(kwargs):
    assert not make_task("t", **kwargs).is_valid()


def test_completion_before_arrival_is_invalid():
    task = Task("t", arrival_time=SimTime.of_seconds(10), npu_demand=1,
                compute_ratio=0.5, memory_ratio=0.5,
                duration=SimTime.of_seconds(5) - SimTime.of_seconds(10))
    assert not task.is_valid()


def test_completion_time_is_arrival_plus_duration():
    task = make_task("t", arrival=1, duration=9)
    assert task.completion_time == SimTime.of_seconds(10)


def test_total_units():
    task = make_task("t", demand=4, compute=0.25, memory=0.5)
    assert task.total_compute_units() == pytest.approx(1.0)
    assert task.total_memory_units() == pytest.approx(2.0)


def test_equality_is_by_id_only():
    a = make_task("same", demand=1, compute=0.1)
    b = make_task("same", demand=3, compute=0.9)
    assert a == b
    assert hash(a) == hash(b)
    assert a != make_task("other")


def test_task_is_immutable():
    task = make_task("t")
    with pytest.raises(dataclasses.FrozenInstanceError):
        task.npu_demand = 5
