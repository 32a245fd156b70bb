"""Tests for SimTime clock values."""
from __future__ import annotations

import pytest

from npu_sim.sim.clock import SimTime


def test_factories_agree():
    assert SimTime.of_seconds(1) == SimTime.of_millis(1000)
    assert SimTime.of_millis(1) == SimTime.of_micros(1000)
    assert SimTime.of_micros(1) == SimTime.of_nanos(1000)


def test_fractional_seconds_round_to_nearest_nanosecond():
    assert SimTime.of_seconds(1.5).nanos == 1_500_000_000
    assert SimTime.of_seconds(0.3).nanos == 300_000_000


def test_addition_and_subtraction():
    a = SimTime.of_seconds(10)
    b = SimTime.of_seconds(3)
    assert a + b == SimTime.of_seconds(13)
    assert a - b == SimTime.of_seconds(7)


def test_negative_durations_are_not_clamped():
    deadline = SimTime.of_seconds(5)
    now = SimTime.of_seconds(8)
    remaining = deadline - now
    assert remaining == SimTime.of_seconds(-3)
    assert remaining.is_negative()
    assert abs(remaining) == SimTime.of_seconds(3)
    assert -remaining == SimTime.of_seconds(3)


def test_scaling_truncates_to_whole_nanoseconds():
    t = SimTime.of_nanos(10)
    assert t * 1.5 == SimTime.of_nanos(15)
    assert 2 * t == SimTime.of_nanos(20)
    assert t / 3 == SimTime.of_nanos(3)


def test_divide_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        SimTime.of_seconds(1) / 0


def test_ordering_and_hashing():
    times = [SimTime.of_seconds(10), SimTime.of_millis(5), SimTime.of_seconds(7.5)]
    assert sorted(times) == [SimTime.of_millis(5), SimTime.of_seconds(7.5), SimTime.of_seconds(10)]
    assert min(times) == SimTime.of_millis(5)
    assert len({SimTime.of_seconds(1), SimTime.of_millis(1000)}) == 1


def test_conversions():
    t = SimTime.of_millis(2500)
    assert t.to_nanos() == 2_500_000_000
    assert t.to_micros() == 2_500_000
    assert t.to_millis() == 2500
    assert t.to_seconds() == pytest.approx(2.5)


def test_predicates():
    assert SimTime.ZERO.is_zero()
    assert SimTime.of_nanos(1).is_positive()
    assert not SimTime.ZERO.is_positive()


@pytest.mark.parametrize("value,expected", [
    (SimTime.ZERO, "0s"),
    (SimTime.of_nanos(500), "500ns"),
    (SimTime.of_micros(15), "15.000µs"),
    (SimTime.of_micros(1500), "1.500ms"),
    (SimTime.of_seconds(2), "2.000s"),
    (SimTime.of_seconds(-2), "-2.000s"),
])
def test_str_picks_unit_by_magnitude(value, expected):
    assert str(value) == expected


def test_format_with_explicit_unit():
    t = SimTime.of_millis(1500)
    assert t.format("s") == "1s"
    assert t.format("ms") == "1500ms"
    assert t.format("us") == "1500000us"
    assert t.format("ns") == "1500000000ns"


def test_format_unknown_unit_raises():
    with pytest.raises(ValueError, match="Unknown time unit"):
        SimTime.of_seconds(1).format("h")
