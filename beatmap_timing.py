# -*- coding: utf-8 -*-
########################
# beatmap_timing.py
########################
# Purpose:
# - Single source of truth for approach timing conversions.
# - Converts approach rate to preempt and fade-in durations, and back.
# - Applies clock rate adjustment so rate mods see the approach rate the player sees.
#
# Design notes:
# - No dependencies on other project modules. Keep this module pure and deterministic.
# - All durations are milliseconds.
# - Approach rates above 10 are allowed and extrapolate the 5..10 segment.
#
########################
# Interfaces:
# Public constants:
# - PREEMPT_MIN, PREEMPT_MID, PREEMPT_MAX, FADE_IN_DURATION, MIN_DELTA_TIME
#
# Public functions:
# - difficulty_range(difficulty, min_value, mid_value, max_value) -> float
# - preempt_for_approach_rate(approach_rate: float) -> float
# - approach_rate_for_preempt(preempt: float) -> float
# - fade_in_for_preempt(preempt: float) -> float
# - rate_adjusted_approach_rate(approach_rate: float, clock_rate: float) -> float
# - strain_time_for(delta_time: float) -> float
#
# Inputs:
# - approach_rate and clock_rate from ReadingSettings or sequence documents.
#
# Outputs:
# - Preempt and fade-in durations used by DifficultyHitObject.opacity_at.
#
########################

from __future__ import annotations

# Preempt at approach rate 0, 5 and 10.
PREEMPT_MIN = 1800.0
PREEMPT_MID = 1200.0
PREEMPT_MAX = 450.0

FADE_IN_DURATION = 400.0

# Floor applied to delta times so extremely dense objects do not explode the strain.
MIN_DELTA_TIME = 25.0


def difficulty_range(difficulty: float, min_value: float, mid_value: float, max_value: float) -> float:
    value = float(difficulty)
    if value > 5.0:
        return mid_value + (max_value - mid_value) * (value - 5.0) / 5.0
    if value < 5.0:
        return mid_value + (mid_value - min_value) * (value - 5.0) / 5.0
    return mid_value


def preempt_for_approach_rate(approach_rate: float) -> float:
    return difficulty_range(approach_rate, PREEMPT_MIN, PREEMPT_MID, PREEMPT_MAX)


def approach_rate_for_preempt(preempt: float) -> float:
    value = float(preempt)
    if value > PREEMPT_MID:
        return (PREEMPT_MIN - value) / ((PREEMPT_MIN - PREEMPT_MID) / 5.0)
    return 5.0 + (PREEMPT_MID - value) / ((PREEMPT_MID - PREEMPT_MAX) / 5.0)


def fade_in_for_preempt(preempt: float) -> float:
    # Objects that appear faster than the AR 10 window also fade in faster.
    return FADE_IN_DURATION * min(1.0, float(preempt) / PREEMPT_MAX)


def rate_adjusted_approach_rate(approach_rate: float, clock_rate: float) -> float:
    rate = float(clock_rate)
    if rate <= 0.0:
        raise ValueError(f"clock_rate must be > 0, got {clock_rate!r}")
    if rate == 1.0:
        return float(approach_rate)
    return approach_rate_for_preempt(preempt_for_approach_rate(approach_rate) / rate)


def strain_time_for(delta_time: float) -> float:
    return max(float(delta_time), MIN_DELTA_TIME)


def _run_unit_tests() -> None:
    assert preempt_for_approach_rate(0.0) == 1800.0
    assert preempt_for_approach_rate(5.0) == 1200.0
    assert preempt_for_approach_rate(10.0) == 450.0
    assert abs(preempt_for_approach_rate(11.0) - 300.0) < 1e-9

    for approach_rate in (0.0, 3.5, 5.0, 8.0, 9.3, 10.0, 11.0):
        round_trip = approach_rate_for_preempt(preempt_for_approach_rate(approach_rate))
        assert abs(round_trip - approach_rate) < 1e-9

    assert fade_in_for_preempt(1200.0) == 400.0
    assert abs(fade_in_for_preempt(300.0) - 400.0 * 300.0 / 450.0) < 1e-9

    # AR 9 under a 1.5x clock is the well known AR 10.33.
    assert abs(rate_adjusted_approach_rate(9.0, 1.5) - (5.0 + (1200.0 - 600.0 / 1.5) / 150.0)) < 1e-9
    assert rate_adjusted_approach_rate(9.0, 1.0) == 9.0

    assert strain_time_for(10.0) == MIN_DELTA_TIME
    assert strain_time_for(500.0) == 500.0


if __name__ == "__main__":
    _run_unit_tests()
    print("beatmap_timing.py: ok")
