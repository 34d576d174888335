# -*- coding: utf-8 -*-
########################
# strain_peaks.py
########################
# Purpose:
# - Generic peak sectioning for strain based skills.
# - Splits elapsed time into fixed length sections and keeps the highest strain seen in each.
#
# Design notes:
# - Agnostic to which evaluators produce the strain. The skill plugs in through StrainHooks.
# - Objects must be processed in sequence order.
# - A new section starts from hooks.seed_at so strain carried over from earlier objects
#   decays correctly up to the section boundary before the section's own objects are folded in.
# - Sums are sequential, left to right, so identical inputs give bit identical results.
#
########################
# Interfaces:
# Public constants:
# - DEFAULT_SECTION_LENGTH = 400.0 (ms)
#
# Public protocols:
# - StrainHooks
#   - seed_at(section_start_time: float, current) -> float  (must not mutate)
#   - value_at(current) -> float                              (mutates, called once per object)
#
# Public classes:
# - class StrainPeakAggregator
#   - __init__(hooks: StrainHooks, section_length: float = DEFAULT_SECTION_LENGTH)
#   - process(current) -> None
#   - current_strain_peaks() -> list[float]
#   - difficulty_value() -> float
#
# Public functions:
# - collect_strain_peaks(objects, hooks, *, section_length) -> list[float]
#
########################

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Protocol, runtime_checkable

DEFAULT_SECTION_LENGTH = 400.0


@runtime_checkable
class StrainHooks(Protocol):
    """The two callbacks a skill exposes to the aggregator."""

    def seed_at(self, section_start_time: float, current: Any) -> float:
        ...

    def value_at(self, current: Any) -> float:
        ...


class StrainPeakAggregator:
    def __init__(self, hooks: StrainHooks, section_length: float = DEFAULT_SECTION_LENGTH) -> None:
        length = float(section_length)
        if not math.isfinite(length) or length <= 0.0:
            raise ValueError(f"section_length must be a positive number, got {section_length!r}")
        self._hooks = hooks
        self._section_length = length
        self._strain_peaks: List[float] = []
        self._current_section_peak = 0.0
        self._current_section_end: Optional[float] = None

    def section_length(self) -> float:
        return self._section_length

    def process(self, current: Any) -> None:
        if self._current_section_end is None:
            self._current_section_end = math.ceil(current.start_time / self._section_length) * self._section_length

        while current.start_time > self._current_section_end:
            self._strain_peaks.append(self._current_section_peak)
            self._current_section_peak = self._hooks.seed_at(self._current_section_end, current)
            self._current_section_end += self._section_length

        self._current_section_peak = max(self._hooks.value_at(current), self._current_section_peak)

    def current_strain_peaks(self) -> List[float]:
        if self._current_section_end is None:
            return []
        return self._strain_peaks + [self._current_section_peak]

    def difficulty_value(self) -> float:
        total = 0.0
        for peak in self.current_strain_peaks():
            total += peak
        return total


def collect_strain_peaks(
    objects: Iterable[Any],
    hooks: StrainHooks,
    *,
    section_length: float = DEFAULT_SECTION_LENGTH,
) -> List[float]:
    aggregator = StrainPeakAggregator(hooks, section_length)
    for current in objects:
        aggregator.process(current)
    return aggregator.current_strain_peaks()


class _FixedHooks:
    def __init__(self, values: List[float]) -> None:
        self._values = list(values)
        self.seeds: List[float] = []

    def seed_at(self, section_start_time: float, current: Any) -> float:
        self.seeds.append(float(section_start_time))
        return 0.0

    def value_at(self, current: Any) -> float:
        return self._values.pop(0)


class _Timed:
    def __init__(self, start_time: float) -> None:
        self.start_time = start_time


def _run_unit_tests() -> None:
    hooks = _FixedHooks([1.0, 3.0, 2.0, 0.5])
    objects = [_Timed(100.0), _Timed(300.0), _Timed(900.0), _Timed(950.0)]
    aggregator = StrainPeakAggregator(hooks, 400.0)
    for current in objects:
        aggregator.process(current)

    # Sections end at 400, 800, 1200. The 400..800 section is empty and keeps its seed.
    assert aggregator.current_strain_peaks() == [3.0, 0.0, 2.0]
    assert hooks.seeds == [400.0, 800.0]
    assert aggregator.difficulty_value() == 5.0

    assert collect_strain_peaks([], _FixedHooks([])) == []


if __name__ == "__main__":
    _run_unit_tests()
    print("strain_peaks.py: ok")
