# -*- coding: utf-8 -*-
########################
# reading_models.py
########################
# Purpose:
# - Core data models for reading difficulty evaluation.
# - Defines the closed object variant set, 2D positions and the per-run settings record.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - Variant dispatch happens on ObjectKind. Evaluators branch on it explicitly.
# - Validation fails fast with ReadingInputError. A NaN let through here would poison
#   the multiplicative strain decay for the rest of a run.
#
########################
# Interfaces:
# Public exceptions:
# - class ReadingInputError(ValueError)
#
# Public enums:
# - class ObjectKind(enum.Enum): POINT | PATH | BREAK
#
# Public dataclasses:
# - Vector2(x: float, y: float)
#   - length() -> float
# - BaseObject(kind: ObjectKind, radius: float, repeat_count: int = 0, start_time: float = 0.0)
#   start_time is map time, before any clock rate is applied
# - ReadingSettings(approach_rate: float, hidden: bool = False, flashlight: bool = False)
#   - from_mods(mods, approach_rate, clock_rate=None) -> ReadingSettings
#
# Public functions:
# - require_finite(name: str, value: float) -> float
# - require_non_negative(name: str, value: float) -> float
# - clock_rate_for_mods(mods: Iterable[str]) -> Optional[float]
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
import math
from typing import Iterable, Optional

import beatmap_timing


class ReadingInputError(ValueError):
    """Raised when a caller hands the calculation input that breaks its contract."""


class ObjectKind(enum.Enum):
    POINT = "point"
    PATH = "path"
    BREAK = "break"


def require_finite(name: str, value: float) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ReadingInputError(f"{name} must be finite, got {value!r}")
    return number


def require_non_negative(name: str, value: float) -> float:
    number = require_finite(name, value)
    if number < 0.0:
        raise ReadingInputError(f"{name} must be >= 0, got {value!r}")
    return number


@dataclass(frozen=True)
class Vector2:
    x: float
    y: float

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)


@dataclass(frozen=True)
class BaseObject:
    kind: ObjectKind
    radius: float
    repeat_count: int = 0
    start_time: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ObjectKind):
            raise ReadingInputError(f"kind must be an ObjectKind, got {self.kind!r}")
        radius = require_finite("radius", self.radius)
        if radius <= 0.0:
            raise ReadingInputError(f"radius must be > 0, got {self.radius!r}")
        if int(self.repeat_count) < 0:
            raise ReadingInputError(f"repeat_count must be >= 0, got {self.repeat_count!r}")
        require_non_negative("start_time", self.start_time)


# Mod acronyms that change the clock rate, and the rate they imply.
_RATE_MODS = {
    "DT": 1.5,
    "NC": 1.5,
    "HT": 0.75,
    "DC": 0.75,
}


def clock_rate_for_mods(mods: Iterable[str]) -> Optional[float]:
    """Clock rate implied by the last rate mod in ``mods``, or None without one."""
    clock_rate: Optional[float] = None
    for mod in mods:
        acronym = str(mod).strip().upper()
        if acronym in _RATE_MODS:
            clock_rate = _RATE_MODS[acronym]
    return clock_rate


@dataclass(frozen=True)
class ReadingSettings:
    approach_rate: float
    hidden: bool = False
    flashlight: bool = False

    def __post_init__(self) -> None:
        require_finite("approach_rate", self.approach_rate)

    @classmethod
    def from_mods(
        cls,
        mods: Iterable[str],
        approach_rate: float,
        clock_rate: Optional[float] = None,
    ) -> ReadingSettings:
        """Build settings from mod acronyms such as ``["HD", "FL"]``.

        Acronyms the reading skill does not care about are ignored. A rate mod
        (DT, NC, HT, DC) implies its clock rate unless one is passed explicitly,
        and the approach rate is adjusted to what the player actually sees.
        """
        acronyms = [str(mod).strip().upper() for mod in mods if str(mod).strip()]

        if clock_rate is not None:
            effective_rate = require_finite("clock_rate", clock_rate)
        else:
            effective_rate = clock_rate_for_mods(acronyms) or 1.0
        if effective_rate <= 0.0:
            raise ReadingInputError(f"clock_rate must be > 0, got {effective_rate!r}")

        adjusted_approach_rate = beatmap_timing.rate_adjusted_approach_rate(
            require_finite("approach_rate", approach_rate),
            effective_rate,
        )
        return cls(
            approach_rate=adjusted_approach_rate,
            hidden="HD" in acronyms,
            flashlight="FL" in acronyms,
        )
