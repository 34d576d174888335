# -*- coding: utf-8 -*-
########################
# difficulty_objects.py
########################
# Purpose:
# - Own the ordered, read-only sequence of difficulty hit objects.
# - Provide bounded look-back (previous) and opacity queries for evaluators.
# - Build the sequence from per-object records produced by upstream preprocessing.
#
# Design notes:
# - The sequence is append-only while it is built and immutable afterwards.
# - Order is deterministic: index order equals start time order. Decreasing start times are rejected.
# - An absent predecessor is None. Evaluators treat it as a normal branch.
# - Two time bases: gameplay times are divided by the clock rate. Approach timing
#   (base_object.start_time, time_preempt, time_fade_in) stays in map time.
# - Geometry fields (stacked positions, lazy distances, angle, travel time) are inputs, never derived here.
#
########################
# Interfaces:
# Public constants:
# - HIDDEN_FADE_OUT_DURATION_MULTIPLIER
#
# Public dataclasses:
# - HitObjectRecord(kind, start_time, radius, stacked_position, ...)  builder input
# - DifficultyHitObject(index, base_object, start_time, delta_time, strain_time, ...)
#   - previous(backwards_index: int) -> Optional[DifficultyHitObject]
#   - opacity_at(time: float, hidden: bool) -> float
#
# Public classes:
# - class DifficultyObjectSequence (read-only sequence of DifficultyHitObject)
#
# Public functions:
# - build_difficulty_objects(records, *, approach_rate=None, clock_rate=1.0) -> DifficultyObjectSequence
#
# Inputs:
# - HitObjectRecord values from sequence_loader.py, test_beatmap.py or library callers.
#
# Outputs:
# - DifficultyObjectSequence consumed by reading_skill.py and reading_evaluator.py.
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, overload

import beatmap_timing
from reading_models import (
    BaseObject,
    ObjectKind,
    ReadingInputError,
    Vector2,
    require_finite,
    require_non_negative,
)

HIDDEN_FADE_OUT_DURATION_MULTIPLIER = 0.3


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class HitObjectRecord:
    kind: ObjectKind
    start_time: float
    radius: float
    stacked_position: Vector2
    stacked_end_position: Optional[Vector2] = None
    lazy_jump_distance: float = 0.0
    minimum_jump_distance: float = 0.0
    lazy_travel_distance: float = 0.0
    travel_time: float = 0.0
    angle: Optional[float] = None
    repeat_count: int = 0
    delta_time: Optional[float] = None
    strain_time: Optional[float] = None
    time_preempt: Optional[float] = None
    time_fade_in: Optional[float] = None


@dataclass(frozen=True, eq=False)
class DifficultyHitObject:
    index: int
    base_object: BaseObject
    start_time: float
    delta_time: float
    strain_time: float
    travel_time: float
    stacked_position: Vector2
    stacked_end_position: Vector2
    lazy_jump_distance: float
    minimum_jump_distance: float
    lazy_travel_distance: float
    angle: Optional[float]
    time_preempt: float
    time_fade_in: float
    _objects: List[DifficultyHitObject] = field(repr=False)

    @property
    def kind(self) -> ObjectKind:
        return self.base_object.kind

    @property
    def radius(self) -> float:
        return self.base_object.radius

    def previous(self, backwards_index: int) -> Optional[DifficultyHitObject]:
        """Return the n-th predecessor, 0 being the object right before this one."""
        if backwards_index < 0:
            raise ReadingInputError(f"backwards_index must be >= 0, got {backwards_index!r}")
        target_index = self.index - (backwards_index + 1)
        if target_index < 0:
            return None
        return self._objects[target_index]

    def opacity_at(self, time: float, hidden: bool) -> float:
        """How visible this object is at map time ``time``, between 0 and 1.

        Works in map time, like time_preempt and time_fade_in. Pass another
        object's base_object.start_time, not its rate adjusted start_time.
        """
        base_start_time = self.base_object.start_time
        if time > base_start_time:
            return 0.0

        fade_in_start_time = base_start_time - self.time_preempt
        fade_in_opacity = _clamp01((time - fade_in_start_time) / self.time_fade_in)

        if hidden:
            fade_out_start_time = fade_in_start_time + self.time_fade_in
            fade_out_duration = self.time_preempt * HIDDEN_FADE_OUT_DURATION_MULTIPLIER
            return min(fade_in_opacity, 1.0 - _clamp01((time - fade_out_start_time) / fade_out_duration))

        return fade_in_opacity


class DifficultyObjectSequence(Sequence[DifficultyHitObject]):
    def __init__(self) -> None:
        self._objects: List[DifficultyHitObject] = []
        self._is_sealed = False

    @overload
    def __getitem__(self, index: int) -> DifficultyHitObject: ...

    @overload
    def __getitem__(self, index: slice) -> List[DifficultyHitObject]: ...

    def __getitem__(self, index):
        return self._objects[index]

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[DifficultyHitObject]:
        return iter(self._objects)

    def __repr__(self) -> str:
        return f"DifficultyObjectSequence(len={len(self._objects)})"

    def _append(self, record: HitObjectRecord, *, start_time: float, delta_time: float, strain_time: float,
                travel_time: float, time_preempt: float, time_fade_in: float) -> DifficultyHitObject:
        if self._is_sealed:
            raise RuntimeError("DifficultyObjectSequence is read-only once built")

        base_object = BaseObject(
            kind=record.kind,
            radius=float(record.radius),
            repeat_count=int(record.repeat_count),
            start_time=float(record.start_time),
        )
        stacked_position = record.stacked_position
        stacked_end_position = record.stacked_end_position if record.stacked_end_position is not None else stacked_position

        difficulty_object = DifficultyHitObject(
            index=len(self._objects),
            base_object=base_object,
            start_time=start_time,
            delta_time=delta_time,
            strain_time=strain_time,
            travel_time=travel_time,
            stacked_position=Vector2(require_finite("stacked_position.x", stacked_position.x),
                                     require_finite("stacked_position.y", stacked_position.y)),
            stacked_end_position=Vector2(require_finite("stacked_end_position.x", stacked_end_position.x),
                                         require_finite("stacked_end_position.y", stacked_end_position.y)),
            lazy_jump_distance=require_non_negative("lazy_jump_distance", record.lazy_jump_distance),
            minimum_jump_distance=require_non_negative("minimum_jump_distance", record.minimum_jump_distance),
            lazy_travel_distance=require_non_negative("lazy_travel_distance", record.lazy_travel_distance),
            angle=None if record.angle is None else require_finite("angle", record.angle),
            time_preempt=time_preempt,
            time_fade_in=time_fade_in,
            _objects=self._objects,
        )
        self._objects.append(difficulty_object)
        return difficulty_object

    def _seal(self) -> None:
        self._is_sealed = True


def _positive(name: str, value: float) -> float:
    number = require_finite(name, value)
    if number <= 0.0:
        raise ReadingInputError(f"{name} must be > 0, got {value!r}")
    return number


def build_difficulty_objects(
    records: Iterable[HitObjectRecord],
    *,
    approach_rate: Optional[float] = None,
    clock_rate: float = 1.0,
) -> DifficultyObjectSequence:
    """Link records into an indexed sequence.

    Gameplay times (start, delta, strain and travel times) are divided by
    ``clock_rate``. Preempt and fade-in stay in map time, as does
    base_object.start_time, so opacity_at never mixes the two. A record without
    a delta time gets the gap to the previous record, and a record without a
    strain time gets the delta time floored at MIN_DELTA_TIME. Missing preempt
    and fade-in durations are derived from ``approach_rate``, which is then required.
    """
    rate = _positive("clock_rate", clock_rate)

    default_preempt: Optional[float] = None
    default_fade_in: Optional[float] = None
    if approach_rate is not None:
        default_preempt = beatmap_timing.preempt_for_approach_rate(require_finite("approach_rate", approach_rate))
        default_fade_in = beatmap_timing.fade_in_for_preempt(default_preempt)

    sequence = DifficultyObjectSequence()
    last_start_time: Optional[float] = None

    for record in records:
        position = len(sequence)
        start_time = require_non_negative(f"objects[{position}].start_time", record.start_time) / rate
        if last_start_time is not None and start_time < last_start_time:
            raise ReadingInputError(
                f"objects[{position}].start_time {record.start_time!r} is earlier than the previous object"
            )

        if record.delta_time is not None:
            delta_time = require_non_negative(f"objects[{position}].delta_time", record.delta_time) / rate
        elif last_start_time is None:
            delta_time = 0.0
        else:
            delta_time = start_time - last_start_time

        if record.strain_time is not None:
            strain_time = require_non_negative(f"objects[{position}].strain_time", record.strain_time) / rate
        else:
            strain_time = beatmap_timing.strain_time_for(delta_time)

        travel_time = require_non_negative(f"objects[{position}].travel_time", record.travel_time) / rate

        if record.time_preempt is not None:
            time_preempt = _positive(f"objects[{position}].time_preempt", record.time_preempt)
        elif default_preempt is not None:
            time_preempt = default_preempt
        else:
            raise ReadingInputError(f"objects[{position}] has no time_preempt and no approach_rate was given")

        if record.time_fade_in is not None:
            time_fade_in = _positive(f"objects[{position}].time_fade_in", record.time_fade_in)
        elif record.time_preempt is not None:
            time_fade_in = beatmap_timing.fade_in_for_preempt(time_preempt)
        elif default_fade_in is not None:
            time_fade_in = default_fade_in
        else:
            raise ReadingInputError(f"objects[{position}] has no time_fade_in and no approach_rate was given")

        sequence._append(
            record,
            start_time=start_time,
            delta_time=delta_time,
            strain_time=strain_time,
            travel_time=travel_time,
            time_preempt=time_preempt,
            time_fade_in=time_fade_in,
        )
        last_start_time = start_time

    sequence._seal()
    return sequence
