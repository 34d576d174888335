from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from difficulty_objects import DifficultyObjectSequence, HitObjectRecord, build_difficulty_objects
from reading_models import ObjectKind, Vector2


def make_record(
    start_time: float,
    x: float = 0.0,
    y: float = 0.0,
    *,
    kind: ObjectKind = ObjectKind.POINT,
    radius: float = 26.0,
    lazy_jump_distance: float = 0.0,
    minimum_jump_distance: float = 0.0,
    lazy_travel_distance: float = 0.0,
    travel_time: float = 0.0,
    angle: Optional[float] = None,
    repeat_count: int = 0,
    strain_time: Optional[float] = None,
    time_preempt: Optional[float] = 600.0,
    time_fade_in: Optional[float] = 400.0,
) -> HitObjectRecord:
    return HitObjectRecord(
        kind=kind,
        start_time=start_time,
        radius=radius,
        stacked_position=Vector2(x, y),
        lazy_jump_distance=lazy_jump_distance,
        minimum_jump_distance=minimum_jump_distance,
        lazy_travel_distance=lazy_travel_distance,
        travel_time=travel_time,
        angle=angle,
        repeat_count=repeat_count,
        strain_time=strain_time,
        time_preempt=time_preempt,
        time_fade_in=time_fade_in,
    )


@pytest.fixture
def record() -> Callable[..., HitObjectRecord]:
    return make_record


@pytest.fixture
def build() -> Callable[[List[HitObjectRecord]], DifficultyObjectSequence]:
    def _build(records: List[HitObjectRecord]) -> DifficultyObjectSequence:
        return build_difficulty_objects(records)

    return _build
