# -*- coding: utf-8 -*-
########################
# reading_skill.py
########################
# Purpose:
# - Reading skill strain accumulator and the run driver around it.
# - Folds the evaluator contributions into one exponentially decaying strain per run.
# - Reduces the per-section strain peaks into the final reading difficulty value.
#
# Design notes:
# - ReadingStrain is a per-run value object. Never share one between runs.
# - value_at is the only mutator. seed_at reads the strain without changing it.
# - Independent configurations may be evaluated in parallel over the same read-only sequence.
#
########################
# Interfaces:
# Public constants:
# - SKILL_MULTIPLIER = 0.05512
# - STRAIN_DECAY_BASE = 0.15
#
# Public dataclasses:
# - ReadingStrain(settings: ReadingSettings, current_strain: float = 0.0)   implements strain_peaks.StrainHooks
#   - seed_at(section_start_time: float, current: DifficultyHitObject) -> float
#   - value_at(current: DifficultyHitObject) -> float
# - ReadingResult(difficulty: float, strain_peaks: tuple[float, ...], settings: ReadingSettings, object_count: int)
#
# Public functions:
# - strain_decay(ms: float) -> float
# - calculate_reading_difficulty(objects, settings, *, section_length=400.0) -> ReadingResult
# - evaluate_configurations(objects, settings_list, *, section_length=400.0, max_workers=1) -> list[ReadingResult]
#
# Inputs:
# - DifficultyObjectSequence from difficulty_objects.py.
# - ReadingSettings from reading_models.py.
#
# Outputs:
# - ReadingResult for callers and reading_cli.py.
#
########################

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from typing import List, Sequence, Tuple

import reading_evaluator
import strain_peaks
from difficulty_objects import DifficultyHitObject
from reading_models import ReadingInputError, ReadingSettings

logger = logging.getLogger(__name__)

SKILL_MULTIPLIER = 0.05512
STRAIN_DECAY_BASE = 0.15


def strain_decay(ms: float) -> float:
    return STRAIN_DECAY_BASE ** (ms / 1000.0)


@dataclass
class ReadingStrain:
    settings: ReadingSettings
    current_strain: float = 0.0

    def seed_at(self, section_start_time: float, current: DifficultyHitObject) -> float:
        previous_object = current.previous(0)
        if previous_object is None:
            raise ReadingInputError(f"seed_at needs a predecessor, object {current.index} has none")
        return self.current_strain * strain_decay(section_start_time - previous_object.start_time)

    def value_at(self, current: DifficultyHitObject) -> float:
        settings = self.settings

        self.current_strain *= strain_decay(current.delta_time)
        self.current_strain += (
            reading_evaluator.reading_difficulty_of(current, settings.hidden, settings.approach_rate) * SKILL_MULTIPLIER
        )

        if settings.hidden:
            self.current_strain += reading_evaluator.hidden_difficulty_of(current) * SKILL_MULTIPLIER
        if settings.flashlight:
            self.current_strain += reading_evaluator.flashlight_difficulty_of(current, settings.hidden) * SKILL_MULTIPLIER

        return self.current_strain


@dataclass(frozen=True)
class ReadingResult:
    difficulty: float
    strain_peaks: Tuple[float, ...]
    settings: ReadingSettings
    object_count: int


def calculate_reading_difficulty(
    objects: Sequence[DifficultyHitObject],
    settings: ReadingSettings,
    *,
    section_length: float = strain_peaks.DEFAULT_SECTION_LENGTH,
) -> ReadingResult:
    accumulator = ReadingStrain(settings=settings)
    aggregator = strain_peaks.StrainPeakAggregator(accumulator, section_length)
    for current in objects:
        aggregator.process(current)

    peaks = tuple(aggregator.current_strain_peaks())
    difficulty = aggregator.difficulty_value()
    logger.debug(
        "reading difficulty %.6f over %d objects, %d sections of %.1f ms (ar=%s hidden=%s flashlight=%s)",
        difficulty,
        len(objects),
        len(peaks),
        aggregator.section_length(),
        settings.approach_rate,
        settings.hidden,
        settings.flashlight,
    )
    return ReadingResult(difficulty=difficulty, strain_peaks=peaks, settings=settings, object_count=len(objects))


def evaluate_configurations(
    objects: Sequence[DifficultyHitObject],
    settings_list: Sequence[ReadingSettings],
    *,
    section_length: float = strain_peaks.DEFAULT_SECTION_LENGTH,
    max_workers: int = 1,
) -> List[ReadingResult]:
    """Evaluate several configurations over the same sequence, one accumulator per run.

    Results come back in the order of ``settings_list``.
    """
    if int(max_workers) < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers!r}")

    if int(max_workers) == 1 or len(settings_list) <= 1:
        return [calculate_reading_difficulty(objects, settings, section_length=section_length) for settings in settings_list]

    with ThreadPoolExecutor(max_workers=int(max_workers), thread_name_prefix="reading-skill") as executor:
        futures = [
            executor.submit(calculate_reading_difficulty, objects, settings, section_length=section_length)
            for settings in settings_list
        ]
        return [future.result() for future in futures]
