# -*- coding: utf-8 -*-
########################
# reading_evaluator.py
########################
# Purpose:
# - Per-object difficulty evaluators for the reading skill.
# - Base reading bonus from approach rate, stack bonus under Hidden, memorisation bonus under Flashlight.
#
# Design notes:
# - Pure functions. No state, no I/O.
# - Look-back is bounded and walks predecessors nearest first, in a fixed order.
# - Absent history returns 0. It is not an error.
# - The approach rate band between the low and high thresholds gives no bonus at all.
#
########################
# Interfaces:
# Public functions:
# - reading_difficulty_of(current: Optional[DifficultyHitObject], hidden: bool, approach_rate: float) -> float
# - hidden_difficulty_of(current: DifficultyHitObject) -> float
# - flashlight_difficulty_of(current: DifficultyHitObject, hidden: bool) -> float
#
# Inputs:
# - DifficultyHitObject from difficulty_objects.py and flags from ReadingSettings.
#
# Outputs:
# - Non-negative strain contributions folded in by reading_skill.ReadingStrain.
#
########################

from __future__ import annotations

import math
from typing import Optional

from difficulty_objects import DifficultyHitObject
from reading_models import ObjectKind, ReadingInputError

# Approach rate
MAX_APPROACH_RATE_BONUS = 8.67
MIN_APPROACH_RATE_BONUS = 10.33
READING_HIDDEN_BONUS = 1.75

# Hidden
MAX_STACK_DISTANCE = 15.0

# Flashlight
FLASHLIGHT_LOOKBACK = 10
MAX_OPACITY_BONUS = 0.4
FLASHLIGHT_HIDDEN_BONUS = 1.2
MIN_VELOCITY = 0.5
SLIDER_MULTIPLIER = 1.3
MIN_ANGLE_MULTIPLIER = 0.2

NORMALISED_RADIUS = 52.0


def reading_difficulty_of(current: Optional[DifficultyHitObject], hidden: bool, approach_rate: float) -> float:
    if current is None:
        return 0.0

    reading_strain = 0.0

    # Bonus for low AR
    if approach_rate < MAX_APPROACH_RATE_BONUS:
        reading_strain = 1.0 - math.pow(approach_rate / MAX_APPROACH_RATE_BONUS, 0.6)

        if hidden:
            reading_strain *= READING_HIDDEN_BONUS

    # Bonus for high AR
    elif approach_rate > MIN_APPROACH_RATE_BONUS:
        reading_strain = math.pow(approach_rate / MIN_APPROACH_RATE_BONUS, 4.0) - 1.0

    return reading_strain


def hidden_difficulty_of(current: DifficultyHitObject) -> float:
    first_former = current.previous(0)
    second_former = current.previous(1)
    if first_former is None or second_former is None:
        return 0.0

    scaling_factor = NORMALISED_RADIUS / current.radius
    hidden_strain = 0.0

    # Only the start of a stack is rewarded: the object before the pair must not be stacked itself.
    if second_former.lazy_jump_distance > MAX_STACK_DISTANCE:
        if current.minimum_jump_distance < MAX_STACK_DISTANCE:
            hidden_strain += current.minimum_jump_distance * scaling_factor / 2.0
        if first_former.minimum_jump_distance < MAX_STACK_DISTANCE:
            hidden_strain += first_former.minimum_jump_distance * scaling_factor / 2.0

    return hidden_strain


def flashlight_difficulty_of(current: DifficultyHitObject, hidden: bool) -> float:
    """Evaluate how hard the current object is to memorise and hit, based on:

    - distance between a number of previous objects and the current object,
    - the visual opacity of the current object,
    - the angle made by the current object,
    - length and speed of the current object (for sliders),
    - and whether Hidden is enabled.
    """
    if current.kind is ObjectKind.BREAK:
        return 0.0

    scaling_factor = NORMALISED_RADIUS / current.radius
    small_dist_nerf = 1.0
    cumulative_strain_time = 0.0

    flashlight_strain = 0.0
    angle_repeat_count = 0.0

    last_object = current

    # Iterates backwards in time from the current object.
    for i in range(min(current.index, FLASHLIGHT_LOOKBACK)):
        former = current.previous(i)

        cumulative_strain_time += last_object.strain_time

        if former.kind is not ObjectKind.BREAK:
            jump_distance = (current.stacked_position - former.stacked_end_position).length()

            # Objects close enough to sit inside the flashlight radius are easy to see.
            if i == 0:
                small_dist_nerf = min(1.0, jump_distance / 75.0)

            # Only the first object of a stack should count.
            stack_nerf = min(1.0, (former.lazy_jump_distance / scaling_factor) / 25.0)

            # More faded when the former object appeared means harder to read.
            opacity_bonus = 1.0 + MAX_OPACITY_BONUS * (1.0 - current.opacity_at(former.base_object.start_time, hidden))

            if cumulative_strain_time <= 0.0:
                raise ReadingInputError(
                    f"object {current.index} has zero cumulative strain time over its last {i + 1} predecessors"
                )

            flashlight_strain += stack_nerf * opacity_bonus * scaling_factor * jump_distance / cumulative_strain_time

            if former.angle is not None and current.angle is not None:
                # Objects further back in time count less for the nerf.
                if abs(former.angle - current.angle) < 0.02:
                    angle_repeat_count += max(1.0 - 0.1 * i, 0.0)

        last_object = former

    flashlight_strain = math.pow(small_dist_nerf * flashlight_strain, 2.0)

    # No approach circles under Hidden.
    if hidden:
        flashlight_strain *= FLASHLIGHT_HIDDEN_BONUS

    # Nerf patterns with repeated angles.
    flashlight_strain *= MIN_ANGLE_MULTIPLIER + (1.0 - MIN_ANGLE_MULTIPLIER) / (angle_repeat_count + 1.0)

    slider_bonus = 0.0

    if current.kind is ObjectKind.PATH:
        if current.travel_time <= 0.0:
            raise ReadingInputError(f"path object {current.index} must have travel_time > 0")

        # Undo the scaling factor to get the travel distance independent of circle size.
        pixel_travel_distance = current.lazy_travel_distance / scaling_factor

        # Reward sliders based on velocity.
        slider_bonus = math.pow(max(0.0, pixel_travel_distance / current.travel_time - MIN_VELOCITY), 0.5)

        # Longer sliders require more memorisation.
        slider_bonus *= pixel_travel_distance

        # Repeats need less memorisation.
        if current.base_object.repeat_count > 0:
            slider_bonus /= current.base_object.repeat_count + 1

    flashlight_strain += slider_bonus * SLIDER_MULTIPLIER

    return flashlight_strain
