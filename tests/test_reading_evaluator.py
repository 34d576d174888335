from __future__ import annotations

import math

import pytest

from difficulty_objects import DifficultyHitObject, build_difficulty_objects
from reading_evaluator import flashlight_difficulty_of, hidden_difficulty_of, reading_difficulty_of
from reading_models import ObjectKind, ReadingInputError


class TestReadingDifficultyOf:
    @pytest.mark.parametrize("approach_rate", [8.67, 9.0, 9.5, 10.0, 10.33])
    @pytest.mark.parametrize("hidden", [False, True])
    def test_comfortable_band_gives_nothing(self, record, build, approach_rate, hidden) -> None:
        current = build([record(1000.0)])[0]
        assert reading_difficulty_of(current, hidden, approach_rate) == 0.0

    def test_approach_rate_zero(self, record, build) -> None:
        current = build([record(1000.0)])[0]
        assert reading_difficulty_of(current, False, 0.0) == 1.0
        assert reading_difficulty_of(current, True, 0.0) == 1.75

    def test_low_approach_rate_formula(self, record, build) -> None:
        current = build([record(1000.0)])[0]
        expected = 1.0 - (5.0 / 8.67) ** 0.6
        assert reading_difficulty_of(current, False, 5.0) == pytest.approx(expected)
        assert reading_difficulty_of(current, True, 5.0) == pytest.approx(expected * 1.75)

    def test_high_approach_rate_formula(self, record, build) -> None:
        current = build([record(1000.0)])[0]
        expected = (20.0 / 10.33) ** 4 - 1.0
        assert reading_difficulty_of(current, False, 20.0) == pytest.approx(expected, abs=1e-2)
        # Hidden does not change the high approach rate bonus.
        assert reading_difficulty_of(current, True, 20.0) == reading_difficulty_of(current, False, 20.0)

    def test_missing_object(self) -> None:
        assert reading_difficulty_of(None, True, 0.0) == 0.0


class TestHiddenDifficultyOf:
    def test_short_history_is_zero(self, record, build) -> None:
        objects = build([
            record(1000.0, minimum_jump_distance=5.0, lazy_jump_distance=40.0),
            record(1100.0, minimum_jump_distance=5.0, lazy_jump_distance=40.0),
        ])
        assert hidden_difficulty_of(objects[0]) == 0.0
        assert hidden_difficulty_of(objects[1]) == 0.0

    def test_third_object_can_start_a_stack(self, record, build) -> None:
        objects = build([
            record(1000.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1100.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1200.0, lazy_jump_distance=5.0, minimum_jump_distance=5.0),
        ])
        # only previous(1) has to exist, so index 2 is the first that can score
        # radius 26 -> scaling factor 2
        assert hidden_difficulty_of(objects[2]) == 5.0

    def test_stack_start_rewards_both_stacked_objects(self, record, build) -> None:
        objects = build([
            record(1000.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1100.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1200.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1300.0, lazy_jump_distance=5.0, minimum_jump_distance=5.0),
            record(1400.0, lazy_jump_distance=5.0, minimum_jump_distance=5.0),
        ])
        assert hidden_difficulty_of(objects[3]) == 5.0
        assert hidden_difficulty_of(objects[4]) == 10.0

    def test_no_reward_inside_an_existing_stack(self, record, build) -> None:
        objects = build([
            record(1000.0, lazy_jump_distance=10.0, minimum_jump_distance=5.0),
            record(1100.0, lazy_jump_distance=5.0, minimum_jump_distance=5.0),
            record(1200.0, lazy_jump_distance=5.0, minimum_jump_distance=5.0),
        ])
        assert hidden_difficulty_of(objects[2]) == 0.0

    def test_scales_with_radius(self, record, build) -> None:
        objects = build([
            record(1000.0, radius=52.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1100.0, radius=52.0, lazy_jump_distance=40.0, minimum_jump_distance=40.0),
            record(1200.0, radius=13.0, minimum_jump_distance=6.0),
        ])
        assert hidden_difficulty_of(objects[2]) == 6.0 * 4.0 / 2.0


class TestFlashlightDifficultyOf:
    def test_break_object_is_zero(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0, lazy_jump_distance=100.0),
            record(1300.0, 300.0, 0.0, lazy_jump_distance=100.0),
            record(1600.0, 256.0, 192.0, kind=ObjectKind.BREAK),
        ])
        assert flashlight_difficulty_of(objects[2], False) == 0.0
        assert flashlight_difficulty_of(objects[2], True) == 0.0

    def test_first_object_has_no_window(self, record, build) -> None:
        objects = build([record(1000.0, 100.0, 100.0)])
        assert flashlight_difficulty_of(objects[0], True) == 0.0

    def test_single_predecessor(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0, lazy_jump_distance=100.0),
            record(1300.0, 150.0, 0.0, lazy_jump_distance=100.0),
        ])
        # opacity of the current object at 1000 ms is 0.75 -> bonus 1.1
        # 1.1 * scale 2 * jump 150 / 300 ms = 1.1, squared
        assert flashlight_difficulty_of(objects[1], False) == pytest.approx(1.21)
        assert flashlight_difficulty_of(objects[1], True) == pytest.approx(1.21 * 1.2)

    def test_opacity_uses_map_time_under_clock_rate(self, record) -> None:
        objects = build_difficulty_objects(
            [
                record(1500.0, 0.0, 0.0, lazy_jump_distance=100.0),
                record(1950.0, 150.0, 0.0, lazy_jump_distance=100.0),
            ],
            clock_rate=1.5,
        )
        # opacity at 1500 ms map time is 0.375 -> bonus 1.25, strain time 450 / 1.5 = 300
        expected = (1.25 * 2.0 * 150.0 / 300.0) ** 2
        assert flashlight_difficulty_of(objects[1], False) == pytest.approx(expected)

    def test_close_predecessor_is_nerfed(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0, lazy_jump_distance=100.0),
            record(1300.0, 30.0, 0.0, lazy_jump_distance=100.0),
        ])
        raw = 1.1 * 2.0 * 30.0 / 300.0
        assert flashlight_difficulty_of(objects[1], False) == pytest.approx((30.0 / 75.0 * raw) ** 2)

    def test_stacked_predecessor_is_nerfed(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0, lazy_jump_distance=25.0),
            record(1300.0, 150.0, 0.0, lazy_jump_distance=100.0),
        ])
        # lazy 25 / scale 2 / 25 = 0.5
        assert flashlight_difficulty_of(objects[1], False) == pytest.approx((0.5 * 1.1) ** 2)

    def test_repeated_angles_are_nerfed(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0, lazy_jump_distance=100.0, angle=1.0),
            record(1300.0, 150.0, 0.0, lazy_jump_distance=100.0, angle=1.01),
        ])
        assert flashlight_difficulty_of(objects[1], False) == pytest.approx(1.21 * (0.2 + 0.8 / 2.0))

    def test_break_predecessor_still_advances_time(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0, lazy_jump_distance=100.0),
            record(1200.0, 256.0, 192.0, kind=ObjectKind.BREAK),
            record(1500.0, 150.0, 0.0, lazy_jump_distance=100.0),
        ])
        # opacity at 1000 ms is 0.25 -> bonus 1.3, cumulative time 300 + 200
        expected = (1.3 * 2.0 * 150.0 / 500.0) ** 2
        assert flashlight_difficulty_of(objects[2], False) == pytest.approx(expected)

    def test_zero_strain_time_is_rejected(self, record, build) -> None:
        objects = build([
            record(1000.0, 0.0, 0.0),
            record(1000.0, 150.0, 0.0, strain_time=0.0),
        ])
        with pytest.raises(ReadingInputError):
            flashlight_difficulty_of(objects[1], False)

    def test_lookback_is_bounded(self, record, build, monkeypatch) -> None:
        records = [
            record(1000.0 + 100.0 * index, 200.0 * (index % 2), 0.0, lazy_jump_distance=100.0)
            for index in range(1200)
        ]
        objects = build(records)

        requested = []
        original_previous = DifficultyHitObject.previous

        def counting_previous(self, backwards_index):
            requested.append(backwards_index)
            return original_previous(self, backwards_index)

        monkeypatch.setattr(DifficultyHitObject, "previous", counting_previous)

        value = flashlight_difficulty_of(objects[-1], True)

        assert value > 0.0
        assert len(requested) == 10
        assert max(requested) == 9


class TestSliderBonus:
    def _slider_value(self, record, build, lazy_travel_distance: float, repeat_count: int) -> float:
        objects = build([
            record(
                1000.0,
                kind=ObjectKind.PATH,
                lazy_travel_distance=lazy_travel_distance,
                travel_time=100.0,
                repeat_count=repeat_count,
            )
        ])
        return flashlight_difficulty_of(objects[0], False)

    def test_raw_bonus(self, record, build) -> None:
        # scale 2 -> 100 px over 100 ms
        expected = math.sqrt(1.0 - 0.5) * 100.0 * 1.3
        assert self._slider_value(record, build, 200.0, 0) == pytest.approx(expected)

    def test_grows_with_distance(self, record, build) -> None:
        shorter = self._slider_value(record, build, 200.0, 0)
        longer = self._slider_value(record, build, 300.0, 0)
        assert longer > shorter

    def test_repeats_divide_the_bonus(self, record, build) -> None:
        single = self._slider_value(record, build, 200.0, 0)
        repeated = self._slider_value(record, build, 200.0, 1)
        assert repeated == pytest.approx(single / 2.0)

    def test_slow_slider_gets_nothing(self, record, build) -> None:
        # 20 px over 100 ms is below the minimum velocity
        assert self._slider_value(record, build, 40.0, 0) == 0.0
