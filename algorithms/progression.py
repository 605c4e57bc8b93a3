import math
from typing import Iterable, Mapping

from .errors import InvalidBaseline, InvalidOverride, InvalidWeek


class ProgressionCalculator:
    """Deterministic week-by-week set targets for a mesocycle."""

    # week -> offset from baseline: baseline, +1, +2, deload, peak
    OFFSETS: dict[int, int] = {1: 0, 2: 1, 3: 2, 4: -1, 5: 2}
    FINAL_WEEK: int = 5
    MIN_SETS: int = 1
    DELOAD_FRACTION: float = 0.5

    @classmethod
    def weeks(cls) -> list[int]:
        return sorted(cls.OFFSETS)

    @classmethod
    def validate_week(cls, week: int) -> None:
        if isinstance(week, bool) or not isinstance(week, int) or week not in cls.OFFSETS:
            raise InvalidWeek(
                f"week must be between 1 and {cls.FINAL_WEEK}, got {week!r}"
            )

    @classmethod
    def _check_baseline(cls, baseline_sets: int) -> None:
        if (
            isinstance(baseline_sets, bool)
            or not isinstance(baseline_sets, int)
            or baseline_sets < cls.MIN_SETS
        ):
            raise InvalidBaseline(
                f"baseline sets must be an integer >= {cls.MIN_SETS}, got {baseline_sets!r}"
            )

    @classmethod
    def compute_target_sets(
        cls, baseline_sets: int, week: int, override: int | None = None
    ) -> int:
        """Return the set target for ``week``.

        An ``override`` replaces the curve outright; either way the result is
        never below one set.
        """
        cls.validate_week(week)
        if override is not None:
            if isinstance(override, bool) or not isinstance(override, int):
                raise InvalidOverride(f"override must be an integer, got {override!r}")
            return max(cls.MIN_SETS, override)
        cls._check_baseline(baseline_sets)
        return max(cls.MIN_SETS, baseline_sets + cls.OFFSETS[week])

    @classmethod
    def weekly_plan(
        cls, baseline_sets: int, overrides: Mapping[int, int] | None = None
    ) -> list[tuple[int, int]]:
        """Return ``(week, target)`` pairs for the whole curve."""
        overrides = overrides or {}
        for week in overrides:
            cls.validate_week(week)
        return [
            (week, cls.compute_target_sets(baseline_sets, week, overrides.get(week)))
            for week in cls.weeks()
        ]

    @classmethod
    def restart_baseline(
        cls, baseline_sets: int, week5_override: int | None = None
    ) -> int:
        """Baseline for the next cycle: the final week target of this one."""
        return cls.compute_target_sets(baseline_sets, cls.FINAL_WEEK, week5_override)

    @classmethod
    def next_cycle_baselines(
        cls,
        baselines: Mapping[str, int],
        final_week_overrides: Mapping[str, int] | None = None,
    ) -> dict[str, int]:
        final_week_overrides = final_week_overrides or {}
        return {
            ex_id: cls.restart_baseline(sets, final_week_overrides.get(ex_id))
            for ex_id, sets in baselines.items()
        }

    @staticmethod
    def is_deload_week(week: int, total_weeks: int) -> bool:
        """Template mesocycles deload in their final week."""
        if total_weeks < 1 or week < 1 or week > total_weeks:
            raise InvalidWeek(f"week {week} outside 1..{total_weeks}")
        return week == total_weeks

    @classmethod
    def deload_sets(cls, normal_sets: int) -> int:
        """Halve the previous week's sets, rounding up."""
        if normal_sets < cls.MIN_SETS:
            raise InvalidBaseline("normal sets must be at least 1")
        return max(cls.MIN_SETS, math.ceil(normal_sets * cls.DELOAD_FRACTION))

    @classmethod
    def apply_adjustment(cls, current_sets: int, adjustment: int) -> int:
        return max(cls.MIN_SETS, current_sets + adjustment)

    @staticmethod
    def weekly_volume(set_counts: Iterable[int]) -> int:
        return sum(set_counts)


def compute_target_sets(
    baseline_sets: int, week: int, override: int | None = None
) -> int:
    return ProgressionCalculator.compute_target_sets(baseline_sets, week, override)
