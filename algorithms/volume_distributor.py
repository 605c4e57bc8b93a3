from typing import Iterable, Mapping, NamedTuple, Union

from .errors import InvalidAdjustmentRequest


class ExerciseVolume(NamedTuple):
    exercise_id: str
    current_sets: int


class ExerciseSets(NamedTuple):
    exercise_id: str
    new_sets: int


ExerciseLike = Union[ExerciseVolume, Mapping, tuple]


class VolumeDistributor:
    """Spread a muscle group's set delta over the exercises training it."""

    MIN_SETS: int = 1

    @staticmethod
    def _is_int(value) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    @classmethod
    def normalize(cls, exercises: Iterable[ExerciseLike]) -> list[ExerciseVolume]:
        """Coerce mappings and pairs into :class:`ExerciseVolume` and validate."""
        result: list[ExerciseVolume] = []
        seen: set = set()
        for item in exercises:
            if isinstance(item, Mapping):
                try:
                    ex_id = item["exercise_id"] if "exercise_id" in item else item["id"]
                    sets = item["current_sets"]
                except KeyError as e:
                    raise InvalidAdjustmentRequest(f"missing field {e.args[0]!r}") from None
            else:
                try:
                    ex_id, sets = item
                except (TypeError, ValueError):
                    raise InvalidAdjustmentRequest(f"malformed exercise entry {item!r}") from None
            if not cls._is_int(sets) or sets < cls.MIN_SETS:
                raise InvalidAdjustmentRequest(
                    f"current sets for {ex_id!r} must be an integer >= {cls.MIN_SETS}, got {sets!r}"
                )
            if ex_id in seen:
                raise InvalidAdjustmentRequest(f"duplicate exercise id {ex_id!r}")
            seen.add(ex_id)
            result.append(ExerciseVolume(ex_id, sets))
        return result

    @classmethod
    def distribute_set_adjustment(
        cls, exercises: Iterable[ExerciseLike], total_adjustment: int
    ) -> list[ExerciseSets]:
        """Allocate ``total_adjustment`` one set at a time.

        Sets are added to the exercises with the most sets first and removed
        from those with the fewest first, cycling round-robin until the whole
        adjustment is used. Ties keep input order. While removing, an
        exercise already at one set is passed over and the unit is spent
        anyway, so a deload requested at the floor removes less than asked.
        The result is in input order.
        """
        if not cls._is_int(total_adjustment):
            raise InvalidAdjustmentRequest(
                f"total adjustment must be an integer, got {total_adjustment!r}"
            )
        volumes = cls.normalize(exercises)
        new_sets = [v.current_sets for v in volumes]
        if total_adjustment == 0 or not volumes:
            return [ExerciseSets(v.exercise_id, n) for v, n in zip(volumes, new_sets)]

        adding = total_adjustment > 0
        # sorted() is stable, so equal set counts keep their input order
        order = sorted(
            range(len(volumes)),
            key=lambda i: -volumes[i].current_sets if adding else volumes[i].current_sets,
        )
        remaining = abs(total_adjustment)
        while remaining > 0:
            for i in order:
                if remaining == 0:
                    break
                if adding:
                    new_sets[i] += 1
                elif new_sets[i] > cls.MIN_SETS:
                    new_sets[i] -= 1
                remaining -= 1
        return [ExerciseSets(v.exercise_id, n) for v, n in zip(volumes, new_sets)]


def distribute_set_adjustment(
    exercises: Iterable[ExerciseLike], total_adjustment: int
) -> list[ExerciseSets]:
    return VolumeDistributor.distribute_set_adjustment(exercises, total_adjustment)
