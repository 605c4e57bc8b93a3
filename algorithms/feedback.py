"""Enumerations for muscle group priority and weekly feedback signals."""

from enum import Enum

from .errors import InvalidFeedbackValue


class MuscleGroupPriority(str, Enum):
    """How aggressively volume may increase for a muscle group."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class JointPain(str, Enum):
    NONE = "none"
    LOW = "low"  # tolerable, never triggers a reduction
    MEDIUM = "medium"
    HIGH = "high"


class Pump(str, Enum):
    NONE = "none"
    OK = "ok"
    AMAZING = "amazing"


class Workload(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    TOO_MUCH = "too_much"


def parse_enum(enum_cls, value, field: str):
    """Return ``value`` as a member of ``enum_cls``.

    Strings are stripped and lower-cased before lookup so ``"High"`` and
    ``" high "`` both map to ``MuscleGroupPriority.HIGH``. Anything that is
    not a known member raises :class:`InvalidFeedbackValue` naming ``field``.
    """
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise InvalidFeedbackValue(field, value)
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        raise InvalidFeedbackValue(field, value) from None
