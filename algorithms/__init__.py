from .errors import (
    VolumeRegulationError,
    InvalidWeek,
    InvalidBaseline,
    InvalidOverride,
    InvalidFeedbackValue,
    InvalidAdjustmentRequest,
)
from .feedback import MuscleGroupPriority, JointPain, Pump, Workload
from .progression import ProgressionCalculator, compute_target_sets
from .auto_regulation import (
    AutoRegulation,
    SetAdjustment,
    AUTO_REGULATION_RULES,
    calculate_set_adjustment,
)
from .volume_distributor import (
    VolumeDistributor,
    ExerciseVolume,
    ExerciseSets,
    distribute_set_adjustment,
)
from .math_tools import MathTools
from .weight_converter import WeightConverter

__all__ = [
    "VolumeRegulationError",
    "InvalidWeek",
    "InvalidBaseline",
    "InvalidOverride",
    "InvalidFeedbackValue",
    "InvalidAdjustmentRequest",
    "MuscleGroupPriority",
    "JointPain",
    "Pump",
    "Workload",
    "ProgressionCalculator",
    "compute_target_sets",
    "AutoRegulation",
    "SetAdjustment",
    "AUTO_REGULATION_RULES",
    "calculate_set_adjustment",
    "VolumeDistributor",
    "ExerciseVolume",
    "ExerciseSets",
    "distribute_set_adjustment",
    "MathTools",
    "WeightConverter",
]
