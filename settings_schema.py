from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    weight_unit: Literal["kg", "lb"] = "kg"
    default_sets: int = Field(3, ge=1)
    default_target_reps: int = Field(10, ge=1)
    cycle_weeks: int = Field(5, ge=5, le=5)
    auto_apply_adjustments: bool = True
    joint_pain_scale: int = Field(4, ge=3, le=4)
    app_version: str = "1.0.0"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
