class VolumeRegulationError(ValueError):
    """Base class for validation failures raised by the volume engine."""


class InvalidWeek(VolumeRegulationError):
    """Week index outside the supported progression curve."""


class InvalidBaseline(VolumeRegulationError):
    """Baseline set count below the one set floor."""


class InvalidOverride(VolumeRegulationError):
    """Manual set override that is not a whole number."""


class InvalidFeedbackValue(VolumeRegulationError):
    """Feedback input outside its enumerated value set."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"invalid {field}: {value!r}")


class InvalidAdjustmentRequest(VolumeRegulationError):
    """Malformed input for the volume distributor."""
