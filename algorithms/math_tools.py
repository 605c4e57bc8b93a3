from typing import Iterable
import numpy as np


class MathTools:
    """Numeric helpers for summarising logged sets."""

    EPL_COEFF: float = 0.0333
    # Epley overestimates past eight reps, so longer sets are capped
    EPL_MAX_REPS: int = 8

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Epley formula."""
        if reps < 0:
            raise ValueError("reps must be non-negative")
        if weight < 0:
            raise ValueError("weight must be non-negative")
        rep_term = min(reps, cls.EPL_MAX_REPS)
        return weight * (1 + cls.EPL_COEFF * rep_term)

    @staticmethod
    def volume(sets: Iterable[tuple[int, float]]) -> float:
        """Compute tonnage as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @staticmethod
    def trend_slope(values: Iterable[float]) -> float:
        """Least-squares slope of ``values`` against their index."""
        data = [float(v) for v in values]
        if len(data) < 2:
            return 0.0
        x = np.arange(len(data), dtype=float)
        slope, _intercept = np.polyfit(x, np.array(data), 1)
        return float(slope)
