from haarlab.eval.reference import (
    energy_by_level,
    level_slices,
    pywt_coefficients,
)

__all__ = [
    "energy_by_level",
    "level_slices",
    "pywt_coefficients",
]
