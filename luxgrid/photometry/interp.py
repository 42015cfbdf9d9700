from __future__ import annotations

import math
from typing import Callable, Optional, Sequence, Tuple

from luxgrid.models.photometry import PhotometricDataset
from luxgrid.photometry.fallback import (
    FallbackEmission,
    emission_intensity,
    estimate_intensity_from_lumens,
    peak_intensity,
)


# (vertical_deg, horizontal_deg=0.0) -> candela
IntensityFunction = Callable[..., float]


def nearest_angle_index(angles: Sequence[float], target_deg: float) -> int:
    """Index of the closest angle; the first one wins on ties."""
    if not angles:
        return 0
    nearest = 0
    min_diff = abs(angles[0] - target_deg)
    for i in range(1, len(angles)):
        diff = abs(angles[i] - target_deg)
        if diff < min_diff:
            min_diff = diff
            nearest = i
    return nearest


def _find_bracket(val: float, arr: Sequence[float]) -> Tuple[int, int, float]:
    n = len(arr)
    if n == 0:
        return 0, 0, 0.0
    if val < arr[0]:
        return 0, 0, 0.0
    if val > arr[-1]:
        return n - 1, n - 1, 0.0
    for i in range(n - 1):
        if arr[i] <= val <= arr[i + 1]:
            d = arr[i + 1] - arr[i]
            t = (val - arr[i]) / d if d != 0 else 0.0
            return i, i + 1, t
    return n - 1, n - 1, 0.0


def interpolate_candela(
    dataset: PhotometricDataset,
    vertical_deg: float,
    horizontal_deg: float = 0.0,
) -> float:
    """
    Candela from tabulated data: nearest C-plane, then linear interpolation
    along the vertical angle within that plane. Requests outside the tabulated
    vertical range take the end value of the column.
    """
    if not dataset.candela_values:
        return 0.0
    h = nearest_angle_index(dataset.horizontal_angles, horizontal_deg)
    if h >= len(dataset.candela_values):
        h = len(dataset.candela_values) - 1
    column = dataset.candela_values[h]
    n = min(len(column), len(dataset.vertical_angles))
    if n == 0:
        return 0.0
    lo, hi, t = _find_bracket(vertical_deg, dataset.vertical_angles[:n])
    c0 = column[lo]
    c1 = column[hi]
    return max(0.0, c0 + t * (c1 - c0))


def resolve_intensity(
    dataset: Optional[PhotometricDataset],
    vertical_deg: float,
    horizontal_deg: float = 0.0,
    *,
    fallback: Optional[FallbackEmission] = None,
) -> float:
    """
    Luminous intensity (cd) toward a direction `vertical_deg` from nadir.

    Tabulated data is used when the dataset carries candela values; otherwise
    the analytic model of `fallback` applies (zero when neither is given).
    """
    if not (math.isfinite(vertical_deg) and math.isfinite(horizontal_deg)):
        return 0.0
    if dataset is not None and dataset.has_candela:
        return interpolate_candela(dataset, vertical_deg, horizontal_deg)
    if fallback is None:
        return 0.0
    lumens = fallback.total_lumens
    if lumens <= 0 and dataset is not None:
        lumens = dataset.total_lumens
    return estimate_intensity_from_lumens(lumens, vertical_deg, fallback.type_name)


def intensity_function(
    dataset: Optional[PhotometricDataset],
    *,
    fallback: Optional[FallbackEmission] = None,
) -> IntensityFunction:
    """
    `resolve_intensity` bound to one dataset / fallback pair.

    The analytic class and peak are worked out here once, so the returned
    callable is cheap enough for the per-point loop.
    """
    if dataset is not None and dataset.has_candela:
        def _tabulated(vertical_deg: float, horizontal_deg: float = 0.0) -> float:
            if not (math.isfinite(vertical_deg) and math.isfinite(horizontal_deg)):
                return 0.0
            return interpolate_candela(dataset, vertical_deg, horizontal_deg)

        return _tabulated
    if fallback is None:
        return lambda vertical_deg, horizontal_deg=0.0: 0.0

    lumens = fallback.total_lumens
    if lumens <= 0 and dataset is not None:
        lumens = dataset.total_lumens
    profile = fallback.profile
    peak = peak_intensity(lumens, profile)

    def _analytic(vertical_deg: float, horizontal_deg: float = 0.0) -> float:
        if not (math.isfinite(vertical_deg) and math.isfinite(horizontal_deg)):
            return 0.0
        return emission_intensity(peak, profile, vertical_deg)

    return _analytic
