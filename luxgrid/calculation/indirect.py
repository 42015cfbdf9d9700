"""
Simplified inter-reflection estimate.

The indirect component is approximated as a fraction of the maintained direct
illuminance, derived from the room index, a utilization factor curve and the
weighted surface reflectance:

    k   = L·W / ((L + W)·H)
    rho = 0.3·rho_ceiling + 0.5·rho_wall + 0.2·rho_floor
    factor = UF(k) · rho · 0.48
"""

from __future__ import annotations

from typing import Optional

from luxgrid.models.scene import RoomDescriptor
from luxgrid.models.settings import AnalysisSettings


INDIRECT_CALIBRATION = 0.48

CEILING_WEIGHT = 0.3
WALL_WEIGHT = 0.5
FLOOR_WEIGHT = 0.2


def room_index(length_m: float, width_m: float, height_m: float) -> float:
    if length_m <= 0 or width_m <= 0 or height_m <= 0:
        return 0.0
    return (length_m * width_m) / ((length_m + width_m) * height_m)


def average_reflectance(ceiling: float, wall: float, floor: float) -> float:
    return CEILING_WEIGHT * ceiling + WALL_WEIGHT * wall + FLOOR_WEIGHT * floor


def utilization_factor(k: float) -> float:
    """Piecewise-linear UF curve, continuous and saturating at k = 5."""
    if k < 0.6:
        return 0.30 + 0.25 * k
    if k < 1.0:
        return 0.45 + 0.20 * (k - 0.6)
    if k < 2.0:
        return 0.53 + 0.12 * (k - 1.0)
    if k < 3.0:
        return 0.65 + 0.08 * (k - 2.0)
    return 0.73 + 0.04 * min(k - 3.0, 2.0)


def _room_dimensions_m(room: RoomDescriptor) -> Optional[tuple]:
    bb = room.bounding_box()
    if bb is None:
        return None
    s = room.scale_to_meters
    height = room.height if room.height is not None and room.height > 0 else bb.size_z
    return bb.size_x * s, bb.size_y * s, height * s


def indirect_factor(room: RoomDescriptor, settings: AnalysisSettings) -> float:
    """Fraction of maintained direct light added as inter-reflected light (>= 0)."""
    if not settings.include_indirect_light:
        return 0.0
    dims = _room_dimensions_m(room)
    if dims is None:
        return 0.0
    length, width, height = dims
    k = room_index(length, width, height)
    if k <= 0.0:
        return 0.0
    rho = average_reflectance(settings.ceiling_reflectance, settings.wall_reflectance, settings.floor_reflectance)
    return max(0.0, utilization_factor(k) * rho * INDIRECT_CALIBRATION)
