"""
Illuminance calculations: direct point-by-point illuminance on a work plane
and the simplified inter-reflection estimate added on top of it.
"""

from luxgrid.calculation.illuminance import (
    compute_room_illuminance,
    direct_contribution,
    effective_source_position,
    grid_axis,
)
from luxgrid.calculation.indirect import (
    average_reflectance,
    indirect_factor,
    room_index,
    utilization_factor,
)

__all__ = [
    "compute_room_illuminance",
    "direct_contribution",
    "effective_source_position",
    "grid_axis",
    "average_reflectance",
    "indirect_factor",
    "room_index",
    "utilization_factor",
]
