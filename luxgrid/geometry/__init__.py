"""
Geometry primitives used by the illuminance engine: 3D points, axis-aligned
bounding boxes and 2D footprint polygons.
"""

from luxgrid.geometry.core import BoundingBox3D, Point3D
from luxgrid.geometry.polygon2d import (
    Point2,
    point_in_polygon,
    polygon_area,
    polygon_bounds,
)

__all__ = [
    "BoundingBox3D",
    "Point3D",
    "Point2",
    "point_in_polygon",
    "polygon_area",
    "polygon_bounds",
]
