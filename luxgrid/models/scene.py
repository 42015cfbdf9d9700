from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from luxgrid.geometry.core import BoundingBox3D, Point3D
from luxgrid.geometry.polygon2d import Point2, point_in_polygon, polygon_area, polygon_bounds


PointTest = Callable[[Point3D], bool]


@dataclass(frozen=True)
class RoomDescriptor:
    """
    Room geometry as handed over by the host application.

    Coordinates are in host length units; `scale_to_meters` converts them.
    The footprint polygon is the authoritative outline for grid clipping; a
    host-side `point_test` replaces the polygon test when supplied.
    """
    id: str
    name: str
    footprint: Tuple[Point2, ...] = ()
    base_elevation: float = 0.0
    height: Optional[float] = None
    number: Optional[str] = None
    scale_to_meters: float = 1.0
    area_m2: Optional[float] = None
    bounds: Optional[BoundingBox3D] = None
    activity: Optional[str] = None
    point_test: Optional[PointTest] = field(default=None, compare=False, repr=False)

    def bounding_box(self) -> Optional[BoundingBox3D]:
        if self.bounds is not None:
            return self.bounds
        if len(self.footprint) < 3:
            return None
        x0, y0, x1, y1 = polygon_bounds(self.footprint)
        top = self.base_elevation + (self.height or 0.0)
        return BoundingBox3D(Point3D(x0, y0, self.base_elevation), Point3D(x1, y1, top))

    def contains(self, point: Point3D) -> bool:
        if self.point_test is not None:
            return bool(self.point_test(point))
        if len(self.footprint) >= 3:
            return point_in_polygon((point.x, point.y), self.footprint)
        bb = self.bounds
        if bb is None:
            return False
        return bb.min.x <= point.x <= bb.max.x and bb.min.y <= point.y <= bb.max.y

    def floor_area_m2(self) -> float:
        if self.area_m2 is not None:
            return max(0.0, float(self.area_m2))
        s2 = self.scale_to_meters * self.scale_to_meters
        if len(self.footprint) >= 3:
            return polygon_area(self.footprint) * s2
        if self.bounds is not None:
            return self.bounds.size_x * self.bounds.size_y * s2
        return 0.0


@dataclass(frozen=True)
class LuminaireDescriptor:
    """
    One luminaire placed in a room.

    `position` is the host insertion point, which for some families sits on
    the floor; `bbox` is the luminaire's bounding volume used to recover the
    real light-emitting height. `total_lumens` and `type_name` feed the
    analytic model when no photometric file can be resolved.
    """
    id: str
    name: str = ""
    type_name: Optional[str] = None
    position: Optional[Point3D] = None
    bbox: Optional[BoundingBox3D] = None
    ies_path: Optional[str] = None
    total_lumens: float = 0.0
    rated_power_w: float = 0.0
    manufacturer: Optional[str] = None
    reference: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def photometry_key(self) -> str:
        """Cache key: luminaires of one type share one photometric file."""
        if self.type_name:
            return f"type:{self.type_name}"
        if self.ies_path:
            return f"path:{self.ies_path}"
        return f"id:{self.id}"
