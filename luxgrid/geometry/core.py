from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class Point3D:
    """A point in 3D space, in host length units unless stated otherwise."""
    x: float
    y: float
    z: float

    def __add__(self, other: 'Point3D') -> 'Point3D':
        return Point3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Point3D') -> 'Point3D':
        return Point3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> 'Point3D':
        return Point3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def dot(self, other: 'Point3D') -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def distance_to(self, other: 'Point3D') -> float:
        return (self - other).length()

    def normalize(self) -> 'Point3D':
        L = self.length()
        if L < 1e-10:
            return Point3D(0, 0, 1)
        return Point3D(self.x / L, self.y / L, self.z / L)

    def with_z(self, z: float) -> 'Point3D':
        return Point3D(self.x, self.y, float(z))

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'Point3D':
        if len(values) != 3:
            raise ValueError(f"Expected 3 coordinates, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class BoundingBox3D:
    """Axis-aligned bounding volume (host length units)."""
    min: Point3D
    max: Point3D

    def __post_init__(self) -> None:
        lo = Point3D(min(self.min.x, self.max.x), min(self.min.y, self.max.y), min(self.min.z, self.max.z))
        hi = Point3D(max(self.min.x, self.max.x), max(self.min.y, self.max.y), max(self.min.z, self.max.z))
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @property
    def size_x(self) -> float:
        return self.max.x - self.min.x

    @property
    def size_y(self) -> float:
        return self.max.y - self.min.y

    @property
    def size_z(self) -> float:
        return self.max.z - self.min.z

    @property
    def center(self) -> Point3D:
        return Point3D(
            0.5 * (self.min.x + self.max.x),
            0.5 * (self.min.y + self.max.y),
            0.5 * (self.min.z + self.max.z),
        )

    def to_tuple(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        return (self.min.to_tuple(), self.max.to_tuple())
