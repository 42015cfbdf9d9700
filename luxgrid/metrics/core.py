from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

import numpy as np


# Local uniformity needs at least a 3x3 patch of points.
MIN_POINTS_FOR_LOCAL_UNIFORMITY = 9
MIN_NEIGHBOURS = 4
NEIGHBOUR_RADIUS_FACTOR = 1.5


class _Sample(Protocol):
    x: float
    y: float
    illuminance: float


@dataclass(frozen=True)
class BasicMetrics:
    E_avg: float
    E_min: float
    E_max: float
    U0: float
    U1: float
    P50: float
    P90: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "E_avg": self.E_avg,
            "E_min": self.E_min,
            "E_max": self.E_max,
            "U0": self.U0,
            "U1": self.U1,
            "P50": self.P50,
            "P90": self.P90,
        }


@dataclass(frozen=True)
class GridSummary:
    basic: BasicMetrics
    local_uniformity: float
    point_count: int

    @property
    def average(self) -> float:
        return self.basic.E_avg

    @property
    def minimum(self) -> float:
        return self.basic.E_min

    @property
    def maximum(self) -> float:
        return self.basic.E_max

    @property
    def uniformity(self) -> float:
        return self.basic.U0

    def to_dict(self) -> Dict[str, float]:
        out: Dict[str, float] = dict(self.basic.to_dict())
        out["Uh"] = self.local_uniformity
        out["points"] = float(self.point_count)
        return out


def compute_basic_metrics(values: Iterable[float]) -> BasicMetrics:
    arr = np.asarray(list(values), dtype=float).reshape(-1)
    if arr.size == 0:
        return BasicMetrics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        return BasicMetrics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    e_avg = float(np.mean(arr))
    e_min = float(np.min(arr))
    e_max = float(np.max(arr))
    u0 = (e_min / e_avg) if e_avg > 1e-12 else 0.0
    u1 = (e_min / e_max) if e_max > 1e-12 else 0.0
    return BasicMetrics(
        E_avg=e_avg,
        E_min=e_min,
        E_max=e_max,
        U0=min(1.0, max(0.0, u0)),
        U1=min(1.0, max(0.0, u1)),
        P50=float(np.percentile(arr, 50.0)),
        P90=float(np.percentile(arr, 90.0)),
    )


def _bucket(x: float, y: float, cell: float) -> Tuple[int, int]:
    return (int(math.floor(x / cell)), int(math.floor(y / cell)))


def compute_local_uniformity(points: Sequence[_Sample], spacing: float) -> float:
    """
    Worst ratio of a point's illuminance to the mean of its neighbours.

    Neighbours are the other points within 1.5 x spacing (same units as the
    point coordinates). Points with fewer than four neighbours, or whose
    neighbours average zero, do not count. Starts at 1.0 and never exceeds it.
    """
    if len(points) < MIN_POINTS_FOR_LOCAL_UNIFORMITY or not spacing > 0:
        return 1.0
    radius = NEIGHBOUR_RADIUS_FACTOR * spacing
    r2 = radius * radius

    buckets: Dict[Tuple[int, int], List[int]] = defaultdict(list)
    for i, p in enumerate(points):
        buckets[_bucket(p.x, p.y, radius)].append(i)

    uh = 1.0
    for i, p in enumerate(points):
        bx, by = _bucket(p.x, p.y, radius)
        total = 0.0
        count = 0
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for j in buckets.get((bx + dx, by + dy), ()):
                    if j == i:
                        continue
                    q = points[j]
                    ddx = q.x - p.x
                    ddy = q.y - p.y
                    if ddx * ddx + ddy * ddy <= r2:
                        total += q.illuminance
                        count += 1
        if count < MIN_NEIGHBOURS:
            continue
        mean = total / count
        if mean <= 0.0:
            continue
        uh = min(uh, p.illuminance / mean)
    return max(0.0, uh)


def summarize_grid(points: Sequence[_Sample], spacing: float) -> GridSummary:
    basic = compute_basic_metrics(p.illuminance for p in points)
    return GridSummary(
        basic=basic,
        local_uniformity=compute_local_uniformity(points, spacing),
        point_count=len(points),
    )
