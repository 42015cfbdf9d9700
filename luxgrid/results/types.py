from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class GridPoint:
    """One calculation point; coordinates in host units, illuminance in lux."""
    x: float
    y: float
    z: float
    illuminance: float

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.illuminance)


@dataclass(frozen=True)
class LuminaireUsage:
    id: str
    type_name: Optional[str]
    photometry: str                  # "ies" or "fallback"
    photometry_path: Optional[str]
    power_w: float
    source_height_m: Optional[float]
    skipped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type_name": self.type_name,
            "photometry": self.photometry,
            "photometry_path": self.photometry_path,
            "power_w": self.power_w,
            "source_height_m": self.source_height_m,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class RoomIlluminanceResult:
    room_id: str
    room_name: str
    work_plane_height_m: float
    grid_spacing_m: float
    points: Tuple[GridPoint, ...]
    average_illuminance: float
    minimum_illuminance: float
    maximum_illuminance: float
    uniformity: float
    local_uniformity: float
    total_power_w: float
    luminaire_count: int
    room_area_m2: float
    maintenance_factor: float
    indirect_factor: float
    source_height_m: Optional[float] = None
    meets_standard: bool = False
    recommendation: str = ""
    luminaires: Tuple[LuminaireUsage, ...] = ()
    flags: Tuple[str, ...] = ()

    @property
    def values(self) -> np.ndarray:
        return np.array([p.illuminance for p in self.points], dtype=float)

    def to_dict(self, include_points: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "room_id": self.room_id,
            "room_name": self.room_name,
            "work_plane_height_m": self.work_plane_height_m,
            "grid_spacing_m": self.grid_spacing_m,
            "average_illuminance": self.average_illuminance,
            "minimum_illuminance": self.minimum_illuminance,
            "maximum_illuminance": self.maximum_illuminance,
            "uniformity": self.uniformity,
            "local_uniformity": self.local_uniformity,
            "total_power_w": self.total_power_w,
            "luminaire_count": self.luminaire_count,
            "room_area_m2": self.room_area_m2,
            "maintenance_factor": self.maintenance_factor,
            "indirect_factor": self.indirect_factor,
            "source_height_m": self.source_height_m,
            "meets_standard": self.meets_standard,
            "recommendation": self.recommendation,
            "luminaires": [u.to_dict() for u in self.luminaires],
            "flags": list(self.flags),
            "point_count": len(self.points),
        }
        if include_points:
            out["points"] = [list(p.to_tuple()) for p in self.points]
        return out


@dataclass(frozen=True)
class RoomAnalysis:
    """All work-plane heights of one room; headline values come from the first height."""
    room_id: str
    room_name: str
    room_number: Optional[str]
    activity: Optional[str]
    results: Tuple[RoomIlluminanceResult, ...]
    required_illuminance: float
    required_uniformity: Optional[float]
    meets_standard: bool
    remarks: str
    power_density_w_m2: float

    @property
    def primary(self) -> RoomIlluminanceResult:
        return self.results[0]

    @property
    def average_illuminance(self) -> float:
        return self.primary.average_illuminance

    @property
    def uniformity(self) -> float:
        return self.primary.uniformity

    def to_dict(self, include_points: bool = True) -> Dict[str, Any]:
        return {
            "room_id": self.room_id,
            "room_name": self.room_name,
            "room_number": self.room_number,
            "activity": self.activity,
            "average_illuminance": self.average_illuminance,
            "uniformity": self.uniformity,
            "required_illuminance": self.required_illuminance,
            "required_uniformity": self.required_uniformity,
            "meets_standard": self.meets_standard,
            "remarks": self.remarks,
            "power_density_w_m2": self.power_density_w_m2,
            "heights": [r.to_dict(include_points=include_points) for r in self.results],
        }


@dataclass(frozen=True)
class RoomFailure:
    room_id: str
    room_name: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"room_id": self.room_id, "room_name": self.room_name, "message": self.message}


@dataclass
class AnalysisRun:
    project_name: str
    rooms: List[RoomAnalysis] = field(default_factory=list)
    failures: List[RoomFailure] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return bool(self.failures) and not self.rooms

    def to_dict(self, include_points: bool = True) -> Dict[str, Any]:
        return {
            "project": self.project_name,
            "settings": dict(self.settings),
            "rooms": [r.to_dict(include_points=include_points) for r in self.rooms],
            "failures": [f.to_dict() for f in self.failures],
        }
