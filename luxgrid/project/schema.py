from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple

from luxgrid.geometry.core import BoundingBox3D, Point3D
from luxgrid.models.scene import LuminaireDescriptor, RoomDescriptor
from luxgrid.models.settings import AnalysisSettings
from luxgrid.project.parameters import (
    MANUFACTURER_KEYS,
    REFERENCE_KEYS,
    TYPE_KEYS,
    lookup_string,
    luminous_flux_from_parameters,
    power_from_parameters,
)


class ProjectError(ValueError):
    pass


@dataclass
class LuminaireSpec:
    id: str
    name: str = ""
    type_name: Optional[str] = None
    position: Optional[Tuple[float, float, float]] = None
    bbox: Optional[Tuple[Tuple[float, float, float], Tuple[float, float, float]]] = None
    ies_path: Optional[str] = None
    total_lumens: Optional[float] = None
    rated_power_w: Optional[float] = None
    manufacturer: Optional[str] = None
    reference: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)

    def to_descriptor(self) -> LuminaireDescriptor:
        params = dict(self.parameters)
        lumens = self.total_lumens if self.total_lumens is not None else luminous_flux_from_parameters(params)
        power = self.rated_power_w if self.rated_power_w is not None else power_from_parameters(params)
        bbox = None
        if self.bbox is not None:
            bbox = BoundingBox3D(Point3D.from_sequence(self.bbox[0]), Point3D.from_sequence(self.bbox[1]))
        return LuminaireDescriptor(
            id=self.id,
            name=self.name,
            type_name=self.type_name or lookup_string(params, TYPE_KEYS),
            position=Point3D.from_sequence(self.position) if self.position is not None else None,
            bbox=bbox,
            ies_path=self.ies_path,
            total_lumens=float(lumens),
            rated_power_w=float(power),
            manufacturer=self.manufacturer or lookup_string(params, MANUFACTURER_KEYS),
            reference=self.reference or lookup_string(params, REFERENCE_KEYS),
            parameters=params,
        )


@dataclass
class RoomSpec:
    id: str
    name: str = ""
    number: Optional[str] = None
    footprint: List[Tuple[float, float]] = field(default_factory=list)
    base_elevation: float = 0.0
    height: Optional[float] = None
    area_m2: Optional[float] = None
    activity: Optional[str] = None
    luminaires: List[LuminaireSpec] = field(default_factory=list)

    def to_descriptor(self, scale_to_meters: float = 1.0) -> RoomDescriptor:
        return RoomDescriptor(
            id=self.id,
            name=self.name or self.id,
            footprint=tuple((float(x), float(y)) for x, y in self.footprint),
            base_elevation=float(self.base_elevation),
            height=float(self.height) if self.height is not None else None,
            number=self.number,
            scale_to_meters=scale_to_meters,
            area_m2=self.area_m2,
            activity=self.activity,
        )

    def luminaire_descriptors(self) -> List[LuminaireDescriptor]:
        return [l.to_descriptor() for l in self.luminaires]


@dataclass
class Project:
    name: str = ""
    length_unit: str = "m"
    scale_to_meters: float = 1.0
    settings: AnalysisSettings = field(default_factory=AnalysisSettings)
    rooms: List[RoomSpec] = field(default_factory=list)
    root_dir: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "length_unit": self.length_unit,
            "scale_to_meters": self.scale_to_meters,
            "settings": self.settings.to_dict(),
            "rooms": [asdict(r) for r in self.rooms],
        }
