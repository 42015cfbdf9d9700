from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Literal, Optional, Tuple

from luxgrid.core.units import FEET_TO_METERS


PhotometricType = Literal[1, 2, 3]   # 1=C, 2=B, 3=A
UnitsType = Literal[1, 2]            # 1=feet, 2=meters

_SYSTEMS = {1: "C", 2: "B", 3: "A"}


@dataclass(frozen=True)
class PhotometricDataset:
    # Shape of candela_values: [H][V] where H = len(horizontal angles), V = len(vertical angles)
    vertical_angles: Tuple[float, ...]
    horizontal_angles: Tuple[float, ...]
    candela_values: Tuple[Tuple[float, ...], ...]      # multiplied by candela multiplier
    raw_candela_values: Tuple[Tuple[float, ...], ...]  # as in file

    number_of_lamps: int = 0
    lumens_per_lamp: float = 0.0
    total_lumens: float = 0.0
    input_watts: float = 0.0
    efficacy: float = 0.0                  # lm/W
    candela_multiplier: float = 1.0
    ballast_factor: float = 0.0
    ballast_lamp_factor: float = 0.0

    number_of_vertical_angles: int = 0
    number_of_horizontal_angles: int = 0
    photometric_type: int = 1
    units_type: int = 2
    width: float = 0.0
    length: float = 0.0
    height: float = 0.0

    min_candela: float = 0.0
    max_candela: float = 0.0
    average_candela: float = 0.0

    manufacturer: Optional[str] = None
    catalog_number: Optional[str] = None
    luminaire_name: Optional[str] = None
    lamp_catalog_number: Optional[str] = None
    test_laboratory: Optional[str] = None
    test_report: Optional[str] = None
    test_date: Optional[date] = None
    tilt_mode: Optional[str] = None
    keywords: Dict[str, List[str]] = field(default_factory=dict)

    file_path: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def photometric_system(self) -> str:
        return _SYSTEMS.get(int(self.photometric_type), "UNKNOWN")

    @property
    def has_candela(self) -> bool:
        return any(len(col) > 0 for col in self.candela_values)

    @property
    def _dim_scale(self) -> float:
        return FEET_TO_METERS if int(self.units_type) == 1 else 1.0

    @property
    def width_m(self) -> float:
        return float(self.width) * self._dim_scale

    @property
    def length_m(self) -> float:
        return float(self.length) * self._dim_scale

    @property
    def height_m(self) -> float:
        return float(self.height) * self._dim_scale

    def summary(self) -> str:
        return (
            f"{self.manufacturer or ''} - {self.luminaire_name or ''}\n"
            f"Flux: {self.total_lumens:.0f} lm | Power: {self.input_watts:.0f} W | "
            f"Efficacy: {self.efficacy:.1f} lm/W\n"
            f"Catalog: {self.catalog_number or ''}"
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "file_path": self.file_path,
            "manufacturer": self.manufacturer,
            "catalog_number": self.catalog_number,
            "luminaire_name": self.luminaire_name,
            "lamp_catalog_number": self.lamp_catalog_number,
            "test_laboratory": self.test_laboratory,
            "test_report": self.test_report,
            "test_date": self.test_date.isoformat() if self.test_date else None,
            "number_of_lamps": self.number_of_lamps,
            "lumens_per_lamp": self.lumens_per_lamp,
            "total_lumens": self.total_lumens,
            "input_watts": self.input_watts,
            "efficacy": self.efficacy,
            "candela_multiplier": self.candela_multiplier,
            "photometric_system": self.photometric_system,
            "units_type": self.units_type,
            "width_m": self.width_m,
            "length_m": self.length_m,
            "height_m": self.height_m,
            "number_of_vertical_angles": self.number_of_vertical_angles,
            "number_of_horizontal_angles": self.number_of_horizontal_angles,
            "min_candela": self.min_candela,
            "max_candela": self.max_candela,
            "average_candela": self.average_candela,
        }
