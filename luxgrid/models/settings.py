from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Literal, Tuple


class SettingsError(ValueError):
    pass


class MaintenanceCategory(IntEnum):
    """Environment cleanliness (EN 12464-1 Annex B)."""
    VERY_CLEAN = 0   # offices, residential
    CLEAN = 1        # retail
    NORMAL = 2       # clean industry
    DIRTY = 3        # workshops, production
    VERY_DIRTY = 4   # hostile environments


class LuminaireEnclosure(IntEnum):
    """Luminaire housing by ingress protection."""
    SEALED_IP65 = 0
    ENCLOSED_IP54 = 1
    OPEN_IP20 = 2


# Rows: enclosure; columns: environment (VERY_CLEAN .. VERY_DIRTY)
MAINTENANCE_FACTOR_TABLE: Tuple[Tuple[float, ...], ...] = (
    (0.90, 0.88, 0.85, 0.80, 0.75),  # SEALED_IP65
    (0.87, 0.85, 0.82, 0.75, 0.70),  # ENCLOSED_IP54
    (0.82, 0.80, 0.77, 0.70, 0.67),  # OPEN_IP20
)

SourcePositionPolicy = Literal["top", "thickness_aware"]

# Host parameter names that may carry the photometric file path, most specific first.
DEFAULT_PHOTOMETRIC_PARAMETER_KEYS: Tuple[str, ...] = (
    "Fichier photométrique Web",
    "Fichier de distribution photométrique",
    "Light Source Definition File",
    "Photometric Web File",
    "IES File",
    "Web File",
)


def lookup_maintenance_factor(environment: MaintenanceCategory, enclosure: LuminaireEnclosure) -> float:
    return MAINTENANCE_FACTOR_TABLE[int(enclosure)][int(environment)]


@dataclass(frozen=True)
class AnalysisSettings:
    grid_spacing: float = 1.0                                  # meters
    work_plane_heights: Tuple[float, ...] = (0.0,)             # meters above room base
    use_maintenance_table: bool = True
    maintenance_factor: float = 0.9                            # legacy scalar
    environment: MaintenanceCategory = MaintenanceCategory.VERY_CLEAN
    luminaire_enclosure: LuminaireEnclosure = LuminaireEnclosure.SEALED_IP65
    include_indirect_light: bool = True
    ceiling_reflectance: float = 0.70
    wall_reflectance: float = 0.50
    floor_reflectance: float = 0.20
    use_ies_data: bool = True
    standard_name: str = "EN 12464-1"
    minimum_illuminance: float = 300.0
    minimum_uniformity: float = 0.4
    source_position_policy: SourcePositionPolicy = "top"
    ies_search_paths: Tuple[str, ...] = ()
    photometric_parameter_keys: Tuple[str, ...] = DEFAULT_PHOTOMETRIC_PARAMETER_KEYS

    def __post_init__(self) -> None:
        if not self.grid_spacing > 0.0:
            raise SettingsError(f"grid_spacing must be > 0, got {self.grid_spacing}")
        if not self.work_plane_heights:
            raise SettingsError("At least one work plane height is required")
        if not 0.0 < self.maintenance_factor <= 1.0:
            raise SettingsError(f"maintenance_factor must be in (0, 1], got {self.maintenance_factor}")
        for name in ("ceiling_reflectance", "wall_reflectance", "floor_reflectance"):
            v = getattr(self, name)
            if not 0.0 <= v <= 1.0:
                raise SettingsError(f"{name} must be in [0, 1], got {v}")
        if self.source_position_policy not in ("top", "thickness_aware"):
            raise SettingsError(f"Unknown source_position_policy: {self.source_position_policy}")
        object.__setattr__(self, "work_plane_heights", tuple(float(h) for h in self.work_plane_heights))
        object.__setattr__(self, "environment", _enum_value(MaintenanceCategory, self.environment))
        object.__setattr__(self, "luminaire_enclosure", _enum_value(LuminaireEnclosure, self.luminaire_enclosure))

    @property
    def work_plane_height(self) -> float:
        return self.work_plane_heights[0]

    def get_maintenance_factor(self) -> float:
        if self.use_maintenance_table:
            return lookup_maintenance_factor(self.environment, self.luminaire_enclosure)
        return self.maintenance_factor

    def with_overrides(self, **changes: object) -> "AnalysisSettings":
        return replace(self, **changes)  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, object]:
        return {
            "grid_spacing": self.grid_spacing,
            "work_plane_heights": list(self.work_plane_heights),
            "use_maintenance_table": self.use_maintenance_table,
            "maintenance_factor": self.maintenance_factor,
            "environment": self.environment.name,
            "luminaire_enclosure": self.luminaire_enclosure.name,
            "include_indirect_light": self.include_indirect_light,
            "ceiling_reflectance": self.ceiling_reflectance,
            "wall_reflectance": self.wall_reflectance,
            "floor_reflectance": self.floor_reflectance,
            "use_ies_data": self.use_ies_data,
            "standard_name": self.standard_name,
            "minimum_illuminance": self.minimum_illuminance,
            "minimum_uniformity": self.minimum_uniformity,
            "source_position_policy": self.source_position_policy,
            "ies_search_paths": list(self.ies_search_paths),
            "photometric_parameter_keys": list(self.photometric_parameter_keys),
        }


def settings_from_dict(data: Dict[str, object]) -> AnalysisSettings:
    kwargs: Dict[str, object] = {}
    for key in (
        "grid_spacing",
        "use_maintenance_table",
        "maintenance_factor",
        "include_indirect_light",
        "ceiling_reflectance",
        "wall_reflectance",
        "floor_reflectance",
        "use_ies_data",
        "standard_name",
        "minimum_illuminance",
        "minimum_uniformity",
        "source_position_policy",
    ):
        if key in data:
            kwargs[key] = data[key]
    heights: List[float] = []
    if "work_plane_heights" in data:
        heights = [float(h) for h in data["work_plane_heights"]]  # type: ignore[union-attr]
    elif "work_plane_height" in data:
        heights = [float(data["work_plane_height"])]  # type: ignore[arg-type]
    if heights:
        kwargs["work_plane_heights"] = tuple(heights)
    if "environment" in data:
        kwargs["environment"] = _enum_value(MaintenanceCategory, data["environment"])
    if "luminaire_enclosure" in data:
        kwargs["luminaire_enclosure"] = _enum_value(LuminaireEnclosure, data["luminaire_enclosure"])
    if "ies_search_paths" in data:
        kwargs["ies_search_paths"] = tuple(str(p) for p in data["ies_search_paths"])  # type: ignore[union-attr]
    if "photometric_parameter_keys" in data:
        kwargs["photometric_parameter_keys"] = tuple(str(p) for p in data["photometric_parameter_keys"])  # type: ignore[union-attr]
    return AnalysisSettings(**kwargs)  # type: ignore[arg-type]


def _enum_value(enum_cls, value: object):
    if isinstance(value, str):
        key = value.strip().upper().replace(" ", "_")
        try:
            return enum_cls[key]
        except KeyError as exc:
            raise SettingsError(f"Unknown {enum_cls.__name__}: {value}") from exc
    try:
        return enum_cls(int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"Unknown {enum_cls.__name__}: {value}") from exc
