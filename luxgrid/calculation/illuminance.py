"""
Point-by-point illuminance on a horizontal work plane.

For every grid point inside the room footprint the direct contribution of
each luminaire is summed with the inverse-square cosine law

    E = I(γ) × cos³(γ) / d²

where γ is the angle from nadir and d the source-to-point distance in meters.
All luminaires aim straight down. The direct sum is multiplied by the
maintenance factor and an inter-reflected addend is added on top.

Room and luminaire coordinates stay in host units; only distances and the
reported heights are converted to meters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from luxgrid.calculation.indirect import indirect_factor
from luxgrid.compliance.standards import ActivityRequirement, evaluate_compliance
from luxgrid.diagnostics import CancellationToken, TraceRecord, TraceSink
from luxgrid.geometry.core import Point3D
from luxgrid.metrics.core import summarize_grid
from luxgrid.models.scene import LuminaireDescriptor, RoomDescriptor
from luxgrid.models.settings import AnalysisSettings, SourcePositionPolicy
from luxgrid.photometry.interp import IntensityFunction
from luxgrid.photometry.resolution import LuminairePhotometry, PhotometryResolver
from luxgrid.results.types import GridPoint, LuminaireUsage, RoomIlluminanceResult


MIN_DISTANCE_M = 0.03
THICK_LUMINAIRE_M = 0.3
# Used when no grid point falls inside the room.
FLUX_ESTIMATE_UTILIZATION = 0.7
FLUX_ESTIMATE_UNIFORMITY = 0.7

FLAG_NO_LUMINAIRES = "no_luminaires"
FLAG_NO_GRID_POINTS = "no_grid_points"
FLAG_FLUX_ESTIMATE = "flux_estimate"
FLAG_SKIPPED_LUMINAIRE = "skipped_luminaire"


@dataclass(frozen=True)
class SourcePosition:
    point: Point3D
    from_bbox: bool


def effective_source_position(
    luminaire: LuminaireDescriptor,
    policy: SourcePositionPolicy = "top",
    scale_to_meters: float = 1.0,
) -> Optional[SourcePosition]:
    """
    Where the light leaves the luminaire, in host units.

    Insertion points of many families sit at floor level, so the top face of
    the bounding box (max Z) gives the emitting height at the placement X/Y.
    With the ``thickness_aware`` policy a luminaire thicker than 0.3 m emits
    from its bounding-box centre height instead.
    """
    pos = luminaire.position
    bb = luminaire.bbox
    if bb is None:
        if pos is None:
            return None
        return SourcePosition(pos, False)
    if pos is None:
        c = bb.center
        pos = Point3D(c.x, c.y, bb.max.z)
    z = bb.max.z
    if policy == "thickness_aware" and bb.size_z * scale_to_meters > THICK_LUMINAIRE_M:
        z = bb.center.z
    return SourcePosition(pos.with_z(z), True)


def grid_axis(lo: float, hi: float, step: float) -> List[float]:
    """lo, lo + step, ... up to hi inclusive; computed by index to avoid drift."""
    if hi < lo or not step > 0:
        return []
    n = int(math.floor((hi - lo) / step + 1e-9)) + 1
    return [lo + i * step for i in range(n)]


def direct_contribution(
    source: Point3D,
    point: Point3D,
    scale_to_meters: float,
    intensity_at,
) -> Tuple[float, float, Optional[float], float]:
    """
    Direct lux from one nadir-aimed source at one point.

    Returns (lux, distance_m, gamma_deg, intensity_cd); gamma is None when the
    point is not below the source.
    """
    v = (point - source) * scale_to_meters
    raw = v.length()
    distance = max(raw, MIN_DISTANCE_M)
    if raw <= 1e-12:
        return 0.0, distance, None, 0.0
    cos_gamma = -v.z / raw
    if cos_gamma <= 0.0:
        return 0.0, distance, None, 0.0
    gamma = math.degrees(math.acos(min(1.0, cos_gamma)))
    intensity = intensity_at(gamma)
    return intensity * cos_gamma ** 3 / (distance * distance), distance, gamma, intensity


def custom_requirement(settings: AnalysisSettings) -> ActivityRequirement:
    return ActivityRequirement("CUSTOM", "Custom", settings.minimum_illuminance, settings.minimum_uniformity)


def _luminaire_power(luminaire: LuminaireDescriptor, photometry: LuminairePhotometry) -> float:
    ds = photometry.dataset
    if ds is not None and ds.input_watts > 0:
        return ds.input_watts
    return max(0.0, luminaire.rated_power_w)


def _luminaire_lumens(luminaire: LuminaireDescriptor, photometry: LuminairePhotometry) -> float:
    ds = photometry.dataset
    if ds is not None and ds.total_lumens > 0:
        return ds.total_lumens
    return max(0.0, luminaire.total_lumens)


def compute_room_illuminance(
    room: RoomDescriptor,
    luminaires: Sequence[LuminaireDescriptor],
    settings: AnalysisSettings,
    work_plane_height_m: float,
    *,
    resolver: Optional[PhotometryResolver] = None,
    trace: Optional[TraceSink] = None,
    cancel: Optional[CancellationToken] = None,
) -> RoomIlluminanceResult:
    scale = room.scale_to_meters if room.scale_to_meters > 0 else 1.0
    mf = settings.get_maintenance_factor()
    ind = indirect_factor(room, settings)
    area = room.floor_area_m2()
    spacing = settings.grid_spacing

    if not luminaires:
        comp = evaluate_compliance(0.0, 0.0, 0, room.activity, custom_requirement(settings))
        return RoomIlluminanceResult(
            room_id=room.id,
            room_name=room.name,
            work_plane_height_m=work_plane_height_m,
            grid_spacing_m=spacing,
            points=(),
            average_illuminance=0.0,
            minimum_illuminance=0.0,
            maximum_illuminance=0.0,
            uniformity=0.0,
            local_uniformity=0.0,
            total_power_w=0.0,
            luminaire_count=0,
            room_area_m2=area,
            maintenance_factor=mf,
            indirect_factor=ind,
            meets_standard=False,
            recommendation=comp.recommendation,
            flags=(FLAG_NO_LUMINAIRES,),
        )

    if resolver is None:
        resolver = PhotometryResolver.from_settings(settings)

    flags: List[str] = []
    usages: List[LuminaireUsage] = []
    active: List[Tuple[LuminaireDescriptor, SourcePosition, LuminairePhotometry, IntensityFunction]] = []
    total_power = 0.0
    total_lumens = 0.0
    for lum in luminaires:
        photometry = resolver.photometry_for(lum)
        power = _luminaire_power(lum, photometry)
        total_power += power
        total_lumens += _luminaire_lumens(lum, photometry)
        src = effective_source_position(lum, settings.source_position_policy, scale)
        if src is None:
            flags.append(f"{FLAG_SKIPPED_LUMINAIRE}:{lum.id}")
        else:
            active.append((lum, src, photometry, resolver.intensity_for(lum)))
        usages.append(
            LuminaireUsage(
                id=lum.id,
                type_name=lum.type_name,
                photometry=photometry.source,
                photometry_path=photometry.path,
                power_w=power,
                source_height_m=(src.point.z - room.base_elevation) * scale if src is not None else None,
                skipped=src is None,
            )
        )

    source_height = None
    if active:
        source_height = sum((s.point.z - room.base_elevation) * scale for _, s, _, _ in active) / len(active)

    step = spacing / scale
    z = room.base_elevation + work_plane_height_m / scale
    bb = room.bounding_box()
    points: List[GridPoint] = []
    traced = trace is None
    if bb is not None:
        xs = grid_axis(bb.min.x, bb.max.x, step)
        for y in grid_axis(bb.min.y, bb.max.y, step):
            if cancel is not None:
                cancel.raise_if_cancelled()
            for x in xs:
                p = Point3D(x, y, z)
                if not room.contains(p):
                    continue
                direct = 0.0
                for lum, src, photometry, intensity_at in active:
                    lux, dist, gamma, cd = direct_contribution(src.point, p, scale, intensity_at)
                    direct += lux
                    if not traced:
                        traced = True
                        trace(
                            TraceRecord(
                                room_id=room.id,
                                work_plane_height_m=work_plane_height_m,
                                luminaire_id=lum.id,
                                source_position=src.point.to_tuple(),
                                placement_position=lum.position.to_tuple() if lum.position is not None else None,
                                source_from_bbox=src.from_bbox,
                                point=p.to_tuple(),
                                distance_m=dist,
                                gamma_deg=gamma,
                                intensity_cd=cd,
                                photometry=photometry.source,
                                direct_lux=lux,
                                maintenance_factor=mf,
                                indirect_factor=ind,
                            )
                        )
                maintained = direct * mf
                total = maintained + maintained * ind
                if not math.isfinite(total):
                    total = 0.0
                points.append(GridPoint(x, y, z, max(0.0, total)))

    if points:
        summary = summarize_grid(points, step)
        avg = summary.average
        e_min = summary.minimum
        e_max = summary.maximum
        u0 = summary.uniformity
        uh = summary.local_uniformity
    elif area > 0 and total_lumens > 0:
        avg = total_lumens * FLUX_ESTIMATE_UTILIZATION / area
        e_min = avg * FLUX_ESTIMATE_UNIFORMITY
        e_max = avg
        u0 = uh = FLUX_ESTIMATE_UNIFORMITY
        flags.append(FLAG_FLUX_ESTIMATE)
    else:
        avg = e_min = e_max = u0 = uh = 0.0
        flags.append(FLAG_NO_GRID_POINTS)

    comp = evaluate_compliance(avg, u0, len(luminaires), room.activity, custom_requirement(settings))
    return RoomIlluminanceResult(
        room_id=room.id,
        room_name=room.name,
        work_plane_height_m=work_plane_height_m,
        grid_spacing_m=spacing,
        points=tuple(points),
        average_illuminance=avg,
        minimum_illuminance=e_min,
        maximum_illuminance=e_max,
        uniformity=u0,
        local_uniformity=uh,
        total_power_w=total_power,
        luminaire_count=len(luminaires),
        room_area_m2=area,
        maintenance_factor=mf,
        indirect_factor=ind,
        source_height_m=source_height,
        meets_standard=comp.meets,
        recommendation=comp.recommendation,
        luminaires=tuple(usages),
        flags=tuple(flags),
    )
