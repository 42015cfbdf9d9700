from __future__ import annotations

from typing import Any

__all__ = [
    "EmissionProfile",
    "FallbackEmission",
    "classify_luminaire_type",
    "estimate_intensity_from_lumens",
    "emission_intensity",
    "interpolate_candela",
    "intensity_function",
    "resolve_intensity",
    "PhotometryResolver",
    "LuminairePhotometry",
    "Resolution",
    "resolution_order",
]


def __getattr__(name: str) -> Any:
    if name in {"EmissionProfile", "FallbackEmission", "classify_luminaire_type", "emission_intensity", "estimate_intensity_from_lumens"}:
        from luxgrid.photometry import fallback

        return getattr(fallback, name)
    if name in {"interpolate_candela", "intensity_function", "resolve_intensity"}:
        from luxgrid.photometry import interp

        return getattr(interp, name)
    if name in {"PhotometryResolver", "LuminairePhotometry", "Resolution", "resolution_order"}:
        from luxgrid.photometry import resolution

        return getattr(resolution, name)
    raise AttributeError(name)
