"""
Analytic emission model for luminaires without a photometric file.

The distribution is a cosine-weighted cone whose beam angle and peak factor
depend on a coarse luminaire class guessed from the type name. Outside the
beam the intensity decays with a Gaussian of 30° width.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class EmissionProfile:
    name: str
    beam_angle_deg: float
    peak_factor: float

    @property
    def half_beam_angle_deg(self) -> float:
        return 0.5 * self.beam_angle_deg

    @property
    def solid_angle_sr(self) -> float:
        return 2.0 * math.pi * (1.0 - math.cos(math.radians(self.half_beam_angle_deg)))


GENERAL = EmissionProfile("general", 90.0, 1.0)
DOWNLIGHT = EmissionProfile("downlight", 60.0, 1.8)
INDIRECT = EmissionProfile("indirect", 120.0, 0.7)
PROJECTOR = EmissionProfile("projector", 45.0, 2.2)
PANEL = EmissionProfile("panel", 110.0, 1.1)

# Checked in order; the first class with a matching keyword wins.
TYPE_KEYWORDS: Sequence[Tuple[EmissionProfile, Tuple[str, ...]]] = (
    (DOWNLIGHT, ("downlight", "spot", "encastr", "recessed")),
    (INDIRECT, ("indirect", "uplighter", "suspendu", "suspended")),
    (PROJECTOR, ("projecteur", "floodlight", "projector")),
    (PANEL, ("panel", "panneau", "plafonnier", "ceiling")),
)

FALLOFF_WIDTH_DEG = 30.0


@dataclass(frozen=True)
class FallbackEmission:
    """Total flux and free-text type name of a luminaire without photometry."""
    total_lumens: float
    type_name: Optional[str] = None

    @property
    def profile(self) -> EmissionProfile:
        return classify_luminaire_type(self.type_name)


def classify_luminaire_type(type_name: Optional[str]) -> EmissionProfile:
    name = (type_name or "").lower()
    for profile, keywords in TYPE_KEYWORDS:
        if any(k in name for k in keywords):
            return profile
    return GENERAL


def peak_intensity(total_lumens: float, profile: EmissionProfile) -> float:
    omega = profile.solid_angle_sr
    if omega <= 0.0 or total_lumens <= 0.0:
        return 0.0
    return (float(total_lumens) / omega) * profile.peak_factor


def emission_intensity(peak_cd: float, profile: EmissionProfile, vertical_angle_deg: float) -> float:
    gamma = float(vertical_angle_deg)
    if not math.isfinite(gamma):
        return 0.0
    cd = peak_cd * math.cos(math.radians(gamma))
    if gamma > profile.beam_angle_deg:
        cd *= math.exp(-(((gamma - profile.beam_angle_deg) / FALLOFF_WIDTH_DEG) ** 2))
    return max(0.0, cd)


def estimate_intensity_from_lumens(
    total_lumens: float,
    vertical_angle_deg: float,
    type_name: Optional[str] = None,
) -> float:
    """Candela at `vertical_angle_deg` from nadir; never negative."""
    profile = classify_luminaire_type(type_name)
    return emission_intensity(peak_intensity(total_lumens, profile), profile, vertical_angle_deg)
