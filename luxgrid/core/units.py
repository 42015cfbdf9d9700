from __future__ import annotations

from typing import Dict


FEET_TO_METERS = 0.3048

_UNIT_ALIASES: Dict[str, str] = {
    "m": "m", "meter": "m", "meters": "m", "metre": "m", "metres": "m",
    "mm": "mm", "millimeter": "mm", "millimeters": "mm",
    "cm": "cm", "centimeter": "cm", "centimeters": "cm",
    "ft": "ft", "feet": "ft", "foot": "ft",
    "in": "in", "inch": "in", "inches": "in",
}

_SCALE_TO_M: Dict[str, float] = {
    "m": 1.0,
    "mm": 0.001,
    "cm": 0.01,
    "ft": FEET_TO_METERS,
    "in": 0.0254,
}


def normalize_unit(unit: str) -> str:
    """Canonical unit symbol; raises KeyError for units the host cannot use."""
    return _UNIT_ALIASES[str(unit).strip().lower()]


def unit_scale_to_m(unit: str) -> float:
    return _SCALE_TO_M[normalize_unit(unit)]
