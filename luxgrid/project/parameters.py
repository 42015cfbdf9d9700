"""
Host parameter lookup.

Hosts expose luminaire properties as free-form named parameters whose display
names vary with locale and family author. Each property is described here by
an ordered list of candidate names; the first present, non-empty one wins.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, Sequence, Tuple


FLUX_KEYS: Tuple[str, ...] = (
    "Flux lumineux",
    "Luminous Flux",
    "Initial Luminous Flux",
    "Photométriques",
    "Luminaire Lumens",
)
POWER_KEYS: Tuple[str, ...] = (
    "Puissance",
    "Puissance apparente",
    "Wattage",
    "Load",
    "Intensité initiale",
    "Apparent Load",
)
MANUFACTURER_KEYS: Tuple[str, ...] = ("Fabricant", "Manufacturer", "Nom de la famille")
REFERENCE_KEYS: Tuple[str, ...] = ("Nom du type", "Référence", "Model", "Type Mark")
TYPE_KEYS: Tuple[str, ...] = ("Type de luminaire", "Fixture Type", "Type")

DEFAULT_FLUX_LM = 3600.0
DEFAULT_POWER_W = 40.0

_NUMERIC_CHARS_RE = re.compile(r"[^0-9.,]")


def lookup_string(parameters: Mapping[str, object], keys: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    for key in keys:
        value = parameters.get(key)
        if value is None:
            continue
        s = str(value).strip()
        if s:
            return s
    return default


def _to_number(value: object) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    s = _NUMERIC_CHARS_RE.sub("", str(value)).replace(",", ".")
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def lookup_number(parameters: Mapping[str, object], keys: Sequence[str], default: float) -> float:
    """First parameter readable as a number; text values keep only digits and separators."""
    for key in keys:
        if key not in parameters:
            continue
        v = _to_number(parameters[key])
        if v is not None:
            return v
    return default


def luminous_flux_from_parameters(parameters: Mapping[str, object]) -> float:
    flux = lookup_number(parameters, FLUX_KEYS, DEFAULT_FLUX_LM)
    # Values below 100 are given in kilolumens.
    if flux < 100:
        flux *= 1000.0
    return flux


def power_from_parameters(parameters: Mapping[str, object]) -> float:
    return lookup_number(parameters, POWER_KEYS, DEFAULT_POWER_W)


def photometric_file_from_parameters(parameters: Mapping[str, object], keys: Sequence[str]) -> Optional[str]:
    return lookup_string(parameters, keys)
