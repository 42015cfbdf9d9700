import math

import pytest

from luxgrid.photometry.fallback import (
    DOWNLIGHT,
    GENERAL,
    INDIRECT,
    PANEL,
    PROJECTOR,
    FallbackEmission,
    classify_luminaire_type,
    estimate_intensity_from_lumens,
    peak_intensity,
)
from luxgrid.photometry.interp import resolve_intensity


def _peak(lumens, beam_deg, factor):
    half = math.radians(beam_deg / 2.0)
    return lumens / (2.0 * math.pi * (1.0 - math.cos(half))) * factor


def test_downlight_peak_at_nadir():
    cd = resolve_intensity(None, 0.0, fallback=FallbackEmission(2000.0, "Downlight 20W"))
    expected = (2000.0 / (2.0 * math.pi * (1.0 - math.cos(math.radians(30.0))))) * 1.8
    assert cd == pytest.approx(expected, rel=1e-6)


@pytest.mark.parametrize(
    "type_name,profile",
    [
        ("Downlight 20W", DOWNLIGHT),
        ("LED Spot GU10", DOWNLIGHT),
        ("Luminaire encastré", DOWNLIGHT),
        ("Recessed troffer", DOWNLIGHT),
        ("Suspended linear", INDIRECT),
        ("Suspendu direct/indirect", INDIRECT),
        ("Uplighter floor", INDIRECT),
        ("Projecteur LED 50W", PROJECTOR),
        ("Floodlight", PROJECTOR),
        ("Panel 600x600", PANEL),
        ("Plafonnier rond", PANEL),
        ("Ceiling mounted", PANEL),
        ("Linear batten", GENERAL),
        (None, GENERAL),
        ("", GENERAL),
    ],
)
def test_type_classification(type_name, profile):
    assert classify_luminaire_type(type_name) == profile


def test_classification_is_case_insensitive():
    assert classify_luminaire_type("DOWNLIGHT") == DOWNLIGHT
    assert classify_luminaire_type("pAnEl") == PANEL


def test_cosine_inside_beam():
    peak = _peak(3000.0, 90.0, 1.0)
    cd = estimate_intensity_from_lumens(3000.0, 40.0, "batten")
    assert cd == pytest.approx(peak * math.cos(math.radians(40.0)))


def test_gaussian_falloff_beyond_beam_angle():
    peak = _peak(1000.0, 45.0, 2.2)
    gamma = 60.0
    expected = peak * math.cos(math.radians(gamma)) * math.exp(-(((gamma - 45.0) / 30.0) ** 2))
    assert estimate_intensity_from_lumens(1000.0, gamma, "floodlight") == pytest.approx(expected)


def test_never_negative_above_horizontal():
    for gamma in (91.0, 120.0, 180.0):
        assert estimate_intensity_from_lumens(5000.0, gamma, "indirect") == 0.0


def test_zero_or_negative_lumens():
    assert peak_intensity(0.0, GENERAL) == 0.0
    assert estimate_intensity_from_lumens(-100.0, 0.0) == 0.0


def test_profile_half_beam_angle():
    assert DOWNLIGHT.half_beam_angle_deg == 30.0
    assert PANEL.half_beam_angle_deg == 55.0
