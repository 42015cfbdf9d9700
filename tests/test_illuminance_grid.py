import math

import pytest

from luxgrid.calculation.illuminance import (
    compute_room_illuminance,
    direct_contribution,
    effective_source_position,
    grid_axis,
)
from luxgrid.calculation.indirect import indirect_factor
from luxgrid.diagnostics import CalculationCancelled, CancellationToken, CollectingTrace
from luxgrid.geometry.core import BoundingBox3D, Point3D
from luxgrid.models.scene import LuminaireDescriptor, RoomDescriptor
from luxgrid.models.settings import AnalysisSettings
from luxgrid.photometry.resolution import ExplicitPathStrategy, PhotometryResolver


UNIFORM_IES = """IESNA:LM-63-2002
TILT=NONE
1 1000 1 2 1 1 2 0.5 0.5 0.1
0 90
0
1000 1000
"""

PLAIN = AnalysisSettings(use_maintenance_table=False, maintenance_factor=1.0, include_indirect_light=False)


def _square_room(size=4.0, **kw):
    return RoomDescriptor(
        id="r1",
        name="Room",
        footprint=((0.0, 0.0), (size, 0.0), (size, size), (0.0, size)),
        height=3.0,
        **kw,
    )


def _uniform_resolver(tmp_path):
    (tmp_path / "uniform.ies").write_text(UNIFORM_IES, encoding="utf-8")
    return PhotometryResolver([ExplicitPathStrategy(tmp_path)])


def test_single_luminaire_directly_above_point(tmp_path):
    room = _square_room(size=1.0)
    lum = LuminaireDescriptor(id="L1", type_name="Uniform", position=Point3D(0.0, 0.0, 3.0), ies_path="uniform.ies")
    res = compute_room_illuminance(room, [lum], PLAIN, 0.8, resolver=_uniform_resolver(tmp_path))
    first = res.points[0]
    assert (first.x, first.y, first.z) == (0.0, 0.0, 0.8)
    assert first.illuminance == pytest.approx(1000.0 / 2.2**2, rel=1e-9)
    assert first.illuminance == pytest.approx(206.6, abs=0.05)
    assert res.luminaires[0].photometry == "ies"


def test_direct_contribution_inverse_square_cosine_cubed():
    src = Point3D(0.0, 0.0, 3.0)
    lux, dist, gamma, cd = direct_contribution(src, Point3D(2.2, 0.0, 0.8), 1.0, lambda g: 1000.0)
    d = math.hypot(2.2, 2.2)
    cos_g = 2.2 / d
    assert dist == pytest.approx(d)
    assert gamma == pytest.approx(45.0)
    assert cd == 1000.0
    assert lux == pytest.approx(1000.0 * cos_g**3 / d**2)


def test_points_above_source_get_nothing():
    lux, _, gamma, _ = direct_contribution(Point3D(0, 0, 1.0), Point3D(0, 0, 2.0), 1.0, lambda g: 1000.0)
    assert lux == 0.0
    assert gamma is None


def test_minimum_distance_clamp():
    lux, dist, _, _ = direct_contribution(Point3D(0, 0, 0.01), Point3D(0, 0, 0.0), 1.0, lambda g: 9.0)
    assert dist == pytest.approx(0.03)
    assert lux == pytest.approx(9.0 / 0.03**2)


def test_zero_luminaires():
    res = compute_room_illuminance(_square_room(), [], AnalysisSettings(), 0.8)
    assert res.luminaire_count == 0
    assert res.average_illuminance == 0.0
    assert res.uniformity == 0.0
    assert res.points == ()
    assert res.meets_standard is False
    assert "luminaire" in res.recommendation.lower()
    assert "no_luminaires" in res.flags


def test_l_shaped_room_is_clipped():
    room = RoomDescriptor(
        id="L",
        name="L-shape",
        footprint=((0, 0), (4, 0), (4, 2), (2, 2), (2, 4), (0, 4)),
        height=3.0,
    )
    lum = LuminaireDescriptor(id="L1", type_name="panel", position=Point3D(1.0, 1.0, 3.0), total_lumens=3000.0)
    res = compute_room_illuminance(room, [lum], PLAIN, 0.8)
    coords = {(p.x, p.y) for p in res.points}
    assert len(res.points) == 21
    assert (3.0, 3.0) not in coords
    assert (2.0, 3.0) in coords
    assert (4.0, 2.0) in coords


def test_feet_geometry_matches_meter_geometry():
    ft = 0.3048
    lum_m = LuminaireDescriptor(id="L1", type_name="panel", position=Point3D(2.0, 2.0, 2.8), total_lumens=3000.0)
    res_m = compute_room_illuminance(_square_room(4.0), [lum_m], AnalysisSettings(), 0.8)

    s = 4.0 / ft
    room_ft = RoomDescriptor(
        id="r1",
        name="Room",
        footprint=((0.0, 0.0), (s, 0.0), (s, s), (0.0, s)),
        height=3.0 / ft,
        scale_to_meters=ft,
    )
    lum_ft = LuminaireDescriptor(id="L1", type_name="panel", position=Point3D(2.0 / ft, 2.0 / ft, 2.8 / ft), total_lumens=3000.0)
    res_ft = compute_room_illuminance(room_ft, [lum_ft], AnalysisSettings(), 0.8)

    assert len(res_ft.points) == len(res_m.points) == 25
    assert res_ft.average_illuminance == pytest.approx(res_m.average_illuminance, rel=1e-9)
    assert res_ft.uniformity == pytest.approx(res_m.uniformity, rel=1e-9)
    assert res_ft.room_area_m2 == pytest.approx(16.0)
    assert res_ft.source_height_m == pytest.approx(2.8)


def test_maintenance_and_indirect_are_applied():
    room = _square_room(4.0)
    lum = LuminaireDescriptor(id="L1", type_name="panel", position=Point3D(2.0, 2.0, 2.8), total_lumens=3000.0)
    plain = compute_room_illuminance(room, [lum], PLAIN, 0.8)
    settings = AnalysisSettings()
    full = compute_room_illuminance(room, [lum], settings, 0.8)
    ind = indirect_factor(room, settings)
    assert ind > 0.0
    assert full.maintenance_factor == pytest.approx(0.90)
    for a, b in zip(plain.points, full.points):
        assert b.illuminance == pytest.approx(a.illuminance * 0.9 * (1.0 + ind))


def test_uniformity_bounds():
    room = _square_room(6.0)
    lums = [
        LuminaireDescriptor(id=f"L{i}", type_name="downlight", position=Point3D(x, y, 2.8), total_lumens=2000.0)
        for i, (x, y) in enumerate(((1.5, 1.5), (4.5, 4.5)))
    ]
    res = compute_room_illuminance(room, lums, AnalysisSettings(grid_spacing=0.5), 0.8)
    assert 0.0 <= res.uniformity <= 1.0
    assert 0.0 <= res.local_uniformity <= 1.0
    assert res.minimum_illuminance <= res.average_illuminance <= res.maximum_illuminance
    assert all(math.isfinite(p.illuminance) and p.illuminance >= 0 for p in res.points)


def test_source_position_uses_bbox_top():
    lum = LuminaireDescriptor(
        id="L1",
        position=Point3D(1.0, 1.0, 0.0),
        bbox=BoundingBox3D(Point3D(0.7, 0.7, 2.9), Point3D(1.3, 1.3, 3.0)),
    )
    src = effective_source_position(lum)
    assert src.point == Point3D(1.0, 1.0, 3.0)
    assert src.from_bbox


def test_thickness_aware_policy_uses_bbox_centre_for_thick_luminaires():
    lum = LuminaireDescriptor(
        id="L1",
        position=Point3D(1.0, 1.0, 0.0),
        bbox=BoundingBox3D(Point3D(0.5, 0.5, 2.0), Point3D(1.5, 1.5, 3.0)),
    )
    assert effective_source_position(lum, "top").point.z == 3.0
    assert effective_source_position(lum, "thickness_aware").point.z == pytest.approx(2.5)


def test_source_position_without_placement_uses_bbox_centre():
    lum = LuminaireDescriptor(id="L1", bbox=BoundingBox3D(Point3D(0.0, 0.0, 2.5), Point3D(2.0, 1.0, 2.6)))
    assert effective_source_position(lum).point == Point3D(1.0, 0.5, 2.6)


def test_luminaire_without_position_is_skipped():
    lums = [
        LuminaireDescriptor(id="L1", type_name="panel", position=Point3D(2.0, 2.0, 2.8), total_lumens=3000.0),
        LuminaireDescriptor(id="ghost", type_name="panel", total_lumens=3000.0),
    ]
    res = compute_room_illuminance(_square_room(), lums, PLAIN, 0.8)
    assert "skipped_luminaire:ghost" in res.flags
    assert res.luminaires[1].skipped
    assert res.luminaire_count == 2
    assert res.average_illuminance > 0


def test_no_grid_points_uses_flux_estimate():
    room = RoomDescriptor(
        id="r1",
        name="Room",
        footprint=((0.0, 0.0), (4.0, 0.0), (4.0, 5.0), (0.0, 5.0)),
        area_m2=20.0,
        point_test=lambda p: False,
    )
    lum = LuminaireDescriptor(id="L1", position=Point3D(1.0, 1.0, 2.8), total_lumens=2000.0)
    res = compute_room_illuminance(room, [lum], PLAIN, 0.8)
    assert res.points == ()
    assert res.average_illuminance == pytest.approx(2000.0 * 0.7 / 20.0)
    assert res.uniformity == pytest.approx(0.7)
    assert res.local_uniformity == pytest.approx(0.7)
    assert "flux_estimate" in res.flags


def test_no_geometry_gives_zeros():
    room = RoomDescriptor(id="r1", name="Nowhere")
    lum = LuminaireDescriptor(id="L1", position=Point3D(1.0, 1.0, 2.8), total_lumens=2000.0)
    res = compute_room_illuminance(room, [lum], PLAIN, 0.8)
    assert res.average_illuminance == 0.0
    assert res.uniformity == 0.0
    assert "no_grid_points" in res.flags


def test_trace_called_once_with_first_point_and_luminaire():
    lums = [
        LuminaireDescriptor(id="A", type_name="panel", position=Point3D(1.0, 1.0, 2.8), total_lumens=3000.0),
        LuminaireDescriptor(id="B", type_name="panel", position=Point3D(3.0, 3.0, 2.8), total_lumens=3000.0),
    ]
    trace = CollectingTrace()
    compute_room_illuminance(_square_room(), lums, AnalysisSettings(), 0.8, trace=trace)
    assert len(trace.records) == 1
    rec = trace.records[0]
    assert rec.luminaire_id == "A"
    assert rec.point == (0.0, 0.0, 0.8)
    assert rec.photometry == "fallback"
    assert rec.distance_m == pytest.approx(math.sqrt(1.0 + 1.0 + 2.0**2))


def test_cancellation_stops_the_grid():
    token = CancellationToken()
    token.cancel()
    lum = LuminaireDescriptor(id="A", type_name="panel", position=Point3D(1.0, 1.0, 2.8), total_lumens=3000.0)
    with pytest.raises(CalculationCancelled):
        compute_room_illuminance(_square_room(), [lum], AnalysisSettings(), 0.8, cancel=token)


def test_grid_axis_is_index_based():
    xs = grid_axis(0.0, 1.0, 0.1)
    assert len(xs) == 11
    assert xs[-1] == pytest.approx(1.0)
    assert grid_axis(0.0, 1.0, 0.3) == pytest.approx([0.0, 0.3, 0.6, 0.9])
    assert grid_axis(1.0, 0.0, 0.5) == []


def test_luminaire_type_is_classified_once_per_luminaire(monkeypatch):
    import luxgrid.photometry.fallback as fallback

    calls = []
    original = fallback.classify_luminaire_type

    def counting(type_name):
        calls.append(type_name)
        return original(type_name)

    monkeypatch.setattr(fallback, "classify_luminaire_type", counting)
    lums = [
        LuminaireDescriptor(id="A", type_name="panel", position=Point3D(1.0, 1.0, 2.8), total_lumens=3000.0),
        LuminaireDescriptor(id="B", type_name="downlight", position=Point3D(3.0, 3.0, 2.8), total_lumens=3000.0),
    ]
    res = compute_room_illuminance(_square_room(), lums, PLAIN, 0.8)
    assert len(res.points) == 25
    assert sorted(calls) == ["downlight", "panel"]


def test_bound_intensity_matches_resolver_lookup(tmp_path):
    resolver = _uniform_resolver(tmp_path)
    lum = LuminaireDescriptor(id="L1", type_name="Uniform", position=Point3D(0.0, 0.0, 3.0), ies_path="uniform.ies")
    at = resolver.intensity_for(lum)
    assert at(0.0) == resolver.intensity(lum, 0.0) == 1000.0
    assert at(float("nan")) == 0.0
