from __future__ import annotations

import pytest

from luxgrid.diagnostics import CalculationCancelled, CancellationToken
from luxgrid.models.settings import AnalysisSettings
from luxgrid.project.schema import LuminaireSpec, Project, RoomSpec
from luxgrid.runner import RunnerError, run_analysis


def _room(rid: str, size: float = 4.0, count: int = 2) -> RoomSpec:
    lums = [
        LuminaireSpec(
            id=f"{rid}-L{i}",
            type_name="panel",
            position=(size * (i + 1) / (count + 1), size / 2.0, 2.8),
            total_lumens=3000.0,
            rated_power_w=30.0,
        )
        for i in range(count)
    ]
    return RoomSpec(
        id=rid,
        name=f"Room {rid}",
        footprint=[(0.0, 0.0), (size, 0.0), (size, size), (0.0, size)],
        height=3.0,
        activity="OFFICE",
        luminaires=lums,
    )


def _broken_room() -> RoomSpec:
    return RoomSpec(id="bad", name="Broken", footprint=[("a", "b"), (1.0, 0.0), (1.0, 1.0)])


def _project(rooms, **settings) -> Project:
    base = dict(grid_spacing=0.5, work_plane_heights=(0.8,))
    base.update(settings)
    return Project(name="Test", settings=AnalysisSettings(**base), rooms=list(rooms))


def test_analysis_of_single_room() -> None:
    run = run_analysis(_project([_room("r1")]))
    assert not run.failures
    (room,) = run.rooms
    assert room.room_id == "r1"
    assert room.activity == "Office"
    assert room.required_illuminance == 500.0
    assert room.average_illuminance > 0.0
    assert room.primary.luminaire_count == 2
    assert room.power_density_w_m2 == pytest.approx(60.0 / 16.0)
    assert room.meets_standard == (room.average_illuminance >= 500.0 and room.uniformity >= 0.6)


def test_every_work_plane_height_is_computed() -> None:
    run = run_analysis(_project([_room("r1")], work_plane_heights=(0.0, 0.8)))
    heights = [r.work_plane_height_m for r in run.rooms[0].results]
    assert heights == [0.0, 0.8]
    assert run.rooms[0].average_illuminance == run.rooms[0].results[0].average_illuminance


def test_failing_room_does_not_stop_the_batch() -> None:
    run = run_analysis(_project([_room("r1"), _broken_room(), _room("r3")]))
    assert [r.room_id for r in run.rooms] == ["r1", "r3"]
    assert len(run.failures) == 1
    assert run.failures[0].room_id == "bad"
    assert not run.all_failed


def test_all_rooms_failing() -> None:
    run = run_analysis(_project([_broken_room()]))
    assert run.all_failed
    assert run.to_dict()["failures"][0]["room_name"] == "Broken"


def test_parallel_run_keeps_room_order_and_matches_serial() -> None:
    rooms = [_room(f"r{i}", size=3.0 + i) for i in range(5)]
    serial = run_analysis(_project(rooms))
    parallel = run_analysis(_project(rooms), max_workers=4)
    assert [r.room_id for r in parallel.rooms] == [r.room_id for r in serial.rooms]
    for a, b in zip(serial.rooms, parallel.rooms):
        assert a.average_illuminance == pytest.approx(b.average_illuminance)
        assert a.uniformity == pytest.approx(b.uniformity)


def test_invalid_worker_count() -> None:
    with pytest.raises(RunnerError):
        run_analysis(_project([_room("r1")]), max_workers=0)


def test_cancellation_propagates() -> None:
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CalculationCancelled):
        run_analysis(_project([_room("r1"), _room("r2")]), cancel=token)


def test_run_to_dict_contains_settings_and_heights() -> None:
    d = run_analysis(_project([_room("r1")])).to_dict(include_points=False)
    assert d["project"] == "Test"
    assert d["settings"]["grid_spacing"] == 0.5
    assert "points" not in d["rooms"][0]["heights"][0]
