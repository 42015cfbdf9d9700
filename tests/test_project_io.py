from __future__ import annotations

import json
from pathlib import Path

import pytest

from luxgrid.models.settings import MaintenanceCategory
from luxgrid.project.io import load_project, project_from_dict, save_project
from luxgrid.project.schema import ProjectError


def _payload() -> dict:
    return {
        "name": "Office floor",
        "length_unit": "ft",
        "settings": {"grid_spacing": 0.5, "work_plane_heights": [0.8], "environment": "CLEAN"},
        "ies_search_paths": ["photometry"],
        "rooms": [
            {
                "id": "r1",
                "name": "Office",
                "number": "101",
                "footprint": [[0, 0], [20, 0], [20, 13], [0, 13]],
                "height": 9.8,
                "activity": "OFFICE",
                "luminaires": [
                    {
                        "id": "l1",
                        "type_name": "Panel 600",
                        "position": [5, 4, 0],
                        "bbox": [[4, 3, 9.6], [6, 5, 9.8]],
                        "ies_path": "panel.ies",
                        "total_lumens": 3600,
                        "rated_power_w": 36,
                    },
                    {
                        "id": "l2",
                        "position": [15, 9, 9.7],
                        "parameters": {"Luminous Flux": "3,2", "Wattage": "30 W", "Fabricant": "Acme", "Type": "Downlight"},
                    },
                ],
            }
        ],
    }


def test_project_from_dict() -> None:
    p = project_from_dict(_payload())
    assert p.name == "Office floor"
    assert p.length_unit == "ft"
    assert p.scale_to_meters == pytest.approx(0.3048)
    assert p.settings.grid_spacing == 0.5
    assert p.settings.environment is MaintenanceCategory.CLEAN
    assert p.settings.ies_search_paths == ("photometry",)
    room = p.rooms[0].to_descriptor(p.scale_to_meters)
    assert room.number == "101"
    assert room.activity == "OFFICE"
    assert room.floor_area_m2() == pytest.approx(20 * 13 * 0.3048**2)


def test_luminaire_descriptors_and_parameter_fallbacks() -> None:
    p = project_from_dict(_payload())
    l1, l2 = p.rooms[0].luminaire_descriptors()
    assert l1.bbox.max.z == 9.8
    assert l1.total_lumens == 3600.0
    assert l1.rated_power_w == 36.0
    assert l2.total_lumens == pytest.approx(3200.0)
    assert l2.rated_power_w == 30.0
    assert l2.manufacturer == "Acme"
    assert l2.type_name == "Downlight"
    assert l2.bbox is None


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    p = project_from_dict(_payload())
    out = tmp_path / "nested" / "project.json"
    save_project(p, out)
    loaded = load_project(out)
    assert loaded.root_dir == str(out.parent.resolve())
    assert loaded.settings == p.settings
    assert len(loaded.rooms[0].luminaires) == 2
    assert loaded.rooms[0].luminaires[0].bbox == p.rooms[0].luminaires[0].bbox


@pytest.mark.parametrize(
    "mutate,msg",
    [
        (lambda d: d.update(length_unit="furlong"), "length unit"),
        (lambda d: d["settings"].update(grid_spacing=-1), "settings"),
        (lambda d: d.update(rooms={"r1": {}}), "rooms"),
        (lambda d: d["rooms"][0].update(footprint=[[0, 0], [1, 1]]), "3 vertices"),
        (lambda d: d["rooms"][0]["luminaires"][0].update(position=[1, 2]), "position"),
        (lambda d: d["rooms"][0]["luminaires"][0].update(bbox=[[0, 0, 0]]), "bbox"),
    ],
)
def test_invalid_projects(mutate, msg) -> None:
    d = _payload()
    mutate(d)
    with pytest.raises(ProjectError) as ei:
        project_from_dict(d)
    assert msg in str(ei.value)


def test_invalid_json(tmp_path: Path) -> None:
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(ProjectError):
        load_project(p)


def test_example_payload_is_plain_json(tmp_path: Path) -> None:
    p = tmp_path / "p.json"
    p.write_text(json.dumps(_payload()), encoding="utf-8")
    assert load_project(p).rooms[0].name == "Office"
