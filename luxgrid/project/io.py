from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from luxgrid.core.units import normalize_unit, unit_scale_to_m
from luxgrid.models.settings import SettingsError, settings_from_dict
from luxgrid.project.schema import LuminaireSpec, Project, ProjectError, RoomSpec


def _normalize_unit(unit: Any) -> str:
    try:
        return normalize_unit(unit)
    except KeyError:
        raise ProjectError(f"Unsupported length unit: {unit}") from None


def _vec3(value: Any, what: str) -> Optional[Tuple[float, float, float]]:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ProjectError(f"{what} must be a list of 3 numbers, got {value!r}")
    try:
        return (float(value[0]), float(value[1]), float(value[2]))
    except (TypeError, ValueError) as exc:
        raise ProjectError(f"{what} must be numeric: {value!r}") from exc


def _luminaire_from_dict(d: Dict[str, Any], room_id: str, index: int) -> LuminaireSpec:
    if not isinstance(d, dict):
        raise ProjectError(f"Room {room_id}: luminaire #{index} must be an object")
    lid = str(d.get("id", f"{room_id}-L{index + 1}"))
    bbox = d.get("bbox")
    if bbox is not None:
        if not isinstance(bbox, (list, tuple)) or len(bbox) != 2:
            raise ProjectError(f"Luminaire {lid}: bbox must be [[minx,miny,minz],[maxx,maxy,maxz]]")
        bbox = (_vec3(bbox[0], f"Luminaire {lid} bbox"), _vec3(bbox[1], f"Luminaire {lid} bbox"))
    params = d.get("parameters", {})
    if not isinstance(params, dict):
        raise ProjectError(f"Luminaire {lid}: parameters must be an object")
    return LuminaireSpec(
        id=lid,
        name=str(d.get("name", "")),
        type_name=d.get("type_name"),
        position=_vec3(d.get("position"), f"Luminaire {lid} position"),
        bbox=bbox,
        ies_path=d.get("ies_path"),
        total_lumens=float(d["total_lumens"]) if d.get("total_lumens") is not None else None,
        rated_power_w=float(d["rated_power_w"]) if d.get("rated_power_w") is not None else None,
        manufacturer=d.get("manufacturer"),
        reference=d.get("reference"),
        parameters={str(k): str(v) for k, v in params.items()},
    )


def _room_from_dict(d: Dict[str, Any], index: int) -> RoomSpec:
    if not isinstance(d, dict):
        raise ProjectError(f"Room #{index} must be an object")
    rid = str(d.get("id", f"room-{index + 1}"))
    footprint: List[Tuple[float, float]] = []
    for pt in d.get("footprint", []):
        if not isinstance(pt, (list, tuple)) or len(pt) != 2:
            raise ProjectError(f"Room {rid}: footprint vertices must be [x, y] pairs")
        footprint.append((float(pt[0]), float(pt[1])))
    if footprint and len(footprint) < 3:
        raise ProjectError(f"Room {rid}: footprint needs at least 3 vertices")
    return RoomSpec(
        id=rid,
        name=str(d.get("name", rid)),
        number=str(d["number"]) if d.get("number") is not None else None,
        footprint=footprint,
        base_elevation=float(d.get("base_elevation", 0.0)),
        height=float(d["height"]) if d.get("height") is not None else None,
        area_m2=float(d["area_m2"]) if d.get("area_m2") is not None else None,
        activity=d.get("activity"),
        luminaires=[_luminaire_from_dict(l, rid, i) for i, l in enumerate(d.get("luminaires", []))],
    )


def project_from_dict(d: Dict[str, Any]) -> Project:
    if not isinstance(d, dict):
        raise ProjectError("Project file must contain a JSON object")
    unit = _normalize_unit(d.get("length_unit", "m"))
    settings_payload = dict(d.get("settings", {}))
    extra_paths = [str(p) for p in d.get("ies_search_paths", [])]
    if extra_paths:
        settings_payload["ies_search_paths"] = list(settings_payload.get("ies_search_paths", [])) + extra_paths
    try:
        settings = settings_from_dict(settings_payload)
    except (SettingsError, TypeError, ValueError) as exc:
        raise ProjectError(f"Invalid settings: {exc}") from exc
    rooms = d.get("rooms", [])
    if not isinstance(rooms, list):
        raise ProjectError("'rooms' must be a list")
    try:
        room_specs = [_room_from_dict(r, i) for i, r in enumerate(rooms)]
    except ProjectError:
        raise
    except (TypeError, ValueError) as exc:
        raise ProjectError(f"Invalid room data: {exc}") from exc
    return Project(
        name=str(d.get("name", "")),
        length_unit=unit,
        scale_to_meters=float(d.get("scale_to_meters", unit_scale_to_m(unit))),
        settings=settings,
        rooms=room_specs,
    )


def save_project(project: Project, path: Path) -> None:
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(project.to_dict(), indent=2, sort_keys=True), encoding="utf-8")


def load_project(path: Path) -> Project:
    path = path.expanduser().resolve()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ProjectError(f"{path}: invalid JSON: {exc}") from exc
    project = project_from_dict(data)
    project.root_dir = str(path.parent)
    return project
