from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from luxgrid.diagnostics import CollectingTrace, logging_trace
from luxgrid.parser.ies_parser import FormatError, NotFoundError, parse_ies_file
from luxgrid.project.io import load_project
from luxgrid.project.schema import ProjectError
from luxgrid.results.writers import write_results_json
from luxgrid.runner import RunnerError, run_analysis


_DEMO_IES_TEXT = """IESNA:LM-63-2002
[MANUFAC] Luxgrid Demo
[LUMCAT] DEMO-600
[LUMINAIRE] Recessed panel 600x600
TILT=NONE
1 3600 1 5 1 1 2 0.6 0.6 0.05
1.0 1.0 36
0 22.5 45 67.5 90
0
1150 1060 810 420 0
"""


def _demo_project(ies_name: str) -> dict:
    luminaires = []
    for i, (x, y) in enumerate(((1.5, 1.0), (4.5, 1.0), (1.5, 3.0), (4.5, 3.0))):
        luminaires.append(
            {
                "id": f"L{i + 1}",
                "type_name": "Recessed panel 600",
                "position": [x, y, 0.0],
                "bbox": [[x - 0.3, y - 0.3, 2.95], [x + 0.3, y + 0.3, 3.0]],
                "ies_path": ies_name,
                "total_lumens": 3600,
                "rated_power_w": 36,
            }
        )
    return {
        "name": "Demo office",
        "length_unit": "m",
        "settings": {"grid_spacing": 0.5, "work_plane_heights": [0.8]},
        "rooms": [
            {
                "id": "R101",
                "name": "Office",
                "number": "101",
                "footprint": [[0, 0], [6, 0], [6, 4], [0, 4]],
                "base_elevation": 0.0,
                "height": 3.0,
                "activity": "OFFICE",
                "luminaires": luminaires,
            }
        ],
    }


def _cmd_demo(args: argparse.Namespace) -> int:
    outpath = Path(args.out).expanduser().resolve()
    outpath.parent.mkdir(parents=True, exist_ok=True)
    outpath.write_text(_DEMO_IES_TEXT, encoding="utf-8")
    project_path = outpath.with_name(f"{outpath.stem}_project.json")
    project_path.write_text(json.dumps(_demo_project(outpath.name), indent=2), encoding="utf-8")
    print(f"Saved demo IES to: {outpath}")
    print(f"Saved demo project to: {project_path}")
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    ies_path = Path(args.file).expanduser().resolve()
    try:
        ds = parse_ies_file(ies_path)
    except NotFoundError as e:
        print(f"[ERROR] {e}")
        return 2
    except FormatError as e:
        print(f"[ERROR] {e}")
        return 3

    if args.json:
        print(json.dumps(ds.to_dict(), indent=2, sort_keys=True, default=str))
        return 0

    print("Luxgrid IES")
    print(f"  File: {ies_path}")
    for line in ds.summary().splitlines():
        print(f"  {line}")
    print(
        f"  Angles: {ds.number_of_vertical_angles} vertical x {ds.number_of_horizontal_angles} horizontal "
        f"({ds.photometric_system})"
    )
    print(f"  Peak candela: {ds.max_candela:g}")
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    project_path = Path(args.project).expanduser().resolve()
    if not project_path.is_file():
        print(f"[ERROR] Project file not found: {project_path}")
        return 2
    try:
        project = load_project(project_path)
    except ProjectError as e:
        print(f"[ERROR] {e}")
        return 3

    collected = CollectingTrace() if args.trace else None
    trace = collected if collected is not None else (logging_trace if args.verbose else None)
    try:
        run = run_analysis(project, max_workers=args.workers, trace=trace)
    except RunnerError as e:
        print(f"[ERROR] {e}")
        return 2

    for room in run.rooms:
        status = "PASS" if room.meets_standard else "FAIL"
        print(
            f"  {room.room_name}: E_avg={room.average_illuminance:.1f} lx "
            f"U0={room.uniformity:.2f} required={room.required_illuminance:.0f} lx [{status}]"
        )
        if room.remarks:
            for line in room.remarks.splitlines():
                print(f"    - {line}")
    for failure in run.failures:
        print(f"  {failure.room_name}: [ERROR] {failure.message}")

    if args.out:
        out = write_results_json(Path(args.out).expanduser().resolve(), run)
        print(f"Saved results to: {out}")
    if collected is not None:
        for record in collected.records:
            print(json.dumps(record.to_dict(), sort_keys=True))

    return 3 if run.all_failed else 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="luxgrid")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    demo = sub.add_parser("demo", help="Write a demo .ies file and a matching project to disk.")
    demo.add_argument("--out", default="demo/demo.ies", help="Output .ies path")
    demo.set_defaults(func=_cmd_demo)

    ps = sub.add_parser("parse", help="Parse an IES file and print its summary.")
    ps.add_argument("file", help="Path to .ies file")
    ps.add_argument("--json", action="store_true", help="Print the full dataset as JSON")
    ps.set_defaults(func=_cmd_parse)

    an = sub.add_parser("analyze", help="Compute work-plane illuminance for every room of a project.")
    an.add_argument("project", help="Path to project .json")
    an.add_argument("--out", default=None, help="Write results JSON here")
    an.add_argument("--workers", type=int, default=1, help="Rooms computed in parallel")
    an.add_argument("--trace", action="store_true", help="Print the first-point trace of every grid")
    an.add_argument("--verbose", "-v", action="store_true", dest="verbose_sub", help="Debug logging")
    an.set_defaults(func=_cmd_analyze)

    args = p.parse_args(argv)
    args.verbose = args.verbose or getattr(args, "verbose_sub", False)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
