from __future__ import annotations

import json
from pathlib import Path

from luxgrid.results.types import AnalysisRun


def write_results_json(path: Path, run: AnalysisRun, include_points: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(run.to_dict(include_points=include_points), indent=2, sort_keys=True), encoding="utf-8")
    return path
