from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Union

from luxgrid.cache.photometry_cache import PhotometryCache
from luxgrid.calculation.illuminance import compute_room_illuminance, custom_requirement
from luxgrid.compliance.standards import evaluate_compliance
from luxgrid.diagnostics import CalculationCancelled, CancellationToken, TraceSink
from luxgrid.photometry.resolution import LuminairePhotometry, PhotometryResolver
from luxgrid.project.schema import Project, RoomSpec
from luxgrid.results.types import AnalysisRun, RoomAnalysis, RoomFailure


logger = logging.getLogger(__name__)


class RunnerError(Exception):
    pass


RoomOutcome = Union[RoomAnalysis, RoomFailure]


def _project_root(project: Project) -> Optional[Path]:
    if project.root_dir:
        return Path(project.root_dir).expanduser().resolve()
    return None


def analyze_room(
    project: Project,
    room_spec: RoomSpec,
    resolver: PhotometryResolver,
    *,
    trace: Optional[TraceSink] = None,
    cancel: Optional[CancellationToken] = None,
) -> RoomAnalysis:
    settings = project.settings
    room = room_spec.to_descriptor(project.scale_to_meters)
    luminaires = room_spec.luminaire_descriptors()
    results = tuple(
        compute_room_illuminance(room, luminaires, settings, h, resolver=resolver, trace=trace, cancel=cancel)
        for h in settings.work_plane_heights
    )
    primary = results[0]
    comp = evaluate_compliance(
        primary.average_illuminance,
        primary.uniformity,
        primary.luminaire_count,
        room.activity,
        custom_requirement(settings),
    )
    area = primary.room_area_m2
    return RoomAnalysis(
        room_id=room.id,
        room_name=room.name,
        room_number=room.number,
        activity=comp.activity.name if comp.activity else room.activity,
        results=results,
        required_illuminance=comp.required_lux,
        required_uniformity=comp.min_uniformity,
        meets_standard=comp.meets,
        remarks=comp.recommendation,
        power_density_w_m2=(primary.total_power_w / area) if area > 0 else 0.0,
    )


def run_analysis(
    project: Project,
    *,
    max_workers: int = 1,
    trace: Optional[TraceSink] = None,
    cancel: Optional[CancellationToken] = None,
    resolver: Optional[PhotometryResolver] = None,
) -> AnalysisRun:
    """
    Analyze every room at every work-plane height.

    A room that raises is recorded as a RoomFailure and the batch goes on;
    cancellation stops the whole batch. Output keeps the input room order.
    """
    if max_workers < 1:
        raise RunnerError(f"max_workers must be >= 1, got {max_workers}")
    if resolver is None:
        cache: PhotometryCache[LuminairePhotometry] = PhotometryCache()
        resolver = PhotometryResolver.from_settings(project.settings, _project_root(project), cache=cache)

    def _one(room_spec: RoomSpec) -> RoomOutcome:
        if cancel is not None:
            cancel.raise_if_cancelled()
        try:
            analysis = analyze_room(project, room_spec, resolver, trace=trace, cancel=cancel)
        except CalculationCancelled:
            raise
        except Exception as e:
            logger.warning("Room %s (%s) failed: %s", room_spec.name or room_spec.id, room_spec.id, e)
            return RoomFailure(room_id=room_spec.id, room_name=room_spec.name or room_spec.id, message=str(e))
        logger.info(
            "Room %s: E_avg=%.1f lx U0=%.2f (%d luminaires)",
            analysis.room_name,
            analysis.average_illuminance,
            analysis.uniformity,
            analysis.primary.luminaire_count,
        )
        return analysis

    if max_workers == 1 or len(project.rooms) <= 1:
        outcomes: List[RoomOutcome] = [_one(r) for r in project.rooms]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(_one, project.rooms))

    run = AnalysisRun(project_name=project.name, settings=project.settings.to_dict())
    for outcome in outcomes:
        if isinstance(outcome, RoomFailure):
            run.failures.append(outcome)
        else:
            run.rooms.append(outcome)
    logger.info("Analyzed %d room(s), %d failure(s), %d photometry load(s)", len(run.rooms), len(run.failures), resolver.cache.loads)
    return run
