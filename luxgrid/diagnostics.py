from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Protocol, Tuple


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceRecord:
    """First point / first luminaire interaction of one grid computation."""
    room_id: str
    work_plane_height_m: float
    luminaire_id: str
    source_position: Tuple[float, float, float]
    placement_position: Optional[Tuple[float, float, float]]
    source_from_bbox: bool
    point: Tuple[float, float, float]
    distance_m: float
    gamma_deg: Optional[float]
    intensity_cd: float
    photometry: str                    # "ies" or "fallback"
    direct_lux: float
    maintenance_factor: float
    indirect_factor: float

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class TraceSink(Protocol):
    def __call__(self, record: TraceRecord) -> None: ...


def logging_trace(record: TraceRecord) -> None:
    logger.debug("grid trace: %s", record.to_dict())


class CollectingTrace:
    """Keeps every record it receives; handy in tests and for JSON dumps."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.records: List[TraceRecord] = []

    def __call__(self, record: TraceRecord) -> None:
        with self._lock:
            self.records.append(record)


class CalculationCancelled(RuntimeError):
    pass


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CalculationCancelled("Calculation cancelled")
