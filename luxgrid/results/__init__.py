from luxgrid.results.types import (
    AnalysisRun,
    GridPoint,
    LuminaireUsage,
    RoomAnalysis,
    RoomFailure,
    RoomIlluminanceResult,
)

__all__ = [
    "AnalysisRun",
    "GridPoint",
    "LuminaireUsage",
    "RoomAnalysis",
    "RoomFailure",
    "RoomIlluminanceResult",
]
