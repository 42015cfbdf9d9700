"""
Photometry resolution chain.

A luminaire's photometric file is looked up by an ordered list of strategies.
Every strategy returns a `Resolution` (dataset or error message); the first
success wins. When all strategies fail the luminaire is computed with the
analytic fallback model. The result is memoized per luminaire type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from luxgrid.cache.photometry_cache import PhotometryCache
from luxgrid.models.photometry import PhotometricDataset
from luxgrid.models.scene import LuminaireDescriptor
from luxgrid.models.settings import AnalysisSettings, DEFAULT_PHOTOMETRIC_PARAMETER_KEYS
from luxgrid.parser.ies_parser import PhotometryError, parse_ies_file
from luxgrid.photometry.fallback import FallbackEmission
from luxgrid.photometry.interp import IntensityFunction, intensity_function
from luxgrid.project.parameters import photometric_file_from_parameters


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    dataset: Optional[PhotometricDataset] = None
    error: Optional[str] = None
    strategy: Optional[str] = None
    path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.dataset is not None

    @classmethod
    def success(cls, dataset: PhotometricDataset, strategy: str, path: str) -> "Resolution":
        return cls(dataset=dataset, strategy=strategy, path=path)

    @classmethod
    def failure(cls, error: str, strategy: str, path: Optional[str] = None) -> "Resolution":
        return cls(error=error, strategy=strategy, path=path)


def _parse(path: Path, strategy: str) -> Resolution:
    try:
        return Resolution.success(parse_ies_file(path), strategy, str(path))
    except PhotometryError as e:
        return Resolution.failure(str(e), strategy, str(path))


def _candidate_name(luminaire: LuminaireDescriptor, keys: Sequence[str]) -> Optional[str]:
    ref = luminaire.ies_path or photometric_file_from_parameters(luminaire.parameters, keys)
    if not ref:
        return None
    # Host paths may use either separator regardless of the platform we run on.
    return ref.replace("\\", "/").rsplit("/", 1)[-1] or None


class ExplicitPathStrategy:
    name = "explicit_path"

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir

    def __call__(self, luminaire: LuminaireDescriptor) -> Resolution:
        if not luminaire.ies_path:
            return Resolution.failure("no photometric file on luminaire", self.name)
        p = Path(luminaire.ies_path).expanduser()
        if not p.is_absolute() and self.base_dir is not None:
            p = self.base_dir / p
        return _parse(p, self.name)


class ParameterPathStrategy:
    name = "parameter_path"

    def __init__(self, keys: Sequence[str] = DEFAULT_PHOTOMETRIC_PARAMETER_KEYS, base_dir: Optional[Path] = None) -> None:
        self.keys = tuple(keys)
        self.base_dir = base_dir

    def __call__(self, luminaire: LuminaireDescriptor) -> Resolution:
        ref = photometric_file_from_parameters(luminaire.parameters, self.keys)
        if not ref:
            return Resolution.failure("no photometric file parameter", self.name)
        p = Path(ref).expanduser()
        if not p.is_absolute() and self.base_dir is not None:
            p = self.base_dir / p
        return _parse(p, self.name)


class SearchFoldersStrategy:
    """Look the file name up in configured folders, optionally recursively."""

    def __init__(
        self,
        folders: Sequence[Path],
        keys: Sequence[str] = DEFAULT_PHOTOMETRIC_PARAMETER_KEYS,
        recursive: bool = False,
    ) -> None:
        self.folders = tuple(folders)
        self.keys = tuple(keys)
        self.recursive = recursive
        self.name = "recursive_search" if recursive else "folder_search"

    def __call__(self, luminaire: LuminaireDescriptor) -> Resolution:
        file_name = _candidate_name(luminaire, self.keys)
        if not file_name:
            return Resolution.failure("no photometric file name to search for", self.name)
        for folder in self.folders:
            if not folder.is_dir():
                continue
            if self.recursive:
                matches = sorted(folder.rglob(file_name))
                if matches:
                    return _parse(matches[0], self.name)
            else:
                candidate = folder / file_name
                if candidate.is_file():
                    return _parse(candidate, self.name)
        return Resolution.failure(f"{file_name} not found in search folders", self.name)


def resolution_order(settings: AnalysisSettings, base_dir: Optional[Path] = None) -> List[object]:
    """Strategies in the order they are tried."""
    folders: List[Path] = []
    for raw in settings.ies_search_paths:
        p = Path(raw).expanduser()
        if not p.is_absolute() and base_dir is not None:
            p = base_dir / p
        folders.append(p)
    if base_dir is not None:
        folders.append(base_dir)
    keys = settings.photometric_parameter_keys
    return [
        ExplicitPathStrategy(base_dir),
        ParameterPathStrategy(keys, base_dir),
        SearchFoldersStrategy(folders, keys, recursive=False),
        SearchFoldersStrategy(folders, keys, recursive=True),
    ]


@dataclass(frozen=True)
class LuminairePhotometry:
    """Outcome of resolving one luminaire type."""
    dataset: Optional[PhotometricDataset]
    strategy: Optional[str] = None
    path: Optional[str] = None
    errors: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def source(self) -> str:
        return "ies" if self.dataset is not None and self.dataset.has_candela else "fallback"


def resolve_chain(luminaire: LuminaireDescriptor, strategies: Sequence[object]) -> LuminairePhotometry:
    errors: List[str] = []
    for strategy in strategies:
        res: Resolution = strategy(luminaire)  # type: ignore[operator]
        if res.ok:
            return LuminairePhotometry(res.dataset, res.strategy, res.path, tuple(errors))
        errors.append(f"{res.strategy}: {res.error}")
    return LuminairePhotometry(None, None, None, tuple(errors))


class PhotometryResolver:
    """
    Resolves and caches photometry per luminaire type and answers intensity
    queries for a concrete luminaire, falling back to the analytic model.
    """

    def __init__(
        self,
        strategies: Sequence[object],
        cache: Optional[PhotometryCache[LuminairePhotometry]] = None,
        use_ies_data: bool = True,
    ) -> None:
        self.strategies = list(strategies)
        self.cache: PhotometryCache[LuminairePhotometry] = cache if cache is not None else PhotometryCache()
        self.use_ies_data = use_ies_data

    @classmethod
    def from_settings(
        cls,
        settings: AnalysisSettings,
        base_dir: Optional[Path] = None,
        cache: Optional[PhotometryCache[LuminairePhotometry]] = None,
    ) -> "PhotometryResolver":
        return cls(resolution_order(settings, base_dir), cache=cache, use_ies_data=settings.use_ies_data)

    def photometry_for(self, luminaire: LuminaireDescriptor) -> LuminairePhotometry:
        if not self.use_ies_data:
            return LuminairePhotometry(None, errors=("photometric files disabled",))
        return self.cache.get_or_load(luminaire.photometry_key, lambda: self._load(luminaire))

    def _load(self, luminaire: LuminaireDescriptor) -> LuminairePhotometry:
        result = resolve_chain(luminaire, self.strategies)
        if result.dataset is None:
            logger.debug("No photometry for %s, using analytic model: %s", luminaire.photometry_key, "; ".join(result.errors))
        else:
            logger.debug("Photometry for %s from %s (%s)", luminaire.photometry_key, result.path, result.strategy)
        return result

    def intensity_for(self, luminaire: LuminaireDescriptor) -> IntensityFunction:
        """Candela lookup for one luminaire, resolved once and reused for every grid point."""
        photometry = self.photometry_for(luminaire)
        fallback = FallbackEmission(luminaire.total_lumens, luminaire.type_name)
        return intensity_function(photometry.dataset, fallback=fallback)

    def intensity(self, luminaire: LuminaireDescriptor, vertical_deg: float, horizontal_deg: float = 0.0) -> float:
        return self.intensity_for(luminaire)(vertical_deg, horizontal_deg)
