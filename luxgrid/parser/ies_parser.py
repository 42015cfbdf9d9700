"""
Tolerant reader for IESNA LM-63 photometric files.

The reader works in five passes over the line sequence:

1. keyword header (``[KEYWORD] value`` lines before ``TILT``)
2. the ``TILT=`` line, skipping any included tilt table
3. the photometric data block (10 required + 3 optional numbers)
4. angle lists and the candela table, as one flat numeric stream
5. candela statistics

Stray non-numeric tokens in the numeric sections are skipped rather than
rejected, and a truncated candela table yields shorter columns instead of an
error. The only hard failures are a missing file and a data block with fewer
than ten numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from luxgrid.models.photometry import PhotometricDataset


@dataclass
class PhotometryError(Exception):
    message: str
    filename: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.filename}: " if self.filename else ""
        return f"{prefix}{self.message}"


class NotFoundError(PhotometryError, FileNotFoundError):
    """The photometric file does not exist."""


class FormatError(PhotometryError, ValueError):
    """The file exists but its content cannot be interpreted."""


REQUIRED_DATA_VALUES = 10
OPTIONAL_DATA_VALUES = 3
VALID_FIRST_VERTICAL_ANGLES = (0.0, 90.0, -90.0)

# keyword (upper-case) -> dataset field
KEYWORD_ALIASES: Dict[str, str] = {
    "MANUFAC": "manufacturer",
    "MANUFACTURER": "manufacturer",
    "LUMCAT": "catalog_number",
    "LUMINAIRE CATALOG": "catalog_number",
    "LUMINAIRE": "luminaire_name",
    "LAMPCAT": "lamp_catalog_number",
    "LAMP CATALOG": "lamp_catalog_number",
    "TEST": "test_laboratory",
    "TESTLAB": "test_laboratory",
    "TESTRPT": "test_report",
    "REPORT": "test_report",
    "TESTDATE": "test_date",
    "DATE": "test_date",
}
ABSOLUTE_LUMENS_KEYWORD = "_ABSOLUTELUMENS"

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%d-%b-%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %Y",
)

_NUM_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_FIRST_DECIMAL_RE = re.compile(r"[\d.]+")
_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")


def _is_number(tok: str) -> bool:
    return bool(_NUM_RE.match(tok))


def _numeric_tokens(lines: List[str], start_idx0: int) -> Iterator[Tuple[int, float]]:
    """Yield (line_idx0, value) for every numeric token from `start_idx0` on."""
    for idx0 in range(start_idx0, len(lines)):
        s = lines[idx0].strip()
        if not s:
            continue
        for tok in _TOKEN_SPLIT_RE.split(s):
            if tok and _is_number(tok):
                yield idx0, float(tok)


def _parse_date(value: str) -> Optional[date]:
    v = value.strip()
    if not v:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(v, fmt).date()
        except ValueError:
            continue
    return None


def _first_decimal(value: str) -> Optional[float]:
    m = _FIRST_DECIMAL_RE.search(value)
    if m is None:
        return None
    try:
        return float(m.group(0))
    except ValueError:
        return None


@dataclass
class _Header:
    fields: Dict[str, object] = field(default_factory=dict)
    keywords: Dict[str, List[str]] = field(default_factory=dict)
    absolute_lumens: Optional[float] = None


def _parse_metadata(lines: List[str]) -> Tuple[_Header, int]:
    """Returns the header and the index of the TILT line (len(lines) if absent)."""
    header = _Header()
    for idx0, ln in enumerate(lines):
        s = ln.strip()
        if s.upper().startswith("TILT"):
            return header, idx0
        if not s.startswith("["):
            continue
        end = s.find("]")
        if end <= 0:
            continue
        key = s[1:end].strip().upper()
        val = s[end + 1 :].strip()
        header.keywords.setdefault(key, []).append(val)

        if key == ABSOLUTE_LUMENS_KEYWORD:
            lumens = _first_decimal(val)
            if lumens is not None:
                header.absolute_lumens = lumens
            continue
        target = KEYWORD_ALIASES.get(key)
        if target is None:
            continue
        if target == "test_date":
            parsed = _parse_date(val)
            if parsed is not None:
                header.fields[target] = parsed
        else:
            header.fields[target] = val
    return header, len(lines)


def _skip_tilt_include_by_count(lines: List[str], start_idx0: int) -> Optional[int]:
    """
    Skip `<geometry> / <n> / n angles / n multipliers`, or the compact form
    without the geometry line. Returns the index after the block, or None when
    the lines do not have that shape.
    """
    non_blank = [i for i in range(start_idx0, len(lines)) if lines[i].strip()]
    if not non_blank:
        return None
    first = _TOKEN_SPLIT_RE.split(lines[non_blank[0]].strip())
    if not first or not _is_number(first[0]):
        return None
    idx0 = non_blank[0]
    if len(first) == 1 and len(non_blank) > 1:
        second = _TOKEN_SPLIT_RE.split(lines[non_blank[1]].strip())
        if len(second) == 1 and _is_number(second[0]):
            idx0 = non_blank[1]  # first line was lamp-to-luminaire geometry

    tokens = _numeric_tokens(lines, idx0)
    try:
        _, n_raw = next(tokens)
    except StopIteration:
        return None
    n = int(n_raw)
    if n <= 0 or n != n_raw:
        return None
    last_idx0 = idx0
    for _ in range(2 * n):
        try:
            last_idx0, _ = next(tokens)
        except StopIteration:
            return None
    return last_idx0 + 1


def _skip_tilt(lines: List[str], tilt_idx0: int) -> Tuple[Optional[str], int]:
    """Returns (tilt mode, index of the first line after the tilt section)."""
    if tilt_idx0 >= len(lines):
        return None, len(lines)
    s = lines[tilt_idx0].strip()
    mode = s.split("=", 1)[1].strip().upper() if "=" in s else ""
    if "INCLUDE" not in s.upper():
        return mode, tilt_idx0 + 1

    nxt = _skip_tilt_include_by_count(lines, tilt_idx0 + 1)
    if nxt is not None:
        return mode, nxt
    # Unrecognised tilt table: drop everything up to the next blank line.
    i = tilt_idx0 + 1
    while i < len(lines) and lines[i].strip():
        i += 1
    return mode, min(i + 1, len(lines))


def _candela_statistics(columns: List[List[float]]) -> Tuple[float, float, float]:
    flat = [x for col in columns for x in col]
    if not flat:
        return 0.0, 0.0, 0.0
    return min(flat), max(flat), sum(flat) / len(flat)


def _has_optional_line(tokens: List[Tuple[int, float]], v_count: int, h_count: int) -> bool:
    """
    Whether the ballast / ballast-lamp / watts values follow the 10 required
    data values.

    A stream long enough for the optional values plus the whole angle and
    candela block has them. A shorter (truncated) stream is judged by layout:
    the required values end a line, the next line holds exactly three numbers,
    and its first number is not a valid first vertical angle (0, 90 or -90).
    """
    extra = len(tokens) - REQUIRED_DATA_VALUES
    needed = v_count + h_count + v_count * h_count
    if extra >= needed + OPTIONAL_DATA_VALUES:
        return True
    if extra < OPTIONAL_DATA_VALUES:
        return False
    line_idx0 = tokens[REQUIRED_DATA_VALUES][0]
    if tokens[REQUIRED_DATA_VALUES - 1][0] == line_idx0:
        return False
    on_line = sum(1 for idx0, _ in tokens[REQUIRED_DATA_VALUES:] if idx0 == line_idx0)
    if on_line != OPTIONAL_DATA_VALUES:
        return False
    return tokens[REQUIRED_DATA_VALUES][1] not in VALID_FIRST_VERTICAL_ANGLES


def _build_dataset(lines: List[str], source: Optional[Path]) -> PhotometricDataset:
    header, tilt_idx0 = _parse_metadata(lines)
    tilt_mode, data_idx0 = _skip_tilt(lines, tilt_idx0)

    tokens = list(_numeric_tokens(lines, data_idx0))
    stream = [v for _, v in tokens]
    if len(stream) < REQUIRED_DATA_VALUES:
        raise FormatError(
            f"Expected at least {REQUIRED_DATA_VALUES} photometric data values, found {len(stream)}"
        )

    number_of_lamps = int(stream[0])
    lumens_per_lamp = stream[1]
    if header.absolute_lumens is not None and header.absolute_lumens > 0:
        lumens_per_lamp = header.absolute_lumens
    candela_multiplier = stream[2]
    n_v = int(stream[3])
    n_h = int(stream[4])
    photometric_type = int(stream[5])
    units_type = int(stream[6])
    width, length, height = stream[7], stream[8], stream[9]

    v_count = max(n_v, 0)
    h_count = max(n_h, 0)
    n_optional = OPTIONAL_DATA_VALUES if _has_optional_line(tokens, v_count, h_count) else 0
    optional = stream[REQUIRED_DATA_VALUES : REQUIRED_DATA_VALUES + n_optional]
    ballast_factor = optional[0] if n_optional else 0.0
    ballast_lamp_factor = optional[1] if n_optional else 0.0
    input_watts = optional[2] if n_optional else 0.0

    if number_of_lamps > 0:
        total_lumens = lumens_per_lamp * number_of_lamps
    elif lumens_per_lamp > 0:
        total_lumens = lumens_per_lamp
        number_of_lamps = 1
    else:
        total_lumens = 0.0
    efficacy = total_lumens / input_watts if input_watts > 0 else 0.0

    rest = stream[REQUIRED_DATA_VALUES + n_optional :]
    pos = 0
    vertical = rest[pos : pos + v_count]
    pos += len(vertical)
    horizontal = rest[pos : pos + h_count]
    pos += len(horizontal)
    # One column per horizontal angle actually read; a declared count larger
    # than the data never allocates more than that.
    raw_columns: List[List[float]] = []
    for _ in range(len(horizontal)):
        col = rest[pos : pos + v_count]
        pos += len(col)
        raw_columns.append(col)

    m = candela_multiplier if candela_multiplier > 0 else 1.0
    scaled_columns = [[m * x for x in col] for col in raw_columns]
    min_cd, max_cd, avg_cd = _candela_statistics(scaled_columns)

    return PhotometricDataset(
        vertical_angles=tuple(vertical),
        horizontal_angles=tuple(horizontal),
        candela_values=tuple(tuple(col) for col in scaled_columns),
        raw_candela_values=tuple(tuple(col) for col in raw_columns),
        number_of_lamps=number_of_lamps,
        lumens_per_lamp=lumens_per_lamp,
        total_lumens=total_lumens,
        input_watts=input_watts,
        efficacy=efficacy,
        candela_multiplier=candela_multiplier,
        ballast_factor=ballast_factor,
        ballast_lamp_factor=ballast_lamp_factor,
        number_of_vertical_angles=n_v,
        number_of_horizontal_angles=n_h,
        photometric_type=photometric_type,
        units_type=units_type,
        width=width,
        length=length,
        height=height,
        min_candela=min_cd,
        max_candela=max_cd,
        average_candela=avg_cd,
        tilt_mode=tilt_mode,
        keywords=header.keywords,
        file_path=str(source) if source is not None else None,
        file_name=source.name if source is not None else None,
        **header.fields,  # type: ignore[arg-type]
    )


def parse_ies_text(text: str, source_path: str | Path | None = None) -> PhotometricDataset:
    src = Path(source_path).expanduser() if source_path is not None else None
    filename = str(src) if src is not None else None
    try:
        return _build_dataset(text.splitlines(), src)
    except FormatError as e:
        if e.filename is None:
            e.filename = filename
        raise
    except (ValueError, TypeError, IndexError, OverflowError) as exc:
        raise FormatError(f"Cannot interpret IES data: {exc}", filename=filename) from exc


def parse_ies_file(path: str | Path) -> PhotometricDataset:
    p = Path(path).expanduser()
    if not p.is_file():
        raise NotFoundError("IES file not found", filename=str(p))
    try:
        text = p.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FormatError(f"Cannot read IES file: {exc}", filename=str(p)) from exc
    return parse_ies_text(text, source_path=p)


def is_valid_ies_file(path: str | Path) -> bool:
    """Cheap sniff: an IES file mentions TILT within its first 20 lines."""
    p = Path(path).expanduser()
    if not p.is_file():
        return False
    try:
        with p.open("r", encoding="utf-8", errors="replace") as f:
            for i, line in enumerate(f):
                if i >= 20:
                    break
                if "TILT" in line.upper():
                    return True
    except OSError:
        return False
    return False
