"""Shared helpers for reading uploaded CSV text and messy numeric cells."""

from __future__ import annotations

import csv
import re
from io import StringIO
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple


_HEADER_TOKEN = re.compile(r"[^a-z0-9%]")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def decode_payload(contents: bytes) -> str:
    """Decode uploaded bytes, tolerating a BOM and non-UTF-8 exports."""

    try:
        return contents.decode("utf-8-sig")
    except UnicodeDecodeError:
        return contents.decode("latin-1")


def header_key(value: str) -> str:
    """Normalize a column header so ``Sim ROI``/``sim_roi``/``simROI`` compare equal."""

    return _HEADER_TOKEN.sub("", value.strip().lower())


def read_header(text: str) -> List[str]:
    """Return the normalized keys of the first non-blank row only."""

    for row in csv.reader(StringIO(text.lstrip("\ufeff"))):
        if any(cell.strip() for cell in row):
            return _dedupe_keys([header_key(cell.strip()) for cell in row])
    return []


def read_rows(text: str) -> Tuple[List[str], List[dict[str, str]]]:
    """Return normalized column keys and rows keyed by them.

    Keys come from :func:`header_key`; a repeated header gets a numeric suffix.
    """

    reader = csv.reader(StringIO(text.lstrip("\ufeff")))
    headers: List[str] = []
    for row in reader:
        if any(cell.strip() for cell in row):
            headers = [cell.strip() for cell in row]
            break
    keys = _dedupe_keys([header_key(header) for header in headers])
    rows: List[dict[str, str]] = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        rows.append({key: (row[idx].strip() if idx < len(row) else "") for idx, key in enumerate(keys)})
    return keys, rows


def _dedupe_keys(keys: Sequence[str]) -> List[str]:
    # Sites that repeat slot headers (e.g. three "OF" columns) get numbered keys.
    counts: dict[str, int] = {}
    result: List[str] = []
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
        result.append(key if counts[key] == 1 else f"{key}{counts[key]}")
    return result


def first_key(keys: Iterable[str], aliases: Sequence[str]) -> Optional[str]:
    available = set(keys)
    for alias in aliases:
        if alias in available:
            return alias
    return None


def pick(row: Mapping[str, str], aliases: Sequence[str]) -> Optional[str]:
    for alias in aliases:
        value = row.get(alias)
        if value not in (None, ""):
            return value
    return None


def parse_float(raw: object) -> Optional[float]:
    """Parse ``12.5``, ``$1,200``, ``12.5%`` style cells; blanks become ``None``."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip().replace(",", "").replace("$", "")
    if not text or text.lower() in {"na", "n/a", "nan", "none", "-", "--"}:
        return None
    match = _NUMBER.search(text)
    if match is None:
        return None
    return float(match.group(0))


def parse_salary(raw: object) -> Optional[int]:
    value = parse_float(raw)
    if value is None:
        return None
    return max(0, int(round(value)))


def is_percent_literal(raw: object) -> bool:
    return isinstance(raw, str) and raw.strip().endswith("%")


def percent_column(raw_values: Sequence[object]) -> List[Optional[float]]:
    """Parse one column of percent-like values into percent units.

    Cells written as ``12.5%`` are taken literally. When every numeric cell of
    the column lies in ``[-1, 1]`` the column is treated as fractions.
    """

    parsed = [parse_float(value) for value in raw_values]
    literal = [is_percent_literal(value) for value in raw_values]
    bare = [value for value, is_literal in zip(parsed, literal) if value is not None and not is_literal]
    as_fraction = bool(bare) and all(-1.0 <= value <= 1.0 for value in bare)
    result: List[Optional[float]] = []
    for value, is_literal in zip(parsed, literal):
        if value is None:
            result.append(None)
        elif as_fraction and not is_literal:
            result.append(round(value * 100.0, 6))
        else:
            result.append(value)
    return result
