"""Classify uploaded CSVs through an ordered chain of header probes.

Each probe either reports a confident match or declines. Zero matches or
more than one match is an :class:`~slatesavvy.errors.AmbiguousFormat`
error; nothing falls back to a default format.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple

from slatesavvy.errors import AmbiguousFormat, ReferencePackRequired
from slatesavvy.models import Lineup, Player

from ._tabular import first_key, read_header
from .lineups import (
    ID_COLUMNS,
    LONG_LABEL_COLUMNS,
    NAME_COLUMNS,
    parse_optimizer_lineups,
    parse_user_lineups,
    roster_columns,
    sim_columns,
)
from .projections import DEFAULT_PROJECTION_ALIASES, parse_projections


logger = logging.getLogger(__name__)


class CsvFormat(str, Enum):
    OPTIMIZER_EXPORT = "optimizer_export"
    USER_LINEUPS = "user_lineups"
    PROJECTIONS = "projections"


@dataclass(frozen=True)
class ProbeMatch:
    format: CsvFormat
    reason: str


class FormatProbe(Protocol):
    def probe(self, keys: Sequence[str]) -> Optional[ProbeMatch]:
        ...


class OptimizerExportProbe:
    """Slot columns plus at least one simulated-outcome column."""

    def probe(self, keys: Sequence[str]) -> Optional[ProbeMatch]:
        if not roster_columns(keys):
            return None
        sims = sim_columns(keys)
        if not sims:
            return None
        return ProbeMatch(CsvFormat.OPTIMIZER_EXPORT, f"roster slots with {', '.join(sorted(sims))}")


class UserLineupProbe:
    """Slot columns without simulated outcomes, or one player per row grouped by lineup."""

    def probe(self, keys: Sequence[str]) -> Optional[ProbeMatch]:
        if roster_columns(keys):
            if sim_columns(keys):
                return None
            return ProbeMatch(CsvFormat.USER_LINEUPS, "roster slots without simulated outcomes")
        label = first_key(keys, LONG_LABEL_COLUMNS)
        player = first_key(keys, NAME_COLUMNS + ID_COLUMNS)
        if label and player:
            return ProbeMatch(CsvFormat.USER_LINEUPS, f"player rows grouped by {label}")
        return None


class ProjectionsProbe:
    """One player per row with salary and projection columns."""

    def probe(self, keys: Sequence[str]) -> Optional[ProbeMatch]:
        if roster_columns(keys):
            return None
        has_name = first_key(keys, DEFAULT_PROJECTION_ALIASES["name"]) or (
            first_key(keys, DEFAULT_PROJECTION_ALIASES["first_name"])
            and first_key(keys, DEFAULT_PROJECTION_ALIASES["last_name"])
        )
        salary = first_key(keys, DEFAULT_PROJECTION_ALIASES["salary"])
        projection = first_key(keys, DEFAULT_PROJECTION_ALIASES["projection"])
        if has_name and salary and projection:
            return ProbeMatch(CsvFormat.PROJECTIONS, f"player rows with {salary} and {projection}")
        return None


PROBES: Tuple[FormatProbe, ...] = (OptimizerExportProbe(), UserLineupProbe(), ProjectionsProbe())


def detect_keys(keys: Sequence[str], probes: Sequence[FormatProbe] = PROBES) -> ProbeMatch:
    if not keys:
        raise AmbiguousFormat("File is empty or has no header row.")
    matches: List[ProbeMatch] = []
    for probe in probes:
        match = probe.probe(keys)
        if match is not None:
            matches.append(match)
    if not matches:
        raise AmbiguousFormat(
            "Could not recognize this CSV as an optimizer export, a lineup file or a projections file."
        )
    if len(matches) > 1:
        names = tuple(match.format.value for match in matches)
        raise AmbiguousFormat(f"CSV matches several formats ({', '.join(names)}); refusing to guess.", names)
    logger.debug("Detected %s (%s)", matches[0].format.value, matches[0].reason)
    return matches[0]


def detect_csv_format(text: str, probes: Sequence[FormatProbe] = PROBES) -> ProbeMatch:
    return detect_keys(read_header(text), probes)


def parse_lineup_upload(
    text: str,
    reference_pool: Sequence[Player],
    *,
    set_name: str = "uploaded",
) -> Tuple[CsvFormat, List[Lineup]]:
    """Detect and parse a lineup upload. Projections files are rejected."""

    match = detect_csv_format(text)
    if match.format is CsvFormat.PROJECTIONS:
        raise AmbiguousFormat(
            "This looks like a projections file, not lineups. Upload it as a belief profile instead.",
            (match.format.value,),
        )
    if match.format is CsvFormat.OPTIMIZER_EXPORT:
        if not reference_pool:
            raise ReferencePackRequired()
        return match.format, parse_optimizer_lineups(text, reference_pool, set_name=set_name)
    return match.format, parse_user_lineups(text, set_name=set_name)


def parse_belief_upload(text: str) -> List[Player]:
    """Parse a belief profile; lineup files are rejected."""

    match = detect_csv_format(text)
    if match.format is not CsvFormat.PROJECTIONS:
        raise AmbiguousFormat(
            f"Expected a projections file but this looks like {match.format.value.replace('_', ' ')}.",
            (match.format.value,),
        )
    return parse_projections(text)
