"""Parsers for reference packs, optimizer exports, user lineups and projections."""

from ._tabular import decode_payload
from .detect import CsvFormat, ProbeMatch, detect_csv_format, parse_belief_upload, parse_lineup_upload
from .lineups import parse_optimizer_lineups, parse_user_lineups
from .pipeline import PipelinePack, parse_contest_config, parse_pipeline_json
from .projections import parse_projections
from .sidecar import (
    DEFAULT_PACK_NAME,
    FetchedText,
    fetch_sidecar_text,
    fetch_sidecar_text_async,
    find_reference_pack,
    find_reference_pack_async,
)

__all__ = [
    "CsvFormat",
    "DEFAULT_PACK_NAME",
    "FetchedText",
    "PipelinePack",
    "ProbeMatch",
    "decode_payload",
    "detect_csv_format",
    "fetch_sidecar_text",
    "fetch_sidecar_text_async",
    "find_reference_pack",
    "find_reference_pack_async",
    "parse_belief_upload",
    "parse_contest_config",
    "parse_lineup_upload",
    "parse_optimizer_lineups",
    "parse_pipeline_json",
    "parse_projections",
    "parse_user_lineups",
]
