"""Fetch sidecar files and dated reference packs from a path or URL."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urljoin, urlparse

import anyio
import httpx

from slatesavvy.config import sidecar_timeout
from slatesavvy.errors import SidecarFetchFailed

from ._tabular import decode_payload


logger = logging.getLogger(__name__)

PACK_PREFIX = "pipeline_"
DEFAULT_PACK_NAME = "pipeline_2025-12-20"


@dataclass(frozen=True)
class FetchedText:
    location: str
    text: str


def is_url(location: str) -> bool:
    return urlparse(location).scheme in {"http", "https"}


def resolve_location(reference: str, base_location: Optional[str]) -> str:
    """Resolve ``reference`` relative to the file or URL it was named in."""

    if is_url(reference) or not base_location:
        return reference
    if is_url(base_location):
        return urljoin(base_location, reference)
    ref_path = Path(reference)
    if ref_path.is_absolute():
        return str(ref_path)
    base = Path(base_location)
    parent = base if base.is_dir() else base.parent
    return str(parent / ref_path)


def _check_response(location: str, response: httpx.Response) -> str:
    if response.status_code >= 400:
        raise SidecarFetchFailed(location, f"HTTP {response.status_code}")
    return response.text


def _read_path(location: str) -> str:
    try:
        return decode_payload(Path(location).read_bytes())
    except OSError as exc:
        raise SidecarFetchFailed(location, str(exc)) from exc


async def _read_path_async(location: str) -> str:
    try:
        return decode_payload(await anyio.Path(location).read_bytes())
    except OSError as exc:
        raise SidecarFetchFailed(location, str(exc)) from exc


def fetch_text(
    location: str,
    *,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> str:
    """Read a local file or GET a URL; any failure raises :class:`SidecarFetchFailed`."""

    if not is_url(location):
        return _read_path(location)
    timeout = sidecar_timeout() if timeout is None else timeout
    try:
        if client is not None:
            response = client.get(location, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as owned:
                response = owned.get(location)
    except httpx.HTTPError as exc:
        raise SidecarFetchFailed(location, str(exc) or type(exc).__name__) from exc
    return _check_response(location, response)


async def fetch_text_async(
    location: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> str:
    if not is_url(location):
        return await _read_path_async(location)
    timeout = sidecar_timeout() if timeout is None else timeout
    try:
        if client is not None:
            response = await client.get(location, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.get(location)
    except httpx.HTTPError as exc:
        raise SidecarFetchFailed(location, str(exc) or type(exc).__name__) from exc
    return _check_response(location, response)


def fetch_sidecar_text(
    reference: str,
    base_location: Optional[str],
    *,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> FetchedText:
    location = resolve_location(reference, base_location)
    logger.debug("Fetching sidecar %s", location)
    return FetchedText(location=location, text=fetch_text(location, client=client, timeout=timeout))


async def fetch_sidecar_text_async(
    reference: str,
    base_location: Optional[str],
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> FetchedText:
    location = resolve_location(reference, base_location)
    logger.debug("Fetching sidecar %s", location)
    text = await fetch_text_async(location, client=client, timeout=timeout)
    return FetchedText(location=location, text=text)


def pack_candidates(base: str, date_strings: Iterable[str], default_name: str = DEFAULT_PACK_NAME) -> List[str]:
    """Dated pack locations in order, then the default pack."""

    names = [f"{PACK_PREFIX}{date}.json" for date in date_strings if date]
    names.append(default_name if default_name.endswith(".json") else f"{default_name}.json")
    locations: List[str] = []
    for name in names:
        if is_url(base):
            location = urljoin(base if base.endswith("/") else base + "/", name)
        elif base:
            location = str(Path(base) / name)
        else:
            location = name
        if location not in locations:
            locations.append(location)
    return locations


def find_reference_pack(
    base: str,
    date_strings: Sequence[str],
    default_name: str = DEFAULT_PACK_NAME,
    *,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> Optional[FetchedText]:
    """Return the first candidate pack that can be read, or ``None``."""

    for location in pack_candidates(base, date_strings, default_name):
        try:
            text = fetch_text(location, client=client, timeout=timeout)
        except SidecarFetchFailed as exc:
            logger.debug("Reference pack candidate skipped: %s", exc)
            continue
        logger.info("Auto-loading reference pack %s", location)
        return FetchedText(location=location, text=text)
    logger.warning("No reference pack found under %s", base or ".")
    return None


async def find_reference_pack_async(
    base: str,
    date_strings: Sequence[str],
    default_name: str = DEFAULT_PACK_NAME,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> Optional[FetchedText]:
    for location in pack_candidates(base, date_strings, default_name):
        try:
            text = await fetch_text_async(location, client=client, timeout=timeout)
        except SidecarFetchFailed as exc:
            logger.debug("Reference pack candidate skipped: %s", exc)
            continue
        logger.info("Auto-loading reference pack %s", location)
        return FetchedText(location=location, text=text)
    logger.warning("No reference pack found under %s", base or ".")
    return None


__all__ = [
    "DEFAULT_PACK_NAME",
    "FetchedText",
    "fetch_sidecar_text",
    "fetch_sidecar_text_async",
    "fetch_text",
    "fetch_text_async",
    "find_reference_pack",
    "find_reference_pack_async",
    "is_url",
    "pack_candidates",
    "resolve_location",
]
