"""Error taxonomy shared by parsers, the reconciler and the session."""

from __future__ import annotations

from dataclasses import dataclass


class SlateSavvyError(Exception):
    """Base class for errors raised by the core."""


class MalformedPipelinePayload(SlateSavvyError, ValueError):
    """Raised when a pipeline JSON lacks required structure."""


class ReferencePackRequired(SlateSavvyError):
    """Raised when an optimizer export arrives before any reference pool exists."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or (
                "Reference pack not loaded. Load pipeline_YYYY-MM-DD.json first so "
                "DraftKings numeric IDs map to players correctly."
            )
        )


class AmbiguousFormat(SlateSavvyError, ValueError):
    """Raised when an uploaded CSV cannot be confidently classified."""

    def __init__(self, message: str, candidates: tuple[str, ...] = ()):
        super().__init__(message)
        self.candidates = candidates


class SidecarFetchFailed(SlateSavvyError):
    """Raised when an optional sidecar file cannot be fetched."""

    def __init__(self, reference: str, reason: str):
        super().__init__(f"Sidecar {reference!r} unavailable: {reason}")
        self.reference = reference
        self.reason = reason


@dataclass(frozen=True)
class UnresolvedIdentifier:
    """A roster entry that matched no player in the active pool.

    Never raised; collected per lineup and summarized into warnings.
    """

    lineup_id: str
    raw: str


__all__ = [
    "AmbiguousFormat",
    "MalformedPipelinePayload",
    "ReferencePackRequired",
    "SidecarFetchFailed",
    "SlateSavvyError",
    "UnresolvedIdentifier",
]
