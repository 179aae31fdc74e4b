"""Persist and load CLI contest profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from slatesavvy.ingest.pipeline import parse_contest_config
from slatesavvy.models import ContestInput


@dataclass
class ContestProfile:
    contest: ContestInput

    @classmethod
    def load(cls, path: Path) -> "ContestProfile":
        """Read a contest JSON; accepts the loose keys a pack's ``contest`` block uses."""

        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return cls(contest=parse_contest_config(data))

    def save(self, path: Path) -> None:
        path.write_text(json.dumps(self.contest.model_dump(mode="json"), indent=2), encoding="utf-8")
