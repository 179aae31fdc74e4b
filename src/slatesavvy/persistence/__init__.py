"""Persistence for user preferences: last contest parameters and belief profile."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol, Sequence
from uuid import uuid4

from pydantic import ValidationError

from slatesavvy.models import ContestInput, Player


logger = logging.getLogger(__name__)

DB_PATH_ENV = "SLATESAVVY_DB_PATH"
DEFAULT_DB_PATH = Path.home() / ".slatesavvy" / "slatesavvy.sqlite"


@dataclass
class BeliefProfile:
    profile_id: str
    name: str
    players: List[Player]
    saved_at: datetime


class PreferenceStore(Protocol):
    """Load/save capability injected into a session."""

    def load_contest_input(self) -> Optional[ContestInput]: ...

    def save_contest_input(self, contest: ContestInput) -> None: ...

    def load_beliefs(self) -> Optional[BeliefProfile]: ...

    def save_beliefs(self, players: Sequence[Player], name: str) -> BeliefProfile: ...

    def clear_beliefs(self) -> None: ...


class SqlitePreferenceStore:
    """SQLite-backed :class:`PreferenceStore`."""

    def __init__(self, db_path: Path | str | None = None):
        self._use_uri = False
        env_db = os.getenv(DB_PATH_ENV)
        if db_path is not None:
            self.db_path: Path | str = Path(db_path)
        elif env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif os.getenv("PYTEST_CURRENT_TEST"):
            test_dir = Path(tempfile.gettempdir()) / "slatesavvy-test"
            test_dir.mkdir(parents=True, exist_ok=True)
            self.db_path = test_dir / "slatesavvy.sqlite"
        else:
            self.db_path = DEFAULT_DB_PATH
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS contest_inputs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                saved_at TEXT NOT NULL,
                input_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS belief_profiles (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                players_json TEXT NOT NULL,
                saved_at TEXT NOT NULL,
                active INTEGER NOT NULL DEFAULT 1
            )
            """
        )
        conn.commit()

    def save_contest_input(self, contest: ContestInput) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO contest_inputs (saved_at, input_json) VALUES (?, ?)",
                (datetime.now(timezone.utc).isoformat(), contest.model_dump_json()),
            )
            conn.commit()

    def load_contest_input(self) -> Optional[ContestInput]:
        with self._connect() as conn:
            row = conn.execute("SELECT input_json FROM contest_inputs ORDER BY id DESC LIMIT 1").fetchone()
        if row is None:
            return None
        try:
            return ContestInput.model_validate_json(row["input_json"])
        except ValidationError as exc:
            logger.warning("Stored contest parameters are invalid and were ignored: %s", exc)
            return None

    def save_beliefs(self, players: Sequence[Player], name: str) -> BeliefProfile:
        profile_id = uuid4().hex
        saved_at = datetime.now(timezone.utc)
        payload = json.dumps([player.model_dump(mode="json") for player in players])
        with self._connect() as conn:
            conn.execute("UPDATE belief_profiles SET active = 0 WHERE active = 1")
            conn.execute(
                "INSERT INTO belief_profiles (id, name, players_json, saved_at, active) VALUES (?, ?, ?, ?, 1)",
                (profile_id, name, payload, saved_at.isoformat()),
            )
            conn.commit()
        return BeliefProfile(profile_id=profile_id, name=name, players=list(players), saved_at=saved_at)

    def load_beliefs(self) -> Optional[BeliefProfile]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM belief_profiles WHERE active = 1 ORDER BY datetime(saved_at) DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        try:
            players = [Player.model_validate(item) for item in json.loads(row["players_json"])]
        except (ValidationError, ValueError) as exc:
            logger.warning("Stored belief profile %s is invalid and was ignored: %s", row["name"], exc)
            return None
        return BeliefProfile(
            profile_id=row["id"],
            name=row["name"],
            players=players,
            saved_at=datetime.fromisoformat(row["saved_at"]),
        )

    def clear_beliefs(self) -> None:
        with self._connect() as conn:
            conn.execute("UPDATE belief_profiles SET active = 0 WHERE active = 1")
            conn.commit()


__all__ = [
    "BeliefProfile",
    "DB_PATH_ENV",
    "PreferenceStore",
    "SqlitePreferenceStore",
]
