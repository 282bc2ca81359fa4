"""
SQLite persistence for finished games.

A game is stored as one row in ``games`` plus one row per move in ``moves``.
The header and all of its moves are written in a single transaction. One
connection is shared between threads; every call holds the store lock for its
whole transaction.
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from .moves import GameRecord, GameResult, GameSummary, Move
from .utils import deserialize_positions, serialize_positions

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date_played TEXT NOT NULL,
    player_name TEXT NOT NULL,
    field_size INTEGER NOT NULL,
    mines_count INTEGER NOT NULL,
    mine_positions TEXT NOT NULL,
    game_result TEXT NOT NULL,
    total_moves INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_games_date_played ON games (date_played);
CREATE INDEX IF NOT EXISTS idx_games_player_name ON games (player_name);

CREATE TABLE IF NOT EXISTS moves (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id INTEGER NOT NULL REFERENCES games (id) ON DELETE CASCADE,
    move_number INTEGER NOT NULL,
    row_coord INTEGER NOT NULL,
    col_coord INTEGER NOT NULL,
    move_type TEXT NOT NULL,
    result TEXT NOT NULL,
    UNIQUE (game_id, move_number)
);
"""

SUMMARY_COLUMNS = "id, date_played, player_name, field_size, mines_count, game_result, total_moves"


class StorageError(Exception):
    """A store/fetch/list/delete call failed. Nothing is retried."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class GameStore:

    def __init__(self, path="minesweeper.db"):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._connection = None
        self._lock = threading.RLock()

    def _connect(self):
        if self._connection is None:
            try:
                connection = sqlite3.connect(self.path, check_same_thread=False)
                connection.execute("PRAGMA foreign_keys = ON")
                connection.executescript(SCHEMA)
            except sqlite3.Error as exc:
                raise StorageError(f"Could not open database {self.path}: {exc}") from exc
            connection.row_factory = sqlite3.Row
            self._connection = connection
        return self._connection

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def store(self, record: GameRecord) -> int:
        """Save the header and every move atomically and return the new id."""
        with self._lock:
            connection = self._connect()
            try:
                with connection:
                    cursor = connection.execute(
                        "INSERT INTO games (date_played, player_name, field_size, mines_count, "
                        "mine_positions, game_result, total_moves, created_at) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            record.played_at.isoformat(),
                            record.player,
                            record.size,
                            record.mine_count,
                            json.dumps(serialize_positions(record.mine_positions)),
                            record.result.value,
                            record.total_moves,
                            datetime.now().isoformat(),
                        ),
                    )
                    game_id = cursor.lastrowid
                    connection.executemany(
                        "INSERT INTO moves (game_id, move_number, row_coord, col_coord, move_type, result) "
                        "VALUES (?, ?, ?, ?, ?, ?)",
                        [
                            (game_id, m.sequence_number, m.row, m.col, m.move_type.value, m.outcome.value)
                            for m in record.moves
                        ],
                    )
            except sqlite3.Error as exc:
                logger.error("Failed to save game for %r: %s", record.player, exc)
                raise StorageError(f"Could not save game: {exc}") from exc

        logger.info("Saved game %d (%d moves)", game_id, len(record.moves))
        return game_id

    def fetch(self, game_id):
        """Return the GameRecord with moves in order, or None if unknown."""
        with self._lock:
            connection = self._connect()
            try:
                game = connection.execute("SELECT * FROM games WHERE id = ?", (game_id,)).fetchone()
                if game is None:
                    return None
                moves = connection.execute(
                    "SELECT move_number, row_coord, col_coord, move_type, result FROM moves "
                    "WHERE game_id = ? ORDER BY move_number",
                    (game_id,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Could not load game {game_id}: {exc}") from exc

        return GameRecord(
            id=game["id"],
            player=game["player_name"],
            played_at=datetime.fromisoformat(game["date_played"]),
            size=game["field_size"],
            mine_count=game["mines_count"],
            mine_positions=tuple(deserialize_positions(json.loads(game["mine_positions"]))),
            result=GameResult(game["game_result"]),
            total_moves=game["total_moves"],
            moves=tuple(
                Move.from_dict({
                    "move_number": m["move_number"],
                    "row": m["row_coord"],
                    "col": m["col_coord"],
                    "move_type": m["move_type"],
                    "result": m["result"],
                })
                for m in moves
            ),
        )

    def list(self):
        """Summaries of every stored game, most recent first."""
        with self._lock:
            connection = self._connect()
            try:
                rows = connection.execute(
                    f"SELECT {SUMMARY_COLUMNS} FROM games ORDER BY date_played DESC, id DESC"
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Could not list games: {exc}") from exc

        return [
            GameSummary(
                id=row["id"],
                player=row["player_name"],
                played_at=datetime.fromisoformat(row["date_played"]),
                size=row["field_size"],
                mine_count=row["mines_count"],
                result=GameResult(row["game_result"]),
                total_moves=row["total_moves"],
            )
            for row in rows
        ]

    def delete(self, game_id) -> bool:
        with self._lock:
            connection = self._connect()
            try:
                with connection:
                    connection.execute("DELETE FROM moves WHERE game_id = ?", (game_id,))
                    deleted = connection.execute("DELETE FROM games WHERE id = ?", (game_id,)).rowcount
            except sqlite3.Error as exc:
                raise StorageError(f"Could not delete game {game_id}: {exc}") from exc

        if deleted:
            logger.info("Deleted game %s", game_id)
        return bool(deleted)

    def count(self) -> int:
        with self._lock:
            connection = self._connect()
            try:
                return connection.execute("SELECT COUNT(*) FROM games").fetchone()[0]
            except sqlite3.Error as exc:
                raise StorageError(f"Could not count games: {exc}") from exc
