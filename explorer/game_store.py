# game_store.py

import io
import json
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import List, Optional

import chess
import chess.pgn

from tree_errors import DataSourceError

logger = logging.getLogger(__name__)


@dataclass
class GameRecord:
    """A stored game: header metadata plus the mainline as SAN strings."""
    white: str
    black: str
    result: str
    date: Optional[str] = None   # raw PGN Date tag, e.g. "2023.05.15"
    event: Optional[str] = None
    moves: List[str] = field(default_factory=list)
    game_id: Optional[int] = None


@dataclass
class ImportStats:
    games_imported: int = 0
    games_skipped: int = 0
    errors: List[str] = field(default_factory=list)


def _casefold(value):
    return value.casefold() if value else value


def _like_pattern(text):
    """Case-folded substring LIKE pattern with %, _ and the escape char escaped."""
    escaped = text.casefold().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class GameStore:
    """SQLite store of game records, searchable by player and side.

    Player searches are case-insensitive substring matches. Results are
    always returned in insertion (id) order so tree builds are repeatable.
    Any database failure is raised as DataSourceError.
    """

    def __init__(self, db_path):
        self.db_path = db_path
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            # LIKE only folds ASCII; names are compared through casefold() instead.
            self._conn.create_function("casefold", 1, _casefold, deterministic=True)
            self._create_tables()
        except sqlite3.Error as e:
            raise DataSourceError(f"Cannot open game store {db_path}: {e}") from e

    def _create_tables(self):
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS games (
                id      INTEGER PRIMARY KEY AUTOINCREMENT,
                white   TEXT NOT NULL,
                black   TEXT NOT NULL,
                result  TEXT NOT NULL,
                date    TEXT,
                event   TEXT,
                moves   TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_games_white ON games(white);
            CREATE INDEX IF NOT EXISTS idx_games_black ON games(black);
        """)
        self._conn.commit()

    def _query(self, sql, params=()):
        if self._conn is None:
            raise DataSourceError("Game store is closed")
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise DataSourceError(f"Game store query failed: {e}") from e

    @staticmethod
    def _row_to_record(row):
        return GameRecord(
            game_id=row["id"],
            white=row["white"],
            black=row["black"],
            result=row["result"],
            date=row["date"],
            event=row["event"],
            moves=json.loads(row["moves"]) if row["moves"] else [],
        )

    # --- Queries ---

    _SELECT = "SELECT id, white, black, result, date, event, moves FROM games"

    def search_by_player(self, name):
        """Games where name appears in either the white or the black name."""
        pattern = _like_pattern(name)
        rows = self._query(
            f"""{self._SELECT}
                WHERE casefold(white) LIKE ? ESCAPE '\\'
                   OR casefold(black) LIKE ? ESCAPE '\\'
                ORDER BY id""",
            (pattern, pattern)
        )
        return [self._row_to_record(r) for r in rows]

    def search_by_player_and_side(self, name, is_white):
        column = "white" if is_white else "black"
        rows = self._query(
            f"{self._SELECT} WHERE casefold({column}) LIKE ? ESCAPE '\\' ORDER BY id",
            (_like_pattern(name),)
        )
        return [self._row_to_record(r) for r in rows]

    def all_games(self):
        rows = self._query(f"{self._SELECT} ORDER BY id")
        return [self._row_to_record(r) for r in rows]

    def get_game_by_id(self, game_id):
        """Return a GameRecord, or None."""
        rows = self._query(f"{self._SELECT} WHERE id = ?", (game_id,))
        return self._row_to_record(rows[0]) if rows else None

    def game_count(self):
        return self._query("SELECT COUNT(*) AS n FROM games")[0]["n"]

    def find_player_names(self, term, limit=20):
        """Distinct player names containing term, sorted, at most limit."""
        pattern = _like_pattern(term)
        rows = self._query(
            """SELECT name FROM (
                   SELECT white AS name FROM games WHERE casefold(white) LIKE ? ESCAPE '\\'
                   UNION
                   SELECT black AS name FROM games WHERE casefold(black) LIKE ? ESCAPE '\\'
               )
               ORDER BY name COLLATE NOCASE
               LIMIT ?""",
            (pattern, pattern, limit)
        )
        return [r["name"] for r in rows]

    # --- Writes ---

    _INSERT_SQL = """INSERT INTO games (white, black, result, date, event, moves)
        VALUES (?, ?, ?, ?, ?, ?)"""

    @staticmethod
    def _record_to_row(record):
        return (
            record.white, record.black, record.result,
            record.date, record.event, json.dumps(record.moves),
        )

    def add_game(self, record):
        """Store a record and return its new id."""
        if self._conn is None:
            raise DataSourceError("Game store is closed")
        try:
            cursor = self._conn.execute(self._INSERT_SQL, self._record_to_row(record))
            self._conn.commit()
        except sqlite3.Error as e:
            raise DataSourceError(f"Cannot store game: {e}") from e
        record.game_id = cursor.lastrowid
        return record.game_id

    @staticmethod
    def record_from_pgn_game(game):
        """Build a GameRecord from a chess.pgn.Game's headers and mainline."""
        headers = game.headers
        board = game.board()
        moves = []
        for move in game.mainline_moves():
            moves.append(board.san(move))
            board.push(move)
        return GameRecord(
            white=headers.get("White", "?"),
            black=headers.get("Black", "?"),
            result=headers.get("Result", "*"),
            date=headers.get("Date"),
            event=headers.get("Event"),
            moves=moves,
        )

    def import_pgn_text(self, pgn_text, progress_callback=None):
        return self._import(io.StringIO(pgn_text), progress_callback)

    def import_pgn(self, pgn_path, progress_callback=None):
        """Import every game of a PGN file.

        Args:
            pgn_path: Path to a .pgn file.
            progress_callback: Optional callable(games_imported).

        Returns:
            ImportStats with imported/skipped counts.
        """
        try:
            with open(pgn_path, encoding="utf-8", errors="replace") as handle:
                return self._import(handle, progress_callback)
        except OSError as e:
            raise DataSourceError(f"Cannot read {pgn_path}: {e}") from e

    def _import(self, handle, progress_callback):
        stats = ImportStats()
        rows = []
        while True:
            game = chess.pgn.read_game(handle)
            if game is None:
                break
            if game.errors:
                # python-chess stops the mainline at the first bad move;
                # keep the legal prefix.
                stats.errors.append(f"{game.headers.get('White', '?')} vs "
                                    f"{game.headers.get('Black', '?')}: {game.errors[0]}")
            record = self.record_from_pgn_game(game)
            if not record.moves:
                stats.games_skipped += 1
                continue
            rows.append(self._record_to_row(record))
            stats.games_imported += 1
            if progress_callback:
                progress_callback(stats.games_imported)

        if self._conn is None:
            raise DataSourceError("Game store is closed")
        try:
            self._conn.executemany(self._INSERT_SQL, rows)
            self._conn.commit()
        except sqlite3.Error as e:
            raise DataSourceError(f"Cannot store imported games: {e}") from e

        logger.info("Imported %d games (%d skipped, %d with move errors)",
                    stats.games_imported, stats.games_skipped, len(stats.errors))
        return stats

    def close(self):
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
