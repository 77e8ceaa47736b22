import sqlite3

import pytest

from game_store import GameRecord, GameStore
from tree_errors import DataSourceError
from helpers import SAMPLE_PGN


@pytest.fixture
def store(tmp_path):
    """Create a GameStore with a temp DB file."""
    db_path = str(tmp_path / "test_games.db")
    s = GameStore(db_path)
    yield s
    s.close()


def _add(store, white, black, result="1-0", moves=("e4", "e5")):
    return store.add_game(GameRecord(white=white, black=black, result=result,
                                     date="2020.01.01", event="Test", moves=list(moves)))


class TestAddAndGet:
    def test_add_assigns_id(self, store):
        game_id = _add(store, "Alice", "Bob")
        assert game_id == 1
        record = store.get_game_by_id(game_id)
        assert record.white == "Alice"
        assert record.black == "Bob"
        assert record.moves == ["e4", "e5"]
        assert record.date == "2020.01.01"

    def test_get_missing_returns_none(self, store):
        assert store.get_game_by_id(999) is None

    def test_game_count(self, store):
        _add(store, "Alice", "Bob")
        _add(store, "Carol", "Dave")
        assert store.game_count() == 2

    def test_empty_move_text_preserved(self, store):
        game_id = _add(store, "Alice", "Bob", moves=["e4", "e5", ""])
        assert store.get_game_by_id(game_id).moves == ["e4", "e5", ""]


class TestSearch:
    def test_search_by_player_either_side(self, store):
        _add(store, "Carlsen, Magnus", "Anand")
        _add(store, "Caruana", "Carlsen, Magnus")
        _add(store, "Nakamura", "So")
        results = store.search_by_player("carlsen")
        assert [r.game_id for r in results] == [1, 2]

    def test_search_by_player_and_side(self, store):
        _add(store, "Carlsen, Magnus", "Anand")
        _add(store, "Caruana", "Carlsen, Magnus")
        assert [r.game_id for r in store.search_by_player_and_side("Carlsen", True)] == [1]
        assert [r.game_id for r in store.search_by_player_and_side("Carlsen", False)] == [2]

    def test_all_games_in_id_order(self, store):
        for name in ["A", "B", "C"]:
            _add(store, name, "X")
        assert [r.white for r in store.all_games()] == ["A", "B", "C"]

    def test_search_folds_non_ascii_case(self, store):
        _add(store, "Öztürk, Ali", "Anand")
        _add(store, "Kasparov", "ÖZTÜRK, Ali")
        assert [r.game_id for r in store.search_by_player("öztürk")] == [1, 2]
        assert [r.game_id for r in store.search_by_player_and_side("öztürk", False)] == [2]
        assert set(store.find_player_names("ÖZT")) == {"Öztürk, Ali", "ÖZTÜRK, Ali"}

    def test_like_wildcards_are_literal(self, store):
        _add(store, "Alice", "Bob")
        assert store.search_by_player("%") == []
        assert store.search_by_player("_") == []

    def test_find_player_names(self, store):
        _add(store, "Carlsen, Magnus", "Anand")
        _add(store, "Caruana, Fabiano", "Carlsen, Magnus")
        assert store.find_player_names("car") == ["Carlsen, Magnus", "Caruana, Fabiano"]
        assert store.find_player_names("car", limit=1) == ["Carlsen, Magnus"]


class TestImportPgn:
    def test_import_text(self, store):
        stats = store.import_pgn_text(SAMPLE_PGN)
        assert stats.games_imported == 3
        assert stats.games_skipped == 0
        games = store.all_games()
        assert games[0].white == "Anderssen, Adolf"
        assert games[0].moves[:4] == ["e4", "e5", "f4", "exf4"]
        assert games[1].date == "1858.??.??"
        assert games[2].result == "1/2-1/2"

    def test_import_file(self, store, tmp_path):
        pgn_path = tmp_path / "games.pgn"
        pgn_path.write_text(SAMPLE_PGN, encoding="utf-8")
        calls = []
        stats = store.import_pgn(str(pgn_path), progress_callback=calls.append)
        assert stats.games_imported == 3
        assert calls == [1, 2, 3]
        assert len(store.search_by_player("morphy")) == 2

    def test_game_without_moves_skipped(self, store):
        stats = store.import_pgn_text('[White "A"]\n[Black "B"]\n[Result "*"]\n\n*\n')
        assert stats.games_imported == 0
        assert stats.games_skipped == 1

    def test_missing_file_raises(self, store, tmp_path):
        with pytest.raises(DataSourceError):
            store.import_pgn(str(tmp_path / "nope.pgn"))


class TestFailures:
    def test_closed_store_raises(self, store):
        store.close()
        with pytest.raises(DataSourceError):
            store.all_games()

    def test_sqlite_error_wrapped(self, store):
        store._conn.execute("DROP TABLE games")
        with pytest.raises(DataSourceError) as exc_info:
            store.search_by_player("x")
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)
