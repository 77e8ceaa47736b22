import datetime
from unittest.mock import MagicMock

from filter_criteria import FilterCriteria
from game_reference import GameReference
from game_store import GameRecord
from player_side import PlayerSide


def make_record(moves=None, white="Carlsen, Magnus", black="Opponent",
                result="1-0", date="2020.06.15", event="Test Open", game_id=1):
    """Build a GameRecord for builder/filter tests."""
    if moves is None:
        moves = ["e4", "e5", "Nf3", "Nc6"]
    return GameRecord(
        game_id=game_id,
        white=white,
        black=black,
        result=result,
        date=date,
        event=event,
        moves=list(moves),
    )


def make_reference(result="1-0", side=PlayerSide.WHITE, game_id=1,
                   white="Alice", black="Bob", date=None, event="Club"):
    """Build a GameReference directly for node tests."""
    if date is None:
        date = datetime.date(2021, 3, 4)
    return GameReference(
        game_id=game_id,
        white=white,
        black=black,
        result=result,
        date=date,
        event=event,
        player_side=side,
    )


def make_store(games):
    """A mock game store returning the same list from every query."""
    store = MagicMock()
    store.all_games.return_value = list(games)
    store.search_by_player.return_value = list(games)
    store.search_by_player_and_side.return_value = list(games)
    return store


def make_criteria(player_name="Carlsen", side=PlayerSide.BOTH, **kwargs):
    return FilterCriteria(player_name=player_name, side=side, **kwargs)


SAMPLE_PGN = """[Event "Casual Game"]
[Site "London"]
[Date "1851.06.21"]
[White "Anderssen, Adolf"]
[Black "Kieseritzky, Lionel"]
[Result "1-0"]

1. e4 e5 2. f4 exf4 3. Bc4 Qh4+ 4. Kf1 b5 5. Bxb5 Nf6 1-0

[Event "Casual Game"]
[Site "Paris"]
[Date "1858.??.??"]
[White "Morphy, Paul"]
[Black "Duke Karl / Count Isouard"]
[Result "1-0"]

1. e4 e5 2. Nf3 d6 3. d4 Bg4 1-0

[Event "Training"]
[Date "2020.01.05"]
[White "Anderssen, Adolf"]
[Black "Morphy, Paul"]
[Result "1/2-1/2"]

1. d4 d5 2. c4 1/2-1/2
"""
