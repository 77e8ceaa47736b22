# tree_builder.py

import logging
from dataclasses import dataclass
from typing import Callable

from filter_criteria import FilterCriteria
from game_reference import GameReference
from move_engine import MoveEngine
from opening_tree import OpeningTreeNode, count_nodes
from pgn_date import parse_pgn_date
from player_side import PlayerSide, resolve_tracked_side
from tree_errors import (AmbiguousSideError, BuildCancelledError, DataSourceError,
                         MalformedMoveError)

logger = logging.getLogger(__name__)

PHASE_FETCHING = "fetching"
PHASE_BUILDING = "building"


@dataclass
class BuildCounters:
    """Per-build bookkeeping, reported in the log."""
    fetched: int = 0
    retained: int = 0
    skipped_side: int = 0
    truncated: int = 0


class TreeBuilder:
    """Builds an opening tree from the games in a store that match a filter."""

    MAX_OPENING_PLIES = 20

    def __init__(self, store, engine_factory: Callable[[], MoveEngine] = MoveEngine,
                 max_plies: int = MAX_OPENING_PLIES):
        self.store = store
        self.engine_factory = engine_factory
        self.max_plies = max_plies

    def build_tree(self, criteria: FilterCriteria, progress_callback=None,
                   cancel_event=None) -> OpeningTreeNode:
        """Build a fresh opening tree for the given filter.

        Args:
            criteria: FilterCriteria selecting games and the tracked player.
            progress_callback: Optional callable(phase, current=None, total=None),
                called with "fetching" once, then "building" per game.
            cancel_event: Optional threading.Event checked between games.

        Returns:
            The frozen root node.

        Raises:
            DataSourceError: the store could not be read.
            BuildCancelledError: cancel_event was set during the build.
        """
        counters = BuildCounters()

        if progress_callback:
            progress_callback(PHASE_FETCHING)
        candidates = self._fetch_games(criteria)
        counters.fetched = len(candidates)

        games = [g for g in candidates if self._matches_filters(g, criteria)]
        counters.retained = len(games)

        root = OpeningTreeNode()
        total = len(games)
        for i, game in enumerate(games):
            if cancel_event is not None and cancel_event.is_set():
                raise BuildCancelledError(f"Build cancelled after {i} of {total} games")
            if progress_callback:
                progress_callback(PHASE_BUILDING, i + 1, total)

            try:
                self._process_game(game, root, criteria, counters)
            except AmbiguousSideError as e:
                counters.skipped_side += 1
                logger.debug("Skipping game %s: %s", game.game_id, e)

        root.freeze()
        logger.info(
            "Built opening tree for %s: %d fetched, %d matched filters, "
            "%d skipped (side/result), %d truncated, %d nodes",
            criteria.describe(), counters.fetched, counters.retained,
            counters.skipped_side, counters.truncated, count_nodes(root) - 1)
        return root

    def _fetch_games(self, criteria):
        """Query the store for candidate games."""
        try:
            if criteria.has_player:
                if criteria.side is PlayerSide.WHITE:
                    return list(self.store.search_by_player_and_side(criteria.player_name, True))
                if criteria.side is PlayerSide.BLACK:
                    return list(self.store.search_by_player_and_side(criteria.player_name, False))
                return list(self.store.search_by_player(criteria.player_name))
            return list(self.store.all_games())
        except DataSourceError:
            raise
        except Exception as e:
            raise DataSourceError(f"Error reading games: {e}") from e

    @staticmethod
    def _opponent_for(game, criteria):
        side = resolve_tracked_side(criteria.player_name, game.white, game.black)
        if side is PlayerSide.WHITE:
            return game.black
        if side is PlayerSide.BLACK:
            return game.white
        return None

    def _matches_filters(self, game, criteria):
        if not criteria.is_date_in_range(parse_pgn_date(game.date)):
            return False
        return criteria.matches_opponent(self._opponent_for(game, criteria))

    def _process_game(self, game, root, criteria, counters):
        """Replay one game's opening into the tree.

        Raises:
            AmbiguousSideError: the game has no attributable side or outcome.
        """
        side = resolve_tracked_side(criteria.player_name, game.white, game.black)
        if side is PlayerSide.BOTH:
            raise AmbiguousSideError(
                f"{criteria.player_name!r} not found in {game.white!r} vs {game.black!r}")
        if not side.has_outcome(game.result):
            raise AmbiguousSideError(f"No outcome for result {game.result!r}")

        ref = GameReference(
            game_id=game.game_id,
            white=game.white,
            black=game.black,
            result=game.result,
            date=parse_pgn_date(game.date),
            event=game.event,
            player_side=side,
        )

        engine = self.engine_factory()
        engine.reset()
        node = root
        for move in game.moves[:self.max_plies]:
            try:
                engine.push(move)
            except MalformedMoveError as e:
                counters.truncated += 1
                logger.debug("Game %s truncated at ply %d: %s",
                             game.game_id, node.ply + 1, e)
                break

            node = node.get_or_create_child(move, engine.fen(), engine.ply())
            node.add_game(ref)
