#!/usr/bin/env python3
"""CLI to build and browse an opening tree from a database of PGN games."""

import argparse
import asyncio
import logging
import os
import sys
from datetime import date

# Add explorer/ to import path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "explorer"))

from build_service import TreeBuildService
from filter_criteria import EARLIEST_DATE, FilterCriteria
from game_store import GameStore
from move_engine import MoveEngine
from opening_tree import format_tree_lines, navigate_to_node, tree_statistics
from pgn_date import parse_pgn_date_strict
from player_side import PlayerSide
from tree_builder import TreeBuilder
from tree_errors import DataSourceError, UnparseableDateError

# Paths relative to this script
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_DB = os.path.join(BASE_DIR, "data", "games.db")

DEFAULT_DEPTH = 4
DEFAULT_GAME_LIMIT = 20


def _parse_date_arg(text):
    """argparse type for --from/--to; accepts PGN or ISO dates."""
    try:
        return parse_pgn_date_strict(text)
    except UnparseableDateError as e:
        raise argparse.ArgumentTypeError(str(e))


def _parse_side_arg(text):
    try:
        return PlayerSide.from_string(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def import_games(store, pgn_paths):
    """Import PGN files into the store, printing a summary per file."""
    for path in pgn_paths:
        print(f"Importing {path}...")

        def progress(count):
            if count % 100 == 0:
                print(f"  Imported {count} games...", end="\r")

        stats = store.import_pgn(path, progress_callback=progress)
        print(f"  {stats.games_imported} games imported, {stats.games_skipped} skipped")
        if stats.errors:
            print(f"  {len(stats.errors)} games had illegal moves (kept up to the first error)")


def build_criteria(args):
    return FilterCriteria(
        player_name=args.player,
        side=args.side,
        start_date=args.start or EARLIEST_DATE,
        end_date=args.end or date.today(),
        opponent=args.opponent,
    )


def run_build(store, criteria):
    """Build a tree on the worker thread, reporting both progress phases."""

    def progress(phase, current=None, total=None):
        if current is None:
            print(f"  {phase.capitalize()} games...")
        elif current % 50 == 0 or current == total:
            print(f"  {phase.capitalize()} {current}/{total}...", end="\r")

    with TreeBuildService(store) as service:
        root = asyncio.run(service.build_tree_async(criteria, progress_callback=progress))
    print()  # clear the \r line
    return root


def show_tree(root, line, depth, min_games):
    """Print statistics and the most-played continuations from line."""
    stats = tree_statistics(root)
    in_tree = sum(child.game_count for child in root.children.values())
    print(f"\n--- Opening Tree ({stats}) ---")
    print(f"  Games in tree: {in_tree}")

    node = navigate_to_node(root, line)
    if node is None:
        print(f"  Line not found: {' '.join(line)}")
        return False

    if line:
        print(f"\n  After {' '.join(line)}: {node.display_string()}")
    lines = format_tree_lines(node, max_depth=depth, min_games=min_games)
    if not lines:
        print("  No continuations.")
    for text in lines:
        print(f"    {text}")
    return True


def _outcome_tag(ref):
    if ref.is_win():
        return "W"
    if ref.is_draw():
        return "D"
    return "L"


def game_line(record, max_plies=TreeBuilder.MAX_OPENING_PLIES):
    """SAN of the playable opening of a stored game, as replayed."""
    engine = MoveEngine()
    for move in record.moves[:max_plies]:
        if not engine.apply_move(move):
            break
    return engine.move_history()


def show_games(store, root, line, limit):
    """List the games that reached line, with their opening moves."""
    node = navigate_to_node(root, line)
    if node is None:
        return
    games = node.games
    print(f"\n--- Games through {' '.join(line) or 'start'} ({len(games)}) ---")
    for ref in games[:limit]:
        print(f"  [{_outcome_tag(ref)}] {ref}")
        record = store.get_game_by_id(ref.game_id)
        if record is not None:
            print(f"      {' '.join(game_line(record))}")
    if len(games) > limit:
        print(f"  ... and {len(games) - limit} more")


def search_players(store, term, limit):
    names = store.find_player_names(term, limit=limit)
    if not names:
        print(f"No players matching {term!r}")
    for name in names:
        print(f"  {name}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build an opening tree from a PGN game database")
    parser.add_argument("--db", default=DEFAULT_DB,
                        help="SQLite game database (created if missing)")
    parser.add_argument("--import", dest="pgn_files", nargs="+", metavar="PGN",
                        help="Import these PGN files into the database first")
    parser.add_argument("--player", help="Tracked player name (substring, case-insensitive)")
    parser.add_argument("--side", type=_parse_side_arg, default=PlayerSide.BOTH,
                        help="white, black or both (default: both)")
    parser.add_argument("--from", dest="start", type=_parse_date_arg,
                        help="Earliest game date (YYYY.MM.DD or YYYY-MM-DD)")
    parser.add_argument("--to", dest="end", type=_parse_date_arg,
                        help="Latest game date (default: today)")
    parser.add_argument("--opponent", help="Opponent name filter (substring, case-insensitive)")
    parser.add_argument("--line", nargs="*", default=[], metavar="MOVE",
                        help="Show continuations after these SAN moves, e.g. --line e4 c5")
    parser.add_argument("--depth", type=int, default=DEFAULT_DEPTH,
                        help=f"Plies to print below the line (default: {DEFAULT_DEPTH})")
    parser.add_argument("--min-games", type=int, default=1,
                        help="Only print moves played in N+ games (default: 1)")
    parser.add_argument("--games", action="store_true",
                        help="List the games that reached --line")
    parser.add_argument("--limit", type=int, default=DEFAULT_GAME_LIMIT,
                        help=f"Max games or player names to list (default: {DEFAULT_GAME_LIMIT})")
    parser.add_argument("--search-player", metavar="TERM",
                        help="List stored player names containing TERM and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    db_dir = os.path.dirname(args.db)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    try:
        store = GameStore(args.db)
    except DataSourceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        if args.pgn_files:
            import_games(store, args.pgn_files)

        if args.search_player:
            search_players(store, args.search_player, args.limit)
            return

        criteria = build_criteria(args)
        print(f"Building tree: {criteria.describe()}")
        if not criteria.has_player:
            print("  Note: no --player given; games cannot be attributed to a side "
                  "and will not contribute to the tree.")

        root = run_build(store, criteria)
        if not show_tree(root, args.line, args.depth, args.min_games):
            sys.exit(1)
        if args.games:
            show_games(store, root, args.line, args.limit)
    except DataSourceError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
