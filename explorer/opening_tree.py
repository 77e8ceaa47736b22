# opening_tree.py

"""
Opening tree nodes and read-only queries over a built tree.
"""
import weakref
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import chess

from game_reference import GameReference


class OpeningTreeNode:
    """A position in the opening tree, reached by the moves on its path.

    Games are attached to every node along the part of their line that was
    replayed, so a node's counters describe all games passing through it.
    """

    def __init__(self, fen: str = chess.STARTING_FEN, move: Optional[str] = None,
                 ply: int = 0, parent: Optional["OpeningTreeNode"] = None):
        self._fen = fen
        self._move = move  # SAN of the move leading here, None at the root
        self._ply = ply
        # Non-owning: the parent owns its children, never the reverse.
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        # Moves from the root, fixed at creation so the path survives the
        # root being released.
        self._path: Tuple[str, ...] = parent._path if parent is not None else ()
        if move is not None:
            self._path += (move,)
        self._children: Dict[str, OpeningTreeNode] = {}
        self._games: List[GameReference] = []
        self._wins = 0
        self._draws = 0
        self._losses = 0
        self._frozen = False

    @property
    def fen(self):
        return self._fen

    @property
    def move(self):
        return self._move

    @property
    def ply(self):
        return self._ply

    @property
    def wins(self):
        return self._wins

    @property
    def draws(self):
        return self._draws

    @property
    def losses(self):
        return self._losses

    @property
    def parent(self):
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_root(self):
        return self.move is None

    @property
    def move_number(self):
        """Full-move number of the move that led here (0 at the root)."""
        return (self.ply + 1) // 2

    @property
    def children(self):
        return MappingProxyType(self._children)

    @property
    def games(self):
        return tuple(self._games)

    @property
    def game_count(self):
        return len(self._games)

    # --- Build-time mutators ---

    def _check_mutable(self):
        if self._frozen:
            raise RuntimeError("Opening tree is frozen; build a new tree instead")

    def add_game(self, game: GameReference):
        """Attach a game and update the counters."""
        self._check_mutable()
        if game.is_win():
            self._wins += 1
        elif game.is_draw():
            self._draws += 1
        elif game.is_loss():
            self._losses += 1
        else:
            raise ValueError(f"Game {game.game_id} has no outcome for "
                             f"{game.player_side}: {game.result!r}")
        self._games.append(game)

    def get_or_create_child(self, move: str, fen: str, ply: int):
        self._check_mutable()
        child = self._children.get(move)
        if child is None:
            child = OpeningTreeNode(fen, move, ply, parent=self)
            self._children[move] = child
        return child

    def freeze(self):
        """Make this node and its whole subtree read-only."""
        for node in iter_nodes(self):
            node._frozen = True

    @property
    def is_frozen(self):
        return self._frozen

    # --- Queries ---

    def get_child(self, move):
        return self._children.get(move)

    def children_sorted(self):
        """Children by descending game count; ties keep insertion order."""
        return sorted(self._children.values(), key=lambda c: c.game_count, reverse=True)

    def _pct(self, count):
        total = self.game_count
        if total == 0:
            return 0.0
        return count * 100.0 / total

    @property
    def win_pct(self):
        return self._pct(self.wins)

    @property
    def draw_pct(self):
        return self._pct(self.draws)

    @property
    def loss_pct(self):
        return self._pct(self.losses)

    def move_path(self):
        """Moves from the root to this node."""
        return list(self._path)

    def display_string(self):
        if self.move is None:
            return "Start Position"
        return (f"{self.move} (N={self.game_count}, W:{self.win_pct:.1f}% "
                f"D:{self.draw_pct:.1f}% L:{self.loss_pct:.1f}%)")

    def compact_display_string(self):
        if self.move is None:
            return f"Start (N={self.game_count})"
        return f"{self.move} (N={self.game_count}, {self.win_pct:.0f}%)"

    def __repr__(self):
        return f"<OpeningTreeNode {' '.join(self.move_path()) or 'start'} N={self.game_count}>"


@dataclass(frozen=True)
class TreeStatistics:
    total_games: int
    total_variations: int

    def __str__(self):
        return f"Total Games: {self.total_games}, Variations: {self.total_variations}"


def iter_nodes(root: OpeningTreeNode) -> Iterator[OpeningTreeNode]:
    """Depth-first, pre-order walk using an explicit stack."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        # reversed so children come out in insertion order
        stack.extend(reversed(list(node.children.values())))


def count_nodes(root):
    return sum(1 for _ in iter_nodes(root))


def navigate_to_node(root: OpeningTreeNode, move_path: Sequence[str]) -> Optional[OpeningTreeNode]:
    """Follow move_path from root. Returns None as soon as a step is missing."""
    node = root
    for move in move_path:
        node = node.get_child(move)
        if node is None:
            return None
    return node


def tree_statistics(root):
    return TreeStatistics(
        total_games=root.game_count,
        total_variations=count_nodes(root) - 1,  # root excluded
    )


def format_tree_lines(root, max_depth=4, min_games=1):
    """Render the tree as indented lines, most-played moves first.

    Args:
        root: Node to start from (not printed itself).
        max_depth: Deepest level below root to include.
        min_games: Skip nodes reached by fewer games than this.

    Returns:
        List of strings, one per node.
    """
    lines = []
    stack = [(child, 1) for child in reversed(root.children_sorted())]
    while stack:
        node, depth = stack.pop()
        if node.game_count < min_games:
            continue
        prefix = f"{node.move_number}." if node.ply % 2 == 1 else f"{node.move_number}..."
        lines.append(f"{'  ' * (depth - 1)}{prefix} {node.display_string()}")
        if depth < max_depth:
            stack.extend((child, depth + 1) for child in reversed(node.children_sorted()))
    return lines
