# move_engine.py

import logging

import chess

from tree_errors import MalformedMoveError

logger = logging.getLogger(__name__)


class MoveEngine:
    """Tracks a board and applies SAN moves to it.

    Legality, disambiguation and check detection are delegated to
    python-chess.
    """

    def __init__(self):
        self._board = chess.Board()

    def reset(self):
        """Return to the standard starting position."""
        self._board.reset()

    def push(self, san):
        """Apply a move in SAN notation.

        Raises:
            MalformedMoveError: if the move is empty, unparseable, ambiguous
                or illegal in the current position.
        """
        if not san or not san.strip():
            raise MalformedMoveError(san, "empty move")
        try:
            self._board.push_san(san.strip())
        except ValueError as e:
            # InvalidMoveError, IllegalMoveError and AmbiguousMoveError
            raise MalformedMoveError(san, str(e)) from e

    def apply_move(self, san):
        """Apply a SAN move. Returns True if it was legal and applied."""
        try:
            self.push(san)
        except MalformedMoveError as e:
            logger.debug("%s", e)
            return False
        return True

    def fen(self):
        return self._board.fen()

    def ply(self):
        """Half-moves played since the starting position."""
        return self._board.ply()

    def move_number(self):
        return self._board.fullmove_number

    def move_history(self):
        """SAN moves played so far."""
        replay = chess.Board()
        history = []
        for move in self._board.move_stack:
            history.append(replay.san(move))
            replay.push(move)
        return history
