# tree_errors.py


class OpeningTreeError(Exception):
    """Base class for opening tree errors."""


class DataSourceError(OpeningTreeError):
    """The game store could not be read. Aborts a tree build."""


class MalformedMoveError(OpeningTreeError):
    """A move is empty, unparseable or illegal in the current position."""

    def __init__(self, move, reason=""):
        self.move = move
        self.reason = reason
        message = f"Cannot apply move {move!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class AmbiguousSideError(OpeningTreeError):
    """The tracked player could not be attributed a side in a game."""


class UnparseableDateError(OpeningTreeError):
    """A PGN date string could not be parsed."""


class BuildCancelledError(OpeningTreeError):
    """A tree build was cancelled by the caller."""
