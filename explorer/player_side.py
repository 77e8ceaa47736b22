# player_side.py

from enum import Enum
from typing import Optional


DRAW_RESULTS = ("1/2-1/2", "1/2")


class PlayerSide(Enum):
    """The color a tracked player had in a game, with its result semantics."""

    WHITE = ("White", "1-0", "0-1")
    BLACK = ("Black", "0-1", "1-0")
    BOTH = ("Both", None, None)

    def __init__(self, display_name, win_result, loss_result):
        self.display_name = display_name
        self.win_result = win_result
        self.loss_result = loss_result

    def __str__(self):
        return self.display_name

    @classmethod
    def from_string(cls, text):
        """Parse "white", "black" or "both" (any case) into a PlayerSide."""
        key = (text or "").strip().upper()
        if key not in cls.__members__:
            raise ValueError(f"Unknown side: {text!r} (expected white, black or both)")
        return cls[key]

    def is_win(self, result):
        if self is PlayerSide.BOTH:
            return False
        return result == self.win_result

    def is_loss(self, result):
        if self is PlayerSide.BOTH:
            return False
        return result == self.loss_result

    def is_draw(self, result):
        # Independent of side, BOTH included.
        return result in DRAW_RESULTS

    def has_outcome(self, result):
        """True if the result is a win, draw or loss from this side's perspective."""
        return self.is_win(result) or self.is_draw(result) or self.is_loss(result)


def resolve_tracked_side(player_name: Optional[str], white: Optional[str],
                         black: Optional[str]) -> PlayerSide:
    """Work out which side the tracked player had in a game.

    Case-insensitive substring match of ``player_name`` against the white
    name first, then the black name. Returns BOTH when the player name is
    unset or matches neither, meaning the game cannot be attributed.
    """
    if not player_name or not player_name.strip():
        return PlayerSide.BOTH

    needle = player_name.casefold()
    if needle in (white or "").casefold():
        return PlayerSide.WHITE
    if needle in (black or "").casefold():
        return PlayerSide.BLACK
    return PlayerSide.BOTH
