# game_reference.py

from dataclasses import dataclass
from datetime import date
from typing import Optional

from player_side import PlayerSide


@dataclass(frozen=True)
class GameReference:
    """Lightweight, immutable reference to a game attached to tree nodes.

    Outcome queries are answered from the tracked player's perspective.
    """
    game_id: int
    white: str
    black: str
    result: str          # "1-0", "0-1", "1/2-1/2"
    date: Optional[date]
    event: Optional[str]
    player_side: PlayerSide

    @property
    def opponent(self):
        if self.player_side is PlayerSide.WHITE:
            return self.black
        if self.player_side is PlayerSide.BLACK:
            return self.white
        return None

    def is_win(self):
        return self.player_side.is_win(self.result)

    def is_loss(self):
        return self.player_side.is_loss(self.result)

    def is_draw(self):
        return self.player_side.is_draw(self.result)

    def __str__(self):
        return f"Game #{self.game_id}: {self.white} vs {self.black} ({self.date}) - {self.result}"
