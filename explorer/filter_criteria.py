# filter_criteria.py

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from pgn_date import format_date_range
from player_side import PlayerSide


EARLIEST_DATE = date(1900, 1, 1)


@dataclass(frozen=True)
class FilterCriteria:
    """Which games go into an opening tree, and whose side is tracked."""
    player_name: Optional[str] = None
    side: PlayerSide = PlayerSide.BOTH
    start_date: date = EARLIEST_DATE
    end_date: date = field(default_factory=date.today)
    opponent: Optional[str] = None   # case-insensitive substring

    @property
    def has_player(self):
        return bool(self.player_name and self.player_name.strip())

    def is_date_in_range(self, value):
        """Inclusive range check. A None date is never in range."""
        if value is None:
            return False
        return self.start_date <= value <= self.end_date

    def matches_opponent(self, opponent_name):
        """Case-insensitive partial match against the opponent filter.

        An unset or blank filter matches everything, including None.
        """
        if self.opponent is None or not self.opponent.strip():
            return True
        if opponent_name is None:
            return False
        return self.opponent.casefold() in opponent_name.casefold()

    def describe(self):
        player = self.player_name if self.has_player else "all players"
        parts = [f"{player} as {self.side}", format_date_range(self.start_date, self.end_date)]
        if self.opponent and self.opponent.strip():
            parts.append(f"vs '{self.opponent}'")
        return ", ".join(parts)
