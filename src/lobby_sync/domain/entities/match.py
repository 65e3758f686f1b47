from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class MatchSettings:
    """Match options edited in the lobby before a start request."""

    is_private: bool = True
    max_players: int = 4
    starting_score: Decimal = Decimal("0")
    max_score: Decimal = Decimal("100")
    points_per_correct: Decimal = Decimal("10")
    points_per_wrong: Decimal = Decimal("-5")
    points_per_elimination_gain: Decimal = Decimal("5")
    allow_tiebreak_coinflip: bool = True

    def __post_init__(self) -> None:
        if self.max_players < 1:
            raise ValueError("max_players must be at least 1")
        if self.max_score <= self.starting_score:
            raise ValueError("max_score must be greater than starting_score")

    def to_payload(self) -> dict[str, object]:
        return {
            "is_private": self.is_private,
            "max_players": self.max_players,
            "starting_score": str(self.starting_score),
            "max_score": str(self.max_score),
            "points_per_correct": str(self.points_per_correct),
            "points_per_wrong": str(self.points_per_wrong),
            "points_per_elimination_gain": str(self.points_per_elimination_gain),
            "allow_tiebreak_coinflip": self.allow_tiebreak_coinflip,
        }
