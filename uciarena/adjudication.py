"""Trackers that decide when a game may be adjudicated."""

from __future__ import annotations

from enum import Enum

from .engine import ScoreType

__all__ = ["Color", "DrawTracker", "ResignTracker", "MaxMovesTracker"]


class Color(Enum):
    """The side to move."""

    WHITE = "white"
    BLACK = "black"
    NONE = "none"


class DrawTracker:
    """Counts consecutive plies with a score close to zero."""

    def __init__(self, move_number: int = 0, move_count: int = 0, score: int = 0) -> None:
        self.move_number = move_number
        self.move_count = move_count
        self.draw_score = score
        self.draw_moves = 0

    def update(self, score: int, score_type: ScoreType, hmvc: int) -> None:
        """Record the score after a move; ``hmvc`` is the half-move clock."""
        if hmvc == 0:
            self.draw_moves = 0

        if self.move_count > 0:
            if abs(score) <= self.draw_score and score_type is ScoreType.CP:
                self.draw_moves += 1
            else:
                self.draw_moves = 0

    def adjudicatable(self, plies: int) -> bool:
        """True if the game may be declared drawn at this point."""
        return plies >= self.move_number and self.draw_moves >= self.move_count * 2


class ResignTracker:
    """Counts consecutive moves with a decisive score."""

    def __init__(self, score: int = 0, move_count: int = 0, twosided: bool = False) -> None:
        self.resign_score = score
        self.move_count = move_count
        self.twosided = twosided
        self.resign_moves = 0
        self.resign_moves_black = 0
        self.resign_moves_white = 0

    def update(self, score: int, score_type: ScoreType, color: Color) -> None:
        """Record the score reported by the engine playing ``color``."""
        if self.twosided:
            decisive = (abs(score) >= self.resign_score and score_type is ScoreType.CP) or (
                score_type is ScoreType.MATE
            )
            self.resign_moves = self.resign_moves + 1 if decisive else 0
            return

        losing = (score <= -self.resign_score and score_type is ScoreType.CP) or (
            score < 0 and score_type is ScoreType.MATE
        )
        if color is Color.BLACK:
            self.resign_moves_black = self.resign_moves_black + 1 if losing else 0
        else:
            self.resign_moves_white = self.resign_moves_white + 1 if losing else 0

    def resignable(self) -> bool:
        """True if the game may be adjudicated as a win."""
        if self.twosided:
            return self.resign_moves >= self.move_count * 2
        return self.resign_moves_black >= self.move_count or self.resign_moves_white >= self.move_count


class MaxMovesTracker:
    """Counts plies played to end games that run too long."""

    def __init__(self, move_count: int = 0) -> None:
        self.move_count = move_count
        self.plies = 0

    def update(self) -> None:
        """Record one ply."""
        self.plies += 1

    def maxmoves_reached(self) -> bool:
        """True once ``move_count`` full moves have been played."""
        return self.plies >= self.move_count * 2