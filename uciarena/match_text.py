"""Text helpers for match reporting: move format checks, scores and reasons."""

from __future__ import annotations

from enum import Enum

from .adjudication import Color
from .engine import ScoreType

__all__ = [
    "GameResultReason",
    "INSUFFICIENT_MSG",
    "REPETITION_MSG",
    "ILLEGAL_MSG",
    "ADJUDICATION_WIN_MSG",
    "ADJUDICATION_MSG",
    "FIFTY_MSG",
    "STALEMATE_MSG",
    "CHECKMATE_MSG",
    "TIMEOUT_MSG",
    "DISCONNECT_MSG",
    "STALL_MSG",
    "is_uci_move",
    "convert_score_to_string",
    "convert_chess_reason",
    "color_string",
]

INSUFFICIENT_MSG = "Draw by insufficient mating material"
REPETITION_MSG = "Draw by 3-fold repetition"
ILLEGAL_MSG = " makes an illegal move"
ADJUDICATION_WIN_MSG = " wins by adjudication"
ADJUDICATION_MSG = "Draw by adjudication"
FIFTY_MSG = "Draw by fifty moves rule"
STALEMATE_MSG = "Draw by stalemate"
CHECKMATE_MSG = " mates"
TIMEOUT_MSG = " loses on time"
DISCONNECT_MSG = " disconnects"
STALL_MSG = "'s connection stalls"

_FILES = frozenset("abcdefgh")
_DIGITS = frozenset("0123456789")
_PROMOTIONS = frozenset("nbrq")


class GameResultReason(Enum):
    """Why a game ended by the rules of chess."""

    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_MOVE_RULE = "fifty_move_rule"
    THREEFOLD_REPETITION = "threefold_repetition"
    NONE = "none"


def is_uci_move(move: str) -> bool:
    """True if ``move`` looks like a UCI move: file, digit, file, digit, optional promotion."""
    if not 4 <= len(move) <= 5:
        return False
    if not (
        move[0] in _FILES and move[1] in _DIGITS and move[2] in _FILES and move[3] in _DIGITS
    ):
        return False
    return len(move) == 4 or move[4] in _PROMOTIONS


def convert_score_to_string(score: int, score_type: ScoreType) -> str:
    """Render a score as ``+1.23``/``-0.50`` for centipawns or ``+M3``/``-M4`` for mates."""
    if score_type is ScoreType.CP:
        sign = "+" if score > 0 else "-" if score < 0 else ""
        return f"{sign}{abs(score) / 100:.2f}"
    if score_type is ScoreType.MATE:
        plies = score * 2 - 1 if score > 0 else score * -2
        return f"{'+M' if score > 0 else '-M'}{plies}"
    return "ERR"


def convert_chess_reason(engine_color: str, reason: GameResultReason) -> str:
    """The annotation for a game that ended by rule; ``engine_color`` is the side to move."""
    if reason is GameResultReason.CHECKMATE:
        winner = "Black" if engine_color == "White" else "White"
        return winner + CHECKMATE_MSG
    messages = {
        GameResultReason.STALEMATE: STALEMATE_MSG,
        GameResultReason.INSUFFICIENT_MATERIAL: INSUFFICIENT_MSG,
        GameResultReason.THREEFOLD_REPETITION: REPETITION_MSG,
        GameResultReason.FIFTY_MOVE_RULE: FIFTY_MSG,
    }
    return messages.get(reason, "")


def color_string(color: Color) -> str:
    """``White`` for white, ``Black`` otherwise."""
    return "White" if color is Color.WHITE else "Black"