"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


class DrawReason(StrEnum):
    REPETITION = "repetition"
    INSUFFICIENT_MATERIAL = "insufficient material"
    FIFTY_MOVE_RULE = "fifty move rule"
    AGREEMENT = "agreement"


class GameMode(StrEnum):
    """Against the computer, or two people taking turns at the same board."""

    AI = "ai"
    LOCAL = "local"


class ErrorKind(StrEnum):
    """Reasons a command gets rejected. Reported back to the caller, never fatal."""

    ILLEGAL_MOVE = "illegal move"
    NOT_YOUR_TURN = "not your turn"
    GAME_ALREADY_OVER = "game already over"
    NO_HISTORY = "no history"
    NO_LEGAL_MOVES = "no legal moves"
    AI_MOVE_PENDING = "ai move pending"
    INVALID_INPUT = "invalid input"


# --- NOTE: the domain layer has its own Color / PieceType enums (chessmate/chess/pieces.py).
# --- These are the transport-safe versions. Same names, let the imports show which one is used where.


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
