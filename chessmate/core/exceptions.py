"""
Custom exceptions.

Every rejection the game can produce is a GameError carrying an ErrorKind, so the Session/Service layers can
report it back to the caller (instead of crashing) with enough context to re-prompt the player.
"""

from typing import Optional

from chessmate.core.shared_types import ErrorKind


class GameError(Exception):
    """Base class for all (recoverable) chess game errors."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(
        self,
        message: str,
        *,
        move: Optional[str] = None,
        side_to_move: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.move = move
        self.side_to_move = side_to_move


class IllegalMoveError(GameError):
    """Move is not in the set of legal moves for the current position."""

    kind = ErrorKind.ILLEGAL_MOVE


class NotYourTurnError(GameError):
    kind = ErrorKind.NOT_YOUR_TURN


class GameAlreadyOverError(GameError):
    """No moves can be made (or taken back) once the game has ended."""

    kind = ErrorKind.GAME_ALREADY_OVER


class NoHistoryError(GameError):
    """Undo requested, but no move has been played yet."""

    kind = ErrorKind.NO_HISTORY


class NoLegalMovesError(GameError):
    """
    The AI was asked to move, but there is nothing to play.
    NOTE: should not happen. The game is classified as terminal before the AI ever gets asked.
    """

    kind = ErrorKind.NO_LEGAL_MOVES


class AIMovePendingError(GameError):
    """Input submitted while the artificial opponent is still thinking."""

    kind = ErrorKind.AI_MOVE_PENDING


class InvalidFENError(GameError):
    pass


class InvalidRequestError(Exception):
    """
    Raised by the request models when the input cannot be interpreted.
    NOTE: not a ValueError, so pydantic does not wrap it into a ValidationError.
    """


class RepositoryError(Exception):
    """Record could not be found / stored."""
