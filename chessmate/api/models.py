"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from chessmate.chess.fen import is_valid_fen
from chessmate.chess.square import Square
from chessmate.core.exceptions import InvalidRequestError
from chessmate.core.shared_types import (
    Color,
    DrawReason,
    ErrorKind,
    GameMode,
    PieceType,
    Status,
)


def _validate_square_name(value: str) -> str:
    try:
        Square.from_algebraic(value)
    except ValueError as error:
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        ) from error
    return value


# --- REQUEST MODELS ---
class CreateSessionRequest(BaseModel):
    game_mode: GameMode = GameMode.AI
    difficulty_tier: int = 3
    human_color: Color = Color.WHITE
    starting_fen: Optional[str] = None
    seed: Optional[int] = None

    @field_validator("difficulty_tier")
    @classmethod
    def validate_difficulty_tier(cls, value: int) -> int:
        if not 1 <= value <= 5:
            raise InvalidRequestError(
                f"Difficulty tier must be between 1 (beginner) and 5 (expert), got {value}."
            )
        return value

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a valid FEN.")
        return value.strip()


class SessionRequest(BaseModel):
    session_id: UUID


class MoveRequest(BaseModel):
    session_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.PAWN, PieceType.KING):
            raise InvalidRequestError(f"A pawn cannot promote into a {value}.")
        return value


class LegalDestinationsRequest(BaseModel):
    session_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


# --- RESPONSE MODELS ---
class SessionResponse(BaseModel):
    session_id: UUID
    game_mode: GameMode
    fen_state: str
    starting_state: str
    status: Status
    winner: Optional[Color] = None
    draw_reason: Optional[DrawReason] = None
    human_color: Color
    difficulty_tier: int
    move_history: list[str]
    in_check: bool
    ai_thinking: bool


class MoveResponse(BaseModel):
    accepted: bool
    reason: Optional[ErrorKind] = None
    message: str = ""
    move_san: Optional[str] = None
    session: SessionResponse


class LegalDestinationsResponse(BaseModel):
    session_id: UUID
    square: str
    destinations: list[str]
