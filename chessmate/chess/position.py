"""
Representation of a single position: everything that can be encoded in a FEN string.

A Position is a value. Playing a move never changes it: the move generator derives the successor position instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from chessmate.chess.board import Board
from chessmate.chess.castling import CastlingRights
from chessmate.chess.fen import STARTING_FEN, validate_fen
from chessmate.chess.pieces import Color, Piece
from chessmate.chess.square import Square

RepetitionKey = tuple[Board, Color, CastlingRights, Optional[Square]]


@dataclass(frozen=True)
class Position:
    """
    Board + side to move + castling rights + en passant target + move counters.
    ----

    NOTE: equality (and hashing) only looks at the fields that matter for repetition:
    board, side to move, castling rights and en passant target. The two move counters are left out.
    """

    board: Board
    side_to_move: Color = Color.WHITE
    castling_rights: CastlingRights = CastlingRights()
    en_passant_target: Optional[Square] = None
    halfmove_clock: int = field(default=0, compare=False)
    fullmove_number: int = field(default=1, compare=False)

    @classmethod
    def from_fen(cls, fen: str) -> Position:
        """Parse the FEN into data. Raises InvalidFENError if the string is not a FEN."""
        (
            placement,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            full_move_number,
        ) = validate_fen(fen)

        en_passant_target = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )
        return cls(
            board=Board.from_fen(placement),
            side_to_move=Color(active_color),
            castling_rights=CastlingRights.from_fen(castling_str),
            en_passant_target=en_passant_target,
            halfmove_clock=int(half_move_clock),
            fullmove_number=int(full_move_number),
        )

    @classmethod
    def starting(cls) -> Position:
        return cls.from_fen(STARTING_FEN)

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        en_passant_algebraic = (
            self.en_passant_target.to_algebraic()
            if self.en_passant_target is not None
            else "-"
        )
        return " ".join(
            [
                self.board.to_fen(),
                self.side_to_move.value,
                self.castling_rights.to_fen(),
                en_passant_algebraic,
                str(self.halfmove_clock),
                str(self.fullmove_number),
            ]
        )

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.board.piece_at(square)

    def king_square(self, color: Color) -> Optional[Square]:
        return self.board.king_square(color)

    def repetition_key(self) -> RepetitionKey:
        """The part of the position compared when looking for threefold repetition"""
        return (
            self.board,
            self.side_to_move,
            self.castling_rights,
            self.en_passant_target,
        )

    def __str__(self) -> str:
        return self.to_fen()
