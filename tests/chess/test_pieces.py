"""Unit tests for /chessmate/chess/pieces.py"""

import pytest

from chessmate.chess.pieces import Color, Piece, PieceType


@pytest.mark.parametrize(
    "character, piece",
    [
        ("K", Piece(PieceType.KING, Color.WHITE)),
        ("q", Piece(PieceType.QUEEN, Color.BLACK)),
        ("N", Piece(PieceType.KNIGHT, Color.WHITE)),
        ("p", Piece(PieceType.PAWN, Color.BLACK)),
    ],
)
def test_fen_characters(character: str, piece: Piece) -> None:
    """Upper case for white, lower case for black."""
    assert Piece.from_fen(character) == piece
    assert piece.to_fen() == character


def test_opponent_and_pawn_direction() -> None:
    assert Color.WHITE.opponent == Color.BLACK
    assert Color.BLACK.opponent == Color.WHITE
    assert Color.WHITE.pawn_direction == 1
    assert Color.BLACK.pawn_direction == -1


@pytest.mark.parametrize(
    "piece_type, points",
    [
        (PieceType.PAWN, 1),
        (PieceType.KNIGHT, 3),
        (PieceType.BISHOP, 3),
        (PieceType.ROOK, 5),
        (PieceType.QUEEN, 9),
        (PieceType.KING, 0),
    ],
)
def test_points(piece_type: PieceType, points: int) -> None:
    assert Piece(piece_type, Color.BLACK).points == points


def test_promotion_creates_new_piece() -> None:
    pawn = Piece(PieceType.PAWN, Color.WHITE)
    queen = pawn.promoted_to(PieceType.QUEEN)
    assert queen == Piece(PieceType.QUEEN, Color.WHITE)
    assert pawn.type == PieceType.PAWN
