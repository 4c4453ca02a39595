"""Unit tests for /chessmate/chess/moves.py"""

import pytest

from chessmate.chess.board import Board
from chessmate.chess.castling import CastlingDirection
from chessmate.chess.moves import (
    Move,
    attackers_of,
    candidate_bishop_moves,
    candidate_castling_move,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_queen_moves,
    candidate_rook_moves,
    castling_direction_of,
    en_passant_capture_square,
    en_passant_moves,
    is_attacked,
    is_pawn_push_to_promotion_square,
    pawn_pushes_w_promotion,
)
from chessmate.chess.pieces import Color, PieceType
from chessmate.chess.square import Square

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


def sq(algebraic: str) -> Square:
    return Square.from_algebraic(algebraic)


def destinations(moves: list[Move]) -> set[str]:
    return {str(move.to_square) for move in moves}


# -- MOVE CREATION, ENCODING/DECODING UCI NOTATION ---
@pytest.mark.parametrize(
    "uci_move, from_uci, to_uci, promotion",
    [
        ("e2e4", "e2", "e4", None),
        ("g1f3", "g1", "f3", None),
        ("e7e8q", "e7", "e8", PieceType.QUEEN),
        ("b2a1n", "b2", "a1", PieceType.KNIGHT),
    ],
)
def test_uci_notation(
    uci_move: str, from_uci: str, to_uci: str, promotion: PieceType | None
) -> None:
    """UCI notation: <from_square><to_square>[promotion piece]"""
    move = Move.from_uci(uci_move)
    assert move.from_square == sq(from_uci)
    assert move.to_square == sq(to_uci)
    assert move.promotion == promotion
    assert move.to_uci() == uci_move


@pytest.mark.parametrize("uci_move", ["e2", "e2e9", "e7e8x", "e2-e4", ""])
def test_invalid_uci(uci_move: str) -> None:
    with pytest.raises(ValueError):
        Move.from_uci(uci_move)


def test_flags_do_not_take_part_in_equality() -> None:
    """A move typed in by the user equals the generated one (with its flags filled in)."""
    generated = Move(sq("e1"), sq("g1"), is_castle=True)
    assert Move.from_uci("e1g1") == generated
    assert Move.from_uci("e7e8q") != Move.from_uci("e7e8n")


# -- MOVEMENT RULES --
def test_knight_moves_from_starting_square() -> None:
    board = Board.from_fen(STARTING_PLACEMENT)
    assert destinations(candidate_knight_moves(sq("b1"), board)) == {"a3", "c3"}


def test_sliding_pieces_on_empty_board() -> None:
    """Rook: 14 squares from any square of an empty board. Bishop from a corner: the long diagonal (7)."""
    rook_board = Board.from_fen("8/8/8/8/8/8/8/R7")
    assert len(candidate_rook_moves(sq("a1"), rook_board)) == 14

    bishop_board = Board.from_fen("8/8/8/8/8/8/8/B7")
    assert destinations(candidate_bishop_moves(sq("a1"), bishop_board)) == {
        "b2", "c3", "d4", "e5", "f6", "g7", "h8"
    }

    queen_board = Board.from_fen("8/8/8/8/3Q4/8/8/8")
    assert len(candidate_queen_moves(sq("d4"), queen_board)) == 27


def test_sliding_stops_at_first_piece() -> None:
    """Own piece: blocks. Opponent's piece: can be captured, but nothing behind it."""
    board = Board.from_fen("8/8/8/8/8/8/P7/R2n4")
    moves = candidate_rook_moves(sq("a1"), board)
    assert destinations(moves) == {"b1", "c1", "d1"}
    captures = [move for move in moves if move.is_capture]
    assert [str(move.to_square) for move in captures] == ["d1"]


def test_king_moves_in_corner() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/K7")
    assert destinations(candidate_king_moves(sq("a1"), board)) == {"a2", "b1", "b2"}


@pytest.mark.parametrize(
    "placement, square, expected",
    [
        (STARTING_PLACEMENT, "e2", {"e3", "e4"}),  # single and double step
        (STARTING_PLACEMENT, "d7", {"d6", "d5"}),  # black moves down the board
        ("8/8/8/8/8/4p3/4P3/8", "e2", set()),  # blocked
        ("8/8/8/8/4p3/8/4P3/8", "e2", {"e3"}),  # double step blocked
        ("8/8/8/8/8/3p1p2/4P3/8", "e2", {"e3", "e4", "d3", "f3"}),  # captures
        ("8/8/8/8/8/3P4/4P3/8", "e2", {"e3", "e4"}),  # cannot capture own piece
    ],
)
def test_pawn_moves(placement: str, square: str, expected: set[str]) -> None:
    board = Board.from_fen(placement)
    assert destinations(candidate_pawn_moves(sq(square), board)) == expected


def test_double_step_flag() -> None:
    board = Board.from_fen(STARTING_PLACEMENT)
    moves = {str(move.to_square): move for move in candidate_pawn_moves(sq("e2"), board)}
    assert moves["e4"].is_double_step
    assert not moves["e3"].is_double_step


# -- ATTACKS --
def test_attackers_of_a_square() -> None:
    """f7 after 1.e4 e5 2.Qh5: only the queen attacks it."""
    board = Board.from_fen("rnbqkbnr/pppp1ppp/8/4p2Q/4P3/8/PPPP1PPP/RNB1KBNR")
    assert attackers_of(sq("f7"), Color.WHITE, board) == [sq("h5")]
    # black defends f7 with its king only
    assert attackers_of(sq("f7"), Color.BLACK, board) == [sq("e8")]


@pytest.mark.parametrize(
    "placement, square, by_color, expected",
    [
        ("8/8/8/8/8/8/4P3/8", "d3", Color.WHITE, True),  # white pawn takes up the board
        ("8/8/8/8/8/8/4P3/8", "d1", Color.WHITE, False),  # ... never down
        ("8/8/8/8/8/4p3/8/8", "d2", Color.BLACK, True),  # black pawn takes down the board
        ("8/8/8/8/8/8/8/R3r3", "h1", Color.WHITE, False),  # rook blocked by a piece in between
        ("8/8/8/8/8/8/8/R3r3", "d1", Color.WHITE, True),
        ("8/8/8/8/8/8/8/R3r3", "d1", Color.BLACK, True),
        ("8/8/8/8/8/2N5/8/8", "d5", Color.WHITE, True),  # knight
        ("8/8/8/8/8/2N5/8/8", "d4", Color.WHITE, False),
        ("7q/8/8/8/8/8/8/8", "a1", Color.BLACK, True),  # queen along the long diagonal
    ],
)
def test_is_attacked(
    placement: str, square: str, by_color: Color, expected: bool
) -> None:
    board = Board.from_fen(placement)
    assert is_attacked(sq(square), by_color, board) == expected
    assert bool(attackers_of(sq(square), by_color, board)) == expected


# -- SPECIAL MOVES --
def test_castling_moves() -> None:
    move = candidate_castling_move(CastlingDirection.BLACK_QUEEN_SIDE)
    assert move == Move.from_uci("e8c8")
    assert move.is_castle
    assert castling_direction_of(Move.from_uci("e1g1")) == CastlingDirection.WHITE_KING_SIDE
    assert castling_direction_of(Move.from_uci("e1f1")) is None


def test_en_passant_moves() -> None:
    """Black just played d7-d5: the white pawns on c5 and e5 can take en passant on d6."""
    board = Board.from_fen("8/8/8/2PpP3/8/8/8/8")
    moves = en_passant_moves(sq("d6"), Color.WHITE, board)
    assert {str(move.from_square) for move in moves} == {"c5", "e5"}
    assert all(move.is_en_passant and move.is_capture for move in moves)
    assert en_passant_capture_square(moves[0]) == sq("d5")


def test_promotion_moves() -> None:
    board = Board.from_fen("8/4P3/8/8/8/8/8/8")
    push = Move.from_uci("e7e8")
    assert is_pawn_push_to_promotion_square(push, board)
    assert not is_pawn_push_to_promotion_square(Move.from_uci("e7e6"), board)
    promotions = pawn_pushes_w_promotion(push)
    assert {move.promotion for move in promotions} == {
        PieceType.KNIGHT,
        PieceType.BISHOP,
        PieceType.ROOK,
        PieceType.QUEEN,
    }
