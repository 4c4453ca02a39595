"""
Standard Algebraic Notation (SAN): the move notation shown in the move history.

ex) "e4", "Nf3", "exd5", "O-O", "Rad1", "e8=Q+", "Qh4#"
"""

from typing import Optional

from chessmate.chess.move_generator import (
    apply_move,
    has_legal_move,
    is_in_check,
    legal_moves,
)
from chessmate.chess.moves import Move, castling_direction_of
from chessmate.chess.pieces import PieceType
from chessmate.chess.position import Position
from chessmate.chess.square import FILE_NAMES, Square

SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
SAN_TO_PIECE: dict[str, PieceType] = {value: key for key, value in SAN_PIECE.items()}


def move_to_san(position: Position, move: Move) -> str:
    """Convert a legal move to SAN, given the position BEFORE the move."""
    piece = position.piece_at(move.from_square)
    if piece is None:
        raise ValueError(f"No piece on {move.from_square} to write {move} in SAN.")

    direction = (
        castling_direction_of(move) if piece.type == PieceType.KING else None
    )
    if direction is not None:
        san = "O-O" if direction.is_king_side else "O-O-O"
    else:
        is_capture = not position.board.is_empty(move.to_square) or (
            piece.type == PieceType.PAWN
            and move.from_square.file != move.to_square.file
        )
        san = ""
        if piece.type == PieceType.PAWN:
            if is_capture:
                san += FILE_NAMES[move.from_square.file]
        else:
            san += SAN_PIECE[piece.type] + _disambiguation(position, move, piece.type)

        if is_capture:
            san += "x"
        san += move.to_square.to_algebraic()

        if move.promotion is not None:
            san += "=" + SAN_PIECE[move.promotion]

    # Check / checkmate suffix
    after = apply_move(position, move)
    if is_in_check(after):
        san += "+" if has_legal_move(after) else "#"
    return san


def _disambiguation(position: Position, move: Move, piece_type: PieceType) -> str:
    """Two knights (rooks, ...) can reach the same square: add the file, the rank or both of the moving piece"""
    rivals = [
        other.from_square
        for other in legal_moves(position)
        if other.to_square == move.to_square
        and other.from_square != move.from_square
        and position.piece_at(other.from_square) is not None
        and position.piece_at(other.from_square).type == piece_type  # type: ignore[union-attr]
    ]
    if not rivals:
        return ""
    if all(square.file != move.from_square.file for square in rivals):
        return FILE_NAMES[move.from_square.file]
    if all(square.rank != move.from_square.rank for square in rivals):
        return str(move.from_square.rank + 1)
    return move.from_square.to_algebraic()


def parse_san(position: Position, san: str) -> Move:
    """Parse a SAN string into the matching legal move. Raises ValueError if there is no (unique) such move."""
    legal = legal_moves(position)
    clean = san.rstrip("+#!?")

    if clean in ("O-O", "0-0", "O-O-O", "0-0-0"):
        king_side = clean in ("O-O", "0-0")
        for move in legal:
            direction = castling_direction_of(move)
            piece = position.piece_at(move.from_square)
            if (
                direction is not None
                and piece is not None
                and piece.type == PieceType.KING
                and direction.is_king_side == king_side
            ):
                return move
        raise ValueError(f"Illegal move: {san}")

    promotion: Optional[PieceType] = None
    if "=" in clean:
        clean, promotion_char = clean.split("=")
        if promotion_char not in SAN_TO_PIECE:
            raise ValueError(f"Unknown promotion piece in {san!r}")
        promotion = SAN_TO_PIECE[promotion_char]

    try:
        to_square = Square.from_algebraic(clean[-2:])
    except ValueError as error:
        raise ValueError(f"Cannot read destination square of {san!r}") from error
    clean = clean[:-2].removesuffix("x")

    piece_type = PieceType.PAWN
    if clean and clean[0] in SAN_TO_PIECE:
        piece_type = SAN_TO_PIECE[clean[0]]
        clean = clean[1:]

    # whatever is left is the disambiguation: file, rank or both
    from_file = next((FILE_NAMES.index(c) for c in clean if c in FILE_NAMES), None)
    from_rank = next((int(c) - 1 for c in clean if c.isdigit()), None)

    candidates = [
        move
        for move in legal
        if move.to_square == to_square
        and move.promotion == promotion
        and position.piece_at(move.from_square) is not None
        and position.piece_at(move.from_square).type == piece_type  # type: ignore[union-attr]
        and (from_file is None or move.from_square.file == from_file)
        and (from_rank is None or move.from_square.rank == from_rank)
    ]
    if len(candidates) != 1:
        reason = "Illegal" if not candidates else "Ambiguous"
        raise ValueError(f"{reason} move: {san}")
    return candidates[0]
