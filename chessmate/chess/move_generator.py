"""
Legal move generation
----

**Combines the following**

1. generate candidate moves, using the basic movement rules for all pieces (see moves.py)
2. add candidate castling moves
3. add candidate en passant moves
4. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
5. Pawn push to promotion square? --> expand the set of moves to include one for every choice of piece type to promote into.

Step 4 is done by playing the candidate on a scratch copy of the position (`apply_move()` returns a new Position,
the original is never touched) and asking whether the mover's king is attacked there.

The order of the generated moves carries no meaning.
"""

from dataclasses import replace
from typing import Optional

from chessmate.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    castling_directions,
)
from chessmate.chess.moves import (
    DEFAULT_PROMOTION,
    MOVEMENT_RULES,
    Move,
    attackers_of as board_attackers_of,
    candidate_castling_move,
    castling_direction_of,
    en_passant_capture_square,
    en_passant_moves,
    is_attacked,
    is_pawn_push_to_promotion_square,
    pawn_pushes_w_promotion,
)
from chessmate.chess.pieces import Color, Piece, PieceType
from chessmate.chess.position import Position
from chessmate.chess.square import Square


# --- ATTACKS / CHECK ---
def is_square_attacked(position: Position, square: Square, by_color: Color) -> bool:
    return is_attacked(square, by_color, position.board)


def attackers_of(position: Position, square: Square, by_color: Color) -> list[Square]:
    """Squares of all pieces of `by_color` that attack the given square"""
    return board_attackers_of(square, by_color, position.board)


def is_in_check(position: Position, color: Optional[Color] = None) -> bool:
    """Is the king of `color` (default: the side to move) attacked?"""
    color = color or position.side_to_move
    king_square = position.king_square(color)
    if king_square is None:
        # NOTE: cannot happen in positions reached by legal play
        return False
    return is_square_attacked(position, king_square, color.opponent)


# --- MOVE GENERATION ---
def pseudo_legal_moves(position: Position) -> list[Move]:
    """Geometrically valid moves for the side to move, ignoring whether they leave the own king in check."""
    color = position.side_to_move
    board = position.board

    candidate_moves: list[Move] = []
    for starting_square in board.locate_color(color):
        piece = board.piece_at(starting_square)
        assert piece is not None
        candidate_moves.extend(MOVEMENT_RULES[piece.type](starting_square, board))

    candidate_moves.extend(_castling_moves(position))

    if position.en_passant_target is not None:
        candidate_moves.extend(
            en_passant_moves(position.en_passant_target, color, board)
        )
    return candidate_moves


def legal_moves(position: Position) -> list[Move]:
    """
    List of legal moves for the side to move
    ----
    Every promotion is expanded into four moves (knight, bishop, rook, queen).
    """
    legal_moves_wo_promotions = [
        move
        for move in pseudo_legal_moves(position)
        if not _is_putting_yourself_in_check(position, move)
    ]

    # promotion rule: find pawn pushes to final / first rank
    moves: list[Move] = []
    for move in legal_moves_wo_promotions:
        if is_pawn_push_to_promotion_square(move, position.board):
            moves.extend(pawn_pushes_w_promotion(move))
        else:
            moves.append(move)
    return moves


def legal_moves_from(position: Position, square: Square) -> list[Move]:
    """
    Legal moves of the piece on the given square.
    An empty square, or a square holding a piece of the side NOT to move, simply has no moves.
    """
    piece = position.piece_at(square)
    if piece is None or piece.color != position.side_to_move:
        return []
    return [move for move in legal_moves(position) if move.from_square == square]


def legal_destinations(position: Position, square: Square) -> set[Square]:
    """Used for highlighting the squares a selected piece can go to"""
    return {move.to_square for move in legal_moves_from(position, square)}


def has_legal_move(position: Position) -> bool:
    return any(
        not _is_putting_yourself_in_check(position, move)
        for move in pseudo_legal_moves(position)
    )


def resolve_move(
    position: Position,
    from_square: Square,
    to_square: Square,
    promotion: Optional[PieceType] = None,
) -> Optional[Move]:
    """
    Find the legal move matching the request (None if there is no such move)
    ----
    A pawn reaching the last rank without a promotion choice gets promoted into a queen.
    The returned move has all its flags set.
    """
    candidates = [
        move
        for move in legal_moves_from(position, from_square)
        if move.to_square == to_square
    ]
    if not candidates:
        return None

    is_promotion = any(move.promotion is not None for move in candidates)
    wanted = (promotion or DEFAULT_PROMOTION) if is_promotion else promotion
    return next((move for move in candidates if move.promotion == wanted), None)


def gives_check(position: Position, move: Move) -> bool:
    """Does playing the move put the opponent in check?"""
    return is_in_check(apply_move(position, move))


# --- SUCCESSOR POSITION ---
def apply_move(position: Position, move: Move) -> Position:
    """
    Compute the position after the move.
    ----

    NOTE: no legality checks here. The move must be (pseudo-)legal in the given position.
    Special moves are recognised from the position itself, so a move parsed from UCI works just as well as a generated one.

    1. relocate the piece (promote it if needed)
    2. remove the captured piece. En passant: the captured pawn is NOT on the destination square.
    3. castling: move the rook along with the king
    4. revoke castling rights if king / rook moved or a rook got captured on its starting square
    5. set (or clear) the en passant target
    6. update the move counters, hand the move over to the opponent
    """
    board = position.board
    moving_piece = board.piece_at(move.from_square)
    if moving_piece is None:
        raise ValueError(f"No piece to move on {move.from_square} in {position.to_fen()}")
    color = moving_piece.color
    is_pawn_move = moving_piece.type == PieceType.PAWN

    is_capture = not board.is_empty(move.to_square)
    placed_piece = (
        moving_piece.promoted_to(move.promotion or DEFAULT_PROMOTION)
        if is_pawn_push_to_promotion_square(move, board)
        else moving_piece
    )
    updates: dict[Square, Optional[Piece]] = {
        move.from_square: None,
        move.to_square: placed_piece,
    }

    if _is_en_passant(position, move, moving_piece):
        updates[en_passant_capture_square(move)] = None
        is_capture = True

    if moving_piece.type == PieceType.KING:
        direction = castling_direction_of(move)
        if direction is not None and direction.color == color:
            rule = CASTLING_RULES[direction]
            updates[rule.rook_from] = None
            updates[rule.rook_to] = Piece(PieceType.ROOK, color)

    # en passant target: only right after a double step, the square that was passed over
    ranks_moved = abs(move.to_square.rank - move.from_square.rank)
    en_passant_target = (
        move.from_square.offset(0, color.pawn_direction)
        if is_pawn_move and ranks_moved == 2
        else None
    )

    return Position(
        board=board.with_updates(updates),
        side_to_move=color.opponent,
        castling_rights=_revoke_castling_rights(position, move),
        en_passant_target=en_passant_target,
        halfmove_clock=0 if (is_pawn_move or is_capture) else position.halfmove_clock + 1,
        fullmove_number=position.fullmove_number + (1 if color == Color.BLACK else 0),
    )


def annotate(position: Position, move: Move) -> Move:
    """Fill in the flags of a move, relative to the position it is played in"""
    moving_piece = position.piece_at(move.from_square)
    if moving_piece is None:
        return move
    is_en_passant = _is_en_passant(position, move, moving_piece)
    return replace(
        move,
        is_capture=is_en_passant or not position.board.is_empty(move.to_square),
        is_castle=moving_piece.type == PieceType.KING
        and castling_direction_of(move) is not None,
        is_en_passant=is_en_passant,
        is_double_step=moving_piece.type == PieceType.PAWN
        and abs(move.to_square.rank - move.from_square.rank) == 2,
    )


# -- PRIVATE HELPERS ---
def _is_putting_yourself_in_check(position: Position, move: Move) -> bool:
    """Return True if the move puts (or leaves) the mover in check: play it on a scratch position and look."""
    return is_in_check(apply_move(position, move), position.side_to_move)


def _is_en_passant(position: Position, move: Move, moving_piece: Piece) -> bool:
    return (
        moving_piece.type == PieceType.PAWN
        and move.to_square == position.en_passant_target
        and move.from_square.file != move.to_square.file
        and position.board.is_empty(move.to_square)
    )


def _castling_moves(position: Position) -> list[Move]:
    """Use CASTLING_RULES to construct the corresponding set of moves"""
    return [
        candidate_castling_move(direction)
        for direction in _legal_castling_directions(position)
    ]


def _legal_castling_directions(position: Position) -> list[CastlingDirection]:
    """
    Find the legal castling directions for the player currently attempting to move
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (neither the king nor that rook has moved).
    * All squares between the king and the rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through or land on a square that is under attack.
    """
    color = position.side_to_move
    rights = position.castling_rights
    if not rights.any_for(color):
        return []

    # Cannot castle out of a check.
    if is_in_check(position, color):
        return []

    board = position.board
    legal_directions: list[CastlingDirection] = []
    for direction in castling_directions(color):
        if not rights.allows(direction):
            continue

        rule = CASTLING_RULES[direction]
        # rights can only be granted with the pieces in place, but a FEN given by the user might say otherwise
        if board.piece_at(rule.king_from) != Piece(PieceType.KING, color):
            continue
        if board.piece_at(rule.rook_from) != Piece(PieceType.ROOK, color):
            continue

        if board.is_any_occupied(rule.squares_between()):
            continue

        if any(
            is_square_attacked(position, square, color.opponent)
            for square in rule.king_path()
        ):
            continue

        legal_directions.append(direction)
    return legal_directions


def _revoke_castling_rights(position: Position, move: Move) -> CastlingRights:
    """
    Any move touching a king's or rook's starting square revokes the rights that depend on it:

    1. moving the king (castling included) --> revoke both directions
    2. moving a rook from its starting square --> revoke that direction
    3. capturing a rook on its starting square --> revoke the opponent's right in that direction
    """
    rights = position.castling_rights
    touched = {move.from_square, move.to_square}
    revoked = [
        direction
        for direction, rule in CASTLING_RULES.items()
        if rights.allows(direction) and touched & {rule.king_from, rule.rook_from}
    ]
    return rights.revoke(*revoked) if revoked else rights
