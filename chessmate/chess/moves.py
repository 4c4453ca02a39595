"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the (pseudo-legal) move sets for each piece type.


Legality (not leaving your own king in check) is checked later by the MoveGenerator
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Protocol

from chessmate.chess.castling import CASTLING_RULES, CastlingDirection
from chessmate.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Color, Piece, PieceType
from chessmate.chess.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece_at(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    """
    basic definition of a move to be made
    ----

    Two moves are equal if from / to / promotion are equal. The flags describe the move relative to the position
    it was generated in and are filled in by the move generator. They do not take part in comparisons, so a move
    the user typed in ("e1g1") compares equal to the generated castling move.
    """

    from_square: Square
    to_square: Square
    promotion: Optional[PieceType] = None
    is_capture: bool = field(default=False, compare=False)
    is_castle: bool = field(default=False, compare=False)
    is_en_passant: bool = field(default=False, compare=False)
    is_double_step: bool = field(default=False, compare=False)

    @classmethod
    def from_uci(cls, uci: str) -> Move:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side

        NOTE: The flags (capture / castling / en passant) are only known once compared against a position.
        """
        if len(uci) not in (4, 5):
            raise ValueError(f"Cannot interpret {uci!r} as a UCI move.")
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promotion = None
        if len(uci) == 5:
            if uci[4] not in FEN_TO_PIECE:
                raise ValueError(f"Unknown promotion piece in UCI move {uci!r}.")
            promotion = FEN_TO_PIECE[uci[4]]
        return cls(from_sq, to_sq, promotion)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


# --- DIRECTIONS ---
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


def _is_opponent_piece(board: Board, square: Square, player_color: Color) -> bool:
    piece = board.piece_at(square)
    return piece is not None and piece.color != player_color


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moving_piece = board.piece_at(square)
    assert moving_piece is not None
    player_color = moving_piece.color

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            if not board.is_empty(target_square):
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if _is_opponent_piece(board, target_square, player_color):
                    moves.append(Move(square, target_square, is_capture=True))
                break

            moves.append(Move(square, target_square))
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moving_piece = board.piece_at(square)
    assert moving_piece is not None
    player_color = moving_piece.color

    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        if board.is_empty(target_square):
            moves.append(Move(square, target_square))
        elif _is_opponent_piece(board, target_square, player_color):
            moves.append(Move(square, target_square, is_capture=True))

    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward (never onto an occupied square).
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally

    NOTE: En passant / promotion are taken care of separately (see below)
    """
    pawn = board.piece_at(square)
    assert pawn is not None
    direction = pawn.color.pawn_direction
    starting_rank = 1 if pawn.color == Color.WHITE else BOARD_DIMENSIONS[1] - 2

    moves: list[Move] = []
    # Pawn pushes : Black moves down the board, White moves up the board
    one_step = square.offset(0, direction)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.append(Move(square, one_step))
        two_steps = one_step.offset(0, direction)
        if square.rank == starting_rank and board.is_empty(two_steps):
            moves.append(Move(square, two_steps, is_double_step=True))

    # pawns take diagonally:
    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if target_square.is_within_bounds() and _is_opponent_piece(
            board, target_square, pawn.color
        ):
            moves.append(Move(square, target_square, is_capture=True))
    return moves


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3, jumping over anything in between"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, STRAIGHTS + DIAGONALS)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attackers(
    square: Square,
    by_color: Color,
    by_piece_types: frozenset[PieceType],
    board: Board,
    directions: list[Vector],
) -> list[Square]:
    """
    Raycasting algorithm for attacks.
    ---

    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Which pieces of the specified color and type have the specified square in their line-of-sight?"_

    We move along each direction until we hit a piece or the edge of the board.
    """
    attackers: list[Square] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            piece_found = board.piece_at(target_square)
            if piece_found is not None:
                # only the first piece found matters: it blocks the line for everyone behind it.
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    attackers.append(target_square)
                break
            target_square = target_square.offset(df, dr)
    return attackers


def single_step_attackers(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> list[Square]:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.
    Hence, they also can only attack along a single step.
    """
    attacker = Piece(by_piece_type, by_color)
    attackers: list[Square] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square.is_within_bounds() and board.piece_at(target_square) == attacker:
            attackers.append(target_square)
    return attackers


def pawn_attackers(square: Square, by_color: Color, board: Board) -> list[Square]:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. That is, you are asking "Could a white pawn, that moves UP the board, take on the specified square?"

    Hence, vectors are exactly opposite to the ones used to check if you could move to a square by taking (see `candidate_pawn_moves()`)
    """
    dr = -by_color.pawn_direction
    return single_step_attackers(
        square, by_color, PieceType.PAWN, board, [(1, dr), (-1, dr)]
    )


def knight_attackers(square: Square, by_color: Color, board: Board) -> list[Square]:
    return single_step_attackers(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def diagonal_attackers(square: Square, by_color: Color, board: Board) -> list[Square]:
    """Bishops and queens"""
    return raycasting_attackers(
        square, by_color, frozenset({PieceType.BISHOP, PieceType.QUEEN}), board, DIAGONALS
    )


def straight_attackers(square: Square, by_color: Color, board: Board) -> list[Square]:
    """Rooks and queens"""
    return raycasting_attackers(
        square, by_color, frozenset({PieceType.ROOK, PieceType.QUEEN}), board, STRAIGHTS
    )


def king_attackers(square: Square, by_color: Color, board: Board) -> list[Square]:
    return single_step_attackers(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
AttackersFn = Callable[[Square, Color, Board], list[Square]]
ATTACK_RULES: tuple[AttackersFn, ...] = (
    pawn_attackers,
    knight_attackers,
    diagonal_attackers,
    straight_attackers,
    king_attackers,
)


def attackers_of(square: Square, by_color: Color, board: Board) -> list[Square]:
    """All squares holding a piece of `by_color` that attacks the given square"""
    attackers: list[Square] = []
    for rule in ATTACK_RULES:
        attackers.extend(rule(square, by_color, board))
    return attackers


def is_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """Early exit version of attackers_of()"""
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


# -- CASTLING MOVES ---
def candidate_castling_move(direction: CastlingDirection) -> Move:
    """convert the castling rule into a move of the king (with the castling flag set)"""
    rule = CASTLING_RULES[direction]
    return Move(rule.king_from, rule.king_to, is_castle=True)


def castling_direction_of(move: Move) -> Optional[CastlingDirection]:
    """Inverse operation: which castling rule belongs to this king move (if any)"""
    for direction, rule in CASTLING_RULES.items():
        if (move.from_square, move.to_square) == (rule.king_from, rule.king_to):
            return direction
    return None


# -- EN PASSANT MOVES ---
def en_passant_moves(
    en_passant_square: Square, color: Color, board: Board
) -> list[Move]:
    """Given a target en passant square, check the adjacent files (in the rank one up/down from the en passant square) for pawns of the correct color.
    The opponent's pawn that just made the double step has to stand right in front of the en passant square,
    and nothing can stand on the en passant square itself.
    """

    # NOTE: En passant square is the square the opponent's pawn passed over. Our pawns stand one rank further (from our perspective).
    from_rank_offset = -color.pawn_direction
    own_pawn = Piece(PieceType.PAWN, color)
    double_stepped_pawn = en_passant_square.offset(0, from_rank_offset)
    if not double_stepped_pawn.is_within_bounds() or not board.is_empty(en_passant_square):
        return []
    if board.piece_at(double_stepped_pawn) != Piece(PieceType.PAWN, color.opponent):
        return []

    moves: list[Move] = []
    for df in (-1, 1):
        maybe_pawn_square = en_passant_square.offset(df, from_rank_offset)
        if not maybe_pawn_square.is_within_bounds():
            continue
        if board.piece_at(maybe_pawn_square) == own_pawn:
            moves.append(
                Move(
                    from_square=maybe_pawn_square,
                    to_square=en_passant_square,
                    is_capture=True,
                    is_en_passant=True,
                )
            )

    return moves


def en_passant_capture_square(move: Move) -> Square:
    """The pawn taken en passant stands on the destination file, but on the rank the capturing pawn started from"""
    return Square(move.to_square.file, move.from_square.rank)


# -- PAWN PROMOTION MOVES --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]
DEFAULT_PROMOTION = PieceType.QUEEN


def is_pawn_push_to_promotion_square(move: Move, board: Board) -> bool:
    """check if the move is a pawn move that reaches either the first or the final rank"""
    moving_piece = board.piece_at(move.from_square)
    is_pawn_move = moving_piece is not None and moving_piece.type == PieceType.PAWN
    reaches_promotion_square = move.to_square.rank in (0, BOARD_DIMENSIONS[1] - 1)
    return is_pawn_move and reaches_promotion_square


def pawn_pushes_w_promotion(pawn_push: Move) -> list[Move]:
    """Return multiple copies of the pawn push with the piece type to promote into filled in."""
    return [replace(pawn_push, promotion=piece_type) for piece_type in PROMOTION_OPTIONS]
