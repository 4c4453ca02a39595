"""
Validation of FEN strings.

FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

<board position string> <active color> <castling rights> <en passant square> <half move clock> <full move number>

* The string to describe the board position is described in the Board class
* The active color is either "w" or "b"
* Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
    In the starting position: KQkq (all rights available), and as rights get revoked the letter disappears ("-" if none are left).
* The en passant square is the square a pawn just passed over with a double step. If not available a "-" is used.
* The half move clock counts the plies made since the last pawn move or capture. (Used for the fifty-move rule)
* The full move number starts at 1 and increments after every move black makes.

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
"""

from itertools import combinations

from chessmate.chess.castling import CASTLING_ORDER
from chessmate.chess.pieces import FEN_TO_PIECE
from chessmate.chess.square import BOARD_DIMENSIONS, FILE_NAMES
from chessmate.core.exceptions import InvalidFENError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
NUM_FEN_FIELDS = 6

# every subset of "KQkq" written in canonical order, or "-"
VALID_CASTLING_ENCODINGS: list[str] = ["-"] + [
    "".join(direction.value for direction in subset)
    for size in range(1, len(CASTLING_ORDER) + 1)
    for subset in combinations(CASTLING_ORDER, size)
]


def validate_fen(fen: str) -> list[str]:
    """Raise InvalidFENError if the string cannot be a FEN. Returns the space separated fields otherwise."""
    parts = fen.strip().split()
    if len(parts) != NUM_FEN_FIELDS:
        raise InvalidFENError(
            f"FEN must contain {NUM_FEN_FIELDS} space-separated fields, got {len(parts)}: {fen!r}"
        )
    position, color, castling, en_passant, half_moves, full_moves = parts
    checks = [
        (is_valid_position(position), "piece placement"),
        (has_one_king_each(position), "piece placement (need exactly one king per color)"),
        (is_valid_color_code(color), "active color"),
        (is_valid_castling_rights(castling), "castling rights"),
        (is_valid_en_passant(en_passant, color), "en passant square"),
        (is_valid_move_counter(half_moves), "half move clock"),
        (is_valid_full_move_number(full_moves), "full move number"),
    ]
    for is_valid, field_name in checks:
        if not is_valid:
            raise InvalidFENError(f"Invalid {field_name} in FEN: {fen!r}")
    return parts


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """
    try:
        validate_fen(fen)
    except InvalidFENError:
        return False
    return True


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def has_one_king_each(position: str) -> bool:
    return position.count("K") == 1 and position.count("k") == 1


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str, color: str = "") -> bool:
    """
    Valid en passant square encoding should be a square on the 3rd or 6th rank (the only squares a pawn can pass over
    with a double step) or a '-'.
    Given the active color, the rank must also fit: the pawn that just moved belongs to the opponent,
    so the 6th rank when white is to move and the 3rd rank when black is.
    """
    if en_passant == "-":
        return True
    if not is_valid_square(en_passant):
        return False
    expected_ranks = {"w": {"6"}, "b": {"3"}}.get(color, {"3", "6"})
    return en_passant[1] in expected_ranks


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if len(square) != 2:
        return False

    file_char, rank_char = square[0], square[1]
    if file_char not in FILE_NAMES[:num_files]:
        return False

    if not rank_char.isdigit():
        return False

    return 1 <= int(rank_char) <= num_ranks


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


def is_valid_full_move_number(counter: str) -> bool:
    """The full move number starts at 1"""
    return counter.isdigit() and int(counter) >= 1
