"""The Game board: the configuration of pieces on the 64 squares.

Immutable: every update hands back a new Board. The squares are stored in a flat tuple (a1 = 0, ..., h8 = 63),
so copying a board before trying out a move is nothing more than copying a tuple.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from chessmate.chess.pieces import Color, Piece, PieceType
from chessmate.chess.square import ALL_SQUARES, BOARD_DIMENSIONS, Square

NUM_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]


@dataclass(frozen=True)
class Board:
    squares: tuple[Optional[Piece], ...] = (None,) * NUM_SQUARES

    def __post_init__(self) -> None:
        if len(self.squares) != NUM_SQUARES:
            raise ValueError(
                f"A board has exactly {NUM_SQUARES} squares, got {len(self.squares)}."
            )

    @classmethod
    def empty(cls) -> Board:
        return cls()

    @classmethod
    def from_pieces(cls, pieces: dict[Square, Piece]) -> Board:
        squares: list[Optional[Piece]] = [None] * NUM_SQUARES
        for square, piece in pieces.items():
            squares[square.index] = piece
        return cls(tuple(squares))

    @classmethod
    def from_fen(cls, fen_str: str) -> Board:
        """Construct a board using the first part of the FEN string: the piece placement.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces. Again, left-to-right reads a1-h1.
        """
        squares: list[Optional[Piece]] = [None] * NUM_SQUARES
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    squares[Square(file, rank).index] = Piece.from_fen(character)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return cls(tuple(squares))

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece_at(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.squares[square.index]

    def is_empty(self, square: Square) -> bool:
        return self.squares[square.index] is None

    def is_any_occupied(self, squares: Iterable[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    def pieces(self) -> Iterator[tuple[Square, Piece]]:
        for square, piece in zip(ALL_SQUARES, self.squares):
            if piece is not None:
                yield square, piece

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        target = Piece(piece_type, color)
        return [square for square, piece in self.pieces() if piece == target]

    def locate_color(self, color: Color) -> list[Square]:
        return [square for square, piece in self.pieces() if piece.color == color]

    def king_square(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceType.KING, color)
        return kings[0] if kings else None

    # --- UPDATES (return a new Board) ---
    def with_updates(self, updates: dict[Square, Optional[Piece]]) -> Board:
        """Place / remove several pieces at once. A value of None empties the square."""
        squares = list(self.squares)
        for square, piece in updates.items():
            squares[square.index] = piece
        return Board(tuple(squares))

