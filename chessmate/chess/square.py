"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8. Files and ranks are zero-based: a1 is (0, 0), h8 is (7, 7)
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = "abcdefgh"


@dataclass(frozen=True, order=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if len(sq) != 2 or sq[0] not in FILE_NAMES or not sq[1].isdigit():
            raise ValueError(f"Cannot interpret {sq!r} as a square.")
        square = cls(ord(sq[0]) - ord("a"), int(sq[1]) - 1)
        if not square.is_within_bounds():
            raise ValueError(f"Square {sq!r} is not on the board.")
        return square

    def to_algebraic(self) -> str:
        return f"{FILE_NAMES[self.file]}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """Square reached by stepping df files and dr ranks. Might be off the board: check with is_within_bounds()"""
        return Square(self.file + df, self.rank + dr)

    @property
    def index(self) -> int:
        """Position in the 64-slot board array (a1 = 0, b1 = 1, ..., h8 = 63)"""
        return self.rank * BOARD_DIMENSIONS[0] + self.file

    @classmethod
    def from_index(cls, index: int) -> Square:
        rank, file = divmod(index, BOARD_DIMENSIONS[0])
        return cls(file, rank)

    def __str__(self) -> str:
        return self.to_algebraic()


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square.from_index(i) for i in range(BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1])
)
CENTER_SQUARES: frozenset[Square] = frozenset(
    Square.from_algebraic(sq) for sq in ("d4", "d5", "e4", "e5")
)
