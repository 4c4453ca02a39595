"""
Boundary layer data model.

A snapshot of one game, made of plain strings / ints only.
The ChessService hands it to the repository after every change, and the Game can be rebuilt from it
(replaying `moves_uci` from the first FEN in `history_fen`).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameModel:
    """
    Transport-safe representation of a game
    ----
    history_fen: FEN of every position a move was played in (empty before the first move)
    status / draw_reason: values of the Status / DrawReason enums
    human_color: "white" or "black", the computer plays the other color (in a game against the computer)
    game_mode: "ai" or "local" (two people at the same board)
    """

    current_fen: str
    history_fen: list[str]
    moves_uci: list[str]
    status: str
    human_color: str
    difficulty_tier: int
    draw_reason: Optional[str] = None
    game_mode: str = "ai"
