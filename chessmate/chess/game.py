"""
The Game class is the entrypoint into the domain layer for the session/service layer.
It owns the current position and the record of the game, applies moves, and decides when (and how) the game has ended.

NOTE: the Game raises exceptions (see chessmate/core/exceptions.py) for moves it refuses.
The SessionController catches those and reports them back to the player.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from chessmate.chess.move_generator import (
    apply_move,
    has_legal_move,
    is_in_check,
    legal_destinations,
    legal_moves,
    resolve_move,
)
from chessmate.chess.moves import Move
from chessmate.chess.pieces import MINOR_PIECES, Color, PieceType
from chessmate.chess.position import Position
from chessmate.chess.san import move_to_san, parse_san
from chessmate.chess.square import Square
from chessmate.core.exceptions import (
    GameAlreadyOverError,
    IllegalMoveError,
    NoHistoryError,
)
from chessmate.core.logger import get_logger
from chessmate.core.models import GameModel
from chessmate.core.shared_types import DrawReason, Status

logger = get_logger(__name__)

REPETITION_LIMIT = 3
FIFTY_MOVE_RULE_PLIES = 100


@dataclass(frozen=True)
class GameStatus:
    """InProgress, Checkmate(winner), Stalemate or Draw(reason)"""

    state: Status
    winner: Optional[Color] = None
    draw_reason: Optional[DrawReason] = None

    @classmethod
    def in_progress(cls) -> GameStatus:
        return cls(Status.IN_PROGRESS)

    @classmethod
    def checkmate(cls, winner: Color) -> GameStatus:
        return cls(Status.CHECKMATE, winner=winner)

    @classmethod
    def stalemate(cls) -> GameStatus:
        return cls(Status.STALEMATE)

    @classmethod
    def draw(cls, reason: DrawReason) -> GameStatus:
        return cls(Status.DRAW, draw_reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.state != Status.IN_PROGRESS

    def __str__(self) -> str:
        if self.state == Status.CHECKMATE:
            assert self.winner is not None
            return f"{self.state} ({self.winner.name.lower()} wins)"
        if self.state == Status.DRAW:
            return f"{self.state} by {self.draw_reason}"
        return str(self.state)


@dataclass(frozen=True)
class RecordEntry:
    """One ply of the game: the position the move was played in, the move and how it is written down."""

    position: Position
    move: Move
    san: str


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY THE SESSION ---

    position: Position
    record: list[RecordEntry] = field(default_factory=list)
    status: GameStatus = field(default_factory=GameStatus.in_progress)
    allow_undo_after_game_over: bool = False

    @classmethod
    def new_game(cls, allow_undo_after_game_over: bool = False) -> Game:
        """Standard starting position"""
        return cls.from_position(Position.starting(), allow_undo_after_game_over)

    @classmethod
    def from_fen(cls, fen: str, allow_undo_after_game_over: bool = False) -> Game:
        return cls.from_position(Position.from_fen(fen), allow_undo_after_game_over)

    @classmethod
    def from_position(
        cls, position: Position, allow_undo_after_game_over: bool = False
    ) -> Game:
        """A game can start from any position: it might even be over already."""
        game = cls(position, allow_undo_after_game_over=allow_undo_after_game_over)
        game.status = game._classify()
        return game

    @classmethod
    def replay(
        cls,
        starting_fen: str,
        moves_uci: list[str],
        allow_undo_after_game_over: bool = False,
    ) -> Game:
        """Rebuild a game from its starting position and the moves played (ex. when loading a stored game)"""
        game = cls.from_fen(starting_fen, allow_undo_after_game_over)
        for uci in moves_uci:
            game.apply_move(Move.from_uci(uci))
        return game

    @classmethod
    def from_model(
        cls, model: GameModel, allow_undo_after_game_over: bool = False
    ) -> Game:
        """
        Rebuild from the boundary model: replay the recorded moves from the starting position.
        A draw by agreement leaves no trace on the board, so it is restored from the stored status.
        """
        starting_fen = model.history_fen[0] if model.history_fen else model.current_fen
        game = cls.replay(starting_fen, model.moves_uci, allow_undo_after_game_over)
        if model.draw_reason == DrawReason.AGREEMENT and not game.is_over:
            game.agree_draw()
        return game

    def to_model(
        self, human_color: str, difficulty_tier: int, game_mode: str = "ai"
    ) -> GameModel:
        return GameModel(
            current_fen=self.position.to_fen(),
            history_fen=self.fen_history(),
            moves_uci=self.history_uci(),
            status=str(self.status.state),
            human_color=human_color,
            difficulty_tier=difficulty_tier,
            draw_reason=(
                str(self.status.draw_reason) if self.status.draw_reason else None
            ),
            game_mode=game_mode,
        )

    # --- QUERIES ---
    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    @property
    def starting_position(self) -> Position:
        return self.record[0].position if self.record else self.position

    @property
    def winner(self) -> Optional[Color]:
        return self.status.winner

    @property
    def is_over(self) -> bool:
        return self.status.is_terminal

    def legal_moves(self) -> list[Move]:
        """No legal moves once the game is over."""
        if self.is_over:
            return []
        return legal_moves(self.position)

    def legal_destinations(self, square: Square) -> set[Square]:
        if self.is_over:
            return set()
        return legal_destinations(self.position, square)

    def is_check(self) -> bool:
        return is_in_check(self.position)

    def history(self) -> list[str]:
        """Moves played so far, in SAN"""
        return [entry.san for entry in self.record]

    def history_uci(self) -> list[str]:
        return [entry.move.to_uci() for entry in self.record]

    def fen_history(self) -> list[str]:
        """FEN of every position a move was played in (so: excluding the current one)"""
        return [entry.position.to_fen() for entry in self.record]

    # --- COMMANDS ---
    def apply_move(self, move: Move) -> Move:
        """
        Attempt to make a move
        -----

        1. make sure the game is (still) in progress
        2. check the move is legal: compares from / to / promotion
        3. compute the successor position
        4. record (position before the move, move)
        5. update game status (check for end condition)

        Returns the move as it was accepted (with its flags filled in)
        """
        self._assert_in_progress()

        legal = legal_moves(self.position)
        if move not in legal:
            raise IllegalMoveError(
                f"Move not allowed: {move.to_uci()} ({self.side_to_move.name.lower()} to move)",
                move=move.to_uci(),
                side_to_move=self.side_to_move.name.lower(),
            )
        accepted_move = legal[legal.index(move)]
        return self._commit(accepted_move)

    def play(
        self,
        from_square: Square | str,
        to_square: Square | str,
        promotion: Optional[PieceType] = None,
    ) -> Move:
        """
        Same as apply_move, but starting from what a player indicates: the squares (+ optional promotion piece).
        A pawn reaching the last rank without a promotion choice becomes a queen.
        """
        self._assert_in_progress()
        from_sq = _as_square(from_square)
        to_sq = _as_square(to_square)
        move = resolve_move(self.position, from_sq, to_sq, promotion)
        if move is None:
            requested = Move(from_sq, to_sq, promotion)
            raise IllegalMoveError(
                f"Move not allowed: {requested.to_uci()} ({self.side_to_move.name.lower()} to move)",
                move=requested.to_uci(),
                side_to_move=self.side_to_move.name.lower(),
            )
        return self._commit(move)

    def apply_san(self, san: str) -> Move:
        """Play a move written in SAN (ex. 'Nf3', 'O-O', 'exd6')"""
        self._assert_in_progress()
        try:
            move = parse_san(self.position, san)
        except ValueError as error:
            raise IllegalMoveError(
                str(error), move=san, side_to_move=self.side_to_move.name.lower()
            ) from error
        return self._commit(move)

    def undo(self) -> Move:
        """
        Take back the last move: restores the position the move was played in.
        ----
        Once the game is over, undo is only possible if the game was set up to allow it.
        """
        if not self.record:
            raise NoHistoryError(
                "No moves to take back.", side_to_move=self.side_to_move.name.lower()
            )
        if self.is_over and not self.allow_undo_after_game_over:
            raise GameAlreadyOverError(
                f"Game is over ({self.status}). Taking back moves is disabled.",
                side_to_move=self.side_to_move.name.lower(),
            )

        entry = self.record.pop()
        self.position = entry.position
        self.status = self._classify()
        logger.debug("Took back %s", entry.san)
        return entry.move

    def agree_draw(self) -> None:
        """Both players agreed to a draw"""
        self._assert_in_progress()
        self._change_status(GameStatus.draw(DrawReason.AGREEMENT))

    # -- PRIVATE HELPERS ---
    def _assert_in_progress(self) -> None:
        if self.is_over:
            raise GameAlreadyOverError(
                f"Game is not in progress. status: {self.status}",
                side_to_move=self.side_to_move.name.lower(),
            )

    def _commit(self, move: Move) -> Move:
        """The move is known to be legal: update position, record and status"""
        san = move_to_san(self.position, move)
        self.record.append(RecordEntry(self.position, move, san))
        self.position = apply_move(self.position, move)
        logger.debug("Played %s (%s)", san, move.to_uci())
        self._change_status(self._classify())
        return move

    def _change_status(self, new_status: GameStatus) -> None:
        if new_status != self.status and new_status.is_terminal:
            logger.info("Game over: %s", new_status)
        self.status = new_status

    def _classify(self) -> GameStatus:
        """
        Performs checks to see if game has ended. In this order:

        1. no legal moves + in check --> checkmate (the side that just moved wins)
        2. no legal moves --> stalemate
        3. same position (board, side, castling rights, en passant) for the 3rd time --> draw by repetition
        4. 100 plies without pawn move or capture --> draw by fifty-move rule
        5. not enough material left to ever checkmate --> draw by insufficient material
        """
        side_to_move = self.side_to_move
        if not has_legal_move(self.position):
            if is_in_check(self.position):
                return GameStatus.checkmate(winner=side_to_move.opponent)
            return GameStatus.stalemate()

        if self._is_three_fold_repetition():
            return GameStatus.draw(DrawReason.REPETITION)

        if self.position.halfmove_clock >= FIFTY_MOVE_RULE_PLIES:
            return GameStatus.draw(DrawReason.FIFTY_MOVE_RULE)

        if self._is_insufficient_material():
            return GameStatus.draw(DrawReason.INSUFFICIENT_MATERIAL)

        return GameStatus.in_progress()

    def _is_three_fold_repetition(self) -> bool:
        """Check if the current position occurs 3 times in the game (the current occurrence included)"""
        key = self.position.repetition_key()
        count = 1 + sum(
            1 for entry in self.record if entry.position.repetition_key() == key
        )
        return count >= REPETITION_LIMIT

    def _is_insufficient_material(self) -> bool:
        """Only kings left, or king + (at most) a single knight/bishop per side"""
        remaining: dict[Color, list[PieceType]] = {color: [] for color in Color}
        for _, piece in self.position.board.pieces():
            if piece.type != PieceType.KING:
                remaining[piece.color].append(piece.type)

        return all(
            len(pieces) <= 1 and all(piece_type in MINOR_PIECES for piece_type in pieces)
            for pieces in remaining.values()
        )


def _as_square(square: Square | str) -> Square:
    return square if isinstance(square, Square) else Square.from_algebraic(square)
