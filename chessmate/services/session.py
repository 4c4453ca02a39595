"""
One game between a human player and the computer.

The SessionController sequences the turns: human moves go straight to the Game, the computer's reply is computed
on a worker thread after a (cosmetic) thinking delay.

Concurrency
----
* every read/write of the Game happens while holding the session's RLock.
* the worker waits on a threading.Event (its cancellation token) WITHOUT holding the lock,
  so status queries and new_game() never have to wait for the computer to 'think'.
* every AI request carries the generation number it was started in. new_game() / close() bump the generation,
  so a result that arrives late gets discarded instead of applied to the wrong game.
* human input submitted while the computer's move is pending gets rejected (AI_MOVE_PENDING).

In a LOCAL game two people share the board: no computer, moves are accepted for whichever side is to move
and undo takes back a single ply.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from random import Random
from typing import Callable, Optional

from chessmate.ai.difficulty import DifficultySelector, DifficultyTier
from chessmate.chess.game import Game, GameStatus
from chessmate.chess.pieces import Color, PieceType
from chessmate.chess.position import Position
from chessmate.chess.square import Square
from chessmate.core.config import SessionConfig
from chessmate.core.exceptions import (
    AIMovePendingError,
    GameAlreadyOverError,
    GameError,
    NoLegalMovesError,
    NotYourTurnError,
)
from chessmate.core.logger import get_logger
from chessmate.core.models import GameModel
from chessmate.core.shared_types import Color as TransportColor
from chessmate.core.shared_types import ErrorKind, GameMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a command: accepted, or rejected with the reason (the game state is unchanged then)."""

    accepted: bool
    reason: Optional[ErrorKind] = None
    message: str = ""
    move_san: Optional[str] = None

    @classmethod
    def rejected(cls, error: GameError) -> MoveResult:
        return cls(False, reason=error.kind, message=error.message)


class SessionController:
    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        on_change: Optional[Callable[[SessionController], None]] = None,
        game: Optional[Game] = None,
    ) -> None:
        """`game`: continue an existing game instead of setting up a new one from the config."""
        self._lock = threading.RLock()
        self._ai_idle = threading.Event()
        self._ai_idle.set()
        self._cancel_token = threading.Event()
        self._generation = 0
        self._worker: Optional[threading.Thread] = None
        self._closed = False
        self._on_change = on_change

        self._config = config or SessionConfig()
        self._rng = Random(self._config.seed)
        self._selector = DifficultySelector.for_tier(
            self._config.difficulty_tier, rng=self._rng
        )
        self._game = game if game is not None else self._create_game(self._config)
        if self.is_local:
            logger.info("New session: local game for two players")
        else:
            logger.info(
                "New session: human plays %s against tier %s",
                self._config.human_color,
                DifficultyTier(self._config.difficulty_tier).label,
            )
        with self._lock:
            self._schedule_ai_move()

    @classmethod
    def from_model(
        cls,
        model: GameModel,
        config: Optional[SessionConfig] = None,
        on_change: Optional[Callable[[SessionController], None]] = None,
    ) -> SessionController:
        """Resume a stored game: same players / difficulty, moves replayed from the starting position."""
        config = (config or SessionConfig()).model_copy(
            update={
                "human_color": TransportColor(model.human_color),
                "difficulty_tier": model.difficulty_tier,
                "game_mode": GameMode(model.game_mode),
            }
        )
        game = Game.from_model(model, config.allow_undo_after_game_over)
        return cls(config, on_change, game=game)

    # --- QUERIES ---
    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def is_local(self) -> bool:
        return self._config.game_mode == GameMode.LOCAL

    @property
    def human_color(self) -> Color:
        return Color.WHITE if self._config.human_color == TransportColor.WHITE else Color.BLACK

    @property
    def ai_color(self) -> Color:
        return self.human_color.opponent

    @property
    def is_ai_thinking(self) -> bool:
        return not self._ai_idle.is_set()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def current_position(self) -> Position:
        with self._lock:
            return self._game.position

    def status(self) -> GameStatus:
        with self._lock:
            return self._game.status

    def is_check(self) -> bool:
        with self._lock:
            return self._game.is_check()

    def legal_destinations(self, square: Square | str) -> set[Square]:
        """Squares the piece on `square` can move to (empty outside of the human's turn, when playing the computer)."""
        if isinstance(square, str):
            square = Square.from_algebraic(square)
        with self._lock:
            if self.is_ai_thinking or not self._is_players_turn():
                return set()
            return self._game.legal_destinations(square)

    def history(self) -> list[str]:
        with self._lock:
            return self._game.history()

    def to_model(self) -> GameModel:
        with self._lock:
            return self._game.to_model(
                human_color=str(self._config.human_color),
                difficulty_tier=self._config.difficulty_tier,
                game_mode=str(self._config.game_mode),
            )

    def wait_for_ai(self, timeout: Optional[float] = None) -> bool:
        """Block until no computer move is pending. Returns False if the timeout expired first."""
        return self._ai_idle.wait(timeout)

    # --- COMMANDS ---
    def submit_move(
        self,
        from_square: Square | str,
        to_square: Square | str,
        promotion: Optional[PieceType] = None,
    ) -> MoveResult:
        """
        The human's move
        ----
        Rejections are reported in the MoveResult, they never raise.
        After an accepted move the computer starts 'thinking' about its reply.
        """
        with self._lock:
            try:
                self._assert_human_can_move()
                self._game.play(from_square, to_square, promotion)
            except GameError as error:
                logger.warning("Rejected move %s-%s: %s", from_square, to_square, error)
                return MoveResult.rejected(error)
            except ValueError as error:
                logger.warning("Rejected move %s-%s: %s", from_square, to_square, error)
                return MoveResult(False, reason=ErrorKind.INVALID_INPUT, message=str(error))

            san = self._game.history()[-1]
            self._notify()
            self._schedule_ai_move()
            return MoveResult(True, move_san=san)

    def undo(self) -> MoveResult:
        """
        Take back the last move of the human (and the computer's reply to it).
        Not possible while the computer is thinking. In a local game: just the last move.
        """
        with self._lock:
            try:
                if self.is_ai_thinking:
                    raise AIMovePendingError("Wait for the computer's move before taking back.")
                taken_back = self._game.undo()
                if not self._is_players_turn() and self._game.record:
                    taken_back = self._game.undo()
            except GameError as error:
                logger.warning("Rejected undo: %s", error)
                return MoveResult.rejected(error)

            self._notify()
            # computer played the first move: it is its turn again
            self._schedule_ai_move()
            return MoveResult(True, move_san=taken_back.to_uci())

    def offer_draw(self) -> MoveResult:
        """The computer always accepts. In a local game the players agreed at the board."""
        with self._lock:
            try:
                if self.is_ai_thinking:
                    raise AIMovePendingError("Wait for the computer's move before offering a draw.")
                self._game.agree_draw()
            except GameError as error:
                logger.warning("Rejected draw offer: %s", error)
                return MoveResult.rejected(error)
            self._notify()
            return MoveResult(True)

    def new_game(self, config: Optional[SessionConfig] = None) -> None:
        """Start over (optionally with another setup). A pending computer move gets discarded."""
        with self._lock:
            self._cancel_pending_ai()
            if config is not None:
                self._config = config
                self._rng = Random(config.seed)
                self._selector = DifficultySelector.for_tier(config.difficulty_tier, rng=self._rng)
            self._game = self._create_game(self._config)
            self._closed = False
            logger.info(
                "New %s game started (tier %d)",
                self._config.game_mode,
                self._config.difficulty_tier,
            )
            self._notify()
            self._schedule_ai_move()

    def close(self) -> None:
        """Discard a pending computer move. No more moves are accepted afterwards."""
        with self._lock:
            self._cancel_pending_ai()
            self._closed = True
            worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=1.0)

    # -- PRIVATE HELPERS ---
    @staticmethod
    def _create_game(config: SessionConfig) -> Game:
        if config.starting_fen is not None:
            return Game.from_fen(config.starting_fen, config.allow_undo_after_game_over)
        return Game.new_game(config.allow_undo_after_game_over)

    def _assert_human_can_move(self) -> None:
        side = self._game.side_to_move.name.lower()
        if self._closed:
            raise GameAlreadyOverError("Session is closed.", side_to_move=side)
        if self._game.is_over:
            raise GameAlreadyOverError(
                f"Game is over ({self._game.status}).", side_to_move=side
            )
        if self.is_ai_thinking:
            raise AIMovePendingError("The computer is still thinking.", side_to_move=side)
        if not self._is_players_turn():
            raise NotYourTurnError(f"It is {side}'s turn.", side_to_move=side)

    def _is_players_turn(self) -> bool:
        """In a local game it is always somebody's turn at the board."""
        return self.is_local or self._game.side_to_move == self.human_color

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def _schedule_ai_move(self) -> None:
        """Call while holding the lock."""
        if self.is_local or self._closed or self._game.is_over:
            return
        if self._game.side_to_move != self.ai_color:
            return

        self._cancel_token = threading.Event()
        self._ai_idle.clear()
        delay = self._config.think_delay.seconds_for(self._config.difficulty_tier, self._rng)
        self._worker = threading.Thread(
            target=self._think,
            args=(self._generation, self._cancel_token, delay),
            name=f"chessmate-ai-{self._generation}",
            daemon=True,
        )
        logger.debug("Computer thinks for %.2fs", delay)
        self._worker.start()

    def _cancel_pending_ai(self) -> None:
        """Call while holding the lock."""
        self._generation += 1
        self._cancel_token.set()
        self._ai_idle.set()

    def _think(self, generation: int, cancel_token: threading.Event, delay: float) -> None:
        if cancel_token.wait(delay):
            logger.debug("Computer move cancelled (generation %d)", generation)
            return

        with self._lock:
            if generation != self._generation or cancel_token.is_set():
                logger.debug("Discarding stale computer move (generation %d)", generation)
                return
            try:
                move = self._selector.select(self._game.position, self._game.legal_moves())
                if move is None:
                    raise NoLegalMovesError(
                        f"Computer has no move in {self._game.position.to_fen()}",
                        side_to_move=self._game.side_to_move.name.lower(),
                    )
                self._game.apply_move(move)
                logger.info("Computer played %s", self._game.history()[-1])
                self._notify()
            except GameError as error:
                logger.error("Computer could not move: %s", error)
            finally:
                self._ai_idle.set()
