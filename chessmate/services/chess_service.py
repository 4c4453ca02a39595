"""Orchestration of communication from API router to the game sessions and persistence layers (and the reverse direction)."""

import threading
from functools import partial
from typing import Optional
from uuid import UUID

from chessmate.api.models import (
    CreateSessionRequest,
    LegalDestinationsRequest,
    LegalDestinationsResponse,
    MoveRequest,
    MoveResponse,
    SessionRequest,
    SessionResponse,
)
from chessmate.chess.game import Game
from chessmate.chess.pieces import Color as DomainColor
from chessmate.chess.pieces import PieceType as DomainPieceType
from chessmate.core.config import SessionConfig, ThinkingDelay
from chessmate.core.exceptions import RepositoryError
from chessmate.core.logger import get_logger
from chessmate.core.shared_types import Color, GameMode
from chessmate.db.repository import GameRepository
from chessmate.services.session import MoveResult, SessionController

logger = get_logger(__name__)


class ChessService:
    """
    Orchestration of layers for games against the computer (or between two people at the same board).
    ----
    Every session is independent: its own SessionController (with its own lock and worker thread).
    A snapshot of the game is stored after every change, so a session can be picked up again after a restart.
    """

    def __init__(
        self,
        repository: GameRepository,
        think_delay: ThinkingDelay = ThinkingDelay(),
        allow_undo_after_game_over: bool = False,
    ) -> None:
        self.repo = repository
        self.think_delay = think_delay
        self.allow_undo_after_game_over = allow_undo_after_game_over
        self._sessions: dict[UUID, SessionController] = {}
        # repository (and session registry) access only. Never held while waiting on a session.
        self._lock = threading.Lock()

    # -- API routes logic ---
    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Set up a game: against the computer, or a local game for two players."""
        config = SessionConfig(
            game_mode=request.game_mode,
            difficulty_tier=request.difficulty_tier,
            human_color=request.human_color,
            think_delay=self.think_delay,
            allow_undo_after_game_over=self.allow_undo_after_game_over,
            seed=request.seed,
            starting_fen=request.starting_fen,
        )

        # Store the starting position first: the computer might move right away (human plays black)
        initial_game = (
            Game.from_fen(config.starting_fen, config.allow_undo_after_game_over)
            if config.starting_fen is not None
            else Game.new_game(config.allow_undo_after_game_over)
        )
        _, session_id = self.repo.create_game(
            initial_game.to_model(
                str(config.human_color), config.difficulty_tier, str(config.game_mode)
            )
        )

        session = SessionController(
            config, on_change=partial(self._persist, session_id), game=initial_game
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return self._create_session_response(session_id, session)

    def get_session_state(self, request: SessionRequest) -> SessionResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check whether the computer has moved yet.
        """
        session = self._fetch_session(request.session_id)
        return self._create_session_response(request.session_id, session)

    def legal_destinations(
        self, request: LegalDestinationsRequest
    ) -> LegalDestinationsResponse:
        """Squares to highlight once the player selected a piece."""
        session = self._fetch_session(request.session_id)
        destinations = session.legal_destinations(request.square)
        return LegalDestinationsResponse(
            session_id=request.session_id,
            square=request.square,
            destinations=sorted(square.to_algebraic() for square in destinations),
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt. A rejected move is reported in the response, the state stays unchanged."""
        session = self._fetch_session(request.session_id)
        promotion = (
            DomainPieceType[request.promote_to.name]
            if request.promote_to is not None
            else None
        )
        result = session.submit_move(request.from_square, request.to_square, promotion)
        return self._create_move_response(request.session_id, session, result)

    def undo(self, request: SessionRequest) -> MoveResponse:
        session = self._fetch_session(request.session_id)
        result = session.undo()
        return self._create_move_response(request.session_id, session, result)

    def offer_draw(self, request: SessionRequest) -> MoveResponse:
        session = self._fetch_session(request.session_id)
        result = session.offer_draw()
        return self._create_move_response(request.session_id, session, result)

    def new_game(self, request: SessionRequest) -> SessionResponse:
        """Start over with the same setup. A pending computer move gets discarded."""
        session = self._fetch_session(request.session_id)
        session.new_game()
        return self._create_session_response(request.session_id, session)

    def wait_for_ai(
        self, request: SessionRequest, timeout: Optional[float] = None
    ) -> SessionResponse:
        session = self._fetch_session(request.session_id)
        session.wait_for_ai(timeout)
        return self._create_session_response(request.session_id, session)

    def close_session(self, request: SessionRequest) -> None:
        """Stop the session (discarding a pending computer move). The stored game is kept."""
        with self._lock:
            session = self._sessions.pop(request.session_id, None)
        if session is not None:
            session.close()
            logger.info("Closed session %s", request.session_id)

    def delete_session(self, request: SessionRequest) -> None:
        """Handle a request to delete a game record."""
        self.close_session(request)
        with self._lock:
            self.repo.delete_game(request.session_id)

    # -- Internal helpers --
    def _persist(self, session_id: UUID, session: SessionController) -> None:
        """Called by the session after every change (while holding the session's lock)."""
        model = session.to_model()
        with self._lock:
            self.repo.update_game(session_id, model)

    def _create_session_response(
        self, session_id: UUID, session: SessionController
    ) -> SessionResponse:
        """Convert the state of the session to a SessionResponse"""
        model = session.to_model()
        status = session.status()

        # Before the first move gets played, the starting FEN equals the current FEN. Otherwise get it as first recorded FEN in history.
        starting_fen = (
            model.history_fen[0] if len(model.history_fen) > 0 else model.current_fen
        )
        return SessionResponse(
            session_id=session_id,
            game_mode=GameMode(model.game_mode),
            fen_state=model.current_fen,
            starting_state=starting_fen,
            status=status.state,
            winner=_transport_color(status.winner),
            draw_reason=status.draw_reason,
            human_color=Color(model.human_color),
            difficulty_tier=model.difficulty_tier,
            move_history=session.history(),
            in_check=session.is_check(),
            ai_thinking=session.is_ai_thinking,
        )

    def _create_move_response(
        self, session_id: UUID, session: SessionController, result: MoveResult
    ) -> MoveResponse:
        return MoveResponse(
            accepted=result.accepted,
            reason=result.reason,
            message=result.message,
            move_san=result.move_san,
            session=self._create_session_response(session_id, session),
        )

    def _fetch_session(self, session_id: UUID) -> SessionController:
        """Find the running session, or resume a stored game. Raise error if neither exists."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                return session
            game_model = self.repo.get_game(session_id)
        if game_model is None:
            raise RepositoryError(f"Game with {session_id=} not found.")

        session = SessionController.from_model(
            game_model,
            SessionConfig(
                think_delay=self.think_delay,
                allow_undo_after_game_over=self.allow_undo_after_game_over,
            ),
            on_change=partial(self._persist, session_id),
        )
        with self._lock:
            # another request might have resumed it in the meantime
            resumed = self._sessions.setdefault(session_id, session)
        if resumed is not session:
            session.close()
        else:
            logger.info("Resumed session %s from storage", session_id)
        return resumed


def _transport_color(color: Optional[DomainColor]) -> Optional[Color]:
    if color is None:
        return None
    return Color.WHITE if color == DomainColor.WHITE else Color.BLACK

