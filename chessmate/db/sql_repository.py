"""Implementation of (Game)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from chessmate.core.logger import get_logger
from chessmate.core.models import GameModel
from chessmate.db.schema import DBGame

logger = get_logger(__name__)


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            current_fen=game.current_fen,
            history_fen=list(game.history_fen),
            moves_uci=list(game.moves_uci),
            status=game.status,
            draw_reason=game.draw_reason,
            game_mode=game.game_mode,
            human_color=game.human_color,
            difficulty_tier=game.difficulty_tier,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        logger.debug("Stored new game %s", new_id)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite an existing record with the latest snapshot of the game."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        # JSON columns only register a change when a new list gets assigned
        game_db.current_fen = game.current_fen
        game_db.history_fen = list(game.history_fen)
        game_db.moves_uci = list(game.moves_uci)
        game_db.status = game.status
        game_db.draw_reason = game.draw_reason
        game_db.game_mode = game.game_mode
        game_db.human_color = game.human_color
        game_db.difficulty_tier = game.difficulty_tier
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        logger.debug("Deleted game %s", game_id)
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            current_fen=game_db.current_fen,
            history_fen=list(game_db.history_fen),
            moves_uci=list(game_db.moves_uci),
            status=game_db.status,
            human_color=game_db.human_color,
            difficulty_tier=game_db.difficulty_tier,
            draw_reason=game_db.draw_reason,
            game_mode=game_db.game_mode,
        )
