"""
Where the ChessService keeps its snapshots of the games.

SQLGameRepository (sql_repository.py) is the real thing. A dict keyed by session id does just as well in tests.
"""

from typing import Protocol
from uuid import UUID

from chessmate.core.models import GameModel


class GameRepository(Protocol):
    """Snapshots of games, keyed by session id"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """None if there is no snapshot for this session."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """The id handed back becomes the session id."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Replace the snapshot (after every move, undo, draw or restart). None for an unknown session."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        ...
