"""Unit tests for chessmate/db/sql_repository.py"""

from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from chessmate.core.models import GameModel
from chessmate.core.shared_types import DrawReason, GameMode, Status
from chessmate.db.schema import DBGame
from chessmate.db.sql_repository import SQLGameRepository

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
AFTER_E4_FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
AFTER_E5_FEN = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq e6 0 2"


@pytest.fixture
def new_game() -> GameModel:
    return GameModel(
        current_fen=STARTING_FEN,
        history_fen=[],
        moves_uci=[],
        status=str(Status.IN_PROGRESS),
        human_color="white",
        difficulty_tier=3,
    )


def test_create_game(db_session_repo: Session, new_game: GameModel) -> None:
    """Conversion from a GameModel to DBGame for a new entry to the database."""
    repo = SQLGameRepository(db_session_repo)
    record_in_db, game_id = repo.create_game(new_game)
    assert isinstance(record_in_db, GameModel)
    assert record_in_db == new_game

    # timestamps are filled in by the database layer
    stored = db_session_repo.get(DBGame, game_id)
    assert stored is not None
    assert stored.created_at is not None
    assert stored.updated_at is not None


def test_get_game_by_id(db_session_repo: Session, new_game: GameModel) -> None:
    """Create a game, then fetch it from db."""
    repo = SQLGameRepository(db_session_repo)
    expected_game, game_id = repo.create_game(new_game)
    game_found = repo.get_game(game_id)
    assert isinstance(game_found, GameModel)
    assert game_found == expected_game


def test_get_unknown_game(db_session_repo: Session, new_game: GameModel) -> None:
    """
    Should return None if ID does not match anything in database.

    NOTE with an empty database, any id is a valid test case.
    """
    repo = SQLGameRepository(db_session_repo)
    assert repo.get_game(uuid4()) is None

    # Now do it with creating a game, but retrieving from the wrong ID
    repo.create_game(new_game)
    assert repo.get_game(uuid4()) is None


def test_consecutive_game_updates(db_session_repo: Session, new_game: GameModel) -> None:
    """Loosely simulates a game: a snapshot gets stored after every move."""
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(new_game)

    first_update = GameModel(
        current_fen=AFTER_E4_FEN,
        history_fen=[STARTING_FEN],
        moves_uci=["e2e4"],
        status=str(Status.IN_PROGRESS),
        human_color="white",
        difficulty_tier=3,
    )
    second_update = GameModel(
        current_fen=AFTER_E5_FEN,
        history_fen=[STARTING_FEN, AFTER_E4_FEN],
        moves_uci=["e2e4", "e7e5"],
        status=str(Status.IN_PROGRESS),
        human_color="white",
        difficulty_tier=3,
    )

    updated_game = repo.update_game(game_id, first_update)
    assert updated_game == first_update
    repo.update_game(game_id, second_update)

    after_all_updates = repo.get_game(game_id)
    assert after_all_updates is not None
    assert after_all_updates == second_update
    assert after_all_updates.moves_uci == ["e2e4", "e7e5"]


def test_update_draw_reason(db_session_repo: Session, new_game: GameModel) -> None:
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(new_game)

    agreed = GameModel(
        current_fen=STARTING_FEN,
        history_fen=[],
        moves_uci=[],
        status=str(Status.DRAW),
        human_color="white",
        difficulty_tier=3,
        draw_reason=str(DrawReason.AGREEMENT),
    )
    repo.update_game(game_id, agreed)

    game_found = repo.get_game(game_id)
    assert game_found is not None
    assert game_found.status == "draw"
    assert game_found.draw_reason == "agreement"


def test_local_game_mode_is_stored(db_session_repo: Session, new_game: GameModel) -> None:
    """Games for two players at the same board come back as such."""
    repo = SQLGameRepository(db_session_repo)
    assert repo.create_game(new_game)[0].game_mode == "ai"

    local_game = GameModel(
        current_fen=STARTING_FEN,
        history_fen=[],
        moves_uci=[],
        status=str(Status.IN_PROGRESS),
        human_color="white",
        difficulty_tier=3,
        game_mode=str(GameMode.LOCAL),
    )
    _, game_id = repo.create_game(local_game)
    game_found = repo.get_game(game_id)
    assert game_found is not None
    assert game_found.game_mode == "local"


def test_attempt_updating_unknown_game(db_session_repo: Session, new_game: GameModel) -> None:
    """the update_game() method should break early and return None"""
    repo = SQLGameRepository(db_session_repo)
    assert repo.update_game(uuid4(), new_game) is None


def test_delete_game(db_session_repo: Session, new_game: GameModel) -> None:
    """Record of the game should no longer exist after deletion"""
    repo = SQLGameRepository(db_session_repo)
    created_game, game_id = repo.create_game(new_game)
    deleted_game = repo.delete_game(game_id)

    # the correct game should be deleted
    assert deleted_game == created_game

    # The game should no longer be available in db
    assert repo.get_game(game_id) is None


def test_attempt_deleting_unknown_game(db_session_repo: Session) -> None:
    """the delete_game() method should break early and return None"""
    repo = SQLGameRepository(db_session_repo)
    assert repo.delete_game(uuid4()) is None
