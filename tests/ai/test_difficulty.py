"""Unit tests for /chessmate/ai/difficulty.py"""

from random import Random
from typing import Callable

import pytest

from chessmate.ai.difficulty import (
    TIER_POLICIES,
    CaptureBiasedPolicy,
    DifficultySelector,
    DifficultyTier,
    RandomPolicy,
    StaticEvalPolicy,
    policy_for_tier,
)
from chessmate.chess.move_generator import gives_check, legal_moves
from chessmate.chess.moves import Move
from chessmate.chess.position import Position

# white pawn on e4 can take the black queen on d5. No other capture on the board.
QUEEN_HANGS = "4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1"
# pawn on d4 can take a rook (c5) or a knight standing in the center (e5)
ROOK_OR_KNIGHT = "4k3/8/8/2r1n3/3P4/8/8/4K3 w - - 0 1"
# rook a1 can give check on a8, nothing else can
ONE_CHECK = "4k3/8/8/8/8/8/8/R3K3 w - - 0 1"


# -- TIERS --
def test_tier_labels() -> None:
    assert [tier.label for tier in DifficultyTier] == [
        "Beginner",
        "Easy",
        "Medium",
        "Hard",
        "Expert",
    ]


def test_tier_table() -> None:
    assert TIER_POLICIES[DifficultyTier.BEGINNER] == CaptureBiasedPolicy(0.6, 0.0)
    assert TIER_POLICIES[DifficultyTier.EASY] == CaptureBiasedPolicy(0.7, 0.4)
    assert TIER_POLICIES[DifficultyTier.MEDIUM] == CaptureBiasedPolicy(0.7, 0.4)
    assert TIER_POLICIES[DifficultyTier.HARD] == StaticEvalPolicy(jitter=2.0)
    assert TIER_POLICIES[DifficultyTier.EXPERT] == StaticEvalPolicy(jitter=0.5)
    assert policy_for_tier(3) == TIER_POLICIES[DifficultyTier.MEDIUM]


@pytest.mark.parametrize("tier", [0, 6])
def test_unknown_tier(tier: int) -> None:
    with pytest.raises(ValueError):
        policy_for_tier(tier)


@pytest.mark.parametrize(
    "level, tier",
    [
        (1, DifficultyTier.BEGINNER),
        (3, DifficultyTier.BEGINNER),
        (3.5, DifficultyTier.MEDIUM),
        (6, DifficultyTier.MEDIUM),
        (7, DifficultyTier.HARD),
        (10, DifficultyTier.HARD),
        (-4, DifficultyTier.BEGINNER),  # clamped
        (42, DifficultyTier.HARD),  # clamped
    ],
)
def test_skill_level(level: float, tier: DifficultyTier) -> None:
    assert DifficultyTier.from_skill_level(level) == tier


# -- SELECTOR --
@pytest.mark.parametrize("tier", list(DifficultyTier))
def test_selects_a_legal_move(tier: DifficultyTier) -> None:
    position = Position.starting()
    moves = legal_moves(position)
    selector = DifficultySelector.for_tier(tier, seed=7)
    for _ in range(20):
        assert selector.select(position, moves) in moves


@pytest.mark.parametrize("tier", list(DifficultyTier))
def test_no_moves_no_selection(tier: DifficultyTier) -> None:
    stalemate = Position.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert DifficultySelector.for_tier(tier, seed=1).select(stalemate, []) is None


def test_same_seed_same_moves() -> None:
    position = Position.starting()
    moves = legal_moves(position)
    first = DifficultySelector.for_tier(DifficultyTier.BEGINNER, seed=1234)
    second = DifficultySelector.for_tier(DifficultyTier.BEGINNER, rng=Random(1234))
    assert [first.select(position, moves) for _ in range(10)] == [
        second.select(position, moves) for _ in range(10)
    ]


@pytest.mark.parametrize("tier", [DifficultyTier.HARD, DifficultyTier.EXPERT])
@pytest.mark.parametrize("seed", range(10))
def test_static_evaluation_takes_the_queen(tier: DifficultyTier, seed: int) -> None:
    position = Position.from_fen(QUEEN_HANGS)
    move = DifficultySelector.for_tier(tier, seed=seed).select(position, legal_moves(position))
    assert move == Move.from_uci("e4d5")


@pytest.mark.parametrize("seed", range(10))
def test_static_evaluation_prefers_bigger_capture(seed: int) -> None:
    position = Position.from_fen(ROOK_OR_KNIGHT)
    selector = DifficultySelector(StaticEvalPolicy(jitter=2.0), seed=seed)
    assert selector.select(position, legal_moves(position)) == Move.from_uci("d4c5")


# -- POLICIES --
def test_static_scores() -> None:
    policy = StaticEvalPolicy()
    queen_hangs = Position.from_fen(QUEEN_HANGS)
    # queen (9) in the center
    assert policy.score(queen_hangs, Move.from_uci("e4d5")) == 10 * 9 + 2
    # a check, nothing else
    assert policy.score(Position.from_fen(ONE_CHECK), Move.from_uci("a1a8")) == 5

    promotion = Position.from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
    assert policy.score(promotion, Move.from_uci("e7e8q")) == 8 * 9
    assert policy.score(promotion, Move.from_uci("e7e8n")) == 8 * 3


def test_scores_do_not_depend_on_move_flags() -> None:
    """A move typed in by hand (no flags) scores the same as the generated one."""
    policy = StaticEvalPolicy()
    position = Position.from_fen(QUEEN_HANGS)
    generated = next(move for move in legal_moves(position) if move.is_capture)
    typed = Move.from_uci("e4d5")
    assert not typed.is_capture
    assert policy.score(position, typed) == policy.score(position, generated)

    en_passant = Position.from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 2")
    assert policy.score(en_passant, Move.from_uci("e5d6")) == 10


def test_en_passant_counts_as_capturing_a_pawn() -> None:
    position = Position.from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 2")
    en_passant = next(move for move in legal_moves(position) if move.is_en_passant)
    assert StaticEvalPolicy().score(position, en_passant) == 10


def test_capture_biased_policy_grabs_capture() -> None:
    position = Position.from_fen(QUEEN_HANGS)
    policy = CaptureBiasedPolicy(capture_probability=1.0)
    rng = Random(3)
    for _ in range(10):
        assert policy.choose(position, legal_moves(position), rng) == Move.from_uci("e4d5")


def test_capture_biased_policy_recognises_typed_captures() -> None:
    position = Position.from_fen(QUEEN_HANGS)
    policy = CaptureBiasedPolicy(capture_probability=1.0)
    moves = [Move.from_uci("e1d1"), Move.from_uci("e4e5"), Move.from_uci("e4d5")]
    rng = Random(5)
    for _ in range(10):
        assert policy.choose(position, moves, rng) == Move.from_uci("e4d5")


def test_capture_biased_policy_gives_check() -> None:
    position = Position.from_fen(ONE_CHECK)
    policy = CaptureBiasedPolicy(capture_probability=1.0, check_probability=1.0)
    move = policy.choose(position, legal_moves(position), Random(5))
    assert gives_check(position, move)


def test_random_policy_only_picks_from_given_moves() -> None:
    position = Position.starting()
    moves = [Move.from_uci("e2e4"), Move.from_uci("d2d4")]
    rng = Random(0)
    assert {RandomPolicy().choose(position, moves, rng) for _ in range(50)} == set(moves)


@pytest.mark.parametrize(
    "make_policy",
    [
        lambda: CaptureBiasedPolicy(capture_probability=1.5),
        lambda: CaptureBiasedPolicy(check_probability=-0.1),
        lambda: StaticEvalPolicy(jitter=10.0),
        lambda: StaticEvalPolicy(jitter=-1.0),
    ],
)
def test_invalid_policy_parameters(make_policy: Callable[[], object]) -> None:
    with pytest.raises(ValueError):
        make_policy()
