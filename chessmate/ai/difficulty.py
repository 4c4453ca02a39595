"""
The artificial opponent: picks one of the legal moves, according to a difficulty tier.

Key idea: every tier maps onto one of three policies (strategy pattern, like the movement rules):

* RandomPolicy: any legal move, uniformly at random.
* CaptureBiasedPolicy: mostly random, but with a fixed chance of grabbing a capture (or giving a check) when there is one.
* StaticEvalPolicy: score every move one ply deep (captures, promotions, checks, center squares) and play the best one.

All randomness comes from the `random.Random` handed to the DifficultySelector: seed it to get reproducible games.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from random import Random
from typing import Optional, Protocol, Sequence

from chessmate.chess.move_generator import annotate, gives_check
from chessmate.chess.moves import Move
from chessmate.chess.pieces import PIECE_POINTS
from chessmate.chess.position import Position
from chessmate.chess.square import CENTER_SQUARES
from chessmate.core.logger import get_logger

logger = get_logger(__name__)


class DifficultyTier(IntEnum):
    BEGINNER = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    EXPERT = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_skill_level(cls, level: float) -> DifficultyTier:
        """
        Continuous 1-10 skill level (as offered by the stand-alone engine utility)
        ----
        <= 3: beginner play, <= 6: prefers captures and checks, above: evaluates its moves.
        """
        level = max(1.0, min(10.0, level))
        if level <= 3:
            return cls.BEGINNER
        if level <= 6:
            return cls.MEDIUM
        return cls.HARD


class Policy(Protocol):
    """Just the part the DifficultySelector needs"""

    def choose(self, position: Position, moves: Sequence[Move], rng: Random) -> Move: ...


# --- POLICIES ---
@dataclass(frozen=True)
class RandomPolicy:
    """Every legal move is equally likely"""

    def choose(self, position: Position, moves: Sequence[Move], rng: Random) -> Move:
        return rng.choice(moves)


@dataclass(frozen=True)
class CaptureBiasedPolicy:
    """
    Random play with a preference for 'obvious' moves
    ----

    1. If any capture exists: with probability `capture_probability` play one of them (uniformly).
    2. Otherwise, if any check exists: with probability `check_probability` play one of them (uniformly).
    3. Otherwise: any legal move.

    Checks are found by playing each move on a scratch position and asking whether the opponent is now in check.
    """

    capture_probability: float = 0.6
    check_probability: float = 0.0

    def __post_init__(self) -> None:
        for probability in (self.capture_probability, self.check_probability):
            if not 0.0 <= probability <= 1.0:
                raise ValueError(f"Probability must be within [0, 1], got {probability}")

    def choose(self, position: Position, moves: Sequence[Move], rng: Random) -> Move:
        captures = [move for move in moves if annotate(position, move).is_capture]
        if captures and rng.random() < self.capture_probability:
            return rng.choice(captures)

        if self.check_probability > 0:
            checks = [move for move in moves if gives_check(position, move)]
            if checks and rng.random() < self.check_probability:
                return rng.choice(checks)

        return RandomPolicy().choose(position, moves, rng)


@dataclass(frozen=True)
class StaticEvalPolicy:
    """
    Single ply static evaluation
    ----

    score = 10 * value of captured piece
          +  8 * value of the promotion piece
          +  5 if the move gives check
          +  2 if the move lands on one of the four center squares
          + uniform(0, jitter)

    Piece values: pawn 1, knight 3, bishop 3, rook 5, queen 9 (king 0).
    The move with the highest score gets played: the jitter only decides between (nearly) equal moves.
    It has to stay below `capture_weight`, so that it can never outweigh capturing a pawn more.
    """

    capture_weight: float = 10.0
    promotion_weight: float = 8.0
    check_weight: float = 5.0
    center_weight: float = 2.0
    jitter: float = 2.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.jitter < self.capture_weight:
            raise ValueError(
                f"jitter must be within [0, {self.capture_weight}), got {self.jitter}"
            )

    def score(self, position: Position, move: Move) -> float:
        """Score of the move without the random jitter"""
        move = annotate(position, move)
        score = 0.0
        if move.is_capture:
            score += self.capture_weight * _captured_points(position, move)
        if move.promotion is not None:
            score += self.promotion_weight * PIECE_POINTS[move.promotion]
        if gives_check(position, move):
            score += self.check_weight
        if move.to_square in CENTER_SQUARES:
            score += self.center_weight
        return score

    def choose(self, position: Position, moves: Sequence[Move], rng: Random) -> Move:
        scored = [
            (self.score(position, move) + rng.random() * self.jitter, move)
            for move in moves
        ]
        best_score, best_move = max(scored, key=lambda scored_move: scored_move[0])
        logger.debug("Static evaluation picked %s (score %.2f)", best_move, best_score)
        return best_move


DifficultyPolicy = RandomPolicy | CaptureBiasedPolicy | StaticEvalPolicy

# Tier --> policy. Decided once, when the game is configured.
TIER_POLICIES: dict[DifficultyTier, DifficultyPolicy] = {
    DifficultyTier.BEGINNER: CaptureBiasedPolicy(capture_probability=0.6),
    DifficultyTier.EASY: CaptureBiasedPolicy(
        capture_probability=0.7, check_probability=0.4
    ),
    DifficultyTier.MEDIUM: CaptureBiasedPolicy(
        capture_probability=0.7, check_probability=0.4
    ),
    DifficultyTier.HARD: StaticEvalPolicy(jitter=2.0),
    DifficultyTier.EXPERT: StaticEvalPolicy(jitter=0.5),
}


def policy_for_tier(tier: int) -> DifficultyPolicy:
    return TIER_POLICIES[DifficultyTier(tier)]


def _captured_points(position: Position, move: Move) -> int:
    """En passant: nothing stands on the destination square, but a pawn gets taken all the same"""
    if move.is_en_passant:
        return PIECE_POINTS[position.piece_at(move.from_square).type]  # type: ignore[union-attr]
    captured = position.piece_at(move.to_square)
    return captured.points if captured is not None else 0


class DifficultySelector:
    """Picks the computer's move: one move out of the legal ones, or None if there are none."""

    def __init__(
        self,
        policy: DifficultyPolicy,
        rng: Optional[Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.policy = policy
        self.rng = rng if rng is not None else Random(seed)

    @classmethod
    def for_tier(
        cls, tier: int, rng: Optional[Random] = None, seed: Optional[int] = None
    ) -> DifficultySelector:
        return cls(policy_for_tier(tier), rng=rng, seed=seed)

    def select(self, position: Position, legal_moves: Sequence[Move]) -> Optional[Move]:
        if not legal_moves:
            return None
        move = self.policy.choose(position, legal_moves, self.rng)
        logger.debug(
            "%s chose %s out of %d moves",
            type(self.policy).__name__,
            move,
            len(legal_moves),
        )
        return move
