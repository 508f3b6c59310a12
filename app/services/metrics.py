"""Metric evaluators - reduce a game history to a goal's current value.

Every evaluator takes the completed games ordered oldest to newest and
returns a single integer. Windowed metrics read the tail of that list, so
the ordering contract is owned by ``GameHistoryService.get_games``.
"""
import math
import statistics
from typing import Callable, Sequence

from app.models.game import GameRecord
from app.models.goal import GoalType

AVERAGE_WINDOW = 10
AVERAGE_MIN_GAMES = 10
CONSISTENCY_WINDOW = 10
CONSISTENCY_MIN_GAMES = 5


class InsufficientSamplesError(Exception):
    """Raised when a windowed metric does not have enough games yet."""


class UnknownGoalTypeError(ValueError):
    """Raised when a goal's type has no evaluator."""


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up.

    Python's round() uses banker's rounding, so 150.5 would become 150.

    Examples:
        >>> round_half_up(150.5)
        151
        >>> round_half_up(149.4)
        149
    """
    return math.floor(value + 0.5)


def _recent(games: Sequence[GameRecord], count: int) -> Sequence[GameRecord]:
    return games[-count:]


def high_score(games: Sequence[GameRecord]) -> int:
    """Best single-game total, 0 with no games."""
    return max((game.total_score for game in games), default=0)


def average_score(games: Sequence[GameRecord]) -> int:
    """
    Rounded mean total score of the most recent games.

    Raises:
        InsufficientSamplesError: If fewer than AVERAGE_MIN_GAMES games exist
    """
    if len(games) < AVERAGE_MIN_GAMES:
        raise InsufficientSamplesError(
            f"average needs {AVERAGE_MIN_GAMES} games, have {len(games)}"
        )
    scores = [game.total_score for game in _recent(games, AVERAGE_WINDOW)]
    return round_half_up(statistics.fmean(scores))


def total_strikes(games: Sequence[GameRecord]) -> int:
    """Lifetime strike count."""
    return sum(game.strikes for game in games)


def total_spares(games: Sequence[GameRecord]) -> int:
    """Lifetime spare count."""
    return sum(game.spares for game in games)


def games_played(games: Sequence[GameRecord]) -> int:
    """Number of completed games."""
    return len(games)


def consistency(games: Sequence[GameRecord]) -> int:
    """
    Consistency percentage of recent scores.

    Computed as ``100 - coefficient of variation`` over up to the last
    CONSISTENCY_WINDOW games, floored at 0. Uses the population standard
    deviation. A zero mean (all gutter games) scores 0.

    Raises:
        InsufficientSamplesError: If fewer than CONSISTENCY_MIN_GAMES games exist
    """
    if len(games) < CONSISTENCY_MIN_GAMES:
        raise InsufficientSamplesError(
            f"consistency needs {CONSISTENCY_MIN_GAMES} games, have {len(games)}"
        )
    scores = [game.total_score for game in _recent(games, CONSISTENCY_WINDOW)]
    mean = statistics.fmean(scores)
    if mean == 0:
        return 0
    stddev = statistics.pstdev(scores)
    return round_half_up(max(0.0, 100 - (stddev / mean) * 100))


EVALUATORS: dict[GoalType, Callable[[Sequence[GameRecord]], int]] = {
    GoalType.SCORE: high_score,
    GoalType.AVERAGE: average_score,
    GoalType.STRIKES: total_strikes,
    GoalType.SPARES: total_spares,
    GoalType.GAMES: games_played,
    GoalType.CONSISTENCY: consistency,
}


def parse_goal_type(goal_type: str) -> GoalType:
    """
    Resolve a stored type string to a GoalType.

    Raises:
        UnknownGoalTypeError: If the type is not one of GoalType
    """
    try:
        return GoalType(goal_type)
    except ValueError:
        raise UnknownGoalTypeError(f"Unknown goal type: {goal_type!r}")


def evaluate(goal_type: str, games: Sequence[GameRecord]) -> int:
    """
    Compute the current value for a goal type.

    Args:
        goal_type: Goal type (GoalType member or its string value)
        games: Completed games, oldest first

    Returns:
        Current metric value

    Raises:
        UnknownGoalTypeError: If the type has no evaluator
        InsufficientSamplesError: If a windowed metric lacks games
    """
    return EVALUATORS[parse_goal_type(goal_type)](games)
