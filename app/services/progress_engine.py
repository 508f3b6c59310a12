"""Progress engine - derive goal progress from game history.

Pure logic: no database access. ``GoalService.recompute`` loads the goal set
and games, calls ``recompute_goals`` and writes the returned set back.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence

from app.models.game import GameRecord
from app.models.goal import Goal, GoalDiagnostic, RecomputeResult
from app.services.metrics import (
    InsufficientSamplesError,
    UnknownGoalTypeError,
    evaluate,
    parse_goal_type,
)

logger = logging.getLogger(__name__)


class InvalidTargetError(ValueError):
    """Raised when a goal target is not a positive number."""


def calculate_progress(current_value: float, target: float) -> float:
    """
    Percent of target reached, clamped to [0, 100].

    Args:
        current_value: Current metric value
        target: Goal target

    Returns:
        Progress percentage

    Raises:
        InvalidTargetError: If target is not positive
    """
    if not target > 0:
        raise InvalidTargetError(f"Target must be positive, got {target!r}")
    return max(0.0, min(100.0, 100 * current_value / target))


def apply_progress(
    goal: Goal,
    games: Sequence[GameRecord],
    now: datetime,
) -> Goal:
    """
    Recompute one goal against the game history.

    The goal comes back unchanged when its metric does not have enough
    games yet. Completion is a latch: a completed goal stays completed, and
    ``completed_at`` is only stamped on the call that flips it.

    Args:
        goal: Stored goal
        games: Completed games, oldest first
        now: Timestamp recorded as completed_at on completion

    Returns:
        Updated copy of the goal

    Raises:
        UnknownGoalTypeError: If the goal type is unknown
        InvalidTargetError: If the goal target is not positive
    """
    parse_goal_type(goal.type)
    if not goal.target > 0:
        raise InvalidTargetError(f"Target must be positive, got {goal.target!r}")

    try:
        current_value = evaluate(goal.type, games)
    except InsufficientSamplesError:
        return goal

    update = {
        "current_value": current_value,
        "progress": calculate_progress(current_value, goal.target),
    }
    if current_value >= goal.target and not goal.is_completed:
        update["is_completed"] = True
        update["completed_at"] = now

    return goal.model_copy(update=update)


def recompute_goals(
    goals: Sequence[Goal],
    games: Sequence[GameRecord],
    now: Optional[datetime] = None,
) -> RecomputeResult:
    """
    Recompute every goal in a set.

    Goals are independent. A malformed goal is kept as-is and reported in
    the diagnostics; it never stops the rest of the set from updating.

    Args:
        goals: Full stored goal set
        games: Completed games, oldest first
        now: Recompute timestamp (defaults to utcnow)

    Returns:
        RecomputeResult with the full updated set, in input order
    """
    if now is None:
        now = datetime.utcnow()

    updated: list[Goal] = []
    diagnostics: list[GoalDiagnostic] = []

    for goal in goals:
        try:
            updated.append(apply_progress(goal, games, now))
        except UnknownGoalTypeError as e:
            diagnostics.append(
                GoalDiagnostic(goal_id=goal.id, code="unknown_type", message=str(e))
            )
            updated.append(goal)
        except InvalidTargetError as e:
            diagnostics.append(
                GoalDiagnostic(goal_id=goal.id, code="invalid_target", message=str(e))
            )
            updated.append(goal)

    for diagnostic in diagnostics:
        logger.warning(
            "Skipped goal %s: %s", diagnostic.goal_id, diagnostic.message
        )

    return RecomputeResult(goals=updated, diagnostics=diagnostics)
