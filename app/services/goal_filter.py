"""Goal filter - read-side views over a goal set."""
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from app.models.goal import Goal, GoalFilter, GoalStats, GoalView


def _naive_utc(now: Optional[datetime]) -> datetime:
    """Normalize to a naive UTC datetime, the form stored in MongoDB."""
    if now is None:
        return datetime.utcnow()
    if now.tzinfo is not None:
        return now.astimezone(timezone.utc).replace(tzinfo=None)
    return now


def deadline_at(goal: Goal) -> datetime:
    """The instant a goal's deadline date starts (00:00 UTC)."""
    return datetime.combine(goal.deadline, datetime.min.time())


def is_overdue(goal: Goal, now: Optional[datetime] = None) -> bool:
    """Incomplete goal whose deadline has passed."""
    return not goal.is_completed and deadline_at(goal) < _naive_utc(now)


def is_active(goal: Goal, now: Optional[datetime] = None) -> bool:
    """Incomplete goal whose deadline has not passed."""
    return not goal.is_completed and deadline_at(goal) >= _naive_utc(now)


def filter_goals(
    goals: Sequence[Goal],
    mode: GoalFilter = GoalFilter.ALL,
    now: Optional[datetime] = None,
) -> list[Goal]:
    """
    Select the goals shown for a filter tab.

    Active, completed and overdue partition the full set.

    Args:
        goals: Full goal set
        mode: Filter to apply
        now: Reference time (defaults to utcnow)

    Returns:
        Matching goals in their stored order
    """
    now = _naive_utc(now)
    mode = GoalFilter(mode)

    if mode == GoalFilter.ACTIVE:
        return [goal for goal in goals if is_active(goal, now)]
    if mode == GoalFilter.COMPLETED:
        return [goal for goal in goals if goal.is_completed]
    if mode == GoalFilter.OVERDUE:
        return [goal for goal in goals if is_overdue(goal, now)]
    return list(goals)


def goal_stats(goals: Sequence[Goal], now: Optional[datetime] = None) -> GoalStats:
    """Counts for the summary cards, always over the full set."""
    now = _naive_utc(now)
    return GoalStats(
        total=len(goals),
        active=sum(1 for goal in goals if is_active(goal, now)),
        completed=sum(1 for goal in goals if goal.is_completed),
        overdue=sum(1 for goal in goals if is_overdue(goal, now)),
    )


def days_remaining(goal: Goal, now: Optional[datetime] = None) -> int:
    """
    Whole days until the deadline, rounded up.

    Negative once the deadline has passed by at least a full day.
    """
    delta = deadline_at(goal) - _naive_utc(now)
    return math.ceil(delta / timedelta(days=1))


def days_overdue(goal: Goal, now: Optional[datetime] = None) -> int:
    """Magnitude of a negative days_remaining, else 0."""
    return max(0, -days_remaining(goal, now))


def to_view(goal: Goal, now: Optional[datetime] = None) -> GoalView:
    """Attach deadline-relative fields for presentation."""
    now = _naive_utc(now)
    return GoalView(
        **goal.model_dump(exclude={"type_label"}),
        days_remaining=days_remaining(goal, now),
        days_overdue=days_overdue(goal, now),
        is_overdue=is_overdue(goal, now),
    )
