"""Goal service - business logic for bowling goals and their progress."""
import asyncio
import logging
import uuid
import weakref
from datetime import datetime
from typing import Optional

from app.models.goal import (
    Goal,
    GoalCreate,
    GoalFilter,
    GoalStats,
    GoalUpdate,
    RecomputeResult,
)
from app.services.game_history import GameHistoryService
from app.services.goal_filter import filter_goals, goal_stats
from app.services.goal_store import GoalStore
from app.services.progress_engine import recompute_goals

logger = logging.getLogger(__name__)

# One lock per bowler: every full-set write for a bowler happens under it.
# Entries disappear once no coroutine holds or waits on the lock.
_user_locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()


def _user_lock(user_id: str) -> asyncio.Lock:
    """Get the write lock for a bowler's goal set."""
    lock = _user_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _user_locks[user_id] = lock
    return lock


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.store = GoalStore(db)
        self.history = GameHistoryService(db)

    async def _load_goals(self, user_id: str) -> list[Goal]:
        """Load the goal set under the bowler's lock, since first use seeds it."""
        async with _user_lock(user_id):
            return await self.store.load_goals(user_id)

    async def _recompute_and_save(
        self,
        user_id: str,
        goals: list[Goal],
    ) -> RecomputeResult:
        """
        Recompute a goal set against the bowler's games and write it back.

        Must be called while holding the bowler's lock. Nothing is written
        if fetching the games fails.
        """
        games = await self.history.get_games(user_id)
        result = recompute_goals(goals, games, now=datetime.utcnow())
        result.diagnostics = self.store.unreadable_diagnostics(user_id) + result.diagnostics
        await self.store.save_goals(user_id, result.goals)

        logger.info(
            "Recomputed %d goals for user %s over %d games (%d skipped)",
            len(result.goals),
            user_id,
            len(games),
            len(result.diagnostics),
        )
        return result

    async def recompute(self, user_id: str) -> RecomputeResult:
        """
        Recompute progress for all of a bowler's goals.

        Args:
            user_id: Bowler's user ID

        Returns:
            Updated goal set plus diagnostics for skipped goals

        Raises:
            GoalStoreError: If goals or games cannot be loaded or saved
        """
        async with _user_lock(user_id):
            goals = await self.store.load_goals(user_id)
            return await self._recompute_and_save(user_id, goals)

    async def list_goals(
        self,
        user_id: str,
        goal_filter: GoalFilter = GoalFilter.ALL,
        now: Optional[datetime] = None,
    ) -> list[Goal]:
        """
        List stored goals for a bowler with optional filtering.

        Args:
            user_id: Bowler's user ID
            goal_filter: all, active, completed or overdue
            now: Reference time for deadline filters

        Returns:
            List of goals
        """
        goals = await self._load_goals(user_id)
        return filter_goals(goals, goal_filter, now)

    async def get_stats(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> GoalStats:
        """Summary counts over a bowler's full goal set."""
        goals = await self._load_goals(user_id)
        return goal_stats(goals, now)

    async def get_goal(self, user_id: str, goal_id: str) -> Goal:
        """
        Get a single goal by ID.

        Raises:
            ValueError: If goal not found
        """
        goals = await self._load_goals(user_id)
        for goal in goals:
            if goal.id == goal_id:
                return goal
        raise ValueError("Goal not found")

    async def create_goal(
        self,
        user_id: str,
        goal_create: GoalCreate,
    ) -> Goal:
        """
        Create a new goal and compute its initial progress.

        Args:
            user_id: Bowler's user ID
            goal_create: Goal creation data

        Returns:
            Created goal with progress applied
        """
        goal = Goal(
            id=uuid.uuid4().hex,
            title=goal_create.title,
            description=goal_create.description,
            type=goal_create.type.value,
            target=goal_create.target,
            deadline=goal_create.deadline,
            priority=goal_create.priority,
            created_at=datetime.utcnow(),
        )

        async with _user_lock(user_id):
            goals = await self.store.load_goals(user_id)
            result = await self._recompute_and_save(user_id, goals + [goal])

        return next(g for g in result.goals if g.id == goal.id)

    async def update_goal(
        self,
        user_id: str,
        goal_id: str,
        goal_update: GoalUpdate,
    ) -> Goal:
        """
        Update a goal and recompute progress.

        Changing the type or target clears the derived progress and
        completion so they are derived again from scratch.

        Args:
            user_id: Bowler's user ID
            goal_id: Goal ID
            goal_update: Update data

        Returns:
            Updated goal

        Raises:
            ValueError: If goal not found
        """
        async with _user_lock(user_id):
            goals = await self.store.load_goals(user_id)
            index = next(
                (i for i, goal in enumerate(goals) if goal.id == goal_id), None
            )
            if index is None:
                raise ValueError("Goal not found")

            existing = goals[index]
            update_doc = {}

            if goal_update.title is not None:
                update_doc["title"] = goal_update.title
            if goal_update.description is not None:
                update_doc["description"] = goal_update.description
            if goal_update.deadline is not None:
                update_doc["deadline"] = goal_update.deadline
            if goal_update.priority is not None:
                update_doc["priority"] = goal_update.priority
            if goal_update.type is not None:
                update_doc["type"] = goal_update.type.value
            if goal_update.target is not None:
                update_doc["target"] = goal_update.target

            metric_changed = (
                update_doc.get("type", existing.type) != existing.type
                or update_doc.get("target", existing.target) != existing.target
            )
            if metric_changed:
                update_doc.update(
                    current_value=0,
                    progress=0,
                    is_completed=False,
                    completed_at=None,
                )

            goals[index] = existing.model_copy(update=update_doc)
            result = await self._recompute_and_save(user_id, goals)

        return result.goals[index]

    async def delete_goal(
        self,
        user_id: str,
        goal_id: str,
    ) -> dict:
        """
        Permanently delete a goal.

        Args:
            user_id: Bowler's user ID
            goal_id: Goal ID

        Returns:
            Dictionary with deleted_count

        Raises:
            ValueError: If goal not found
        """
        async with _user_lock(user_id):
            goals = await self.store.load_goals(user_id)
            remaining = [goal for goal in goals if goal.id != goal_id]
            if len(remaining) == len(goals):
                raise ValueError("Goal not found")

            await self._recompute_and_save(user_id, remaining)

        return {"deleted_count": len(goals) - len(remaining)}
