"""Goal store - persisted goal set per bowler.

Each bowler has a single document in the goal-set collection holding every
goal. Writes replace that document whole, so a save is atomic.
"""
import logging
import uuid
from datetime import datetime, timedelta

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from app.config import settings
from app.models.goal import Goal, GoalDiagnostic, GoalPriority, GoalType

logger = logging.getLogger(__name__)


class GoalStoreError(Exception):
    """Raised when goals or games cannot be read from or written to MongoDB."""


def default_goals(now: datetime) -> list[Goal]:
    """
    Starter goals seeded the first time a bowler's goals are loaded.

    Args:
        now: Creation time; deadlines are 30 and 60 days out

    Returns:
        List of default goals
    """
    return [
        Goal(
            id=uuid.uuid4().hex,
            title="Break 200",
            description="Roll a game with score of 200 or higher",
            type=GoalType.SCORE.value,
            target=200,
            deadline=(now + timedelta(days=30)).date(),
            priority=GoalPriority.HIGH,
            created_at=now,
        ),
        Goal(
            id=uuid.uuid4().hex,
            title="Maintain 150+ Average",
            description="Keep your average score above 150 for 10 consecutive games",
            type=GoalType.AVERAGE.value,
            target=150,
            deadline=(now + timedelta(days=60)).date(),
            priority=GoalPriority.MEDIUM,
            created_at=now,
        ),
    ]


def _raw_goal_id(goal_doc) -> str:
    """Best-effort ID of a raw embedded goal document."""
    if isinstance(goal_doc, dict):
        return str(goal_doc.get("id", ""))
    return ""


class GoalStore:
    """MongoDB-backed goal set storage."""

    def __init__(self, db):
        """Initialize store with database connection."""
        self.db = db
        self.goal_sets = db[settings.goals_collection]
        # Embedded goal documents from the last load that could not be parsed,
        # keyed by user ID. They are written back untouched on save.
        self.unreadable: dict[str, list[dict]] = {}

    def _doc_to_goal(self, doc: dict) -> Goal:
        """
        Convert an embedded goal document to a Goal model.

        MongoDB has no date type, so deadline comes back as a datetime.
        A non-numeric target reads as 0 and an unknown priority as medium;
        the progress engine reports the bad target and type.

        Raises:
            KeyError: If id, deadline or created_at is missing
            ValidationError: If the remaining fields cannot be parsed
        """
        try:
            target = float(doc.get("target"))
        except (TypeError, ValueError):
            target = 0.0

        priority = doc.get("priority", GoalPriority.MEDIUM.value)
        if priority not in {p.value for p in GoalPriority}:
            logger.warning(
                "Goal %s has unknown priority %r, reading as medium",
                doc.get("id"),
                priority,
            )
            priority = GoalPriority.MEDIUM.value

        deadline = doc["deadline"]
        return Goal(
            id=doc["id"],
            title=doc.get("title") or "",
            description=doc.get("description") or "",
            type=str(doc.get("type", "")),
            target=target,
            current_value=doc.get("current_value") or 0,
            progress=doc.get("progress") or 0,
            deadline=deadline.date() if isinstance(deadline, datetime) else deadline,
            priority=priority,
            is_completed=bool(doc.get("is_completed", False)),
            completed_at=doc.get("completed_at"),
            created_at=doc["created_at"],
        )

    def _goal_to_doc(self, goal: Goal) -> dict:
        """Convert a Goal to its embedded document form."""
        return {
            "id": goal.id,
            "title": goal.title,
            "description": goal.description,
            "type": goal.type,
            "target": goal.target,
            "current_value": goal.current_value,
            "progress": goal.progress,
            "deadline": datetime.combine(goal.deadline, datetime.min.time()),
            "priority": GoalPriority(goal.priority).value,
            "is_completed": goal.is_completed,
            "completed_at": goal.completed_at,
            "created_at": goal.created_at,
        }

    async def load_goals(self, user_id: str, seed: bool = True) -> list[Goal]:
        """
        Load a bowler's full goal set.

        Seeds and saves the default goals on first use unless ``seed`` is
        False. A bowler who deleted every goal keeps an empty set. Goal
        documents that cannot be parsed are left out of the result and kept
        in ``unreadable`` so the next save writes them back as they were.

        Callers that may seed must hold the bowler's write lock.

        Args:
            user_id: Bowler's user ID
            seed: Whether to create the default goals when none are stored

        Returns:
            List of goals in stored order

        Raises:
            GoalStoreError: If MongoDB fails
        """
        try:
            doc = await self.goal_sets.find_one({"user_id": user_id})
        except PyMongoError as e:
            logger.error("Failed to load goals for user %s: %s", user_id, e)
            raise GoalStoreError("Failed to load goals") from e

        self.unreadable[user_id] = []

        if not doc:
            if not seed:
                return []
            goals = default_goals(datetime.utcnow())
            logger.info("Seeding %d default goals for user %s", len(goals), user_id)
            await self.save_goals(user_id, goals)
            return goals

        goals = []
        for goal_doc in doc.get("goals", []):
            try:
                goals.append(self._doc_to_goal(goal_doc))
            except (AttributeError, KeyError, TypeError, ValidationError) as e:
                logger.warning(
                    "Unreadable goal %s for user %s: %s",
                    _raw_goal_id(goal_doc),
                    user_id,
                    e,
                )
                self.unreadable[user_id].append(goal_doc)
        return goals

    def unreadable_diagnostics(self, user_id: str) -> list[GoalDiagnostic]:
        """Diagnostics for goal documents skipped by the last load."""
        return [
            GoalDiagnostic(
                goal_id=_raw_goal_id(goal_doc),
                code="unreadable",
                message="Stored goal could not be read and was left unchanged",
            )
            for goal_doc in self.unreadable.get(user_id, [])
        ]

    async def save_goals(self, user_id: str, goals: list[Goal]) -> None:
        """
        Replace a bowler's full goal set.

        Unreadable goal documents from the last load are appended unchanged.

        Args:
            user_id: Bowler's user ID
            goals: Complete goal set to store

        Raises:
            GoalStoreError: If MongoDB fails
        """
        goal_set_doc = {
            "user_id": user_id,
            "goals": [self._goal_to_doc(goal) for goal in goals]
            + self.unreadable.get(user_id, []),
            "updated_at": datetime.utcnow(),
        }

        try:
            await self.goal_sets.replace_one(
                {"user_id": user_id},
                goal_set_doc,
                upsert=True,
            )
        except PyMongoError as e:
            logger.error("Failed to save goals for user %s: %s", user_id, e)
            raise GoalStoreError("Failed to save goals") from e
