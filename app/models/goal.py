"""Goal model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class GoalType(str, Enum):
    """Metric a goal is measured against."""

    SCORE = "score"
    AVERAGE = "average"
    STRIKES = "strikes"
    SPARES = "spares"
    GAMES = "games"
    CONSISTENCY = "consistency"


GOAL_TYPE_LABELS = {
    GoalType.SCORE: "High Score",
    GoalType.AVERAGE: "Average Score",
    GoalType.STRIKES: "Total Strikes",
    GoalType.SPARES: "Total Spares",
    GoalType.GAMES: "Games Played",
    GoalType.CONSISTENCY: "Consistency %",
}


class GoalPriority(str, Enum):
    """Goal priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GoalFilter(str, Enum):
    """Read-side views over a goal set."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class GoalBase(BaseModel):
    """Base goal fields."""

    title: str
    description: str = ""
    deadline: date
    priority: GoalPriority = GoalPriority.MEDIUM


class GoalCreate(GoalBase):
    """Goal creation model."""

    type: GoalType = GoalType.SCORE
    target: float = Field(gt=0)


class GoalUpdate(BaseModel):
    """Goal update model - all fields optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[GoalType] = None
    target: Optional[float] = Field(default=None, gt=0)
    deadline: Optional[date] = None
    priority: Optional[GoalPriority] = None


class Goal(GoalBase):
    """
    Full goal model with derived progress fields.

    ``type`` and ``target`` are left unconstrained so a malformed goal read
    back from storage can still be loaded and reported by the progress
    engine instead of failing the whole goal set.
    """

    id: str
    type: str
    target: float
    current_value: float = 0
    progress: float = 0
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: datetime

    @computed_field
    @property
    def type_label(self) -> str:
        """Human readable label for the goal type."""
        try:
            return GOAL_TYPE_LABELS[GoalType(self.type)]
        except ValueError:
            return self.type


class GoalDiagnostic(BaseModel):
    """A goal the progress engine skipped because its data is malformed."""

    goal_id: str
    code: str  # invalid_target, unknown_type or unreadable
    message: str


class RecomputeResult(BaseModel):
    """Outcome of a recompute pass: the full goal set plus diagnostics."""

    goals: list[Goal]
    diagnostics: list[GoalDiagnostic] = Field(default_factory=list)


class GoalStats(BaseModel):
    """Aggregate counts over the full goal set."""

    total: int
    active: int
    completed: int
    overdue: int


class GoalView(Goal):
    """Goal as presented to clients, with deadline-relative fields."""

    days_remaining: int
    days_overdue: int
    is_overdue: bool
