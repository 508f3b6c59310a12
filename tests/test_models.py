"""Tests for Pydantic models."""
import pytest
from datetime import date, datetime
from pydantic import ValidationError


class TestGoalEnums:
    """Tests for goal enums."""

    def test_goal_type_enum_values(self):
        """Test GoalType enum has correct values."""
        from app.models.goal import GoalType

        assert [t.value for t in GoalType] == [
            "score",
            "average",
            "strikes",
            "spares",
            "games",
            "consistency",
        ]

    def test_goal_priority_enum_values(self):
        """Test GoalPriority enum has correct values."""
        from app.models.goal import GoalPriority

        assert GoalPriority.LOW.value == "low"
        assert GoalPriority.MEDIUM.value == "medium"
        assert GoalPriority.HIGH.value == "high"

    def test_goal_filter_enum_values(self):
        """Test GoalFilter enum has correct values."""
        from app.models.goal import GoalFilter

        assert {f.value for f in GoalFilter} == {"all", "active", "completed", "overdue"}

    def test_every_type_has_label(self):
        """Test each goal type has a display label."""
        from app.models.goal import GOAL_TYPE_LABELS, GoalType

        assert set(GOAL_TYPE_LABELS) == set(GoalType)
        assert GOAL_TYPE_LABELS[GoalType.GAMES] == "Games Played"


class TestGoalCreateModel:
    """Tests for GoalCreate model."""

    def test_goal_create_minimal(self):
        """Test creating a goal with minimal required fields."""
        from app.models.goal import GoalCreate, GoalPriority, GoalType

        goal = GoalCreate(title="Break 200", target=200, deadline=date(2025, 12, 31))

        assert goal.type == GoalType.SCORE  # default
        assert goal.priority == GoalPriority.MEDIUM  # default
        assert goal.description == ""

    def test_goal_create_parses_strings(self):
        """Test enums and dates are parsed from JSON-style input."""
        from app.models.goal import GoalCreate, GoalPriority, GoalType

        goal = GoalCreate(
            title="Consistent",
            type="consistency",
            target="80",
            deadline="2025-12-31",
            priority="high",
        )

        assert goal.type == GoalType.CONSISTENCY
        assert goal.target == 80.0
        assert goal.deadline == date(2025, 12, 31)
        assert goal.priority == GoalPriority.HIGH

    @pytest.mark.parametrize("target", [0, -1])
    def test_goal_create_rejects_non_positive_target(self, target):
        """Test target must be greater than zero."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(title="Bad", target=target, deadline=date(2025, 12, 31))

    def test_goal_create_rejects_unknown_type(self):
        """Test type must be a known goal type."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(title="Bad", type="turkeys", target=3, deadline=date(2025, 12, 31))

    def test_goal_create_requires_deadline(self):
        """Test deadline is required."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(title="No deadline", target=200)


class TestGoalUpdateModel:
    """Tests for GoalUpdate model."""

    def test_goal_update_all_optional(self):
        """Test an empty update is valid."""
        from app.models.goal import GoalUpdate

        update = GoalUpdate()

        assert update.title is None
        assert update.type is None
        assert update.target is None

    def test_goal_update_rejects_zero_target(self):
        """Test target updates must be positive."""
        from app.models.goal import GoalUpdate

        with pytest.raises(ValidationError):
            GoalUpdate(target=0)


class TestGoalModel:
    """Tests for the stored Goal model."""

    def test_goal_defaults(self):
        """Test derived fields default to no progress."""
        from app.models.goal import Goal

        goal = Goal(
            id="abc",
            title="Break 200",
            type="score",
            target=200,
            deadline=date(2025, 12, 31),
            created_at=datetime(2025, 1, 1),
        )

        assert goal.current_value == 0
        assert goal.progress == 0
        assert goal.is_completed is False
        assert goal.completed_at is None
        assert goal.type_label == "High Score"

    def test_goal_accepts_malformed_stored_data(self):
        """Test stored goals with bad type or target still load."""
        from app.models.goal import Goal

        goal = Goal(
            id="abc",
            title="Legacy",
            type="turkeys",
            target=0,
            deadline=date(2025, 12, 31),
            created_at=datetime(2025, 1, 1),
        )

        assert goal.type == "turkeys"
        assert goal.type_label == "turkeys"


class TestGameRecordModel:
    """Tests for GameRecord model."""

    def test_game_record_alias(self):
        """Test _id populates id and serializes as id."""
        from app.models.game import GameRecord

        game = GameRecord(_id="g1", total_score=180, created_at=datetime(2025, 1, 1))

        assert game.id == "g1"
        assert game.strikes == 0
        assert game.model_dump(by_alias=True)["id"] == "g1"

    def test_game_record_rejects_negative_counts(self):
        """Test counts cannot be negative."""
        from app.models.game import GameRecord

        with pytest.raises(ValidationError):
            GameRecord(_id="g1", total_score=-5, created_at=datetime(2025, 1, 1))


class TestGoalViewModel:
    """Tests for the presentation model."""

    def test_type_label_is_computed_on_goal(self):
        """Test type_label is serialized from Goal, not redeclared on GoalView."""
        from app.models.goal import Goal, GoalView

        assert "type_label" in Goal.model_computed_fields
        assert "type_label" not in GoalView.model_fields

        goal = Goal(
            id="abc",
            title="Strike out",
            type="strikes",
            target=100,
            deadline=date(2025, 12, 31),
            created_at=datetime(2025, 1, 1),
        )

        assert goal.model_dump()["type_label"] == "Total Strikes"
