"""Game record model (read-only view of games written by the game service)."""
from datetime import datetime

from pydantic import BaseModel, Field


class GameRecord(BaseModel):
    """A bowled game as consumed by the goal metrics."""

    id: str = Field(alias="_id", serialization_alias="id")
    total_score: int = Field(default=0, ge=0)
    strikes: int = Field(default=0, ge=0)
    spares: int = Field(default=0, ge=0)
    is_complete: bool = True
    created_at: datetime

    model_config = {"populate_by_name": True}
