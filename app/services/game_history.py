"""Game history provider - completed games for goal metrics."""
import logging

from pymongo.errors import PyMongoError

from app.config import settings
from app.models.game import GameRecord
from app.services.goal_store import GoalStoreError

logger = logging.getLogger(__name__)


class GameHistoryService:
    """Read-only access to a bowler's games."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.games = db[settings.games_collection]

    def _doc_to_game(self, doc: dict) -> GameRecord:
        """
        Convert database document to GameRecord model.

        Missing or null counts read as zero.
        """
        return GameRecord(
            _id=str(doc["_id"]),
            total_score=doc.get("total_score") or 0,
            strikes=doc.get("strikes") or 0,
            spares=doc.get("spares") or 0,
            is_complete=doc.get("is_complete", False),
            created_at=doc["created_at"],
        )

    async def get_games(self, user_id: str) -> list[GameRecord]:
        """
        Get a bowler's completed games, oldest first.

        The newest game is always last; windowed metrics depend on it.

        Args:
            user_id: Bowler's user ID

        Returns:
            Completed games sorted by created_at ascending

        Raises:
            GoalStoreError: If MongoDB fails
        """
        query = {
            "user_id": user_id,
            "is_complete": True,
        }

        try:
            cursor = self.games.find(query).sort("created_at", 1)
            game_docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to load games for user %s: %s", user_id, e)
            raise GoalStoreError("Failed to load game history") from e

        games = [self._doc_to_game(doc) for doc in game_docs]
        games.sort(key=lambda game: game.created_at)
        return games
