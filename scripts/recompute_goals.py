"""Recompute goal progress for a bowler from the command line.

Usage:
    # Show what would change without saving
    python scripts/recompute_goals.py --user-id 42 --dry-run

    # Recompute and save
    python scripts/recompute_goals.py --user-id 42

Reads MONGODB_URL and JWT_SECRET from the environment or .env like the API.
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient

from app.config import settings
from app.log import configure_logging
from app.services.game_history import GameHistoryService
from app.services.goal_filter import goal_stats
from app.services.goal_service import GoalService
from app.services.goal_store import GoalStore, GoalStoreError
from app.services.progress_engine import recompute_goals


async def run(mongodb_url: str, user_id: str, dry_run: bool) -> int:
    """Recompute one bowler's goals and print a summary."""
    client = AsyncIOMotorClient(mongodb_url)
    db = client[settings.mongodb_db_name]

    try:
        if dry_run:
            store = GoalStore(db)
            goals = await store.load_goals(user_id, seed=False)
            games = await GameHistoryService(db).get_games(user_id)
            result = recompute_goals(goals, games)
            result.diagnostics = store.unreadable_diagnostics(user_id) + result.diagnostics
        else:
            result = await GoalService(db).recompute(user_id)
    except GoalStoreError as e:
        print(f"Error: {e}")
        return 1
    finally:
        client.close()

    if not result.goals:
        print("  no stored goals")
    for goal in result.goals:
        status = "done" if goal.is_completed else f"{goal.progress:.0f}%"
        print(f"  [{status:>4}] {goal.title}: {goal.current_value:g} / {goal.target:g}")
    for diagnostic in result.diagnostics:
        print(f"  skipped {diagnostic.goal_id}: {diagnostic.message}")

    stats = goal_stats(result.goals)
    print(
        f"{stats.total} goals: {stats.active} active, "
        f"{stats.completed} completed, {stats.overdue} overdue"
    )
    if dry_run:
        print("Dry run - nothing saved")
    return 0


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Recompute bowling goal progress")
    parser.add_argument(
        "--mongodb-url",
        default=settings.mongodb_url,
        help="MongoDB connection URL",
    )
    parser.add_argument(
        "--user-id",
        required=True,
        help="Bowler's user ID",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show recomputed progress without saving it",
    )

    args = parser.parse_args()
    configure_logging(settings.log_level)

    sys.exit(await run(args.mongodb_url, args.user_id, args.dry_run))


if __name__ == "__main__":
    asyncio.run(main())
