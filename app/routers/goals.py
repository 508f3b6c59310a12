"""Goal router - API endpoints for bowling goals and progress."""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.models.goal import (
    GoalCreate,
    GoalFilter,
    GoalStats,
    GoalUpdate,
    GoalView,
    RecomputeResult,
)
from app.services.goal_filter import to_view
from app.services.goal_service import GoalService
from app.services.goal_store import GoalStoreError
from app.utils.auth import get_current_user_id


router = APIRouter(prefix="/goals", tags=["goals"])


def get_goal_service(db=Depends(get_database)) -> GoalService:
    """Dependency to build a GoalService."""
    return GoalService(db)


def _storage_unavailable(e: GoalStoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(e),
    )


@router.get("", response_model=list[GoalView])
async def list_goals(
    goal_filter: GoalFilter = Query(
        GoalFilter.ALL,
        alias="filter",
        description="Filter by state (all, active, completed, overdue)",
    ),
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """
    List goals for the authenticated bowler.

    - Requires authentication
    - Seeds default goals on first use
    - Returns stored progress; call POST /goals/recompute to refresh it
    """
    try:
        goals = await service.list_goals(user_id=user_id, goal_filter=goal_filter)
    except GoalStoreError as e:
        raise _storage_unavailable(e)
    return [to_view(goal) for goal in goals]


@router.get("/stats", response_model=GoalStats)
async def get_goal_stats(
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """Total, active, completed and overdue counts over all goals."""
    try:
        return await service.get_stats(user_id=user_id)
    except GoalStoreError as e:
        raise _storage_unavailable(e)


@router.post("/recompute", response_model=RecomputeResult)
async def recompute_goals(
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """
    Recompute progress for every goal from the bowler's completed games.

    - Requires authentication
    - Malformed goals are left unchanged and listed in diagnostics
    - Returns 503 if storage is unavailable; nothing is saved in that case
    """
    try:
        return await service.recompute(user_id=user_id)
    except GoalStoreError as e:
        raise _storage_unavailable(e)


@router.post("", response_model=GoalView, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """
    Create a new goal.

    - Requires authentication
    - Target must be greater than zero
    - Progress is computed immediately
    """
    try:
        created = await service.create_goal(user_id=user_id, goal_create=goal)
    except GoalStoreError as e:
        raise _storage_unavailable(e)
    return to_view(created)


@router.get("/{goal_id}", response_model=GoalView)
async def get_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """
    Get a single goal by ID.

    - Requires authentication
    - Returns 404 if goal not found
    """
    try:
        goal = await service.get_goal(user_id=user_id, goal_id=goal_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoalStoreError as e:
        raise _storage_unavailable(e)
    return to_view(goal)


@router.patch("/{goal_id}", response_model=GoalView)
async def update_goal(
    goal_id: str,
    goal_update: GoalUpdate,
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """
    Update a goal.

    - Requires authentication
    - Changing type or target restarts progress from scratch
    - Returns 404 if goal not found
    """
    try:
        updated = await service.update_goal(
            user_id=user_id,
            goal_id=goal_id,
            goal_update=goal_update,
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoalStoreError as e:
        raise _storage_unavailable(e)
    return to_view(updated)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
):
    """
    Permanently delete a goal.

    - Requires authentication
    - Returns 404 if goal not found
    """
    try:
        return await service.delete_goal(user_id=user_id, goal_id=goal_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoalStoreError as e:
        raise _storage_unavailable(e)
