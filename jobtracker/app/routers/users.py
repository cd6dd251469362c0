from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..models.applications import WeeklyGoalUpdate
from ..dependencies import get_db, get_acting_user

from jobtracker.core.schemas import OperationResult, UserResponse
from jobtracker.features.tracking import users

router = APIRouter()


@router.get("/me", response_model=OperationResult)
def get_me(
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Current user's goal configuration and application ids"""
    user = users.get_user(db, user_id)
    return OperationResult.ok("User fetched successfully", UserResponse.model_validate(user))


@router.put("/me/goal", response_model=OperationResult)
def update_weekly_goal(
    body: WeeklyGoalUpdate,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Set the weekly application target and/or this week's count"""
    user = users.set_weekly_goal(
        db, user_id,
        weekly_target=body.weekly_target,
        current_week_count=body.current_week_count,
    )
    return OperationResult.ok("Weekly goal updated successfully", UserResponse.model_validate(user))
