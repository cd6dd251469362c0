from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..dependencies import get_db, get_acting_user

from jobtracker.core.schemas import OperationResult
from jobtracker.features.tracking import analytics

router = APIRouter()


@router.get("/stats", response_model=OperationResult)
def get_stats(
    period: str = Query("all", description="all, week, month or year"),
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Application statistics for a period"""
    stats = analytics.get_stats(db, user_id, period=period)
    return OperationResult.ok("Application statistics fetched successfully", stats)


@router.get("/dashboard", response_model=OperationResult)
def get_dashboard(
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Dashboard summary"""
    summary = analytics.get_dashboard_summary(db, user_id)
    return OperationResult.ok("Dashboard summary fetched successfully", summary)


@router.get("/{application_id}/timeline", response_model=OperationResult)
def get_timeline(
    application_id: int,
    user_id: str = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Merged timeline of one application"""
    timeline = analytics.get_timeline(db, user_id, application_id)
    return OperationResult.ok("Application timeline fetched successfully", timeline)
