"""Read-only analytics over the applications a user owns.

Nothing in this module writes to the session: every view is recomputed
from the stored applications on each call, so it can later be swapped for a
precomputed view without touching the mutation path.
"""
import math
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session

from jobtracker.core.config import get_settings
from jobtracker.core.database import to_naive_utc, utcnow
from jobtracker.core.errors import ValidationError
from jobtracker.core.logging import setup_logging
from jobtracker.core.models import Application, ApplicationRef, Reminder
from jobtracker.core.schemas import (
    CLOSED_STATUSES,
    ApplicationHeader,
    ApplicationStats,
    ApplicationStatus,
    ApplicationTimeline,
    CompanyCount,
    DashboardSummary,
    MonthCount,
    ReminderView,
    StatsPeriod,
    TimelineEvent,
    WeeklyGoal,
)
from jobtracker.features.tracking.applications import get_application
from jobtracker.features.tracking.reminders import is_due_within, is_overdue, is_upcoming
from jobtracker.features.tracking.users import get_user

logger = setup_logging('tracking_analytics')

SORT_FIELDS = {
    'created_at': Application.created_at,
    'updated_at': Application.updated_at,
    'applied_at': Application.applied_at,
    'job_title': Application.job_title,
    'company': Application.company,
    'current_status': Application.current_status,
}

TOP_COMPANIES_LIMIT = 10
DASHBOARD_LIST_LIMIT = 5
RECENT_DAYS = 7


def _now(now: Optional[datetime]) -> datetime:
    return to_naive_utc(now) if now is not None else utcnow()


def _owned_applications(user_id: str):
    """Select statement for the applications in the user's reference set."""
    return (
        select(Application)
        .join(ApplicationRef, ApplicationRef.application_id == Application.id)
        .where(ApplicationRef.user_id == user_id)
    )


def _load_owned(session: Session, user_id: str) -> List[Application]:
    get_user(session, user_id)
    statement = _owned_applications(user_id).order_by(ApplicationRef.id)
    return list(session.scalars(statement))


def _reminder_view(application: Application, reminder: Reminder) -> ReminderView:
    return ReminderView(
        id=reminder.id,
        type=reminder.type,
        due_date=reminder.due_date,
        note=reminder.note,
        is_completed=reminder.is_completed,
        application_id=application.id,
        job_title=application.job_title,
        company=application.company,
    )


def list_applications(
    session: Session,
    user_id: str,
    status: Optional[Union[str, ApplicationStatus]] = None,
    company: Optional[str] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'desc',
) -> List[Application]:
    """List the user's applications, filtered and sorted.

    Args:
        status: Keep only applications currently in this status
        company: Case-insensitive substring of the company name
        sort_by: One of ``SORT_FIELDS``
        sort_order: ``asc`` or ``desc``
    """
    get_user(session, user_id)
    if sort_by not in SORT_FIELDS:
        raise ValidationError(
            f"Invalid sort field '{sort_by}'. Must be one of: {', '.join(SORT_FIELDS)}"
        )
    if sort_order not in ('asc', 'desc'):
        raise ValidationError("Sort order must be 'asc' or 'desc'")

    statement = _owned_applications(user_id)
    if status:
        value = status.value if isinstance(status, ApplicationStatus) else str(status)
        if value not in ApplicationStatus.values():
            raise ValidationError(f"Invalid status filter '{value}'")
        statement = statement.where(Application.current_status == value)
    if company:
        statement = statement.where(Application.company.icontains(company, autoescape=True))

    column = SORT_FIELDS[sort_by]
    order = column.desc() if sort_order == 'desc' else column.asc()
    statement = statement.order_by(order, Application.id)
    return list(session.scalars(statement))


def get_reminders(
    session: Session,
    user_id: str,
    completed: Optional[bool] = None,
    upcoming: bool = False,
    overdue: bool = False,
    now: Optional[datetime] = None,
) -> List[ReminderView]:
    """All reminders across the user's applications, soonest due first.

    Filters combine with AND. ``upcoming`` and ``overdue`` use open
    intervals around ``now``, so a reminder due exactly now matches neither.
    """
    now = _now(now)
    views = []
    for application in _load_owned(session, user_id):
        for reminder in application.reminders:
            if completed is not None and reminder.is_completed != completed:
                continue
            if upcoming and not is_upcoming(reminder, now):
                continue
            if overdue and not is_overdue(reminder, now):
                continue
            views.append(_reminder_view(application, reminder))

    views.sort(key=lambda view: view.due_date)
    return views


def get_upcoming_reminders(
    session: Session,
    user_id: str,
    days_ahead: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[ReminderView]:
    """Open reminders due between now and ``days_ahead`` days from now, inclusive."""
    if not days_ahead or days_ahead <= 0:
        days_ahead = get_settings().upcoming_days_default
    now = _now(now)

    views = [
        _reminder_view(application, reminder)
        for application in _load_owned(session, user_id)
        for reminder in application.reminders
        if is_due_within(reminder, now, days_ahead)
    ]
    views.sort(key=lambda view: view.due_date)
    return views


def period_start(period: StatsPeriod, now: datetime) -> Optional[datetime]:
    """Start of the statistics window, ``None`` for all time.

    Calendar months and years clamp to the end of shorter months
    (March 31 minus one month is February 28 or 29).
    """
    if period == StatsPeriod.WEEK:
        return now - timedelta(days=7)
    if period == StatsPeriod.MONTH:
        return now - relativedelta(months=1)
    if period == StatsPeriod.YEAR:
        return now - relativedelta(years=1)
    return None


def _percentage(part: int, total: int) -> float:
    if total == 0:
        return 0
    # half-up like weekly_goal_progress, so 1 of 32 is 3.13
    value = Decimal(str(part / total * 100))
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def get_stats(
    session: Session,
    user_id: str,
    period: Union[str, StatsPeriod] = StatsPeriod.ALL,
    now: Optional[datetime] = None,
) -> ApplicationStats:
    """Statistics over the applications created within ``period``."""
    try:
        period = StatsPeriod(period)
    except ValueError:
        raise ValidationError(
            f"Invalid period '{period}'. Must be one of: {', '.join(p.value for p in StatsPeriod)}"
        ) from None
    now = _now(now)
    start = period_start(period, now)

    applications = _load_owned(session, user_id)
    if start is not None:
        applications = [app for app in applications if app.created_at >= start]

    status_counts: Dict[str, int] = {status: 0 for status in ApplicationStatus.values()}
    company_counts: Dict[str, int] = {}
    monthly_counts: Dict[str, int] = {}

    for application in applications:
        status_counts[application.current_status] = status_counts.get(application.current_status, 0) + 1
        company_counts[application.company] = company_counts.get(application.company, 0) + 1
        month = application.created_at.strftime('%Y-%m')
        monthly_counts[month] = monthly_counts.get(month, 0) + 1

    total = len(applications)
    interviews = (
        status_counts[ApplicationStatus.INTERVIEW_SCHEDULED.value]
        + status_counts[ApplicationStatus.OFFERED.value]
    )
    offers = status_counts[ApplicationStatus.OFFERED.value]

    # sorted() is stable, so equal counts keep first-encountered order
    ranked = sorted(company_counts.items(), key=lambda item: -item[1])
    top_companies = [
        CompanyCount(company=company, count=count)
        for company, count in ranked[:TOP_COMPANIES_LIMIT]
    ]
    timeline = [
        MonthCount(month=month, count=count)
        for month, count in sorted(monthly_counts.items())
    ]

    return ApplicationStats(
        period=period,
        total_applications=total,
        status_breakdown=status_counts,
        company_breakdown=company_counts,
        monthly_breakdown=monthly_counts,
        interview_rate=_percentage(interviews, total),
        offer_rate=_percentage(offers, total),
        top_companies=top_companies,
        timeline=timeline,
    )


def get_timeline(
    session: Session,
    user_id: str,
    application_id: int,
    now: Optional[datetime] = None,
) -> ApplicationTimeline:
    """Merge status changes, communications and reminders into one timeline.

    Events are sorted by date; events sharing a timestamp keep source order
    (history, then communications, then reminders).
    """
    application = get_application(session, user_id, application_id)
    now = _now(now)

    events: List[TimelineEvent] = []
    for entry in application.status_history:
        events.append(TimelineEvent(
            type='status_change',
            date=entry.updated_at,
            title=f"Status changed to: {entry.status}",
            description=entry.note,
            updated_by=entry.updated_by,
        ))
    for communication in application.communications:
        events.append(TimelineEvent(
            type='communication',
            date=communication.date,
            title=f"Communication via {communication.mode}",
            description=communication.summary,
            contact_person=communication.contact_person,
        ))
    for reminder in application.reminders:
        events.append(TimelineEvent(
            type='reminder',
            date=reminder.due_date,
            title=f"{reminder.type} reminder",
            description=reminder.note,
            is_completed=reminder.is_completed,
            is_past=reminder.due_date < now,
        ))

    events.sort(key=lambda event: event.date)
    return ApplicationTimeline(
        application=ApplicationHeader(
            id=application.id,
            job_title=application.job_title,
            company=application.company,
            current_status=application.current_status,
        ),
        timeline=events,
    )


def weekly_goal_progress(current: int, target: int) -> int:
    if target <= 0:
        return 0
    # half-up, so 12.5% shows as 13
    return math.floor(current / target * 100 + 0.5)


def get_dashboard_summary(
    session: Session,
    user_id: str,
    now: Optional[datetime] = None,
) -> DashboardSummary:
    """Headline counts, reminder shortlists and weekly goal progress."""
    user = get_user(session, user_id)
    applications = _load_owned(session, user_id)
    now = _now(now)
    week_ago = now - timedelta(days=RECENT_DAYS)

    upcoming: List[ReminderView] = []
    overdue: List[ReminderView] = []
    for application in applications:
        for reminder in application.reminders:
            if is_due_within(reminder, now, RECENT_DAYS):
                upcoming.append(_reminder_view(application, reminder))
            elif is_overdue(reminder, now):
                overdue.append(_reminder_view(application, reminder))
    upcoming.sort(key=lambda view: view.due_date)
    overdue.sort(key=lambda view: view.due_date)

    return DashboardSummary(
        total_applications=len(applications),
        active_applications=sum(
            1 for app in applications if app.current_status not in CLOSED_STATUSES
        ),
        recent_applications=sum(1 for app in applications if app.created_at >= week_ago),
        interviews_scheduled=sum(
            1 for app in applications
            if app.current_status == ApplicationStatus.INTERVIEW_SCHEDULED.value
        ),
        upcoming_reminders=len(upcoming),
        overdue_reminders=len(overdue),
        weekly_goal=WeeklyGoal(
            target=user.weekly_target,
            current=user.current_week_count,
            progress=weekly_goal_progress(user.current_week_count, user.weekly_target),
        ),
        upcoming_reminders_list=upcoming[:DASHBOARD_LIST_LIMIT],
        overdue_reminders_list=overdue[:DASHBOARD_LIST_LIMIT],
    )
