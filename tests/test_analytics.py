"""Tests for the read-only analytics views."""
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from jobtracker.core.errors import AccessDenied, NotFound, ValidationError
from jobtracker.core.schemas import StatsPeriod
from jobtracker.features.tracking import analytics
from jobtracker.features.tracking import applications as tracker
from jobtracker.features.tracking.users import set_weekly_goal

NOW = datetime(2025, 3, 31, 12, 0, 0)


def _create(session, user_id, job_title, company, created, status=None):
    fields = {"job_title": job_title, "company": company}
    if status:
        fields["current_status"] = status
    return tracker.create_application(session, user_id, fields, now=created)


def _at(moment):
    """Freeze the mutation clock."""
    return patch('jobtracker.features.tracking.applications.utcnow', return_value=moment)


@pytest.fixture
def portfolio(session, user, other_user):
    """Three applications of ``user`` and one of ``other_user``."""
    first = _create(session, user.id, "Backend Engineer", "Acme", NOW - timedelta(days=3))
    second = _create(session, user.id, "Analyst", "Beta Corp", NOW - timedelta(days=2), "under review")
    third = _create(session, user.id, "Architect", "acme labs", NOW - timedelta(days=1))
    _create(session, other_user.id, "Designer", "Acme", NOW - timedelta(days=1))
    return first, second, third


def test_list_applications_newest_first(session, user, portfolio):
    first, second, third = portfolio
    listed = analytics.list_applications(session, user.id)
    assert [app.id for app in listed] == [third.id, second.id, first.id]


def test_list_applications_company_filter(session, user, portfolio):
    first, _, third = portfolio
    listed = analytics.list_applications(session, user.id, company="ACME", sort_order="asc")
    assert [app.id for app in listed] == [first.id, third.id]


def test_list_applications_status_filter(session, user, portfolio):
    _, second, _ = portfolio
    listed = analytics.list_applications(session, user.id, status="under review")
    assert [app.id for app in listed] == [second.id]


def test_list_applications_sort_by_title(session, user, portfolio):
    listed = analytics.list_applications(session, user.id, sort_by="job_title", sort_order="asc")
    assert [app.job_title for app in listed] == ["Analyst", "Architect", "Backend Engineer"]


@pytest.mark.parametrize("kwargs", [
    {"sort_by": "salary"},
    {"sort_order": "sideways"},
    {"status": "ghosted"},
])
def test_list_applications_rejects_bad_parameters(session, user, kwargs):
    with pytest.raises(ValidationError):
        analytics.list_applications(session, user.id, **kwargs)


def test_list_applications_unknown_user(session):
    with pytest.raises(NotFound):
        analytics.list_applications(session, "ghost")


@pytest.fixture
def reminder_app(session, user, application):
    """Reminders around ``NOW``: overdue, due now, upcoming and a completed one."""
    for due in (NOW - timedelta(days=1), NOW, NOW + timedelta(days=1), NOW + timedelta(days=2)):
        tracker.add_reminder(session, application.id, user.id, "follow-up", due)
    done = application.reminders[-1]
    tracker.set_reminder_completion(session, application.id, user.id, done.id, True)
    return application


def test_get_reminders_unfiltered(session, user, reminder_app):
    views = analytics.get_reminders(session, user.id, now=NOW)
    assert [view.due_date for view in views] == [
        NOW - timedelta(days=1), NOW, NOW + timedelta(days=1), NOW + timedelta(days=2)
    ]
    assert views[0].application_id == reminder_app.id
    assert views[0].job_title == "Engineer"
    assert views[0].company == "Acme"


def test_get_reminders_due_now_matches_neither_filter(session, user, reminder_app):
    upcoming = analytics.get_reminders(session, user.id, upcoming=True, now=NOW)
    overdue = analytics.get_reminders(session, user.id, overdue=True, now=NOW)
    assert [view.due_date for view in upcoming] == [NOW + timedelta(days=1)]
    assert [view.due_date for view in overdue] == [NOW - timedelta(days=1)]


def test_get_reminders_by_completion(session, user, reminder_app):
    done = analytics.get_reminders(session, user.id, completed=True, now=NOW)
    open_ = analytics.get_reminders(session, user.id, completed=False, now=NOW)
    assert [view.due_date for view in done] == [NOW + timedelta(days=2)]
    assert len(open_) == 3


def test_get_upcoming_reminders_window(session, user, application):
    for days in (1, 5, 10):
        tracker.add_reminder(session, application.id, user.id, "interview", NOW + timedelta(days=days))

    assert len(analytics.get_upcoming_reminders(session, user.id, now=NOW)) == 2
    assert len(analytics.get_upcoming_reminders(session, user.id, days_ahead=1, now=NOW)) == 1
    assert len(analytics.get_upcoming_reminders(session, user.id, days_ahead=30, now=NOW)) == 3
    assert len(analytics.get_upcoming_reminders(session, user.id, days_ahead=0, now=NOW)) == 2


def test_stats_with_no_applications(session, user):
    stats = analytics.get_stats(session, user.id, now=NOW)
    assert stats.total_applications == 0
    assert stats.interview_rate == 0
    assert stats.offer_rate == 0
    assert set(stats.status_breakdown.values()) == {0}
    assert stats.top_companies == []
    assert stats.timeline == []


def test_stats_week_with_one_offer(session, user):
    """One application offered this week gives a full offer rate."""
    application = _create(session, user.id, "Engineer", "Acme", NOW - timedelta(days=1))
    tracker.update_status(session, application.id, user.id, "offered")

    stats = analytics.get_stats(session, user.id, "week", now=NOW)
    assert stats.period == StatsPeriod.WEEK
    assert stats.total_applications == 1
    assert stats.status_breakdown["offered"] == 1
    assert stats.offer_rate == 100.0
    assert stats.interview_rate == 100.0


def test_stats_period_filters_on_creation(session, user):
    _create(session, user.id, "Engineer", "Acme", NOW - timedelta(days=3))
    _create(session, user.id, "Engineer", "Beta", NOW - timedelta(days=20))
    _create(session, user.id, "Engineer", "Gamma", NOW - timedelta(days=200))
    _create(session, user.id, "Engineer", "Delta", NOW - timedelta(days=400))

    totals = {
        period: analytics.get_stats(session, user.id, period, now=NOW).total_applications
        for period in ("week", "month", "year", "all")
    }
    assert totals == {"week": 1, "month": 2, "year": 3, "all": 4}


def test_stats_rates_and_rankings(session, user):
    statuses = ["interview scheduled", "offered", "rejected", "applied"]
    companies = ["Beta", "Acme", "Acme", "Gamma"]
    for offset, (status, company) in enumerate(zip(statuses, companies)):
        _create(session, user.id, "Engineer", company, NOW - timedelta(days=40 - offset), status)

    stats = analytics.get_stats(session, user.id, now=NOW)
    assert stats.interview_rate == 50.0
    assert stats.offer_rate == 25.0
    assert stats.company_breakdown == {"Beta": 1, "Acme": 2, "Gamma": 1}
    assert [(entry.company, entry.count) for entry in stats.top_companies] == [
        ("Acme", 2), ("Beta", 1), ("Gamma", 1)
    ]
    assert stats.monthly_breakdown == {"2025-02": 4}


def test_stats_rates_are_rounded(session, user):
    for status in ("offered", "applied", "applied"):
        _create(session, user.id, "Engineer", "Acme", NOW, status)
    stats = analytics.get_stats(session, user.id, now=NOW)
    assert stats.offer_rate == 33.33


def test_stats_rates_round_half_up(session, user):
    """1 of 32 is 3.125%, shown as 3.13."""
    _create(session, user.id, "Engineer", "Acme", NOW, "offered")
    for _ in range(31):
        _create(session, user.id, "Engineer", "Acme", NOW)

    stats = analytics.get_stats(session, user.id, now=NOW)
    assert stats.offer_rate == 3.13
    assert stats.interview_rate == 3.13


def test_stats_monthly_timeline_is_chronological(session, user):
    _create(session, user.id, "Engineer", "Acme", datetime(2025, 3, 2))
    _create(session, user.id, "Engineer", "Acme", datetime(2024, 12, 5))
    _create(session, user.id, "Engineer", "Acme", datetime(2025, 3, 20))

    stats = analytics.get_stats(session, user.id, now=NOW)
    assert [(entry.month, entry.count) for entry in stats.timeline] == [
        ("2024-12", 1), ("2025-03", 2)
    ]


def test_stats_rejects_unknown_period(session, user):
    with pytest.raises(ValidationError):
        analytics.get_stats(session, user.id, "decade", now=NOW)


def test_period_start_clamps_to_month_end():
    assert analytics.period_start(StatsPeriod.MONTH, NOW) == datetime(2025, 2, 28, 12, 0, 0)
    assert analytics.period_start(StatsPeriod.YEAR, datetime(2024, 2, 29)) == datetime(2023, 2, 28)
    assert analytics.period_start(StatsPeriod.WEEK, NOW) == datetime(2025, 3, 24, 12, 0, 0)
    assert analytics.period_start(StatsPeriod.ALL, NOW) is None


def test_timeline_merges_sources_in_date_order(session, user):
    application = _create(session, user.id, "Engineer", "Acme", NOW - timedelta(days=5))
    with _at(NOW - timedelta(days=3)):
        tracker.update_status(session, application.id, user.id, "interview scheduled", "Phone screen passed")
    with _at(NOW - timedelta(days=2)):
        tracker.add_communication(session, application.id, user.id, "phone", "Scheduled onsite", "Dana")
    tracker.add_reminder(session, application.id, user.id, "interview", NOW + timedelta(days=1), "Onsite")
    tracker.add_reminder(session, application.id, user.id, "follow-up", NOW - timedelta(days=1))

    result = analytics.get_timeline(session, user.id, application.id, now=NOW)

    assert result.application.id == application.id
    assert result.application.current_status == "interview scheduled"
    assert [event.type for event in result.timeline] == [
        "status_change", "status_change", "communication", "reminder", "reminder"
    ]
    assert result.timeline[1].title == "Status changed to: interview scheduled"
    assert result.timeline[1].description == "Phone screen passed"
    assert result.timeline[2].title == "Communication via phone"
    assert result.timeline[2].contact_person == "Dana"
    assert result.timeline[3].is_past is True
    assert result.timeline[4].is_past is False
    assert result.timeline[4].description == "Onsite"


def test_timeline_of_other_users_application(session, other_user, application):
    with pytest.raises(AccessDenied):
        analytics.get_timeline(session, other_user.id, application.id, now=NOW)


def test_dashboard_summary(session, user, other_user):
    recent = _create(session, user.id, "Engineer", "Acme", NOW - timedelta(days=1))
    _create(session, user.id, "Analyst", "Beta", NOW - timedelta(days=10), "interview scheduled")
    _create(session, user.id, "Architect", "Gamma", NOW - timedelta(days=2), "rejected")
    _create(session, other_user.id, "Designer", "Delta", NOW)

    for due in (NOW + timedelta(days=1), NOW + timedelta(days=7), NOW + timedelta(days=8),
                NOW - timedelta(days=1)):
        tracker.add_reminder(session, recent.id, user.id, "follow-up", due)

    summary = analytics.get_dashboard_summary(session, user.id, now=NOW)

    assert summary.total_applications == 3
    assert summary.active_applications == 2
    assert summary.recent_applications == 2
    assert summary.interviews_scheduled == 1
    assert summary.upcoming_reminders == 2
    assert summary.overdue_reminders == 1
    assert [view.due_date for view in summary.upcoming_reminders_list] == [
        NOW + timedelta(days=1), NOW + timedelta(days=7)
    ]
    assert summary.weekly_goal.target == 5
    assert summary.weekly_goal.current == 0
    assert summary.weekly_goal.progress == 0


def test_dashboard_lists_are_capped(session, user, application):
    for hours in range(1, 8):
        tracker.add_reminder(session, application.id, user.id, "follow-up", NOW + timedelta(hours=hours))

    summary = analytics.get_dashboard_summary(session, user.id, now=NOW)
    assert summary.upcoming_reminders == 7
    assert len(summary.upcoming_reminders_list) == 5
    assert summary.upcoming_reminders_list[0].due_date == NOW + timedelta(hours=1)


def test_dashboard_weekly_goal(session, user):
    set_weekly_goal(session, user.id, current_week_count=2)
    summary = analytics.get_dashboard_summary(session, user.id, now=NOW)
    assert summary.weekly_goal.progress == 40


@pytest.mark.parametrize("current,target,expected", [
    (0, 0, 0),
    (3, 0, 0),
    (1, 8, 13),
    (2, 5, 40),
    (7, 5, 140),
])
def test_weekly_goal_progress(current, target, expected):
    assert analytics.weekly_goal_progress(current, target) == expected
