"""Application lifecycle and reminder tracking.

Modules:
    ownership: which applications a user may access
    events: append-only status history and communications
    reminders: dated action items and their due-date predicates
    applications: the aggregate every mutation goes through
    analytics: read-only dashboards, timelines and statistics
    users: user provisioning and weekly goals
"""
