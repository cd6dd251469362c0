"""SQLAlchemy models for application tracking."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtracker.core.database import Base, utcnow
from jobtracker.core.schemas import ApplicationStatus


class User(Base):
    """Owner of applications, provisioned by the identity subsystem."""
    __tablename__ = 'users'

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    weekly_target: Mapped[int] = mapped_column(default=0)
    current_week_count: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    application_refs: Mapped[List['ApplicationRef']] = relationship(
        back_populates='user',
        order_by='ApplicationRef.id',
        cascade='all, delete-orphan',
    )

    @property
    def application_ids(self) -> List[int]:
        return [ref.application_id for ref in self.application_refs]

    def __repr__(self):
        return f"<User(id='{self.id}', applications={len(self.application_refs)})>"


class ApplicationRef(Base):
    """One entry of a user's ordered application reference set.

    Deliberately not a foreign key to ``applications``: the reference set and
    ``Application.owner_id`` are two indexes kept in step by the aggregate.
    """
    __tablename__ = 'user_applications'
    __table_args__ = (UniqueConstraint('user_id', 'application_id'),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), index=True)
    application_id: Mapped[int] = mapped_column(index=True)

    user: Mapped[User] = relationship(back_populates='application_refs')


class Application(Base):
    """A job application and everything it directly owns."""
    __tablename__ = 'applications'
    __table_args__ = {'sqlite_autoincrement': True}

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(128), index=True)

    job_title: Mapped[str] = mapped_column(String(255))
    company: Mapped[str] = mapped_column(String(255), index=True)
    location: Mapped[Optional[str]] = mapped_column(String(255))
    job_link: Mapped[Optional[str]] = mapped_column(String(1024))
    job_description: Mapped[Optional[str]] = mapped_column(Text)

    current_status: Mapped[str] = mapped_column(
        String(32), default=ApplicationStatus.APPLIED.value, index=True
    )
    notes: Mapped[str] = mapped_column(Text, default="")

    # Produced elsewhere, stored as-is
    resume_feedback: Mapped[Optional[str]] = mapped_column(Text)
    cover_letter_generated: Mapped[Optional[str]] = mapped_column(Text)
    interview_prep: Mapped[Optional[dict]] = mapped_column(JSON)
    success_score: Mapped[Optional[float]]
    improvement_tips: Mapped[Optional[list]] = mapped_column(JSON)

    applied_at: Mapped[Optional[datetime]]
    created_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow)

    status_history: Mapped[List['StatusHistoryEntry']] = relationship(
        back_populates='application',
        order_by='StatusHistoryEntry.id',
        cascade='all, delete-orphan',
        lazy='selectin',
    )
    communications: Mapped[List['Communication']] = relationship(
        back_populates='application',
        order_by='Communication.id',
        cascade='all, delete-orphan',
        lazy='selectin',
    )
    reminders: Mapped[List['Reminder']] = relationship(
        back_populates='application',
        order_by='Reminder.id',
        cascade='all, delete-orphan',
        lazy='selectin',
    )

    def __repr__(self):
        return (
            f"<Application(id={self.id}, job_title='{self.job_title}', "
            f"company='{self.company}', status='{self.current_status}')>"
        )


class StatusHistoryEntry(Base):
    """Audit record of one status assignment. Append-only."""
    __tablename__ = 'status_history'

    id: Mapped[int] = mapped_column(primary_key=True)
    application_id: Mapped[int] = mapped_column(ForeignKey('applications.id'), index=True)
    status: Mapped[str] = mapped_column(String(32))
    updated_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_by: Mapped[Optional[str]] = mapped_column(String(128))
    note: Mapped[Optional[str]] = mapped_column(Text)

    application: Mapped[Application] = relationship(back_populates='status_history')

    def __repr__(self):
        return f"<StatusHistoryEntry(id={self.id}, status='{self.status}', updated_at='{self.updated_at}')>"


class Communication(Base):
    """A logged contact with the employer. Append-only."""
    __tablename__ = 'communications'

    id: Mapped[int] = mapped_column(primary_key=True)
    application_id: Mapped[int] = mapped_column(ForeignKey('applications.id'), index=True)
    date: Mapped[datetime] = mapped_column(default=utcnow)
    mode: Mapped[Optional[str]] = mapped_column(String(64))
    summary: Mapped[Optional[str]] = mapped_column(Text)
    contact_person: Mapped[Optional[str]] = mapped_column(String(255))

    application: Mapped[Application] = relationship(back_populates='communications')

    def __repr__(self):
        return f"<Communication(id={self.id}, mode='{self.mode}', date='{self.date}')>"


class Reminder(Base):
    """A dated action item attached to an application."""
    __tablename__ = 'reminders'

    id: Mapped[int] = mapped_column(primary_key=True)
    application_id: Mapped[int] = mapped_column(ForeignKey('applications.id'), index=True)
    type: Mapped[str] = mapped_column(String(32))
    due_date: Mapped[datetime] = mapped_column(index=True)
    note: Mapped[Optional[str]] = mapped_column(Text)
    is_completed: Mapped[bool] = mapped_column(default=False)

    application: Mapped[Application] = relationship(back_populates='reminders')

    def __repr__(self):
        return f"<Reminder(id={self.id}, type='{self.type}', due_date='{self.due_date}', completed={self.is_completed})>"


@event.listens_for(StatusHistoryEntry, 'before_update')
@event.listens_for(Communication, 'before_update')
def _refuse_log_rewrite(mapper, connection, target):
    raise RuntimeError(
        f"{type(target).__name__} rows are append-only and cannot be modified"
    )
