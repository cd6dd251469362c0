"""Concurrent mutations of one application must not lose appends."""
import threading

import pytest
from sqlalchemy.orm import sessionmaker

from jobtracker.core.database import create_db_engine, init_database
from jobtracker.core.errors import InternalError
from jobtracker.core.locks import ApplicationLocks
from jobtracker.features.tracking import applications as tracker
from jobtracker.features.tracking.users import register_user

WORKERS = 4
ROUNDS = 5


@pytest.fixture
def file_factory(tmp_path):
    """Sessions on a file database, one connection per thread."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'tracker.db'}")
    init_database(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


def _run_threads(targets):
    errors = []

    def guarded(target):
        try:
            target()
        except Exception as e:  # collected and asserted on below
            errors.append(e)

    threads = [threading.Thread(target=guarded, args=(target,)) for target in targets]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


def test_parallel_status_updates_and_communications(file_factory):
    with file_factory() as session:
        register_user(session, "user-1")
        application_id = tracker.create_application(
            session, "user-1", {"job_title": "Engineer", "company": "Acme"}
        ).id

    def update_statuses():
        with file_factory() as session:
            for _ in range(ROUNDS):
                tracker.update_status(session, application_id, "user-1", "under review")

    def log_communications():
        with file_factory() as session:
            for round_ in range(ROUNDS):
                tracker.add_communication(session, application_id, "user-1", "email", f"Message {round_}")

    errors = _run_threads([update_statuses] * WORKERS + [log_communications] * WORKERS)
    assert errors == []

    with file_factory() as session:
        application = tracker.get_application(session, "user-1", application_id)
        assert len(application.status_history) == 1 + WORKERS * ROUNDS
        assert len(application.communications) == WORKERS * ROUNDS
        assert application.current_status == application.status_history[-1].status


def test_lock_timeout_reports_busy_application():
    locks = ApplicationLocks(timeout=0.01)
    with locks.hold(1):
        errors = _run_threads([lambda: locks.hold(1).__enter__()])
    assert len(errors) == 1
    assert isinstance(errors[0], InternalError)


def test_discard_forgets_lock():
    locks = ApplicationLocks(timeout=1)
    with locks.hold(7):
        pass
    assert len(locks) == 1
    locks.discard(7)
    assert len(locks) == 0
