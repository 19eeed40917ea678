"""Pytest bootstrap for project imports plus shared service fixtures."""

import os
from pathlib import Path
import sys
from datetime import datetime
from types import SimpleNamespace

import pytest

# Ensure project root is on sys.path so `import skillhub` and `import fakes` work
PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (str(PROJECT_ROOT), str(TESTS_DIR)):
    if path not in sys.path:
        sys.path.insert(0, path)

# Keep the app module from creating a sqlite file in the working directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from fakes import (  # noqa: E402
    FakeCancelRequestRepository,
    FakeCompletionRepository,
    FakeCounterOfferRepository,
    FakeMeetingRepository,
    FakeNotificationSink,
    FakeProgressRepository,
    FakeReportRepository,
    FakeSessionRepository,
    FakeSkillCatalog,
    FakeUserDirectory,
)
from skillhub.services import (  # noqa: E402
    Actor,
    CancellationService,
    CompletionService,
    MeetingService,
    ReportService,
    SessionService,
)

ALICE, BOB, CAROL, ADMIN = 1, 2, 3, 4
PYTHON_SKILL, GUITAR_SKILL = 10, 20
START = datetime(2026, 3, 1, 9, 0, 0)


@pytest.fixture
def hub():
    """Every service wired to in-memory repositories, plus four known users."""
    users = FakeUserDirectory()
    users.add_user(ALICE, "Alice", "Ng")
    users.add_user(BOB, "Bob", "Ruiz")
    users.add_user(CAROL, "Carol", "Iyer")
    users.add_user(ADMIN, "Ada", "Admin", role="admin")

    notifier = FakeNotificationSink()
    sessions = SessionService(
        FakeSessionRepository(),
        FakeProgressRepository(),
        users,
        FakeSkillCatalog(PYTHON_SKILL, GUITAR_SKILL),
        notifier,
        FakeCounterOfferRepository(),
        max_pending_per_pair=3,
        progress_due_days=30,
    )
    return SimpleNamespace(
        users=users,
        notifier=notifier,
        sessions=sessions,
        completion=CompletionService(sessions, FakeCompletionRepository(), sessions.progress),
        cancellation=CancellationService(sessions, FakeCancelRequestRepository()),
        meetings=MeetingService(sessions, FakeMeetingRepository()),
        reports=ReportService(sessions, FakeReportRepository()),
        alice=Actor(ALICE),
        bob=Actor(BOB),
        carol=Actor(CAROL),
        admin=Actor(ADMIN, is_admin=True),
    )


def propose(hub, proposer=None, receiver_id=BOB, **overrides):
    fields = dict(
        user2_id=receiver_id,
        skill1_id=PYTHON_SKILL,
        description_of_service1="Teach Python basics",
        skill2_id=GUITAR_SKILL,
        description_of_service2="Teach guitar chords",
        start_date=START,
    )
    fields.update(overrides)
    return hub.sessions.propose_session(proposer or hub.alice, **fields)


def active_session(hub):
    session = propose(hub)
    return hub.sessions.accept_session(session.id, hub.bob)
