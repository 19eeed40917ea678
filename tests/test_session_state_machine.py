from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta, timezone

import pytest

from conftest import ALICE, BOB, CAROL, GUITAR_SKILL, START, active_session, propose
from skillhub.errors import (
    CapacityExceeded,
    Forbidden,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from skillhub.models import SessionStatus
from skillhub.services.session_service import check_schedule, expected_status_for


def _assert_consistent(session):
    assert session.status == expected_status_for(session.is_accepted, session.status)


def test_propose_creates_pending_session_and_notifies_receiver(hub):
    session = propose(hub)

    assert session.id is not None
    assert session.status == SessionStatus.PENDING.value
    assert session.is_accepted is None
    assert session.user1_id == ALICE and session.user2_id == BOB

    events = hub.notifier.of_type("session_proposed")
    assert len(events) == 1
    assert events[0]["recipient_id"] == BOB
    assert "Alice Ng" in events[0]["message"]


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"description_of_service1": "   "}, "description_of_service1"),
        ({"description_of_service2": None}, "description_of_service2"),
        ({"skill1_id": None}, "skill1_id"),
        ({"start_date": None}, "start_date"),
        ({"user2_id": 0}, "user2_id"),
    ],
)
def test_propose_validates_required_fields(hub, overrides, field):
    with pytest.raises(ValidationError) as exc:
        propose(hub, **overrides)
    assert exc.value.field == field


def test_propose_rejects_self_session(hub):
    with pytest.raises(ValidationError):
        propose(hub, receiver_id=ALICE)


def test_propose_rejects_end_before_start(hub):
    with pytest.raises(ValidationError) as exc:
        propose(hub, expected_end_date=START - timedelta(days=1))
    assert exc.value.field == "expected_end_date"


def test_propose_compares_mixed_naive_and_aware_dates(hub):
    aware_start = START.replace(tzinfo=UTC)
    session = propose(hub, start_date=aware_start, expected_end_date=START + timedelta(days=19))
    assert session.status == SessionStatus.PENDING.value

    with pytest.raises(ValidationError) as exc:
        propose(hub, start_date=START, expected_end_date=aware_start - timedelta(hours=1))
    assert exc.value.field == "expected_end_date"


def test_check_schedule_reads_naive_dates_as_utc():
    plus_two = timezone(timedelta(hours=2))
    # 10:00+02:00 is 08:00 UTC, an hour before the naive 09:00 start
    with pytest.raises(ValidationError):
        check_schedule(START, datetime(2026, 3, 1, 10, 0, tzinfo=plus_two))
    check_schedule(START, datetime(2026, 3, 1, 12, 0, tzinfo=plus_two))


def test_pending_cap_locks_proposer_before_counting(hub, monkeypatch):
    calls = []
    real_get_for_update = hub.users.get_for_update
    real_count = hub.sessions.sessions.count_pending_between

    def get_for_update(user_id):
        calls.append(("lock", user_id))
        return real_get_for_update(user_id)

    def count_pending_between(user1_id, user2_id):
        calls.append(("count", user1_id))
        return real_count(user1_id, user2_id)

    monkeypatch.setattr(hub.users, "get_for_update", get_for_update)
    monkeypatch.setattr(hub.sessions.sessions, "count_pending_between", count_pending_between)

    propose(hub)

    assert calls == [("lock", ALICE), ("count", ALICE)]


def test_propose_requires_known_users_and_skills(hub):
    with pytest.raises(NotFound):
        propose(hub, receiver_id=999)
    with pytest.raises(NotFound) as exc:
        propose(hub, skill2_id=12345)
    assert exc.value.field == "skill2_id"


def test_blocked_or_suspended_proposer_is_forbidden(hub):
    hub.users.update_standing(ALICE, is_suspended=True)
    with pytest.raises(Forbidden):
        propose(hub)

    hub.users.update_standing(ALICE, is_suspended=False, is_blocked=True)
    with pytest.raises(Forbidden):
        propose(hub)


def test_fourth_pending_proposal_to_same_user_is_refused(hub):
    for _ in range(3):
        propose(hub)

    with pytest.raises(CapacityExceeded) as exc:
        propose(hub)
    assert exc.value.status_code == 429

    # A different counterparty is unaffected
    assert propose(hub, receiver_id=CAROL).status == SessionStatus.PENDING.value


def test_decided_proposals_free_up_capacity(hub):
    first = propose(hub)
    propose(hub)
    propose(hub)
    hub.sessions.reject_session(first.id, hub.bob)

    assert propose(hub).status == SessionStatus.PENDING.value


def test_accept_activates_session_and_creates_progress_rows(hub):
    session = propose(hub)
    accepted = hub.sessions.accept_session(session.id, hub.bob)

    assert accepted.status == SessionStatus.ACTIVE.value
    assert accepted.is_accepted is True
    _assert_consistent(accepted)

    rows = hub.sessions.progress.list_for_session(session.id)
    assert sorted(row.user_id for row in rows) == [ALICE, BOB]
    for row in rows:
        assert row.completion_percentage == 0
        assert row.due_date == START + timedelta(days=30)

    events = hub.notifier.of_type("session_accepted")
    assert [e["recipient_id"] for e in events] == [ALICE]


def test_only_receiver_can_accept_or_reject(hub):
    session = propose(hub)

    with pytest.raises(Forbidden):
        hub.sessions.accept_session(session.id, hub.alice)
    with pytest.raises(Forbidden):
        hub.sessions.accept_session(session.id, hub.carol)
    with pytest.raises(Forbidden):
        hub.sessions.reject_session(session.id, hub.alice)

    assert hub.sessions.sessions.get(session.id).status == SessionStatus.PENDING.value


def test_accept_twice_fails_precondition(hub):
    session = active_session(hub)

    with pytest.raises(PreconditionFailed) as exc:
        hub.sessions.accept_session(session.id, hub.bob)
    assert exc.value.state == SessionStatus.ACTIVE.value


def test_reject_is_idempotent(hub):
    session = propose(hub)

    first = hub.sessions.reject_session(session.id, hub.bob)
    second = hub.sessions.reject_session(session.id, hub.bob)

    assert first.status == second.status == SessionStatus.CANCELED.value
    assert second.is_accepted is False
    _assert_consistent(second)
    assert len(hub.notifier.of_type("session_rejected")) == 1


def test_reject_after_accept_fails_precondition(hub):
    session = active_session(hub)

    with pytest.raises(PreconditionFailed):
        hub.sessions.reject_session(session.id, hub.bob)


def test_concurrent_accepts_have_exactly_one_winner(hub):
    session = propose(hub)
    barrier = threading.Barrier(8)
    outcomes = []

    def worker():
        barrier.wait()
        try:
            hub.sessions.accept_session(session.id, hub.bob)
            outcomes.append("won")
        except PreconditionFailed:
            outcomes.append("lost")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("won") == 1
    assert outcomes.count("lost") == 7
    assert len(hub.notifier.of_type("session_accepted")) == 1
    assert len(hub.sessions.progress.list_for_session(session.id)) == 2


def test_get_session_requires_party_or_admin(hub):
    session = propose(hub)

    assert hub.sessions.get_session(session.id, hub.bob).id == session.id
    assert hub.sessions.get_session(session.id, hub.admin).id == session.id
    with pytest.raises(Forbidden):
        hub.sessions.get_session(session.id, hub.carol)
    with pytest.raises(NotFound):
        hub.sessions.get_session(999, hub.alice)


def test_list_sessions_filters_by_status(hub):
    pending = propose(hub)
    active = active_session(hub)
    propose(hub, proposer=hub.carol, receiver_id=BOB)

    mine = hub.sessions.list_sessions(hub.alice)
    assert {s.id for s in mine} == {pending.id, active.id}

    only_active = hub.sessions.list_sessions(hub.alice, status="active")
    assert [s.id for s in only_active] == [active.id]

    with pytest.raises(ValidationError):
        hub.sessions.list_sessions(hub.alice, status="bogus")


@pytest.mark.parametrize(
    "is_accepted, status, expected",
    [
        (None, "active", "pending"),
        (None, "pending", "pending"),
        (False, "active", "canceled"),
        (True, "pending", "active"),
        (True, "completed", "completed"),
        (True, "disputed", "disputed"),
        (True, "weird", "active"),
    ],
)
def test_expected_status_for(is_accepted, status, expected):
    assert expected_status_for(is_accepted, status) == expected


def test_fix_status_consistency_repairs_drifted_rows(hub):
    healthy = active_session(hub)
    drifted_pending = propose(hub, receiver_id=CAROL)
    drifted_rejected = propose(hub, proposer=hub.carol, receiver_id=BOB, skill1_id=GUITAR_SKILL)

    # Rows written by an older code path that updated only one of the fields
    drifted_pending.is_accepted = True
    drifted_rejected.is_accepted = False

    repaired = hub.sessions.fix_status_consistency(hub.admin)

    assert repaired == 2
    assert hub.sessions.sessions.get(drifted_pending.id).status == SessionStatus.ACTIVE.value
    assert hub.sessions.sessions.get(drifted_rejected.id).status == SessionStatus.CANCELED.value
    assert hub.sessions.sessions.get(healthy.id).status == SessionStatus.ACTIVE.value

    # Second pass has nothing left to do
    assert hub.sessions.fix_status_consistency(hub.admin) == 0


def test_fix_status_consistency_is_admin_only(hub):
    with pytest.raises(Forbidden):
        hub.sessions.fix_status_consistency(hub.alice)
