from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import ALICE, BOB, GUITAR_SKILL, PYTHON_SKILL, START, active_session, propose
from skillhub.errors import Forbidden, NotFound, PreconditionFailed, ValidationError
from skillhub.models import CounterOfferStatus, SessionStatus

NEW_START = START + timedelta(days=7)


def _counter(hub, session, actor=None, **overrides):
    fields = dict(
        skill1_id=PYTHON_SKILL,
        description_of_service1="Teach Python and pandas",
        skill2_id=GUITAR_SKILL,
        description_of_service2="Teach guitar chords and strumming",
        start_date=NEW_START,
        expected_end_date=NEW_START + timedelta(days=14),
        message="Can we start a week later and add pandas?",
    )
    fields.update(overrides)
    return hub.sessions.propose_counter_offer(session.id, actor or hub.bob, **fields)


def _session(hub, session_id):
    return hub.sessions.sessions.get(session_id)


def test_counter_offer_marks_session_amended_and_notifies(hub):
    session = propose(hub)
    offer = _counter(hub, session)

    assert offer.status == CounterOfferStatus.PENDING.value
    assert offer.counter_offered_by == BOB
    current = _session(hub, session.id)
    assert current.is_amended is True
    assert current.status == SessionStatus.PENDING.value
    assert current.description_of_service1 == "Teach Python basics"

    events = hub.notifier.of_type("counter_offer_proposed")
    assert [e["recipient_id"] for e in events] == [ALICE]


def test_accepting_counter_offer_rewrites_terms_and_activates(hub):
    session = propose(hub)
    offer = _counter(hub, session)

    answered = hub.sessions.respond_counter_offer(offer.id, hub.alice, "accept")

    assert answered.status == CounterOfferStatus.ACCEPTED.value
    assert answered.responded_by == ALICE
    assert answered.responded_at is not None
    current = _session(hub, session.id)
    assert current.status == SessionStatus.ACTIVE.value
    assert current.is_accepted is True
    assert current.description_of_service1 == "Teach Python and pandas"
    assert current.start_date == NEW_START
    assert current.expected_end_date == NEW_START + timedelta(days=14)

    rows = hub.sessions.progress.list_for_session(session.id)
    assert sorted(row.user_id for row in rows) == [ALICE, BOB]
    assert all(row.due_date == NEW_START + timedelta(days=14) for row in rows)
    assert all(row.start_date == NEW_START for row in rows)
    assert [e["recipient_id"] for e in hub.notifier.of_type("counter_offer_accepted")] == [BOB]


def test_accepted_counter_offer_without_end_date_uses_default_due(hub):
    session = propose(hub)
    offer = _counter(hub, session, expected_end_date=None)

    hub.sessions.respond_counter_offer(offer.id, hub.alice, "accept")

    rows = hub.sessions.progress.list_for_session(session.id)
    assert all(row.due_date == NEW_START + timedelta(days=30) for row in rows)


def test_rejecting_counter_offer_cancels_session(hub):
    session = propose(hub)
    offer = _counter(hub, session)

    answered = hub.sessions.respond_counter_offer(offer.id, hub.alice, "reject")

    assert answered.status == CounterOfferStatus.REJECTED.value
    current = _session(hub, session.id)
    assert current.status == SessionStatus.CANCELED.value
    assert current.is_accepted is False
    assert hub.sessions.progress.list_for_session(session.id) == []
    assert [e["recipient_id"] for e in hub.notifier.of_type("counter_offer_rejected")] == [BOB]


def test_only_the_other_party_answers(hub):
    session = propose(hub)
    offer = _counter(hub, session)

    with pytest.raises(Forbidden):
        hub.sessions.respond_counter_offer(offer.id, hub.bob, "accept")
    with pytest.raises(Forbidden):
        hub.sessions.respond_counter_offer(offer.id, hub.carol, "accept")

    # A counter from the proposer goes to the receiver
    own = _counter(hub, session, actor=hub.alice)
    with pytest.raises(Forbidden):
        hub.sessions.respond_counter_offer(own.id, hub.alice, "reject")
    assert hub.sessions.respond_counter_offer(own.id, hub.bob, "reject").responded_by == BOB


def test_counter_offer_requires_pending_session(hub):
    session = active_session(hub)
    with pytest.raises(PreconditionFailed) as exc:
        _counter(hub, session)
    assert exc.value.state == SessionStatus.ACTIVE.value


def test_counter_offer_validates_input_and_party(hub):
    session = propose(hub)
    with pytest.raises(Forbidden):
        _counter(hub, session, actor=hub.carol)
    with pytest.raises(ValidationError) as exc:
        _counter(hub, session, message="  ")
    assert exc.value.field == "message"
    with pytest.raises(ValidationError) as exc:
        _counter(hub, session, expected_end_date=NEW_START - timedelta(days=1))
    assert exc.value.field == "expected_end_date"
    with pytest.raises(NotFound) as exc:
        _counter(hub, session, skill1_id=999)
    assert exc.value.field == "skill1_id"
    with pytest.raises(NotFound):
        hub.sessions.propose_counter_offer(
            999,
            hub.bob,
            skill1_id=PYTHON_SKILL,
            description_of_service1="a",
            skill2_id=GUITAR_SKILL,
            description_of_service2="b",
            start_date=NEW_START,
            message="m",
        )


def test_counter_offer_is_answered_once(hub):
    session = propose(hub)
    offer = _counter(hub, session)
    hub.sessions.respond_counter_offer(offer.id, hub.alice, "accept")

    with pytest.raises(PreconditionFailed) as exc:
        hub.sessions.respond_counter_offer(offer.id, hub.alice, "reject")
    assert exc.value.state == CounterOfferStatus.ACCEPTED.value
    with pytest.raises(ValidationError):
        hub.sessions.respond_counter_offer(offer.id, hub.alice, "maybe")
    with pytest.raises(NotFound):
        hub.sessions.respond_counter_offer(12345, hub.alice, "accept")


def test_stale_counter_offer_stays_pending_once_session_moved_on(hub):
    session = propose(hub)
    first = _counter(hub, session)
    second = _counter(hub, session, message="Or two weeks later?")
    hub.sessions.respond_counter_offer(second.id, hub.alice, "accept")

    with pytest.raises(PreconditionFailed) as exc:
        hub.sessions.respond_counter_offer(first.id, hub.alice, "reject")

    assert exc.value.state == SessionStatus.ACTIVE.value
    assert hub.sessions.counter_offers.get(first.id).status == CounterOfferStatus.PENDING.value
    assert _session(hub, session.id).status == SessionStatus.ACTIVE.value


def test_list_counter_offers_newest_first(hub):
    session = propose(hub)
    first = _counter(hub, session)
    second = _counter(hub, session, actor=hub.alice, message="Counter to your counter")

    listed = hub.sessions.list_counter_offers(session.id, hub.alice)
    assert [offer.id for offer in listed] == [second.id, first.id]
    assert len(hub.sessions.list_counter_offers(session.id, hub.admin)) == 2
    with pytest.raises(Forbidden):
        hub.sessions.list_counter_offers(session.id, hub.carol)
