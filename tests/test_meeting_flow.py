from __future__ import annotations

from datetime import datetime

import pytest

from conftest import ALICE, BOB, CAROL, active_session, propose
from skillhub.errors import Forbidden, NotFound, PreconditionFailed, ValidationError
from skillhub.models import MeetingState

MEETING_TIME = datetime(2026, 3, 5, 18, 30)


def _propose(hub, sender=None, receiver_id=BOB, **overrides):
    fields = dict(
        receiver_id=receiver_id,
        description="Walk through the first Python exercises",
        meeting_time=MEETING_TIME,
    )
    fields.update(overrides)
    return hub.meetings.propose_meeting(sender or hub.alice, **fields)


def test_propose_and_accept_generates_link(hub):
    meeting = _propose(hub)
    assert meeting.state == MeetingState.PENDING.value
    assert meeting.accept_status is False
    assert hub.notifier.of_type("meeting_proposed")[0]["recipient_id"] == BOB

    accepted = hub.meetings.respond_meeting(meeting.id, hub.bob, "accept")

    assert accepted.state == MeetingState.ACCEPTED.value
    assert accepted.accept_status is True
    assert accepted.meeting_link.startswith("https://skillswaphub.daily.co/skillswap-")
    assert hub.notifier.of_type("meeting_accepted")[0]["recipient_id"] == ALICE


def test_only_receiver_responds(hub):
    meeting = _propose(hub)
    with pytest.raises(Forbidden):
        hub.meetings.respond_meeting(meeting.id, hub.alice, "accept")
    with pytest.raises(ValidationError):
        hub.meetings.respond_meeting(meeting.id, hub.bob, "later")


def test_reject_is_terminal(hub):
    meeting = _propose(hub)
    rejected = hub.meetings.respond_meeting(meeting.id, hub.bob, "reject")
    assert rejected.state == MeetingState.REJECTED.value

    with pytest.raises(PreconditionFailed) as exc:
        hub.meetings.respond_meeting(meeting.id, hub.bob, "accept")
    assert exc.value.state == MeetingState.REJECTED.value
    with pytest.raises(PreconditionFailed):
        hub.meetings.cancel_meeting(meeting.id, hub.alice, "Never mind")


def test_propose_validation(hub):
    with pytest.raises(ValidationError):
        _propose(hub, receiver_id=ALICE)
    with pytest.raises(ValidationError):
        _propose(hub, description="  ")
    with pytest.raises(ValidationError):
        _propose(hub, meeting_time=None)
    with pytest.raises(NotFound):
        _propose(hub, receiver_id=404)


def test_session_bound_meeting_requires_active_session_between_parties(hub):
    pending = propose(hub)
    with pytest.raises(PreconditionFailed):
        _propose(hub, session_id=pending.id)

    session = active_session(hub)
    with pytest.raises(Forbidden):
        _propose(hub, receiver_id=CAROL, session_id=session.id)

    meeting = _propose(hub, session_id=session.id)
    assert meeting.session_id == session.id


def test_cancel_and_acknowledge(hub):
    meeting = _propose(hub)
    hub.meetings.respond_meeting(meeting.id, hub.bob, "accept")

    cancellation = hub.meetings.cancel_meeting(meeting.id, hub.alice, "Sick today")
    assert cancellation.acknowledged is False
    assert cancellation.cancelled_by == ALICE
    assert hub.meetings.get_meeting(meeting.id, hub.bob).state == MeetingState.CANCELLED.value
    assert hub.notifier.of_type("meeting_cancelled")[0]["recipient_id"] == BOB
    assert [c.id for c in hub.meetings.list_unacknowledged_cancellations(hub.bob)] == [cancellation.id]
    assert hub.meetings.list_unacknowledged_cancellations(hub.alice) == []

    # The canceller cannot acknowledge their own cancellation
    with pytest.raises(Forbidden):
        hub.meetings.acknowledge_cancellation(meeting.id, hub.alice)

    acknowledged = hub.meetings.acknowledge_cancellation(meeting.id, hub.bob)
    assert acknowledged.acknowledged is True
    assert acknowledged.acknowledged_by == BOB
    stamp = acknowledged.acknowledged_at

    # Later calls from either side return the record unchanged
    again = hub.meetings.acknowledge_cancellation(meeting.id, hub.bob)
    from_canceller = hub.meetings.acknowledge_cancellation(meeting.id, hub.alice)
    assert again.acknowledged_at == stamp
    assert from_canceller.acknowledged_by == BOB
    assert hub.meetings.list_unacknowledged_cancellations(hub.bob) == []


def test_cancel_requires_reason_and_party(hub):
    meeting = _propose(hub)
    with pytest.raises(ValidationError):
        hub.meetings.cancel_meeting(meeting.id, hub.bob, "")
    with pytest.raises(Forbidden):
        hub.meetings.cancel_meeting(meeting.id, hub.carol, "Not mine")

    # Pending meetings may be withdrawn
    hub.meetings.cancel_meeting(meeting.id, hub.alice, "Found another time")
    with pytest.raises(PreconditionFailed):
        hub.meetings.cancel_meeting(meeting.id, hub.bob, "Twice")


def test_acknowledge_without_cancellation(hub):
    meeting = _propose(hub)
    with pytest.raises(NotFound):
        hub.meetings.acknowledge_cancellation(meeting.id, hub.bob)


def test_complete_meeting_only_from_accepted(hub):
    meeting = _propose(hub)
    with pytest.raises(PreconditionFailed):
        hub.meetings.complete_meeting(meeting.id, hub.alice)

    hub.meetings.respond_meeting(meeting.id, hub.bob, "accept")
    completed = hub.meetings.complete_meeting(meeting.id, hub.alice)
    assert completed.state == MeetingState.COMPLETED.value

    with pytest.raises(PreconditionFailed):
        hub.meetings.cancel_meeting(meeting.id, hub.bob, "Too late")


def test_list_meetings_with_counterparty_filter(hub):
    with_bob = _propose(hub)
    with_carol = _propose(hub, receiver_id=CAROL)
    _propose(hub, sender=hub.bob, receiver_id=CAROL)

    assert {m.id for m in hub.meetings.list_meetings(hub.alice)} == {with_bob.id, with_carol.id}
    assert [m.id for m in hub.meetings.list_meetings(hub.alice, other_user_id=CAROL)] == [with_carol.id]
    with pytest.raises(Forbidden):
        hub.meetings.get_meeting(with_bob.id, hub.carol)
