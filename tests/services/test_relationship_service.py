"""Tests for the relationship workflow service."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from quluub.core.errors import (
    DuplicateError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    UnavailableError,
)
from quluub.models import ActivityAction, Relationship, RelationshipStatus, UserActivityLog


def _actions(db_session, actor_id: int) -> list[ActivityAction]:
    return list(
        db_session.scalars(
            select(UserActivityLog.action)
            .where(UserActivityLog.user_id == actor_id)
            .order_by(UserActivityLog.id)
        )
    )


def _relationship_count(db_session) -> int:
    return db_session.scalar(select(func.count()).select_from(Relationship))


class TestSendRequest:
    def test_creates_pending_request_and_logs_follow(
        self, db_session, relationship_service, alice, bob
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)

        assert relationship.status is RelationshipStatus.PENDING
        assert relationship.follower_user_id == alice.id
        assert relationship.followed_user_id == bob.id
        assert relationship.id
        assert _actions(db_session, alice.id) == [ActivityAction.FOLLOWED]

        entry = db_session.scalars(select(UserActivityLog)).one()
        assert entry.receiver_id == bob.id

    def test_unknown_target(self, db_session, relationship_service, alice):
        with pytest.raises(NotFoundError) as exc_info:
            relationship_service.send_request(alice.id, 9999)

        assert exc_info.value.message == "User to follow not found"
        assert _relationship_count(db_session) == 0

    def test_self_request_is_rejected(self, db_session, relationship_service, alice):
        with pytest.raises(InvalidStateError):
            relationship_service.send_request(alice.id, alice.id)

        assert _relationship_count(db_session) == 0
        assert _actions(db_session, alice.id) == []

    def test_duplicate_same_direction(self, db_session, relationship_service, alice, bob):
        first = relationship_service.send_request(alice.id, bob.id)

        with pytest.raises(DuplicateError) as exc_info:
            relationship_service.send_request(alice.id, bob.id)

        assert exc_info.value.existing["id"] == first.id
        assert exc_info.value.existing["status"] == "pending"
        assert _relationship_count(db_session) == 1

    def test_duplicate_reverse_direction(self, db_session, relationship_service, alice, bob):
        first = relationship_service.send_request(alice.id, bob.id)

        with pytest.raises(DuplicateError) as exc_info:
            relationship_service.send_request(bob.id, alice.id)

        payload = exc_info.value.to_payload()
        assert payload["error"] == "Duplicate"
        assert payload["relationship"]["id"] == first.id
        assert payload["relationship"]["followerUserId"] == alice.id
        assert _relationship_count(db_session) == 1
        assert _actions(db_session, bob.id) == []

    def test_rejected_pair_cannot_be_requested_again(
        self, db_session, relationship_service, alice, bob
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)
        relationship_service.respond_to_request(bob.id, relationship.id, "rejected")

        with pytest.raises(DuplicateError):
            relationship_service.send_request(alice.id, bob.id)
        with pytest.raises(DuplicateError):
            relationship_service.send_request(bob.id, alice.id)

    def test_store_constraint_race_maps_to_duplicate(
        self, db_session, relationship_service, alice, bob, monkeypatch
    ):
        existing = relationship_service.send_request(bob.id, alice.id)

        # Simulate a racing writer that inserted after our existence check ran.
        monkeypatch.setattr(
            relationship_service,
            "find_between",
            _first_none_then_real(relationship_service.find_between),
        )

        with pytest.raises(DuplicateError) as exc_info:
            relationship_service.send_request(alice.id, bob.id)

        assert isinstance(exc_info.value.__cause__, IntegrityError)
        assert exc_info.value.existing["id"] == existing.id
        assert _relationship_count(db_session) == 1

    def test_store_failure_maps_to_unavailable(
        self, db_session, relationship_service, alice, bob, monkeypatch
    ):
        def _broken_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", _broken_commit)

        with pytest.raises(UnavailableError):
            relationship_service.send_request(alice.id, bob.id)

        monkeypatch.undo()
        assert _relationship_count(db_session) == 0
        assert _actions(db_session, alice.id) == []

    def test_failed_reload_after_commit_maps_to_unavailable(
        self, db_session, relationship_service, alice, bob, monkeypatch
    ):
        def _broken_refresh(instance, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "refresh", _broken_refresh)

        with pytest.raises(UnavailableError):
            relationship_service.send_request(alice.id, bob.id)

        monkeypatch.undo()
        # The write itself was committed before the reload failed.
        assert _relationship_count(db_session) == 1


def _first_none_then_real(real):
    calls = {"n": 0}

    def _find_between(user_a, user_b):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real(user_a, user_b)

    return _find_between


class TestRespondToRequest:
    def test_recipient_accepts(self, db_session, relationship_service, alice, bob):
        relationship = relationship_service.send_request(alice.id, bob.id)

        updated = relationship_service.respond_to_request(bob.id, relationship.id, "matched")

        assert updated.status is RelationshipStatus.MATCHED
        assert _actions(db_session, bob.id) == [ActivityAction.ACCEPTED]

    def test_recipient_rejects(self, db_session, relationship_service, alice, bob):
        relationship = relationship_service.send_request(alice.id, bob.id)

        updated = relationship_service.respond_to_request(bob.id, relationship.id, "rejected")

        assert updated.status is RelationshipStatus.REJECTED
        assert _actions(db_session, bob.id) == [ActivityAction.REJECTED]

    @pytest.mark.parametrize("decision", ["pending", "accepted", "", "MATCHED"])
    def test_unsupported_decision(self, db_session, relationship_service, alice, bob, decision):
        relationship = relationship_service.send_request(alice.id, bob.id)

        with pytest.raises(InvalidTransitionError) as exc_info:
            relationship_service.respond_to_request(bob.id, relationship.id, decision)

        assert exc_info.value.message == "Invalid status"
        db_session.refresh(relationship)
        assert relationship.status is RelationshipStatus.PENDING

    def test_unknown_relationship(self, relationship_service, bob):
        with pytest.raises(NotFoundError):
            relationship_service.respond_to_request(bob.id, "missing", "matched")

    def test_initiator_cannot_accept_own_request(
        self, db_session, relationship_service, alice, bob
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            relationship_service.respond_to_request(alice.id, relationship.id, "matched")

        db_session.refresh(relationship)
        assert relationship.status is RelationshipStatus.PENDING

    def test_third_party_is_forbidden(
        self, db_session, relationship_service, alice, bob, carol
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)

        with pytest.raises(ForbiddenError) as exc_info:
            relationship_service.respond_to_request(carol.id, relationship.id, "matched")

        assert exc_info.value.message == "Not authorized to update this relationship"
        assert _actions(db_session, carol.id) == []

    @pytest.mark.parametrize("first, second", [
        ("matched", "rejected"),
        ("rejected", "matched"),
        ("matched", "matched"),
    ])
    def test_terminal_states_are_final(
        self, db_session, relationship_service, alice, bob, first, second
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)
        relationship_service.respond_to_request(bob.id, relationship.id, first)

        with pytest.raises(InvalidTransitionError):
            relationship_service.respond_to_request(bob.id, relationship.id, second)

        db_session.refresh(relationship)
        assert relationship.status.value == first
        assert len(_actions(db_session, bob.id)) == 1

    def test_lost_race_is_reported_as_invalid_transition(
        self, db_session, relationship_service, alice, bob, monkeypatch
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)
        stale = relationship_service.get(relationship.id)
        other_writer = relationship_service.respond_to_request

        # The other writer answers first; our copy of the row is then stale.
        other_writer(bob.id, relationship.id, "rejected")
        monkeypatch.setattr(relationship_service, "get", lambda _id: _pending_copy(stale))

        with pytest.raises(InvalidTransitionError):
            relationship_service.respond_to_request(bob.id, relationship.id, "matched")

        db_session.expire_all()
        assert db_session.get(Relationship, relationship.id).status is RelationshipStatus.REJECTED
        assert _actions(db_session, bob.id) == [ActivityAction.REJECTED]


def _pending_copy(relationship: Relationship) -> Relationship:
    return Relationship(
        id=relationship.id,
        follower_user_id=relationship.follower_user_id,
        followed_user_id=relationship.followed_user_id,
        user_low_id=relationship.user_low_id,
        user_high_id=relationship.user_high_id,
        status=RelationshipStatus.PENDING,
    )


class TestWithdrawRequest:
    def test_initiator_withdraws_pending(self, db_session, relationship_service, alice, bob):
        relationship = relationship_service.send_request(alice.id, bob.id)

        relationship_service.withdraw_request(alice.id, relationship.id)

        assert _relationship_count(db_session) == 0
        assert _actions(db_session, alice.id) == [
            ActivityAction.FOLLOWED,
            ActivityAction.WITHDREW,
        ]

    def test_pair_can_request_again_after_withdrawal(
        self, db_session, relationship_service, alice, bob
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)
        relationship_service.withdraw_request(alice.id, relationship.id)

        again = relationship_service.send_request(bob.id, alice.id)

        assert again.status is RelationshipStatus.PENDING
        assert again.id != relationship.id

    def test_withdrawn_request_stays_readable(self, relationship_service, alice, bob):
        relationship = relationship_service.send_request(alice.id, bob.id)
        relationship_id = relationship.id

        relationship_service.withdraw_request(alice.id, relationship_id)

        assert relationship.id == relationship_id
        assert relationship.status is RelationshipStatus.PENDING
        assert relationship.followed_user_id == bob.id

    def test_recipient_cannot_withdraw(self, db_session, relationship_service, alice, bob):
        relationship = relationship_service.send_request(alice.id, bob.id)

        with pytest.raises(ForbiddenError) as exc_info:
            relationship_service.withdraw_request(bob.id, relationship.id)

        assert exc_info.value.message == "Not authorized to withdraw this request"
        assert _relationship_count(db_session) == 1

    @pytest.mark.parametrize("decision", ["matched", "rejected"])
    def test_answered_request_cannot_be_withdrawn(
        self, db_session, relationship_service, alice, bob, decision
    ):
        relationship = relationship_service.send_request(alice.id, bob.id)
        relationship_service.respond_to_request(bob.id, relationship.id, decision)

        with pytest.raises(InvalidStateError) as exc_info:
            relationship_service.withdraw_request(alice.id, relationship.id)

        assert exc_info.value.message == "Only pending requests can be withdrawn"
        assert _relationship_count(db_session) == 1

    def test_unknown_relationship(self, relationship_service, alice):
        with pytest.raises(NotFoundError):
            relationship_service.withdraw_request(alice.id, "missing")


class TestListings:
    def test_matches_include_counterpart_for_both_sides(
        self, relationship_service, matched_pair, alice, bob
    ):
        alice_matches = relationship_service.get_matches(alice.id)
        bob_matches = relationship_service.get_matches(bob.id)

        assert [(rel.id, user.id) for rel, user in alice_matches] == [(matched_pair.id, bob.id)]
        assert [(rel.id, user.id) for rel, user in bob_matches] == [(matched_pair.id, alice.id)]

    def test_matches_exclude_pending_and_rejected(
        self, relationship_service, alice, bob, carol
    ):
        relationship_service.send_request(alice.id, bob.id)
        rejected = relationship_service.send_request(carol.id, bob.id)
        relationship_service.respond_to_request(bob.id, rejected.id, "rejected")

        assert relationship_service.get_matches(alice.id) == []
        assert relationship_service.get_matches(bob.id) == []

    def test_pending_and_sent(self, relationship_service, alice, bob, carol):
        to_bob = relationship_service.send_request(alice.id, bob.id)
        from_carol = relationship_service.send_request(carol.id, alice.id)

        sent = relationship_service.get_sent_requests(alice.id)
        pending = relationship_service.get_pending_requests(alice.id)

        assert [(rel.id, user.id) for rel, user in sent] == [(to_bob.id, bob.id)]
        assert [(rel.id, user.id) for rel, user in pending] == [(from_carol.id, carol.id)]
