"""
Tests for the transaction group lifecycle rules.
"""

import itertools

import pytest

from pharmacy_ledger.models.enums import TransactionStatus
from pharmacy_ledger.services import lifecycle
from pharmacy_ledger.services.exceptions import InvalidStatusTransitionError

ALL_STATUSES = ["draft", "confirmed", "cancelled"]
ALLOWED = {("draft", "confirmed"), ("draft", "cancelled")}


class TestPermissions:

    def test_draft_allows_everything(self):
        permissions = lifecycle.get_permissions("draft")
        assert permissions.status == TransactionStatus.DRAFT
        assert permissions.can_edit is True
        assert permissions.can_delete is True
        assert permissions.can_confirm is True

    @pytest.mark.parametrize("status", ["confirmed", "cancelled"])
    def test_terminal_states_allow_nothing(self, status):
        permissions = lifecycle.get_permissions(status)
        assert permissions.can_edit is False
        assert permissions.can_delete is False
        assert permissions.can_confirm is False

    @pytest.mark.parametrize("status", [None, "archived", ""])
    def test_missing_or_unknown_status_is_draft(self, status):
        assert lifecycle.get_permissions(status) == lifecycle.get_permissions("draft")

    def test_accepts_enum_members(self):
        permissions = lifecycle.get_permissions(TransactionStatus.CONFIRMED)
        assert permissions.status == TransactionStatus.CONFIRMED
        assert permissions.can_edit is False


class TestTransitions:

    @pytest.mark.parametrize(
        "from_status,to_status",
        list(itertools.product(ALL_STATUSES, repeat=2)),
    )
    def test_only_two_transitions_allowed(self, from_status, to_status):
        expected = (from_status, to_status) in ALLOWED
        assert lifecycle.is_valid_status_transition(
            from_status, to_status
        ) is expected

    def test_unknown_statuses_never_transition(self):
        assert lifecycle.is_valid_status_transition("draft", "posted") is False
        assert lifecycle.is_valid_status_transition(None, "confirmed") is False

    def test_available_transitions(self):
        assert lifecycle.get_available_transitions("draft") == [
            TransactionStatus.CONFIRMED,
            TransactionStatus.CANCELLED,
        ]
        assert lifecycle.get_available_transitions("confirmed") == []
        assert lifecycle.get_available_transitions("cancelled") == []

    def test_validate_transition_raises_when_not_allowed(self):
        lifecycle.validate_transition("draft", "confirmed")
        with pytest.raises(InvalidStatusTransitionError, match="cannot transition"):
            lifecycle.validate_transition("confirmed", "draft")


class TestStatusQueries:

    def test_final_statuses(self):
        assert lifecycle.is_final_status("confirmed") is True
        assert lifecycle.is_final_status("cancelled") is True
        assert lifecycle.is_final_status("draft") is False

    def test_only_draft_is_editable(self):
        assert lifecycle.is_editable("draft") is True
        assert lifecycle.is_editable("confirmed") is False
        assert lifecycle.is_editable("cancelled") is False

    def test_editable_agrees_with_permissions(self):
        for status in ALL_STATUSES:
            assert lifecycle.is_editable(status) == (
                lifecycle.get_permissions(status).can_edit
            )

    def test_priority_orders_statuses(self):
        ordered = sorted(
            ["cancelled", "draft", "confirmed"],
            key=lifecycle.get_status_priority,
        )
        assert ordered == ["draft", "confirmed", "cancelled"]
        assert lifecycle.get_status_priority("draft") == 1
        assert lifecycle.get_status_priority("cancelled") == 3

    def test_is_valid_status(self):
        assert lifecycle.is_valid_status("confirmed") is True
        assert lifecycle.is_valid_status("posted") is False
        assert lifecycle.is_valid_status(None) is False

    def test_default_status_is_draft(self):
        assert lifecycle.get_default_status() == "draft"


class TestStatusChangeMessages:

    @pytest.mark.parametrize("from_status,to_status", [
        ("draft", "confirmed"),
        ("draft", "cancelled"),
        ("confirmed", "cancelled"),
        ("cancelled", "confirmed"),
    ])
    def test_known_changes_have_specific_messages(self, from_status, to_status):
        message = lifecycle.get_status_change_message(from_status, to_status)
        assert not message.startswith("Status changed from")

    def test_rejected_changes_say_so(self):
        message = lifecycle.get_status_change_message("confirmed", "cancelled")
        assert "cannot" in message

    def test_other_pairs_fall_back_to_generic_message(self):
        message = lifecycle.get_status_change_message("confirmed", "draft")
        assert message == "Status changed from Confirmed to Draft"
