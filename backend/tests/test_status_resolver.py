import pytest

from moftrack.services.status_resolver import (
    EVENT_PICK,
    EVENT_VERIFY,
    MOF_STATUS_COMPLETED,
    MOF_STATUS_IN_PROGRESS,
    MOF_STATUS_PENDING,
    MOF_STATUS_READY_FOR_SUPPLY,
    MOF_STATUSES,
    resolve_status,
    status_rank,
    validate_status,
)
from moftrack.validation import ValidationError


def _pick(current, picked, qty, verified=0):
    return resolve_status(current, picked, verified, qty, event=EVENT_PICK)


def _verify(current, verified, qty, picked=None):
    return resolve_status(current, qty if picked is None else picked, verified, qty, event=EVENT_VERIFY)


class TestPickRules:
    def test_nothing_picked_stays_pending(self):
        assert _pick(MOF_STATUS_PENDING, 0, 3) == MOF_STATUS_PENDING

    def test_partial_pick_moves_pending_to_in_progress(self):
        assert _pick(MOF_STATUS_PENDING, 1, 3) == MOF_STATUS_IN_PROGRESS
        assert _pick(MOF_STATUS_PENDING, 2, 3) == MOF_STATUS_IN_PROGRESS

    def test_partial_pick_keeps_in_progress(self):
        assert _pick(MOF_STATUS_IN_PROGRESS, 2, 3) == MOF_STATUS_IN_PROGRESS

    def test_full_pick_is_ready_for_supply(self):
        assert _pick(MOF_STATUS_IN_PROGRESS, 3, 3) == MOF_STATUS_READY_FOR_SUPPLY

    def test_single_item_mof_goes_straight_to_ready(self):
        assert _pick(MOF_STATUS_PENDING, 1, 1) == MOF_STATUS_READY_FOR_SUPPLY

    def test_over_pick_leaves_status_unchanged(self):
        assert _pick(MOF_STATUS_READY_FOR_SUPPLY, 4, 3) == MOF_STATUS_READY_FOR_SUPPLY
        assert _pick(MOF_STATUS_IN_PROGRESS, 4, 3) == MOF_STATUS_IN_PROGRESS

    def test_pick_never_completes_even_when_verified_count_reached(self):
        assert _pick(MOF_STATUS_IN_PROGRESS, 2, 1, verified=1) == MOF_STATUS_IN_PROGRESS

    def test_never_regresses(self):
        # e.g. after an administrative override to Ready with only one pick
        assert _pick(MOF_STATUS_READY_FOR_SUPPLY, 1, 3) == MOF_STATUS_READY_FOR_SUPPLY


class TestVerifyRules:
    def test_partial_verification_leaves_status_unchanged(self):
        assert _verify(MOF_STATUS_READY_FOR_SUPPLY, 2, 3) == MOF_STATUS_READY_FOR_SUPPLY

    def test_partial_verification_does_not_apply_pick_rules(self):
        assert _verify(MOF_STATUS_PENDING, 1, 2) == MOF_STATUS_PENDING
        assert _verify(MOF_STATUS_PENDING, 1, 3, picked=1) == MOF_STATUS_PENDING

    def test_verification_threshold_completes(self):
        assert _verify(MOF_STATUS_READY_FOR_SUPPLY, 3, 3) == MOF_STATUS_COMPLETED

    def test_threshold_completes_from_any_earlier_status(self):
        assert _verify(MOF_STATUS_PENDING, 2, 2) == MOF_STATUS_COMPLETED

    def test_over_verification_completes(self):
        assert _verify(MOF_STATUS_READY_FOR_SUPPLY, 4, 3, picked=4) == MOF_STATUS_COMPLETED


class TestCommonGuards:
    @pytest.mark.parametrize("event", [EVENT_PICK, EVENT_VERIFY])
    def test_completed_is_terminal(self, event):
        assert resolve_status(MOF_STATUS_COMPLETED, 0, 0, 3, event=event) == MOF_STATUS_COMPLETED
        assert resolve_status(MOF_STATUS_COMPLETED, 1, 0, 3, event=event) == MOF_STATUS_COMPLETED

    @pytest.mark.parametrize("event", [EVENT_PICK, EVENT_VERIFY])
    @pytest.mark.parametrize("count", range(0, 6))
    @pytest.mark.parametrize("current", MOF_STATUSES)
    def test_rank_is_monotonic(self, current, count, event):
        result = resolve_status(current, count, count, 3, event=event)
        assert status_rank(result) >= status_rank(current)

    def test_unknown_current_status_rejected(self):
        with pytest.raises(ValidationError):
            resolve_status("Shipped", 0, 0, 1, event=EVENT_PICK)

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError):
            resolve_status(MOF_STATUS_PENDING, 0, 0, 1, event="ship")


def test_status_order():
    assert [status_rank(s) for s in MOF_STATUSES] == [0, 1, 2, 3]
    assert MOF_STATUSES == ("Pending", "In Progress", "MOF siap Supply", "Completed")


def test_validate_status_rejects_unknown():
    with pytest.raises(ValidationError):
        validate_status("pending")
