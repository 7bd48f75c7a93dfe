"""Unit tests for the rebate status lifecycle."""

import pytest

from models import Rebate, RebateStatus, RebateEvent, InvalidTransition, transition


class TestTransition:

    def test_pending_to_processed(self):
        assert transition(RebateStatus.PENDING, RebateEvent.CREDIT_SUCCEEDED) == RebateStatus.PROCESSED

    def test_pending_to_failed(self):
        assert transition(RebateStatus.PENDING, RebateEvent.CREDIT_FAILED) == RebateStatus.FAILED

    def test_accepts_stored_string(self):
        assert transition("pending", RebateEvent.CREDIT_SUCCEEDED) == RebateStatus.PROCESSED

    @pytest.mark.parametrize("current", [RebateStatus.PROCESSED, RebateStatus.FAILED])
    @pytest.mark.parametrize("event", list(RebateEvent))
    def test_terminal_states_reject_events(self, current, event):
        with pytest.raises(InvalidTransition) as excinfo:
            transition(current, event)
        assert excinfo.value.current == current
        assert excinfo.value.event == event


def test_purchase_dedupe_key():
    assert Rebate.purchaseKey(10, 3, 2) == "purchase:10:receiver:3:level:2"
