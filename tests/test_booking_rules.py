# tests/test_booking_rules.py
"""Unit tests for the pure booking rules: overlap, pricing, state machine."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from app.errors import IllegalTransition, InvalidWindow
from app.services.booking_rules import (
    billable_hours, compute_total_amount, derive_space_status, first_conflict,
    overlaps, to_utc_naive, validate_transition, validate_window,
)
from conftest import at


class TestOverlap:
    def test_touching_windows_do_not_overlap(self):
        assert not overlaps(at(9), at(10), at(10), at(11))
        assert not overlaps(at(10), at(11), at(9), at(10))

    def test_partial_overlap(self):
        assert overlaps(at(9), at(11), at(10, 30), at(12))

    def test_containment_overlaps(self):
        assert overlaps(at(9), at(17), at(12), at(13))
        assert overlaps(at(12), at(13), at(9), at(17))

    def test_first_conflict_ignores_dead_bookings(self):
        cancelled = SimpleNamespace(status="cancelled", start_time=at(9), end_time=at(11))
        completed = SimpleNamespace(status="completed", start_time=at(9), end_time=at(11))
        live = SimpleNamespace(status="confirmed", start_time=at(10), end_time=at(12))
        assert first_conflict([cancelled, completed], at(9), at(11)) is None
        assert first_conflict([cancelled, live], at(9), at(11)) is live


class TestWindow:
    def test_start_must_precede_end(self):
        with pytest.raises(InvalidWindow):
            validate_window(at(11), at(9))
        with pytest.raises(InvalidWindow):
            validate_window(at(9), at(9))

    def test_aware_times_are_normalised_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        start, end = validate_window(datetime(2030, 1, 15, 11, tzinfo=plus_two),
                                     datetime(2030, 1, 15, 13, tzinfo=plus_two))
        assert start == at(9) and start.tzinfo is None
        assert end == at(11)

    def test_naive_times_are_kept(self):
        assert to_utc_naive(at(9)) == at(9)


class TestPricing:
    @pytest.mark.parametrize("minutes,hours", [(60, 1), (90, 2), (61, 2), (120, 2), (1, 1)])
    def test_started_hours_are_billed(self, minutes, hours):
        assert billable_hours(at(9), at(9) + timedelta(minutes=minutes)) == hours

    def test_total_amount(self):
        assert compute_total_amount(at(9), at(11), Decimal("10.00")) == Decimal("20.00")
        assert compute_total_amount(at(9), at(10, 30), "12.50") == Decimal("25.00")


class TestStateMachine:
    @pytest.mark.parametrize("current,target", [
        ("pending", "confirmed"), ("pending", "cancelled"),
        ("confirmed", "active"), ("confirmed", "cancelled"),
        ("active", "completed"),
    ])
    def test_legal_transitions(self, current, target):
        validate_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("pending", "active"), ("pending", "completed"),
        ("active", "cancelled"), ("completed", "cancelled"),
        ("cancelled", "confirmed"), ("confirmed", "pending"),
    ])
    def test_illegal_transitions(self, current, target):
        with pytest.raises(IllegalTransition) as exc:
            validate_transition(current, target)
        assert exc.value.current == current
        assert exc.value.target == target

    def test_space_status_follows_live_bookings(self):
        assert derive_space_status([]) == "available"
        assert derive_space_status(["pending"]) == "reserved"
        assert derive_space_status(["confirmed", "pending"]) == "reserved"
        assert derive_space_status(["confirmed", "active"]) == "occupied"
