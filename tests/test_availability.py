"""
Unit tests for the AvailabilityCalculator.

Tests:
- Slot grid generation (granularity, fit, short windows)
- Filtering against booked appointments (overlap, touching, cancelled)
- Ordering, idempotence and the not_before cut-off
"""

from datetime import date, datetime, time, timedelta

import pytest

from models import AvailabilityWindow
from scheduler import AvailabilityCalculator, SchedulerSettings, intervals_overlap
from tests.conftest import MONDAY, OTHER_PATIENT_ID, PATIENT_ID, at, seed_case


@pytest.fixture
def calculator(appointment_store, settings):
    return AvailabilityCalculator(appointment_store, settings)


def hhmm(slots):
    return [s.strftime("%H:%M") for s in slots]


class TestTheoreticalSlots:
    """Tests for the empty-calendar grid."""

    def test_full_grid_for_empty_calendar(self, calculator, offer):
        slots = calculator.compute_free_slots(offer, MONDAY)

        assert hhmm(slots) == ["08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00"]

    def test_no_window_for_weekday(self, calculator, offer):
        """Tuesday has no published window."""
        assert calculator.compute_free_slots(offer, MONDAY + timedelta(days=1)) == []

    def test_window_shorter_than_duration(self, calculator, offer):
        offer.windows = [AvailabilityWindow(day_of_week=0, start_time=time(8, 0), end_time=time(8, 45))]

        assert calculator.compute_free_slots(offer, MONDAY) == []

    def test_window_exactly_one_duration(self, calculator, offer):
        offer.windows = [AvailabilityWindow(day_of_week=0, start_time=time(8, 0), end_time=time(9, 0))]

        assert hhmm(calculator.compute_free_slots(offer, MONDAY)) == ["08:00"]

    def test_long_service_still_on_grid(self, calculator, offer):
        """A 90 minute service starts on 30 minute boundaries."""
        offer.duration_minutes = 90

        slots = calculator.compute_free_slots(offer, MONDAY)

        assert hhmm(slots) == ["08:00", "08:30", "09:00", "09:30", "10:00", "10:30"]

    def test_granularity_from_settings(self, appointment_store, offer):
        calculator = AvailabilityCalculator(appointment_store, SchedulerSettings(slot_granularity_minutes=60))

        assert hhmm(calculator.compute_free_slots(offer, MONDAY)) == ["08:00", "09:00", "10:00", "11:00"]

    def test_multiple_windows_merged_in_order(self, calculator, offer):
        offer.windows.append(AvailabilityWindow(day_of_week=0, start_time=time(14, 0), end_time=time(15, 0)))
        offer.windows.insert(0, AvailabilityWindow(day_of_week=0, start_time=time(6, 0), end_time=time(7, 0)))

        slots = calculator.compute_free_slots(offer, MONDAY)

        assert hhmm(slots)[0] == "06:00"
        assert hhmm(slots)[-1] == "14:00"
        assert slots == sorted(slots)


class TestBookedFiltering:
    """Tests for collision filtering."""

    def test_booked_hour_removes_overlapping_slots(self, calculator, offer, case_store):
        """Mon 08:00-12:00, 60 min, booked 09:00-10:00. 08:30 is gone too: 08:30-09:30 overlaps the booking."""
        seed_case(case_store, PATIENT_ID, at(9, 0))

        slots = calculator.compute_free_slots(offer, MONDAY)

        assert hhmm(slots) == ["08:00", "10:00", "10:30", "11:00"]

    def test_touching_appointments_do_not_collide(self, calculator, offer, case_store):
        """08:00-09:00 ends exactly where the booking starts."""
        seed_case(case_store, PATIENT_ID, at(9, 0), duration_minutes=30)

        slots = calculator.compute_free_slots(offer, MONDAY)

        assert at(8, 0) in slots
        assert at(9, 30) in slots
        assert at(8, 30) not in slots
        assert at(9, 0) not in slots

    def test_cancelled_appointments_free_the_slot(self, calculator, offer, case_store):
        case = seed_case(case_store, PATIENT_ID, at(9, 0))
        case.appointments[0].cancel()
        case_store.save(case)

        assert at(9, 0) in calculator.compute_free_slots(offer, MONDAY)

    def test_other_practitioners_bookings_ignored(self, calculator, offer, case_store):
        seed_case(case_store, OTHER_PATIENT_ID, at(9, 0), practitioner_id=99)

        assert len(calculator.compute_free_slots(offer, MONDAY)) == 7

    def test_other_days_bookings_ignored(self, calculator, offer, case_store):
        seed_case(case_store, PATIENT_ID, at(9, 0, day=MONDAY + timedelta(days=7)))

        assert len(calculator.compute_free_slots(offer, MONDAY)) == 7


class TestSlotLaws:
    """Properties every generated slot set must satisfy."""

    @pytest.fixture
    def busy_day(self, offer, case_store):
        offer.duration_minutes = 45
        seed_case(case_store, PATIENT_ID, at(8, 50), duration_minutes=20)
        seed_case(case_store, OTHER_PATIENT_ID, at(10, 15), duration_minutes=45)
        return offer

    def test_no_overlap_with_bookings(self, calculator, busy_day, appointment_store):
        slots = calculator.compute_free_slots(busy_day, MONDAY)
        booked = appointment_store.find_active_by_practitioner_and_date(busy_day.practitioner_id, MONDAY)

        for slot in slots:
            slot_end = slot + timedelta(minutes=busy_day.duration_minutes)
            for a in booked:
                assert not intervals_overlap(slot, slot_end, a.appointment_time, a.end_time)

    def test_granularity_law(self, calculator, busy_day):
        window_start = datetime.combine(MONDAY, time(8, 0))

        for slot in calculator.compute_free_slots(busy_day, MONDAY):
            assert ((slot - window_start).total_seconds() / 60) % 30 == 0

    def test_fit_law(self, calculator, busy_day):
        window_end = datetime.combine(MONDAY, time(12, 0))

        for slot in calculator.compute_free_slots(busy_day, MONDAY):
            assert slot + timedelta(minutes=busy_day.duration_minutes) <= window_end

    def test_idempotent(self, calculator, busy_day):
        first = calculator.compute_free_slots(busy_day, MONDAY)
        second = calculator.compute_free_slots(busy_day, MONDAY)

        assert first == second


class TestNotBefore:
    """Slots already in the past are hidden."""

    def test_drops_started_slots(self, calculator, offer):
        slots = calculator.compute_free_slots(offer, MONDAY, not_before=at(9, 10))

        assert hhmm(slots) == ["09:30", "10:00", "10:30", "11:00"]

    def test_slot_at_cutoff_is_dropped(self, calculator, offer):
        slots = calculator.compute_free_slots(offer, MONDAY, not_before=at(9, 0))

        assert at(9, 0) not in slots


class TestIntervalsOverlap:
    """Half-open overlap test shared by slot filtering and booking checks."""

    @pytest.mark.parametrize("start,end,expected", [
        (at(9, 30), at(10, 30), True),
        (at(8, 30), at(9, 30), True),
        (at(9, 15), at(9, 45), True),
        (at(10, 0), at(11, 0), False),
        (at(8, 0), at(9, 0), False),
    ])
    def test_against_nine_to_ten(self, start, end, expected):
        assert intervals_overlap(start, end, at(9, 0), at(10, 0)) is expected
