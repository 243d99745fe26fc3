"""
Hard Constraint Validation Logic.

This module answers the binary question: "Can this offer be booked at Time T?"
It enforces physical reality (a patient or practitioner can't be in two
appointments at once) and the offer's published availability.
"""

from datetime import datetime, timedelta
from typing import List, Optional
from dataclasses import dataclass

from models import Appointment, TreatmentOffer, ViolationReason
from stores import AppointmentStore, OwnerKind


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open [start, end) overlap. Intervals that only touch do not collide."""
    return a_start < b_end and a_end > b_start


def collides_with_any(start: datetime, end: datetime, appointments: List[Appointment]) -> bool:
    return any(intervals_overlap(start, end, a.appointment_time, a.end_time) for a in appointments)


@dataclass
class ConstraintViolation:
    """Detailed reason for rejection."""
    reason: ViolationReason
    message: str
    requested_time: datetime


class BookingConstraintChecker:
    """
    Validates hard constraints for a single requested start time.
    Conflicts use the same overlap test as the slot generator, not exact-time equality.
    """

    def __init__(self, appointment_store: AppointmentStore):
        self.appointments = appointment_store

    def check(self, offer: TreatmentOffer, patient_id: int, requested_time: datetime) -> Optional[ConstraintViolation]:
        """
        Master validation function. Returns None if Valid, Violation object if Invalid.
        First violation wins.
        """

        # 1. Published availability (point membership, no grid regeneration)
        violation = self._check_availability(offer, requested_time)
        if violation: return violation

        requested_end = requested_time + timedelta(minutes=offer.duration_minutes)

        # 2. Patient calendar
        violation = self._check_owner_calendar(
            OwnerKind.PATIENT, patient_id, requested_time, requested_end,
            ViolationReason.PATIENT_DOUBLE_BOOKED,
            "You already have an appointment at this date and time. "
            "You cannot book two appointments at the same time."
        )
        if violation: return violation

        # 3. Practitioner calendar
        violation = self._check_owner_calendar(
            OwnerKind.PRACTITIONER, offer.practitioner_id, requested_time, requested_end,
            ViolationReason.PRACTITIONER_DOUBLE_BOOKED,
            "The practitioner already has an appointment at this date and time. "
            "Please choose another available time."
        )
        if violation: return violation

        return None # All clear!

    def _check_availability(self, offer: TreatmentOffer, requested_time: datetime) -> Optional[ConstraintViolation]:
        if offer.accepts(requested_time):
            return None
        return ConstraintViolation(
            ViolationReason.OUTSIDE_AVAILABILITY,
            "The selected time is not available. "
            "Please choose a time within the practitioner's published availability.",
            requested_time
        )

    def _check_owner_calendar(
        self,
        owner_kind: OwnerKind,
        owner_id: int,
        start: datetime,
        end: datetime,
        reason: ViolationReason,
        message: str
    ) -> Optional[ConstraintViolation]:
        # Exact-time hit is the cheap indexed lookup; overlap covers different start times
        if self.appointments.find_active_by_owner_and_exact_time(owner_kind, owner_id, start):
            return ConstraintViolation(reason, message, start)

        existing = self.appointments.find_active_by_owner_and_date(owner_kind, owner_id, start.date())
        if collides_with_any(start, end, existing):
            return ConstraintViolation(reason, message, start)
        return None
