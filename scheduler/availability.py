"""
Availability Calculator.

Turns an offer's recurring windows into concrete bookable start times for one date:
1. Expand each window of the weekday into a fixed-step grid (theoretical slots).
2. Keep only slots where the whole service fits before the window closes.
3. Drop slots that overlap any of the practitioner's non-cancelled appointments that day.

Read-only: the result is a pure function of the offer and the booked-appointment snapshot.
"""

import logging
from datetime import date as date_type, datetime, timedelta
from typing import List, Optional

from models import AvailabilityWindow, TreatmentOffer
from stores import AppointmentStore
from .config import SchedulerSettings, get_settings
from .constraints import collides_with_any

logger = logging.getLogger(__name__)


class AvailabilityCalculator:
    """Computes free slots for an offer on a calendar date."""

    def __init__(self, appointment_store: AppointmentStore, settings: Optional[SchedulerSettings] = None):
        self.appointments = appointment_store
        self.settings = settings or get_settings()

    def compute_free_slots(
        self,
        offer: TreatmentOffer,
        date: date_type,
        not_before: Optional[datetime] = None
    ) -> List[datetime]:
        """
        Ordered bookable start times for `date`.
        `not_before` hides slots that already started (used when `date` is today).
        """
        windows = offer.windows_for(date.weekday())
        if not windows:
            return []

        theoretical = set()
        for window in windows:
            theoretical.update(self.generate_theoretical_slots(date, window, offer.duration_minutes))
        if not theoretical:
            return []

        booked = self.appointments.find_active_by_practitioner_and_date(offer.practitioner_id, date)
        duration = timedelta(minutes=offer.duration_minutes)

        free = [
            slot for slot in sorted(theoretical)
            if not collides_with_any(slot, slot + duration, booked)
        ]

        if not_before is not None:
            free = [slot for slot in free if slot > not_before]

        logger.debug(
            f"Offer {offer.id} on {date.isoformat()}: {len(theoretical)} theoretical, "
            f"{len(booked)} booked, {len(free)} free"
        )
        return free

    def generate_theoretical_slots(
        self,
        date: date_type,
        window: AvailabilityWindow,
        duration_minutes: int
    ) -> List[datetime]:
        """
        Candidate starts every `slot_granularity_minutes` from the window start,
        emitted only while start + duration <= window end (no partial fits).
        """
        step = timedelta(minutes=self.settings.slot_granularity_minutes)
        duration = timedelta(minutes=duration_minutes)
        window_start = datetime.combine(date, window.start_time)
        window_end = datetime.combine(date, window.end_time)

        slots = []
        candidate = window_start
        while candidate + duration <= window_end:
            slots.append(candidate)
            candidate += step
        return slots
