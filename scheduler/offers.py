"""
Treatment offer construction and update rules.

Each rule is an independent precondition, evaluated in a fixed order; the first
failure wins and raises BusinessRuleViolation naming the offending field.
Nothing is built or mutated until every rule has passed.
"""

import logging
from datetime import date
from typing import List, Optional

from models import (
    AvailabilityWindow,
    BusinessRuleViolation,
    TreatmentOffer,
    ViolationReason,
)
from stores import OfferStore
from .config import SchedulerSettings, get_settings

logger = logging.getLogger(__name__)


def _invalid(field: str, message: str) -> BusinessRuleViolation:
    return BusinessRuleViolation(ViolationReason.INVALID_OFFER, message, field=field)


class OfferRules:
    """Validates and applies offer creation / full-replacement updates."""

    def __init__(self, offer_store: OfferStore, settings: Optional[SchedulerSettings] = None):
        self.offers = offer_store
        self.settings = settings or get_settings()

    def validate(
        self,
        duration_minutes: Optional[int],
        windows: Optional[List[AvailabilityWindow]],
        offer_start_date: Optional[date],
        offer_end_date: Optional[date],
        max_completed_cases: Optional[int],
        today: Optional[date] = None
    ) -> None:
        today = today or date.today()

        # 1. Required fields
        if offer_start_date is None:
            raise _invalid("offer_start_date", "The offer start date is required.")
        if offer_end_date is None:
            raise _invalid("offer_end_date", "The offer end date is required.")
        if max_completed_cases is None:
            raise _invalid("max_completed_cases", "The maximum number of cases is required.")

        # 2. Date range
        if offer_end_date < offer_start_date:
            raise _invalid("offer_end_date", "The offer end date cannot be before its start date.")
        if offer_start_date < today:
            raise _invalid("offer_start_date", "The offer start date cannot be in the past.")

        # 3. Quota
        if max_completed_cases <= 0:
            raise _invalid("max_completed_cases", "The maximum number of cases must be greater than 0.")

        # 4. Duration
        self._validate_duration(duration_minutes)

        # 5. Availability windows
        if not windows:
            raise _invalid("windows", "At least one availability window is required.")

    def _validate_duration(self, duration_minutes: Optional[int]) -> None:
        if duration_minutes is None or duration_minutes <= 0:
            raise _invalid("duration_minutes", "The treatment duration must be greater than 0 minutes.")
        if duration_minutes > self.settings.max_duration_minutes:
            raise _invalid(
                "duration_minutes",
                f"The treatment duration cannot exceed {self.settings.max_duration_minutes} minutes."
            )
        if duration_minutes % self.settings.duration_step_minutes != 0:
            raise _invalid(
                "duration_minutes",
                f"The treatment duration must be a multiple of {self.settings.duration_step_minutes} minutes."
            )

    def create_offer(
        self,
        practitioner_id: int,
        treatment_id: int,
        requirements: str,
        duration_minutes: int,
        windows: List[AvailabilityWindow],
        offer_start_date: date,
        offer_end_date: date,
        max_completed_cases: int,
        today: Optional[date] = None
    ) -> TreatmentOffer:
        self.validate(duration_minutes, windows, offer_start_date, offer_end_date, max_completed_cases, today)
        return TreatmentOffer(
            practitioner_id=practitioner_id,
            treatment_id=treatment_id,
            requirements=requirements or "",
            duration_minutes=duration_minutes,
            windows=list(windows),
            offer_start_date=offer_start_date,
            offer_end_date=offer_end_date,
            max_completed_cases=max_completed_cases,
        )

    def update_offer(
        self,
        offer: TreatmentOffer,
        requirements: str,
        duration_minutes: int,
        windows: List[AvailabilityWindow],
        offer_start_date: date,
        offer_end_date: date,
        max_completed_cases: int,
        today: Optional[date] = None
    ) -> TreatmentOffer:
        """Full replacement of every mutable field."""
        self.validate(duration_minutes, windows, offer_start_date, offer_end_date, max_completed_cases, today)
        offer.requirements = requirements or ""
        offer.duration_minutes = duration_minutes
        offer.windows = list(windows)
        offer.offer_start_date = offer_start_date
        offer.offer_end_date = offer_end_date
        offer.max_completed_cases = max_completed_cases
        logger.info(f"Offer {offer.id} updated")
        return offer

    def validate_can_delete(self, offer_id: int) -> None:
        """Offers with booking history stay, to keep clinical records intact."""
        if self.offers.has_appointments(offer_id):
            raise BusinessRuleViolation(
                ViolationReason.OFFER_IN_USE,
                "The offer cannot be deleted because appointments were booked against it."
            )
