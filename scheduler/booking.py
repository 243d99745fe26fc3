"""
Booking Coordinator.

Validates a requested start time against the offer and both parties' calendars,
then creates or extends the patient's open case with a new appointment.
Fail-fast: the first violated rule aborts the booking before anything is mutated.
Persisting the returned case is the caller's job.
"""

import logging
from datetime import date as date_type, datetime
from typing import Optional

from models import (
    BusinessRuleViolation,
    ClinicalCase,
    ResourceNotFound,
    TreatmentOffer,
    ViolationReason,
)
from stores import AppointmentStore, CaseStore, OfferStore
from .config import SchedulerSettings, get_settings
from .constraints import BookingConstraintChecker

logger = logging.getLogger(__name__)


class BookingCoordinator:
    """Domain service behind BookFirstAppointment."""

    def __init__(
        self,
        offer_store: OfferStore,
        appointment_store: AppointmentStore,
        case_store: CaseStore,
        settings: Optional[SchedulerSettings] = None
    ):
        self.offers = offer_store
        self.cases = case_store
        self.checker = BookingConstraintChecker(appointment_store)
        self.settings = settings or get_settings()

    def book_first_appointment(
        self,
        patient_id: int,
        offer_id: int,
        requested_time: datetime,
        today: Optional[date_type] = None
    ) -> ClinicalCase:
        today = today or date_type.today()

        # 1. Resolve offer
        offer = self.offers.find_by_id(offer_id)
        if offer is None:
            raise ResourceNotFound("TreatmentOffer", "id", offer_id)

        # 2-4. Availability, then patient and practitioner calendars
        violation = self.checker.check(offer, patient_id, requested_time)
        if violation:
            logger.warning(
                f"Booking rejected for patient {patient_id} on offer {offer_id} "
                f"at {violation.requested_time.isoformat()}: {violation.reason.value}"
            )
            raise BusinessRuleViolation(violation.reason, violation.message)

        # Finite offer limits
        if not offer.is_within_dates(requested_time.date()):
            raise BusinessRuleViolation(
                ViolationReason.OFFER_EXPIRED,
                f"This offer can only be booked between {offer.offer_start_date.isoformat()} "
                f"and {offer.offer_end_date.isoformat()}."
            )

        # 5. Case resolution
        case = self.cases.find_open_by_patient_practitioner_treatment(
            patient_id, offer.practitioner_id, offer.treatment_id
        )
        if case is None:
            self._check_quota(offer)
            case = ClinicalCase(
                patient_id=patient_id,
                practitioner_id=offer.practitioner_id,
                treatment_id=offer.treatment_id,
                start_date=today,
            )
            logger.info(f"Opening new case for patient {patient_id} with practitioner {offer.practitioner_id}")

        # 6. Append appointment
        case.schedule_appointment(requested_time, self.settings.default_motive, offer.duration_minutes)
        return case

    def _check_quota(self, offer: TreatmentOffer) -> None:
        """Only a new case consumes quota; appending to an open case is always allowed."""
        consumed = self.cases.count_quota_consuming(offer.practitioner_id, offer.treatment_id)
        if not offer.has_capacity(consumed):
            raise BusinessRuleViolation(
                ViolationReason.QUOTA_EXCEEDED,
                f"This offer has reached its limit of {offer.max_completed_cases} cases."
            )
