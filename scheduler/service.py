"""
Scheduling Service.

Transactional entry points used by the controller / use-case layer:
- get_free_slots        (read-only, no transaction)
- book_first_appointment (coordinator + save in one transaction, retried on storage conflicts)
- finalize_case          (policy + save in one transaction)
- add_progress_note      (load, append, save in one transaction)
"""

import logging
from datetime import date as date_type, datetime
from typing import List, Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from models import Appointment, ClinicalCase, ProgressNote, ResourceNotFound, StorageConflict
from stores import AppointmentStore, CaseStore, OfferStore, OwnerKind, UnitOfWork
from .availability import AvailabilityCalculator
from .booking import BookingCoordinator
from .config import SchedulerSettings, get_settings
from .lifecycle import CaseLifecyclePolicy

logger = logging.getLogger(__name__)


class SchedulingService:
    """
    Wires the stateless engine components to the stores.
    Holds no state of its own between calls.
    """

    def __init__(
        self,
        offer_store: OfferStore,
        appointment_store: AppointmentStore,
        case_store: CaseStore,
        unit_of_work: UnitOfWork,
        settings: Optional[SchedulerSettings] = None
    ):
        self.settings = settings or get_settings()
        self.offers = offer_store
        self.appointments = appointment_store
        self.cases = case_store
        self.uow = unit_of_work

        # Initialize Helpers
        self.calculator = AvailabilityCalculator(appointment_store, self.settings)
        self.coordinator = BookingCoordinator(offer_store, appointment_store, case_store, self.settings)
        self.policy = CaseLifecyclePolicy(appointment_store)

    def get_free_slots(self, offer_id: int, day: date_type, now: Optional[datetime] = None) -> List[datetime]:
        now = now or datetime.now()
        offer = self.offers.find_by_id(offer_id)
        if offer is None:
            raise ResourceNotFound("TreatmentOffer", "id", offer_id)

        # Expired or sold-out offers publish nothing
        consumed = self.cases.count_quota_consuming(offer.practitioner_id, offer.treatment_id)
        if not offer.is_available(day, consumed):
            logger.debug(f"Offer {offer_id} not available on {day.isoformat()} (consumed={consumed})")
            return []

        not_before = now if day == now.date() else None
        return self.calculator.compute_free_slots(offer, day, not_before=not_before)

    def book_first_appointment(
        self,
        patient_id: int,
        offer_id: int,
        requested_time: datetime,
        today: Optional[date_type] = None
    ) -> ClinicalCase:
        """
        A storage conflict means another booking committed in between,
        so the whole decision is re-run from the offer lookup.
        """
        retryer = Retrying(
            stop=stop_after_attempt(self.settings.booking_retry_attempts),
            retry=retry_if_exception_type(StorageConflict),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(self._book_once, patient_id, offer_id, requested_time, today)

    def _book_once(
        self,
        patient_id: int,
        offer_id: int,
        requested_time: datetime,
        today: Optional[date_type]
    ) -> ClinicalCase:
        with self.uow.transaction():
            case = self.coordinator.book_first_appointment(patient_id, offer_id, requested_time, today=today)
            saved = self.cases.save(case)
        logger.info(
            f"Booked patient {patient_id} on offer {offer_id} at {requested_time.isoformat()} (case {saved.id})"
        )
        return saved

    def finalize_case(self, case_id: int, now: Optional[datetime] = None) -> ClinicalCase:
        with self.uow.transaction():
            case = self.get_case(case_id)
            self.policy.finalize_case(case, now=now)
            return self.cases.save(case)

    def get_case(self, case_id: int) -> ClinicalCase:
        case = self.cases.find_by_id(case_id)
        if case is None:
            raise ResourceNotFound("ClinicalCase", "id", case_id)
        return case

    def get_upcoming_appointments(self, owner_kind: OwnerKind, owner_id: int) -> List[Appointment]:
        """Scheduled appointments of a patient or practitioner, earliest first."""
        return self.appointments.find_scheduled_by_owner(owner_kind, owner_id)

    def get_cases(self, owner_kind: OwnerKind, owner_id: int) -> List[ClinicalCase]:
        return self.cases.find_by_owner(owner_kind, owner_id)

    def add_progress_note(self, case_id: int, author_id: int, content: str) -> ProgressNote:
        with self.uow.transaction():
            case = self.get_case(case_id)
            note = case.add_progress_note(author_id, content)
            self.cases.save(case)
        logger.info(f"Progress note added to case {case_id} by {author_id}")
        return note
