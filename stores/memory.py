"""
In-memory reference implementation of the repository protocols.

Used by the demo driver and the test-suite. It behaves like a small database:
- Reads hand out deep copies, so callers only change stored state through save().
- transaction() serialises writers and restores a snapshot if the block raises.
- read() takes the same lock, so a reader never walks a table mid-write.
- save() enforces the uniqueness device of the booking model: no two
  non-cancelled appointments for the same (practitioner, time) or (patient, time).
"""

import copy
import logging
import threading
from contextlib import contextmanager
from datetime import date, datetime
from itertools import count
from typing import Dict, Iterator, List, Optional

from models import (
    Appointment,
    AppointmentStatus,
    CaseStatus,
    ClinicalCase,
    StorageConflict,
    TreatmentOffer,
)
from .protocols import OwnerKind

logger = logging.getLogger(__name__)


class InMemoryDatabase:
    """Shared tables plus the transaction machinery."""

    def __init__(self):
        self.offers: Dict[int, TreatmentOffer] = {}
        self.cases: Dict[int, ClinicalCase] = {}
        self._offer_ids = count(1)
        self._case_ids = count(1)
        self._appointment_ids = count(1)

        self._lock = threading.RLock()
        self._depth = 0

    def next_offer_id(self) -> int:
        return next(self._offer_ids)

    def next_case_id(self) -> int:
        return next(self._case_ids)

    def next_appointment_id(self) -> int:
        return next(self._appointment_ids)

    @contextmanager
    def transaction(self) -> Iterator["InMemoryDatabase"]:
        """Serializable: one transaction at a time. Nested blocks join the outer one."""
        with self._lock:
            outermost = self._depth == 0
            snapshot = copy.deepcopy((self.offers, self.cases)) if outermost else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if outermost:
                    self.offers, self.cases = snapshot
                    logger.debug("Transaction rolled back")
                raise
            finally:
                self._depth -= 1

    @contextmanager
    def read(self) -> Iterator["InMemoryDatabase"]:
        with self._lock:
            yield self

    def iter_appointments(self) -> Iterator[Appointment]:
        """Callers must hold read() or transaction() while consuming this."""
        for case in self.cases.values():
            yield from case.appointments


class InMemoryOfferStore:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    def find_by_id(self, offer_id: int) -> Optional[TreatmentOffer]:
        with self.db.read():
            offer = self.db.offers.get(offer_id)
            return offer.model_copy(deep=True) if offer else None

    def save_offer(self, offer: TreatmentOffer) -> TreatmentOffer:
        with self.db.transaction():
            if offer.id is None:
                offer.id = self.db.next_offer_id()
            self.db.offers[offer.id] = offer.model_copy(deep=True)
        return offer

    def has_appointments(self, offer_id: int) -> bool:
        with self.db.read():
            offer = self.db.offers.get(offer_id)
            if not offer:
                return False
            return any(
                case.appointments
                for case in self.db.cases.values()
                if case.practitioner_id == offer.practitioner_id and case.treatment_id == offer.treatment_id
            )


class InMemoryAppointmentStore:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @staticmethod
    def _owner_id(appointment: Appointment, owner_kind: OwnerKind) -> int:
        if owner_kind == OwnerKind.PATIENT:
            return appointment.patient_id
        return appointment.practitioner_id

    def find_active_by_owner_and_exact_time(
        self, owner_kind: OwnerKind, owner_id: int, appointment_time: datetime
    ) -> bool:
        with self.db.read():
            return any(
                a.is_active and self._owner_id(a, owner_kind) == owner_id and a.appointment_time == appointment_time
                for a in self.db.iter_appointments()
            )

    def find_active_by_owner_and_date(self, owner_kind: OwnerKind, owner_id: int, day: date) -> List[Appointment]:
        with self.db.read():
            found = [
                a.model_copy(deep=True)
                for a in self.db.iter_appointments()
                if a.is_active and self._owner_id(a, owner_kind) == owner_id and a.appointment_time.date() == day
            ]
        found.sort(key=lambda a: a.appointment_time)
        return found

    def find_active_by_practitioner_and_date(self, practitioner_id: int, day: date) -> List[Appointment]:
        return self.find_active_by_owner_and_date(OwnerKind.PRACTITIONER, practitioner_id, day)

    def find_scheduled_by_owner(self, owner_kind: OwnerKind, owner_id: int) -> List[Appointment]:
        with self.db.read():
            found = [
                a.model_copy(deep=True)
                for a in self.db.iter_appointments()
                if a.status == AppointmentStatus.SCHEDULED and self._owner_id(a, owner_kind) == owner_id
            ]
        found.sort(key=lambda a: a.appointment_time)
        return found

    def _scheduled_for_case(self, case_id: int) -> List[Appointment]:
        with self.db.read():
            case = self.db.cases.get(case_id)
            if not case:
                return []
            return case.scheduled_appointments()

    def has_scheduled_at_or_after(self, case_id: int, now: datetime) -> bool:
        return any(a.appointment_time >= now for a in self._scheduled_for_case(case_id))

    def has_scheduled_before(self, case_id: int, now: datetime) -> bool:
        return any(a.appointment_time < now for a in self._scheduled_for_case(case_id))


class InMemoryCaseStore:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    def find_by_id(self, case_id: int) -> Optional[ClinicalCase]:
        with self.db.read():
            case = self.db.cases.get(case_id)
            return case.model_copy(deep=True) if case else None

    def find_open_by_patient_practitioner_treatment(
        self, patient_id: int, practitioner_id: int, treatment_id: int
    ) -> Optional[ClinicalCase]:
        with self.db.read():
            for case in self.db.cases.values():
                if (case.status == CaseStatus.OPEN
                        and case.patient_id == patient_id
                        and case.practitioner_id == practitioner_id
                        and case.treatment_id == treatment_id):
                    return case.model_copy(deep=True)
        return None

    def find_by_owner(self, owner_kind: OwnerKind, owner_id: int) -> List[ClinicalCase]:
        with self.db.read():
            found = [
                case.model_copy(deep=True)
                for case in self.db.cases.values()
                if (case.patient_id if owner_kind == OwnerKind.PATIENT else case.practitioner_id) == owner_id
            ]
        found.sort(key=lambda c: c.id)
        return found

    def count_quota_consuming(self, practitioner_id: int, treatment_id: int) -> int:
        with self.db.read():
            return sum(
                1 for case in self.db.cases.values()
                if case.practitioner_id == practitioner_id
                and case.treatment_id == treatment_id
                and case.status in (CaseStatus.OPEN, CaseStatus.CLOSED)
            )

    def _check_unique_times(self, case: ClinicalCase) -> None:
        """Unique index on (owner, appointment_time) over non-cancelled appointments."""
        taken_by_practitioner = set()
        taken_by_patient = set()
        for other in self.db.cases.values():
            if other.id == case.id:
                continue
            for a in other.appointments:
                if a.is_active:
                    taken_by_practitioner.add((a.practitioner_id, a.appointment_time))
                    taken_by_patient.add((a.patient_id, a.appointment_time))

        for a in case.appointments:
            if not a.is_active:
                continue
            practitioner_key = (a.practitioner_id, a.appointment_time)
            patient_key = (a.patient_id, a.appointment_time)
            if practitioner_key in taken_by_practitioner or patient_key in taken_by_patient:
                raise StorageConflict(
                    f"Appointment at {a.appointment_time.isoformat()} collides with a committed booking"
                )
            taken_by_practitioner.add(practitioner_key)
            taken_by_patient.add(patient_key)

    def save(self, case: ClinicalCase) -> ClinicalCase:
        with self.db.transaction():
            self._check_unique_times(case)

            if case.id is None:
                case.id = self.db.next_case_id()
            for appointment in case.appointments:
                appointment.case_id = case.id
                if appointment.id is None:
                    appointment.id = self.db.next_appointment_id()

            self.db.cases[case.id] = case.model_copy(deep=True)
        return case
