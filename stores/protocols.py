"""
Repository interfaces consumed by the Scheduling Engine.

The engine never talks to a database directly. Persistence layers implement
these protocols; the engine components receive them through their constructors.
"""

from contextlib import AbstractContextManager
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Protocol

from models import Appointment, ClinicalCase, TreatmentOffer


class OwnerKind(str, Enum):
    """Which side of an appointment a calendar query is scoped to."""
    PATIENT = "Patient"
    PRACTITIONER = "Practitioner"


class OfferStore(Protocol):
    def find_by_id(self, offer_id: int) -> Optional[TreatmentOffer]: ...

    def save_offer(self, offer: TreatmentOffer) -> TreatmentOffer: ...

    def has_appointments(self, offer_id: int) -> bool:
        """True when any appointment (active or historical) was booked against the offer."""
        ...


class AppointmentStore(Protocol):
    def find_active_by_owner_and_exact_time(
        self, owner_kind: OwnerKind, owner_id: int, appointment_time: datetime
    ) -> bool: ...

    def find_active_by_owner_and_date(
        self, owner_kind: OwnerKind, owner_id: int, day: date
    ) -> List[Appointment]: ...

    def find_active_by_practitioner_and_date(self, practitioner_id: int, day: date) -> List[Appointment]: ...

    def find_scheduled_by_owner(self, owner_kind: OwnerKind, owner_id: int) -> List[Appointment]: ...

    def has_scheduled_at_or_after(self, case_id: int, now: datetime) -> bool: ...

    def has_scheduled_before(self, case_id: int, now: datetime) -> bool: ...


class CaseStore(Protocol):
    def find_by_id(self, case_id: int) -> Optional[ClinicalCase]: ...

    def find_open_by_patient_practitioner_treatment(
        self, patient_id: int, practitioner_id: int, treatment_id: int
    ) -> Optional[ClinicalCase]: ...

    def find_by_owner(self, owner_kind: OwnerKind, owner_id: int) -> List[ClinicalCase]:
        """Every case of a patient or practitioner, any status, oldest first."""
        ...

    def count_quota_consuming(self, practitioner_id: int, treatment_id: int) -> int:
        """Open + closed cases for the pair. Cancelled cases give their quota back."""
        ...

    def save(self, case: ClinicalCase) -> ClinicalCase: ...


class UnitOfWork(Protocol):
    def transaction(self) -> AbstractContextManager:
        """
        Atomic boundary for one read-decide-write sequence.
        Must roll back every write when the block raises.
        """
        ...
