"""
Shared pytest fixtures for all tests.

Provides an in-memory store, engine settings, a reference Monday
and a published offer (Monday 08:00-12:00, 60 minutes).
"""

from datetime import date, datetime, time

import pytest

from models import AvailabilityWindow, ClinicalCase, TreatmentOffer
from scheduler import SchedulerSettings, SchedulingService
from stores import (
    InMemoryAppointmentStore,
    InMemoryCaseStore,
    InMemoryDatabase,
    InMemoryOfferStore,
)

MONDAY = date(2030, 1, 7)
PRACTITIONER_ID = 12
TREATMENT_ID = 3
PATIENT_ID = 5
OTHER_PATIENT_ID = 6


def at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return datetime.combine(day, time(hour, minute))


def seed_case(case_store, patient_id: int, *starts: datetime, duration_minutes: int = 60,
              practitioner_id: int = PRACTITIONER_ID, treatment_id: int = TREATMENT_ID) -> ClinicalCase:
    """Persist an open case with one scheduled appointment per start time."""
    case = ClinicalCase(patient_id=patient_id, practitioner_id=practitioner_id, treatment_id=treatment_id)
    for start in starts:
        case.schedule_appointment(start, "Control", duration_minutes)
    return case_store.save(case)


@pytest.fixture
def settings() -> SchedulerSettings:
    return SchedulerSettings()


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def offer_store(db) -> InMemoryOfferStore:
    return InMemoryOfferStore(db)


@pytest.fixture
def appointment_store(db) -> InMemoryAppointmentStore:
    return InMemoryAppointmentStore(db)


@pytest.fixture
def case_store(db) -> InMemoryCaseStore:
    return InMemoryCaseStore(db)


@pytest.fixture
def offer(offer_store) -> TreatmentOffer:
    """Published offer: Monday 08:00-12:00, 60 min, 2 cases max."""
    return offer_store.save_offer(TreatmentOffer(
        practitioner_id=PRACTITIONER_ID,
        treatment_id=TREATMENT_ID,
        requirements="",
        duration_minutes=60,
        windows=[AvailabilityWindow(day_of_week=0, start_time=time(8, 0), end_time=time(12, 0))],
        offer_start_date=date(2029, 12, 1),
        offer_end_date=date(2030, 3, 31),
        max_completed_cases=2,
    ))


@pytest.fixture
def service(db, offer_store, appointment_store, case_store, settings) -> SchedulingService:
    return SchedulingService(
        offer_store=offer_store,
        appointment_store=appointment_store,
        case_store=case_store,
        unit_of_work=db,
        settings=settings,
    )
