"""
Demo Execution Script for the Scheduling Engine.

Seeds an in-memory store with one offer, then walks through the three
core operations: free slots -> booking -> case finalization.
"""

import logging
from datetime import date, datetime, time, timedelta

from models import AvailabilityWindow, BusinessRuleViolation
from scheduler import OfferRules, SchedulingService, get_settings
from stores import (
    InMemoryAppointmentStore,
    InMemoryCaseStore,
    InMemoryDatabase,
    InMemoryOfferStore,
    OwnerKind,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- DEMO DATA ---
PRACTITIONER_ID = 12
TREATMENT_ID = 3
PATIENT_ID = 5
# -----------------


def next_weekday(start: date, weekday: int) -> date:
    """First date on or after `start` falling on `weekday` (0=Monday)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def main():
    logger.info("Starting Scheduling Engine demo...")

    db = InMemoryDatabase()
    offer_store = InMemoryOfferStore(db)
    service = SchedulingService(
        offer_store=offer_store,
        appointment_store=InMemoryAppointmentStore(db),
        case_store=InMemoryCaseStore(db),
        unit_of_work=db,
        settings=settings,
    )

    # --- PHASE 1: PUBLISH AN OFFER ---
    today = date.today()
    monday = next_weekday(today + timedelta(days=1), 0)

    offer = OfferRules(offer_store, settings).create_offer(
        practitioner_id=PRACTITIONER_ID,
        treatment_id=TREATMENT_ID,
        requirements="No active orthodontic treatment",
        duration_minutes=60,
        windows=[AvailabilityWindow(day_of_week=0, start_time=time(8, 0), end_time=time(12, 0))],
        offer_start_date=today,
        offer_end_date=today + timedelta(days=60),
        max_completed_cases=5,
    )
    offer = offer_store.save_offer(offer)
    logger.info(f"Published offer {offer.id} for practitioner {PRACTITIONER_ID}")

    # --- PHASE 2: BROWSE & BOOK ---
    slots = service.get_free_slots(offer.id, monday)
    print("\nFree slots on", monday.isoformat(), [s.strftime("%H:%M") for s in slots])

    case = service.book_first_appointment(PATIENT_ID, offer.id, datetime.combine(monday, time(9, 0)))
    print(f"Case {case.id}: {case.status.value}, {len(case.appointments)} appointment(s)")

    slots = service.get_free_slots(offer.id, monday)
    print("Free slots after booking", [s.strftime("%H:%M") for s in slots])

    try:
        service.book_first_appointment(PATIENT_ID + 1, offer.id, datetime.combine(monday, time(9, 30)))
    except BusinessRuleViolation as e:
        print(f"Rejected as expected: [{e.reason.value}] {e.message}")

    upcoming = service.get_upcoming_appointments(OwnerKind.PATIENT, PATIENT_ID)
    print(f"Patient {PATIENT_ID} has {len(upcoming)} upcoming appointment(s)")

    # --- PHASE 3: FINALIZE ---
    try:
        service.finalize_case(case.id)
    except BusinessRuleViolation as e:
        print(f"Finalize blocked: [{e.reason.value}]")

    print("\nDemo Complete.")


if __name__ == "__main__":
    main()
