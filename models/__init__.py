"""
Data models package for the Scheduling Engine.

This package exports the three core pillars of the data architecture:
1. Supply (TreatmentOffer, AvailabilityWindow)
2. Output (ClinicalCase, Appointment, ProgressNote)
3. Errors (ResourceNotFound, BusinessRuleViolation, InvalidState)
"""

from .offer import (
    AvailabilityWindow,
    TreatmentOffer
)

from .case import (
    Appointment,
    AppointmentStatus,
    CaseStatus,
    ClinicalCase,
    ProgressNote
)

from .exceptions import (
    BusinessRuleViolation,
    InvalidState,
    ResourceNotFound,
    SchedulingError,
    StorageConflict,
    ViolationReason
)

__all__ = [
    # --- Supply Models ---
    "AvailabilityWindow",
    "TreatmentOffer",

    # --- Case Models ---
    "Appointment",
    "AppointmentStatus",
    "CaseStatus",
    "ClinicalCase",
    "ProgressNote",

    # --- Errors ---
    "BusinessRuleViolation",
    "InvalidState",
    "ResourceNotFound",
    "SchedulingError",
    "StorageConflict",
    "ViolationReason",
]
