"""
Error taxonomy for the Scheduling Engine.

Every precondition failure in the engine surfaces as one of these types:
1. ResourceNotFound (offer / case / appointment absent)
2. BusinessRuleViolation (a rule of the booking domain was broken)
3. InvalidState (an entity was asked for a transition it cannot make)

StorageConflict is raised by stores, never by the engine itself.
"""

from enum import Enum
from typing import Optional


class ViolationReason(str, Enum):
    """Machine-readable sub-reason carried by a BusinessRuleViolation."""
    OUTSIDE_AVAILABILITY = "Outside_Availability"
    PATIENT_DOUBLE_BOOKED = "Patient_Double_Booked"
    PRACTITIONER_DOUBLE_BOOKED = "Practitioner_Double_Booked"
    OFFER_EXPIRED = "Offer_Expired"
    QUOTA_EXCEEDED = "Quota_Exceeded"
    FUTURE_APPOINTMENTS_PENDING = "Future_Appointments_Pending"
    PAST_APPOINTMENTS_UNMARKED = "Past_Appointments_Unmarked"
    INVALID_OFFER = "Invalid_Offer"
    OFFER_IN_USE = "Offer_In_Use"


class SchedulingError(Exception):
    """Base class for every error raised by the engine."""


class ResourceNotFound(SchedulingError):
    """A referenced resource does not exist. Terminal, never retried."""

    def __init__(self, resource: str, field: str, value):
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field} '{value}' not found")


class BusinessRuleViolation(SchedulingError):
    """
    A business rule rejected the operation.
    The message is human-readable and shown verbatim by the presentation layer.
    """

    def __init__(self, reason: ViolationReason, message: str, field: Optional[str] = None):
        self.reason = reason
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidState(SchedulingError):
    """An entity cannot make the requested state transition."""


class StorageConflict(SchedulingError):
    """
    The backing store refused a write because a concurrent transaction got there first
    (e.g. the unique index on owner + appointment time). The whole operation may be retried.
    """
