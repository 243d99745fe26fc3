"""
The Scheduling Engine.

Stateless components, each receiving its stores and settings explicitly:
1. AvailabilityCalculator (free slots for an offer on a date)
2. BookingCoordinator (validates a request, creates or extends a case)
3. CaseLifecyclePolicy (gates case closure on outstanding appointments)
4. OfferRules (offer construction / update invariants)
5. SchedulingService (transactional entry points)
"""

from .availability import AvailabilityCalculator
from .booking import BookingCoordinator
from .config import SchedulerSettings, get_settings
from .constraints import BookingConstraintChecker, ConstraintViolation, intervals_overlap
from .lifecycle import CaseLifecyclePolicy
from .offers import OfferRules
from .service import SchedulingService

__all__ = [
    "AvailabilityCalculator",
    "BookingConstraintChecker",
    "BookingCoordinator",
    "CaseLifecyclePolicy",
    "ConstraintViolation",
    "OfferRules",
    "SchedulerSettings",
    "SchedulingService",
    "get_settings",
    "intervals_overlap",
]
