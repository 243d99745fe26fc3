"""
Case Lifecycle Policy.

A case may only be finalized once every appointment has been dealt with:
1. No SCHEDULED appointment in the future (must be attended or cancelled first).
2. No SCHEDULED appointment in the past (attendance must be marked first).
Both are checked, in that order, before the case's own OPEN -> CLOSED transition.
"""

import logging
from datetime import datetime
from typing import Optional

from models import BusinessRuleViolation, ClinicalCase, ViolationReason
from stores import AppointmentStore

logger = logging.getLogger(__name__)


class CaseLifecyclePolicy:

    def __init__(self, appointment_store: AppointmentStore):
        self.appointments = appointment_store

    def finalize_case(self, case: ClinicalCase, now: Optional[datetime] = None) -> ClinicalCase:
        now = now or datetime.now()

        if self._has_future_scheduled(case, now):
            raise BusinessRuleViolation(
                ViolationReason.FUTURE_APPOINTMENTS_PENDING,
                "The case cannot be finalized: there are future appointments still scheduled. "
                "Complete or cancel all pending appointments before finalizing the case."
            )

        if self._has_past_scheduled(case, now):
            raise BusinessRuleViolation(
                ViolationReason.PAST_APPOINTMENTS_UNMARKED,
                "The case cannot be finalized: there are past appointments not yet marked "
                "as completed or no-show. Review the appointment history and record attendance."
            )

        # Raises InvalidState unless the case is OPEN
        case.close()
        logger.info(f"Case {case.id} finalized")
        return case

    def _has_future_scheduled(self, case: ClinicalCase, now: datetime) -> bool:
        if case.id is None:
            return any(a.appointment_time >= now for a in case.scheduled_appointments())
        return self.appointments.has_scheduled_at_or_after(case.id, now)

    def _has_past_scheduled(self, case: ClinicalCase, now: datetime) -> bool:
        if case.id is None:
            return any(a.appointment_time < now for a in case.scheduled_appointments())
        return self.appointments.has_scheduled_before(case.id, now)
