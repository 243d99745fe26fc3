"""
Clinical case data models for the Scheduling Engine.

This module defines the 'Output' of the engine:
a ClinicalCase aggregate owning the Appointments booked for one
(patient, practitioner, treatment) relationship.

Entities only enforce their own state machines. Cross-entity rules
(conflicts, quota, closure preconditions) live in the scheduler package.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime, timedelta

from .exceptions import InvalidState


class CaseStatus(str, Enum):
    """Lifecycle of a clinical case."""
    OPEN = "Open"
    CLOSED = "Closed"
    CANCELLED = "Cancelled"


class AppointmentStatus(str, Enum):
    """Attendance status of one appointment."""
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No_Show"


class Appointment(BaseModel):
    """
    One scheduled occurrence inside a ClinicalCase.
    Never deleted; only transitioned out of SCHEDULED.
    """

    id: Optional[int] = Field(default=None, description="Assigned by the case store")
    case_id: Optional[int] = Field(default=None, description="Owning case (None until the case is saved)")

    # Owner ids are copied from the case so stores can run owner-scoped queries
    patient_id: int
    practitioner_id: int

    appointment_time: datetime = Field(description="Start of the appointment")
    duration_minutes: int = Field(
        gt=0,
        description="Snapshot of the offer duration at booking time"
    )
    motive: str = Field(default="", description="Reason for the visit")
    status: AppointmentStatus = Field(default=AppointmentStatus.SCHEDULED)

    @property
    def end_time(self) -> datetime:
        return self.appointment_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        """Cancelled appointments no longer occupy the calendar."""
        return self.status != AppointmentStatus.CANCELLED

    def _transition(self, target: AppointmentStatus) -> None:
        if self.status != AppointmentStatus.SCHEDULED:
            raise InvalidState(
                f"Appointment {self.id} is {self.status.value}; only Scheduled appointments can become {target.value}"
            )
        self.status = target

    def cancel(self) -> None:
        self._transition(AppointmentStatus.CANCELLED)

    def complete(self) -> None:
        self._transition(AppointmentStatus.COMPLETED)

    def mark_no_show(self) -> None:
        self._transition(AppointmentStatus.NO_SHOW)


class ProgressNote(BaseModel):
    """Clinical progress entry. Stored state only."""
    author_id: int
    content: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)


class ClinicalCase(BaseModel):
    """
    Aggregate root binding one patient, one practitioner and one treatment
    across possibly many appointments.
    """

    # --- Core Identity ---
    id: Optional[int] = Field(default=None, description="Assigned by the case store")
    patient_id: int
    practitioner_id: int
    treatment_id: int

    # --- Lifecycle ---
    status: CaseStatus = Field(default=CaseStatus.OPEN)
    start_date: date = Field(default_factory=date.today)

    # --- Owned Children ---
    appointments: List[Appointment] = Field(default_factory=list)
    progress_notes: List[ProgressNote] = Field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status == CaseStatus.OPEN

    @property
    def is_feedback_eligible(self) -> bool:
        """Feedback opens once the case has been finalized."""
        return self.status == CaseStatus.CLOSED

    def _require_open(self, action: str) -> None:
        if not self.is_open:
            raise InvalidState(f"Cannot {action}: case {self.id} is {self.status.value}")

    def schedule_appointment(self, appointment_time: datetime, motive: str, duration_minutes: int) -> Appointment:
        self._require_open("schedule an appointment")
        appointment = Appointment(
            case_id=self.id,
            patient_id=self.patient_id,
            practitioner_id=self.practitioner_id,
            appointment_time=appointment_time,
            duration_minutes=duration_minutes,
            motive=motive,
        )
        self.appointments.append(appointment)
        return appointment

    def add_progress_note(self, author_id: int, content: str) -> ProgressNote:
        self._require_open("add a progress note")
        note = ProgressNote(author_id=author_id, content=content)
        self.progress_notes.append(note)
        return note

    def close(self) -> None:
        """Closure preconditions are checked by CaseLifecyclePolicy, not here."""
        self._require_open("close the case")
        self.status = CaseStatus.CLOSED

    def cancel(self) -> None:
        self._require_open("cancel the case")
        self.status = CaseStatus.CANCELLED

    def scheduled_appointments(self) -> List[Appointment]:
        return [a for a in self.appointments if a.status == AppointmentStatus.SCHEDULED]

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": 41,
            "patient_id": 5,
            "practitioner_id": 12,
            "treatment_id": 3,
            "status": "Open",
            "start_date": "2026-11-02",
            "appointments": [
                {
                    "id": 90,
                    "case_id": 41,
                    "patient_id": 5,
                    "practitioner_id": 12,
                    "appointment_time": "2026-11-02T09:00:00",
                    "duration_minutes": 60,
                    "motive": "First appointment - start of treatment",
                    "status": "Scheduled"
                }
            ]
        }
    })
