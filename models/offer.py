"""
Offer data models for the Scheduling Engine.

This module defines the 'Supply' side of the engine:
1. AvailabilityWindow (recurring weekday hours during which an offer accepts bookings)
2. TreatmentOffer (a practitioner's time-bounded, quota-limited publication of one treatment)
"""

from typing import List, Optional
from pydantic import BaseModel, Field, model_validator, ConfigDict
from datetime import date, time, datetime


class AvailabilityWindow(BaseModel):
    """A recurring weekday time range when an offer accepts bookings."""
    day_of_week: int = Field(ge=0, le=6, description="0=Monday, 6=Sunday")
    start_time: time = Field(description="Window start")
    end_time: time = Field(description="Window end")

    @model_validator(mode='after')
    def validate_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("End time must be strictly after start time")
        return self

    def contains(self, moment: time) -> bool:
        """Inclusive start, exclusive end."""
        return self.start_time <= moment < self.end_time


class TreatmentOffer(BaseModel):
    """
    A practitioner's published willingness to perform one treatment type.
    Owns its availability windows; references practitioner and treatment by id only.
    """

    # --- Core Identity ---
    id: Optional[int] = Field(default=None, description="Assigned by the offer store")
    practitioner_id: int = Field(description="Owning practitioner")
    treatment_id: int = Field(description="Treatment type being offered")
    requirements: str = Field(default="", description="Free-text requirements for candidate patients")

    # --- Timing ---
    duration_minutes: int = Field(gt=0, description="Length of one appointment")
    windows: List[AvailabilityWindow] = Field(
        default_factory=list,
        description="Recurring weekly availability"
    )

    # --- Finite Offer Limits ---
    offer_start_date: date = Field(description="First day the offer can be booked")
    offer_end_date: date = Field(description="Last day the offer can be booked")
    max_completed_cases: Optional[int] = Field(
        default=None,
        gt=0,
        description="Quota of open + closed cases. None means no cap."
    )

    @model_validator(mode='after')
    def validate_dates(self):
        if self.offer_end_date < self.offer_start_date:
            raise ValueError("Offer End Date cannot be before Start Date")
        return self

    def windows_for(self, weekday: int) -> List[AvailabilityWindow]:
        """Windows published for a weekday (0=Monday), earliest first."""
        return sorted(
            (w for w in self.windows if w.day_of_week == weekday),
            key=lambda w: w.start_time
        )

    def accepts(self, moment: datetime) -> bool:
        """Does the requested start fall inside any published window?"""
        return any(w.contains(moment.time()) for w in self.windows_for(moment.weekday()))

    def is_within_dates(self, day: date) -> bool:
        return self.offer_start_date <= day <= self.offer_end_date

    def has_capacity(self, consumed: int) -> bool:
        """consumed = open + closed cases already counted against this offer."""
        if self.max_completed_cases is None:
            return True
        return consumed < self.max_completed_cases

    def is_available(self, day: date, consumed: int) -> bool:
        """Whichever limit is hit first (dates or quota) makes the offer unavailable."""
        return self.is_within_dates(day) and self.has_capacity(consumed)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": 7,
            "practitioner_id": 12,
            "treatment_id": 3,
            "requirements": "No active orthodontic treatment",
            "duration_minutes": 60,
            "windows": [
                {"day_of_week": 0, "start_time": "08:00:00", "end_time": "12:00:00"}
            ],
            "offer_start_date": "2026-11-02",
            "offer_end_date": "2026-12-18",
            "max_completed_cases": 5
        }
    })
