"""
Configuration module for the Scheduling Engine.
Loads tunables from environment variables (prefix SCHEDULER_).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    """Engine settings. Passed explicitly into every component that needs them."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", extra="ignore")

    # Slot grid
    slot_granularity_minutes: int = Field(
        default=30,
        gt=0,
        description="Step between candidate start times inside a window"
    )

    # Booking
    default_motive: str = Field(
        default="First appointment - start of treatment",
        description="Motive stored on appointments created by a booking"
    )
    booking_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for a booking that hits a storage conflict"
    )

    # Offer rules
    max_duration_minutes: int = Field(
        default=480,
        gt=0,
        description="Longest appointment an offer may publish (8 hours)"
    )
    duration_step_minutes: int = Field(
        default=5,
        gt=0,
        description="Offer durations must be a multiple of this"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> SchedulerSettings:
    return SchedulerSettings()
