"""
Persistence boundary of the Scheduling Engine.

Exports the repository protocols the engine depends on and the
in-memory implementation used by the demo driver and tests.
"""

from .protocols import (
    AppointmentStore,
    CaseStore,
    OfferStore,
    OwnerKind,
    UnitOfWork
)

from .memory import (
    InMemoryAppointmentStore,
    InMemoryCaseStore,
    InMemoryDatabase,
    InMemoryOfferStore
)

__all__ = [
    # --- Protocols ---
    "AppointmentStore",
    "CaseStore",
    "OfferStore",
    "OwnerKind",
    "UnitOfWork",

    # --- In-Memory Implementation ---
    "InMemoryAppointmentStore",
    "InMemoryCaseStore",
    "InMemoryDatabase",
    "InMemoryOfferStore",
]
