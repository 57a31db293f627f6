"""
Service layer helpers that orchestrate stores and domain logic.
"""

from .scheduling import (
    AppointmentStore,
    DoctorStore,
    SchedulingService,
    SeriesBookingResult,
    SkippedOccurrence,
)

__all__ = [
    "AppointmentStore",
    "DoctorStore",
    "SchedulingService",
    "SeriesBookingResult",
    "SkippedOccurrence",
]
