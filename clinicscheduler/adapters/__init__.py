"""
Adapters layer - Store implementations.
"""

from .memory_store import (
    InMemoryAppointmentStore,
    InMemoryDoctorStore,
    load_appointments_json,
    load_doctors_json,
)

__all__ = [
    "InMemoryAppointmentStore",
    "InMemoryDoctorStore",
    "load_appointments_json",
    "load_doctors_json",
]
