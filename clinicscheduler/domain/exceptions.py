"""
Domain-specific exception hierarchy for the clinic scheduling engine.

Scheduling outcomes (busy slots, conflicts, skipped duplicates) are returned
as data. Exceptions only signal malformed input or refused service calls.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidScheduleInputError(SchedulingError, ValueError):
    """Raised when a caller supplies malformed scheduling input."""


class DoctorNotFoundError(SchedulingError):
    """Raised when a doctor id cannot be resolved."""

    def __init__(self, doctor_id: str) -> None:
        self.doctor_id = doctor_id
        super().__init__(f"Doctor not found: {doctor_id}")


class AppointmentNotFoundError(SchedulingError):
    """Raised when an appointment id cannot be resolved."""

    def __init__(self, appointment_id: str) -> None:
        self.appointment_id = appointment_id
        super().__init__(f"Appointment not found: {appointment_id}")


class BookingConflictError(SchedulingError):
    """Raised when an appointment cannot be booked because of conflicts."""

    def __init__(self, conflicts) -> None:
        self.conflicts = list(conflicts)
        reasons = "; ".join(conflict.message for conflict in self.conflicts)
        super().__init__(f"Appointment cannot be booked: {reasons}")
