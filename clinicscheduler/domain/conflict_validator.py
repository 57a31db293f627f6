"""
Advisory validation of a proposed appointment.
"""

from datetime import date
from typing import List, Sequence

from .exceptions import InvalidScheduleInputError
from .models import AppointmentDraft, ConflictKind, Doctor, ScheduleConflict
from .occupancy import is_slot_occupied
from .time_grid import time_to_minutes, to_date

OUTSIDE_HOURS_MESSAGE = "Appointment time is outside the doctor's working hours"
OVERLAP_MESSAGE = "Time slot is already taken by another appointment"


class ConflictValidator:
    """
    Reports every constraint a proposed appointment violates.

    The two checks are independent, so zero, one or two conflicts come back.
    An empty list means the proposal is acceptable; blocking is up to the caller.
    """

    def validate(
        self,
        doctor: Doctor,
        day: date | str,
        time: str,
        duration: int,
        existing_appointments: Sequence[AppointmentDraft],
    ) -> List[ScheduleConflict]:
        """
        Check a proposed ``(doctor, day, time, duration)`` booking.

        Raises:
            InvalidScheduleInputError: If time or duration are malformed
        """
        if duration <= 0:
            raise InvalidScheduleInputError(f"Duration must be positive, got {duration}")

        day = to_date(day)
        start = time_to_minutes(time)
        hours = doctor.working_hours
        conflicts: List[ScheduleConflict] = []

        # No wrap-around past midnight
        if start < hours.start_minutes or start + duration > hours.end_minutes:
            conflicts.append(
                ScheduleConflict(kind=ConflictKind.OUTSIDE_HOURS, message=OUTSIDE_HOURS_MESSAGE)
            )

        if is_slot_occupied(day, time, existing_appointments, doctor_id=doctor.id):
            conflicts.append(
                ScheduleConflict(kind=ConflictKind.OVERLAP, message=OVERLAP_MESSAGE)
            )

        return conflicts
