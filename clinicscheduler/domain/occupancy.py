"""
The occupancy rule shared by slot generation, validation, duplication and
the availability scanner.

A slot is occupied when a non-cancelled appointment starts at exactly the
same clock time on the same date. Durations are not compared, so
appointments that overlap without sharing a start time do not collide.
"""

from datetime import date
from typing import Iterable

from .models import AppointmentDraft


def is_slot_occupied(
    day: date,
    time: str,
    appointments: Iterable[AppointmentDraft],
    doctor_id: str | None = None,
) -> bool:
    """
    Check whether any active appointment claims ``(day, time)``.

    Args:
        day: Calendar date of the slot
        time: Start time of the slot as an ``HH:MM`` string
        appointments: Appointments to check against
        doctor_id: When given, only this doctor's appointments count

    Returns:
        True if the slot is taken
    """
    return any(
        appointment.date == day
        and appointment.time == time
        and appointment.is_active
        and (doctor_id is None or appointment.doctor_id == doctor_id)
        for appointment in appointments
    )
