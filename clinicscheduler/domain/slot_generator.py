"""
Bookable slot generation and recommendation for a single doctor-day.

Pure domain logic: callers pass in the doctor and the appointments they
already hold, nothing is fetched or stored here.
"""

from datetime import date
from typing import List, Sequence

from .models import AppointmentDraft, Doctor, TimeSlot
from .occupancy import is_slot_occupied
from .time_grid import SLOT_MINUTES, minutes_to_time, time_to_minutes, to_date

SLOT_TAKEN_REASON = "Time slot is already booked"


class SlotGenerator:
    """
    Enumerates a doctor's candidate start times for one date.

    Algorithm:
    1. Return nothing if the date is not one of the doctor's working days
    2. Walk the half-open window [start, end) in fixed steps
    3. Mark each step unavailable if an active appointment starts there
    """

    def __init__(self, slot_minutes: int = SLOT_MINUTES):
        self.slot_minutes = slot_minutes

    def generate_slots(
        self,
        doctor: Doctor,
        day: date | str,
        existing_appointments: Sequence[AppointmentDraft],
    ) -> List[TimeSlot]:
        """
        Build the full list of slots for ``doctor`` on ``day``.

        Args:
            doctor: Doctor whose working hours define the grid
            day: The date to generate slots for
            existing_appointments: Bookings to check occupancy against

        Returns:
            Slots in ascending time order, empty on non-working days
        """
        day = to_date(day)
        hours = doctor.working_hours

        if not hours.is_working_day(day):
            return []

        slots: List[TimeSlot] = []

        for minutes in range(hours.start_minutes, hours.end_minutes, self.slot_minutes):
            clock = minutes_to_time(minutes)
            occupied = is_slot_occupied(day, clock, existing_appointments)
            slots.append(
                TimeSlot(
                    time=clock,
                    available=not occupied,
                    reason=SLOT_TAKEN_REASON if occupied else None,
                )
            )

        return slots


class SlotRecommender:
    """
    Picks a short, balanced list of suggested start times.

    Available slots are split at midday; the earliest few of each half are
    returned morning first. A short half is not topped up from the other.
    """

    def __init__(
        self,
        slot_generator: SlotGenerator | None = None,
        per_period: int = 3,
        midday: str = "12:00",
    ):
        self.slot_generator = slot_generator or SlotGenerator()
        self.per_period = per_period
        self.midday_minutes = time_to_minutes(midday)

    def recommend(
        self,
        doctor: Doctor,
        day: date | str,
        duration: int,
        existing_appointments: Sequence[AppointmentDraft],
    ) -> List[TimeSlot]:
        """
        Suggest up to ``2 * per_period`` available slots.

        ``duration`` is accepted for call-site symmetry with validation but
        does not narrow the suggestions.
        """
        available = [
            slot
            for slot in self.slot_generator.generate_slots(doctor, day, existing_appointments)
            if slot.available
        ]

        morning = [slot for slot in available if time_to_minutes(slot.time) < self.midday_minutes]
        afternoon = [slot for slot in available if time_to_minutes(slot.time) >= self.midday_minutes]

        return morning[: self.per_period] + afternoon[: self.per_period]
