"""
Forward search for the next free date at a fixed clock time.
"""

import logging
from datetime import date
from typing import Sequence

from pendulum import Date

from .models import AppointmentDraft
from .occupancy import is_slot_occupied
from .time_grid import is_weekend, time_to_minutes, to_date

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 30


class AvailabilityScanner:
    """
    Scans calendar days from a start date for the first weekday on which a
    doctor has no active appointment at the requested time.

    Weekends are always skipped. The search gives up after ``horizon_days``
    calendar days (weekend days count towards the horizon).
    """

    def __init__(self, horizon_days: int = DEFAULT_HORIZON_DAYS):
        self.horizon_days = horizon_days

    def next_available(
        self,
        doctor_id: str,
        start_date: date | str,
        time: str,
        existing_appointments: Sequence[AppointmentDraft],
    ) -> Date | None:
        """
        Find the first free date, starting at ``start_date`` inclusive.

        Returns:
            The free date, or None when the horizon is exhausted
        """
        time_to_minutes(time)
        start = to_date(start_date)

        for offset in range(self.horizon_days):
            candidate = start.add(days=offset)

            if is_weekend(candidate):
                continue

            if not is_slot_occupied(candidate, time, existing_appointments, doctor_id=doctor_id):
                return candidate

        logger.debug(
            "No free %s slot for doctor %s within %d days of %s",
            time,
            doctor_id,
            self.horizon_days,
            start,
        )
        return None
