"""
Recurring and duplicated appointment series.

Every produced draft is a fresh ``scheduled`` copy of its source, moved
forward by whole weeks or calendar months and annotated with the date it
was copied from.
"""

import logging
from typing import List, Sequence

from pendulum import Date

from .models import (
    Appointment,
    AppointmentDraft,
    AppointmentStatus,
    DuplicationConflict,
    DuplicationInterval,
    DuplicationOptions,
    DuplicationResult,
    with_changes,
)
from .occupancy import is_slot_occupied
from .time_grid import weekday_index

logger = logging.getLogger(__name__)

NEXT_WEEK = DuplicationOptions(
    interval=DuplicationInterval.WEEK,
    count=1,
    skip_conflicts=True,
)


def duplicated_from_note(notes: str, source_date: Date) -> str:
    """Append the source-date marker to existing notes."""
    return f"{notes} (Duplicated from {source_date.isoformat()})".strip()


def conflict_reason(draft: AppointmentDraft) -> str:
    return f"Time conflict: {draft.date.isoformat()} at {draft.time}"


class SeriesGenerator:
    """
    Generates deterministic follow-up drafts from a source appointment.

    Algorithm (per occurrence i = 1..count):
    1. Add i weeks or i calendar months to the source date
    2. Optionally push a Saturday/Sunday result to the following Monday
    3. Copy the source with the new date, status reset and notes annotated
    """

    def expand(
        self,
        draft: AppointmentDraft,
        options: DuplicationOptions,
    ) -> List[AppointmentDraft]:
        """
        Produce ``options.count`` future copies of ``draft``.

        Args:
            draft: Source appointment or draft
            options: Interval, count and weekend policy

        Returns:
            Drafts in occurrence order
        """
        source_date = draft.date
        notes = duplicated_from_note(draft.notes, source_date)
        duplicates: List[AppointmentDraft] = []

        for occurrence in range(1, options.count + 1):
            new_date = self._shift_date(source_date, options.interval, occurrence)

            if options.skip_weekends:
                new_date = self._skip_weekend(new_date)

            duplicates.append(
                with_changes(
                    draft,
                    date=new_date,
                    status=AppointmentStatus.SCHEDULED,
                    notes=notes,
                )
            )

        logger.debug(
            "Expanded %s draft from %s into %d occurrence(s)",
            options.interval.value,
            source_date,
            len(duplicates),
        )
        return duplicates

    def expand_and_partition(
        self,
        appointments: Sequence[Appointment],
        existing_appointments: Sequence[AppointmentDraft],
    ) -> DuplicationResult:
        """
        Duplicate each appointment to the same weekday next week.

        Duplicates that land on an active booking of the same doctor at the
        same date and time are reported against their source instead.
        """
        result = DuplicationResult()

        for appointment in appointments:
            for duplicate in self.expand(appointment, NEXT_WEEK):
                if is_slot_occupied(
                    duplicate.date,
                    duplicate.time,
                    existing_appointments,
                    doctor_id=duplicate.doctor_id,
                ):
                    result.conflicts.append(
                        DuplicationConflict(appointment=appointment, reason=conflict_reason(duplicate))
                    )
                else:
                    result.successful.append(duplicate)

        return result

    def build_recurring_series(
        self,
        draft: AppointmentDraft,
        options: DuplicationOptions,
    ) -> List[AppointmentDraft]:
        """The original draft followed by its expansion, as one sequence."""
        return [draft, *self.expand(draft, options)]

    @staticmethod
    def _shift_date(source: Date, interval: DuplicationInterval, occurrence: int) -> Date:
        """
        Move ``source`` forward by whole weeks or calendar months.

        Month steps keep the day of month and overflow into the next month
        when it is too short (2024-01-31 + 1 month = 2024-03-02).
        """
        if interval is DuplicationInterval.MONTH:
            first_of_month = source.replace(day=1)
            return first_of_month.add(months=occurrence).add(days=source.day - 1)
        return source.add(weeks=occurrence)

    @staticmethod
    def _skip_weekend(day: Date) -> Date:
        """Push Sunday forward one day and Saturday forward two."""
        weekday = weekday_index(day)
        if weekday == 0:
            return day.add(days=1)
        if weekday == 6:
            return day.add(days=2)
        return day
