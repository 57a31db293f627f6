"""
Application services for booking appointments against a shared store.

The service fetches doctors and appointments through store protocols and
delegates every scheduling decision to the domain layer. Booking holds a
lock per ``(doctor, date, time)`` key across the occupancy check and the
insert, so two concurrent callers cannot both claim the same slot.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import AsyncIterator, Dict, List, Protocol, Sequence, Tuple

from pendulum import Date

from ..config import EngineConfig
from ..domain.conflict_validator import ConflictValidator
from ..domain.exceptions import AppointmentNotFoundError, BookingConflictError, DoctorNotFoundError
from ..domain.models import (
    Appointment,
    AppointmentDraft,
    Doctor,
    DuplicationConflict,
    DuplicationOptions,
    DuplicationResult,
    ScheduleConflict,
    TimeSlot,
)
from ..domain.series import SeriesGenerator
from ..domain.time_grid import to_date

logger = logging.getLogger(__name__)

SlotKey = Tuple[str, Date, str]


class AppointmentStore(Protocol):
    """Persistence operations the service needs for appointments."""

    async def list_appointments(self) -> List[Appointment]:
        """Return every stored appointment."""

    async def get_appointment(self, appointment_id: str) -> Appointment | None:
        """Return one appointment, or None if unknown."""

    async def add_appointment(self, draft: AppointmentDraft) -> Appointment:
        """Persist a draft, assigning identity and creation time."""


class DoctorStore(Protocol):
    """Lookup operations the service needs for doctors."""

    async def get_doctor(self, doctor_id: str) -> Doctor | None:
        """Return one doctor, or None if unknown."""


@dataclass
class SkippedOccurrence:
    draft: AppointmentDraft
    conflicts: List[ScheduleConflict]


@dataclass
class SeriesBookingResult:
    """Booked appointments and occurrences skipped because of conflicts."""
    booked: List[Appointment] = field(default_factory=list)
    skipped: List[SkippedOccurrence] = field(default_factory=list)


class SchedulingService:
    """
    Orchestrates store access and the scheduling domain components.

    Stores are injected as protocols, so an in-memory adapter and a real
    database backend are interchangeable.
    """

    def __init__(
        self,
        appointment_store: AppointmentStore,
        doctor_store: DoctorStore,
        config: EngineConfig | None = None,
    ) -> None:
        config = config or EngineConfig()
        self._appointment_store = appointment_store
        self._doctor_store = doctor_store
        self._slot_generator = config.build_slot_generator()
        self._recommender = config.build_recommender()
        self._scanner = config.build_scanner()
        self._validator = ConflictValidator()
        self._series = SeriesGenerator()
        self._slot_locks: Dict[SlotKey, asyncio.Lock] = {}
        self._slot_holders: Dict[SlotKey, int] = {}

    async def available_slots(self, doctor_id: str, day: date | str) -> List[TimeSlot]:
        """All slots of a doctor-day, marked against that doctor's bookings."""
        doctor = await self._get_doctor(doctor_id)
        appointments = await self._appointments_for(doctor_id)
        return self._slot_generator.generate_slots(doctor, day, appointments)

    async def recommend_slots(self, doctor_id: str, day: date | str, duration: int) -> List[TimeSlot]:
        """A short list of suggested times, mornings first."""
        doctor = await self._get_doctor(doctor_id)
        appointments = await self._appointments_for(doctor_id)
        return self._recommender.recommend(doctor, day, duration, appointments)

    async def validate(
        self,
        doctor_id: str,
        day: date | str,
        time: str,
        duration: int,
    ) -> List[ScheduleConflict]:
        """Advisory check of a proposed booking."""
        doctor = await self._get_doctor(doctor_id)
        appointments = await self._appointment_store.list_appointments()
        return self._validator.validate(doctor, day, time, duration, appointments)

    async def next_available_date(self, doctor_id: str, start_date: date | str, time: str) -> Date | None:
        """First weekday from ``start_date`` with ``time`` free for the doctor."""
        appointments = await self._appointment_store.list_appointments()
        return self._scanner.next_available(doctor_id, start_date, time, appointments)

    async def book(self, draft: AppointmentDraft) -> Appointment:
        """
        Validate and persist a draft as one atomic step per slot.

        Raises:
            DoctorNotFoundError: If the draft's doctor is unknown
            BookingConflictError: If the slot is taken or outside working hours
        """
        doctor = await self._get_doctor(draft.doctor_id)

        async with self._hold_slot(self._slot_key(draft)):
            return await self._book_locked(doctor, draft)

    async def book_series(
        self,
        draft: AppointmentDraft,
        options: DuplicationOptions,
    ) -> SeriesBookingResult:
        """
        Book the first occurrence plus its repeats.

        With ``options.skip_conflicts`` conflicting occurrences are skipped and
        reported; otherwise the first conflict raises ``BookingConflictError``
        and occurrences booked before it remain booked.
        """
        doctor = await self._get_doctor(draft.doctor_id)
        result = SeriesBookingResult()

        for occurrence in self._series.build_recurring_series(draft, options):
            try:
                async with self._hold_slot(self._slot_key(occurrence)):
                    result.booked.append(await self._book_locked(doctor, occurrence))
            except BookingConflictError as exc:
                if not options.skip_conflicts:
                    raise
                result.skipped.append(SkippedOccurrence(draft=occurrence, conflicts=exc.conflicts))

        logger.info(
            "Series for doctor %s: %d booked, %d skipped",
            draft.doctor_id,
            len(result.booked),
            len(result.skipped),
        )
        return result

    async def duplicate_to_next_week(self, appointment_ids: Sequence[str]) -> DuplicationResult:
        """
        Copy each appointment to the same weekday next week and persist the copies.

        ``successful`` holds the persisted appointments; sources whose copy
        collides are reported in ``conflicts``.

        Raises:
            AppointmentNotFoundError: If any id is unknown
        """
        sources: List[Appointment] = []
        for appointment_id in appointment_ids:
            appointment = await self._appointment_store.get_appointment(appointment_id)
            if appointment is None:
                raise AppointmentNotFoundError(appointment_id)
            sources.append(appointment)

        result = DuplicationResult()

        for source in sources:
            existing = await self._appointment_store.list_appointments()
            partition = self._series.expand_and_partition([source], existing)
            result.conflicts.extend(partition.conflicts)

            for duplicate in partition.successful:
                try:
                    result.successful.append(await self.book(duplicate))
                except BookingConflictError as exc:
                    result.conflicts.append(DuplicationConflict(appointment=source, reason=str(exc)))

        return result

    @asynccontextmanager
    async def _hold_slot(self, key: SlotKey) -> AsyncIterator[None]:
        """
        Hold the lock for one slot key.

        The lock lives only while some caller holds or waits for it; the last
        one out removes it, so the map does not grow with every booking.
        """
        lock = self._slot_locks.get(key)
        if lock is None:
            lock = self._slot_locks[key] = asyncio.Lock()
        self._slot_holders[key] = self._slot_holders.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._slot_holders[key] -= 1
            if not self._slot_holders[key]:
                del self._slot_holders[key]
                del self._slot_locks[key]

    async def _book_locked(self, doctor: Doctor, draft: AppointmentDraft) -> Appointment:
        """Check and insert; the caller must hold the slot lock."""
        existing = await self._appointment_store.list_appointments()
        conflicts = self._validator.validate(doctor, draft.date, draft.time, draft.duration, existing)

        if conflicts:
            logger.warning(
                "Refused booking for doctor %s on %s at %s: %s",
                draft.doctor_id,
                draft.date,
                draft.time,
                ", ".join(conflict.kind.value for conflict in conflicts),
            )
            raise BookingConflictError(conflicts)

        appointment = await self._appointment_store.add_appointment(draft)
        logger.info("Appointment booked: id=%s", appointment.id)
        return appointment

    async def _get_doctor(self, doctor_id: str) -> Doctor:
        doctor = await self._doctor_store.get_doctor(doctor_id)
        if doctor is None:
            raise DoctorNotFoundError(doctor_id)
        return doctor

    async def _appointments_for(self, doctor_id: str) -> List[Appointment]:
        appointments = await self._appointment_store.list_appointments()
        return [appointment for appointment in appointments if appointment.doctor_id == doctor_id]

    @staticmethod
    def _slot_key(draft: AppointmentDraft) -> SlotKey:
        return (draft.doctor_id, to_date(draft.date), draft.time)
