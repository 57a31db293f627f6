"""
Tests for the SchedulingService orchestration layer.
"""

import asyncio
import json
from pathlib import Path

import pendulum
import pytest

from clinicscheduler.adapters.memory_store import (
    InMemoryAppointmentStore,
    InMemoryDoctorStore,
    load_appointments_json,
    load_doctors_json,
)
from clinicscheduler.domain.exceptions import (
    AppointmentNotFoundError,
    BookingConflictError,
    DoctorNotFoundError,
)
from clinicscheduler.domain.models import AppointmentDraft, ConflictKind, DuplicationOptions
from clinicscheduler.services.scheduling import SchedulingService

MONDAY = pendulum.date(2024, 11, 25)


class YieldingAppointmentStore(InMemoryAppointmentStore):
    """Store that suspends on every call, exposing check-then-insert races."""

    async def list_appointments(self):
        await asyncio.sleep(0)
        return await super().list_appointments()

    async def add_appointment(self, draft):
        await asyncio.sleep(0)
        return await super().add_appointment(draft)


def _draft(day=MONDAY, time="10:00", doctor_id="doc-1") -> AppointmentDraft:
    return AppointmentDraft(patient_id="pat-1", doctor_id=doctor_id, date=day, time=time)


def _build_service(doctor, appointments=(), store_cls=InMemoryAppointmentStore):
    store = store_cls(appointments)
    service = SchedulingService(appointment_store=store, doctor_store=InMemoryDoctorStore([doctor]))
    return service, store


class TestQueries:
    """Slot, validation and availability queries through the stores."""

    def test_available_slots_only_count_the_doctors_bookings(self, doctor, make_appointment):
        """Another doctor's booking at the same time leaves the slot free."""
        service, _ = _build_service(
            doctor,
            [make_appointment(MONDAY, "10:00"), make_appointment(MONDAY, "11:00", doctor_id="doc-2")],
        )

        slots = {slot.time: slot for slot in asyncio.run(service.available_slots("doc-1", MONDAY))}

        assert not slots["10:00"].available
        assert slots["11:00"].available

    def test_recommend_slots(self, doctor):
        service, _ = _build_service(doctor)

        recommended = asyncio.run(service.recommend_slots("doc-1", MONDAY, 30))

        assert [slot.time for slot in recommended] == ["09:00", "09:30", "10:00", "12:00", "12:30", "13:00"]

    def test_validate(self, doctor, make_appointment):
        service, _ = _build_service(doctor, [make_appointment(MONDAY, "16:45")])

        conflicts = asyncio.run(service.validate("doc-1", MONDAY, "16:45", 30))

        assert [conflict.kind for conflict in conflicts] == [ConflictKind.OUTSIDE_HOURS, ConflictKind.OVERLAP]

    def test_next_available_date(self, doctor, make_appointment):
        service, _ = _build_service(doctor, [make_appointment(MONDAY, "10:00")])

        assert asyncio.run(service.next_available_date("doc-1", MONDAY, "10:00")) == MONDAY.add(days=1)

    def test_unknown_doctor_raises(self, doctor):
        service, _ = _build_service(doctor)

        with pytest.raises(DoctorNotFoundError, match="doc-404"):
            asyncio.run(service.available_slots("doc-404", MONDAY))


class TestBooking:
    """Atomic booking."""

    def test_book_assigns_identity(self, doctor):
        service, store = _build_service(doctor)

        appointment = asyncio.run(service.book(_draft()))

        assert appointment.id
        assert appointment.created_at is not None
        assert asyncio.run(store.list_appointments()) == [appointment]

    def test_book_refuses_conflicts(self, doctor, make_appointment):
        service, _ = _build_service(doctor, [make_appointment(MONDAY, "10:00")])

        with pytest.raises(BookingConflictError) as exc_info:
            asyncio.run(service.book(_draft()))

        assert [conflict.kind for conflict in exc_info.value.conflicts] == [ConflictKind.OVERLAP]

    def test_concurrent_bookings_of_one_slot(self, doctor):
        """Exactly one of two concurrent bookings for the same slot succeeds."""
        service, store = _build_service(doctor, store_cls=YieldingAppointmentStore)

        async def book_twice():
            return await asyncio.gather(service.book(_draft()), service.book(_draft()), return_exceptions=True)

        results = asyncio.run(book_twice())

        assert sum(isinstance(result, BookingConflictError) for result in results) == 1
        assert len(asyncio.run(store.list_appointments())) == 1

    def test_slot_locks_released_after_booking(self, doctor, make_appointment):
        """Slot locks are dropped once no booking holds or waits for them."""
        service, _ = _build_service(
            doctor,
            [make_appointment(MONDAY.add(weeks=1), "10:00")],
            store_cls=YieldingAppointmentStore,
        )

        for day in (MONDAY, MONDAY.add(days=1), MONDAY.add(days=2)):
            asyncio.run(service.book(_draft(day=day)))

        with pytest.raises(BookingConflictError):
            asyncio.run(service.book(_draft(day=MONDAY.add(weeks=1))))

        async def book_twice():
            return await asyncio.gather(
                service.book(_draft(time="11:00")),
                service.book(_draft(time="11:00")),
                return_exceptions=True,
            )

        asyncio.run(book_twice())

        assert service._slot_locks == {}
        assert service._slot_holders == {}


class TestSeriesBooking:
    """Recurring series and bulk duplication."""

    def test_book_series_skips_conflicts(self, doctor, make_appointment):
        """With skip_conflicts a taken occurrence is reported and the rest booked."""
        service, _ = _build_service(doctor, [make_appointment(MONDAY.add(weeks=1), "10:00")])
        options = DuplicationOptions(count=2, skip_conflicts=True)

        result = asyncio.run(service.book_series(_draft(), options))

        assert [appointment.date for appointment in result.booked] == [MONDAY, MONDAY.add(weeks=2)]
        assert [skipped.draft.date for skipped in result.skipped] == [MONDAY.add(weeks=1)]

    def test_book_series_raises_without_skip(self, doctor, make_appointment):
        """Without skip_conflicts the first conflict aborts, earlier bookings stay."""
        service, store = _build_service(doctor, [make_appointment(MONDAY.add(weeks=1), "10:00")])

        with pytest.raises(BookingConflictError):
            asyncio.run(service.book_series(_draft(), DuplicationOptions(count=2)))

        booked_dates = sorted(appointment.date for appointment in asyncio.run(store.list_appointments()))
        assert booked_dates == [MONDAY, MONDAY.add(weeks=1)]

    def test_duplicate_to_next_week(self, doctor, make_appointment):
        free = make_appointment(MONDAY, "10:00")
        busy = make_appointment(MONDAY, "11:00")
        blocker = make_appointment(MONDAY.add(weeks=1), "11:00")
        service, store = _build_service(doctor, [free, busy, blocker])

        result = asyncio.run(service.duplicate_to_next_week([free.id, busy.id]))

        assert [(appointment.date, appointment.time) for appointment in result.successful] == [
            (MONDAY.add(weeks=1), "10:00")
        ]
        assert result.successful[0].id
        assert [conflict.appointment.id for conflict in result.conflicts] == [busy.id]
        assert len(asyncio.run(store.list_appointments())) == 4

    def test_duplicate_unknown_appointment_raises(self, doctor):
        service, _ = _build_service(doctor)

        with pytest.raises(AppointmentNotFoundError):
            asyncio.run(service.duplicate_to_next_week(["missing"]))


class TestJsonFixtures:
    """Seeding the in-memory stores from JSON."""

    def test_load_fixture_files(self, tmp_path: Path):
        doctors_path = tmp_path / "doctors.json"
        appointments_path = tmp_path / "appointments.json"
        doctors_path.write_text(
            json.dumps(
                [{"id": "doc-1", "last_name": "Petrova", "working_hours": {"start": "09:00", "end": "13:00", "working_days": [1, 3]}}]
            ),
            encoding="utf-8",
        )
        appointments_path.write_text(
            json.dumps(
                [
                    {
                        "id": "apt-1",
                        "patient_id": "pat-1",
                        "doctor_id": "doc-1",
                        "date": "2024-11-25",
                        "time": "09:30",
                        "status": "scheduled",
                        "created_at": "2024-11-20T08:00:00+00:00",
                    }
                ]
            ),
            encoding="utf-8",
        )

        doctor_store = load_doctors_json(doctors_path)
        appointment_store = load_appointments_json(appointments_path)
        service = SchedulingService(appointment_store=appointment_store, doctor_store=doctor_store)

        slots = asyncio.run(service.available_slots("doc-1", MONDAY))
        appointment = asyncio.run(appointment_store.get_appointment("apt-1"))

        assert [slot.time for slot in slots if not slot.available] == ["09:30"]
        assert len(slots) == 8
        assert appointment.created_at == pendulum.datetime(2024, 11, 20, 8, 0, tz="UTC")

    def test_non_list_fixture_raises(self, tmp_path: Path):
        path = tmp_path / "doctors.json"
        path.write_text("{}", encoding="utf-8")

        with pytest.raises(ValueError, match="JSON list"):
            load_doctors_json(path)
