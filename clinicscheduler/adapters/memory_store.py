"""
In-memory stores for doctors and appointments.

Useful for tests and for running the engine without a database. Both stores
can be seeded from JSON fixture files.
"""

import json
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pendulum

from ..domain.models import Appointment, AppointmentDraft, Doctor, WorkingHours


class InMemoryAppointmentStore:
    """
    Appointment store backed by a dict, keyed by appointment id.

    New appointments get a random hex id and a UTC creation timestamp.
    """

    def __init__(self, appointments: Iterable[Appointment] = ()):
        self._appointments: Dict[str, Appointment] = {
            appointment.id: appointment for appointment in appointments
        }

    async def list_appointments(self) -> List[Appointment]:
        return list(self._appointments.values())

    async def get_appointment(self, appointment_id: str) -> Appointment | None:
        return self._appointments.get(appointment_id)

    async def add_appointment(self, draft: AppointmentDraft) -> Appointment:
        appointment = draft.to_appointment(
            appointment_id=uuid.uuid4().hex,
            created_at=pendulum.now("UTC"),
        )
        self._appointments[appointment.id] = appointment
        return appointment


class InMemoryDoctorStore:
    """Doctor store backed by a dict, keyed by doctor id."""

    def __init__(self, doctors: Iterable[Doctor] = ()):
        self._doctors: Dict[str, Doctor] = {doctor.id: doctor for doctor in doctors}

    async def get_doctor(self, doctor_id: str) -> Doctor | None:
        return self._doctors.get(doctor_id)


def doctor_from_dict(data: Dict[str, Any]) -> Doctor:
    """Build a Doctor from a JSON-style mapping."""
    hours = data["working_hours"]
    return Doctor(
        id=data["id"],
        working_hours=WorkingHours(
            start=hours["start"],
            end=hours["end"],
            working_days=frozenset(hours.get("working_days", (1, 2, 3, 4, 5))),
        ),
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        specialization=data.get("specialization", ""),
        consultation_fee=data.get("consultation_fee", 0.0),
    )


def appointment_from_dict(data: Dict[str, Any]) -> Appointment:
    """Build an Appointment from a JSON-style mapping."""
    fields = dict(data)
    created_at = fields.pop("created_at", None)
    if created_at:
        fields["created_at"] = pendulum.parse(created_at)
    return Appointment(**fields)


def _load_json_list(path: Path) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Fixture file must contain a JSON list: {path}")

    return data


def load_doctors_json(path: Path) -> InMemoryDoctorStore:
    """Seed a doctor store from a JSON list of doctor objects."""
    return InMemoryDoctorStore(doctor_from_dict(item) for item in _load_json_list(path))


def load_appointments_json(path: Path) -> InMemoryAppointmentStore:
    """Seed an appointment store from a JSON list of appointment objects."""
    return InMemoryAppointmentStore(appointment_from_dict(item) for item in _load_json_list(path))
