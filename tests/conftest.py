"""
Shared fixtures for the scheduling engine tests.
"""

import itertools

import pytest

from clinicscheduler.domain.models import Appointment, AppointmentStatus, Doctor, WorkingHours


@pytest.fixture
def doctor() -> Doctor:
    """A doctor working 09:00-17:00, Monday to Friday."""
    return Doctor(
        id="doc-1",
        first_name="Anna",
        last_name="Petrova",
        specialization="Therapist",
        working_hours=WorkingHours(start="09:00", end="17:00", working_days=frozenset({1, 2, 3, 4, 5})),
    )


@pytest.fixture
def make_appointment():
    """Factory for persisted appointments with sensible defaults."""
    counter = itertools.count(1)

    def _make(
        date,
        time,
        doctor_id="doc-1",
        status=AppointmentStatus.SCHEDULED,
        duration=30,
        **extra,
    ) -> Appointment:
        return Appointment(
            id=f"apt-{next(counter)}",
            patient_id=extra.pop("patient_id", "pat-1"),
            doctor_id=doctor_id,
            date=date,
            time=time,
            duration=duration,
            status=status,
            **extra,
        )

    return _make
