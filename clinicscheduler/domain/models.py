"""
Domain models for doctors, appointments and the scheduling views built on them.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import FrozenSet, List

from pendulum import Date, DateTime

from .exceptions import InvalidScheduleInputError
from .time_grid import time_to_minutes, to_date, weekday_index


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class AppointmentType(str, Enum):
    CONSULTATION = "consultation"
    FOLLOW_UP = "follow-up"
    PROCEDURE = "procedure"
    EMERGENCY = "emergency"


@dataclass(frozen=True)
class WorkingHours:
    """
    A doctor's daily working window and working weekdays.

    Invariant: start must be before end.
    Weekdays use 0=Sunday through 6=Saturday.
    """
    start: str
    end: str
    working_days: FrozenSet[int] = frozenset({1, 2, 3, 4, 5})

    def __post_init__(self):
        days = frozenset(self.working_days)
        invalid_days = sorted(day for day in days if day not in range(7))
        if invalid_days:
            raise InvalidScheduleInputError(
                f"working_days must be between 0 and 6, got {invalid_days}"
            )
        object.__setattr__(self, "working_days", days)

        if self.start_minutes >= self.end_minutes:
            raise InvalidScheduleInputError(
                f"Start time {self.start} must be before end time {self.end}"
            )

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)

    def is_working_day(self, day: date) -> bool:
        """Check if a given date falls on one of the working weekdays."""
        return weekday_index(day) in self.working_days


@dataclass(frozen=True)
class Doctor:
    """A doctor as seen by the scheduler; only id and hours matter here."""
    id: str
    working_hours: WorkingHours
    first_name: str = ""
    last_name: str = ""
    specialization: str = ""
    consultation_fee: float = 0.0


@dataclass(frozen=True)
class AppointmentDraft:
    """
    An appointment without identity or creation metadata.

    Drafts are what the engine produces; the host application assigns an id
    and creation timestamp when it persists them.
    """
    patient_id: str
    doctor_id: str
    date: Date
    time: str
    duration: int = 30
    type: AppointmentType = AppointmentType.CONSULTATION
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str = ""
    symptoms: str = ""
    diagnosis: str | None = None
    prescription: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "date", to_date(self.date))
        object.__setattr__(self, "status", AppointmentStatus(self.status))
        object.__setattr__(self, "type", AppointmentType(self.type))
        # Validates the clock format; the string itself is kept verbatim.
        time_to_minutes(self.time)
        if self.duration <= 0:
            raise InvalidScheduleInputError(
                f"Duration must be positive, got {self.duration}"
            )

    @property
    def is_active(self) -> bool:
        """Whether the appointment still occupies its slot."""
        return self.status != AppointmentStatus.CANCELLED

    def to_appointment(self, appointment_id: str, created_at: DateTime | None = None) -> "Appointment":
        """Attach identity and creation metadata to this draft."""
        return Appointment(
            **{name: getattr(self, name) for name in _DRAFT_FIELDS},
            id=appointment_id,
            created_at=created_at,
        )


@dataclass(frozen=True)
class Appointment(AppointmentDraft):
    """A persisted appointment."""
    id: str = ""
    created_at: DateTime | None = None

    def to_draft(self) -> AppointmentDraft:
        """Strip identity and creation metadata."""
        return AppointmentDraft(**{name: getattr(self, name) for name in _DRAFT_FIELDS})


_DRAFT_FIELDS = (
    "patient_id",
    "doctor_id",
    "date",
    "time",
    "duration",
    "type",
    "status",
    "notes",
    "symptoms",
    "diagnosis",
    "prescription",
)


@dataclass(frozen=True)
class TimeSlot:
    """
    A candidate start time on the 30-minute grid.

    Unavailable slots carry a human-readable reason.
    """
    time: str
    available: bool
    reason: str | None = None


class ConflictKind(str, Enum):
    OUTSIDE_HOURS = "outside-hours"
    OVERLAP = "overlap"


@dataclass(frozen=True)
class ScheduleConflict:
    """A structured reason a proposed appointment cannot be accepted."""
    kind: ConflictKind
    message: str


class DuplicationInterval(str, Enum):
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class DuplicationOptions:
    """
    Policy for generating a series of follow-up drafts.

    Invariant: count must be positive.
    """
    interval: DuplicationInterval = DuplicationInterval.WEEK
    count: int = 1
    skip_weekends: bool = False
    skip_conflicts: bool = False

    def __post_init__(self):
        try:
            interval = DuplicationInterval(self.interval)
        except ValueError as exc:
            raise InvalidScheduleInputError(
                f"interval must be 'week' or 'month', got {self.interval!r}"
            ) from exc
        object.__setattr__(self, "interval", interval)
        if self.count <= 0:
            raise InvalidScheduleInputError(
                f"count must be greater than zero, got {self.count}"
            )


@dataclass(frozen=True)
class DuplicationConflict:
    """A source appointment whose duplicate collided with an existing booking."""
    appointment: Appointment
    reason: str


@dataclass
class DuplicationResult:
    """Accepted drafts and rejected sources of a bulk duplication."""
    successful: List[AppointmentDraft] = field(default_factory=list)
    conflicts: List[DuplicationConflict] = field(default_factory=list)


def with_changes(draft: AppointmentDraft, **changes) -> AppointmentDraft:
    """Copy a draft with some fields replaced, always yielding a plain draft."""
    if isinstance(draft, Appointment):
        draft = draft.to_draft()
    return replace(draft, **changes)
