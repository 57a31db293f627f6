"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .availability import AvailabilityScanner
from .conflict_validator import ConflictValidator
from .grouping import GroupConfig, GroupingEngine, GroupSortBy, GroupStatistics, SortOrder
from .models import (
    Appointment,
    AppointmentDraft,
    AppointmentStatus,
    AppointmentType,
    ConflictKind,
    Doctor,
    DuplicationConflict,
    DuplicationInterval,
    DuplicationOptions,
    DuplicationResult,
    ScheduleConflict,
    TimeSlot,
    WorkingHours,
)
from .series import SeriesGenerator
from .slot_generator import SlotGenerator, SlotRecommender

__all__ = [
    "Appointment",
    "AppointmentDraft",
    "AppointmentStatus",
    "AppointmentType",
    "AvailabilityScanner",
    "ConflictKind",
    "ConflictValidator",
    "Doctor",
    "DuplicationConflict",
    "DuplicationInterval",
    "DuplicationOptions",
    "DuplicationResult",
    "GroupConfig",
    "GroupSortBy",
    "GroupStatistics",
    "GroupingEngine",
    "ScheduleConflict",
    "SeriesGenerator",
    "SlotGenerator",
    "SlotRecommender",
    "SortOrder",
    "TimeSlot",
    "WorkingHours",
]
