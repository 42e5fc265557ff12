"""
Central data model definitions used across the project.

This module defines the canonical structure of a timetable so that:
- all format detectors produce the same field names
- the validator and the CLI agree on what a "normalized" timetable is
- the JSON shape on the wire (camelCase keys) is produced in one place
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

SUBJECT_TYPES = ("Lecture", "Practical", "Tutorial", "Both")

DEFAULT_TYPE = "Lecture"
DEFAULT_SECTION = "All"


def subject_code(name: str) -> str:
    """
    Derive a subject code from its name: uppercase, whitespace runs -> '_'.
    """
    return "_".join(name.upper().split())


@dataclass
class Subject:
    """
    Represents one subject of the timetable.

    Uniqueness inside a timetable is (name, type), see `key`.
    """

    name: str
    code: str
    type: str = DEFAULT_TYPE
    color: str = ""
    teacher: str = ""
    room: str = ""

    @property
    def key(self) -> str:
        return f"{self.name}_{self.type}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "code": self.code,
            "type": self.type,
            "color": self.color,
            "teacher": self.teacher,
            "room": self.room,
        }


@dataclass
class Period:
    """
    Represents one class slot of a day.

    `subject` refers to Subject.name. Detectors do not check that the
    reference exists, the validator does.
    """

    subject: str
    start_time: str
    end_time: str = ""
    room: str = ""
    type: str = DEFAULT_TYPE
    section: str = DEFAULT_SECTION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "room": self.room,
            "type": self.type,
            "section": self.section,
        }


@dataclass
class DaySchedule:
    day: str
    periods: List[Period] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "periods": [p.to_dict() for p in self.periods]}


@dataclass
class Timetable:
    """
    The canonical timetable every input format is normalized into.
    """

    name: str
    semester: str
    academic_year: str
    subjects: List[Subject] = field(default_factory=list)
    schedule: List[DaySchedule] = field(default_factory=list)

    def period_count(self) -> int:
        return sum(len(d.periods) for d in self.schedule)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "semester": self.semester,
            "academicYear": self.academic_year,
            "subjects": [s.to_dict() for s in self.subjects],
            "schedule": [d.to_dict() for d in self.schedule],
        }
