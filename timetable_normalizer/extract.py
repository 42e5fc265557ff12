"""
Field extraction for class/period-like records of unknown shape.

Uploaded timetables name the same thing in many ways ("subject", "course",
"courseName", ...). For every attribute we walk an ordered list of candidate
keys and take the first one that holds a value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from timetable_normalizer.model import DEFAULT_TYPE


NAME_FIELDS = ("subject", "name", "course", "courseName", "subjectName", "title")
TYPE_FIELDS = ("type", "classType", "sessionType")
FACULTY_FIELDS = ("faculty", "teacher", "instructor", "professor")
ROOM_FIELDS = ("room", "location", "venue", "classroom")
CODE_FIELDS = ("code", "courseCode", "subjectCode")
SECTION_FIELDS = ("section", "batch", "group")

TYPE_ALIASES: Dict[str, str] = {
    "L": "Lecture",
    "P": "Practical",
    "T": "Tutorial",
    "Lab": "Practical",
    "Lecture": "Lecture",
    "Practical": "Practical",
    "Tutorial": "Tutorial",
    "L+P": "Both",
    "Both": "Both",
}


@dataclass
class SubjectInfo:
    name: str = ""
    type: str = DEFAULT_TYPE
    faculty: str = ""
    room: str = ""
    code: str = ""
    section: str = ""


def _first_value(record: Dict[str, Any], fields: Sequence[str]) -> Optional[Any]:
    # Falsy values ('' / 0 / None / []) count as absent
    for f in fields:
        value = record.get(f)
        if value:
            return value
    return None


def _first_text(record: Dict[str, Any], fields: Sequence[str]) -> str:
    value = _first_value(record, fields)
    return "" if value is None else str(value).strip()


def map_type(value: Any) -> str:
    """
    Map a raw type value ('L', 'Lab', 'L+P', ...) to a canonical subject type.
    Unknown values fall back to Lecture.
    """
    if not isinstance(value, str):
        return DEFAULT_TYPE
    return TYPE_ALIASES.get(value.strip(), DEFAULT_TYPE)


def extract_subject_info(record: Any) -> SubjectInfo:
    """
    Extract name, type, faculty, room, code and section from one record.

    Only string values are accepted for the name. The first present type
    field decides the type, even when its value is not a known alias.
    """
    info = SubjectInfo()
    if not isinstance(record, dict):
        return info

    for f in NAME_FIELDS:
        value = record.get(f)
        if isinstance(value, str) and value.strip():
            info.name = value.strip()
            break

    raw_type = _first_value(record, TYPE_FIELDS)
    if raw_type is not None:
        info.type = map_type(raw_type)

    info.faculty = _first_text(record, FACULTY_FIELDS)
    info.room = _first_text(record, ROOM_FIELDS)
    info.code = _first_text(record, CODE_FIELDS)
    info.section = _first_text(record, SECTION_FIELDS)

    return info
