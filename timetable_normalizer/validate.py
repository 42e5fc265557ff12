"""
Structural validation of canonical timetables.

validate_timetable() checks a {subjects, schedule} payload and returns a
ValidationResult. It never raises and never stops at the first problem:
every violation is collected so a user can fix them all in one go.

Sanitize policy:
- `sanitized` is only filled when there are no errors
- allow_partial=True returns a copy restricted to the valid parts instead
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from timetable_normalizer.model import DAYS, DEFAULT_SECTION, DEFAULT_TYPE, SUBJECT_TYPES
from timetable_normalizer.times import is_valid_time, time_to_minutes


COLOR_RE = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
DEFAULT_COLOR = "#3B82F6"
DEFAULT_TIMETABLE_NAME = "My Timetable"


class ErrorKind(enum.Enum):
    INVALID_STRUCTURE = "invalid_structure"
    MISSING_FIELD = "missing_field"
    INVALID_ENUM = "invalid_enum"
    INVALID_COLOR = "invalid_color"
    INVALID_TIME_FORMAT = "invalid_time_format"
    TIME_ORDER_VIOLATION = "time_order_violation"
    DANGLING_REFERENCE = "dangling_reference"


@dataclass
class ValidationIssue:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationResult:
    issues: List[ValidationIssue] = field(default_factory=list)
    sanitized: Optional[Dict[str, Any]] = None

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": self.errors, "sanitized": self.sanitized}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _present(value: Any) -> bool:
    # Empty containers still count as "present"
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _clean(value: Any, default: str = "") -> str:
    return value.strip() if isinstance(value, str) else default


def _subjects_of(data: Dict[str, Any]) -> Any:
    subjects = data.get("subjects")
    return subjects if _present(subjects) else data.get("subject")


# ---------------------------------------------------------------------------
# Per-item checks
# ---------------------------------------------------------------------------


def _check_subject(subject: Any, index: int) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    s = subject if isinstance(subject, dict) else {}

    if not _non_empty_str(s.get("name")):
        issues.append(
            ValidationIssue(
                ErrorKind.MISSING_FIELD,
                f"Subject at index {index}: name is required and must be a non-empty string",
            )
        )

    if _present(s.get("type")) and s.get("type") not in SUBJECT_TYPES:
        issues.append(
            ValidationIssue(
                ErrorKind.INVALID_ENUM,
                f"Subject at index {index}: type must be one of {', '.join(SUBJECT_TYPES)}",
            )
        )

    color = s.get("color")
    if _present(color) and not (isinstance(color, str) and COLOR_RE.match(color)):
        issues.append(
            ValidationIssue(
                ErrorKind.INVALID_COLOR,
                f"Subject at index {index}: color must be a valid hex color (e.g., #3B82F6)",
            )
        )

    return issues


def _check_period(period: Any, day: Any, index: int) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    p = period if isinstance(period, dict) else {}
    label = f"{day} - Period {index + 1}"

    if not _non_empty_str(p.get("subject")):
        issues.append(
            ValidationIssue(
                ErrorKind.MISSING_FIELD,
                f"{label}: subject is required and must be a non-empty string",
            )
        )

    start = p.get("startTime")
    end = p.get("endTime")

    if not is_valid_time(start):
        issues.append(
            ValidationIssue(
                ErrorKind.INVALID_TIME_FORMAT,
                f"{label}: startTime must be in HH:MM format (e.g., 09:30)",
            )
        )

    if not is_valid_time(end):
        issues.append(
            ValidationIssue(
                ErrorKind.INVALID_TIME_FORMAT,
                f"{label}: endTime must be in HH:MM format (e.g., 10:30)",
            )
        )

    if is_valid_time(start) and is_valid_time(end) and time_to_minutes(end) <= time_to_minutes(start):
        issues.append(ValidationIssue(ErrorKind.TIME_ORDER_VIOLATION, f"{label}: endTime must be after startTime"))

    return issues


def _check_day(day_schedule: Any, index: int) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    d = day_schedule if isinstance(day_schedule, dict) else {}
    day = d.get("day")

    if day not in DAYS:
        issues.append(
            ValidationIssue(
                ErrorKind.INVALID_ENUM,
                f"Schedule at index {index}: day must be one of {', '.join(DAYS)}",
            )
        )

    periods = d.get("periods")
    if not isinstance(periods, list):
        issues.append(
            ValidationIssue(ErrorKind.INVALID_STRUCTURE, f"Schedule at index {index}: periods must be an array")
        )
        return issues

    for i, period in enumerate(periods):
        issues.extend(_check_period(period, day, i))

    return issues


def _check_references(subjects: List[Any], schedule: List[Any]) -> List[ValidationIssue]:
    """
    Every period must name a subject from the subjects list (exact match).
    One issue per offending period, duplicates are not merged.
    """
    issues: List[ValidationIssue] = []
    names: Set[str] = {s["name"] for s in subjects if isinstance(s, dict) and isinstance(s.get("name"), str)}

    for d in schedule:
        if not isinstance(d, dict) or not isinstance(d.get("periods"), list):
            continue
        for i, period in enumerate(d["periods"]):
            if not isinstance(period, dict):
                continue
            subject = period.get("subject")
            if _present(subject) and not (isinstance(subject, str) and subject in names):
                issues.append(
                    ValidationIssue(
                        ErrorKind.DANGLING_REFERENCE,
                        f'{d.get("day")} - Period {i + 1}: subject "{subject}" not found in subjects list',
                    )
                )

    return issues


# ---------------------------------------------------------------------------
# Sanitizing
# ---------------------------------------------------------------------------


def _sanitize_subject(s: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": s["name"].strip(),
        "code": _clean(s.get("code")),
        "type": s.get("type") or DEFAULT_TYPE,
        "color": s.get("color") or DEFAULT_COLOR,
        "teacher": _clean(s.get("teacher")),
        "room": _clean(s.get("room")),
    }


def _sanitize_period(p: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "subject": p["subject"].strip(),
        "startTime": p["startTime"],
        "endTime": p["endTime"],
        "room": _clean(p.get("room")),
        "type": _clean(p.get("type")) or DEFAULT_TYPE,
        "section": _clean(p.get("section")) or DEFAULT_SECTION,
    }


def _sanitize(data: Dict[str, Any], subjects: Any, partial: bool) -> Dict[str, Any]:
    subject_list = subjects if isinstance(subjects, list) else []
    raw_schedule = data.get("schedule")
    schedule_list = raw_schedule if isinstance(raw_schedule, list) else []

    kept_subjects = [
        _sanitize_subject(s) for i, s in enumerate(subject_list) if not partial or not _check_subject(s, i)
    ]
    names = {s["name"] for s in kept_subjects}

    schedule: List[Dict[str, Any]] = []
    for d in schedule_list:
        if partial and (not isinstance(d, dict) or d.get("day") not in DAYS or not isinstance(d.get("periods"), list)):
            continue
        periods = []
        for i, p in enumerate(d.get("periods") or []):
            if partial and (_check_period(p, d["day"], i) or p["subject"].strip() not in names):
                continue
            periods.append(_sanitize_period(p))
        if partial and not periods:
            continue
        schedule.append({"day": d["day"], "periods": periods})

    return {
        "name": _clean(data.get("name"), DEFAULT_TIMETABLE_NAME),
        "semester": _clean(data.get("semester")),
        "academicYear": _clean(data.get("academicYear")),
        "subjects": kept_subjects,
        "schedule": schedule,
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_timetable(data: Any, allow_partial: bool = False) -> ValidationResult:
    """
    Validate a canonical timetable payload.

    Checks subjects (name, type, color), schedule days and periods
    (day name, subject, HH:MM times, end after start) and that every
    period refers to a known subject.
    """
    if not isinstance(data, dict):
        return ValidationResult(
            issues=[ValidationIssue(ErrorKind.INVALID_STRUCTURE, "Timetable data must be a valid JSON object")]
        )

    issues: List[ValidationIssue] = []
    subjects = _subjects_of(data)

    if not isinstance(subjects, list):
        issues.append(
            ValidationIssue(ErrorKind.MISSING_FIELD, "subjects or subject field is required and must be an array")
        )
    elif not subjects:
        issues.append(ValidationIssue(ErrorKind.MISSING_FIELD, "At least one subject is required"))
    else:
        for i, subject in enumerate(subjects):
            issues.extend(_check_subject(subject, i))

    schedule = data.get("schedule")
    if _present(schedule):
        if not isinstance(schedule, list):
            issues.append(ValidationIssue(ErrorKind.INVALID_STRUCTURE, "schedule field must be an array if provided"))
        else:
            for i, day_schedule in enumerate(schedule):
                issues.extend(_check_day(day_schedule, i))

    if isinstance(subjects, list) and isinstance(schedule, list):
        issues.extend(_check_references(subjects, schedule))

    result = ValidationResult(issues=issues)
    if not issues:
        result.sanitized = _sanitize(data, subjects, partial=False)
    elif allow_partial:
        result.sanitized = _sanitize(data, subjects, partial=True)
    return result


def extract_subjects_from_schedule(schedule: Any) -> List[Dict[str, str]]:
    """
    Collect unique subjects (by name, first seen wins) referenced by periods.
    """
    found: Dict[str, Dict[str, str]] = {}
    if not isinstance(schedule, list):
        return []

    for d in schedule:
        if not isinstance(d, dict) or not isinstance(d.get("periods"), list):
            continue
        for p in d["periods"]:
            if not isinstance(p, dict):
                continue
            name = p.get("subject")
            if _non_empty_str(name) and name not in found:
                found[name] = {
                    "name": name,
                    "teacher": _clean(p.get("teacher")),
                    "room": _clean(p.get("room")),
                }

    return list(found.values())
