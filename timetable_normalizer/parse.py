"""
Format dispatcher (arbitrary timetable JSON -> canonical timetable).

- Unwraps an optional {"timetable": ...} envelope
- Detects which of the four known shapes the payload has
- Runs the matching parser from timetable_normalizer.formats
- Adds metadata (name, semester, academicYear) with fallbacks

Important rules:
- Exactly one parser runs per call, chosen by a fixed priority
- Unknown shapes raise FormatDetectionError, nothing is guessed
"""

from __future__ import annotations

import enum
import logging
from datetime import date
from typing import Any, Dict, Optional

from timetable_normalizer.colors import ColorAssigner, random_color
from timetable_normalizer.formats import (
    parse_array_format,
    parse_flat_format,
    parse_standard_format,
    parse_time_slot_format,
)
from timetable_normalizer.model import DAYS, Timetable
from timetable_normalizer.validate import ValidationResult, validate_timetable


logger = logging.getLogger(__name__)

DEFAULT_NAME = "Imported Timetable"
DEFAULT_SEMESTER = "Current"


class FormatDetectionError(ValueError):
    """Raised when a payload matches none of the known timetable shapes."""


class TimetableFormat(enum.Enum):
    STANDARD = "standard"
    ARRAY_OF_DAYS = "array"
    FLAT_LIST = "flat"
    TIME_SLOT = "time-slot"


def _truthy(value: Any) -> bool:
    # Empty containers still count as "present"
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def _unwrap(data: Any) -> Any:
    if isinstance(data, dict) and isinstance(data.get("timetable"), (dict, list)):
        logger.info("Detected nested timetable wrapper, unwrapping")
        return data["timetable"]
    return data


def _detect(actual: Any) -> Optional[TimetableFormat]:
    if isinstance(actual, dict) and (_truthy(actual.get("subjects")) or _truthy(actual.get("subject"))):
        return TimetableFormat.STANDARD

    if isinstance(actual, list):
        first = actual[0] if actual else None
        if (
            isinstance(first, dict)
            and _truthy(first.get("day"))
            and (_truthy(first.get("periods")) or _truthy(first.get("classes")))
        ):
            return TimetableFormat.ARRAY_OF_DAYS
        return TimetableFormat.FLAT_LIST

    if isinstance(actual, dict) and any(day in actual for day in DAYS):
        return TimetableFormat.TIME_SLOT

    return None


def detect_format(data: Any) -> Optional[TimetableFormat]:
    """
    Return the format `data` would be parsed as, or None if unknown.
    """
    if not isinstance(data, (dict, list)):
        return None
    return _detect(_unwrap(data))


def _meta(data: Any, actual: Any, key: str, default: str) -> str:
    for source in (data, actual):
        if isinstance(source, dict) and source.get(key):
            return str(source[key]).strip()
    return default


def build_timetable(
    data: Any,
    color_assigner: ColorAssigner = random_color,
    slot_minutes: Optional[int] = None,
) -> Timetable:
    """
    Same as parse_universal() but returns the Timetable dataclass.
    """
    if not isinstance(data, (dict, list)):
        raise FormatDetectionError("Invalid data: must be an object or array")

    actual = _unwrap(data)
    fmt = _detect(actual)

    if fmt is TimetableFormat.STANDARD:
        subjects, schedule = parse_standard_format(actual, color_assigner)
    elif fmt is TimetableFormat.ARRAY_OF_DAYS:
        subjects, schedule = parse_array_format(actual, color_assigner)
    elif fmt is TimetableFormat.FLAT_LIST:
        subjects, schedule = parse_flat_format(actual, color_assigner)
    elif fmt is TimetableFormat.TIME_SLOT:
        subjects, schedule = parse_time_slot_format(actual, color_assigner, slot_minutes=slot_minutes)
    else:
        raise FormatDetectionError("Unable to detect timetable format. Please check your JSON structure.")

    logger.info("Detected %s format: %d subjects, %d days", fmt.value, len(subjects), len(schedule))

    return Timetable(
        name=_meta(data, actual, "name", DEFAULT_NAME),
        semester=_meta(data, actual, "semester", DEFAULT_SEMESTER),
        academic_year=_meta(data, actual, "academicYear", str(date.today().year)),
        subjects=subjects,
        schedule=schedule,
    )


def parse_universal(
    data: Any,
    color_assigner: ColorAssigner = random_color,
    slot_minutes: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Normalize a timetable payload of any supported shape.

    Returns the canonical dict {name, semester, academicYear, subjects, schedule}.
    Raises FormatDetectionError when the shape is not recognized.
    """
    return build_timetable(data, color_assigner=color_assigner, slot_minutes=slot_minutes).to_dict()


def import_timetable(
    data: Any,
    color_assigner: ColorAssigner = random_color,
    slot_minutes: Optional[int] = None,
) -> ValidationResult:
    """
    Upload pipeline: normalize, then validate the normalized result.

    FormatDetectionError propagates; validation problems are reported in
    the returned ValidationResult.
    """
    parsed = parse_universal(data, color_assigner=color_assigner, slot_minutes=slot_minutes)
    result = validate_timetable(parsed)
    if not result.valid:
        logger.warning("Normalized timetable failed validation with %d error(s)", len(result.errors))
    return result
