"""
Format detectors (input JSON shape -> canonical subjects + schedule).

Four input shapes are understood:

1. Time-slot:      {"Monday": {"08:30": {"subject": "Math"}, ...}, ...}
2. Array of days:  [{"day": "Monday", "periods": [{...}, ...]}, ...]
3. Flat list:      [{"day": "Monday", "time": "08:30", "subject": "Math"}, ...]
4. Standard:       {"subjects": [...], "schedule": [...]}

Each parser returns (subjects, schedule). Picking the right parser is the
job of timetable_normalizer.parse.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from timetable_normalizer.colors import ColorAssigner, random_color
from timetable_normalizer.extract import SubjectInfo, extract_subject_info, map_type
from timetable_normalizer.model import (
    DAYS,
    DEFAULT_SECTION,
    DEFAULT_TYPE,
    DaySchedule,
    Period,
    Subject,
    subject_code,
)
from timetable_normalizer.times import add_minutes, normalize_time, sort_key


logger = logging.getLogger(__name__)

ParseResult = Tuple[List[Subject], List[DaySchedule]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class SubjectRegistry:
    """
    Collects subjects keyed by 'name_type'.

    The first occurrence wins: later records with the same key never
    overwrite code, color, teacher or room.
    """

    def __init__(self, color_assigner: ColorAssigner = random_color) -> None:
        self._color_assigner = color_assigner
        self._subjects: Dict[str, Subject] = {}

    def add(self, info: SubjectInfo) -> None:
        key = f"{info.name}_{info.type}"
        if key in self._subjects:
            return
        self._subjects[key] = Subject(
            name=info.name,
            code=info.code or subject_code(info.name),
            type=info.type,
            color=self._color_assigner(),
            teacher=info.faculty,
            room=info.room,
        )

    def subjects(self) -> List[Subject]:
        return list(self._subjects.values())


def _first(record: Dict[str, Any], *fields: str) -> Any:
    for f in fields:
        value = record.get(f)
        if value:
            return value
    return None


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value).strip()


def _period_from_info(info: SubjectInfo, start: Any, end: Any) -> Period:
    return Period(
        subject=info.name,
        start_time=normalize_time(start),
        end_time=normalize_time(end),
        room=info.room,
        type=info.type,
        section=info.section or DEFAULT_SECTION,
    )


# ---------------------------------------------------------------------------
# Format 1: time-slot (day -> time -> class or [classes])
# ---------------------------------------------------------------------------


def parse_time_slot_format(
    data: Dict[str, Any],
    color_assigner: ColorAssigner = random_color,
    slot_minutes: Optional[int] = None,
) -> ParseResult:
    """
    Days are visited in canonical order, not input order. Within a day the
    slot keys are ordered chronologically after normalization, so '9:00'
    comes before '10:00'.

    End times are left empty unless `slot_minutes` is given.
    """
    registry = SubjectRegistry(color_assigner)
    schedule: List[DaySchedule] = []

    for day in DAYS:
        day_data = data.get(day)
        if not isinstance(day_data, dict) or not day_data:
            continue

        periods: List[Period] = []
        for slot in sorted(day_data, key=sort_key):
            classes = day_data[slot]
            class_list = classes if isinstance(classes, list) else [classes]

            for cls in class_list:
                if not isinstance(cls, dict):
                    continue
                info = extract_subject_info(cls)
                if not info.name:
                    continue

                registry.add(info)
                start = normalize_time(slot)
                end = add_minutes(start, slot_minutes) if slot_minutes else ""
                periods.append(_period_from_info(info, start, end))

        if periods:
            schedule.append(DaySchedule(day=day, periods=periods))

    return registry.subjects(), schedule


# ---------------------------------------------------------------------------
# Format 2: array of days with nested periods
# ---------------------------------------------------------------------------


def parse_array_format(
    data: List[Any],
    color_assigner: ColorAssigner = random_color,
) -> ParseResult:
    registry = SubjectRegistry(color_assigner)
    schedule: List[DaySchedule] = []

    for day_data in data:
        if not isinstance(day_data, dict):
            continue

        day = _first(day_data, "day", "name", "dayName")
        if day not in DAYS:
            continue

        raw_periods = _first(day_data, "periods", "classes", "schedule") or []
        if not isinstance(raw_periods, list):
            continue

        periods: List[Period] = []
        for raw in raw_periods:
            if not isinstance(raw, dict):
                continue
            info = extract_subject_info(raw)
            if not info.name:
                continue

            registry.add(info)
            periods.append(
                _period_from_info(
                    info,
                    _first(raw, "startTime", "time", "start"),
                    _first(raw, "endTime", "end"),
                )
            )

        if periods:
            schedule.append(DaySchedule(day=day, periods=periods))

    return registry.subjects(), schedule


# ---------------------------------------------------------------------------
# Format 3: flat list, every record carries its own day
# ---------------------------------------------------------------------------


def parse_flat_format(
    data: List[Any],
    color_assigner: ColorAssigner = random_color,
) -> ParseResult:
    registry = SubjectRegistry(color_assigner)
    # dicts keep insertion order -> days appear in first-seen order
    by_day: Dict[str, List[Period]] = {}

    for item in data:
        if not isinstance(item, dict):
            continue

        day = _first(item, "day", "dayName", "weekday")
        if day not in DAYS:
            continue

        info = extract_subject_info(item)
        if not info.name:
            continue

        registry.add(info)
        by_day.setdefault(day, []).append(
            _period_from_info(
                info,
                _first(item, "time", "startTime", "start"),
                _first(item, "endTime", "end"),
            )
        )

    schedule = [DaySchedule(day=day, periods=periods) for day, periods in by_day.items()]
    return registry.subjects(), schedule


# ---------------------------------------------------------------------------
# Format 4: standard (subjects + schedule, already close to canonical)
# ---------------------------------------------------------------------------


def parse_standard_format(
    data: Dict[str, Any],
    color_assigner: ColorAssigner = random_color,
) -> ParseResult:
    """
    Re-normalize an input that already has the canonical layout.

    Fields are defaulted and times normalized; nothing is restructured,
    so running this on its own output is a near identity. Duplicate
    subjects collapse to the first one, types are mapped onto the
    canonical set and days outside Monday..Sunday are dropped, as in the
    other formats.
    """
    raw_subjects = _first(data, "subjects", "subject") or []
    raw_schedule = data.get("schedule") or []
    if not isinstance(raw_subjects, list):
        raw_subjects = []
    if not isinstance(raw_schedule, list):
        raw_schedule = []

    # same 'name_type' key as SubjectRegistry, but given colors are kept
    by_key: Dict[str, Subject] = {}
    for s in raw_subjects:
        if not isinstance(s, dict):
            continue
        name = _text(_first(s, "name", "subject"), "Unknown")
        subject_type = map_type(_text(s.get("type"), DEFAULT_TYPE))
        key = f"{name}_{subject_type}"
        if key in by_key:
            continue
        by_key[key] = Subject(
            name=name,
            code=_text(s.get("code")) or subject_code(name),
            type=subject_type,
            color=_text(s.get("color")) or color_assigner(),
            teacher=_text(_first(s, "teacher", "faculty")),
            room=_text(_first(s, "room", "location")),
        )
    subjects = list(by_key.values())

    schedule: List[DaySchedule] = []
    for d in raw_schedule:
        if not isinstance(d, dict):
            continue
        day = _text(_first(d, "day", "name"))
        if day not in DAYS:
            logger.debug("Skipping unknown day: %r", day)
            continue
        raw_periods = d.get("periods") or []
        if not isinstance(raw_periods, list):
            raw_periods = []

        periods = [
            Period(
                subject=_text(_first(p, "subject", "name")),
                start_time=normalize_time(_first(p, "startTime", "time", "start")),
                end_time=normalize_time(_first(p, "endTime", "end")),
                room=_text(p.get("room")),
                type=map_type(_text(p.get("type"), DEFAULT_TYPE)),
                section=_text(p.get("section"), DEFAULT_SECTION),
            )
            for p in raw_periods
            if isinstance(p, dict)
        ]
        if periods:
            schedule.append(DaySchedule(day=day, periods=periods))

    logger.debug("Standard format: %d subjects, %d days", len(subjects), len(schedule))
    return subjects, schedule
