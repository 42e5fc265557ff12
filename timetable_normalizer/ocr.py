"""
OCR text parsing (raw OCR text -> day/time grid).

OCR output of a timetable photo is noisy and has lost its table layout.
This module does a best-effort job of turning it into the time-slot shape

    {"Monday": {"08:30": {"subject": ..., "type": ..., "faculty": ..., "room": ...}}}

which timetable_normalizer.parse understands. The result is a starting point
for a human to review and edit, not a faithful reconstruction: subjects are
spread over the detected day x time grid by cycling through them.

Important rules:
- parse_ocr_text() never raises
- the result always contains at least one day
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from timetable_normalizer.colors import ColorAssigner, random_color
from timetable_normalizer.model import DAYS
from timetable_normalizer.parse import parse_universal
from timetable_normalizer.times import normalize_time


logger = logging.getLogger(__name__)

Cell = Dict[str, str]
Grid = Dict[str, Dict[str, Cell]]

PLACEHOLDER_SUBJECT = "Class"
PLACEHOLDER = "TBA"
FALLBACK_DAY = "Monday"

DAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Faculty initials that look like "<WORD> <L|P|T>" subject tokens
TEACHER_CODES = ("NG", "PB", "VD", "SSM", "JK", "HM", "HJ")

KNOWN_SUBJECTS = ("DBMS", "AET", "WT", "DM", "OS", "Java")
MULTI_WORD_SUBJECTS = ("Indian Constitution",)

# Fragments produced by the patterns above that are never real subjects
NOISE_SUBJECTS = ("MC", "App", "Sc", "Constitution")

OCR_TYPE_SUFFIXES = {"L": "Lecture", "P": "Lab", "T": "Tutorial"}

_TIME_RE = re.compile(r"\b(\d{1,2}):(\d{2})\b", re.ASCII)
_SUBJECT_WITH_TYPE_RE = re.compile(r"\b([A-Z][A-Za-z_]+(?:\s+[A-Z][a-z]+)?)\s*([LPT])\b")
_COMPOUND_SUBJECT_RE = re.compile(r"\b([A-Z]{2,})(?:L|Lab)\b")
_FACULTY_RE = re.compile(r"(?:Pf\.|Dr\.)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*(?:\s*\([A-Z]+\))?)")
_ROOM_RE = re.compile(r"\b(S-\d{3}|[A-Z]+_Lab|HPC_Lab|PL_Lab|OS_Lab|DBMS_Lab|IOT_Lab|WD_Lab)\b", re.ASCII)

_LINE_TIME_RE = re.compile(
    r"\b(\d{1,2})\s*[:.\-]\s*(\d{2})\s*(AM|PM)?\b|\b(\d{1,2})\s*(AM|PM)\b",
    re.IGNORECASE | re.ASCII,
)
_LINE_TYPE_RE = re.compile(r"\b(lecture|lab|tutorial|practical|theory|lec|tut|prac)\b", re.IGNORECASE)
_LINE_ROOM_RE = re.compile(r"\b([A-Z]{1,3}[_\-]?\d{1,3}|Room\s*\d+|[A-Z]+\s*Lab|Lab\s*\d+)\b", re.IGNORECASE | re.ASCII)
_LINE_FACULTY_RE = re.compile(
    r"\b(Pf\.|Dr\.|Prof\.|Professor|Faculty)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s*\(([A-Z]+)\)|\(([A-Z][a-z\s]+)\)",
    re.IGNORECASE,
)

_LINE_TYPE_NAMES = {"Lec": "Lecture", "Tut": "Tutorial", "Prac": "Practical"}


@dataclass
class OcrSignals:
    """
    Everything the pattern heuristics found in one OCR text.
    """

    times: List[str] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    subject_types: Dict[str, str] = field(default_factory=dict)
    faculty: List[str] = field(default_factory=list)
    rooms: List[str] = field(default_factory=list)
    days: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Cleanup & extraction
# ---------------------------------------------------------------------------


def clean_ocr_text(text: str) -> str:
    """
    Fix common OCR confusions and normalize punctuation and whitespace.
    """
    cleaned = re.sub(r"\bl\b", "1", text)
    cleaned = re.sub(r"\bO\b", "0", cleaned)
    cleaned = re.sub("[‘’]", "'", cleaned)
    cleaned = re.sub("[“”]", '"', cleaned)
    cleaned = re.sub("[–—]", "-", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    # 9.00 -> 9:00
    cleaned = re.sub(r"(\d{1,2})\.(\d{2})", r"\1:\2", cleaned, flags=re.ASCII)
    return cleaned


def extract_times(text: str) -> List[str]:
    """
    All HH:MM tokens, zero-padded, deduplicated and sorted as strings.
    """
    found = {f"{h.zfill(2)}:{m}" for h, m in _TIME_RE.findall(text)}
    return sorted(found)


def extract_subjects(text: str) -> Tuple[List[str], Dict[str, str]]:
    """
    Union of three heuristics:

    1. '<Word[s]> <L|P|T>' tokens (type from the suffix)
    2. all-caps compounds ending in 'L' or 'Lab' ("DBMSL", "WTLab")
    3. known abbreviations and multi-word names found verbatim

    Returns the subjects in first-seen order plus a subject -> type map.
    """
    # dict as ordered set
    subjects: Dict[str, None] = {}
    types: Dict[str, str] = {}

    for m in _SUBJECT_WITH_TYPE_RE.finditer(text):
        name = m.group(1).strip()
        if name in TEACHER_CODES:
            continue
        subjects[name] = None
        types[name] = OCR_TYPE_SUFFIXES.get(m.group(2), "Lecture")

    for m in _COMPOUND_SUBJECT_RE.finditer(text):
        name = m.group(1)
        if name in TEACHER_CODES:
            continue
        subjects[name] = None
        types.setdefault(name, "Lab")

    for name in KNOWN_SUBJECTS:
        if name in text:
            subjects[name] = None
            types.setdefault(name, "Lecture")

    for name in MULTI_WORD_SUBJECTS:
        if name in text:
            subjects[name] = None
            types[name] = "Lecture"

    return list(subjects), types


def extract_faculty(text: str) -> List[str]:
    return [m.group(0).strip() for m in _FACULTY_RE.finditer(text)]


def extract_rooms(text: str) -> List[str]:
    return [m.group(0) for m in _ROOM_RE.finditer(text)]


def detect_days(text: str) -> List[str]:
    return [day for day in DAYS if day in text]


def distributable_subjects(subjects: List[str]) -> List[str]:
    """
    Drop fragments that should not end up in the grid.
    """
    return [
        s
        for s in subjects
        if len(s) > 1 and not re.match(r"^D[0-9]", s) and s not in NOISE_SUBJECTS and s not in TEACHER_CODES
    ]


def extract_signals(text: str) -> OcrSignals:
    """
    Run every extractor on already cleaned text.
    """
    subjects, types = extract_subjects(text)
    signals = OcrSignals(
        times=extract_times(text),
        subjects=distributable_subjects(subjects),
        subject_types=types,
        faculty=extract_faculty(text),
        rooms=extract_rooms(text),
        days=detect_days(text),
    )
    logger.debug(
        "OCR signals: %d times, %d subjects, %d faculty, %d rooms, days=%s",
        len(signals.times),
        len(signals.subjects),
        len(signals.faculty),
        len(signals.rooms),
        signals.days,
    )
    return signals


# ---------------------------------------------------------------------------
# Grid assignment
# ---------------------------------------------------------------------------


def _cycle(items: List[str], index: int, default: str) -> str:
    return items[index % len(items)] if items else default


def build_grid(signals: OcrSignals) -> Grid:
    """
    Fill every (day, time) cell by cycling through the subjects.

    Cell k of day d uses subject (d * len(times) + k) mod len(subjects).
    Faculty advances every 2 cells, rooms every 3 cells.
    """
    days = signals.days or [FALLBACK_DAY]
    times = signals.times
    grid: Grid = {day: {} for day in days}

    assigned = 0
    for day_idx, day in enumerate(days):
        for time_idx, slot in enumerate(times):
            subject = _cycle(signals.subjects, day_idx * len(times) + time_idx, PLACEHOLDER_SUBJECT)
            grid[day][slot] = {
                "subject": subject,
                "type": signals.subject_types.get(subject, "Lecture"),
                "faculty": _cycle(signals.faculty, assigned // 2, PLACEHOLDER),
                "room": _cycle(signals.rooms, assigned // 3, PLACEHOLDER),
            }
            assigned += 1

    return grid


# ---------------------------------------------------------------------------
# Line-based fallback
# ---------------------------------------------------------------------------


def _line_day(line: str) -> Optional[str]:
    lower = line.lower()
    for day in DAYS:
        if day.lower() in lower:
            return day
    for day, abbrev in zip(DAYS, DAY_ABBREVIATIONS):
        if abbrev.lower() in lower:
            return day
    return None


def parse_subject_line(line: str) -> Dict[str, str]:
    """
    Split one timetable row (time already removed) into
    subject / type / faculty / room. Whatever is left is the subject.
    """
    result = {"subject": "", "type": "", "faculty": "", "room": ""}

    line = re.sub(r"[-–—|]", " ", line).strip()
    line = re.sub(r"\s+", " ", line)

    m = _LINE_TYPE_RE.search(line)
    if m:
        word = m.group(1).capitalize()
        result["type"] = _LINE_TYPE_NAMES.get(word, word)
        line = line.replace(m.group(0), "", 1).strip()

    m = _LINE_ROOM_RE.search(line)
    if m:
        result["room"] = m.group(0).strip()
        line = line.replace(m.group(0), "", 1).strip()

    m = _LINE_FACULTY_RE.search(line)
    if m:
        result["faculty"] = m.group(0).strip()
        line = line.replace(m.group(0), "", 1).strip()

    result["subject"] = line.strip() or "Unknown Subject"
    return result


def parse_line_based(raw_text: str) -> Grid:
    """
    Fallback parser for text that keeps its line structure.

    A line mentioning a day starts that day; following lines with a time
    token become rows of it.
    """
    lines = [line.strip() for line in raw_text.split("\n") if line.strip()]
    grid: Grid = {}
    current_day: Optional[str] = None

    for line in lines:
        day = _line_day(line)
        if day:
            current_day = day
            grid.setdefault(day, {})
            continue

        matches = [m.group(0) for m in _LINE_TIME_RE.finditer(line)]
        if not matches or current_day is None:
            continue

        slot = normalize_time(matches[0].replace(".", ":"))
        remaining = line
        for token in matches:
            remaining = remaining.replace(token, "", 1)

        parsed = parse_subject_line(remaining.strip())
        grid[current_day][slot] = {
            "subject": parsed["subject"],
            "type": parsed["type"] or "Lecture",
            "faculty": parsed["faculty"] or PLACEHOLDER,
            "room": parsed["room"] or PLACEHOLDER,
        }

    if not grid:
        logger.warning("Line-based OCR parsing found nothing, returning a sample entry")
        grid[FALLBACK_DAY] = {
            "08:30": {"subject": "Sample Subject", "type": "Lecture", "faculty": PLACEHOLDER, "room": PLACEHOLDER}
        }

    return grid


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_ocr_text(raw_text: Any) -> Grid:
    """
    Turn raw OCR text into a {day: {time: cell}} grid.

    Uses the pattern heuristics + cyclic grid fill. When the text has no
    time token at all, the line-based fallback runs on the uncleaned text.
    """
    text = raw_text if isinstance(raw_text, str) else ""
    signals = extract_signals(clean_ocr_text(text))

    if not signals.times:
        logger.info("No time tokens in OCR text, using line-based fallback")
        return parse_line_based(text)

    grid = build_grid(signals)
    logger.info("OCR grid built: %s", {day: len(cells) for day, cells in grid.items()})
    return grid


def parse_ocr_timetable(
    raw_text: Any,
    color_assigner: ColorAssigner = random_color,
    slot_minutes: Optional[int] = 60,
) -> Dict[str, Any]:
    """
    OCR text straight to a canonical timetable dict (via the time-slot parser).
    """
    return parse_universal(parse_ocr_text(raw_text), color_assigner=color_assigner, slot_minutes=slot_minutes)
