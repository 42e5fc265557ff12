"""
Timetable normalizer: turns timetable JSON of unknown shape, or raw OCR text,
into one canonical {subjects, schedule} structure and validates it.
"""

from timetable_normalizer.ocr import parse_ocr_text
from timetable_normalizer.parse import FormatDetectionError, import_timetable, parse_universal
from timetable_normalizer.validate import validate_timetable

__all__ = [
    "FormatDetectionError",
    "import_timetable",
    "parse_ocr_text",
    "parse_universal",
    "validate_timetable",
]
