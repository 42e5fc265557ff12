"""
Tests for format detection and the four format parsers.

Colors are assigned with cycle_colors() so results are reproducible.
"""

import unittest
from datetime import date

from timetable_normalizer.colors import PALETTE, cycle_colors
from timetable_normalizer.parse import (
    FormatDetectionError,
    TimetableFormat,
    build_timetable,
    detect_format,
    import_timetable,
    parse_universal,
)


def _parse(data, **kwargs):
    return parse_universal(data, color_assigner=cycle_colors(), **kwargs)


class TestTimeSlotFormat(unittest.TestCase):
    def test_single_class(self) -> None:
        out = _parse({"Monday": {"09:00": {"subject": "Math"}}})

        self.assertEqual(len(out["subjects"]), 1)
        subject = out["subjects"][0]
        self.assertEqual(subject["name"], "Math")
        self.assertEqual(subject["type"], "Lecture")
        self.assertEqual(subject["code"], "MATH")
        self.assertEqual(subject["color"], PALETTE[0])

        self.assertEqual(len(out["schedule"]), 1)
        self.assertEqual(out["schedule"][0]["day"], "Monday")
        self.assertEqual(
            out["schedule"][0]["periods"],
            [
                {
                    "subject": "Math",
                    "startTime": "09:00",
                    "endTime": "",
                    "room": "",
                    "type": "Lecture",
                    "section": "All",
                }
            ],
        )

    def test_days_follow_canonical_order_and_empty_days_are_dropped(self) -> None:
        out = _parse(
            {
                "Wednesday": {"10:00": {"subject": "Art"}},
                "Monday": {"09:00": [{"subject": "Math"}, {"subject": "Bio", "type": "P"}]},
                "Friday": {},
                "Tuesday": {"09:00": {"room": "no name here"}},
            }
        )
        self.assertEqual([d["day"] for d in out["schedule"]], ["Monday", "Wednesday"])
        self.assertEqual(len(out["schedule"][0]["periods"]), 2)

    def test_unpadded_slots_are_sorted_chronologically(self) -> None:
        out = _parse({"Tuesday": {"10:00": {"subject": "B"}, "9:00": {"subject": "A"}}})
        periods = out["schedule"][0]["periods"]
        self.assertEqual([p["subject"] for p in periods], ["A", "B"])
        self.assertEqual(periods[0]["startTime"], "09:00")

    def test_slot_minutes_derives_end_time(self) -> None:
        out = _parse({"Monday": {"09:30": {"subject": "Math"}}}, slot_minutes=60)
        self.assertEqual(out["schedule"][0]["periods"][0]["endTime"], "10:30")


class TestArrayAndFlatFormats(unittest.TestCase):
    def test_array_of_days(self) -> None:
        data = [
            {
                "day": "Monday",
                "periods": [
                    {"subject": "Physics", "startTime": "9.30", "endTime": "10:30", "type": "P", "room": "Lab 1"},
                    {"course": "Chemistry", "time": "11:00", "end": "12:00"},
                ],
            },
            {"day": "Funday", "periods": [{"subject": "Ignored"}]},
        ]
        self.assertEqual(detect_format(data), TimetableFormat.ARRAY_OF_DAYS)

        out = _parse(data)
        self.assertEqual([s["name"] for s in out["subjects"]], ["Physics", "Chemistry"])
        self.assertEqual(len(out["schedule"]), 1)
        first, second = out["schedule"][0]["periods"]
        self.assertEqual(first["startTime"], "09:30")
        self.assertEqual(first["type"], "Practical")
        self.assertEqual(first["room"], "Lab 1")
        self.assertEqual(second["startTime"], "11:00")
        self.assertEqual(second["endTime"], "12:00")

    def test_flat_list_groups_by_first_seen_day(self) -> None:
        data = [
            {"day": "Tuesday", "time": "11:00", "subject": "DBMS", "type": "L"},
            {"day": "Monday", "time": "09:00", "subject": "DBMS", "type": "P"},
            {"day": "Tuesday", "time": "12:00", "subject": "OS"},
            {"weekday": "Someday", "subject": "Nope"},
        ]
        self.assertEqual(detect_format(data), TimetableFormat.FLAT_LIST)

        out = _parse(data)
        self.assertEqual([d["day"] for d in out["schedule"]], ["Tuesday", "Monday"])
        self.assertEqual(len(out["schedule"][0]["periods"]), 2)

    def test_same_name_different_type_gives_two_subjects(self) -> None:
        data = [
            {"day": "Monday", "time": "09:00", "subject": "DBMS", "type": "L"},
            {"day": "Monday", "time": "11:00", "subject": "DBMS", "type": "P"},
        ]
        out = _parse(data)
        keys = [f"{s['name']}_{s['type']}" for s in out["subjects"]]
        self.assertEqual(keys, ["DBMS_Lecture", "DBMS_Practical"])

    def test_first_occurrence_wins(self) -> None:
        data = [
            {"day": "Monday", "time": "09:00", "subject": "Math", "teacher": "Ada", "room": "R1"},
            {"day": "Friday", "time": "09:00", "subject": "Math", "teacher": "Bob", "room": "R2"},
        ]
        out = _parse(data)
        self.assertEqual(len(out["subjects"]), 1)
        self.assertEqual(out["subjects"][0]["teacher"], "Ada")
        self.assertEqual(out["subjects"][0]["room"], "R1")
        self.assertEqual(out["subjects"][0]["color"], PALETTE[0])


class TestStandardFormat(unittest.TestCase):
    def test_defaults_are_filled(self) -> None:
        data = {
            "subject": [{"name": "Data Mining", "faculty": "Dr. Rao"}, {"code": "X1"}],
            "schedule": [{"day": "Monday", "periods": [{"name": "Data Mining", "start": "9", "end": "10"}]}],
        }
        self.assertEqual(detect_format(data), TimetableFormat.STANDARD)

        out = _parse(data)
        dm, unknown = out["subjects"]
        self.assertEqual(dm["code"], "DATA_MINING")
        self.assertEqual(dm["teacher"], "Dr. Rao")
        self.assertEqual(dm["type"], "Lecture")
        self.assertEqual(unknown["name"], "Unknown")
        self.assertEqual(unknown["code"], "X1")

        period = out["schedule"][0]["periods"][0]
        self.assertEqual(period["subject"], "Data Mining")
        self.assertEqual(period["startTime"], "09:00")
        self.assertEqual(period["endTime"], "10:00")
        self.assertEqual(period["section"], "All")

    def test_duplicate_subjects_collapse_to_first(self) -> None:
        data = {
            "subjects": [
                {"name": "DBMS", "type": "Lecture"},
                {"name": "DBMS", "type": "Lecture", "teacher": "X"},
                {"name": "DBMS", "type": "Lab"},
            ],
        }
        out = _parse(data)
        keys = [(s["name"], s["type"], s["teacher"]) for s in out["subjects"]]
        self.assertEqual(keys, [("DBMS", "Lecture", ""), ("DBMS", "Practical", "")])

    def test_code_comes_from_subject_alias_and_default_name(self) -> None:
        out = _parse({"subjects": [{"subject": "Data Mining"}, {"type": "T"}]})
        dm, unknown = out["subjects"]
        self.assertEqual(dm["code"], "DATA_MINING")
        self.assertEqual(unknown["name"], "Unknown")
        self.assertEqual(unknown["code"], "UNKNOWN")
        self.assertEqual(unknown["type"], "Tutorial")

    def test_types_are_mapped_and_unknown_days_dropped(self) -> None:
        data = {
            "subjects": [{"name": "Math", "type": "L"}],
            "schedule": [
                {"day": "Funday", "periods": [{"subject": "Math", "startTime": "09:00"}]},
                {"day": "Monday", "periods": [{"subject": "Math", "startTime": "09:00", "type": "P"}]},
            ],
        }
        out = _parse(data)
        self.assertEqual(out["subjects"][0]["type"], "Lecture")
        self.assertEqual([d["day"] for d in out["schedule"]], ["Monday"])
        self.assertEqual(out["schedule"][0]["periods"][0]["type"], "Practical")

    def test_renormalizing_canonical_output_is_identity(self) -> None:
        first = _parse({"Monday": {"09:00": {"subject": "Math", "room": "A1"}}}, slot_minutes=60)
        second = _parse(first)
        self.assertEqual(first, second)


class TestDispatcher(unittest.TestCase):
    def test_unknown_shape_raises(self) -> None:
        with self.assertRaises(FormatDetectionError):
            parse_universal({"foo": "bar"})
        self.assertIsNone(detect_format({"foo": "bar"}))

    def test_non_container_raises(self) -> None:
        with self.assertRaises(FormatDetectionError):
            parse_universal("Monday 09:00 Math")

    def test_wrapper_is_unwrapped_and_outer_metadata_wins(self) -> None:
        data = {
            "name": "Semester 5",
            "timetable": {"semester": "Odd", "Monday": {"09:00": {"subject": "Math"}}},
        }
        self.assertEqual(detect_format(data), TimetableFormat.TIME_SLOT)

        out = _parse(data)
        self.assertEqual(out["name"], "Semester 5")
        self.assertEqual(out["semester"], "Odd")
        self.assertEqual(out["academicYear"], str(date.today().year))
        self.assertEqual(out["subjects"][0]["name"], "Math")

    def test_metadata_defaults(self) -> None:
        out = _parse([])
        self.assertEqual(out["name"], "Imported Timetable")
        self.assertEqual(out["semester"], "Current")
        self.assertEqual(out["subjects"], [])
        self.assertEqual(out["schedule"], [])

    def test_build_timetable_returns_dataclass(self) -> None:
        tt = build_timetable({"Monday": {"09:00": {"subject": "Math"}}}, color_assigner=cycle_colors())
        self.assertEqual(tt.period_count(), 1)
        self.assertEqual(tt.subjects[0].key, "Math_Lecture")


class TestImportPipeline(unittest.TestCase):
    def test_time_slot_without_end_times_fails_validation(self) -> None:
        result = import_timetable({"Monday": {"09:00": {"subject": "Math"}}}, color_assigner=cycle_colors())
        self.assertFalse(result.valid)
        self.assertIsNone(result.sanitized)
        self.assertEqual(result.errors, ["Monday - Period 1: endTime must be in HH:MM format (e.g., 10:30)"])

    def test_time_slot_with_slot_minutes_is_valid(self) -> None:
        result = import_timetable(
            {"Monday": {"09:00": {"subject": "Math"}}}, color_assigner=cycle_colors(), slot_minutes=50
        )
        self.assertTrue(result.valid)
        self.assertEqual(result.sanitized["schedule"][0]["periods"][0]["endTime"], "09:50")


if __name__ == "__main__":
    unittest.main()
