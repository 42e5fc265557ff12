"""
Tests for CLI entry points.

Input files are written to a temporary directory; stdout is captured to
check the JSON the data commands print.
"""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from timetable_normalizer.cli import main


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, argv: list[str]) -> tuple[int, str]:
        buf = io.StringIO()
        with redirect_stdout(buf):
            with self.assertRaises(SystemExit) as ctx:
                main(argv)
        return ctx.exception.code, buf.getvalue()

    def _write(self, name: str, payload) -> str:
        p = self.dir / name
        text = payload if isinstance(payload, str) else json.dumps(payload)
        p.write_text(text, encoding="utf-8")
        return str(p)

    def test_normalize_prints_sanitized_json(self) -> None:
        path = self._write("tt.json", {"Monday": {"09:00": {"subject": "Math"}}})
        code, out = self._run(["normalize", path, "--stable-colors"])

        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["subjects"][0]["name"], "Math")
        self.assertEqual(data["schedule"][0]["periods"][0]["endTime"], "10:00")

    def test_normalize_writes_out_file(self) -> None:
        path = self._write("tt.json", [{"day": "Friday", "time": "14:00", "end": "15:30", "subject": "Art"}])
        out_path = self.dir / "out" / "normalized.json"
        code, _ = self._run(["normalize", path, "--out", str(out_path)])

        self.assertEqual(code, 0)
        data = json.loads(out_path.read_text(encoding="utf-8"))
        self.assertEqual(data["schedule"][0]["day"], "Friday")

    def test_normalize_unknown_format(self) -> None:
        path = self._write("tt.json", {"foo": "bar"})
        code, out = self._run(["normalize", path])
        self.assertEqual(code, 1)
        self.assertIn("Unable to parse timetable format", out)

    def test_normalize_invalid_result(self) -> None:
        path = self._write("tt.json", {"Monday": {"09:00": {"subject": "Math"}}})
        code, out = self._run(["normalize", path, "--slot-minutes", "0"])
        self.assertEqual(code, 1)
        self.assertIn("endTime must be in HH:MM format", out)

    def test_missing_file(self) -> None:
        code, out = self._run(["normalize", str(self.dir / "nope.json")])
        self.assertEqual(code, 1)
        self.assertIn("Could not read JSON", out)

    def test_validate(self) -> None:
        good = self._write(
            "good.json",
            {"subjects": [{"name": "Math"}], "schedule": [{"day": "Monday", "periods": [{"subject": "Math", "startTime": "09:00", "endTime": "10:00"}]}]},
        )
        bad = self._write("bad.json", {"subjects": []})
        self.assertEqual(self._run(["validate", good])[0], 0)
        code, out = self._run(["validate", bad])
        self.assertEqual(code, 1)
        self.assertIn("At least one subject is required", out)

    def test_ocr_text(self) -> None:
        path = self._write("ocr.txt", "Monday 9.00 DBMS L")
        code, out = self._run(["ocr-text", path])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["Monday"]["09:00"]["subject"], "DBMS")

        code, out = self._run(["ocr-text", path, "--normalize"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["subjects"][0]["name"], "DBMS")

    def test_show(self) -> None:
        path = self._write("tt.json", {"Monday": {"09:00": {"subject": "Math"}}})
        code, _ = self._run(["show", path])
        self.assertEqual(code, 0)

    def test_command_is_required(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main([])
        self.assertNotEqual(ctx.exception.code, 0)


if __name__ == "__main__":
    unittest.main()
