"""
Reading and writing timetable JSON files.

Input files come from users and may be missing or broken, so loading is
defensive: it returns None instead of raising and lets the caller decide
how to report the problem.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


def load_json(path: str | Path) -> Any:
    """
    Load a JSON document from `path`.

    Returns None if the file does not exist or is not valid JSON.
    """
    json_path = Path(path)
    if not json_path.exists():
        logger.warning("File not found: %s", json_path)
        return None

    try:
        return json.loads(json_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", json_path, exc)
        return None


def dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def save_json(payload: Any, path: str | Path) -> None:
    """
    Write `payload` as UTF-8 JSON. Creates parent directories if needed.
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dump_json(payload), encoding="utf-8")
