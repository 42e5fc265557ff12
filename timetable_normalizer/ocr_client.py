from __future__ import annotations

import base64
import logging
import os
from typing import Any, Dict

import requests
from dotenv import load_dotenv

from timetable_normalizer.ocr import parse_ocr_text


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "https://api.ocr.space/parse/image"
DEFAULT_TIMEOUT = 30.0

VALID_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/bmp")
MAX_IMAGE_BYTES = 10 * 1024 * 1024

REVIEW_MESSAGE = "Timetable extracted successfully. Review and edit the JSON below before saving."


class OcrError(Exception):
    """Raised when the OCR service cannot deliver text for an image."""


def _settings() -> Dict[str, Any]:
    """
    Read OCR settings from the environment (and a local .env file, if any).
    """
    load_dotenv()
    api_key = os.getenv("OCR_API_KEY", "").strip()
    if not api_key:
        raise OcrError("OCR_API_KEY is not set in environment variables")
    return {
        "api_key": api_key,
        "url": os.getenv("OCR_API_URL", DEFAULT_API_URL),
        "timeout": _timeout(os.getenv("OCR_TIMEOUT")),
    }


def _timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid OCR_TIMEOUT %r, using %ss", raw, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def validate_image(data: bytes, mime_type: str) -> Dict[str, Any]:
    """
    Check type and size of an image before it is sent to the OCR service.

    Returns {"valid": True} or {"valid": False, "error": <message>}.
    """
    if (mime_type or "").lower() not in VALID_MIME_TYPES:
        return {
            "valid": False,
            "error": f"Invalid image type: {mime_type}. Supported types: JPEG, PNG, GIF, BMP",
        }

    if len(data) > MAX_IMAGE_BYTES:
        size_mb = len(data) / 1024 / 1024
        return {"valid": False, "error": f"Image too large: {size_mb:.2f}MB. Maximum size: 10MB"}

    return {"valid": True}


def extract_text(image: bytes, mime_type: str = "image/jpeg") -> str:
    """
    Send one image to OCR.space and return the text of the first result.

    Raises OcrError for configuration, transport and processing failures.
    """
    settings = _settings()

    payload = {
        "base64Image": f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}",
        "language": "eng",
        "isTable": "true",
        "OCREngine": "2",
        "scale": "true",
        "detectOrientation": "true",
    }

    try:
        resp = requests.post(
            settings["url"],
            data=payload,
            headers={"apikey": settings["api_key"]},
            timeout=settings["timeout"],
        )
        resp.raise_for_status()
        result = resp.json()
    except requests.exceptions.JSONDecodeError as exc:
        raise OcrError("OCR service returned invalid JSON") from exc
    except requests.RequestException as exc:
        logger.error("OCR request failed: %s", exc)
        raise OcrError("OCR service temporarily unavailable") from exc

    if not isinstance(result, dict):
        raise OcrError(f"Unexpected OCR response: {result!r}")

    if result.get("IsErroredOnProcessing"):
        messages = result.get("ErrorMessage") or ["OCR processing failed"]
        if not isinstance(messages, list):
            messages = [messages]
        raise OcrError(f"Failed to process image: {messages[0]}")

    parsed = result.get("ParsedResults") or []
    if not parsed:
        raise OcrError("No text detected in image")

    if not isinstance(parsed, list) or not isinstance(parsed[0], dict):
        raise OcrError("Unexpected OCR response: malformed ParsedResults")

    text = parsed[0].get("ParsedText") or ""
    if not isinstance(text, str):
        raise OcrError("Unexpected OCR response: ParsedText is not text")
    logger.info("OCR text extracted, %d characters", len(text))
    return text


def parse_timetable_from_image(image: bytes, mime_type: str = "image/jpeg") -> Dict[str, Any]:
    """
    Image -> OCR text -> time-slot grid.

    Never raises. Returns
        {"success": True, "data": grid, "message": ..., "rawText": text}
    or
        {"success": False, "error": ..., "details": ...}
    """
    check = validate_image(image, mime_type)
    if not check["valid"]:
        return {"success": False, "error": "Invalid image", "details": check["error"]}

    try:
        text = extract_text(image, mime_type)
    except OcrError as exc:
        return {"success": False, "error": "Failed to extract text from image", "details": str(exc)}

    grid = parse_ocr_text(text)
    logger.info("Days extracted: %s", ", ".join(grid))

    return {"success": True, "data": grid, "message": REVIEW_MESSAGE, "rawText": text}
