"""
Input Validation

Normalizes and bounds-checks command-line input before any browser or
network work starts. Every failure raises InputValidationError.
"""

import re
from typing import Optional, Union
from urllib.parse import urlparse

from .errors import InputValidationError
from .models import VIEWPORT_PRESETS, ViewportSize


_CUSTOM_VIEWPORT = re.compile(r"^(\d+)x(\d+)$")

MIN_WIDTH, MAX_WIDTH = 320, 3840
MIN_HEIGHT, MAX_HEIGHT = 240, 2160
MAX_WAIT_SECONDS = 60


def validate_url(url: Optional[str]) -> str:
    """
    Validate a page URL, adding https:// when no scheme is given.

    Example:
        validate_url("example.com")  # "https://example.com"
    """
    if not url or not url.strip():
        raise InputValidationError("URL is required", field="url")

    candidate = url.strip()
    if not re.match(r"^https?://", candidate, re.IGNORECASE):
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    if not parsed.netloc or " " in parsed.netloc:
        raise InputValidationError("Invalid URL format", field="url")

    return candidate


def validate_viewport(viewport: Optional[str]) -> ViewportSize:
    """
    Resolve a viewport preset ("mobile", "tablet", "desktop") or a custom
    "WIDTHxHEIGHT" size. Defaults to desktop.
    """
    if not viewport:
        width, height = VIEWPORT_PRESETS["desktop"]
        return ViewportSize(label="desktop", width=width, height=height)

    name = viewport.strip().lower()
    if name in VIEWPORT_PRESETS:
        width, height = VIEWPORT_PRESETS[name]
        return ViewportSize(label=name, width=width, height=height)

    match = _CUSTOM_VIEWPORT.match(name)
    if not match:
        raise InputValidationError(
            "Invalid viewport format. Use 'mobile', 'tablet', 'desktop' or 'WIDTHxHEIGHT'",
            field="viewport"
        )

    width, height = int(match.group(1)), int(match.group(2))
    if not MIN_WIDTH <= width <= MAX_WIDTH:
        raise InputValidationError(
            f"Width must be between {MIN_WIDTH} and {MAX_WIDTH}", field="viewport"
        )
    if not MIN_HEIGHT <= height <= MAX_HEIGHT:
        raise InputValidationError(
            f"Height must be between {MIN_HEIGHT} and {MAX_HEIGHT}", field="viewport"
        )

    return ViewportSize(label=f"{width}x{height}", width=width, height=height)


def validate_wait_time(wait: Union[str, int, None]) -> int:
    """Seconds to wait before capture, 0-60"""
    if wait is None or wait == "":
        return 0

    try:
        seconds = int(wait)
    except (TypeError, ValueError):
        raise InputValidationError("Wait time must be a positive number", field="wait")

    if seconds < 0:
        raise InputValidationError("Wait time must be a positive number", field="wait")
    if seconds > MAX_WAIT_SECONDS:
        raise InputValidationError(
            f"Wait time cannot exceed {MAX_WAIT_SECONDS} seconds", field="wait"
        )

    return seconds


def validate_quality(quality: Union[str, int, None]) -> int:
    """JPEG quality, 0-100 (default 90)"""
    if quality is None or quality == "":
        return 90

    try:
        value = int(quality)
    except (TypeError, ValueError):
        raise InputValidationError("Quality must be between 0 and 100", field="quality")

    if not 0 <= value <= 100:
        raise InputValidationError("Quality must be between 0 and 100", field="quality")

    return value


def validate_format(output_format: Optional[str]) -> str:
    """Output format: "text" (default) or "json" """
    if not output_format:
        return "text"

    normalized = output_format.strip().lower()
    if normalized not in ("text", "json"):
        raise InputValidationError("Format must be 'json' or 'text'", field="format")

    return normalized
