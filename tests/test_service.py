"""
Tests for service.py: WebsiteReviewer orchestration and cleanup.
"""
from pathlib import Path

import pytest

from design_feedback.analyzer import VisionAnalyzer
from design_feedback.errors import CaptureError, ErrorKind
from design_feedback.models import RetryPolicy, ViewportSize
from design_feedback.service import WebsiteReviewer
from tests.fakes import API_KEY, PNG_BYTES, FakeProvider, FakeStatusError


MOBILE = ViewportSize(label="mobile", width=375, height=812)


class StubCapturer:
    """Writes a PNG where the real capturer would and records the call"""

    def __init__(self, temp_dir: Path, error: Exception = None):
        self.temp_dir = temp_dir
        self.error = error
        self.calls = []

    async def capture(self, url, viewport, output_path=None, **options):
        self.calls.append({"url": url, "viewport": viewport, "output_path": output_path, **options})
        if self.error:
            raise self.error
        path = output_path or self.temp_dir / "screenshot-temp.png"
        path.write_bytes(PNG_BYTES)
        return path


def make_reviewer(tmp_path, responses, recording_sleep, **capturer_kwargs):
    provider = FakeProvider(responses)
    analyzer = VisionAnalyzer(provider, RetryPolicy(), sleep=recording_sleep)
    capturer = StubCapturer(tmp_path, **capturer_kwargs)
    return WebsiteReviewer(analyzer, capturer), capturer, provider


@pytest.mark.asyncio
async def test_temporary_screenshot_is_removed(tmp_path, recording_sleep):
    reviewer, capturer, _ = make_reviewer(tmp_path, ["- Logo is cropped"], recording_sleep)

    outcome = await reviewer.review("https://example.com", MOBILE, API_KEY)

    assert outcome.ok
    assert not (tmp_path / "screenshot-temp.png").exists()
    assert outcome.analysis.url == "https://example.com"
    assert outcome.analysis.viewport == "mobile"
    assert outcome.analysis.screenshot_path is None
    assert outcome.analysis.analysis_time_ms >= 0
    assert outcome.extraction is None


@pytest.mark.asyncio
async def test_requested_screenshot_is_kept(tmp_path, recording_sleep):
    reviewer, capturer, _ = make_reviewer(tmp_path, ["- Logo is cropped"], recording_sleep)
    target = tmp_path / "keep.png"

    outcome = await reviewer.review(
        "https://example.com", MOBILE, API_KEY, structured=True, output_path=target
    )

    assert target.exists()
    assert outcome.analysis.screenshot_path == str(target)
    assert outcome.extraction.issues[0].description == "Logo is cropped"


@pytest.mark.asyncio
async def test_capture_options_are_forwarded(tmp_path, recording_sleep):
    reviewer, capturer, _ = make_reviewer(tmp_path, ["ok"], recording_sleep)

    await reviewer.review(
        "https://example.com",
        MOBILE,
        API_KEY,
        wait_seconds=3,
        wait_for="#app",
        full_page=False,
        quality=70
    )

    call = capturer.calls[0]
    assert call["viewport"] == MOBILE
    assert call["wait_seconds"] == 3
    assert call["wait_for"] == "#app"
    assert call["full_page"] is False
    assert call["quality"] == 70


@pytest.mark.asyncio
async def test_failure_still_removes_temporary_screenshot(tmp_path, recording_sleep):
    reviewer, _, provider = make_reviewer(tmp_path, [FakeStatusError(401)], recording_sleep)

    outcome = await reviewer.review("https://example.com", MOBILE, API_KEY)

    assert not outcome.ok
    assert outcome.kind == ErrorKind.INVALID_CREDENTIAL
    assert len(provider.calls) == 1
    assert not (tmp_path / "screenshot-temp.png").exists()


@pytest.mark.asyncio
async def test_capture_error_propagates(tmp_path, recording_sleep):
    reviewer, _, provider = make_reviewer(
        tmp_path, ["ok"], recording_sleep, error=CaptureError("Screenshot capture failed")
    )

    with pytest.raises(CaptureError):
        await reviewer.review("https://example.com", MOBILE, API_KEY)
    assert provider.calls == []
