"""
Website Review Orchestrator

Coordinates screenshot capture and vision analysis into one website
review, enriching the result with timing and location metadata.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from .analyzer import VisionAnalyzer
from .capture import ScreenshotCapturer
from .models import AnalysisOutcome, AnalysisRequest, AnalysisSuccess, ViewportSize


logger = logging.getLogger(__name__)


class WebsiteReviewer:
    """
    Orchestrates the complete website review workflow.

    Coordinates:
    1. Screenshot capture (via Playwright)
    2. Vision analysis with retry (via VisionAnalyzer)
    3. Metadata enrichment
    4. Temporary screenshot cleanup

    Example:
        reviewer = WebsiteReviewer(VisionAnalyzer(provider))
        outcome = await reviewer.review(
            url="https://example.com",
            viewport=ViewportSize(label="mobile", width=375, height=812),
            api_key=api_key,
            structured=True
        )
    """

    def __init__(
        self,
        analyzer: VisionAnalyzer,
        capturer: Optional[ScreenshotCapturer] = None
    ):
        """
        Initialize website reviewer.

        Args:
            analyzer: Configured vision analyzer
            capturer: Screenshot capturer (default: ScreenshotCapturer())
        """
        self.analyzer = analyzer
        self.capturer = capturer or ScreenshotCapturer()

    async def review(
        self,
        url: str,
        viewport: ViewportSize,
        api_key: str,
        structured: bool = False,
        output_path: Optional[Path] = None,
        wait_seconds: int = 0,
        wait_for: Optional[str] = None,
        full_page: bool = True,
        quality: int = 90
    ) -> AnalysisOutcome:
        """
        Capture and analyze a website.

        The screenshot is kept when output_path is given, otherwise it is
        written to a temporary file that is deleted afterwards.

        Args:
            url: Validated page URL
            viewport: Viewport to capture and to describe to the model
            api_key: Credential for the vision provider
            structured: Also extract structured issues
            output_path: Where to keep the screenshot
            wait_seconds: Settle time before capture
            wait_for: CSS selector to wait for before capture
            full_page: Capture the full scrollable page
            quality: JPEG quality

        Returns:
            AnalysisOutcome; on success the RawAnalysis carries url,
            screenshot_path and analysis_time_ms

        Raises:
            CaptureError: If the screenshot could not be taken
        """
        started = time.monotonic()
        logger.info("Starting website analysis: %s (%s)", url, viewport.label)

        screenshot_path = await self.capturer.capture(
            url=url,
            viewport=viewport,
            output_path=output_path,
            wait_seconds=wait_seconds,
            wait_for=wait_for,
            full_page=full_page,
            quality=quality
        )
        is_temporary = output_path is None

        try:
            outcome = await self.analyzer.analyze(
                AnalysisRequest(
                    image_path=screenshot_path,
                    viewport=viewport.label,
                    api_key=api_key
                ),
                structured=structured
            )
        finally:
            if is_temporary:
                await asyncio.to_thread(_remove_quietly, screenshot_path)

        if not isinstance(outcome, AnalysisSuccess):
            return outcome

        elapsed_ms = int((time.monotonic() - started) * 1000)
        enriched = outcome.analysis.model_copy(update={
            "url": url,
            "screenshot_path": None if is_temporary else str(screenshot_path),
            "analysis_time_ms": elapsed_ms
        })
        logger.info("Website analysis completed in %dms", elapsed_ms)

        return outcome.model_copy(update={"analysis": enriched})


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
        logger.debug("Temporary screenshot cleaned up: %s", path)
    except OSError as e:
        logger.warning("Failed to clean up temporary screenshot %s: %s", path, e)
