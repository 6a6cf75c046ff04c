"""
Screenshot Capture Module

Captures screenshots of web pages using Playwright.
Handles navigation, settle time, element waiting and viewport configuration.
"""

import logging
import re
import tempfile
import time
from pathlib import Path
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout
from playwright.async_api import async_playwright

from .errors import CaptureError
from .models import ViewportSize


logger = logging.getLogger(__name__)


class ScreenshotCapturer:
    """
    Captures screenshots of web pages using a headless Playwright browser.

    Features:
    - Viewport presets or custom sizes
    - Optional settle time and element waiting
    - Full-page or viewport-only captures
    - PNG or JPEG (with quality) chosen by output extension
    - Temporary output paths when none is given

    Example:
        capturer = ScreenshotCapturer()
        path = await capturer.capture(
            url="https://example.com",
            viewport=ViewportSize(label="mobile", width=375, height=812),
            wait_for="main"
        )
    """

    def __init__(self, navigation_timeout: int = 30000, temp_dir: Optional[Path] = None):
        """
        Initialize screenshot capturer.

        Args:
            navigation_timeout: Milliseconds allowed for page load and element waits
            temp_dir: Directory for temporary screenshots (system temp by default)
        """
        self.navigation_timeout = navigation_timeout
        self.temp_dir = temp_dir or Path(tempfile.gettempdir())

    async def capture(
        self,
        url: str,
        viewport: ViewportSize,
        output_path: Optional[Path] = None,
        wait_seconds: int = 0,
        wait_for: Optional[str] = None,
        full_page: bool = True,
        quality: int = 90
    ) -> Path:
        """
        Capture screenshot of a web page.

        Workflow:
        1. Launch headless Chromium browser
        2. Navigate to URL
        3. Optionally wait for a selector and/or a fixed settle time
        4. Capture screenshot
        5. Return path to saved image

        Args:
            url: Page URL to capture (http(s)://)
            viewport: Viewport dimensions
            output_path: Where to save. If None, a temporary path is generated
            wait_seconds: Extra seconds to wait before capturing
            wait_for: CSS selector to wait for before capture
            full_page: Capture full scrollable page (True) or viewport only (False)
            quality: JPEG quality 0-100 (ignored for PNG)

        Returns:
            Path to saved screenshot file

        Raises:
            CaptureError: If the browser fails to launch, navigate or capture
        """
        screenshot_path = Path(output_path) if output_path else self.temp_path(url)
        screenshot_path.parent.mkdir(parents=True, exist_ok=True)
        image_type = "png" if screenshot_path.suffix.lower() == ".png" else "jpeg"

        logger.debug(
            "Capturing %s at %dx%d -> %s (%s, full_page=%s)",
            url, viewport.width, viewport.height, screenshot_path, image_type, full_page
        )
        started = time.monotonic()

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True)
                try:
                    page = await browser.new_page(viewport=viewport.as_playwright())
                    await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout)

                    if wait_for:
                        try:
                            await page.wait_for_selector(wait_for, timeout=self.navigation_timeout)
                        except PlaywrightTimeout:
                            raise CaptureError(
                                f"Timeout waiting for element: {wait_for}",
                                hint="Screenshot capture timed out. The page took too long to load."
                            )

                    if wait_seconds:
                        await page.wait_for_timeout(wait_seconds * 1000)

                    options = {"path": str(screenshot_path), "full_page": full_page, "type": image_type}
                    if image_type == "jpeg":
                        options["quality"] = quality
                    await page.screenshot(**options)
                finally:
                    await browser.close()

        except CaptureError:
            raise
        except PlaywrightTimeout as e:
            raise CaptureError(
                f"Screenshot capture timed out: {e}",
                hint="The page took too long to load."
            ) from e
        except PlaywrightError as e:
            raise CaptureError(
                f"Screenshot capture failed: {e}",
                hint="The website might be unreachable or the page might have failed to load."
            ) from e

        if not screenshot_path.exists():
            raise CaptureError(f"Screenshot file was not created: {screenshot_path}")

        logger.info(
            "Screenshot captured in %dms (%dKB)",
            (time.monotonic() - started) * 1000,
            screenshot_path.stat().st_size // 1024
        )
        return screenshot_path

    def temp_path(self, url: str) -> Path:
        """
        Generate a unique temporary screenshot path for a URL.

        Format: screenshot-{url_fragment}-{millis}.png
        """
        safe_name = re.sub(r"[^a-z0-9]", "-", url.lower())[:60]
        millis = int(time.time() * 1000)
        return self.temp_dir / f"screenshot-{safe_name}-{millis}.png"
