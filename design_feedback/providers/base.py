"""
Base Vision Provider Interface

Abstract base class defining the contract for remote vision endpoints,
plus the shared design-review prompt all providers send.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from ..errors import FailureSignal


USER_PROMPT = (
    "Please analyze this website screenshot and identify critical design issues, "
    "errors, and fundamental problems."
)

_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


class VisionPrompt(BaseModel):
    """System and user instructions for one analysis"""

    system: str
    user: str = USER_PROMPT


def build_prompt(viewport: str) -> VisionPrompt:
    """
    Build the design-review prompt for a device context.

    The requested layout (page description line, severity headers with
    bullets, overall assessment) is what the issue extractor understands.

    Args:
        viewport: Viewport label, e.g. "mobile" or "1920x1080"

    Returns:
        VisionPrompt with system and user instructions
    """
    system = f"""You are an experienced web designer and UX expert reviewing website screenshots.
Focus on identifying critical issues, errors, and fundamental problems rather
than minor UI improvements. Consider the device context ({viewport}) when
analyzing. Provide clear, actionable feedback about actual problems.

Key areas to focus on:
- Broken layouts or misaligned elements
- Text that's unreadable or overlapping
- Images that are distorted or improperly sized
- Interactive elements that appear broken or unusable
- Missing critical content or navigation elements
- Accessibility issues that would prevent usage
- Clear user experience blockers

Avoid minor suggestions about aesthetics unless they significantly impact usability.

Format your answer like this:
PAGE DESCRIPTION: <one sentence describing the page>

Critical Issues - <category>:
- <issue>

Major Issues - <category>:
- <issue>

Minor Issues - <category>:
- <issue>

Overall Assessment:
<two or three sentences>

Leave out empty sections. If nothing is wrong, say "No issues found"."""

    return VisionPrompt(system=system)


def media_type_for(image_path: Path) -> str:
    """MIME type for an image file, by extension (PNG when unknown)"""
    return _MEDIA_TYPES.get(image_path.suffix.lower(), "image/png")


class VisionProvider(ABC):
    """
    Abstract base class for remote vision endpoints.

    Providers perform exactly one request per call and never retry
    themselves; retry, timeout and classification belong to the analyzer.

    Subclasses must implement:
    - complete(): Send prompt + image, return the critique text
    - failure_signal(): Normalize an exception raised by complete()
    - name: Property returning provider name
    """

    model: str

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and identification"""

    @abstractmethod
    async def complete(
        self,
        prompt: VisionPrompt,
        image_data: str,
        media_type: str,
    ) -> Optional[str]:
        """
        Send one analysis request.

        Args:
            prompt: System and user instructions
            image_data: Base64-encoded image bytes
            media_type: MIME type of the image

        Returns:
            The model's critique text, or None if the answer had no content

        Raises:
            Any exception of the underlying SDK; see failure_signal()
        """

    @abstractmethod
    def failure_signal(self, error: Exception) -> FailureSignal:
        """
        Translate an exception raised by complete() into a FailureSignal.

        Must accept any exception and never raise.
        """
