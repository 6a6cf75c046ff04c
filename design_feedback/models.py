"""
Data Models for Design Feedback

Type-safe Pydantic models for requests, raw and structured analyses,
tagged outcomes, retry policy and configuration.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ErrorKind, mask_secret


class Severity(str, Enum):
    """How urgently an issue should be fixed"""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


VIEWPORT_PRESETS = {
    "mobile": (375, 812),
    "tablet": (768, 1024),
    "desktop": (1920, 1080),
}


class ViewportSize(BaseModel):
    """
    Device context used for capture and for prompting the model.

    Attributes:
        label: Preset name ("mobile") or "WIDTHxHEIGHT"
        width: Viewport width in CSS pixels
        height: Viewport height in CSS pixels
    """

    model_config = ConfigDict(frozen=True)

    label: str
    width: int = Field(ge=320, le=3840)
    height: int = Field(ge=240, le=2160)

    def as_playwright(self) -> dict:
        return {"width": self.width, "height": self.height}


class AnalysisRequest(BaseModel):
    """
    One "analyze this image" request.

    Attributes:
        image_path: Path to an already-captured screenshot
        viewport: Viewport label describing the device context
        api_key: Credential for the remote endpoint (never shown in repr)
    """

    model_config = ConfigDict(frozen=True)

    image_path: Path
    viewport: str
    api_key: str = Field(repr=False)

    @property
    def key_prefix(self) -> str:
        return mask_secret(self.api_key)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RawAnalysis(BaseModel):
    """
    Free-form critique returned by the vision model.

    Attributes:
        text: The model's critique
        model: Model identifier that produced it
        produced_at: When the critique was received
        viewport: Viewport label it was produced for
        url: Analyzed page (set by the review service)
        screenshot_path: Screenshot location (set by the review service)
        analysis_time_ms: Wall-clock time of capture + analysis
    """

    model_config = ConfigDict(frozen=True)

    text: str
    model: str
    produced_at: datetime = Field(default_factory=_utcnow)
    viewport: str = "desktop"
    url: Optional[str] = None
    screenshot_path: Optional[str] = None
    analysis_time_ms: Optional[int] = None


class StructuredIssue(BaseModel):
    """A single severity- and category-tagged finding"""

    severity: Severity = Severity.MAJOR
    category: str = Field(default="General", min_length=1)
    description: str


class IssueExtraction(BaseModel):
    """
    Structured view of a free-form critique.

    An empty issue list is a meaningful result: the page was judged clean.
    """

    page_description: str
    summary: str
    issues: list[StructuredIssue] = Field(default_factory=list)


class AnalysisSuccess(BaseModel):
    status: Literal["success"] = "success"
    analysis: RawAnalysis
    extraction: Optional[IssueExtraction] = None

    @property
    def ok(self) -> bool:
        return True


class AnalysisFailure(BaseModel):
    """
    Terminal failure of one analysis.

    Attributes:
        kind: Failure category
        message: Detail with any credential masked
        status_code: HTTP status when the server answered
        retryable: Whether the failure class is transient
        attempts: How many remote calls were made (0 for local failures)
    """

    status: Literal["failure"] = "failure"
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    retryable: bool = False
    attempts: int = Field(default=0, ge=0)

    @property
    def ok(self) -> bool:
        return False


AnalysisOutcome = Annotated[
    Union[AnalysisSuccess, AnalysisFailure],
    Field(discriminator="status"),
]


class RetryPolicy(BaseModel):
    """
    Timeout, retry and backoff policy for remote calls.

    Attributes:
        max_attempts: Total attempts, initial call included
        base_delay: Seconds to wait before the first retry
        multiplier: Backoff growth per retry
        timeout: Seconds allowed for each individual attempt
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=4, ge=1, le=10)
    base_delay: float = Field(default=1.0, ge=0)
    multiplier: float = Field(default=2.0, ge=1)
    timeout: float = Field(default=30.0, gt=0, le=600)

    def delay_for(self, attempt: int) -> float:
        """Backoff before the given zero-based attempt"""
        if attempt <= 0:
            return 0.0
        return self.base_delay * self.multiplier ** (attempt - 1)


class Config(BaseModel):
    """
    Configuration for the design feedback tool.

    Loaded from .env files and the environment.

    Attributes:
        openai_api_key: OpenAI API key (optional)
        anthropic_api_key: Anthropic API key (optional)
        vision_provider: Which provider to use by default
        vision_model: Model override; provider default when unset
        request_timeout: Per-attempt timeout in seconds
        max_retries: Retries after the initial attempt
        retry_delay: Base backoff delay in seconds
    """

    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    vision_provider: Literal["openai", "anthropic"] = "openai"
    vision_model: Optional[str] = None
    request_timeout: float = Field(default=30.0, ge=5, le=600)
    max_retries: int = Field(default=3, ge=0, le=9)
    retry_delay: float = Field(default=1.0, ge=0)

    @field_validator("openai_api_key", "anthropic_api_key", "vision_model")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty environment values as unset"""
        if v is not None and not v.strip():
            return None
        return v

    def api_key_for(self, provider: str) -> Optional[str]:
        if provider == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_retries + 1,
            base_delay=self.retry_delay,
            timeout=self.request_timeout,
        )
