"""
Design Feedback - AI design critique for websites

Captures a screenshot of a web page and asks a vision model for a design
critique, with retry/backoff around the remote call and a heuristic
extractor that turns the free-form critique into structured issues.

Supports multiple vision providers:
- OpenAI GPT-4o (default)
- Anthropic Claude
"""

__version__ = "0.1.0"

from .analyzer import VisionAnalyzer
from .capture import ScreenshotCapturer
from .errors import ErrorKind, classify
from .extractor import extract_issues
from .models import (
    AnalysisFailure,
    AnalysisRequest,
    AnalysisSuccess,
    IssueExtraction,
    RawAnalysis,
    RetryPolicy,
    StructuredIssue,
)
from .service import WebsiteReviewer

__all__ = [
    "AnalysisFailure",
    "AnalysisRequest",
    "AnalysisSuccess",
    "ErrorKind",
    "IssueExtraction",
    "RawAnalysis",
    "RetryPolicy",
    "ScreenshotCapturer",
    "StructuredIssue",
    "VisionAnalyzer",
    "WebsiteReviewer",
    "classify",
    "extract_issues",
]
