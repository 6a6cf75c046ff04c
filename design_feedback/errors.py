"""
Error Taxonomy

Closed set of failure kinds for remote analysis, the pure classifier that
maps a normalized failure signal onto it, and the application exceptions
raised by the CLI collaborators (config, validation, capture, output).
"""

from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel


class ExitCode(IntEnum):
    """Process exit codes, one per failure class so scripts can branch on them"""

    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIGURATION_ERROR = 2
    NETWORK_ERROR = 3
    API_ERROR = 4
    FILE_SYSTEM_ERROR = 5
    INVALID_INPUT = 6
    SCREENSHOT_ERROR = 7
    TIMEOUT_ERROR = 8
    INTERRUPTED = 130


class ErrorKind(str, Enum):
    """Failure categories used for retry decisions and user messaging"""

    RATE_LIMITED = "rate_limited"
    INVALID_CREDENTIAL = "invalid_credential"
    MALFORMED_REQUEST = "malformed_request"
    UNSUPPORTED_MEDIA = "unsupported_media"
    REMOTE_SERVER_ERROR = "remote_server_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    UNEXPECTED_RESPONSE = "unexpected_response"
    UNKNOWN = "unknown"
    # Local image could not be read; never reaches the network
    INPUT_UNAVAILABLE = "input_unavailable"


class FailureSignal(BaseModel):
    """
    Normalized view of one failed attempt.

    Provider adapters translate SDK exceptions into this shape so the
    classifier never has to know which client library raised.

    Attributes:
        status_code: HTTP status if the server answered
        network: True for DNS/connection/TLS failures (no HTTP status)
        timed_out: True if the attempt exceeded its timeout window
        empty_response: True for a 2xx answer without usable content
        message: Raw error text (may still contain secrets)
    """

    status_code: Optional[int] = None
    network: bool = False
    timed_out: bool = False
    empty_response: bool = False
    message: str = ""


class ClassifiedError(BaseModel):
    """Result of classifying a FailureSignal"""

    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    retryable: bool


_STATUS_KINDS = {
    429: ErrorKind.RATE_LIMITED,
    401: ErrorKind.INVALID_CREDENTIAL,
    400: ErrorKind.MALFORMED_REQUEST,
    415: ErrorKind.UNSUPPORTED_MEDIA,
}

RETRYABLE_KINDS = frozenset({
    ErrorKind.RATE_LIMITED,
    ErrorKind.REMOTE_SERVER_ERROR,
    ErrorKind.NETWORK_ERROR,
    ErrorKind.TIMEOUT,
})


def classify(signal: FailureSignal) -> ClassifiedError:
    """
    Map a failure signal to exactly one ErrorKind.

    Total by construction: the final branch is an UNKNOWN fallback.
    Unrecognized 4xx statuses are UNKNOWN and not retryable; an UNKNOWN
    failure without any status is retried like a transient fault.

    Args:
        signal: Normalized failure from one attempt

    Returns:
        ClassifiedError with kind, message, status and retry eligibility
    """
    status = signal.status_code

    if signal.timed_out:
        kind = ErrorKind.TIMEOUT
    elif signal.empty_response:
        kind = ErrorKind.UNEXPECTED_RESPONSE
    elif status in _STATUS_KINDS:
        kind = _STATUS_KINDS[status]
    elif status is not None and status >= 500:
        kind = ErrorKind.REMOTE_SERVER_ERROR
    elif status is not None and 400 <= status < 500:
        kind = ErrorKind.UNKNOWN
    elif signal.network:
        kind = ErrorKind.NETWORK_ERROR
    else:
        kind = ErrorKind.UNKNOWN

    if kind is ErrorKind.UNKNOWN:
        retryable = status is None or not 400 <= status < 500
    else:
        retryable = kind in RETRYABLE_KINDS

    return ClassifiedError(
        kind=kind,
        message=signal.message or FAILURE_MESSAGES[kind],
        status_code=status,
        retryable=retryable,
    )


FAILURE_MESSAGES = {
    ErrorKind.RATE_LIMITED: "Vision API rate limit exceeded. Please wait a moment and try again.",
    ErrorKind.INVALID_CREDENTIAL: "Invalid API key. Please check your configuration.",
    ErrorKind.MALFORMED_REQUEST: "The vision API rejected the request as malformed.",
    ErrorKind.UNSUPPORTED_MEDIA: "The vision API could not process the screenshot image format.",
    ErrorKind.REMOTE_SERVER_ERROR: "Vision API server error. The service might be temporarily unavailable.",
    ErrorKind.NETWORK_ERROR: "Network error while calling the vision API. Please check your internet connection.",
    ErrorKind.TIMEOUT: "Analysis timed out. The AI model took too long to respond.",
    ErrorKind.UNEXPECTED_RESPONSE: "Received an empty response from the AI model. Please try again.",
    ErrorKind.UNKNOWN: "Failed to analyze the screenshot. The AI model might be temporarily unavailable.",
    ErrorKind.INPUT_UNAVAILABLE: "Unable to read the screenshot file. Please check it exists and is readable.",
}

_KIND_EXIT_CODES = {
    ErrorKind.RATE_LIMITED: ExitCode.API_ERROR,
    ErrorKind.INVALID_CREDENTIAL: ExitCode.API_ERROR,
    ErrorKind.MALFORMED_REQUEST: ExitCode.API_ERROR,
    ErrorKind.UNSUPPORTED_MEDIA: ExitCode.API_ERROR,
    ErrorKind.REMOTE_SERVER_ERROR: ExitCode.API_ERROR,
    ErrorKind.NETWORK_ERROR: ExitCode.NETWORK_ERROR,
    ErrorKind.TIMEOUT: ExitCode.TIMEOUT_ERROR,
    ErrorKind.INPUT_UNAVAILABLE: ExitCode.FILE_SYSTEM_ERROR,
    ErrorKind.UNEXPECTED_RESPONSE: ExitCode.GENERAL_ERROR,
    ErrorKind.UNKNOWN: ExitCode.GENERAL_ERROR,
}


def exit_code_for(kind: ErrorKind) -> ExitCode:
    """Exit code for a failure kind"""
    return _KIND_EXIT_CODES[kind]


def describe_failure(kind: ErrorKind, status_code: Optional[int] = None) -> str:
    """Stable, human-readable message for a failure kind"""
    message = FAILURE_MESSAGES[kind]
    if status_code is not None:
        message += f"\nStatus code: {status_code}"
    return message


def mask_secret(secret: Optional[str], visible: int = 7) -> str:
    """Short, non-reversible prefix of a credential for diagnostics"""
    if not secret:
        return "<none>"
    return secret[:visible] + "..."


def redact(text: str, secret: Optional[str]) -> str:
    """Replace every occurrence of a credential with its masked prefix"""
    if not secret or not text:
        return text
    return text.replace(secret, mask_secret(secret))


class DesignFeedbackError(Exception):
    """
    Base class for failures outside the remote-analysis core.

    Carries the exit code the CLI should terminate with.
    """

    exit_code = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def user_message(self) -> str:
        """Message plus remediation hint, if any"""
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message


class ConfigurationError(DesignFeedbackError):
    """Missing API key or unreadable configuration file"""

    exit_code = ExitCode.CONFIGURATION_ERROR


class InputValidationError(DesignFeedbackError):
    """Invalid command-line input"""

    exit_code = ExitCode.INVALID_INPUT

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, hint=f"Field: {field}" if field else None)
        self.field = field


class CaptureError(DesignFeedbackError):
    """Screenshot could not be captured"""

    exit_code = ExitCode.SCREENSHOT_ERROR


class OutputWriteError(DesignFeedbackError):
    """Rendered output could not be written to disk"""

    exit_code = ExitCode.FILE_SYSTEM_ERROR

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, hint=f"File: {path}" if path else None)
        self.path = path
