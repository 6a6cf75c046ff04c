"""
Vision Analyzer

Performs one logical "analyze this screenshot" operation against a remote
vision endpoint. Each attempt runs under its own timeout; transient
failures (rate limits, 5xx, network errors, timeouts) are retried with
exponential backoff, client errors stop immediately.

Nothing raised by the provider crosses analyze(): every failure comes back
as an AnalysisFailure. Only cancellation propagates, so callers can abandon
an analysis (and its pending backoff) at any time.
"""

import asyncio
import base64
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

from .errors import ClassifiedError, ErrorKind, FailureSignal, classify, redact
from .extractor import extract_issues
from .models import (
    AnalysisFailure,
    AnalysisOutcome,
    AnalysisRequest,
    AnalysisSuccess,
    RawAnalysis,
    RetryPolicy,
)
from .providers.base import VisionPrompt, VisionProvider, build_prompt, media_type_for


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class VisionAnalyzer:
    """
    Resilient front end for a vision provider.

    Holds no per-call state, so one analyzer can serve several concurrent
    analyses.

    Example:
        analyzer = VisionAnalyzer(OpenAIProvider(api_key), RetryPolicy(timeout=60))
        outcome = await analyzer.analyze(
            AnalysisRequest(image_path=path, viewport="mobile", api_key=api_key),
            structured=True
        )
        if outcome.ok:
            print(outcome.extraction.summary)
    """

    def __init__(
        self,
        provider: VisionProvider,
        policy: Optional[RetryPolicy] = None,
        sleep: Sleep = asyncio.sleep
    ):
        """
        Initialize analyzer.

        Args:
            provider: Remote vision endpoint adapter
            policy: Retry/timeout policy (defaults: 4 attempts, 1s base delay, 30s timeout)
            sleep: Coroutine used for backoff delays
        """
        self.provider = provider
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def analyze(
        self,
        request: AnalysisRequest,
        structured: bool = False
    ) -> AnalysisOutcome:
        """
        Analyze a screenshot.

        Args:
            request: Image path, viewport label and credential
            structured: Also extract page description, summary and issues

        Returns:
            AnalysisSuccess with the raw critique (and extraction when
            structured), or AnalysisFailure describing why it failed
        """
        logger.info("Starting vision analysis (viewport: %s)", request.viewport)

        try:
            image_data = await asyncio.to_thread(_read_image_base64, request.image_path)
        except OSError as e:
            logger.error("Failed to read image %s: %s", request.image_path, e)
            return AnalysisFailure(
                kind=ErrorKind.INPUT_UNAVAILABLE,
                message=f"Failed to read image file {request.image_path}: {e.strerror or e}",
                retryable=False,
                attempts=0
            )

        outcome = await self._call_with_retry(request, image_data)

        if structured and isinstance(outcome, AnalysisSuccess):
            outcome = outcome.model_copy(
                update={"extraction": extract_issues(outcome.analysis.text)}
            )

        return outcome

    async def _call_with_retry(
        self,
        request: AnalysisRequest,
        image_data: str
    ) -> AnalysisOutcome:
        policy = self.policy
        prompt = build_prompt(request.viewport)
        media_type = media_type_for(request.image_path)

        logger.debug(
            "Calling %s/%s: image=%dKB attempts=%d timeout=%gs key=%s",
            self.provider.name,
            self.provider.model,
            len(image_data) // 1024,
            policy.max_attempts,
            policy.timeout,
            request.key_prefix
        )

        last_error: Optional[ClassifiedError] = None

        for attempt in range(policy.max_attempts):
            if attempt > 0:
                delay = policy.delay_for(attempt)
                logger.info(
                    "Retrying request after %gs (retry %d/%d)",
                    delay, attempt, policy.max_attempts - 1
                )
                await self._sleep(delay)

            last_error, text = await self._attempt(prompt, image_data, media_type, attempt)

            if last_error is None:
                logger.info("Vision analysis completed successfully")
                return AnalysisSuccess(
                    analysis=RawAnalysis(
                        text=text,
                        model=self.provider.model,
                        viewport=request.viewport
                    )
                )

            if not last_error.retryable:
                logger.error(
                    "Not retrying %s failure (status %s)",
                    last_error.kind.value, last_error.status_code
                )
                return _failure(last_error, attempt + 1, request.api_key)

        logger.error("All %d attempts exhausted", policy.max_attempts)
        return _failure(last_error, policy.max_attempts, request.api_key)

    async def _attempt(
        self,
        prompt: VisionPrompt,
        image_data: str,
        media_type: str,
        attempt: int
    ) -> tuple:
        """One request raced against the timeout: (error, None) or (None, text)"""
        total = self.policy.max_attempts
        logger.debug("Attempting request (attempt %d/%d)", attempt + 1, total)
        started = time.monotonic()

        try:
            text = await asyncio.wait_for(
                self.provider.complete(prompt, image_data, media_type),
                timeout=self.policy.timeout
            )
        except asyncio.TimeoutError:
            signal = FailureSignal(
                timed_out=True,
                message=f"Request timed out after {self.policy.timeout:g}s"
            )
        except Exception as e:
            signal = self.provider.failure_signal(e)
        else:
            if text and text.strip():
                logger.debug("Request succeeded in %dms", (time.monotonic() - started) * 1000)
                return None, text
            signal = FailureSignal(
                empty_response=True,
                message="No analysis content received from the vision API"
            )

        error = classify(signal)
        logger.warning(
            "Request failed (attempt %d/%d): %s%s",
            attempt + 1,
            total,
            error.kind.value,
            f" [HTTP {error.status_code}]" if error.status_code is not None else ""
        )
        return error, None


def _failure(error: ClassifiedError, attempts: int, api_key: str) -> AnalysisFailure:
    return AnalysisFailure(
        kind=error.kind,
        message=redact(error.message, api_key),
        status_code=error.status_code,
        retryable=error.retryable,
        attempts=attempts
    )


def _read_image_base64(image_path: Path) -> str:
    data = image_path.read_bytes()
    if not data:
        raise OSError(f"Image file is empty: {image_path}")
    return base64.b64encode(data).decode("utf-8")
