"""
Tests for models.py: retry policy, outcomes and configuration.
"""
import pytest
from pydantic import TypeAdapter, ValidationError

from design_feedback.errors import ErrorKind
from design_feedback.models import (
    AnalysisFailure,
    AnalysisOutcome,
    AnalysisSuccess,
    Config,
    RawAnalysis,
    RetryPolicy,
    Severity,
    StructuredIssue,
    ViewportSize,
)


class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 4
        assert policy.base_delay == 1.0
        assert policy.multiplier == 2.0
        assert policy.timeout == 30.0

    @pytest.mark.parametrize("attempt, delay", [(0, 0.0), (1, 1.0), (2, 2.0), (3, 4.0)])
    def test_exponential_delay(self, attempt, delay):
        assert RetryPolicy().delay_for(attempt) == delay

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"base_delay": -1},
        {"multiplier": 0.5},
        {"timeout": 0},
    ])
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            RetryPolicy(**kwargs)


class TestOutcome:
    def test_discriminated_parsing(self):
        adapter = TypeAdapter(AnalysisOutcome)

        success = adapter.validate_python({
            "status": "success",
            "analysis": {"text": "ok", "model": "gpt-4o"},
        })
        failure = adapter.validate_python({
            "status": "failure",
            "kind": "rate_limited",
            "message": "slow down",
            "status_code": 429,
            "retryable": True,
            "attempts": 4,
        })

        assert isinstance(success, AnalysisSuccess) and success.ok
        assert isinstance(failure, AnalysisFailure) and not failure.ok
        assert failure.kind == ErrorKind.RATE_LIMITED

    def test_raw_analysis_timestamp_is_utc(self):
        analysis = RawAnalysis(text="ok", model="gpt-4o")
        assert analysis.produced_at.utcoffset().total_seconds() == 0

    def test_issue_category_cannot_be_empty(self):
        with pytest.raises(ValidationError):
            StructuredIssue(category="", description="x")


class TestViewportSize:
    def test_playwright_viewport(self):
        assert ViewportSize(label="mobile", width=375, height=812).as_playwright() == {
            "width": 375,
            "height": 812,
        }

    def test_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            ViewportSize(label="tiny", width=100, height=100)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.vision_provider == "openai"
        assert config.vision_model is None
        assert config.retry_policy() == RetryPolicy()

    def test_blank_values_are_unset(self):
        config = Config(openai_api_key="  ", vision_model="")
        assert config.openai_api_key is None
        assert config.vision_model is None

    def test_api_key_for_provider(self):
        config = Config(openai_api_key="sk-openai", anthropic_api_key="sk-ant")
        assert config.api_key_for("openai") == "sk-openai"
        assert config.api_key_for("anthropic") == "sk-ant"

    def test_retry_policy_from_settings(self):
        policy = Config(max_retries=1, retry_delay=0.25, request_timeout=60).retry_policy()
        assert policy.max_attempts == 2
        assert policy.base_delay == 0.25
        assert policy.timeout == 60

    def test_rejects_unknown_provider(self):
        with pytest.raises(ValidationError):
            Config(vision_provider="local")
