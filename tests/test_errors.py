import pytest

from core.errors import (
    AnalysisError,
    LLMResponseError,
    ToolUnavailableError,
    ValidationFailedError,
    sanitize_error,
)
from core.models import StepResult


@pytest.mark.parametrize("message, leaked", [
    ("GET https://www.googleapis.com/pagespeedonline/v5/runPagespeed?url=x&key=AIzaSyA1234567890123456789012345678901", "AIza"),
    ("Invalid x-api-key sk-ant-REDACTED", "sk-ant-api03"),
    ("config: api_key=supersecretvalue rejected", "supersecretvalue"),
    ("https://example.com/v1?key=plainsecret&alt=json", "plainsecret"),
])
def test_sanitize_error_redacts_keys(message, leaked):
    cleaned = sanitize_error(message)
    assert leaked not in cleaned
    assert "REDACTED" in cleaned


def test_sanitize_error_leaves_plain_text():
    assert sanitize_error("Connection reset by peer") == "Connection reset by peer"
    assert sanitize_error("") == ""


def test_error_defaults_and_body():
    error = LLMResponseError()
    assert error.message == "Invalid JSON response from AI"
    assert error.to_dict() == {
        "success": False,
        "error": "LLM_RESPONSE_INVALID",
        "message": "Invalid JSON response from AI",
    }
    assert ValidationFailedError("bad").status_code == 400
    assert AnalysisError("boom", code="CUSTOM").code == "CUSTOM"


def test_error_message_is_sanitized():
    error = AnalysisError("PageSpeed failed for key=AIzaSyA1234567890123456789012345678901")
    assert "AIza" not in str(error)


class TestStepResult:
    def test_success(self):
        result = StepResult.success({"score": 1})
        assert result.is_ok
        assert result.error is None

    def test_unavailable_tool(self):
        result = StepResult.from_exception(ToolUnavailableError("PAGEAUDIT_COMMAND is not configured"))
        assert result.status == "unavailable"
        assert result.code == "TOOL_UNAVAILABLE"
        assert result.data is None

    def test_failed_analysis(self):
        result = StepResult.from_exception(LLMResponseError())
        assert result.status == "failed"
        assert result.code == "LLM_RESPONSE_INVALID"

    def test_unexpected_exception(self):
        result = StepResult.from_exception(KeyError("why"))
        assert result.status == "failed"
        assert result.code == "STEP_FAILED"
        assert result.error == "'why'"
