"""
Exception hierarchy for the analysis service.

Every error carries a machine readable ``code`` that ends up in the
``error`` field of API responses and in failed step results.
"""

import re

_SECRET_PATTERNS = [
    (re.compile(r"AIza[0-9A-Za-z_\-]{30,}"), "[REDACTED_API_KEY]"),
    (re.compile(r"sk-[0-9A-Za-z_\-]{20,}"), "[REDACTED_API_KEY]"),
    (re.compile(r"(api[_-]?key\s*[:=]\s*)[^\s&,'\"]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"([?&]key=)[^\s&'\"]+", re.IGNORECASE), r"\1[REDACTED]"),
]


def sanitize_error(message: str) -> str:
    """Strip API keys from an error message before it is logged or returned."""
    if not message:
        return ""
    for pattern, replacement in _SECRET_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class AnalysisError(Exception):
    code = "ANALYSIS_FAILED"
    status_code = 500

    def __init__(self, message: str = "", code: str = None):
        self.message = sanitize_error(message or self.__class__.__doc__ or self.code)
        if code:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": self.message}


class ValidationFailedError(AnalysisError):
    """Request validation failed"""

    code = "VALIDATION_ERROR"
    status_code = 400


class ContentFetchError(AnalysisError):
    """Failed to scrape website content"""

    code = "CONTENT_FETCH_FAILED"


class LLMResponseError(AnalysisError):
    """Invalid JSON response from AI"""

    code = "LLM_RESPONSE_INVALID"


class ProviderNotConfiguredError(AnalysisError):
    """No LLM provider API key is configured"""

    code = "PROVIDER_NOT_CONFIGURED"


class FrameworkLoadError(AnalysisError):
    """Framework reference data could not be loaded"""

    code = "FRAMEWORK_LOAD_FAILED"


class ToolUnavailableError(AnalysisError):
    """External tool returned no usable data"""

    code = "TOOL_UNAVAILABLE"


class ScriptExecutionError(AnalysisError):
    """Local analysis script failed"""

    code = "SCRIPT_EXECUTION_FAILED"
