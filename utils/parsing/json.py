import json
import logging
import re
from typing import Any

import json5
import demjson3

from core.errors import LLMResponseError

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json|javascript)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_OBJECT = re.compile(r"\{[\s\S]*\}")
_ERROR_PREFIXES = ("an error", "error", "failed")


def strip_code_fences(text: str) -> str:
    text = text.strip()
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE_CLOSE.sub("", text)
    return text.strip()


def repair_and_parse_json(response_text: str) -> Any:
    """
    Multi-layered JSON parsing with auto-repair capabilities.

    Attempts to parse JSON through multiple strategies:
    1. Standard json.loads()
    2. Clean common issues (trailing commas, comments)
    3. json5 parser (tolerates comments and trailing commas)
    4. demjson3 parser (auto-repairs many errors)

    Raises:
        LLMResponseError: If all parsing attempts fail
    """
    errors = []

    # Layer 1: standard parser
    try:
        return json.loads(response_text)
    except json.JSONDecodeError as e:
        errors.append(f"Standard JSON: {str(e)}")

    # Layer 2: trailing commas and comments
    try:
        cleaned = re.sub(r",(\s*[}\]])", r"\1", response_text)
        cleaned = re.sub(r"^\s*//.*?$", "", cleaned, flags=re.MULTILINE)
        cleaned = re.sub(r"/\*.*?\*/", "", cleaned, flags=re.DOTALL)
        result = json.loads(cleaned)
        logger.info("🔧 Parsed model JSON after cleaning")
        return result
    except json.JSONDecodeError as e:
        errors.append(f"Cleaned JSON: {str(e)}")

    # Layer 3: json5
    try:
        result = json5.loads(response_text)
        logger.info("🔧 Parsed model JSON with json5")
        return result
    except Exception as e:
        errors.append(f"JSON5: {str(e)}")

    # Layer 4: demjson3
    try:
        result = demjson3.decode(response_text)
        logger.info("🔧 Parsed model JSON with demjson3")
        return result
    except Exception as e:
        errors.append(f"DemJSON: {str(e)}")

    logger.warning(f"❌ All JSON parsers failed: {'; '.join(errors[:2])}")
    raise LLMResponseError(
        f"Invalid JSON response from AI: {'; '.join(errors[:2])}"
    )


def extract_json(response_text: str) -> Any:
    """
    Pull the JSON object out of free-form model output.

    Code fences are removed, the outermost ``{...}`` span is taken and
    parsed. Text that reads like an error message or contains no object
    raises ``LLMResponseError``; this never returns None.
    """
    if response_text is None or not response_text.strip():
        raise LLMResponseError("Empty response from AI")

    text = strip_code_fences(response_text)

    lowered = text.lower()
    if lowered.startswith(_ERROR_PREFIXES):
        raise LLMResponseError(f"AI returned an error instead of JSON: {text[:100]}")

    match = _OBJECT.search(text)
    if not match:
        raise LLMResponseError(f"AI response does not contain a JSON object: {text[:100]}")

    return repair_and_parse_json(match.group(0))
