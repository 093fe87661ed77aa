import asyncio

import pytest

from analyzer.schemas import InsightsOutput
from config import is_configured
from core.errors import AnalysisError, LLMResponseError, ProviderNotConfiguredError
from utils.clients.llm import LLMClient, LLMProvider


class Recorder:
    def __init__(self, reply=None, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def __call__(self, prompt, model=None):
        self.calls.append((prompt, model))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


def make_client(gemini, claude, gemini_key="AIza-real", claude_key="sk-ant-real", primary="gemini", timeout=5.0):
    providers = {
        "gemini": LLMProvider("gemini", gemini, lambda: gemini_key),
        "claude": LLMProvider("claude", claude, lambda: claude_key),
    }
    return LLMClient(primary=primary, providers=providers, timeout=timeout)


def test_primary_reply_is_parsed():
    gemini = Recorder(reply='```json\n{"score": 9}\n```')
    claude = Recorder(reply='{"score": 1}')
    result = asyncio.run(make_client(gemini, claude).generate_json("prompt"))
    assert result == {"score": 9}
    assert claude.calls == []


def test_falls_back_to_secondary():
    gemini = Recorder(error=RuntimeError("503 from gemini"))
    claude = Recorder(reply='{"score": 4}')
    result = asyncio.run(make_client(gemini, claude).generate_json("prompt"))
    assert result == {"score": 4}
    assert len(gemini.calls) == 1
    assert len(claude.calls) == 1


def test_falls_back_on_unparseable_primary_reply():
    gemini = Recorder(reply="I cannot complete this request.")
    claude = Recorder(reply='{"ok": true}')
    assert asyncio.run(make_client(gemini, claude).generate_json("prompt")) == {"ok": True}


def test_placeholder_secondary_is_never_called():
    gemini = Recorder(error=RuntimeError("boom"))
    claude = Recorder(reply='{"score": 4}')
    client = make_client(gemini, claude, claude_key="your-claude-api-key")

    with pytest.raises(AnalysisError) as exc_info:
        asyncio.run(client.generate_json("prompt"))
    assert exc_info.value.code == "LLM_CALL_FAILED"
    assert claude.calls == []


def test_first_error_is_reported():
    gemini = Recorder(reply="not json")
    claude = Recorder(error=RuntimeError("claude down"))
    with pytest.raises(LLMResponseError):
        asyncio.run(make_client(gemini, claude).generate_json("prompt"))


def test_claude_primary_when_gemini_unconfigured():
    gemini = Recorder(reply='{"from": "gemini"}')
    claude = Recorder(reply='{"from": "claude"}')
    client = make_client(gemini, claude, gemini_key="", primary="claude")
    assert asyncio.run(client.generate_json("prompt")) == {"from": "claude"}
    assert gemini.calls == []


def test_no_provider_configured():
    client = make_client(Recorder(reply="{}"), Recorder(reply="{}"), gemini_key="", claude_key="your-api-key")
    assert client.available_providers() == []
    with pytest.raises(ProviderNotConfiguredError):
        asyncio.run(client.generate_json("prompt"))


def test_timeout():
    gemini = Recorder(reply='{"late": true}', delay=1.0)
    client = make_client(gemini, Recorder(reply="{}"), claude_key="", timeout=0.05)
    with pytest.raises(AnalysisError) as exc_info:
        asyncio.run(client.generate_json("prompt"))
    assert exc_info.value.code == "LLM_TIMEOUT"


def test_schema_hint_validates_and_fills_defaults():
    gemini = Recorder(reply='{"executive_summary": "Solid site", "key_strengths": ["Fast"]}')
    client = make_client(gemini, Recorder(reply="{}"), claude_key="")
    result = asyncio.run(client.generate_json("prompt", schema_hint=InsightsOutput))
    assert result["executive_summary"] == "Solid site"
    assert result["critical_weaknesses"] == []
    assert result["implementation_roadmap"] == {"immediate": [], "short_term": [], "long_term": []}


def test_schema_mismatch_raises():
    gemini = Recorder(reply='{"key_strengths": ["Fast"]}')
    client = make_client(gemini, Recorder(reply="{}"), claude_key="")
    with pytest.raises(LLMResponseError):
        asyncio.run(client.generate_json("prompt", schema_hint=InsightsOutput))


def test_model_override_is_passed_through():
    gemini = Recorder(reply="{}")
    client = make_client(gemini, Recorder(reply="{}"))
    asyncio.run(client.generate_json("prompt", models={"gemini": "gemini-1.5-pro"}))
    assert gemini.calls == [("prompt", "gemini-1.5-pro")]


def test_unknown_primary():
    with pytest.raises(ValueError):
        make_client(Recorder(), Recorder(), primary="gpt")


@pytest.mark.parametrize("key, expected", [
    ("AIzaSyRealLookingKey", True),
    ("", False),
    (None, False),
    ("your-gemini-api-key", False),
    ("  YOUR-API-KEY ", False),
])
def test_is_configured(key, expected):
    assert is_configured(key) is expected
