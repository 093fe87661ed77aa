import pytest

from core.errors import LLMResponseError
from utils.parsing.json import extract_json, repair_and_parse_json, strip_code_fences


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"score": 7}') == {"score": 7}

    def test_fenced_block(self):
        assert extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_prose_around_fenced_block(self):
        assert extract_json('Sure! ```json\n{"a":1}\n```') == {"a": 1}

    def test_prose_around_bare_object(self):
        text = 'Here is the analysis you asked for:\n{"why": {"score": 8}}\nLet me know if you need more.'
        assert extract_json(text) == {"why": {"score": 8}}

    def test_outermost_object_is_taken(self):
        text = 'Result: {"outer": {"inner": [1, 2]}, "n": 3} done'
        assert extract_json(text) == {"outer": {"inner": [1, 2]}, "n": 3}

    def test_refusal_without_json_raises(self):
        with pytest.raises(LLMResponseError):
            extract_json("I cannot complete this request.")

    @pytest.mark.parametrize("text", ["[1, 2, 3]", '```json\n["a", "b"]\n```', "42"])
    def test_without_object_raises(self, text):
        with pytest.raises(LLMResponseError):
            extract_json(text)

    @pytest.mark.parametrize("text", [
        'Error: quota exceeded {"detail": "x"}',
        "An error occurred while generating",
        "Failed to analyze the page",
    ])
    def test_error_text_raises(self, text):
        with pytest.raises(LLMResponseError):
            extract_json(text)

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_raises(self, text):
        with pytest.raises(LLMResponseError):
            extract_json(text)

    def test_error_code(self):
        with pytest.raises(LLMResponseError) as exc_info:
            extract_json("no json here")
        assert exc_info.value.code == "LLM_RESPONSE_INVALID"


class TestRepair:
    def test_trailing_comma(self):
        assert repair_and_parse_json('{"a": 1, "b": [1, 2,],}') == {"a": 1, "b": [1, 2]}

    def test_line_comment(self):
        text = '{"issue": "Slow hero", // the model added this\n"fix": "Compress"}'
        assert repair_and_parse_json(text) == {"issue": "Slow hero", "fix": "Compress"}

    def test_block_comment(self):
        assert repair_and_parse_json('{"a": /* note */ 1}') == {"a": 1}

    def test_single_quotes_fall_through_to_json5(self):
        assert repair_and_parse_json("{'a': 'b'}") == {"a": "b"}

    def test_garbage_raises(self):
        with pytest.raises(LLMResponseError):
            repair_and_parse_json("{this is not json at all")


def test_strip_code_fences():
    assert strip_code_fences("```\n[1, 2]\n```") == "[1, 2]"
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'
