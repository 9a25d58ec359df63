import pytest
from unittest.mock import Mock, patch

from worker.app.errors import ParseError
from worker.app.services import extract_json as ej


class TestExtractJson:
    """Fallback order: direct -> fenced block -> first '{' .. last '}'."""

    def test_direct(self):
        out = ej.extract_json('{"description":"a","tags":["x"]}')
        assert out == {"description": "a", "tags": ["x"]}

    def test_fenced_json_block(self):
        content = '```json\n{"description":"b","tags":["y","z"]}\n```'
        with pytest.raises(ValueError):
            ej.parse_direct(content)
        assert ej.extract_json(content) == {"description": "b", "tags": ["y", "z"]}

    def test_fenced_block_without_tag(self):
        content = 'Sure!\n```\n{"description":"b2","tags":[]}\n```\nDone.'
        assert ej.parse_fenced(content) == {"description": "b2", "tags": []}

    def test_brace_bounded(self):
        content = 'Here you go: {"description":"c","tags":[]} Thanks!'
        with pytest.raises(ValueError):
            ej.parse_fenced(content)
        assert ej.extract_json(content) == {"description": "c", "tags": []}

    def test_braces_span_nested_objects(self):
        content = 'x {"description":"d","meta":{"k":1},"tags":["t"]} y'
        assert ej.parse_braces(content)["meta"] == {"k": 1}

    def test_not_json_raises_parse_error(self):
        with pytest.raises(ParseError) as exc:
            ej.extract_json("not json at all")
        assert str(exc.value) == "failed to parse AI response"

    def test_unbalanced_braces_raise_parse_error(self):
        with pytest.raises(ParseError):
            ej.extract_json('almost {"description": "e", ')

    def test_stops_at_first_success(self):
        first = Mock(return_value={"a": 1})
        second = Mock()
        with patch.object(ej, "STRATEGIES", (first, second)):
            assert ej.extract_json("whatever") == {"a": 1}
        second.assert_not_called()
