"""
Tests for the reply parsing helpers.
"""
import pytest

from medassist.llm.parsing import contains_any, extract_json_object, first_line, strip_quotes


def test_extract_json_from_code_fence():
    reply = '```json\n{"name": "Panadol", "dosage": "500mg"}\n```'
    assert extract_json_object(reply) == {"name": "Panadol", "dosage": "500mg"}


def test_extract_json_with_surrounding_prose():
    reply = 'Here is the analysis: {"queryType": "medicine", "priority": 3} Hope this helps.'
    assert extract_json_object(reply)["queryType"] == "medicine"


@pytest.mark.parametrize("reply", ["", "no json here", "{not: valid}", "[1, 2, 3]"])
def test_extract_json_rejects_unusable_replies(reply):
    with pytest.raises(ValueError):
        extract_json_object(reply)


def test_first_line_and_quotes():
    assert first_line("  Panadol\nextra words") == "Panadol"
    assert first_line("") == ""
    assert strip_quotes('"Brufen"') == "Brufen"


def test_contains_any_is_case_insensitive():
    assert contains_any("Take WITH food", ["with food"])
    assert not contains_any(None, ["food"])
