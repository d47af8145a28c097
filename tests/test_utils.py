import pytest
from promptplanner.utils import extract_json_object, redact_api_key, mask_key, AnalysisParseError


def test_extract_plain_json():
    result = extract_json_object('{"projectName": "Todo", "complexity": "low"}')
    assert result == {"projectName": "Todo", "complexity": "low"}


def test_extract_json_surrounded_by_prose():
    reply = 'Sure! Here is the analysis:\n```json\n{"projectName": "Snake", "mainFeatures": ["move", "eat"]}\n```\nGood luck.'
    result = extract_json_object(reply)
    assert result["projectName"] == "Snake"
    assert result["mainFeatures"] == ["move", "eat"]


def test_extract_nested_objects():
    reply = 'x {"developmentPhases": [{"phase": "Setup", "tasks": ["a"]}], "projectName": "P"} y'
    result = extract_json_object(reply)
    assert result["developmentPhases"][0]["phase"] == "Setup"
    assert result["projectName"] == "P"


def test_braces_inside_strings_do_not_count():
    reply = 'Result: {"projectName": "Brace } tester {", "complexity": "high"} done'
    result = extract_json_object(reply)
    assert result["projectName"] == "Brace } tester {"
    assert result["complexity"] == "high"


def test_escaped_quotes_inside_strings():
    reply = '{"projectName": "The \\"quoted\\" app {", "complexity": "low"}'
    assert extract_json_object(reply)["projectName"] == 'The "quoted" app {'


def test_skips_invalid_leading_candidate():
    reply = 'Use {placeholder} syntax. {"projectName": "Real"}'
    assert extract_json_object(reply) == {"projectName": "Real"}


def test_malformed_analysis_does_not_yield_nested_object():
    reply = ('{"projectName": "Chess Club", "projectType": "game", '
             '"developmentPhases": [{"phase": "MVP", "tasks": ["a"]}],}')
    with pytest.raises(AnalysisParseError):
        extract_json_object(reply)


def test_truncated_analysis_does_not_yield_nested_object():
    reply = '{"projectName": "Cut off", "developmentPhases": [{"phase": "MVP"}, {"phase": "Be'
    with pytest.raises(AnalysisParseError):
        extract_json_object(reply)


def test_object_after_malformed_one_is_found():
    reply = 'Draft: {"projectName": "Old",} Final: {"projectName": "New"}'
    assert extract_json_object(reply) == {"projectName": "New"}


def test_no_braces_raises():
    with pytest.raises(AnalysisParseError):
        extract_json_object("I cannot help with that.")


def test_empty_text_raises():
    with pytest.raises(AnalysisParseError):
        extract_json_object("")


def test_truncated_output_raises():
    with pytest.raises(AnalysisParseError):
        extract_json_object('{"projectName": "Cut off", "mainFeatures": ["a", "b"')


def test_braces_without_json_raise():
    with pytest.raises(AnalysisParseError):
        extract_json_object("Wrap blocks in { and } as usual.")


def test_redact_bearer_token():
    redacted = redact_api_key("Authorization: Bearer sk-abcdef1234567890")
    assert "sk-abcdef1234567890" not in redacted
    assert "<REDACTED>" in redacted


def test_redact_api_key_field():
    redacted = redact_api_key('{"apiKey": "secret-value-123", "model": "gpt-4"}')
    assert "secret-value-123" not in redacted
    assert '"model": "gpt-4"' in redacted


def test_redact_leaves_token_words_alone():
    assert redact_api_key("max_tokens exceeded") == "max_tokens exceeded"


def test_mask_key():
    assert mask_key("") == "<none>"
    assert mask_key("short") == "****"
    assert mask_key("sk-1234567890abcd") == "sk-1...abcd"
