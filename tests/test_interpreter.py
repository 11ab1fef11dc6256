import json

import pytest

from hospiscanner.schemas.scan import ParseErrorKind
from hospiscanner.services.display import format_for_display
from hospiscanner.services.interpreter import (
    NOT_AN_OBJECT_MESSAGE,
    derive_verification_code,
    extract_identifier,
    parse,
    requires_verification,
)


def test_parse_valid_object():
    raw = '{"name":"John Doe","age":30,"city":"New York"}'

    result = parse(raw)

    assert result.is_structured
    assert result.raw_text == raw
    assert result.structured_data == {"name": "John Doe", "age": 30, "city": "New York"}
    assert result.display_text is not None
    assert result.error_message is None
    assert result.error_kind is None


def test_parse_keeps_field_order():
    result = parse('{"z":1,"a":2,"m":3}')

    assert list(result.structured_data) == ["z", "a", "m"]


@pytest.mark.parametrize(
    "raw",
    [
        '{"user":{"name":"Jane","email":"jane@example.com"},"status":"active"}',
        '{"items":["apple","banana","orange"],"count":3}',
        '{"message":"Hello, World! 🌍","emoji":"😀"}',
        '{"flag":true,"nothing":null,"ratio":0.25}',
    ],
)
def test_parse_structured_data_round_trips(raw):
    result = parse(raw)

    assert result.is_structured
    assert json.loads(json.dumps(result.structured_data)) == json.loads(raw)


def test_parse_trailing_comma_is_malformed():
    raw = '{"name":"John Doe", "age":30,}'

    result = parse(raw)

    assert not result.is_structured
    assert result.structured_data is None
    assert result.display_text is None
    assert result.raw_text == raw
    assert result.error_kind == ParseErrorKind.MALFORMED_SYNTAX
    assert result.error_message.startswith("Invalid JSON format: ")


@pytest.mark.parametrize("raw", ["This is just plain text, not JSON", "not json at all"])
def test_parse_plain_text(raw):
    result = parse(raw)

    assert not result.is_structured
    assert result.structured_data is None
    assert result.raw_text == raw
    assert result.error_message


@pytest.mark.parametrize("raw", ["", "   ", '["a","b"]', "42", '"just a string"', "null", "true"])
def test_parse_non_objects(raw):
    result = parse(raw)

    assert not result.is_structured
    assert result.raw_text == raw
    assert result.error_kind == ParseErrorKind.NOT_STRUCTURED
    assert result.error_message == NOT_AN_OBJECT_MESSAGE
    assert result.identifier_value is None
    assert not result.requires_verification


def test_parse_unexpected_failure_is_reported():
    raw = "[" * 100000

    result = parse(raw)

    assert not result.is_structured
    assert result.error_kind == ParseErrorKind.UNEXPECTED_FAILURE
    assert result.error_message.startswith("Error parsing data: ")


def test_parse_never_raises_for_non_text():
    result = parse(None)

    assert not result.is_structured
    assert result.error_kind == ParseErrorKind.UNEXPECTED_FAILURE


def test_parse_without_identifier_needs_no_verification():
    result = parse('{"name":"John","age":30}')

    assert result.is_structured
    assert result.identifier_value is None
    assert not result.requires_verification


def test_parse_with_long_identifier_needs_verification():
    result = parse('{"dni":"123456789"}')

    assert result.identifier_value == "123456789"
    assert result.requires_verification


def test_parse_with_short_identifier_needs_no_verification():
    result = parse('{"DNI":"12345"}')

    assert result.identifier_value == "12345"
    assert not result.requires_verification


def test_display_text_breaks_fields_and_braces():
    assert format_for_display({"name": "John", "age": 30}) == '{\n  "name":"John",\n"age":30\n}'


def test_display_text_keeps_non_ascii():
    assert "ñ" in format_for_display({"name": "Núñez"})


def test_extract_identifier_first_key_wins():
    assert extract_identifier({"DNI": "1", "dni": "2"}) == "1"
    assert extract_identifier({"dni": "2", "DNI": "1"}) == "1"


def test_extract_identifier_skips_null_values():
    assert extract_identifier({"DNI": None, "Dni": "3"}) == "3"


def test_extract_identifier_alternate_names():
    assert extract_identifier({"document_id": "X-99"}) == "X-99"
    assert extract_identifier({"documentId": "Y-42"}) == "Y-42"


def test_extract_identifier_stringifies_values():
    assert extract_identifier({"dni": 12345678}) == "12345678"
    assert extract_identifier({"dni": True}) == "true"
    assert extract_identifier({"dni": False}) == "false"
    assert extract_identifier({"dni": [1, 2]}) == "[1,2]"


def test_extract_identifier_missing():
    assert extract_identifier({"name": "John", "DNI_number": "123456"}) is None


def test_derive_verification_code():
    assert derive_verification_code("DNI-12 34-56 78") == "123456"
    assert derive_verification_code("12345678A") == "123456"
    assert derive_verification_code("A1B2C3") == "123"
    assert derive_verification_code("ab") == ""
    assert derive_verification_code("") == ""


def test_requires_verification_counts_characters_not_digits():
    assert not requires_verification(None)
    assert not requires_verification("12345")
    assert requires_verification("123456")
    assert requires_verification("abcdef")


def test_parse_escaped_lone_surrogate_is_not_structured():
    raw = '{"a":"\\ud800"}'

    result = parse(raw)

    assert not result.is_structured
    assert result.structured_data is None
    assert result.error_kind == ParseErrorKind.UNEXPECTED_FAILURE
    assert result.error_message.isascii()
    result.model_dump_json()


def test_parse_escaped_surrogate_pair_is_structured():
    result = parse('{"emoji":"\\ud83d\\ude00"}')

    assert result.is_structured
    assert result.structured_data == {"emoji": "😀"}
