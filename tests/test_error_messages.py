"""
Tests for PocketBase error payload formatting.
"""

from utils.error_messages import (
    enhance_error_message,
    flatten_errors,
    format_field_errors,
    pocketbase_error_message,
)

VALIDATION_PAYLOAD = {
    "status": 400,
    "message": "Failed to create record.",
    "data": {
        "email": {"code": "validation_required", "message": "Missing required value."},
        "age": {"code": "validation_min_number", "message": "Must be larger than 0."},
    },
}


class TestFlattenErrors:

    def test_message_then_nested_data(self):
        assert flatten_errors(VALIDATION_PAYLOAD) == [
            "Failed to create record.",
            "Missing required value.",
            "Must be larger than 0.",
        ]

    def test_data_only(self):
        payload = {"data": {"title": {"message": "Too long."}}}
        assert flatten_errors(payload) == ["Too long."]

    def test_lists_and_strings(self):
        assert flatten_errors(["a", {"message": "b"}, 3, None]) == ["a", "b"]

    def test_nothing_to_report(self):
        assert pocketbase_error_message({}) == "No errors found"


class TestEnhanceErrorMessage:

    def test_combines_message_and_fields(self):
        assert enhance_error_message(VALIDATION_PAYLOAD) == (
            "Failed to create record. (email: Missing required value.; age: Must be larger than 0.)"
        )

    def test_message_only(self):
        assert enhance_error_message({"message": "Not found."}) == "Not found."

    def test_code_hint_when_field_message_missing(self):
        assert format_field_errors({"id": {"code": "validation_not_unique"}}) == "id: Value must be unique."

    def test_fallback(self):
        assert enhance_error_message({}, fallback="Connection refused") == "Connection refused"
        assert enhance_error_message(None, fallback="x") == "x"
