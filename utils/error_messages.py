"""
Error Message Utilities

Turns PocketBase error payloads into human-readable text.

PocketBase reports failures as:
    {"status": 400, "message": "Failed to create record.",
     "data": {"email": {"code": "validation_required", "message": "Missing required value."}}}

The nested field messages are what a caller needs to fix their input, so they
are flattened and appended to the top-level message.
"""

from typing import Any

# Friendlier wording for common PocketBase validation codes
VALIDATION_CODE_HINTS = {
    "validation_required": "Missing required value.",
    "validation_not_unique": "Value must be unique.",
    "validation_invalid_email": "Must be a valid email address.",
    "validation_values_mismatch": "Values don't match.",
    "validation_invalid_token": "Invalid or expired token.",
    "validation_collection_name_exists": "Collection name must be unique (case insensitive).",
}


def flatten_errors(errors: Any) -> list[str]:
    """
    Recursively collect every message string from a PocketBase error payload.

    - lists are flattened element by element
    - a mapping with a 'message' yields that message followed by the
      messages nested under its 'data'
    - a mapping with only 'data' yields the messages of its nested mappings
    - any other mapping yields the messages of all its values
    - strings are messages; everything else is ignored
    """
    if isinstance(errors, list):
        messages = []
        for item in errors:
            messages.extend(flatten_errors(item))
        return messages

    if isinstance(errors, dict):
        if errors.get("message"):
            return [errors["message"], *flatten_errors(errors.get("data") or {})]

        data = errors.get("data")
        if data and isinstance(data, dict):
            messages = []
            for value in data.values():
                if isinstance(value, (dict, list)):
                    messages.extend(flatten_errors(value))
            if messages:
                return messages

        messages = []
        for value in errors.values():
            messages.extend(flatten_errors(value))
        return messages

    if isinstance(errors, str):
        return [errors]

    return []


def pocketbase_error_message(errors: Any) -> str:
    """Join all flattened messages, one per line."""
    messages = flatten_errors(errors)
    return "\n".join(messages) if messages else "No errors found"


def format_field_errors(data: Any) -> str:
    """
    Format the per-field part of a PocketBase error as 'field: message' pairs.

    Returns an empty string when there are no field errors.
    """
    if not isinstance(data, dict):
        return ""

    parts = []
    for field, detail in data.items():
        if not isinstance(detail, dict):
            continue
        message = detail.get("message") or VALIDATION_CODE_HINTS.get(detail.get("code", ""), "")
        if message:
            parts.append(f"{field}: {message}")
    return "; ".join(parts)


def enhance_error_message(payload: Any, fallback: str = "") -> str:
    """
    Build a single-line message for a PocketBase error response.

    Combines the top-level message with per-field validation details, e.g.
    "Failed to create record. (email: Missing required value.)".
    Falls back to the flattened payload, then to `fallback`.
    """
    if isinstance(payload, dict):
        message = payload.get("message") or ""
        details = format_field_errors(payload.get("data"))
        if message and details:
            return f"{message} ({details})"
        if message:
            return message
        if details:
            return details

    messages = flatten_errors(payload)
    if messages:
        return " ".join(messages)
    return fallback
