"""
Backup rendering for backup_database.

A backup is a mapping of collection name to its schema and records:

    {"posts": {"schema": [...fields...], "records": [...]}}

It is rendered either as indented JSON or as a CSV-like text report with one
section per collection. In the text report every cell is JSON-encoded, so
strings are quoted and nested values stay readable.
"""

import json
from typing import Any


def collection_fields(collection: dict) -> list:
    """Field list of a collection descriptor (newer PocketBase: 'fields', older: 'schema')."""
    fields = collection.get("fields")
    if fields is None:
        fields = collection.get("schema")
    return fields or []


def build_backup_entry(collection: dict, records: list[dict]) -> dict:
    return {"schema": collection_fields(collection), "records": records}


def render_json(backup: dict[str, dict]) -> str:
    return json.dumps(backup, indent=2, default=str)


def _cell(record: dict, header: str) -> str:
    if header not in record:
        return ""
    return json.dumps(record[header], default=str)


def render_csv(backup: dict[str, dict]) -> str:
    """
    Render a backup as CSV-like text:

        Collection: posts
        Schema:
        [ ...indented JSON... ]
        Records:
        id,title
        "a1","Hello"

    Headers come from the first record's keys.
    """
    lines: list[str] = []
    for name, entry in backup.items():
        records: list[dict[str, Any]] = entry.get("records") or []
        lines.append(f"Collection: {name}")
        lines.append("Schema:")
        lines.append(json.dumps(entry.get("schema"), indent=2, default=str))
        lines.append("Records:")
        if records:
            headers = list(records[0].keys())
            lines.append(",".join(headers))
            for record in records:
                lines.append(",".join(_cell(record, header) for header in headers))
        lines.append("")
    return "\n".join(lines) + ("\n" if lines else "")


RENDERERS = {
    "json": render_json,
    "csv": render_csv,
}


def render_backup(backup: dict[str, dict], format: str = "json") -> str:
    renderer = RENDERERS.get(format)
    if renderer is None:
        raise ValueError(f"Unsupported backup format: {format}")
    return renderer(backup)
