# app/utils/json_parser.py
"""
Helpers for reading facility layout documents (JSON).
"""

import json
from typing import Optional


def load_json_file(path: str) -> Optional[dict]:
    """Read a JSON object from disk. Returns None if the file is missing, unreadable, or not an object."""
    try:
        with open(path, "rb") as f:
            doc = json.loads(f.read().decode("utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
        return None
    return doc if isinstance(doc, dict) else None


def require_fields(doc: dict, where: str, *fields: str) -> dict:
    """Raise ValueError naming every missing field; returns doc for chaining."""
    if not isinstance(doc, dict):
        raise ValueError(f"{where}: expected an object, got {type(doc).__name__}")
    missing = [f for f in fields if doc.get(f) is None]
    if missing:
        raise ValueError(f"{where}: missing {', '.join(missing)}")
    return doc
