"""Identifier helpers."""

import uuid


def generate_id(prefix: str) -> str:
    """Generate a prefixed UUID string, e.g. ``char_3f2a...``."""
    return f"{prefix}_{uuid.uuid4()}"
