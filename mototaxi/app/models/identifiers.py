"""
String identifiers for directory entries and rides.
"""

import uuid


def new_identifier(prefix: str) -> str:
    """Return a unique, stable identifier such as ``ride-3f2a9c1d0b7e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
