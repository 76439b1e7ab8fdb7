"""Entity ID generation."""

import uuid


def generate_id() -> str:
    """Generate a globally unique entity ID.

    Returns:
        32 character hex string.
    """
    return uuid.uuid4().hex
