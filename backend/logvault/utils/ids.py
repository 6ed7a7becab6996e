import uuid


def new_log_id() -> str:
    """Random 128-bit identifier; safe for concurrent creates without coordination."""
    return uuid.uuid4().hex
