import uuid


def new_id() -> str:
    """Globally unique string identifier for new records."""
    return str(uuid.uuid4())
