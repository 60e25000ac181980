from uuid import uuid4

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/100"


def new_id() -> str:
    """Generate a collision-safe entity identifier."""
    return uuid4().hex
