"""ID generation utilities."""
import uuid
from datetime import datetime, timezone


def generate_request_id() -> str:
    """
    Generate a unique id for correlating the log lines of one pipeline run.

    Format: req_{timestamp}_{uuid_short}
    Example: req_20260208_a3f2d1c4

    Returns:
        str: A unique request identifier
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    uuid_short = str(uuid.uuid4())[:8]
    return f"req_{timestamp}_{uuid_short}"
