import re
from datetime import datetime, timezone
from uuid import uuid4

# Identifiers look like 24-char hex object ids so that the browser client
# written against the old document store keeps working.
OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def new_object_id() -> str:
    return uuid4().hex[:24]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
