from datetime import datetime, timezone
from typing import Callable


# Injected wherever expiry is decided so tests can move time explicitly
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
