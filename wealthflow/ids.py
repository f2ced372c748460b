"""
Identifier and clock ports.

Anything that creates entities or stamps timestamps takes these as
arguments instead of calling uuid4()/datetime.now() directly, so tests can
pin ids and time.
"""

from datetime import datetime, timezone
from itertools import count
from typing import Callable
from uuid import uuid4


IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


def new_id() -> str:
    """Generate a fresh random entity id."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(now: Clock = utc_now) -> str:
    """ISO 8601 timestamp in UTC with a trailing Z, e.g. 2024-05-01T10:00:00.000Z."""
    moment = now().astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class SequentialIds:
    """
    Deterministic id generator.

    Usage:
        ids = SequentialIds("acct")
        ids()  # "acct-1"
        ids()  # "acct-2"
    """

    def __init__(self, prefix: str = "id"):
        self._prefix = prefix
        self._counter = count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"
