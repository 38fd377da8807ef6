import re
from datetime import timedelta
from typing import Any, Dict, Optional

from .errors import DurationFormatError
from .extensions import OperationExtensions
from .models import ResourceOperations, Timeouts

# One or more '<decimal><unit>' terms, e.g. '30s', '20.5m' or '1h30m'.
DURATION_REGEX = re.compile(r"^(\d+(\.\d+)?[smh])+$")
DURATION_TERM_REGEX = re.compile(r"(\d+(?:\.\d+)?)([smh])")

UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}


def parse_duration(value: str) -> timedelta:
    """
    Parses a timeout value such as '30s', '20.5m' or '1h'.

    Raises:
        DurationFormatError: If the value is empty, negative or uses a unit other
            than seconds, minutes or hours.
    """
    if not isinstance(value, str) or not DURATION_REGEX.match(value):
        raise DurationFormatError(
            f"invalid duration value: '{value}'. The value must be a sequence of decimal "
            "numbers each with optional fraction and a unit suffix (negative durations "
            "are not allowed). The value must be formatted either in seconds (s), "
            "minutes (m) or hours (h)"
        )
    seconds = sum(
        float(amount) * UNIT_SECONDS[unit]
        for amount, unit in DURATION_TERM_REGEX.findall(value)
    )
    return timedelta(seconds=seconds)


def get_resource_timeout(operation: Optional[Dict[str, Any]]) -> Optional[timedelta]:
    """Returns the 'x-terraform-resource-timeout' of an operation, or None if not set."""
    if operation is None:
        return None
    timeout = OperationExtensions.from_node(operation).resource_timeout
    if timeout is None:
        return None
    return parse_duration(timeout)


def get_timeouts(operations: ResourceOperations) -> Timeouts:
    return Timeouts(
        post=get_resource_timeout(operations.post),
        get=get_resource_timeout(operations.get),
        put=get_resource_timeout(operations.put),
        delete=get_resource_timeout(operations.delete),
    )
