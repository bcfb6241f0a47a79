"""
TTL conversion helpers.

Store-native TTLs are whole seconds. Requested durations are rounded up to
the next second and clamped into an inclusive range; out-of-range values are
never rejected.
"""

from __future__ import annotations

import math
from datetime import timedelta

# Upper bound for both the row TTL and the event retention window.
SUBSCRIPTION_TTL_LIMIT = int(timedelta(days=365).total_seconds())

MINIMUM_TTL = 1


def to_seconds(duration: timedelta, minimum: int, maximum: int) -> int:
    """
    Convert a duration to whole seconds clamped to [minimum, maximum].

    Args:
        duration: Requested duration (may be zero or negative)
        minimum: Smallest allowed result
        maximum: Largest allowed result

    Returns:
        Whole seconds, rounded up, within the inclusive range

    Examples:
        >>> to_seconds(timedelta(0), 1, 10)
        1
        >>> to_seconds(timedelta(milliseconds=1500), 1, 10)
        2
        >>> to_seconds(timedelta(days=1), 1, 10)
        10
    """
    if minimum > maximum:
        raise ValueError(f"minimum ({minimum}) must not exceed maximum ({maximum})")
    seconds = math.ceil(duration / timedelta(seconds=1))
    return max(minimum, min(seconds, maximum))


def clamp_seconds(duration: timedelta) -> int:
    """Clamp a duration to the subscription TTL range, in seconds."""
    return to_seconds(duration, MINIMUM_TTL, SUBSCRIPTION_TTL_LIMIT)


def clamp(duration: timedelta) -> timedelta:
    """Clamp a duration to the subscription TTL range as a whole-second timedelta."""
    return timedelta(seconds=clamp_seconds(duration))
