"""Payload conversion utilities for the subscription table."""

from __future__ import annotations

import json
import math
from datetime import timedelta
from typing import Any

from subregistry.errors import CorruptRecordError, MissingFieldError
from subregistry.filters import FilterParser, parse_condition
from subregistry.models.subscription import Subscription

REQUIRED_FIELDS = ("filter", "expiresAt", "eventTtl")


def subscription_to_dict(subscription: Subscription) -> dict[str, Any]:
    """Convert a subscription to the payload mapping."""
    return {
        "filter": str(subscription.table_filter),
        "expiresAt": subscription.expires_at,
        "eventTtl": int(subscription.event_ttl.total_seconds()),
        "ownerId": subscription.owner_id,
    }


def encode_subscription(subscription: Subscription) -> str:
    """Serialize a subscription to its JSON payload.

    Keys are sorted and separators compact, so equal subscriptions always
    produce identical payloads.
    """
    return json.dumps(subscription_to_dict(subscription), sort_keys=True, separators=(",", ":"))


def decode_subscription(
    name: str,
    payload: str,
    filter_parser: FilterParser = parse_condition,
) -> Subscription:
    """Convert a stored payload back to a Subscription.

    Args:
        name: Subscription name from the clustering column
        payload: JSON payload from the payload column
        filter_parser: Parser for the stored filter string

    Returns:
        The decoded subscription

    Raises:
        MissingFieldError: If filter, expiresAt or eventTtl is absent
        CorruptRecordError: If the payload is not a JSON object or a field has the wrong type
        FilterParseError: If the stored filter does not parse
    """
    try:
        data = json.loads(payload)
    except (TypeError, json.JSONDecodeError) as e:
        raise CorruptRecordError("payload is not valid JSON", subscription=name, cause=e) from e
    if not isinstance(data, dict):
        raise CorruptRecordError("payload is not a JSON object", subscription=name)

    for field in REQUIRED_FIELDS:
        if data.get(field) is None:
            raise MissingFieldError(field, subscription=name)

    table_filter = data["filter"]
    expires_at = data["expiresAt"]
    event_ttl = data["eventTtl"]
    if not isinstance(table_filter, str):
        raise CorruptRecordError("filter is not a string", subscription=name)
    if not _is_number(expires_at):
        raise CorruptRecordError("expiresAt is not a number", subscription=name)
    if not _is_number(event_ttl):
        raise CorruptRecordError("eventTtl is not a number", subscription=name)

    owner_id = data.get("ownerId")
    if owner_id is not None and not isinstance(owner_id, str):
        raise CorruptRecordError("ownerId is not a string", subscription=name)

    try:
        retention = timedelta(seconds=int(event_ttl))
    except OverflowError as e:
        raise CorruptRecordError("eventTtl is out of range", subscription=name, cause=e) from e

    return Subscription(
        name=name,
        table_filter=filter_parser(table_filter),
        expires_at=int(expires_at),
        event_ttl=retention,
        owner_id=owner_id,
    )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)
