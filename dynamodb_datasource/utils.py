"""
Datasource Utilities

Small helpers shared by the schema and model layers:
- Epoch-millisecond timestamps for createdOn/updatedOn
- Random primary key generation
- Conversion between plain Python values and what boto3 stores
"""

import logging
import threading
import time
import uuid
from decimal import Decimal
from typing import Any, Dict

from boto3.dynamodb.types import Binary

logger = logging.getLogger(__name__)

CREATED_ON = "createdOn"
UPDATED_ON = "updatedOn"

_timestamp_lock = threading.Lock()
_last_timestamp = 0


def epoch_millis() -> int:
    """Return the current time in epoch milliseconds.

    Values handed out by this process are strictly increasing: a call landing
    in the same millisecond as the previous one gets ``previous + 1``.
    """
    global _last_timestamp
    with _timestamp_lock:
        now = time.time_ns() // 1_000_000
        if now <= _last_timestamp:
            now = _last_timestamp + 1
        _last_timestamp = now
        return now


def generate_id() -> str:
    """Return a random 128-bit identifier (UUID4) as a string."""
    return str(uuid.uuid4())


def to_dynamodb_value(value: Any) -> Any:
    """Convert a Python value into one the boto3 serializer accepts.

    boto3 refuses float, so floats become Decimal (via str to keep the
    printed precision). Containers are converted recursively.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamodb_value(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return {to_dynamodb_value(v) for v in value}
    return value


def from_dynamodb_value(value: Any) -> Any:
    """Convert a value read through boto3 back to plain Python.

    Decimal becomes int when integral, float otherwise, and Binary is
    unwrapped to the bytes it holds.
    """
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb_value(v) for v in value]
    if isinstance(value, set):
        return {from_dynamodb_value(v) for v in value}
    return value


def item_to_entity(item: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a DynamoDB item returned by boto3 into a plain entity dict."""
    return {key: from_dynamodb_value(value) for key, value in item.items()}


def entity_to_item(entity: Dict[str, Any]) -> Dict[str, Any]:
    """Convert an entity dict into a DynamoDB item for boto3."""
    return {key: to_dynamodb_value(value) for key, value in entity.items()}
