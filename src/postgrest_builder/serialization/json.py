"""
JSON serialization utilities for request payloads.

PostgREST expects compact JSON both in request bodies and inside filter
values (for example `cs.{"a":1}`), so every helper here produces output
without insignificant whitespace.

Example:
    >>> from postgrest_builder.serialization import json_dumps
    >>> json_dumps({"tags": ["a", "b"]})
    '{"tags":["a","b"]}'
"""

import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

COMPACT_SEPARATORS = (",", ":")


class PostgrestJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for values commonly found in row payloads.

    Supports, in addition to the standard types:
    - UUID objects: string representation
    - datetime, date and time objects: ISO 8601 strings
    - Decimal: string representation (keeps precision for numeric columns)
    - Enum members: their value
    - pydantic models: `model_dump(mode="json")`

    Example:
        >>> import json
        >>> from uuid import uuid4
        >>> json.dumps({"id": uuid4()}, cls=PostgrestJSONEncoder)
    """

    def default(self, obj: Any) -> Any:
        """
        Convert non-serializable objects to JSON-serializable formats.

        Args:
            obj: Object to serialize

        Returns:
            JSON-serializable representation

        Raises:
            TypeError: If object type is not supported
        """
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        return super().default(obj)


def json_dumps(obj: Any) -> str:
    """
    Serialize an object to a compact JSON string.

    Args:
        obj: Object to serialize

    Returns:
        JSON string without insignificant whitespace

    Raises:
        TypeError: If the object contains unsupported types
    """
    return json.dumps(obj, cls=PostgrestJSONEncoder, separators=COMPACT_SEPARATORS)


def json_loads(s: str | bytes) -> Any:
    """
    Deserialize a JSON document.

    Note: strings holding UUIDs or timestamps are returned as strings;
    converting them is the caller's responsibility.
    """
    return json.loads(s)


__all__ = [
    "PostgrestJSONEncoder",
    "json_dumps",
    "json_loads",
]
