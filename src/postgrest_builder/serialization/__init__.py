"""
Serialization utilities for postgrest_builder.

Example:
    >>> from postgrest_builder.serialization import json_dumps
    >>> from uuid import uuid4
    >>>
    >>> payload = json_dumps({"id": uuid4()})
"""

from postgrest_builder.serialization.json import (
    PostgrestJSONEncoder,
    json_dumps,
    json_loads,
)

__all__ = [
    "PostgrestJSONEncoder",
    "json_dumps",
    "json_loads",
]
