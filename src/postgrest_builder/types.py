"""Common type definitions for the postgrest_builder library."""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

# A single (key, value) query parameter
QueryParam = tuple[str, str]

# Payloads accepted by insert/upsert/update
Record = Mapping[str, Any] | BaseModel
Payload = Record | Sequence[Record]
