"""
Response decoding.

Turns the raw status, headers and body returned by a Transport into a
PostgrestResponse: parsed JSON (or text) data, the row count from
`content-range`, and a PostgrestAPIError for error statuses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from postgrest_builder.exceptions import PostgrestAPIError
from postgrest_builder.serialization import json_dumps, json_loads


class PostgrestErrorBody(BaseModel):
    """
    Error payload returned by PostgREST.

    Example body:
        {"code": "PGRST116", "details": "The result contains 0 rows",
         "hint": null, "message": "JSON object requested, multiple (or no) rows returned"}
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    message: str = Field(default="", description="Human-readable error message")
    code: Any = Field(default=None, description="PostgREST or SQLSTATE error code")
    details: Any = Field(default=None, description="Additional error details, string or structured")
    hint: Any = Field(default=None, description="Suggested fix")

    @field_validator("message", mode="before")
    @classmethod
    def _message_as_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else json_dumps(value)


@dataclass(frozen=True)
class PostgrestResponse:
    """
    Decoded result of executing a request.

    Attributes:
        status: HTTP status code
        data: Parsed JSON, raw text for non-JSON media types, or None
        count: Total row count from `content-range`, when known
        headers: Response headers (lower-cased)
        error: Error decoded from the body when errors are not raised
    """

    status: int
    data: Any = None
    count: int | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    error: PostgrestAPIError | None = None

    @property
    def ok(self) -> bool:
        """True when the status is below 400 and no error was decoded."""
        return self.error is None and self.status < 400


def is_json(content_type: str | None) -> bool:
    """True for `application/json` and any `+json` media type."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def parse_count(content_range: str | None) -> int | None:
    """
    Extract the total from a `content-range` header.

    Example:
        >>> parse_count("0-24/3573")
        3573
        >>> parse_count("0-24/*") is None
        True
    """
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1].strip()
    if total == "*" or not total.isdigit():
        return None
    return int(total)


def is_error_status(status: int) -> bool:
    return 400 <= status <= 599


def decode_response(
    status: int,
    headers: Mapping[str, str],
    raw_body: bytes | str,
    *,
    raise_on_error: bool = True,
) -> PostgrestResponse:
    """
    Decode a raw response.

    Args:
        status: HTTP status code
        headers: Response headers (any case)
        raw_body: Body as received
        raise_on_error: Raise PostgrestAPIError for error bodies instead
            of attaching it to the response

    Returns:
        Decoded response

    Raises:
        PostgrestAPIError: If the status is 400-599, the body is a JSON
            object, and raise_on_error is True
        ValueError: If a body declared as JSON cannot be decoded or parsed.
            Other bytes bodies are decoded as UTF-8 with replacement characters.
    """
    normalized = {str(k).lower(): str(v) for k, v in headers.items()}
    count = parse_count(normalized.get("content-range"))
    json_body = is_json(normalized.get("content-type"))

    if isinstance(raw_body, bytes):
        # Non-JSON exports (CSV, plain text) may use any charset
        text = raw_body.decode("utf-8", errors="strict" if json_body else "replace")
    else:
        text = raw_body

    if not text:
        data = None
    elif json_body:
        data = json_loads(text)
    else:
        data = text

    error = None
    if is_error_status(status) and isinstance(data, dict):
        error = PostgrestAPIError(status, PostgrestErrorBody.model_validate(data))
        if raise_on_error:
            raise error

    return PostgrestResponse(
        status=status,
        data=data,
        count=count,
        headers=normalized,
        error=error,
    )


__all__ = [
    "PostgrestErrorBody",
    "PostgrestResponse",
    "is_json",
    "parse_count",
    "is_error_status",
    "decode_response",
]
