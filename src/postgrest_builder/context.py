"""
Client configuration shared by every request built from it.

A ClientContext is immutable and safe to share between concurrent
builders; nothing in the library modifies it.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientContext(BaseModel):
    """
    Connection settings for one PostgREST endpoint.

    Attributes:
        base_url: Project URL without the REST path (e.g. "https://xyz.supabase.co")
        api_key: API key sent as `apikey` and as the bearer token
        schema_name: Database schema targeted by default (also accepted as `schema`)
        auth_headers: Extra default headers (e.g. a user access token)
        rest_path: Path of the REST endpoint below base_url

    Example:
        >>> ctx = ClientContext(base_url="http://localhost:3000/", api_key="anon")
        >>> ctx.base_url
        'http://localhost:3000'
        >>> ctx.schema
        'public'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    base_url: str = Field(
        ...,
        min_length=1,
        description="Project URL, trailing slash removed",
    )
    api_key: str = Field(
        ...,
        description="API key for the apikey and authorization headers",
    )
    schema_name: str = Field(
        default="public",
        alias="schema",
        min_length=1,
        description="Default database schema",
    )
    auth_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Additional headers sent with every request",
    )
    rest_path: str = Field(
        default="/rest/v1",
        description="REST endpoint path appended to base_url",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.rstrip("/")
        if not stripped:
            raise ValueError("base_url must not be empty")
        return stripped

    @property
    def schema(self) -> str:  # type: ignore[override]
        """Default database schema."""
        return self.schema_name

    def relation_url(self, relation: str) -> str:
        """Full URL of a table or view."""
        return f"{self.base_url}{self.rest_path}/{relation}"

    def default_headers(self) -> dict[str, str]:
        """
        Headers every request starts with.

        `auth_headers` win over the API-key defaults, so a user access
        token can replace the anonymous bearer token.
        """
        headers = {
            "apikey": self.api_key,
            "authorization": f"Bearer {self.api_key}",
        }
        headers.update({k.lower(): v for k, v in self.auth_headers.items()})
        return headers


__all__ = ["ClientContext"]
