"""
Endpoint configuration for a reporting API client.
"""

import os
import typing as t
from urllib.parse import urlparse

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

log = structlog.get_logger(__name__)

ResponseFormat = t.Literal["json", "xml", "csv", "tsv", "html", "rss", "original"]

DEFAULT_ENV_PREFIX = "MATOMO_"
DEFAULT_TIMEOUT_SECONDS = 30.0

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


class ClientConfig(BaseModel):
    """
    Immutable settings shared by every call issued through one client.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(description="base URL of the analytics instance, e.g. https://example.org/matomo")
    token_auth: str | None = Field(
        default=None, description="static credential token attached to every call", repr=False
    )
    id_site: int | str | None = Field(
        default=None, description="default site identifier, used when a call does not supply one"
    )
    format: ResponseFormat = Field(default="json", description="response format requested")
    language: str | None = Field(default=None, description="default language tag for translations")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, description="timeout in seconds for one physical request"
    )
    security_mode: bool = Field(
        default=True,
        description="send calls as POST bodies (True) or GET query strings (False)",
    )
    endpoint_path: str = Field(default="/index.php", description="entry script of the API")

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, value: t.Any) -> t.Any:
        if not isinstance(value, str):
            return value
        stripped = value.strip().rstrip("/")
        if not stripped:
            raise ValueError("url cannot be empty")
        parsed = urlparse(url=stripped)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"url must be an absolute http(s) URL, got '{value}'")
        return stripped

    @field_validator("timeout")
    @classmethod
    def check_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be greater than zero")
        return value

    @field_validator("endpoint_path", mode="before")
    @classmethod
    def normalize_endpoint_path(cls, value: t.Any) -> t.Any:
        if isinstance(value, str) and not value.startswith("/"):
            return f"/{value}"
        return value

    @property
    def endpoint_url(self) -> str:
        """Absolute URL every physical request is sent to."""
        return f"{self.url}{self.endpoint_path}"

    @property
    def http_method(self) -> str:
        return "POST" if self.security_mode else "GET"

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX, **overrides: t.Any) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        A ``.env`` file in the working directory is loaded first without
        overriding variables that are already set.

        Parameters
        ----------
        prefix : str, optional
            Variable prefix, ``MATOMO_`` by default.
        **overrides : typing.Any
            Explicit values that take precedence over the environment.
            ``None`` overrides are ignored.

        Returns
        -------
        ClientConfig
            Validated configuration.

        Raises
        ------
        ValueError
            If no URL is available.
        """
        load_dotenv()
        env_values: dict[str, t.Any] = {
            "url": os.getenv(f"{prefix}URL"),
            "token_auth": os.getenv(f"{prefix}AUTH_TOKEN"),
            "id_site": os.getenv(f"{prefix}DEFAULT_SITE_ID"),
            "format": os.getenv(f"{prefix}FORMAT"),
            "language": os.getenv(f"{prefix}LANGUAGE"),
            "timeout": os.getenv(f"{prefix}TIMEOUT"),
            "security_mode": _parse_bool(
                name=f"{prefix}SECURITY_MODE", value=os.getenv(f"{prefix}SECURITY_MODE")
            ),
        }
        env_values.update({key: value for key, value in overrides.items() if value is not None})
        if not env_values.get("url"):
            raise ValueError(
                f"API url not found. Either set {prefix}URL in the environment variables or provide it through the url parameter."
            )
        values = {key: value for key, value in env_values.items() if value not in (None, "")}
        log.debug(
            event="Loaded client configuration from environment",
            prefix=prefix,
            keys=sorted(key for key in values if key != "token_auth"),
            has_token=bool(values.get("token_auth")),
        )
        return cls(**values)


def _parse_bool(*, name: str, value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got '{value}'")
