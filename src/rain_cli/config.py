"""Runtime configuration and credential resolution.

Settings come from the environment only (pydantic-settings); there is
no ``.env`` file and no local state.  The bearer token is resolved from
two ordered sources:

1. ``RAINDROP_TOKEN`` (trimmed, non-empty);
2. the first non-blank line of ``~/.config/rain/token``.

The file is never opened when the environment provides a token.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rain_cli.exceptions import AuthMissingError

DEFAULT_API_BASE: str = "https://api.raindrop.io/rest/v1"


def get_token_file() -> Path:
    """Location of the fallback token file (follows ``HOME``)."""
    return Path.home() / ".config" / "rain" / "token"


class RainSettings(BaseSettings):
    """Central configuration for one CLI invocation."""

    model_config = SettingsConfigDict(
        env_prefix="RAINDROP_",
        extra="ignore",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    token: str | None = Field(
        default=None,
        description="Bearer token for the Raindrop.io REST API.",
    )
    api_base: str = Field(
        default=DEFAULT_API_BASE,
        min_length=1,
        description="Base URL of the REST API.",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds; unset keeps the httpx default.",
    )
    debug: bool = Field(
        default=False,
        validation_alias="RAIN_DEBUG",
        description="Emit debug logs on stderr.",
    )

    @field_validator("token")
    @classmethod
    def _blank_token_is_absent(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("api_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


def read_token_file(path: Path) -> str | None:
    """Return the first non-blank trimmed line of *path*, if any."""
    try:
        text = path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return None
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def resolve_credential(
    settings: RainSettings,
    token_file: Path | None = None,
) -> str:
    """Return the bearer token or raise :class:`AuthMissingError`.

    Never performs network validation; a bad token only surfaces when
    the server answers 401/403.
    """
    if settings.token:
        return settings.token

    path = token_file if token_file is not None else get_token_file()
    token = read_token_file(path)
    if token:
        return token

    raise AuthMissingError(
        "No Raindrop.io token found.",
        hint=f"Export RAINDROP_TOKEN or write the token to {path}.",
    )
