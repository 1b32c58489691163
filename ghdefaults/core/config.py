import base64
from functools import lru_cache
from pathlib import Path
from urllib.parse import unquote, urlparse

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def resolve_value(raw: str) -> str:
    """Resolve a credential given as a literal, ``file:`` or ``data:`` URI.

    Accepted forms
    ──────────────
    • plain value              used as-is
    • file:/etc/app/key.pem    contents of the file
    • file:///etc/app/key.pem  same, with an empty authority
    • data:12345               the text after the scheme
    • data:,percent%20encoded  RFC 2397 data URI
    • data:;base64,MTIzNDU=    RFC 2397 data URI, base64 payload

    The result is whitespace-trimmed.
    """
    if raw.startswith("file:"):
        path = unquote(urlparse(raw).path)
        return Path(path).read_text(encoding="utf-8").strip()

    if raw.startswith("data:"):
        rest = raw.removeprefix("data:")
        if "," not in rest:
            return rest.strip()
        meta, payload = rest.split(",", 1)
        if meta.endswith(";base64"):
            return base64.b64decode(payload).decode("utf-8").strip()
        return unquote(payload).strip()

    return raw.strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The three GitHub App credentials can each be given directly, as a
    ``file:`` URI (mounted secrets), or as a ``data:`` URI. They are
    resolved once, when the settings object is built.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # GitHub App. Private key is PEM contents after resolution.
    github_app_id: int = 0
    github_private_key: str = ""
    github_webhook_secret: str = ""

    @field_validator("github_app_id", mode="before")
    @classmethod
    def resolve_app_id(cls, v):
        if isinstance(v, str):
            v = resolve_value(v) or 0
        return v

    @field_validator("github_private_key", mode="before")
    @classmethod
    def resolve_private_key(cls, v: str) -> str:
        key = resolve_value(v)
        # PEM parsers want the trailing newline that strip() removed
        return f"{key}\n" if key else ""

    @field_validator("github_webhook_secret", mode="before")
    @classmethod
    def resolve_webhook_secret(cls, v: str) -> str:
        return resolve_value(v)

    # Seconds per outbound GitHub request.
    github_timeout: float = 10.0

    # Upper bound on processing one delivery; in-flight calls are cancelled.
    webhook_timeout: float = 30.0

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 8080

    # Sentry: leave blank to disable error capture.
    sentry_dsn: str = ""

    # App
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
