"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
import ssl
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from serviceforms.exceptions import SettingsError

logger = logging.getLogger(__name__)

DEFAULT_SPEC_URL = "https://func-servicebuilder-api-int.azurewebsites.net/api/openapi/v31.yaml"


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "serviceforms"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    spec_url: str = Field(
        default=DEFAULT_SPEC_URL,
        validation_alias="SPEC_URL",
        description="URL of the live OpenAPI specification.",
    )
    fallback_spec_path: Path | None = Field(
        default=None,
        validation_alias="FALLBACK_SPEC_PATH",
        description="Override for the bundled fallback OpenAPI document.",
    )
    max_ref_depth: int = Field(
        default=32,
        ge=1,
        validation_alias="MAX_REF_DEPTH",
        description="Maximum `$ref`/composition nesting before a schema counts as unresolvable.",
    )

    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY", description="HTTP proxy URL.")
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="HTTPS proxy URL.",
    )
    all_proxy: str | None = Field(default=None, validation_alias="ALL_PROXY", description="All proxy URL.")
    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="Path to SSL certificate.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="Specification fetch timeout in seconds.",
    )

    @field_validator("spec_url")
    @classmethod
    def _validate_spec_url(cls, value: str) -> str:
        """Ensure the specification URL is an HTTP(S) URL.

        Args:
            value (str): Raw URL.

        Raises:
            ValueError: If the scheme is not http or https.

        Returns:
            str: Validated URL.
        """
        if not value.startswith(("http://", "https://")):
            raise ValueError("SPEC_URL must be an http(s) URL")  # noqa: TRY003
        return value


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def build_httpx_client_kwargs(settings: Settings) -> dict[str, Any]:
    """Build kwargs used for `httpx.AsyncClient`.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Arguments for the client constructor.
    """
    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
        "follow_redirects": True,
    }

    proxy_url = settings.https_proxy or settings.http_proxy or settings.all_proxy
    if proxy_url:
        kwargs["proxy"] = proxy_url
    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except ValidationError as exc:
        logger.error("Invalid settings", extra={"errors": exc.error_count()})
        raise SettingsError(exc=exc) from exc
