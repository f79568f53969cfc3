"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class SpecificationError(PackageError):
    """Raised when an OpenAPI document cannot be fetched, parsed or yields no services."""

    message: str
    source: str | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class ServiceNotFoundError(PackageError):
    """Raised when no published service matches a slug."""

    slug: str
    available: list[str]

    def __str__(self) -> str:
        """Return error message payload."""
        known = ", ".join(self.available) or "none"
        return f"Unknown service '{self.slug}' (available: {known})"
