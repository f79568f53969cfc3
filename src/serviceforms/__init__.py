"""ServiceForms package."""

from serviceforms.exceptions import (
    PackageError,
    ServiceNotFoundError,
    SettingsError,
    SpecificationError,
)
from serviceforms.logging import configure_logging, get_logger
from serviceforms.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("serviceforms")

__all__ = [
    "PackageError",
    "ServiceNotFoundError",
    "Settings",
    "SettingsError",
    "SpecificationError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
