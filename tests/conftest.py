"""Pytest marker auto-assignment by folder and shared OpenAPI fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from serviceforms import logger
from serviceforms.fallback import fallback_services
from serviceforms.settings import get_settings

MARKED_DIRECTORIES = ("unit", "integration", "end2end")


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = (Path(config.rootpath) / "tests" / marker).resolve()

    for item in items:
        try:
            path = Path(str(item.path)).resolve()
        except OSError:
            logger.warning("Could not resolve test path", extra={"test": item.name, "marker": marker})
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    for marker in MARKED_DIRECTORIES:
        _mark_tests_by_directory(config, items, marker)


@pytest.fixture(autouse=True)
def _clear_caches() -> None:
    get_settings.cache_clear()
    fallback_services.cache_clear()


def _build_document(schema: dict[str, Any], **operation: Any) -> dict[str, Any]:
    """Wrap a request-body schema into a one-operation OpenAPI document."""
    path = operation.pop("path", "/report")
    method = operation.pop("method", "post")
    components = operation.pop("components", None)
    document: dict[str, Any] = {
        "openapi": "3.1.0",
        "paths": {
            path: {
                method: {
                    "requestBody": {"content": {"application/json": {"schema": schema}}},
                    **operation,
                },
            },
        },
    }
    if components is not None:
        document["components"] = components
    return document


@pytest.fixture
def document_factory():
    return _build_document


@pytest.fixture
def report_document() -> dict[str, Any]:
    return _build_document(
        {
            "type": "object",
            "required": ["address"],
            "properties": {
                "address": {"type": "string"},
                "date": {"type": "string", "format": "date"},
            },
        },
    )
