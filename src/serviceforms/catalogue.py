"""Service catalogue: fetch the live specification, extract services, fall back on failure."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import httpx
import structlog
import yaml

from serviceforms import logger
from serviceforms.exceptions import ServiceNotFoundError, SpecificationError
from serviceforms.extraction.assembler import extract_services
from serviceforms.fallback import fallback_services
from serviceforms.settings import Settings, build_httpx_client_kwargs, get_settings
from serviceforms.typing.enums import ServiceSource

if TYPE_CHECKING:
    from serviceforms.typing.models import ServiceDefinition

ACCEPT_HEADER = "application/yaml, application/json"
MALFORMED_SPECIFICATION_MESSAGE = "Malformed OpenAPI specification"
EMPTY_SPECIFICATION_MESSAGE = "The specification did not contain any service definitions."


def parse_specification(raw: str) -> dict[str, Any]:
    """Parse a YAML or JSON OpenAPI document.

    Args:
        raw (str): Document text.

    Raises:
        SpecificationError: If the text is neither YAML nor JSON, or is not a mapping.

    Returns:
        dict[str, Any]: Parsed document.
    """
    try:
        document = yaml.safe_load(raw)
    except yaml.YAMLError as yaml_error:
        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            message = f"{MALFORMED_SPECIFICATION_MESSAGE}: {yaml_error}"
            raise SpecificationError(message=message) from yaml_error

    if not isinstance(document, dict):
        message = f"{MALFORMED_SPECIFICATION_MESSAGE}: expected a mapping at the top level"
        raise SpecificationError(message=message)
    return document


class ServiceCatalogue:
    """Published service definitions with graceful fallback.

    The catalogue never publishes an empty list: any fetch, parse or
    extraction failure records a single descriptive `error` and publishes the
    bundled fallback definitions instead. When refreshes overlap, the latest
    one wins and earlier in-flight fetches are cancelled.
    """

    def __init__(self, settings: Settings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        """Initialize catalogue.

        Args:
            settings (Settings | None): Runtime settings. Defaults to cached settings.
            client (httpx.AsyncClient | None): Client to reuse instead of one per fetch.
        """
        self._settings = settings or get_settings()
        self._client = client
        self._services: list[ServiceDefinition] = []
        self._error: str | None = None
        self._inflight: asyncio.Task[list[ServiceDefinition]] | None = None

    @property
    def services(self) -> list[ServiceDefinition]:
        """Return the published services."""
        return list(self._services)

    @property
    def error(self) -> str | None:
        """Return the message describing the last failed load, if any."""
        return self._error

    @property
    def loading(self) -> bool:
        """Return whether a refresh is in flight."""
        return self._inflight is not None and not self._inflight.done()

    def get(self, slug: str) -> ServiceDefinition | None:
        """Look up a published service by slug."""
        return next((service for service in self._services if service.slug == slug), None)

    def require(self, slug: str) -> ServiceDefinition:
        """Return the published service with `slug`.

        Raises:
            ServiceNotFoundError: If no published service has that slug.
        """
        service = self.get(slug)
        if service is None:
            raise ServiceNotFoundError(slug=slug, available=[item.slug for item in self._services])
        return service

    def _extract(
        self,
        document: Any,
        source: ServiceSource = ServiceSource.OPENAPI,
    ) -> list[ServiceDefinition]:
        services = extract_services(document, source=source, max_ref_depth=self._settings.max_ref_depth)
        if not services:
            raise SpecificationError(message=EMPTY_SPECIFICATION_MESSAGE)
        return services

    def _publish(self, services: list[ServiceDefinition]) -> list[ServiceDefinition]:
        self._services = services
        self._error = None
        logger.info("Service definitions published", extra={"count": len(services)})
        return self.services

    def _publish_fallback(self, exc: SpecificationError) -> list[ServiceDefinition]:
        logger.warning("Falling back to bundled service definitions", extra={"reason": str(exc)})
        self._services = list(fallback_services(self._settings.fallback_spec_path))
        self._error = str(exc)
        return self.services

    def load_document(
        self,
        document: Any,
        source: ServiceSource = ServiceSource.OPENAPI,
    ) -> list[ServiceDefinition]:
        """Publish the services of an already parsed document.

        Args:
            document (Any): Parsed OpenAPI document.
            source (ServiceSource): Source tag stamped on every definition.

        Returns:
            list[ServiceDefinition]: Published services (fallback ones when none were found).
        """
        try:
            return self._publish(self._extract(document, source))
        except SpecificationError as exc:
            return self._publish_fallback(exc)

    def load_text(self, raw: str) -> list[ServiceDefinition]:
        """Parse and publish the services of a YAML or JSON document.

        Args:
            raw (str): Document text.

        Returns:
            list[ServiceDefinition]: Published services (fallback ones on failure).
        """
        try:
            document = parse_specification(raw)
            return self._publish(self._extract(document))
        except SpecificationError as exc:
            return self._publish_fallback(exc)

    async def _get(self, client: httpx.AsyncClient) -> str:
        response = await client.get(self._settings.spec_url, headers={"Accept": ACCEPT_HEADER})
        if not response.is_success:
            raise SpecificationError(
                message=f"Failed to load OpenAPI specification (status {response.status_code})",
                source=self._settings.spec_url,
            )
        return response.text

    async def fetch_text(self) -> str:
        """Download the live specification.

        Raises:
            SpecificationError: If the request fails or returns a non-success status.

        Returns:
            str: Document text.
        """
        try:
            if self._client is not None:
                return await self._get(self._client)
            async with httpx.AsyncClient(**build_httpx_client_kwargs(self._settings)) as client:
                return await self._get(client)
        except httpx.HTTPError as exc:
            raise SpecificationError(
                message=f"Failed to load OpenAPI specification: {exc}",
                source=self._settings.spec_url,
            ) from exc

    async def _fetch_services(self) -> list[ServiceDefinition]:
        raw = await self.fetch_text()
        return self._extract(parse_specification(raw))

    async def refresh(self) -> list[ServiceDefinition]:
        """Fetch the live specification and publish its services.

        A refresh started while another is in flight cancels the earlier one;
        the superseded call returns the services published at that point
        without changing them.

        Returns:
            list[ServiceDefinition]: Published services (fallback ones on failure).
        """
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Cancelling superseded specification fetch")
            self._inflight.cancel()

        with structlog.contextvars.bound_contextvars(spec_url=self._settings.spec_url):
            task = asyncio.ensure_future(self._fetch_services())
            self._inflight = task
            try:
                services = await task
            except asyncio.CancelledError:
                if self._inflight is not task:
                    return self.services
                raise
            except SpecificationError as exc:
                if self._inflight is not task:
                    return self.services
                logger.error("Failed to load OpenAPI specification")
                return self._publish_fallback(exc)

            if self._inflight is not task:
                return self.services
            return self._publish(services)
