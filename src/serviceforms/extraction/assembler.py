"""Top-level extraction of service definitions from an OpenAPI document."""

from __future__ import annotations

import math
from typing import Any

from pydantic import ValidationError

from serviceforms import logger
from serviceforms.extraction.metadata import extension_meta
from serviceforms.extraction.pages import PageRegistry
from serviceforms.extraction.resolver import DEFAULT_MAX_REF_DEPTH, Schema, SchemaResolver
from serviceforms.extraction.text import sentence_case, slugify
from serviceforms.extraction.walker import QuestionWalker
from serviceforms.typing.enums import ServiceSource
from serviceforms.typing.models import ServiceDefinition, ServiceQuestion

STATUS_KEYWORDS = ("status", "health", "todo", "ping")
STATUS_EXTENSION_KEYS = ("x-status", "x-service-status", "xServiceStatus")
PREFERRED_CONTENT_TYPES = ("application/json", "application/ld+json", "application/vnd.api+json")


def is_status_operation(path: str, operation: dict[str, Any]) -> bool:
    """Return whether an operation is a status, health or diagnostic endpoint.

    Args:
        path (str): Path template.
        operation (dict[str, Any]): Operation object.

    Returns:
        bool: True when any identifying text contains a status keyword.
    """
    candidates: list[object] = [path, operation.get("summary"), operation.get("operationId")]
    tags = operation.get("tags")
    if isinstance(tags, list):
        candidates.extend(tags)
    candidates.extend(operation.get(key) for key in STATUS_EXTENSION_KEYS)

    return any(
        keyword in candidate.lower()
        for candidate in candidates
        if isinstance(candidate, str)
        for keyword in STATUS_KEYWORDS
    )


def resolve_request_body_schema(resolver: SchemaResolver, request_body: object) -> Any:
    """Return the JSON content schema node of a request body, unresolved.

    Args:
        resolver (SchemaResolver): Resolver bound to the document.
        request_body (object): Request body object or reference.

    Returns:
        Any: Schema node of the preferred content type, or None.
    """
    body = resolver.resolve(request_body)
    content = body.get("content") if body else None
    if not isinstance(content, dict) or not content:
        return None

    media = next((content[kind] for kind in PREFERRED_CONTENT_TYPES if content.get(kind) is not None), None)
    if media is None:
        media = next(iter(content.values()))
    if not isinstance(media, dict):
        return None
    return media.get("schema")


def derive_service_name(path: str, operation: dict[str, Any]) -> str:
    """Derive a display name from summary, first tag, or last path segment."""
    summary = operation.get("summary")
    if isinstance(summary, str) and summary:
        return summary

    tags = operation.get("tags")
    if isinstance(tags, list) and tags and isinstance(tags[0], str):
        return sentence_case(tags[0])

    segments = [segment for segment in path.split("/") if segment]
    return sentence_case(segments[-1] if segments else "Service") or "Service"


def sort_questions(questions: list[ServiceQuestion], registry: PageRegistry) -> list[ServiceQuestion]:
    """Order questions by page order, own order (or first-seen index), then first-seen index.

    Args:
        questions (list[ServiceQuestion]): Questions in recursion order.
        registry (PageRegistry): Registry holding page orders.

    Returns:
        list[ServiceQuestion]: Sorted copy.
    """

    def _key(indexed: tuple[int, ServiceQuestion]) -> tuple[float, float, int]:
        index, question = indexed
        page = registry.get(question.page_id)
        page_order = page.order if page is not None and page.order is not None else math.inf
        question_order = question.order if question.order is not None else index
        return page_order, question_order, index

    return [question for _, question in sorted(enumerate(questions), key=_key)]


class ServiceAssembler:
    """Extract service definitions from one parsed OpenAPI document."""

    def __init__(
        self,
        document: Any,
        *,
        source: ServiceSource = ServiceSource.OPENAPI,
        max_ref_depth: int = DEFAULT_MAX_REF_DEPTH,
    ) -> None:
        """Initialize assembler.

        Args:
            document (Any): Parsed OpenAPI 3.x document.
            source (ServiceSource): Source tag stamped on every definition.
            max_ref_depth (int): Maximum nested `$ref`/composition expansion.
        """
        self._document = document
        self._source = source
        self._resolver = SchemaResolver(document, max_depth=max_ref_depth)

    def _operations(self) -> list[tuple[str, str, dict[str, Any]]]:
        paths = self._document.get("paths") if isinstance(self._document, dict) else None
        if not isinstance(paths, dict):
            return []

        operations: list[tuple[str, str, dict[str, Any]]] = []
        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            for method, operation in path_item.items():
                if str(method).lower() == "parameters" or not isinstance(operation, dict):
                    continue
                operations.append((str(path), str(method), operation))
        return operations

    def extract_operation(
        self,
        path: str,
        operation: dict[str, Any],
        counter: int,
    ) -> ServiceDefinition | None:
        """Build the service definition of one operation.

        Args:
            path (str): Path template.
            operation (dict[str, Any]): Operation object.
            counter (int): Number of services accepted so far, used for placeholder slugs.

        Returns:
            ServiceDefinition | None: Definition, or None when the operation is not a form.
        """
        if not operation.get("requestBody"):
            return None
        if is_status_operation(path, operation):
            logger.debug("Skipping status operation", extra={"path": path})
            return None

        schema_node = resolve_request_body_schema(self._resolver, operation["requestBody"])
        schema: Schema | None = self._resolver.resolve(schema_node)
        if schema is None:
            return None

        root_meta = extension_meta(schema)
        registry = PageRegistry.from_meta(root_meta)
        walker = QuestionWalker(self._resolver, registry)
        questions = walker.walk(schema_node)
        if not questions:
            logger.debug("Skipping operation without questions", extra={"path": path})
            return None

        questions = sort_questions(questions, registry)
        questions_by_page: dict[str, list[str]] = {}
        for question in questions:
            if question.page_id is not None:
                questions_by_page.setdefault(question.page_id, []).append(question.id)
        pages = registry.published(set(questions_by_page), questions_by_page)

        name = derive_service_name(path, operation)
        operation_id = operation.get("operationId")
        slug = (
            (slugify(operation_id) if isinstance(operation_id, str) else "")
            or slugify(name)
            or slugify(path)
            or f"service-{counter + 1}"
        )

        summary = operation.get("description") or schema.get("description")
        return ServiceDefinition(
            slug=slug,
            name=name,
            summary=summary if isinstance(summary, str) else None,
            questions=questions,
            pages=pages or None,
            source=self._source,
        )

    def extract(self) -> list[ServiceDefinition]:
        """Extract every qualifying operation, deduplicated by slug and sorted by name.

        Returns:
            list[ServiceDefinition]: Published definitions.
        """
        services: dict[str, ServiceDefinition] = {}
        for path, method, operation in self._operations():
            try:
                service = self.extract_operation(path, operation, len(services))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed operation",
                    extra={"path": path, "method": method, "errors": exc.error_count()},
                )
                continue
            if service is None:
                continue
            if service.slug in services:
                logger.debug(
                    "Discarding duplicate service slug",
                    extra={"slug": service.slug, "path": path, "method": method},
                )
                continue
            services[service.slug] = service

        return sorted(services.values(), key=lambda service: (service.name.casefold(), service.name))


def extract_services(
    document: Any,
    *,
    source: ServiceSource = ServiceSource.OPENAPI,
    max_ref_depth: int = DEFAULT_MAX_REF_DEPTH,
) -> list[ServiceDefinition]:
    """Extract the published service definitions of an OpenAPI document.

    Malformed input never raises: it yields fewer (possibly zero) services.

    Args:
        document (Any): Parsed OpenAPI 3.x document.
        source (ServiceSource): Source tag stamped on every definition.
        max_ref_depth (int): Maximum nested `$ref`/composition expansion.

    Returns:
        list[ServiceDefinition]: Definitions sorted by display name.
    """
    return ServiceAssembler(document, source=source, max_ref_depth=max_ref_depth).extract()
