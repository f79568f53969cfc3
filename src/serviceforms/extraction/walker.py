"""Recursive flattening of request-body schemas into form questions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from serviceforms import logger
from serviceforms.extraction.inference import build_schema_options, infer_question_type
from serviceforms.extraction.metadata import (
    FieldOverrides,
    Meta,
    extension_meta,
    merge_metas,
    page_reference,
    resolve_field_meta,
)
from serviceforms.extraction.text import sentence_case
from serviceforms.typing.enums import QuestionType
from serviceforms.typing.models import ServiceQuestion

if TYPE_CHECKING:
    from serviceforms.extraction.pages import PageRegistry
    from serviceforms.extraction.resolver import Schema, SchemaResolver


def is_object_schema(schema: object) -> bool:
    """Return whether a resolved schema is an object with properties to descend into."""
    return (
        isinstance(schema, dict)
        and schema.get("type") == "object"
        and isinstance(schema.get("properties"), dict)
        and bool(schema["properties"])
    )


def dedupe_questions(questions: list[ServiceQuestion]) -> list[ServiceQuestion]:
    """Drop repeated question ids, keeping the first occurrence in order."""
    seen: set[str] = set()
    unique: list[ServiceQuestion] = []
    for question in questions:
        if question.id in seen:
            continue
        seen.add(question.id)
        unique.append(question)
    return unique


def _non_blank(value: object) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


class QuestionWalker:
    """Walk one request-body schema and emit its leaf questions.

    The walker shares a resolver and a page registry for the duration of one
    operation. Properties are visited in declared order; nested objects and
    arrays of objects are flattened under dotted ids.
    """

    def __init__(self, resolver: SchemaResolver, registry: PageRegistry) -> None:
        """Initialize walker.

        Args:
            resolver (SchemaResolver): Resolver bound to the source document.
            registry (PageRegistry): Page registry of the current operation.
        """
        self._resolver = resolver
        self._registry = registry

    def walk(self, schema: Any, contexts: list[Meta] | None = None) -> list[ServiceQuestion]:
        """Flatten a schema into deduplicated questions.

        Args:
            schema (Any): Root schema node, resolved or not.
            contexts (list[Meta] | None): Metadata contexts inherited from the caller.

        Returns:
            list[ServiceQuestion]: Questions in recursion order.
        """
        questions = self._walk(
            schema,
            prefix=(),
            parent_required=None,
            contexts=list(contexts or []),
            inherited_page=None,
            expanding=frozenset(),
        )
        return dedupe_questions(questions)

    def _walk(
        self,
        schema: Any,
        *,
        prefix: tuple[str, ...],
        parent_required: list[str] | None,
        contexts: list[Meta],
        inherited_page: object | None,
        expanding: frozenset[frozenset[str]],
    ) -> list[ServiceQuestion]:
        if len(prefix) > self._resolver.max_depth:
            logger.debug("Schema nesting too deep", extra={"path": ".".join(prefix)})
            return []

        resolved, refs = self._resolver.resolve_traced(schema)
        if resolved is None:
            return []
        if refs:
            expanding = expanding | {refs}

        own_meta = extension_meta(resolved)
        if own_meta is not None:
            contexts = [own_meta, *contexts]

        if not is_object_schema(resolved):
            if not prefix:
                return []
            key = prefix[-1]
            full_key = ".".join(prefix)
            meta = merge_metas(resolve_field_meta(contexts, key, full_key))
            question = self._build_question(
                full_key,
                key,
                resolved,
                required=key in {str(name) for name in parent_required or []},
                meta=meta,
                contexts=contexts,
                inherited_page=inherited_page,
            )
            return [question] if question else []

        required_keys = {str(name) for name in resolved.get("required") or []}
        questions: list[ServiceQuestion] = []

        for raw_key, property_schema in resolved["properties"].items():
            # YAML reads keys such as `2024` or `yes` as int or bool.
            key = str(raw_key)
            property_resolved, property_refs = self._resolver.resolve_traced(property_schema)
            nested_prefix = (*prefix, key)
            full_key = ".".join(nested_prefix)

            property_meta = extension_meta(property_resolved)
            field_meta = merge_metas(resolve_field_meta(contexts, key, full_key), property_meta)
            nested_contexts = [
                *([field_meta] if field_meta is not None else []),
                *([property_meta] if property_meta is not None else []),
                *contexts,
            ]
            nested_page = page_reference(field_meta) or inherited_page

            embedded = self._embedded_object(property_resolved)
            if embedded is not None:
                embedded_schema, embedded_refs = embedded
                expansion = property_refs | embedded_refs
                if expansion in expanding:
                    logger.debug("Skipping recursive property", extra={"path": full_key})
                    continue
                questions.extend(
                    self._walk(
                        embedded_schema,
                        prefix=nested_prefix,
                        parent_required=embedded_schema.get("required"),
                        contexts=nested_contexts,
                        inherited_page=nested_page,
                        expanding=expanding | {expansion} if expansion else expanding,
                    ),
                )
                continue

            question = self._build_question(
                full_key,
                key,
                property_resolved,
                required=key in required_keys,
                meta=field_meta,
                contexts=nested_contexts,
                inherited_page=nested_page,
            )
            if question is not None:
                questions.append(question)

        return questions

    def _embedded_object(self, schema: Schema | None) -> tuple[Schema, frozenset[str]] | None:
        """Return the object schema to descend into for an object or array-of-objects property."""
        if is_object_schema(schema):
            return schema, frozenset()
        if isinstance(schema, dict) and schema.get("type") == "array" and schema.get("items"):
            items, item_refs = self._resolver.resolve_traced(schema["items"])
            if is_object_schema(items):
                return items, item_refs
        return None

    def _resolve_page_reference(
        self,
        overrides: FieldOverrides,
        contexts: list[Meta],
        inherited_page: object | None,
    ) -> object | None:
        if overrides.page:
            return overrides.page
        if inherited_page:
            return inherited_page
        for context in contexts:
            reference = page_reference(context)
            if reference:
                return reference
        return None

    def _build_question(
        self,
        question_id: str,
        key: str,
        schema: Schema | None,
        *,
        required: bool,
        meta: Meta | None,
        contexts: list[Meta],
        inherited_page: object | None,
    ) -> ServiceQuestion | None:
        if schema is None:
            return None

        overrides = FieldOverrides.from_meta(meta)
        question_type = overrides.type or infer_question_type(schema)

        options = overrides.options or build_schema_options(schema)
        if question_type == QuestionType.SELECT and not options:
            logger.debug("Dropping select question without options", extra={"question_id": question_id})
            return None

        label_candidate = overrides.label if overrides.label is not None else schema.get("title")
        label = _non_blank(label_candidate) or sentence_case(key)

        schema_description = schema.get("description")
        hint = overrides.hint
        if hint is None and isinstance(schema_description, str):
            hint = schema_description

        long_description = overrides.long_description
        if long_description is None and hint != overrides.description:
            long_description = overrides.description

        page_ref = self._resolve_page_reference(overrides, contexts, inherited_page)
        page = self._registry.register(
            page_ref,
            title_override=overrides.page_title,
            description_override=overrides.page_description,
        )
        page_id = page.id if page is not None else None
        if page_id is None and not page_ref:
            page_id = self._registry.sole_page_id

        return ServiceQuestion(
            id=question_id,
            label=label,
            type=question_type,
            required=overrides.required if overrides.required is not None else required,
            hint=hint or None,
            description=long_description if long_description and long_description != hint else None,
            heading=overrides.heading,
            preface=overrides.preface,
            options=options if question_type == QuestionType.SELECT and options else [],
            page_id=page_id,
            order=overrides.order,
            width=overrides.width,
            error_message=overrides.error_message,
        )
