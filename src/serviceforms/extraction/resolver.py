"""Local `$ref` resolution and `allOf`/`oneOf`/`anyOf` flattening."""

from __future__ import annotations

from typing import Any

from serviceforms import logger

Schema = dict[str, Any]

DEFAULT_MAX_REF_DEPTH = 32
_ALTERNATIVE_KEYWORDS = ("oneOf", "anyOf")


def _unescape_pointer_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def merge_schemas(base: Schema, addition: Schema | None) -> Schema:
    """Merge one resolved `allOf` member onto the accumulated schema.

    Args:
        base (Schema): Accumulated schema.
        addition (Schema | None): Next resolved member.

    Returns:
        Schema: New merged schema; inputs are left untouched.
    """
    if not isinstance(addition, dict):
        return base

    combined = {**base, **addition}

    base_properties = base.get("properties")
    addition_properties = addition.get("properties")
    if base_properties or addition_properties:
        combined["properties"] = {
            **(base_properties if isinstance(base_properties, dict) else {}),
            **(addition_properties if isinstance(addition_properties, dict) else {}),
        }

    base_required = base.get("required")
    addition_required = addition.get("required")
    if isinstance(base_required, list) or isinstance(addition_required, list):
        merged_required = [*(base_required or []), *(addition_required or [])]
        combined["required"] = list(dict.fromkeys(merged_required))

    base_description = base.get("description")
    addition_description = addition.get("description")
    if base_description and addition_description and base_description != addition_description:
        combined["description"] = f"{base_description}\n\n{addition_description}"

    return combined


class SchemaResolver:
    """Dereference and flatten schema fragments of one in-memory document.

    Only local pointers (`#/...`) are followed. Remote references, broken
    pointer segments, reference cycles and expansions nested deeper than
    `max_depth` all resolve to `None`.
    """

    def __init__(self, document: Any, *, max_depth: int = DEFAULT_MAX_REF_DEPTH) -> None:
        """Initialize resolver.

        Args:
            document (Any): Parsed OpenAPI document.
            max_depth (int): Maximum nested expansion depth.
        """
        self._document = document
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        """Return the maximum nested expansion depth."""
        return self._max_depth

    def lookup(self, ref: str) -> Any:
        """Follow one local JSON pointer.

        Args:
            ref (str): Reference string such as `#/components/schemas/Contact`.

        Returns:
            Any: Target node, or None when the pointer is non-local or broken.
        """
        if not isinstance(ref, str) or not ref.startswith("#/"):
            logger.debug("Skipping non-local reference", extra={"ref": ref})
            return None

        current = self._document
        for raw_segment in ref[2:].split("/"):
            segment = _unescape_pointer_segment(raw_segment)
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                logger.debug("Broken reference segment", extra={"ref": ref, "segment": segment})
                return None
        return current

    def resolve_ref(self, node: Any) -> Schema | None:
        """Follow a chain of `$ref` hops without flattening composition.

        Args:
            node (Any): Schema node, possibly a `$ref` object.

        Returns:
            Schema | None: Dereferenced mapping.
        """
        return self._follow(node, frozenset(), set())

    def resolve(self, node: Any) -> Schema | None:
        """Return the dereferenced, composition-flattened schema.

        Args:
            node (Any): Schema node.

        Returns:
            Schema | None: Flattened schema, or None when unresolvable.
        """
        return self._resolve(node, 0, frozenset(), set())

    def resolve_traced(self, node: Any) -> tuple[Schema | None, frozenset[str]]:
        """Resolve a node and report every reference followed on the way.

        Args:
            node (Any): Schema node.

        Returns:
            tuple[Schema | None, frozenset[str]]: Flattened schema and followed references.
        """
        trail: set[str] = set()
        resolved = self._resolve(node, 0, frozenset(), trail)
        return resolved, frozenset(trail)

    def _follow(self, node: Any, active: frozenset[str], trail: set[str]) -> Schema | None:
        current = node
        hops = 0
        while isinstance(current, dict) and "$ref" in current:
            ref = current["$ref"]
            if not isinstance(ref, str):
                return None
            if ref in active:
                logger.debug("Reference cycle detected", extra={"ref": ref})
                return None
            if hops >= self._max_depth:
                logger.debug("Reference chain too deep", extra={"ref": ref})
                return None
            trail.add(ref)
            active = active | {ref}
            hops += 1
            current = self.lookup(ref)
        return current if isinstance(current, dict) else None

    def _resolve(self, node: Any, depth: int, active: frozenset[str], trail: set[str]) -> Schema | None:
        if depth > self._max_depth:
            logger.debug("Schema composition too deep", extra={"depth": depth})
            return None

        followed: set[str] = set()
        resolved = self._follow(node, active, followed)
        trail.update(followed)
        if resolved is None:
            return None
        active = active | followed

        all_of = resolved.get("allOf")
        if isinstance(all_of, list):
            remainder = {key: value for key, value in resolved.items() if key != "allOf"}
            merged = self._resolve(remainder, depth + 1, active, trail) or {}
            for member in all_of:
                merged = merge_schemas(merged, self._resolve(member, depth + 1, active, trail))
            return merged

        for keyword in _ALTERNATIVE_KEYWORDS:
            alternatives = resolved.get(keyword)
            if isinstance(alternatives, list) and alternatives:
                return self._resolve(alternatives[0], depth + 1, active, trail)

        return resolved


def resolve_ref(document: Any, node: Any) -> Schema | None:
    """Follow local `$ref` hops of `node` within `document`."""
    return SchemaResolver(document).resolve_ref(node)


def resolve_schema(document: Any, node: Any, *, max_depth: int = DEFAULT_MAX_REF_DEPTH) -> Schema | None:
    """Return the dereferenced, composition-flattened schema for `node`.

    Args:
        document (Any): Parsed OpenAPI document.
        node (Any): Schema node, possibly a `$ref` object.
        max_depth (int): Maximum nested expansion depth.

    Returns:
        Schema | None: Flattened schema, or None when unresolvable.
    """
    return SchemaResolver(document, max_depth=max_depth).resolve(node)
