from __future__ import annotations

from serviceforms.extraction.resolver import SchemaResolver, merge_schemas, resolve_ref, resolve_schema

DOCUMENT = {
    "components": {
        "schemas": {
            "Contact": {"type": "object", "properties": {"email": {"type": "string"}}},
            "Alias": {"$ref": "#/components/schemas/Contact"},
            "Base": {
                "type": "object",
                "required": ["name"],
                "description": "Base fields",
                "properties": {"name": {"type": "string"}},
            },
            "Extended": {
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {
                        "required": ["age", "name"],
                        "description": "Extra fields",
                        "properties": {"age": {"type": "integer"}},
                    },
                ],
            },
            "Either": {"oneOf": [{"$ref": "#/components/schemas/Contact"}, {"type": "string"}]},
            "Loop": {"$ref": "#/components/schemas/Loop"},
            "PingA": {"$ref": "#/components/schemas/PingB"},
            "PingB": {"$ref": "#/components/schemas/PingA"},
            "a/b": {"type": "string", "title": "escaped"},
        },
    },
    "tags": [{"name": "first"}],
}


def test_resolve_ref_follows_chains() -> None:
    resolved = resolve_ref(DOCUMENT, {"$ref": "#/components/schemas/Alias"})

    assert resolved == DOCUMENT["components"]["schemas"]["Contact"]


def test_resolve_ref_returns_plain_nodes_unchanged() -> None:
    node = {"type": "string"}
    assert resolve_ref(DOCUMENT, node) is node


def test_non_local_and_broken_refs_resolve_to_none() -> None:
    assert resolve_ref(DOCUMENT, {"$ref": "https://example.test/schema.json"}) is None
    assert resolve_ref(DOCUMENT, {"$ref": "#/components/schemas/Missing"}) is None
    assert resolve_ref(DOCUMENT, {"$ref": ["not", "a", "string"]}) is None


def test_lookup_handles_escapes_and_list_indices() -> None:
    resolver = SchemaResolver(DOCUMENT)

    assert resolver.lookup("#/components/schemas/a~1b") == {"type": "string", "title": "escaped"}
    assert resolver.lookup("#/tags/0/name") == "first"
    assert resolver.lookup("#/tags/3") is None


def test_self_and_mutual_cycles_resolve_to_none() -> None:
    assert resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Loop"}) is None
    assert resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/PingA"}) is None


def test_all_of_merges_properties_required_and_descriptions() -> None:
    resolved = resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Extended"})

    assert resolved is not None
    assert set(resolved["properties"]) == {"name", "age"}
    assert resolved["required"] == ["name", "age"]
    assert resolved["description"] == "Base fields\n\nExtra fields"
    assert "allOf" not in resolved


def test_one_of_takes_first_alternative() -> None:
    resolved = resolve_schema(DOCUMENT, {"$ref": "#/components/schemas/Either"})

    assert resolved == DOCUMENT["components"]["schemas"]["Contact"]


def test_any_of_with_empty_list_is_left_as_is() -> None:
    assert resolve_schema(DOCUMENT, {"type": "string", "anyOf": []}) == {"type": "string", "anyOf": []}


def test_max_depth_bounds_expansion() -> None:
    nested: dict = {"type": "string"}
    for _ in range(5):
        nested = {"allOf": [nested]}

    assert resolve_schema({}, nested, max_depth=3) == {}
    assert resolve_schema({}, nested, max_depth=10) == {"type": "string"}


def test_resolve_traced_reports_followed_refs() -> None:
    resolver = SchemaResolver(DOCUMENT)

    resolved, refs = resolver.resolve_traced({"$ref": "#/components/schemas/Alias"})

    assert resolved is not None
    assert refs == {"#/components/schemas/Alias", "#/components/schemas/Contact"}


def test_merge_schemas_ignores_non_mapping_members() -> None:
    base = {"type": "object"}
    assert merge_schemas(base, None) is base
