from __future__ import annotations

from serviceforms.extraction.assembler import (
    derive_service_name,
    extract_services,
    is_status_operation,
    resolve_request_body_schema,
)
from serviceforms.extraction.resolver import SchemaResolver
from serviceforms.typing.enums import QuestionType, ServiceSource


def test_report_document_yields_one_service(report_document) -> None:
    services = extract_services(report_document)

    assert len(services) == 1
    service = services[0]
    assert service.slug == "report"
    assert service.name == "Report"
    assert service.source == ServiceSource.OPENAPI
    assert service.pages is None
    assert [(question.id, question.type, question.required) for question in service.questions] == [
        ("address", QuestionType.TEXT, True),
        ("date", QuestionType.DATE, False),
    ]


def test_extraction_is_idempotent(report_document) -> None:
    assert extract_services(report_document) == extract_services(report_document)


def test_health_operation_with_body_is_excluded(document_factory) -> None:
    document = document_factory(
        {"type": "object", "properties": {"probe": {"type": "string"}}},
        path="/internal/health-check",
    )

    assert extract_services(document) == []


def test_status_keywords_are_detected_in_every_identifying_field() -> None:
    assert is_status_operation("/v1/Ping", {})
    assert is_status_operation("/orders", {"summary": "Order STATUS lookup"})
    assert is_status_operation("/orders", {"operationId": "getTodoList"})
    assert is_status_operation("/orders", {"tags": ["Health"]})
    assert is_status_operation("/orders", {"x-service-status": "status"})
    assert not is_status_operation("/orders", {"summary": "Create order", "tags": [3]})


def test_operation_without_request_body_is_skipped(document_factory) -> None:
    document = document_factory({"type": "object", "properties": {"a": {"type": "string"}}})
    document["paths"]["/report"]["get"] = {"summary": "Read report"}
    document["paths"]["/report"]["parameters"] = [{"name": "id", "in": "query"}]

    services = extract_services(document)

    assert [service.name for service in services] == ["Report"]


def test_empty_enum_drops_question_but_keeps_service(document_factory) -> None:
    document = document_factory(
        {
            "type": "object",
            "properties": {"kind": {"type": "string", "enum": []}, "notes": {"type": "string"}},
        },
    )

    services = extract_services(document)

    assert [question.id for question in services[0].questions] == ["notes"]


def test_empty_enum_as_only_question_omits_service(document_factory) -> None:
    document = document_factory({"type": "object", "properties": {"kind": {"type": "string", "enum": []}}})

    assert extract_services(document) == []


def test_all_of_question_set_is_union_of_members(document_factory) -> None:
    left = {"type": "object", "required": ["a"], "properties": {"a": {"type": "string"}}}
    right = {"type": "object", "properties": {"b": {"type": "boolean"}}}
    document = document_factory(
        {"allOf": [{"$ref": "#/components/schemas/Left"}, {"$ref": "#/components/schemas/Right"}]},
        components={"schemas": {"Left": left, "Right": right}},
    )

    questions = extract_services(document)[0].questions

    assert [(question.id, question.type, question.required) for question in questions] == [
        ("a", QuestionType.TEXT, True),
        ("b", QuestionType.CHECKBOX, False),
    ]


def test_one_of_uses_first_alternative_only(document_factory) -> None:
    document = document_factory(
        {
            "oneOf": [
                {"type": "object", "properties": {"first": {"type": "string"}}},
                {"type": "object", "properties": {"second": {"type": "string"}}},
            ],
        },
    )

    questions = extract_services(document)[0].questions

    assert [question.id for question in questions] == ["first"]


def test_duplicate_dotted_ids_keep_first_question(document_factory) -> None:
    document = document_factory(
        {
            "type": "object",
            "properties": {
                "contact.email": {"type": "string", "title": "Dotted key"},
                "contact": {"type": "object", "properties": {"email": {"type": "string", "title": "Nested"}}},
            },
        },
    )

    questions = extract_services(document)[0].questions

    assert [(question.id, question.label) for question in questions] == [("contact.email", "Dotted key")]


def test_questions_sort_by_page_order_then_question_order(document_factory) -> None:
    document = document_factory(
        {
            "type": "object",
            "x-gds": {
                "pages": [{"id": "second", "order": 2}, {"id": "first", "order": 1}],
                "fields": {
                    "a": {"page": "second"},
                    "b": {"page": "first", "order": 5},
                    "c": {"page": "first", "order": 0},
                },
            },
            "properties": {
                "a": {"type": "string"},
                "b": {"type": "string"},
                "c": {"type": "string"},
                "d": {"type": "string", "x-gds": {"page": {"id": "later", "order": 3}}},
            },
        },
    )

    service = extract_services(document)[0]

    assert [question.id for question in service.questions] == ["c", "b", "a", "d"]
    assert service.pages is not None
    assert [(page.id, page.questions) for page in service.pages] == [
        ("first", ["c", "b"]),
        ("second", ["a"]),
        ("later", ["d"]),
    ]


def test_unreferenced_pages_are_pruned(document_factory) -> None:
    document = document_factory(
        {
            "type": "object",
            "x-gds": {"pages": [{"id": "used"}, {"id": "unused"}], "fields": {"a": {"page": "used"}}},
            "properties": {"a": {"type": "string"}},
        },
    )

    pages = extract_services(document)[0].pages

    assert pages is not None
    assert [page.id for page in pages] == ["used"]


def test_single_root_page_collects_every_question(document_factory) -> None:
    document = document_factory(
        {
            "type": "object",
            "x-gds": {"steps": [{"id": "all", "title": "Tell us about it"}]},
            "properties": {"a": {"type": "string"}, "b": {"type": "string"}},
        },
    )

    service = extract_services(document)[0]

    assert {question.page_id for question in service.questions} == {"all"}
    assert service.pages is not None
    assert service.pages[0].questions == ["a", "b"]


def test_slug_and_name_derivation(document_factory) -> None:
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    document = document_factory(schema, operationId="Create Thing", summary="Zebra crossing request")
    document["paths"]["/things/{id}"] = {
        "put": {
            "tags": ["street_lighting"],
            "requestBody": {"content": {"application/json": {"schema": schema}}},
        },
    }

    services = extract_services(document)

    assert [(service.slug, service.name) for service in services] == [
        ("street-lighting", "Street lighting"),
        ("create-thing", "Zebra crossing request"),
    ]


def test_slug_collisions_keep_first_operation(document_factory) -> None:
    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    document = document_factory(schema, operationId="report", summary="First")
    document["paths"]["/other"] = {
        "post": {
            "operationId": "Report",
            "summary": "Second",
            "requestBody": {"content": {"application/json": {"schema": schema}}},
        },
    }

    services = extract_services(document)

    assert [service.name for service in services] == ["First"]


def test_summary_prefers_operation_description(document_factory) -> None:
    document = document_factory(
        {"type": "object", "description": "Schema text", "properties": {"a": {"type": "string"}}},
        description="Operation text",
    )
    fallback_document = document_factory(
        {"type": "object", "description": "Schema text", "properties": {"a": {"type": "string"}}},
    )

    assert extract_services(document)[0].summary == "Operation text"
    assert extract_services(fallback_document)[0].summary == "Schema text"


def test_source_tag_is_stamped_on_every_service(report_document) -> None:
    services = extract_services(report_document, source=ServiceSource.FALLBACK)

    assert {service.source for service in services} == {ServiceSource.FALLBACK}


def test_malformed_documents_yield_nothing() -> None:
    assert extract_services(None) == []
    assert extract_services({"paths": []}) == []
    assert extract_services({"paths": {"/a": "nope", "/b": {"post": "nope"}}}) == []
    assert extract_services({"paths": {"/a": {"post": {"requestBody": {"$ref": "#/missing"}}}}}) == []


def test_request_body_prefers_json_content_types() -> None:
    content = {
        "text/plain": {"schema": {"type": "string"}},
        "application/vnd.api+json": {"schema": {"title": "vnd"}},
        "application/ld+json": {"schema": {"title": "ld"}},
    }
    resolver = SchemaResolver({"components": {"requestBodies": {"Body": {"content": content}}}})

    body_ref = {"$ref": "#/components/requestBodies/Body"}
    assert resolve_request_body_schema(resolver, body_ref) == {"title": "ld"}
    assert resolve_request_body_schema(resolver, {"content": {"text/csv": {"schema": {"title": "csv"}}}}) == {
        "title": "csv",
    }
    assert resolve_request_body_schema(resolver, {"content": {}}) is None


def test_derive_service_name_fallbacks() -> None:
    assert derive_service_name("/a", {"summary": "Named"}) == "Named"
    assert derive_service_name("/a", {"tags": ["missed-bin"]}) == "Missed bin"
    assert derive_service_name("/servicerequest/missed_bin/", {}) == "Missed bin"
    assert derive_service_name("/", {}) == "Service"
