"""OpenAPI request-body to form-question extraction engine."""

from serviceforms.extraction.assembler import ServiceAssembler, extract_services, is_status_operation
from serviceforms.extraction.inference import infer_question_type, parse_type_override
from serviceforms.extraction.metadata import FieldOverrides, resolve_field_meta
from serviceforms.extraction.pages import PageRegistry
from serviceforms.extraction.resolver import SchemaResolver, resolve_ref, resolve_schema
from serviceforms.extraction.walker import QuestionWalker

__all__ = [
    "FieldOverrides",
    "PageRegistry",
    "QuestionWalker",
    "SchemaResolver",
    "ServiceAssembler",
    "extract_services",
    "infer_question_type",
    "is_status_operation",
    "parse_type_override",
    "resolve_field_meta",
    "resolve_ref",
    "resolve_schema",
]
