"""Question type inference, type overrides and option building."""

from __future__ import annotations

from typing import Any

from serviceforms.extraction.text import first_present, first_string, sentence_case
from serviceforms.typing.enums import QuestionType
from serviceforms.typing.models import ServiceQuestionOption

TEXTAREA_MIN_LENGTH = 200

_TYPE_OVERRIDE_KEYS = ("type", "control", "component", "input", "widget", "fieldType", "presentation")
_OPTION_COLLECTION_KEYS = ("options", "choices", "items", "values")
_OPTION_VALUE_KEYS = ("value", "id", "code", "key", "name", "slug", "ref", "reference")
_OPTION_LABEL_KEYS = ("label", "text", "title", "name", "description")

TYPE_SYNONYMS: dict[QuestionType, frozenset[str]] = {
    QuestionType.TEXTAREA: frozenset(
        {"textarea", "text-area", "longtext", "long-text", "multiline", "multiline-text"},
    ),
    QuestionType.SELECT: frozenset({"select", "dropdown", "choice", "choices", "options", "radio", "radios"}),
    QuestionType.CHECKBOX: frozenset(
        {"checkbox", "checkboxes", "boolean", "bool", "confirm", "toggle", "yesno", "yes-no"},
    ),
    QuestionType.DATE: frozenset({"date", "datefield", "date-input", "dateinput"}),
    QuestionType.NUMBER: frozenset({"number", "numeric", "integer", "int", "currency"}),
    QuestionType.TEXT: frozenset({"text", "shorttext", "short-text", "string", "input"}),
}


def infer_question_type(schema: dict[str, Any] | None) -> QuestionType:
    """Infer the question type from a resolved schema fragment.

    Args:
        schema (dict[str, Any] | None): Resolved schema.

    Returns:
        QuestionType: Inferred type, `text` when nothing more specific applies.
    """
    if not schema:
        return QuestionType.TEXT

    schema_type = schema.get("type")
    max_length = schema.get("maxLength")

    if schema.get("enum") is not None:
        return QuestionType.SELECT
    if schema_type == "boolean":
        return QuestionType.CHECKBOX
    if schema.get("format") == "date":
        return QuestionType.DATE
    if schema_type in {"number", "integer"}:
        return QuestionType.NUMBER
    if (
        schema.get("format") == "textarea"
        or (isinstance(max_length, int | float) and max_length >= TEXTAREA_MIN_LENGTH)
        or schema_type == "array"
    ):
        return QuestionType.TEXTAREA
    return QuestionType.TEXT


def parse_type_override(meta: object) -> QuestionType | None:
    """Map an explicit metadata control name onto a question type.

    Args:
        meta (object): Reconciled field metadata.

    Returns:
        QuestionType | None: Overridden type, or None when absent or unknown.
    """
    candidate = first_string(meta, _TYPE_OVERRIDE_KEYS)
    if candidate is None:
        return None

    normalized = candidate.lower()
    for question_type, synonyms in TYPE_SYNONYMS.items():
        if normalized in synonyms:
            return question_type
    return None


def build_schema_options(schema: dict[str, Any] | None) -> list[ServiceQuestionOption] | None:
    """Build options from a schema `enum`, labelled by `x-enum-descriptions` when present.

    Args:
        schema (dict[str, Any] | None): Resolved schema.

    Returns:
        list[ServiceQuestionOption] | None: Options, or None without a list `enum`.
    """
    if not schema or not isinstance(schema.get("enum"), list):
        return None

    descriptions = schema.get("x-enum-descriptions")
    if not isinstance(descriptions, list):
        descriptions = []

    options: list[ServiceQuestionOption] = []
    for index, value in enumerate(schema["enum"]):
        description = descriptions[index] if index < len(descriptions) else None
        if description:
            label = str(description)
        elif isinstance(value, str):
            label = sentence_case(value)
        else:
            label = _stringify(value)
        options.append(ServiceQuestionOption(value=_stringify(value), label=label))
    return options


def parse_meta_options(meta: object) -> list[ServiceQuestionOption] | None:
    """Read options declared in metadata.

    Accepts a list of strings, a list of objects carrying value/label synonyms,
    or a mapping of value to label.

    Args:
        meta (object): Reconciled field metadata.

    Returns:
        list[ServiceQuestionOption] | None: Options, or None when none could be read.
    """
    candidates = first_present(meta, _OPTION_COLLECTION_KEYS)
    if not candidates:
        return None

    if isinstance(candidates, dict):
        entries: list[Any] = [{"value": value, "label": label} for value, label in candidates.items()]
    elif isinstance(candidates, list):
        entries = candidates
    else:
        return None

    options: list[ServiceQuestionOption] = []
    for entry in entries:
        if not entry:
            continue
        if isinstance(entry, str):
            options.append(ServiceQuestionOption(value=entry, label=sentence_case(entry)))
            continue
        if not isinstance(entry, dict):
            continue

        value = first_present(entry, _OPTION_VALUE_KEYS)
        if value is None:
            continue
        label = first_present(entry, _OPTION_LABEL_KEYS)
        options.append(
            ServiceQuestionOption(
                value=_stringify(value),
                label=_stringify(label) if label else sentence_case(_stringify(value)),
            ),
        )

    return options or None


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
