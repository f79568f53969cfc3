from __future__ import annotations

import pytest

from serviceforms.extraction.inference import (
    build_schema_options,
    infer_question_type,
    parse_meta_options,
    parse_type_override,
)
from serviceforms.typing.enums import QuestionType
from serviceforms.typing.models import ServiceQuestionOption


@pytest.mark.parametrize(
    ("schema", "expected"),
    [
        (None, QuestionType.TEXT),
        ({}, QuestionType.TEXT),
        ({"type": "string"}, QuestionType.TEXT),
        ({"type": "string", "enum": ["a"]}, QuestionType.SELECT),
        ({"type": "boolean"}, QuestionType.CHECKBOX),
        ({"type": "string", "format": "date"}, QuestionType.DATE),
        ({"type": "integer"}, QuestionType.NUMBER),
        ({"type": "number"}, QuestionType.NUMBER),
        ({"type": "string", "format": "textarea"}, QuestionType.TEXTAREA),
        ({"type": "string", "maxLength": 200}, QuestionType.TEXTAREA),
        ({"type": "string", "maxLength": 199}, QuestionType.TEXT),
        ({"type": "array", "items": {"type": "string"}}, QuestionType.TEXTAREA),
    ],
)
def test_infer_question_type(schema, expected) -> None:
    assert infer_question_type(schema) == expected


def test_enum_takes_precedence_over_boolean() -> None:
    assert infer_question_type({"type": "boolean", "enum": [True, False]}) == QuestionType.SELECT


@pytest.mark.parametrize(
    ("meta", "expected"),
    [
        ({"type": "Dropdown"}, QuestionType.SELECT),
        ({"control": "radios"}, QuestionType.SELECT),
        ({"widget": "multiline"}, QuestionType.TEXTAREA),
        ({"fieldType": "yes-no"}, QuestionType.CHECKBOX),
        ({"component": "dateInput"}, QuestionType.DATE),
        ({"input": "currency"}, QuestionType.NUMBER),
        ({"presentation": "short-text"}, QuestionType.TEXT),
    ],
)
def test_parse_type_override_synonyms(meta, expected) -> None:
    assert parse_type_override(meta) == expected


def test_parse_type_override_ignores_unknown_and_non_string_values() -> None:
    assert parse_type_override({"type": "signature"}) is None
    assert parse_type_override({"type": 3}) is None
    assert parse_type_override(None) is None


def test_build_schema_options_uses_enum_descriptions() -> None:
    options = build_schema_options(
        {"enum": ["black_bin", "green_bin", True], "x-enum-descriptions": ["General waste"]},
    )

    assert options == [
        ServiceQuestionOption(value="black_bin", label="General waste"),
        ServiceQuestionOption(value="green_bin", label="Green bin"),
        ServiceQuestionOption(value="true", label="true"),
    ]


def test_build_schema_options_without_enum() -> None:
    assert build_schema_options({"type": "string"}) is None
    assert build_schema_options({"enum": []}) == []


def test_parse_meta_options_accepts_strings() -> None:
    assert parse_meta_options({"options": ["first_choice", ""]}) == [
        ServiceQuestionOption(value="first_choice", label="First choice"),
    ]


def test_parse_meta_options_accepts_objects_with_synonyms() -> None:
    options = parse_meta_options(
        {
            "choices": [
                {"code": "B", "text": "Black"},
                {"id": 2},
                {"label": "No value"},
                7,
            ],
        },
    )

    assert options == [
        ServiceQuestionOption(value="B", label="Black"),
        ServiceQuestionOption(value="2", label="2"),
    ]


def test_parse_meta_options_accepts_mapping() -> None:
    assert parse_meta_options({"values": {"y": "Yes", "n": "No"}}) == [
        ServiceQuestionOption(value="y", label="Yes"),
        ServiceQuestionOption(value="n", label="No"),
    ]


def test_parse_meta_options_without_candidates() -> None:
    assert parse_meta_options({"options": []}) is None
    assert parse_meta_options({"options": [{"label": "orphan"}]}) is None
    assert parse_meta_options({"options": "Yes"}) is None
