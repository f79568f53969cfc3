"""Lookup and interpretation of `x-gds` vendor-extension metadata.

Metadata may be attached at several scopes: embedded in the property schema
itself, on an ancestor object schema, or on the request-body root. Contexts
are searched most-specific first and the first context that knows the field
wins; matching is fuzzy so that `contact.first_name`, `contact-first-name`
and `first_name` can all address the same property.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from serviceforms.extraction.inference import parse_meta_options, parse_type_override
from serviceforms.extraction.text import comparable_key, first_number, first_present, first_string
from serviceforms.typing.enums import QuestionType, QuestionWidth
from serviceforms.typing.models import ServiceQuestionOption

Meta = dict[str, Any]

EXTENSION_KEY = "x-gds"

COLLECTION_KEYS = ("fields", "field", "questions", "inputs", "properties", "items")
IDENTIFIER_KEYS = ("id", "field", "name", "key", "code", "path", "property", "questionId")
PAGE_REFERENCE_KEYS = ("page", "pageId", "step", "section", "group")

_LABEL_KEYS = ("label", "question", "title", "text")
_HINT_KEYS = ("hint", "help", "caption", "supportingText", "explanation", "helper", "description")
_HEADING_KEYS = ("heading", "legend", "titleHeading", "questionHeading")
_PREFACE_KEYS = ("preface", "intro", "introduction", "lead", "lede", "textBefore", "summary")
_WIDTH_KEYS = ("width", "size", "column", "columns", "widthClass", "widthModifier", "inputWidth")
_ORDER_KEYS = ("order", "position", "index", "weight", "sortOrder")
_ERROR_MESSAGE_KEYS = ("errorMessage", "error", "validationMessage", "errorText")
_PAGE_TITLE_KEYS = ("pageTitle", "sectionTitle", "groupTitle")
_PAGE_DESCRIPTION_KEYS = ("pageDescription", "sectionDescription", "groupDescription", "pageSummary")

_WIDTHS: dict[str, QuestionWidth] = {
    "full": QuestionWidth.FULL,
    "1/1": QuestionWidth.FULL,
    "100%": QuestionWidth.FULL,
    "three-quarters": QuestionWidth.THREE_QUARTERS,
    "three quarters": QuestionWidth.THREE_QUARTERS,
    "3/4": QuestionWidth.THREE_QUARTERS,
    "two-thirds": QuestionWidth.TWO_THIRDS,
    "two thirds": QuestionWidth.TWO_THIRDS,
    "two-of-three": QuestionWidth.TWO_THIRDS,
    "2/3": QuestionWidth.TWO_THIRDS,
    "half": QuestionWidth.ONE_HALF,
    "one-half": QuestionWidth.ONE_HALF,
    "one half": QuestionWidth.ONE_HALF,
    "1/2": QuestionWidth.ONE_HALF,
    "50%": QuestionWidth.ONE_HALF,
    "one-third": QuestionWidth.ONE_THIRD,
    "one third": QuestionWidth.ONE_THIRD,
    "1/3": QuestionWidth.ONE_THIRD,
    "quarter": QuestionWidth.ONE_QUARTER,
    "one-quarter": QuestionWidth.ONE_QUARTER,
    "one quarter": QuestionWidth.ONE_QUARTER,
    "1/4": QuestionWidth.ONE_QUARTER,
}


def extension_meta(schema: object) -> Meta | None:
    """Return the `x-gds` mapping embedded in a schema, if any."""
    if not isinstance(schema, dict):
        return None
    meta = schema.get(EXTENSION_KEY)
    return meta if isinstance(meta, dict) else None


def merge_metas(*metas: object) -> Meta | None:
    """Shallow-merge metadata mappings left to right, ignoring non-mappings.

    Returns:
        Meta | None: Merged mapping, or None when no argument is a mapping.
    """
    mappings = [meta for meta in metas if isinstance(meta, dict)]
    if not mappings:
        return None
    merged: Meta = {}
    for meta in mappings:
        merged.update(meta)
    return merged


def matches_field_key(candidate: str, key: str, full_key: str) -> bool:
    """Return whether a metadata identifier designates the field `key` at `full_key`.

    Args:
        candidate (str): Identifier found in metadata.
        key (str): Property key.
        full_key (str): Dot-delimited path of the property.

    Returns:
        bool: True on a normalised match with the key or the full path.
    """
    comparable = comparable_key(candidate)
    return comparable in {
        comparable_key(key),
        comparable_key(full_key),
        comparable_key(full_key.replace(".", "-")),
        comparable_key(key.replace(".", "-")),
    }


def _match_in_collection(collection: object, key: str, full_key: str) -> Meta | None:
    if isinstance(collection, list):
        for entry in collection:
            if not entry:
                continue
            if isinstance(entry, str):
                if matches_field_key(entry, key, full_key):
                    return {}
                continue
            if isinstance(entry, dict):
                identifier = first_present(entry, IDENTIFIER_KEYS)
                if isinstance(identifier, str) and matches_field_key(identifier, key, full_key):
                    return entry
        return None

    if isinstance(collection, dict):
        for entry_key, entry_value in collection.items():
            if isinstance(entry_value, dict) and matches_field_key(str(entry_key), key, full_key):
                return entry_value
    return None


def resolve_field_meta(contexts: list[Meta], key: str, full_key: str) -> Meta | None:
    """Find the metadata entry describing one field.

    Each context is tried in order: first direct lookup by key, full path and
    their underscore variants, then a fuzzy scan of the named collections.
    The first context yielding a match wins. A bare string entry in a
    collection matches with an empty mapping.

    Args:
        contexts (list[Meta]): Metadata contexts, most specific first.
        key (str): Property key.
        full_key (str): Dot-delimited path of the property.

    Returns:
        Meta | None: Matching metadata, or None when no context mentions the field.
    """
    direct_keys = [key, full_key, key.replace(".", "_"), full_key.replace(".", "_")]

    for context in contexts:
        if not isinstance(context, dict):
            continue

        for candidate in direct_keys:
            value = context.get(candidate) if candidate else None
            if isinstance(value, dict):
                return value

        for collection_key in COLLECTION_KEYS:
            collection = context.get(collection_key)
            if not collection:
                continue
            match = _match_in_collection(collection, key, full_key)
            if match is not None:
                return match

    return None


def page_reference(meta: object) -> object | None:
    """Return the first truthy page reference declared in a mapping."""
    if not isinstance(meta, dict):
        return None
    for key in PAGE_REFERENCE_KEYS:
        value = meta.get(key)
        if value:
            return value
    return None


def parse_width(meta: object) -> QuestionWidth | None:
    """Normalise a layout width declared in metadata."""
    candidate = first_present(meta, _WIDTH_KEYS)
    if not isinstance(candidate, str):
        return None
    return _WIDTHS.get(candidate.lower())


def _required_override(meta: object) -> bool | None:
    if not isinstance(meta, dict):
        return None
    if isinstance(meta.get("required"), bool):
        return meta["required"]
    if isinstance(meta.get("mandatory"), bool):
        return meta["mandatory"]
    if isinstance(meta.get("optional"), bool):
        return not meta["optional"]
    return None


class FieldOverrides(BaseModel):
    """Override values read from reconciled field metadata.

    Every attribute is optional; None means the schema-derived value applies.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    label: str | None = None
    type: QuestionType | None = None
    required: bool | None = None
    hint: str | None = None
    description: str | None = None
    long_description: str | None = None
    heading: str | None = None
    preface: str | None = None
    options: list[ServiceQuestionOption] | None = None
    width: QuestionWidth | None = None
    order: int | float | None = None
    error_message: str | None = None
    page: Any = None
    page_title: str | None = None
    page_description: str | None = None

    @classmethod
    def from_meta(cls, meta: object) -> FieldOverrides:
        """Read every override from a metadata mapping.

        Args:
            meta (object): Reconciled field metadata, possibly None.

        Returns:
            FieldOverrides: Parsed overrides.
        """
        if not isinstance(meta, dict):
            return cls()

        label = first_present(meta, _LABEL_KEYS)
        long_description = meta.get("longDescription")
        return cls(
            label=label if isinstance(label, str) else None,
            type=parse_type_override(meta),
            required=_required_override(meta),
            hint=first_string(meta, _HINT_KEYS),
            description=meta.get("description") if isinstance(meta.get("description"), str) else None,
            long_description=long_description if isinstance(long_description, str) else None,
            heading=first_string(meta, _HEADING_KEYS),
            preface=first_string(meta, _PREFACE_KEYS),
            options=parse_meta_options(meta),
            width=parse_width(meta),
            order=first_number(meta, _ORDER_KEYS),
            error_message=first_string(meta, _ERROR_MESSAGE_KEYS),
            page=page_reference(meta),
            page_title=first_string(meta, _PAGE_TITLE_KEYS),
            page_description=first_string(meta, _PAGE_DESCRIPTION_KEYS),
        )
