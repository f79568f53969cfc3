"""Bundled fallback service definitions."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path

import yaml

from serviceforms import logger
from serviceforms.extraction.assembler import extract_services
from serviceforms.typing.enums import QuestionType, ServiceSource
from serviceforms.typing.models import ServiceDefinition, ServicePage, ServiceQuestion, ServiceQuestionOption

BUNDLED_SPEC_RESOURCE = "fallback-openapi.yaml"
BIN_COLOURS = ("Black", "Green", "Brown")


def _question(question_id: str, label: str, page_id: str, **kwargs: object) -> ServiceQuestion:
    return ServiceQuestion.model_validate({"id": question_id, "label": label, "page_id": page_id, **kwargs})


MANUAL_FALLBACK_SERVICES: tuple[ServiceDefinition, ...] = (
    ServiceDefinition(
        slug="create-missed-bin-servicerequest",
        name="Report a missed bin",
        summary="Use this service to report a missed bin",
        source=ServiceSource.FALLBACK,
        pages=[
            ServicePage(id="your-details", title="About you", order=0),
            ServicePage(id="about-the-bin", title="About the bin", order=1),
            ServicePage(id="case-details", title="Case details", order=2),
        ],
        questions=[
            _question("contact.first-name", "First name", "your-details"),
            _question("contact.last-name", "Last name", "your-details"),
            _question("contact.email", "Email address", "your-details"),
            _question("contact.telephone", "Telephone number", "your-details"),
            _question(
                "contact.dob",
                "Date of birth",
                "your-details",
                type=QuestionType.DATE,
                hint="For example, 31 3 1970",
            ),
            _question("contact.home-address", "Home address", "your-details", type=QuestionType.TEXTAREA),
            _question(
                "bin-type",
                "Which bin was missed?",
                "about-the-bin",
                type=QuestionType.SELECT,
                options=[ServiceQuestionOption(value=colour, label=colour) for colour in BIN_COLOURS],
            ),
            _question(
                "address",
                "Address of the missed bin",
                "about-the-bin",
                type=QuestionType.TEXTAREA,
                required=True,
            ),
            _question(
                "date",
                "Date of missed collection",
                "about-the-bin",
                type=QuestionType.DATE,
                required=True,
                hint="For example, 24 3 2024",
            ),
            _question("case.title", "Case title", "case-details", required=True),
            _question("case.ticketnumber", "External reference number", "case-details"),
            _question("case.description", "Notes", "case-details", type=QuestionType.TEXTAREA),
        ],
    ),
    ServiceDefinition(
        slug="create-report-asb-servicerequest",
        name="Report anti-social behaviour",
        summary="Use this service to report anti-social behaviour",
        source=ServiceSource.FALLBACK,
        pages=[
            ServicePage(id="incident-details", title="About the incident", order=1),
            ServicePage(id="people-involved", title="People involved", order=2),
        ],
        questions=[
            _question(
                "address",
                "Address of reported behaviour",
                "incident-details",
                type=QuestionType.TEXTAREA,
                required=True,
            ),
            _question("notes", "Notes", "incident-details", type=QuestionType.TEXTAREA, required=True),
            _question("reported-by-name", "Reporting contact", "people-involved", required=True),
            _question("report-against-name", "Reported contact (if known)", "people-involved"),
        ],
    ),
)


def _read_bundled_spec(path: Path | None) -> str:
    if path is not None:
        return path.read_text(encoding="utf-8")
    return resources.files("serviceforms.data").joinpath(BUNDLED_SPEC_RESOURCE).read_text(encoding="utf-8")


def build_fallback_services(path: Path | None = None) -> list[ServiceDefinition]:
    """Extract the bundled fallback document, or return the hand-authored definitions.

    Args:
        path (Path | None): Optional replacement for the bundled document.

    Returns:
        list[ServiceDefinition]: Definitions tagged `fallback`, never empty.
    """
    try:
        document = yaml.safe_load(_read_bundled_spec(path))
    except (OSError, yaml.YAMLError):
        logger.exception("Failed to parse the bundled fallback OpenAPI specification")
        return list(MANUAL_FALLBACK_SERVICES)

    services = extract_services(document, source=ServiceSource.FALLBACK)
    if not services:
        logger.warning("The bundled fallback OpenAPI specification did not yield any services")
        return list(MANUAL_FALLBACK_SERVICES)
    return services


@lru_cache(maxsize=4)
def fallback_services(path: Path | None = None) -> tuple[ServiceDefinition, ...]:
    """Return the memoised fallback services, computed on first use.

    Args:
        path (Path | None): Optional replacement for the bundled document.

    Returns:
        tuple[ServiceDefinition, ...]: Fallback definitions.
    """
    return tuple(build_fallback_services(path))
