from __future__ import annotations

from serviceforms.answers import format_answer, initial_answers, validate_step
from serviceforms.fallback import build_fallback_services
from serviceforms.steps import build_service_steps, question_step_index
from serviceforms.typing.enums import QuestionType, QuestionWidth


def test_missed_bin_service_is_extracted_from_bundled_document() -> None:
    missed_bin = build_fallback_services()[0]

    assert missed_bin.name == "Report a missed bin"
    assert missed_bin.summary == "Use this service to report a missed bin"
    assert [question.id for question in missed_bin.questions] == [
        "contact.first-name",
        "contact.last-name",
        "contact.email",
        "contact.telephone",
        "contact.dob",
        "contact.home-address",
        "bin-type",
        "address",
        "date",
        "case.title",
        "case.ticketnumber",
        "case.description",
    ]
    assert missed_bin.pages is not None
    assert [(page.id, page.title) for page in missed_bin.pages] == [
        ("your-details", "About you"),
        ("about-the-bin", "About the bin"),
        ("case-details", "Case details"),
    ]

    bin_type = missed_bin.question("bin-type")
    assert bin_type is not None
    assert bin_type.label == "Which bin was missed?"
    assert bin_type.type == QuestionType.SELECT
    assert [option.value for option in bin_type.options] == ["Black", "Green", "Brown"]

    email = missed_bin.question("contact.email")
    assert email is not None
    assert email.width == QuestionWidth.TWO_THIRDS
    assert email.page_id == "your-details"

    date = missed_bin.question("date")
    assert date is not None
    assert date.type == QuestionType.DATE
    assert date.required is True
    assert date.error_message == "Enter the date of the missed collection"

    home_address = missed_bin.question("contact.home-address")
    assert home_address is not None
    assert home_address.type == QuestionType.TEXTAREA
    assert home_address.required is False

    case_title = missed_bin.question("case.title")
    assert case_title is not None
    assert case_title.required is True
    assert case_title.page_id == "case-details"


def test_asb_service_orders_questions_by_step() -> None:
    asb = build_fallback_services()[1]

    assert asb.slug == "create-report-asb-servicerequest"
    assert [question.id for question in asb.questions] == [
        "address",
        "notes",
        "reported-by-name",
        "report-against-name",
    ]
    assert [(question.id, question.type) for question in asb.questions if question.required] == [
        ("address", QuestionType.TEXTAREA),
        ("notes", QuestionType.TEXTAREA),
        ("reported-by-name", QuestionType.TEXT),
    ]


def test_fallback_service_steps_and_answers() -> None:
    missed_bin = build_fallback_services()[0]
    steps = build_service_steps(missed_bin)

    assert [step.page.id for step in steps if step.page] == ["your-details", "about-the-bin", "case-details"]
    index = question_step_index(steps)
    assert index["contact.dob"] == 0
    assert index["date"] == 1
    assert index["case.description"] == 2

    answers = initial_answers(missed_bin)
    assert validate_step(steps[1], answers) == {
        "address": "Enter an answer before continuing.",
        "date": "Enter the date of the missed collection",
    }

    answers["address"] = "1 High Street"
    answers["date"] = {"day": "24", "month": "3", "year": "2024"}
    answers["bin-type"] = "Green"
    assert validate_step(steps[1], answers) == {}

    bin_type = missed_bin.question("bin-type")
    date = missed_bin.question("date")
    assert bin_type is not None
    assert date is not None
    assert format_answer(bin_type, answers["bin-type"]) == "Green"
    assert format_answer(date, answers["date"]) == "24 March 2024"
