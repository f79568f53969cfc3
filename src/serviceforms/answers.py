"""Answer defaults, completeness checks and summary formatting per question type."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import ValidationError

from serviceforms.typing.enums import QuestionType
from serviceforms.typing.models import DateAnswer, ServiceDefinition, ServiceQuestion, ServiceStep

NOT_PROVIDED = "Not provided"

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def default_answer(question: ServiceQuestion) -> Any:
    """Return the empty answer for a question."""
    match question.type:
        case QuestionType.CHECKBOX:
            return False
        case QuestionType.DATE:
            return DateAnswer()
        case QuestionType.TEXT | QuestionType.TEXTAREA | QuestionType.SELECT | QuestionType.NUMBER:
            return ""


def initial_answers(service: ServiceDefinition) -> dict[str, Any]:
    """Return empty answers for every question of a service."""
    return {question.id: default_answer(question) for question in service.questions}


def as_date_answer(value: object) -> DateAnswer | None:
    """Coerce a mapping or `DateAnswer` into a `DateAnswer`.

    Args:
        value (object): Raw answer.

    Returns:
        DateAnswer | None: Parsed triple, or None when the value is not date-shaped.
    """
    if isinstance(value, DateAnswer):
        return value
    if not isinstance(value, dict) or not {"day", "month", "year"} & value.keys():
        return None
    try:
        return DateAnswer.model_validate(
            {part: value[part] for part in ("day", "month", "year") if isinstance(value.get(part), str)},
        )
    except ValidationError:
        return None


def _is_blank(value: object) -> bool:
    if value is None or isinstance(value, bool | dict | list):
        return True
    return not str(value).strip()


def is_complete(question: ServiceQuestion, value: object) -> bool:
    """Return whether an answer satisfies the question's required flag.

    Args:
        question (ServiceQuestion): Question.
        value (object): Current answer.

    Returns:
        bool: True when the question is optional or sufficiently answered.
    """
    if not question.required:
        return True

    match question.type:
        case QuestionType.CHECKBOX:
            return value is True
        case QuestionType.DATE:
            answer = as_date_answer(value)
            return answer is not None and not any(
                _is_blank(part) for part in (answer.day, answer.month, answer.year)
            )
        case QuestionType.TEXT | QuestionType.TEXTAREA | QuestionType.SELECT | QuestionType.NUMBER:
            return not _is_blank(value)


def error_message(question: ServiceQuestion) -> str:
    """Return the message shown when a required question is left incomplete."""
    if question.error_message:
        return question.error_message

    match question.type:
        case QuestionType.CHECKBOX:
            return "You must confirm this before continuing."
        case QuestionType.SELECT:
            return "Select an option to continue."
        case QuestionType.DATE:
            return "Enter the date in full before continuing."
        case QuestionType.TEXT | QuestionType.TEXTAREA | QuestionType.NUMBER:
            return "Enter an answer before continuing."


def validate_step(step: ServiceStep, answers: dict[str, Any]) -> dict[str, str]:
    """Return error messages for incomplete questions of a step, keyed by question id."""
    return {
        question.id: error_message(question)
        for question in step.questions
        if not is_complete(question, answers.get(question.id))
    }


def format_date(answer: DateAnswer) -> str:
    """Format a day/month/year answer as `31 March 1970`.

    Falls back to zero-padded `DD/MM/YYYY` when the parts do not form a valid date.

    Args:
        answer (DateAnswer): Date answer.

    Returns:
        str: Display text.
    """
    day, month, year = answer.day.strip(), answer.month.strip(), answer.year.strip()
    if not day or not month or not year:
        return NOT_PROVIDED

    padded = f"{day.zfill(2)}/{month.zfill(2)}/{year.zfill(4)}"
    try:
        parsed = date(int(year), int(month), int(day))
    except ValueError:
        return padded
    return f"{parsed.day} {_MONTH_NAMES[parsed.month - 1]} {parsed.year}"


def format_answer(question: ServiceQuestion, value: object) -> str:
    """Format an answer for the check-your-answers summary.

    Args:
        question (ServiceQuestion): Question.
        value (object): Current answer.

    Returns:
        str: Display text.
    """
    match question.type:
        case QuestionType.CHECKBOX:
            return "Yes" if value is True else "No"
        case QuestionType.DATE:
            answer = as_date_answer(value)
            return format_date(answer) if answer is not None else NOT_PROVIDED
        case QuestionType.SELECT:
            if _is_blank(value):
                return NOT_PROVIDED
            label = next((option.label for option in question.options if option.value == value), None)
            return label or str(value)
        case QuestionType.TEXT | QuestionType.TEXTAREA | QuestionType.NUMBER:
            return NOT_PROVIDED if _is_blank(value) else str(value)
