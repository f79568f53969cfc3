"""Typing-centric domain modules."""

from serviceforms.typing.enums import QuestionType, QuestionWidth, ServiceSource
from serviceforms.typing.models import (
    DateAnswer,
    ServiceDefinition,
    ServicePage,
    ServiceQuestion,
    ServiceQuestionOption,
    ServiceStep,
)

__all__ = [
    "DateAnswer",
    "QuestionType",
    "QuestionWidth",
    "ServiceDefinition",
    "ServicePage",
    "ServiceQuestion",
    "ServiceQuestionOption",
    "ServiceSource",
    "ServiceStep",
]
