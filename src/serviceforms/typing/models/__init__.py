"""Core domain model exports."""

from serviceforms.typing.models.service import (
    DateAnswer,
    ServiceDefinition,
    ServicePage,
    ServiceQuestion,
    ServiceQuestionOption,
    ServiceStep,
)

__all__ = [
    "DateAnswer",
    "ServiceDefinition",
    "ServicePage",
    "ServiceQuestion",
    "ServiceQuestionOption",
    "ServiceStep",
]
