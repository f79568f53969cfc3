"""Service, page and question models published by the extraction engine."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from serviceforms.typing.enums import QuestionType, QuestionWidth, ServiceSource

_MODEL_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class ServiceQuestionOption(BaseModel):
    """One selectable value of a `select` question."""

    model_config = _MODEL_CONFIG

    value: str
    label: str


class ServiceQuestion(BaseModel):
    """One leaf input derived from a schema property."""

    model_config = _MODEL_CONFIG

    id: str = Field(description="Dot-delimited path from the schema root, e.g. `contact.email`.")
    label: str
    type: QuestionType = QuestionType.TEXT
    required: bool = False
    hint: str | None = None
    description: str | None = None
    heading: str | None = None
    preface: str | None = None
    options: list[ServiceQuestionOption] = Field(default_factory=list)
    page_id: str | None = None
    order: int | float | None = None
    width: QuestionWidth | None = None
    error_message: str | None = None

    @model_validator(mode="after")
    def _check_select_options(self) -> ServiceQuestion:
        """Reject `select` questions without options.

        Raises:
            ValueError: If a select question carries no option.

        Returns:
            ServiceQuestion: Validated question.
        """
        if self.type == QuestionType.SELECT and not self.options:
            raise ValueError("select questions require at least one option")  # noqa: TRY003
        return self


class ServicePage(BaseModel):
    """Named group of questions presented together as one step."""

    model_config = _MODEL_CONFIG

    id: str
    title: str
    description: str | None = None
    order: int | float | None = None
    questions: list[str] = Field(default_factory=list)


class ServiceDefinition(BaseModel):
    """One form-producing API operation."""

    model_config = _MODEL_CONFIG

    slug: str
    name: str
    summary: str | None = None
    questions: list[ServiceQuestion]
    pages: list[ServicePage] | None = None
    source: ServiceSource = ServiceSource.OPENAPI

    def question(self, question_id: str) -> ServiceQuestion | None:
        """Return the question with the given id, if any.

        Args:
            question_id (str): Question identifier.

        Returns:
            ServiceQuestion | None: Matching question.
        """
        return next((question for question in self.questions if question.id == question_id), None)


class DateAnswer(BaseModel):
    """Day/month/year triple entered for a `date` question."""

    model_config = ConfigDict(extra="ignore")

    day: str = ""
    month: str = ""
    year: str = ""


class ServiceStep(BaseModel):
    """One navigable step: a page with its questions, or a lone question."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page: ServicePage | None = None
    questions: list[ServiceQuestion]
