"""Step-by-step navigation over a service's pages and questions."""

from __future__ import annotations

import math

from serviceforms.typing.models import ServiceDefinition, ServiceQuestion, ServiceStep


def build_service_steps(service: ServiceDefinition) -> list[ServiceStep]:
    """Flatten a service into ordered form steps.

    Without pages every question is its own step. Otherwise each non-empty
    page becomes one step (pages sorted by order, then declaration index),
    followed by one step per question not assigned to any page.

    Args:
        service (ServiceDefinition): Service definition.

    Returns:
        list[ServiceStep]: Ordered steps.
    """
    if not service.pages:
        return [ServiceStep(questions=[question]) for question in service.questions]

    by_id = {question.id: question for question in service.questions}
    sorted_pages = [
        page
        for _, page in sorted(
            enumerate(service.pages),
            key=lambda indexed: (
                indexed[1].order if indexed[1].order is not None else math.inf,
                indexed[0],
            ),
        )
    ]

    steps: list[ServiceStep] = []
    assigned: set[str] = set()
    for page in sorted_pages:
        page_questions = _page_questions(page.id, page.questions, service.questions, by_id)
        if not page_questions:
            continue
        assigned.update(question.id for question in page_questions)
        steps.append(ServiceStep(page=page, questions=page_questions))

    steps.extend(
        ServiceStep(questions=[question]) for question in service.questions if question.id not in assigned
    )
    return steps


def _page_questions(
    page_id: str,
    question_ids: list[str],
    questions: list[ServiceQuestion],
    by_id: dict[str, ServiceQuestion],
) -> list[ServiceQuestion]:
    """Return the questions of a page, from its id list or else from question `page_id`s."""
    if question_ids:
        return [by_id[question_id] for question_id in question_ids if question_id in by_id]
    return [question for question in questions if question.page_id == page_id]


def question_step_index(steps: list[ServiceStep]) -> dict[str, int]:
    """Map each question id to the index of the first step showing it.

    Args:
        steps (list[ServiceStep]): Steps from `build_service_steps`.

    Returns:
        dict[str, int]: Question id to step index.
    """
    index: dict[str, int] = {}
    for step_index, step in enumerate(steps):
        for question in step.questions:
            index.setdefault(question.id, step_index)
    return index
