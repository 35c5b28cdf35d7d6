"""Shared fixtures: fake API, controllable clock and record factories."""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from questify.core.models import AssignedQuestion, AssignmentAttempt, Question, Response, SubmissionReceipt


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: float = 1_700_000_000_000.0) -> None:
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeApi:
    """Stands in for QuestifyApiClient in session tests."""

    def __init__(self, rows: list[AssignedQuestion] | None = None) -> None:
        self.rows = list(rows or [])
        self.fetch_count = 0
        self.fetch_error: Exception | None = None
        self.submissions: list[dict] = []
        self.submit_errors: list[Exception] = []
        self.gate: asyncio.Event | None = None

    async def get_assigned_questions(self) -> list[AssignedQuestion]:
        self.fetch_count += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.rows)

    async def submit_answer(self, **kwargs) -> SubmissionReceipt:
        self.submissions.append(kwargs)
        if self.gate is not None:
            await self.gate.wait()
        if self.submit_errors:
            raise self.submit_errors.pop(0)
        return SubmissionReceipt(
            question_id=kwargs["question_id"],
            response_time_ms=kwargs["response_time_ms"],
        )


def make_assigned(
    question_id: str,
    assignment_id: str = "a1",
    options: tuple[str, ...] = ("A", "B", "C", "D"),
    correct: int | None = 0,
    is_answered: bool = False,
    completed: bool = False,
    title: str = "Quiz 1",
) -> AssignedQuestion:
    return AssignedQuestion(
        assignment_id=assignment_id,
        assignment_title=title,
        class_id="c1",
        class_name="Physics",
        question=Question(id=question_id, text=f"Question {question_id}", options=options, correct_answer_index=correct),
        is_answered=is_answered,
        assignment_completed=completed,
    )


def make_attempt(*question_ids: str, assignment_id: str = "a1", completed: bool = False) -> AssignmentAttempt:
    return AssignmentAttempt(
        assignment_id=assignment_id,
        title="Quiz 1",
        class_id="c1",
        class_name="Physics",
        questions=tuple(make_assigned(q, assignment_id=assignment_id) for q in question_ids),
        is_completed=completed,
    )


_counter = iter(range(1, 1_000_000))


def make_response(
    is_correct: bool = True,
    response_time_ms: float = 1000,
    question_id: str | None = "q1",
    student_id: str | None = "s1",
    answered_at: datetime | None = None,
    class_id: str | None = "c1",
    student_name: str | None = None,
    question_text: str | None = None,
) -> Response:
    return Response(
        id=f"r{next(_counter)}",
        student_id=student_id,
        question_id=question_id,
        class_id=class_id,
        assignment_id="a1",
        selected_answer_index=0,
        is_correct=is_correct,
        response_time_ms=response_time_ms,
        answered_at=answered_at or datetime(2024, 5, 1, 12, 0),
        student_name=student_name,
        question_text=question_text,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()
