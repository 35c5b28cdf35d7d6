"""Domain models for the Questify client core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Question:
    """Multiple-choice question with between two and five options."""

    id: str
    text: str
    options: tuple[str, ...]
    correct_answer_index: int | None = None
    image_url: str | None = None
    subject: str | None = None


@dataclass(slots=True, frozen=True)
class Assignment:
    """A quiz assigned to a class; question order is presentation order."""

    id: str
    title: str
    class_id: str
    question_ids: tuple[str, ...]
    quiz_number: int | None = None
    description: str | None = None
    assigned_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class AssignedQuestion:
    """Per-student projection of one question inside an assignment."""

    assignment_id: str
    assignment_title: str
    class_id: str
    class_name: str
    question: Question
    assignment_description: str | None = None
    is_answered: bool = False
    assignment_completed: bool = False

    @property
    def question_id(self) -> str:
        return self.question.id


@dataclass(slots=True, frozen=True)
class AssignmentAttempt:
    """Assignment grouped for the student, holding only unanswered questions."""

    assignment_id: str
    title: str
    class_id: str
    class_name: str
    questions: tuple[AssignedQuestion, ...]
    description: str | None = None
    is_completed: bool = False


@dataclass(slots=True, frozen=True)
class Response:
    """A submitted answer, optionally joined with student/question/class metadata."""

    id: str
    student_id: str | None
    question_id: str | None
    class_id: str | None
    assignment_id: str | None
    selected_answer_index: int
    is_correct: bool
    response_time_ms: float
    answered_at: datetime
    student_name: str | None = None
    admission_no: str | None = None
    question_text: str | None = None
    class_name: str | None = None


@dataclass(slots=True, frozen=True)
class LeaderboardEntry:
    """Server-aggregated per-student summary for the leaderboard view."""

    student_id: str
    student_name: str
    score: float
    correct_answers: int
    total_answers: int
    average_response_time_ms: float
    student_email: str | None = None


@dataclass(slots=True, frozen=True)
class ClassGroup:
    id: str
    name: str


@dataclass(slots=True, frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str
    admission_no: str | None = None


@dataclass(slots=True, frozen=True)
class AuthResult:
    token: str
    user: User


@dataclass(slots=True, frozen=True)
class SubmissionReceipt:
    """Acknowledgement of a submitted answer."""

    question_id: str
    response_time_ms: float
    duplicate: bool = False
    is_correct: bool | None = None


@dataclass(slots=True)
class SessionAnswer:
    """Answer recorded by the quiz session once the backend accepted it."""

    question_id: str
    selected_answer_index: int
    response_time_ms: float
    submitted_at: datetime
    duplicate: bool = False
