"""Wire schemas validating backend payloads at the API client boundary.

The backend speaks camelCase JSON and embeds related records either as plain
id strings or as populated objects (``{"_id": ..., "name": ...}``). These
models accept both shapes, apply defaults for optional fields, and convert to
the immutable domain models in :mod:`questify.core.models`.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from questify.constants.quiz_constants import MAX_OPTIONS, MIN_OPTIONS
from questify.core.models import (
    AssignedQuestion,
    Assignment,
    AuthResult,
    ClassGroup,
    LeaderboardEntry,
    Question,
    Response,
    SubmissionReceipt,
    User,
)

_ID = AliasChoices("_id", "id")


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StudentRef(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str | None = None
    admission_no: str | None = Field(default=None, alias="admissionNo")


class QuestionRef(WireModel):
    id: str = Field(validation_alias=_ID)
    question: str | None = None
    options: list[str] = Field(default_factory=list)
    correct_answer: int | None = Field(default=None, alias="correctAnswer")


class NamedRef(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str | None = None
    title: str | None = None


def _ref_id(ref: str | WireModel | None) -> str | None:
    if ref is None or isinstance(ref, str):
        return ref
    return ref.id


class UserOut(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str = ""
    email: str = ""
    role: str = "student"
    admission_no: str | None = Field(default=None, alias="admissionNo")

    def to_domain(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            admission_no=self.admission_no,
        )


class AuthOut(WireModel):
    token: str
    user: UserOut

    def to_domain(self) -> AuthResult:
        return AuthResult(token=self.token, user=self.user.to_domain())


class ClassOut(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str = ""

    def to_domain(self) -> ClassGroup:
        return ClassGroup(id=self.id, name=self.name)


class AssignmentOut(WireModel):
    id: str = Field(validation_alias=_ID)
    title: str = ""
    description: str | None = None
    class_ref: str | NamedRef | None = Field(default=None, alias="classId")
    quiz_number: int | None = Field(default=None, alias="quizNumber")
    questions: list[str | QuestionRef] = Field(
        default_factory=list,
        validation_alias=AliasChoices("questionIds", "questions"),
    )
    assigned_at: datetime | None = Field(default=None, alias="assignedAt")

    def to_domain(self) -> Assignment:
        return Assignment(
            id=self.id,
            title=self.title,
            class_id=_ref_id(self.class_ref) or "",
            question_ids=tuple(_ref_id(ref) or "" for ref in self.questions),
            quiz_number=self.quiz_number,
            description=self.description,
            assigned_at=self.assigned_at,
        )


class AssignedQuestionOut(WireModel):
    """One row of ``GET /students/assigned-questions``."""

    assignment_id: str = Field(alias="assignmentId")
    assignment_title: str = Field(default="", alias="assignmentTitle")
    assignment_description: str | None = Field(default=None, alias="assignmentDescription")
    class_id: str = Field(default="", alias="classId")
    class_name: str = Field(default="", alias="className")
    question_id: str = Field(alias="questionId")
    question: str = ""
    options: list[str] = Field(min_length=MIN_OPTIONS, max_length=MAX_OPTIONS)
    correct_answer: int | None = Field(default=None, alias="correctAnswer")
    image_url: str | None = Field(default=None, alias="imageUrl")
    subject: str | None = None
    is_answered: bool = Field(default=False, alias="isAnswered")
    assignment_completed: bool = Field(default=False, alias="assignmentCompleted")

    def to_domain(self) -> AssignedQuestion:
        return AssignedQuestion(
            assignment_id=self.assignment_id,
            assignment_title=self.assignment_title,
            assignment_description=self.assignment_description,
            class_id=self.class_id,
            class_name=self.class_name,
            question=Question(
                id=self.question_id,
                text=self.question,
                options=tuple(self.options),
                correct_answer_index=self.correct_answer,
                image_url=self.image_url or None,
                subject=self.subject,
            ),
            is_answered=self.is_answered,
            assignment_completed=self.assignment_completed,
        )


class ResponseOut(WireModel):
    """A response record, possibly populated with student/question/class joins."""

    id: str = Field(validation_alias=_ID)
    student: str | StudentRef | None = Field(default=None, alias="studentId")
    question: str | QuestionRef | None = Field(default=None, alias="questionId")
    class_ref: str | NamedRef | None = Field(default=None, alias="classId")
    assignment: str | NamedRef | None = Field(default=None, alias="assignmentId")
    selected_answer: int = Field(
        default=0,
        validation_alias=AliasChoices("selectedAnswer", "selectedAnswerIndex"),
    )
    is_correct: bool = Field(default=False, alias="isCorrect")
    response_time: float | None = Field(
        default=0.0,
        validation_alias=AliasChoices("responseTime", "responseTimeMs"),
    )
    answered_at: datetime = Field(alias="answeredAt")

    def to_domain(self) -> Response:
        student = self.student if isinstance(self.student, StudentRef) else None
        question = self.question if isinstance(self.question, QuestionRef) else None
        class_ref = self.class_ref if isinstance(self.class_ref, NamedRef) else None
        return Response(
            id=self.id,
            student_id=_ref_id(self.student),
            question_id=_ref_id(self.question),
            class_id=_ref_id(self.class_ref),
            assignment_id=_ref_id(self.assignment),
            selected_answer_index=self.selected_answer,
            is_correct=self.is_correct,
            response_time_ms=self.response_time or 0.0,
            answered_at=self.answered_at,
            student_name=student.name if student else None,
            admission_no=student.admission_no if student else None,
            question_text=question.question if question else None,
            class_name=class_ref.name if class_ref else None,
        )


class LeaderboardEntryOut(WireModel):
    student_id: str = Field(alias="studentId")
    student_name: str = Field(default="Unknown", alias="studentName")
    student_email: str | None = Field(default=None, alias="studentEmail")
    score: float = 0.0
    correct_answers: int = Field(default=0, alias="correctAnswers")
    total_answers: int = Field(default=0, alias="totalAnswers")
    average_response_time: float = Field(default=0.0, alias="averageResponseTime")

    @field_validator("average_response_time", "score", mode="before")
    @classmethod
    def _none_as_zero(cls, value: object) -> object:
        return 0.0 if value is None else value

    def to_domain(self) -> LeaderboardEntry:
        return LeaderboardEntry(
            student_id=self.student_id,
            student_name=self.student_name,
            student_email=self.student_email,
            score=self.score,
            correct_answers=self.correct_answers,
            total_answers=self.total_answers,
            average_response_time_ms=self.average_response_time,
        )


class SubmitAnswerIn(WireModel):
    """Body of ``POST /students/submit-answer``."""

    question_id: str = Field(alias="questionId")
    selected_answer: int = Field(alias="selectedAnswer", ge=0)
    class_id: str = Field(alias="classId")
    assignment_id: str = Field(alias="assignmentId")
    start_time: float = Field(alias="startTime")
    response_time: float | None = Field(default=None, alias="responseTime", ge=0)


class SubmitAnswerOut(WireModel):
    question_id: str | None = Field(default=None, alias="questionId")
    is_correct: bool | None = Field(default=None, alias="isCorrect")
    response_time: float | None = Field(default=None, alias="responseTime")

    def to_domain(self, question_id: str, response_time_ms: float) -> SubmissionReceipt:
        return SubmissionReceipt(
            question_id=self.question_id or question_id,
            response_time_ms=self.response_time if self.response_time is not None else response_time_ms,
            is_correct=self.is_correct,
        )


class ErrorOut(WireModel):
    """Error body; the backend uses ``message``, FastAPI defaults use ``detail``."""

    message: str | None = None
    detail: str | list | None = None

    def text(self) -> str | None:
        if self.message:
            return self.message
        if isinstance(self.detail, str) and self.detail:
            return self.detail
        return None
