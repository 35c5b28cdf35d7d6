"""In-memory data store backing the development server.

Holds users, classes, questions, assignments and responses for local runs and
tests. Nothing is persisted; restarting the process starts from scratch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from hashlib import sha256
from hmac import compare_digest
from threading import Lock
from uuid import uuid4

from questify.constants.quiz_constants import MAX_OPTIONS, MIN_OPTIONS


class StoreConflictError(RuntimeError):
    """Write rejected because it would duplicate an existing record."""


class StoreLookupError(LookupError):
    """Referenced record does not exist."""


class StoreAuthError(PermissionError):
    """Credentials or token were not accepted."""


class StoreForbiddenError(PermissionError):
    """Authenticated user may not perform the operation."""


@dataclass(slots=True)
class StoredUser:
    id: str
    name: str
    email: str
    password_hash: str
    role: str
    admission_no: str | None = None


@dataclass(slots=True)
class StoredClass:
    id: str
    name: str
    student_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class StoredQuestion:
    id: str
    question: str
    options: list[str]
    correct_answer: int
    image_url: str | None = None
    subject: str | None = None


@dataclass(slots=True)
class StoredAssignment:
    id: str
    title: str
    class_id: str
    quiz_number: int
    question_ids: list[str]
    assigned_at: datetime
    description: str | None = None


@dataclass(slots=True)
class StoredResponse:
    id: str
    student_id: str
    question_id: str
    class_id: str
    assignment_id: str
    selected_answer: int
    is_correct: bool
    response_time: float
    answered_at: datetime


def _hash_password(password: str) -> str:
    return sha256(password.encode("utf-8")).hexdigest()


def _new_id() -> str:
    return uuid4().hex


class DevStore:
    """Thread-safe facade over the in-memory records."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: dict[str, StoredUser] = {}
        self._tokens: dict[str, str] = {}
        self._classes: dict[str, StoredClass] = {}
        self._questions: dict[str, StoredQuestion] = {}
        self._assignments: dict[str, StoredAssignment] = {}
        self._responses: list[StoredResponse] = []

    # --- Users & auth ---

    def register_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str = "student",
        admission_no: str | None = None,
    ) -> StoredUser:
        cleaned_email = email.strip().lower()
        if not name.strip() or not cleaned_email or not password:
            raise ValueError("Name, email and password are required")
        if role not in ("student", "admin"):
            raise ValueError(f"Unknown role: {role}")
        with self._lock:
            if any(user.email == cleaned_email for user in self._users.values()):
                raise StoreConflictError("User already exists")
            user = StoredUser(
                id=_new_id(),
                name=name.strip(),
                email=cleaned_email,
                password_hash=_hash_password(password),
                role=role,
                admission_no=admission_no,
            )
            self._users[user.id] = user
            return user

    def login(self, email: str, password: str, role: str | None = None) -> tuple[str, StoredUser]:
        cleaned_email = email.strip().lower()
        with self._lock:
            user = next((u for u in self._users.values() if u.email == cleaned_email), None)
            if user is None or not compare_digest(user.password_hash, _hash_password(password)):
                raise StoreAuthError("Invalid credentials")
            if role and user.role != role:
                raise StoreAuthError("Invalid credentials")
            token = uuid4().hex
            self._tokens[token] = user.id
            return token, user

    def user_for_token(self, token: str) -> StoredUser:
        with self._lock:
            user_id = self._tokens.get(token)
            if user_id is None or user_id not in self._users:
                raise StoreAuthError("Not authorized, token failed")
            return self._users[user_id]

    def get_user(self, user_id: str) -> StoredUser | None:
        with self._lock:
            return self._users.get(user_id)

    # --- Classes, questions, assignments ---

    def add_class(self, name: str) -> StoredClass:
        if not name.strip():
            raise ValueError("Class name is required")
        with self._lock:
            group = StoredClass(id=_new_id(), name=name.strip())
            self._classes[group.id] = group
            return group

    def enroll(self, class_id: str, student_id: str) -> None:
        with self._lock:
            group = self._require(self._classes, class_id, "Class")
            student = self._require(self._users, student_id, "Student")
            if student.role != "student":
                raise ValueError("Only students can be enrolled")
            if student_id not in group.student_ids:
                group.student_ids.append(student_id)

    def get_classes(self) -> list[StoredClass]:
        with self._lock:
            return list(self._classes.values())

    def add_question(
        self,
        question: str,
        options: list[str],
        correct_answer: int,
        image_url: str | None = None,
        subject: str | None = None,
    ) -> StoredQuestion:
        cleaned_options = [option.strip() for option in options]
        if not MIN_OPTIONS <= len(cleaned_options) <= MAX_OPTIONS:
            raise ValueError(f"Questions need between {MIN_OPTIONS} and {MAX_OPTIONS} options")
        if any(not option for option in cleaned_options):
            raise ValueError("Option text cannot be empty")
        if not 0 <= correct_answer < len(cleaned_options):
            raise ValueError("Correct answer index is out of range")
        if not question.strip():
            raise ValueError("Question text must not be empty")
        with self._lock:
            stored = StoredQuestion(
                id=_new_id(),
                question=question.strip(),
                options=cleaned_options,
                correct_answer=correct_answer,
                image_url=image_url,
                subject=subject,
            )
            self._questions[stored.id] = stored
            return stored

    def delete_question(self, question_id: str) -> None:
        """Remove a question; existing responses keep a dangling reference."""
        with self._lock:
            self._require(self._questions, question_id, "Question")
            del self._questions[question_id]

    def assign(
        self,
        title: str,
        class_id: str,
        question_ids: list[str],
        description: str | None = None,
    ) -> StoredAssignment:
        if not question_ids:
            raise ValueError("An assignment needs at least one question")
        with self._lock:
            self._require(self._classes, class_id, "Class")
            for question_id in question_ids:
                self._require(self._questions, question_id, "Question")
            quiz_number = 1 + sum(1 for a in self._assignments.values() if a.class_id == class_id)
            assignment = StoredAssignment(
                id=_new_id(),
                title=title.strip() or f"Quiz {quiz_number}",
                class_id=class_id,
                quiz_number=quiz_number,
                question_ids=list(question_ids),
                assigned_at=datetime.now(timezone.utc),
                description=description,
            )
            self._assignments[assignment.id] = assignment
            return assignment

    def get_assignments(self) -> list[StoredAssignment]:
        with self._lock:
            return list(self._assignments.values())

    def get_class(self, class_id: str) -> StoredClass | None:
        with self._lock:
            return self._classes.get(class_id)

    def get_question(self, question_id: str) -> StoredQuestion | None:
        with self._lock:
            return self._questions.get(question_id)

    # --- Student flow ---

    def assigned_questions(self, student_id: str) -> list[tuple[StoredAssignment, StoredClass, StoredQuestion, bool, bool]]:
        """Rows of (assignment, class, question, is_answered, assignment_completed).

        A question counts as answered once the student has answered it in any assignment.
        """
        with self._lock:
            answered = {r.question_id for r in self._responses if r.student_id == student_id}
            rows = []
            for assignment in self._assignments.values():
                group = self._classes.get(assignment.class_id)
                if group is None or student_id not in group.student_ids:
                    continue
                questions = [self._questions[q] for q in assignment.question_ids if q in self._questions]
                completed = all(q.id in answered for q in questions)
                for question in questions:
                    rows.append((assignment, group, question, question.id in answered, completed))
            return rows

    def submit_answer(
        self,
        student_id: str,
        question_id: str,
        selected_answer: int,
        class_id: str,
        assignment_id: str,
        response_time: float,
    ) -> StoredResponse:
        with self._lock:
            assignment = self._require(self._assignments, assignment_id, "Assignment")
            question = self._require(self._questions, question_id, "Question")
            if question_id not in assignment.question_ids or assignment.class_id != class_id:
                raise ValueError("Question is not part of this assignment")
            group = self._require(self._classes, class_id, "Class")
            if student_id not in group.student_ids:
                raise StoreForbiddenError("You are not enrolled in this class")
            if not 0 <= selected_answer < len(question.options):
                raise ValueError("Selected answer is out of range")
            if any(
                r.student_id == student_id and r.question_id == question_id
                for r in self._responses
            ):
                raise StoreConflictError("Question already answered")
            response = StoredResponse(
                id=_new_id(),
                student_id=student_id,
                question_id=question_id,
                class_id=class_id,
                assignment_id=assignment_id,
                selected_answer=selected_answer,
                is_correct=selected_answer == question.correct_answer,
                response_time=max(response_time, 0.0),
                answered_at=datetime.now(timezone.utc),
            )
            self._responses.append(response)
            return response

    def responses(
        self,
        class_id: str | None = None,
        student_id: str | None = None,
        assignment_id: str | None = None,
    ) -> list[StoredResponse]:
        """Responses matching the filters, newest first."""
        with self._lock:
            selected = [
                r
                for r in self._responses
                if (not class_id or r.class_id == class_id)
                and (not student_id or r.student_id == student_id)
                and (not assignment_id or r.assignment_id == assignment_id)
            ]
        return sorted(selected, key=lambda r: r.answered_at, reverse=True)

    def leaderboard(self, class_id: str | None = None) -> list[dict[str, object]]:
        """Per-student totals ranked by correct answers, then by speed."""
        with self._lock:
            totals: dict[str, dict[str, float]] = {}
            for response in self._responses:
                if class_id and response.class_id != class_id:
                    continue
                entry = totals.setdefault(response.student_id, {"correct": 0, "total": 0, "time": 0.0})
                entry["total"] += 1
                entry["correct"] += 1 if response.is_correct else 0
                entry["time"] += response.response_time
            rows = []
            for student_id, entry in totals.items():
                user = self._users.get(student_id)
                rows.append(
                    {
                        "studentId": student_id,
                        "studentName": user.name if user else "Unknown",
                        "studentEmail": user.email if user else None,
                        "score": entry["correct"],
                        "correctAnswers": int(entry["correct"]),
                        "totalAnswers": int(entry["total"]),
                        "averageResponseTime": entry["time"] / entry["total"],
                    }
                )
        return sorted(rows, key=lambda row: (-row["correctAnswers"], row["averageResponseTime"]))

    @staticmethod
    def _require(records: dict, record_id: str, kind: str):
        record = records.get(record_id)
        if record is None:
            raise StoreLookupError(f"{kind} not found")
        return record


def seed_demo_data(store: DevStore) -> dict[str, str]:
    """Populate a store with one admin, two students, a class and a quiz.

    Returns the ids of the created records keyed by a short label.
    """
    admin = store.register_user("Admin", "admin@questify.dev", "admin123", role="admin")
    alice = store.register_user("Alice", "alice@questify.dev", "student123", admission_no="S-001")
    bob = store.register_user("Bob", "bob@questify.dev", "student123", admission_no="S-002")
    group = store.add_class("Physics 101")
    store.enroll(group.id, alice.id)
    store.enroll(group.id, bob.id)
    questions = [
        store.add_question("What is the SI unit of force?", ["Joule", "Newton", "Watt", "Pascal"], 1),
        store.add_question("Speed of light is roughly?", ["3e8 m/s", "3e6 m/s", "340 m/s"], 0),
        store.add_question("Which is a vector?", ["Mass", "Time", "Velocity", "Energy"], 2),
    ]
    assignment = store.assign(
        "Mechanics warm-up",
        group.id,
        [q.id for q in questions],
        description="Three quick questions on units and vectors.",
    )
    return {
        "admin": admin.id,
        "alice": alice.id,
        "bob": bob.id,
        "class": group.id,
        "assignment": assignment.id,
    }
