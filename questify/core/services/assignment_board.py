"""Groups the flat assigned-question projection into startable assignments."""

from __future__ import annotations

from dataclasses import dataclass, field

from questify.core.models import AssignedQuestion, AssignmentAttempt


@dataclass(slots=True)
class _PendingAssignment:
    first: AssignedQuestion
    questions: list[AssignedQuestion] = field(default_factory=list)
    completed: bool = False


class AssignmentBoard:
    """Holds the student's current assignments and the set already completed."""

    def __init__(self) -> None:
        self._assignments: list[AssignmentAttempt] = []
        self._completed_ids: set[str] = set()

    def load(self, rows: list[AssignedQuestion]) -> None:
        """Replace the board with freshly fetched rows.

        Answered questions are dropped, and assignments left with nothing to
        answer are hidden. Assignment order follows first appearance.
        """
        grouped: dict[str, _PendingAssignment] = {}
        for row in rows:
            pending = grouped.get(row.assignment_id)
            if pending is None:
                pending = _PendingAssignment(first=row)
                grouped[row.assignment_id] = pending
            if not row.is_answered:
                pending.questions.append(row)
            if row.assignment_completed:
                pending.completed = True

        self._completed_ids = {key for key, pending in grouped.items() if pending.completed}
        self._assignments = [
            AssignmentAttempt(
                assignment_id=assignment_id,
                title=pending.first.assignment_title,
                description=pending.first.assignment_description,
                class_id=pending.first.class_id,
                class_name=pending.first.class_name,
                questions=tuple(pending.questions),
                is_completed=pending.completed,
            )
            for assignment_id, pending in grouped.items()
            if pending.questions
        ]

    def clear(self) -> None:
        self._assignments = []
        self._completed_ids = set()

    def get_assignments(self) -> list[AssignmentAttempt]:
        return list(self._assignments)

    def get_assignment(self, assignment_id: str) -> AssignmentAttempt | None:
        return next((a for a in self._assignments if a.assignment_id == assignment_id), None)

    def get_completed_ids(self) -> set[str]:
        return set(self._completed_ids)

    def is_completed(self, assignment_id: str) -> bool:
        return assignment_id in self._completed_ids
