"""Response analytics: accuracy, timing, difficulty, leaderboard and trends.

All functions are pure. They never mutate their input and never raise on
sparse data: empty input yields zero values and empty groups. Responses whose
question or student join is missing still count toward overall totals but are
left out of the per-question and per-student groupings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from questify.constants.quiz_constants import (
    ENGAGEMENT_BUCKETS,
    ENGAGEMENT_LEVELS,
    ENGAGEMENT_LOW,
    HARD_ACCURACY_THRESHOLD,
    MEDIUM_ACCURACY_THRESHOLD,
    TIME_RANGE_DAYS,
    TOP_STUDENTS_LIMIT,
    TREND_DAYS_LIMIT,
)
from questify.core.models import Response


@dataclass(slots=True)
class _Tally:
    """Mutable accumulator used while grouping."""

    label: str
    total: int = 0
    correct: int = 0
    total_time_ms: float = 0.0
    admission_no: str | None = None

    def add(self, response: Response) -> None:
        self.total += 1
        if response.is_correct:
            self.correct += 1
        self.total_time_ms += response.response_time_ms

    @property
    def ratio(self) -> float:
        return self.correct / self.total if self.total else 0.0


@dataclass(slots=True, frozen=True)
class QuestionStat:
    question_id: str
    question_text: str
    accuracy: float
    average_time_seconds: float
    attempts: int
    difficulty: str


@dataclass(slots=True, frozen=True)
class StudentStat:
    student_id: str
    name: str
    admission_no: str
    accuracy: float
    average_response_time_seconds: float
    attempt_count: int


@dataclass(slots=True, frozen=True)
class TimeBucket:
    level: str
    count: int
    percentage: float


@dataclass(slots=True, frozen=True)
class TrendPoint:
    date: date
    accuracy: float
    response_count: int


@dataclass(slots=True, frozen=True)
class StudentSummary:
    """Totals shown on a student's own response history."""

    total: int
    correct: int
    accuracy: float


@dataclass(slots=True, frozen=True)
class AnalyticsReport:
    """Everything the admin analytics view needs, computed in one pass per metric."""

    total_responses: int
    correct_responses: int
    accuracy: float
    average_response_time_seconds: float
    unique_students: int
    question_difficulty: list[QuestionStat]
    top_students: list[StudentStat]
    time_distribution: list[TimeBucket]
    daily_trend: list[TrendPoint]


def round_half_up(value: float, digits: int) -> float:
    """Round like JavaScript's ``toFixed``: ties on the exact binary value go up."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100, 1)


def accuracy(responses: Sequence[Response]) -> float:
    """Percentage of correct responses, one decimal; 0 when empty."""
    return _percentage(sum(1 for r in responses if r.is_correct), len(responses))


def average_response_time_seconds(responses: Sequence[Response]) -> float:
    """Mean response time in seconds, two decimals; 0 when empty."""
    if not responses:
        return 0
    total_ms = sum(r.response_time_ms for r in responses)
    return round_half_up(total_ms / len(responses) / 1000, 2)


def engagement_level(response_time_ms: float) -> str:
    """Classify a response time; each bucket includes its lower bound."""
    seconds = max(response_time_ms, 0) / 1000
    for upper_bound, level in ENGAGEMENT_BUCKETS:
        if seconds < upper_bound:
            return level
    return ENGAGEMENT_LOW


def difficulty_label(ratio: float) -> str:
    if ratio < HARD_ACCURACY_THRESHOLD:
        return "Hard"
    if ratio < MEDIUM_ACCURACY_THRESHOLD:
        return "Medium"
    return "Easy"


def question_difficulty(responses: Iterable[Response]) -> list[QuestionStat]:
    """Per-question stats sorted ascending by accuracy (hardest first)."""
    tallies: dict[str, _Tally] = {}
    for response in responses:
        if not response.question_id:
            continue
        tally = tallies.get(response.question_id)
        if tally is None:
            tally = _Tally(label=response.question_text or "Unknown")
            tallies[response.question_id] = tally
        tally.add(response)

    stats = [
        QuestionStat(
            question_id=question_id,
            question_text=tally.label,
            accuracy=_percentage(tally.correct, tally.total),
            average_time_seconds=round_half_up(tally.total_time_ms / tally.total / 1000, 1),
            attempts=tally.total,
            difficulty=difficulty_label(tally.ratio),
        )
        for question_id, tally in tallies.items()
    ]
    return sorted(stats, key=lambda stat: stat.accuracy)


def student_leaderboard(
    responses: Iterable[Response],
    limit: int | None = None,
) -> list[StudentStat]:
    """Per-student stats sorted descending by accuracy.

    Ties keep first-seen order; there is deliberately no secondary key.
    """
    tallies: dict[str, _Tally] = {}
    for response in responses:
        if not response.student_id:
            continue
        tally = tallies.get(response.student_id)
        if tally is None:
            tally = _Tally(
                label=response.student_name or "Unknown",
                admission_no=response.admission_no,
            )
            tallies[response.student_id] = tally
        tally.add(response)

    rows = [
        StudentStat(
            student_id=student_id,
            name=tally.label,
            admission_no=tally.admission_no or "N/A",
            accuracy=_percentage(tally.correct, tally.total),
            average_response_time_seconds=round_half_up(tally.total_time_ms / tally.total / 1000, 2),
            attempt_count=tally.total,
        )
        for student_id, tally in tallies.items()
    ]
    ranked = sorted(rows, key=lambda row: -row.accuracy)
    return ranked if limit is None else ranked[:limit]


def time_distribution(responses: Sequence[Response]) -> list[TimeBucket]:
    """Counts and percentages for each engagement level, in bucket order."""
    counts = dict.fromkeys(ENGAGEMENT_LEVELS, 0)
    for response in responses:
        counts[engagement_level(response.response_time_ms)] += 1
    total = len(responses)
    return [
        TimeBucket(level=level, count=count, percentage=_percentage(count, total))
        for level, count in counts.items()
    ]


def daily_trend(responses: Iterable[Response], limit: int | None = None) -> list[TrendPoint]:
    """Accuracy per local calendar day, oldest first; ``limit`` keeps the newest N days."""
    tallies: dict[date, _Tally] = {}
    for response in responses:
        day = response.answered_at.astimezone().date()
        tally = tallies.get(day)
        if tally is None:
            tally = _Tally(label=day.isoformat())
            tallies[day] = tally
        tally.add(response)

    points = [
        TrendPoint(date=day, accuracy=_percentage(tally.correct, tally.total), response_count=tally.total)
        for day, tally in sorted(tallies.items())
    ]
    if limit is not None:
        return points[-limit:] if limit > 0 else []
    return points


def unique_student_count(responses: Iterable[Response]) -> int:
    return len({r.student_id for r in responses if r.student_id})


def filter_responses(
    responses: Iterable[Response],
    class_id: str | None = None,
    time_range: str = "all",
    now: datetime | None = None,
) -> list[Response]:
    """Apply the analytics view filters: class and a trailing day window.

    An unrecognised ``time_range`` applies no window, same as ``"all"``.
    """
    cutoff: datetime | None = None
    if time_range in TIME_RANGE_DAYS:
        reference = (now or datetime.now()).astimezone()
        cutoff = reference - timedelta(days=TIME_RANGE_DAYS[time_range])

    selected = []
    for response in responses:
        if class_id and response.class_id != class_id:
            continue
        if cutoff is not None and response.answered_at.astimezone() < cutoff:
            continue
        selected.append(response)
    return selected


def student_summary(responses: Sequence[Response]) -> StudentSummary:
    correct = sum(1 for r in responses if r.is_correct)
    return StudentSummary(total=len(responses), correct=correct, accuracy=accuracy(responses))


def summarize(responses: Sequence[Response]) -> AnalyticsReport:
    """Build the full analytics report over already-filtered responses."""
    return AnalyticsReport(
        total_responses=len(responses),
        correct_responses=sum(1 for r in responses if r.is_correct),
        accuracy=accuracy(responses),
        average_response_time_seconds=average_response_time_seconds(responses),
        unique_students=unique_student_count(responses),
        question_difficulty=question_difficulty(responses),
        top_students=student_leaderboard(responses, limit=TOP_STUDENTS_LIMIT),
        time_distribution=time_distribution(responses),
        daily_trend=daily_trend(responses, limit=TREND_DAYS_LIMIT),
    )
