"""State machine driving a single student's attempt at an assignment."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum, auto
import logging
import time
from typing import Callable

from questify.api.client import QuestifyApiClient
from questify.constants import messages
from questify.constants.quiz_constants import TICK_INTERVAL_MS
from questify.core.errors import (
    AlreadyCompletedError,
    IdempotentDuplicateError,
    InvalidOptionError,
    NetworkError,
    NoSelectionError,
    QuizSessionError,
    StaleSessionError,
    SubmissionInProgressError,
)
from questify.core.models import AssignedQuestion, AssignmentAttempt, SessionAnswer
from questify.core.services.assignment_board import AssignmentBoard
from questify.core.services.ticker import Ticker

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = auto()
    LOADING = auto()
    LOAD_ERROR = auto()
    IN_PROGRESS = auto()
    SUBMITTING = auto()
    COMPLETED = auto()


_ACTIVE_STATES = (SessionState.IN_PROGRESS, SessionState.SUBMITTING)


def _now_ms() -> float:
    return time.time() * 1000


def format_elapsed(elapsed_ms: float) -> str:
    """Format milliseconds as ``MM:SS``."""
    total_seconds = int(max(elapsed_ms, 0) // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


class QuizSession:
    """Loads assignments, presents questions one at a time and submits answers.

    One instance serves one student client. Every ``start`` and ``quit`` bumps
    an internal generation number; a request that resolves for an older
    generation is discarded without touching the current state.
    """

    def __init__(
        self,
        api: QuestifyApiClient,
        clock: Callable[[], float] | None = None,
        tick_interval_ms: int = TICK_INTERVAL_MS,
        board: AssignmentBoard | None = None,
    ) -> None:
        self._api = api
        self._clock = clock or _now_ms
        self._board = board or AssignmentBoard()
        self._state = SessionState.IDLE
        self._generation = 0
        self._last_error: str | None = None

        self._assignment: AssignmentAttempt | None = None
        self._questions: tuple[AssignedQuestion, ...] = ()
        self._current_index = 0
        self._answers: dict[str, int] = {}
        self._start_times: dict[str, float] = {}
        self._session_started_at: float | None = None
        self._submitted: list[SessionAnswer] = []
        self._skipped: list[str] = []

        self._complete_callbacks: list[Callable[[AssignmentAttempt], None]] = []
        self._ticker: Ticker[str] = Ticker(tick_interval_ms / 1000, self.elapsed_display)

    # --- Assignment loading ---

    async def load_assignments(self) -> list[AssignmentAttempt]:
        """Fetch assigned questions and regroup them into assignments."""
        if self._state in _ACTIVE_STATES:
            raise QuizSessionError(messages.QUIZ_ACTIVE_MESSAGE)
        self._state = SessionState.LOADING
        try:
            await self._fetch_assignments()
        except NetworkError as exc:
            if self._state is SessionState.LOADING:
                self._state = SessionState.LOAD_ERROR
            self._last_error = exc.message
            raise
        if self._state is SessionState.LOADING:
            self._state = SessionState.IDLE
        self._last_error = None
        return self._board.get_assignments()

    async def _fetch_assignments(self) -> None:
        rows = await self._api.get_assigned_questions()
        self._board.load(rows)
        logger.info(
            "Loaded %d assignment(s), %d completed",
            len(self._board.get_assignments()),
            len(self._board.get_completed_ids()),
        )

    # --- Lifecycle ---

    def start(self, assignment: AssignmentAttempt) -> AssignedQuestion:
        """Begin (or restart) an attempt and return the first question."""
        if assignment.is_completed or self._board.is_completed(assignment.assignment_id):
            logger.info("Refusing to start completed assignment %s", assignment.assignment_id)
            raise AlreadyCompletedError(messages.QUIZ_ALREADY_COMPLETED_MESSAGE)
        questions = tuple(q for q in assignment.questions if not q.is_answered)
        if not questions:
            raise QuizSessionError(messages.NO_QUESTIONS_LEFT_MESSAGE)

        self._discard_attempt()
        now = self._clock()
        self._assignment = assignment
        self._questions = questions
        self._session_started_at = now
        self._start_times = {self._questions[0].question_id: now}
        self._state = SessionState.IN_PROGRESS
        self._last_error = None
        self._ticker.start()
        logger.info(
            "Started assignment %s with %d question(s)",
            assignment.assignment_id,
            len(self._questions),
        )
        return self._questions[0]

    def quit(self) -> None:
        """Drop all unsubmitted progress. Confirmation is the caller's job."""
        if self._assignment is not None:
            logger.info(
                "Quit assignment %s at question %d",
                self._assignment.assignment_id,
                self._current_index + 1,
            )
        self._discard_attempt()
        self._state = SessionState.IDLE
        self._last_error = None

    def _discard_attempt(self) -> None:
        self._generation += 1
        self._ticker.stop()
        self._assignment = None
        self._questions = ()
        self._current_index = 0
        self._answers = {}
        self._start_times = {}
        self._session_started_at = None
        self._submitted = []
        self._skipped = []

    # --- Answering ---

    def select_answer(self, question_id: str, option_index: int) -> None:
        """Record the in-memory selection for a question; last write wins."""
        self._require_active()
        question = next((q for q in self._questions if q.question_id == question_id), None)
        if question is None:
            raise InvalidOptionError(messages.UNKNOWN_QUESTION_MESSAGE)
        if isinstance(option_index, bool) or not 0 <= option_index < len(question.question.options):
            raise InvalidOptionError(messages.INVALID_OPTION_MESSAGE)
        self._answers[question_id] = option_index

    async def submit_current(self) -> SessionAnswer | None:
        """Submit the selected answer for the current question and advance.

        Returns the recorded answer, or ``None`` when the session was quit or
        restarted while the request was in flight.
        """
        if self._state is SessionState.SUBMITTING:
            raise SubmissionInProgressError(messages.SUBMISSION_IN_PROGRESS_MESSAGE)
        self._require_active()
        question = self._questions[self._current_index]
        selected = self._answers.get(question.question_id)
        if selected is None:
            raise NoSelectionError(messages.SELECT_ANSWER_MESSAGE)

        generation = self._generation
        started_at = self._start_times[question.question_id]
        submitted_at = self._clock()
        elapsed_ms = max(0.0, submitted_at - started_at)
        self._state = SessionState.SUBMITTING
        self._last_error = None
        duplicate = False
        try:
            await self._api.submit_answer(
                question_id=question.question_id,
                selected_answer=selected,
                class_id=question.class_id,
                assignment_id=question.assignment_id,
                start_time_ms=started_at,
                response_time_ms=elapsed_ms,
            )
        except IdempotentDuplicateError:
            duplicate = True
            logger.info("Question %s was already answered; advancing", question.question_id)
        except NetworkError as exc:
            if generation != self._generation:
                logger.debug("Discarding failed submit for abandoned attempt")
                return None
            self._state = SessionState.IN_PROGRESS
            self._last_error = exc.message
            raise
        except BaseException:
            if generation == self._generation:
                self._state = SessionState.IN_PROGRESS
            raise

        if generation != self._generation:
            logger.debug("Discarding submit result for abandoned attempt")
            return None

        answer = SessionAnswer(
            question_id=question.question_id,
            selected_answer_index=selected,
            response_time_ms=elapsed_ms,
            submitted_at=datetime.fromtimestamp(submitted_at / 1000, tz=timezone.utc),
            duplicate=duplicate,
        )
        self._submitted.append(answer)
        self._state = SessionState.IN_PROGRESS
        await self._advance()
        return answer

    async def skip_current(self) -> None:
        """Move past the current question without submitting anything for it."""
        if self._state is SessionState.SUBMITTING:
            raise SubmissionInProgressError(messages.SUBMISSION_IN_PROGRESS_MESSAGE)
        self._require_active()
        self._skipped.append(self._questions[self._current_index].question_id)
        await self._advance()

    async def _advance(self) -> None:
        if self._current_index < len(self._questions) - 1:
            self._current_index += 1
            next_question = self._questions[self._current_index]
            self._start_times[next_question.question_id] = self._clock()
            return
        await self._complete()

    async def _complete(self) -> None:
        assignment = self._assignment
        self._state = SessionState.COMPLETED
        self._ticker.stop()
        self._generation += 1
        self._session_started_at = None
        self._start_times = {}
        self._answers = {}
        logger.info(
            "Completed assignment %s: %d submitted, %d skipped",
            assignment.assignment_id if assignment else "?",
            len(self._submitted),
            len(self._skipped),
        )
        if assignment is not None:
            for callback in list(self._complete_callbacks):
                try:
                    callback(assignment)
                except Exception:
                    logger.exception("Completion callback %r failed", callback)
        try:
            await self._fetch_assignments()
        except NetworkError as exc:
            logger.warning("Refreshing assignments after completion failed: %s", exc.message)
            self._last_error = exc.message

    def _require_active(self) -> None:
        if self._state not in _ACTIVE_STATES or not self._questions:
            raise StaleSessionError(messages.NO_ACTIVE_QUIZ_MESSAGE)

    # --- Subscriptions ---

    def on_tick(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Receive the ``MM:SS`` elapsed display on every tick while a quiz runs."""
        return self._ticker.subscribe(callback)

    def on_complete(self, callback: Callable[[AssignmentAttempt], None]) -> Callable[[], None]:
        self._complete_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._complete_callbacks:
                self._complete_callbacks.remove(callback)

        return unsubscribe

    # --- Read-only projections ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def assignment(self) -> AssignmentAttempt | None:
        return self._assignment

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def question_count(self) -> int:
        return len(self._questions)

    def get_assignments(self) -> list[AssignmentAttempt]:
        return self._board.get_assignments()

    def get_completed_ids(self) -> set[str]:
        return self._board.get_completed_ids()

    def get_current_question(self) -> AssignedQuestion | None:
        if self._state not in _ACTIVE_STATES or not self._questions:
            return None
        return self._questions[self._current_index]

    def get_selected_answer(self, question_id: str | None = None) -> int | None:
        if question_id is None:
            current = self.get_current_question()
            if current is None:
                return None
            question_id = current.question_id
        return self._answers.get(question_id)

    def get_question_start_time(self, question_id: str) -> float | None:
        return self._start_times.get(question_id)

    def get_submitted_answers(self) -> list[SessionAnswer]:
        return list(self._submitted)

    def get_skipped_question_ids(self) -> list[str]:
        return list(self._skipped)

    def is_last_question(self) -> bool:
        return bool(self._questions) and self._current_index == len(self._questions) - 1

    def progress_percent(self) -> int:
        if not self._questions:
            return 0
        return round((self._current_index + 1) / len(self._questions) * 100)

    def elapsed_ms(self) -> float:
        if self._session_started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._session_started_at)

    def elapsed_display(self) -> str:
        return format_elapsed(self.elapsed_ms())
