"""Asynchronous HTTP client for the Questify backend REST API."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from questify.api.schemas import (
    AssignedQuestionOut,
    AssignmentOut,
    AuthOut,
    ClassOut,
    ErrorOut,
    LeaderboardEntryOut,
    ResponseOut,
    SubmitAnswerIn,
    SubmitAnswerOut,
    UserOut,
)
from questify.config import ClientSettings
from questify.constants import messages
from questify.constants.network_constants import REQUEST_TIMEOUT_SECONDS
from questify.constants.quiz_constants import ALREADY_ANSWERED_SENTINEL, EXPORT_FORMATS
from questify.core.errors import AuthenticationError, IdempotentDuplicateError, NetworkError
from questify.core.models import (
    AssignedQuestion,
    Assignment,
    AuthResult,
    ClassGroup,
    LeaderboardEntry,
    Response,
    SubmissionReceipt,
    User,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_already_answered(message: str | None) -> bool:
    """Return True when a backend error message is the duplicate-answer sentinel."""
    return bool(message) and ALREADY_ANSWERED_SENTINEL in message.lower()


class QuestifyApiClient:
    """Thin wrapper around ``httpx.AsyncClient`` bound to one base URL and token.

    Every request carries ``Authorization: Bearer <token>`` when a token is
    set. Failures surface as :class:`NetworkError` subclasses carrying the
    backend-provided message when there is one.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "QuestifyApiClient":
        return cls(
            base_url=settings.api_url,
            token=settings.token,
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token

    async def __aenter__(self) -> "QuestifyApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Auth ---

    async def login(self, email: str, password: str, role: str = "student") -> AuthResult:
        payload = {"email": email, "password": password, "role": role}
        data = await self._request("POST", "/auth/login", json=payload, fallback=messages.LOGIN_FAILED)
        result = self._parse(AuthOut, data).to_domain()
        self._token = result.token
        logger.info("Logged in as %s (%s)", result.user.email, result.user.role)
        return result

    async def register(self, name: str, email: str, password: str, role: str = "student") -> dict[str, Any]:
        payload = {"name": name, "email": email, "password": password, "role": role}
        data = await self._request(
            "POST", "/auth/register", json=payload, fallback=messages.REGISTRATION_FAILED
        )
        return data if isinstance(data, dict) else {}

    async def get_current_user(self) -> User:
        data = await self._request("GET", "/auth/me", fallback=messages.GET_USER_FAILED)
        return self._parse(UserOut, data).to_domain()

    # --- Student endpoints ---

    async def get_assigned_questions(self) -> list[AssignedQuestion]:
        data = await self._request(
            "GET", "/students/assigned-questions", fallback=messages.LOAD_ASSIGNMENTS_FAILED
        )
        return [row.to_domain() for row in self._parse_list(AssignedQuestionOut, data)]

    async def submit_answer(
        self,
        question_id: str,
        selected_answer: int,
        class_id: str,
        assignment_id: str,
        start_time_ms: float,
        response_time_ms: float,
    ) -> SubmissionReceipt:
        """Submit one answer; raises :class:`IdempotentDuplicateError` on the duplicate sentinel."""
        body = SubmitAnswerIn(
            question_id=question_id,
            selected_answer=selected_answer,
            class_id=class_id,
            assignment_id=assignment_id,
            start_time=start_time_ms,
            response_time=response_time_ms,
        )
        try:
            data = await self._request(
                "POST",
                "/students/submit-answer",
                json=body.model_dump(by_alias=True, exclude_none=True),
                fallback=messages.SUBMIT_ANSWER_FAILED,
            )
        except NetworkError as exc:
            if not isinstance(exc, AuthenticationError) and is_already_answered(exc.message):
                raise IdempotentDuplicateError(exc.message, exc.status_code) from exc
            raise
        if not isinstance(data, dict):
            data = {}
        return self._parse(SubmitAnswerOut, data).to_domain(question_id, response_time_ms)

    async def get_my_responses(self) -> list[Response]:
        data = await self._request(
            "GET", "/students/my-responses", fallback=messages.LOAD_RESPONSES_FAILED
        )
        return [row.to_domain() for row in self._parse_list(ResponseOut, data)]

    # --- Shared / admin endpoints ---

    async def get_leaderboard(self, class_id: str | None = None) -> list[LeaderboardEntry]:
        params = {"classId": class_id} if class_id else None
        data = await self._request(
            "GET", "/leaderboard", params=params, fallback=messages.LOAD_LEADERBOARD_FAILED
        )
        return [row.to_domain() for row in self._parse_list(LeaderboardEntryOut, data)]

    async def get_classes(self) -> list[ClassGroup]:
        data = await self._request("GET", "/classes")
        return [row.to_domain() for row in self._parse_list(ClassOut, data)]

    async def get_assignments(self) -> list[Assignment]:
        data = await self._request("GET", "/assignments")
        return [row.to_domain() for row in self._parse_list(AssignmentOut, data)]

    async def get_responses(
        self,
        class_id: str | None = None,
        student_id: str | None = None,
        assignment_id: str | None = None,
    ) -> list[Response]:
        params = _filters(class_id, student_id, assignment_id)
        data = await self._request(
            "GET", "/responses", params=params or None, fallback=messages.LOAD_RESPONSES_FAILED
        )
        return [row.to_domain() for row in self._parse_list(ResponseOut, data)]

    async def export_responses(
        self,
        fmt: str,
        assignment_id: str | None = None,
        class_id: str | None = None,
        student_id: str | None = None,
    ) -> bytes:
        """Download an export blob; without ``assignment_id`` the ``-all`` variant is used."""
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt!r}")
        if assignment_id:
            path = f"/responses/export/{fmt}/{assignment_id}"
            params = _filters(class_id, student_id, assignment_id)
        else:
            path = f"/responses/export/{fmt}-all"
            params = {}
        response = await self._send("GET", path, params=params or None, fallback=messages.EXPORT_FAILED)
        return response.content

    # --- Internals ---

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        fallback: str = messages.REQUEST_FAILED,
    ) -> Any:
        response = await self._send(method, path, json=json, params=params, fallback=fallback)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(messages.UNEXPECTED_RESPONSE, response.status_code) from exc

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        fallback: str = messages.REQUEST_FAILED,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise NetworkError(messages.REQUEST_TIMED_OUT) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(messages.NETWORK_UNAVAILABLE) from exc

        if response.is_success:
            return response

        message = _error_message(response) or fallback
        logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
        if response.status_code == 401:
            raise AuthenticationError(message, response.status_code)
        raise NetworkError(message, response.status_code)

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except SchemaValidationError as exc:
            logger.warning("Malformed %s payload: %s", model.__name__, exc)
            raise NetworkError(messages.UNEXPECTED_RESPONSE) from exc

    @staticmethod
    def _parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
        try:
            return TypeAdapter(list[model]).validate_python(data or [])
        except SchemaValidationError as exc:
            logger.warning("Malformed %s list payload: %s", model.__name__, exc)
            raise NetworkError(messages.UNEXPECTED_RESPONSE) from exc


def _filters(
    class_id: str | None,
    student_id: str | None,
    assignment_id: str | None,
) -> dict[str, str]:
    params = {"classId": class_id, "studentId": student_id, "assignmentId": assignment_id}
    return {key: value for key, value in params.items() if value}


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    try:
        return ErrorOut.model_validate(body).text()
    except SchemaValidationError:
        return None
