"""FastAPI development backend exposing the endpoints the client core uses."""

from __future__ import annotations

import csv
import io
import json
import logging
from threading import Thread

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from questify.api.schemas import SubmitAnswerIn
from questify.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from questify.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from questify.constants.quiz_constants import EXPORT_FORMATS
from questify.core.services.aggregator import engagement_level
from questify.server.dev_store import (
    DevStore,
    StoreAuthError,
    StoreConflictError,
    StoreForbiddenError,
    StoreLookupError,
    StoredResponse,
    StoredUser,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


class RegisterPayload(BaseModel):
    name: str
    email: str
    password: str
    role: str = "student"
    admissionNo: str | None = None


class LoginPayload(BaseModel):
    email: str
    password: str
    role: str | None = None


def _user_payload(user: StoredUser) -> dict[str, object]:
    return {
        "_id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "admissionNo": user.admission_no,
    }


def _store_errors(exc: Exception) -> HTTPException:
    if isinstance(exc, StoreAuthError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, StoreForbiddenError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, StoreLookupError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def create_api_app(store: DevStore) -> FastAPI:
    """Create a FastAPI application wired to the provided store."""
    app = FastAPI(
        title=f"{APP_NAME} development API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
    )
    router = APIRouter(prefix=API_PREFIX)

    @app.exception_handler(StarletteHTTPException)
    async def _message_body(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    def current_user(authorization: str | None = Header(default=None)) -> StoredUser:
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Not authorized, no token")
        try:
            return store.user_for_token(authorization.removeprefix("Bearer ").strip())
        except StoreAuthError as exc:
            raise _store_errors(exc) from exc

    def current_student(user: StoredUser = Depends(current_user)) -> StoredUser:
        if user.role != "student":
            raise HTTPException(status_code=403, detail="Student access only")
        return user

    def current_admin(user: StoredUser = Depends(current_user)) -> StoredUser:
        if user.role != "admin":
            raise HTTPException(status_code=403, detail="Admin access only")
        return user

    def populate(response: StoredResponse) -> dict[str, object]:
        student = store.get_user(response.student_id)
        question = store.get_question(response.question_id)
        group = store.get_class(response.class_id)
        return {
            "_id": response.id,
            "studentId": (
                {"_id": student.id, "name": student.name, "admissionNo": student.admission_no}
                if student
                else None
            ),
            "questionId": (
                {
                    "_id": question.id,
                    "question": question.question,
                    "options": question.options,
                    "correctAnswer": question.correct_answer,
                }
                if question
                else None
            ),
            "classId": {"_id": group.id, "name": group.name} if group else None,
            "assignmentId": response.assignment_id,
            "selectedAnswer": response.selected_answer,
            "isCorrect": response.is_correct,
            "responseTime": response.response_time,
            "answeredAt": response.answered_at.isoformat(),
        }

    @router.post("/auth/register", status_code=201)
    def register(payload: RegisterPayload) -> dict[str, object]:
        try:
            user = store.register_user(
                payload.name, payload.email, payload.password, payload.role, payload.admissionNo
            )
        except (ValueError, StoreConflictError) as exc:
            raise _store_errors(exc) from exc
        return {"message": "Registration successful", "user": _user_payload(user)}

    @router.post("/auth/login")
    def login(payload: LoginPayload) -> dict[str, object]:
        try:
            token, user = store.login(payload.email, payload.password, payload.role)
        except StoreAuthError as exc:
            raise _store_errors(exc) from exc
        return {"token": token, "user": _user_payload(user)}

    @router.get("/auth/me")
    def me(user: StoredUser = Depends(current_user)) -> dict[str, object]:
        return _user_payload(user)

    @router.get("/students/assigned-questions")
    def assigned_questions(user: StoredUser = Depends(current_student)) -> list[dict[str, object]]:
        return [
            {
                "assignmentId": assignment.id,
                "assignmentTitle": assignment.title,
                "assignmentDescription": assignment.description,
                "classId": group.id,
                "className": group.name,
                "questionId": question.id,
                "question": question.question,
                "options": question.options,
                "imageUrl": question.image_url,
                "subject": question.subject,
                "isAnswered": is_answered,
                "assignmentCompleted": completed,
            }
            for assignment, group, question, is_answered, completed in store.assigned_questions(user.id)
        ]

    @router.post("/students/submit-answer", status_code=201)
    def submit_answer(
        payload: SubmitAnswerIn,
        user: StoredUser = Depends(current_student),
    ) -> dict[str, object]:
        response_time = payload.response_time
        if response_time is None:
            response_time = 0.0
        try:
            stored = store.submit_answer(
                student_id=user.id,
                question_id=payload.question_id,
                selected_answer=payload.selected_answer,
                class_id=payload.class_id,
                assignment_id=payload.assignment_id,
                response_time=response_time,
            )
        except (ValueError, StoreConflictError, StoreLookupError, StoreForbiddenError) as exc:
            raise _store_errors(exc) from exc
        return {
            "message": "Answer submitted successfully",
            "questionId": stored.question_id,
            "isCorrect": stored.is_correct,
            "responseTime": stored.response_time,
        }

    @router.get("/students/my-responses")
    def my_responses(user: StoredUser = Depends(current_student)) -> list[dict[str, object]]:
        return [populate(r) for r in store.responses(student_id=user.id)]

    @router.get("/leaderboard")
    def leaderboard(
        classId: str | None = None,
        user: StoredUser = Depends(current_user),
    ) -> list[dict[str, object]]:
        return store.leaderboard(classId)

    @router.get("/classes")
    def classes(user: StoredUser = Depends(current_user)) -> list[dict[str, object]]:
        return [{"_id": c.id, "name": c.name, "students": c.student_ids} for c in store.get_classes()]

    @router.get("/assignments")
    def assignments(user: StoredUser = Depends(current_admin)) -> list[dict[str, object]]:
        return [
            {
                "_id": a.id,
                "title": a.title,
                "description": a.description,
                "classId": a.class_id,
                "quizNumber": a.quiz_number,
                "questions": a.question_ids,
                "assignedAt": a.assigned_at.isoformat(),
            }
            for a in store.get_assignments()
        ]

    @router.get("/responses")
    def responses(
        classId: str | None = None,
        studentId: str | None = None,
        assignmentId: str | None = None,
        user: StoredUser = Depends(current_admin),
    ) -> list[dict[str, object]]:
        return [populate(r) for r in store.responses(classId, studentId, assignmentId)]

    @router.get("/responses/export/{export_name}")
    def export_all(export_name: str, user: StoredUser = Depends(current_admin)) -> Response:
        fmt = export_name.removesuffix("-all")
        if fmt == export_name or fmt not in EXPORT_FORMATS:
            raise HTTPException(status_code=404, detail="Unknown export format")
        return _export(fmt, [populate(r) for r in store.responses()])

    @router.get("/responses/export/{fmt}/{assignment_id}")
    def export_assignment(
        fmt: str,
        assignment_id: str,
        classId: str | None = None,
        studentId: str | None = None,
        user: StoredUser = Depends(current_admin),
    ) -> Response:
        if fmt not in EXPORT_FORMATS:
            raise HTTPException(status_code=404, detail="Unknown export format")
        rows = [populate(r) for r in store.responses(classId, studentId, assignment_id)]
        if not rows:
            raise HTTPException(status_code=404, detail="No responses found for this assignment")
        return _export(fmt, rows)

    app.include_router(router)
    return app


def _export(fmt: str, rows: list[dict]) -> Response:
    if fmt == "json":
        return Response(content=json.dumps(rows, indent=2), media_type="application/json")
    return Response(content=_export_csv(fmt, rows), media_type="text/csv")


def _export_csv(fmt: str, rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    if fmt == "ednet-basic":
        writer.writerow(["timestamp", "solving_id", "question_id", "user_answer", "elapsed_time"])
        for index, row in enumerate(reversed(rows), start=1):
            question = row["questionId"] or {}
            writer.writerow(
                [row["answeredAt"], index, question.get("_id", ""), row["selectedAnswer"], int(row["responseTime"])]
            )
        return buffer.getvalue()

    header = ["student_name", "admission_no", "question", "selected_answer", "is_correct",
              "response_time_ms", "response_time_sec", "engagement_level", "answered_at"]
    if fmt == "ednet":
        header = ["user_id", "question_id", "class_id", "assignment_id", "user_answer", "correct",
                  "elapsed_time", "engagement_level", "timestamp"]
    writer.writerow(header)
    correct = 0
    for row in rows:
        student = row["studentId"] or {}
        question = row["questionId"] or {}
        group = row["classId"] or {}
        level = engagement_level(row["responseTime"])
        correct += 1 if row["isCorrect"] else 0
        if fmt == "ednet":
            writer.writerow([student.get("_id", ""), question.get("_id", ""), group.get("_id", ""),
                             row["assignmentId"], row["selectedAnswer"], int(row["isCorrect"]),
                             int(row["responseTime"]), level, row["answeredAt"]])
        else:
            writer.writerow([student.get("name", "Unknown"), student.get("admissionNo") or "N/A",
                             question.get("question", "Unknown"), row["selectedAnswer"],
                             "Yes" if row["isCorrect"] else "No", int(row["responseTime"]),
                             f"{row['responseTime'] / 1000:.2f}", level, row["answeredAt"]])
    if fmt == "csv":
        writer.writerow([])
        writer.writerow(["Total responses", len(rows)])
        writer.writerow(["Correct responses", correct])
    return buffer.getvalue()


def start_api_server(
    store: DevStore,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the development API in a background daemon thread."""
    app = create_api_app(store)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuestifyDevApi", daemon=True)
    thread.start()
    logger.info("Development API listening on http://%s:%d%s", host, port, API_PREFIX)
    return thread
