import json

import httpx
import pytest

from questify.api.client import QuestifyApiClient, is_already_answered
from questify.config import ClientSettings
from questify.constants.network_constants import REQUEST_TIMEOUT_SECONDS
from questify.core.errors import AuthenticationError, IdempotentDuplicateError, NetworkError

BASE_URL = "http://backend.test/api"


def make_client(handler, token="tok-123"):
    return QuestifyApiClient(BASE_URL, token=token, transport=httpx.MockTransport(handler))


async def test_bearer_token_is_attached():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json=[])

    async with make_client(handler) as client:
        assert await client.get_assigned_questions() == []

    assert seen == {"auth": "Bearer tok-123", "path": "/api/students/assigned-questions"}


async def test_no_token_sends_no_authorization_header():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[])

    async with make_client(handler, token=None) as client:
        await client.get_classes()

    assert seen["auth"] is None


async def test_login_adopts_returned_token():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body == {"email": "a@b.co", "password": "pw1234", "role": "student"}
        return httpx.Response(
            200,
            json={"token": "fresh", "user": {"_id": "u1", "name": "Ann", "email": "a@b.co", "role": "student"}},
        )

    async with make_client(handler, token=None) as client:
        result = await client.login("a@b.co", "pw1234")
        assert result.user.name == "Ann"
        assert client.token == "fresh"
        client.set_token(None)
        assert client.token is None


async def test_assigned_questions_are_parsed():
    rows = [
        {
            "assignmentId": "a1",
            "assignmentTitle": "Quiz 1",
            "classId": "c1",
            "className": "Physics",
            "questionId": "q1",
            "question": "Unit of force?",
            "options": ["J", "N"],
            "imageUrl": "",
            "isAnswered": False,
            "assignmentCompleted": False,
        }
    ]
    async with make_client(lambda request: httpx.Response(200, json=rows)) as client:
        (row,) = await client.get_assigned_questions()

    assert row.question_id == "q1"
    assert row.question.options == ("J", "N")
    assert row.question.image_url is None
    assert row.assignment_description is None


async def test_malformed_payload_is_network_error():
    rows = [{"assignmentId": "a1", "questionId": "q1", "options": ["only one"]}]
    async with make_client(lambda request: httpx.Response(200, json=rows)) as client:
        with pytest.raises(NetworkError) as excinfo:
            await client.get_assigned_questions()
    assert excinfo.value.message == "Unexpected response from server"


async def test_populated_and_plain_references_in_responses():
    payload = [
        {
            "_id": "r1",
            "studentId": {"_id": "s1", "name": "Ann", "admissionNo": "S-1"},
            "questionId": {"_id": "q1", "question": "Unit of force?"},
            "classId": "c1",
            "assignmentId": "a1",
            "selectedAnswer": 1,
            "isCorrect": True,
            "responseTime": 2300,
            "answeredAt": "2024-05-01T10:00:00Z",
        },
        {
            "_id": "r2",
            "studentId": "s2",
            "questionId": None,
            "classId": {"_id": "c1", "name": "Physics"},
            "selectedAnswer": 0,
            "isCorrect": False,
            "answeredAt": "2024-05-01T10:05:00Z",
        },
    ]
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=payload)

    async with make_client(handler) as client:
        first, second = await client.get_responses(class_id="c1", student_id="")

    assert seen["params"] == {"classId": "c1"}
    assert (first.student_id, first.student_name, first.admission_no) == ("s1", "Ann", "S-1")
    assert first.question_text == "Unit of force?"
    assert first.response_time_ms == 2300
    assert second.question_id is None
    assert second.class_name == "Physics"
    assert second.response_time_ms == 0


async def test_backend_message_is_surfaced():
    handler = lambda request: httpx.Response(400, json={"message": "Class is full"})
    async with make_client(handler) as client:
        with pytest.raises(NetworkError) as excinfo:
            await client.get_leaderboard("c1")
    assert excinfo.value.message == "Class is full"
    assert excinfo.value.status_code == 400


async def test_detail_and_fallback_messages():
    async with make_client(lambda request: httpx.Response(404, json={"detail": "Not Found"})) as client:
        with pytest.raises(NetworkError) as excinfo:
            await client.get_leaderboard()
    assert excinfo.value.message == "Not Found"

    async with make_client(lambda request: httpx.Response(502, text="<html>bad gateway</html>")) as client:
        with pytest.raises(NetworkError) as excinfo:
            await client.get_leaderboard()
    assert excinfo.value.message == "Failed to load leaderboard"


async def test_unauthorized_maps_to_authentication_error():
    handler = lambda request: httpx.Response(401, json={"message": "Not authorized, token failed"})
    async with make_client(handler) as client:
        with pytest.raises(AuthenticationError):
            await client.get_current_user()


async def test_timeout_maps_to_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    async with make_client(handler) as client:
        with pytest.raises(NetworkError) as excinfo:
            await client.get_my_responses()
    assert "took too long" in excinfo.value.message


async def test_submit_answer_payload_and_duplicate_sentinel():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        if len(bodies) == 1:
            return httpx.Response(201, json={"isCorrect": True})
        return httpx.Response(400, json={"message": "Question Already Answered"})

    async with make_client(handler) as client:
        receipt = await client.submit_answer("q1", 2, "c1", "a1", start_time_ms=1000.0, response_time_ms=2500.0)
        with pytest.raises(IdempotentDuplicateError):
            await client.submit_answer("q1", 2, "c1", "a1", start_time_ms=1000.0, response_time_ms=2500.0)

    assert bodies[0] == {
        "questionId": "q1",
        "selectedAnswer": 2,
        "classId": "c1",
        "assignmentId": "a1",
        "startTime": 1000.0,
        "responseTime": 2500.0,
    }
    assert receipt.is_correct is True
    assert receipt.response_time_ms == 2500.0


async def test_export_paths_and_bytes():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, content=b"a,b\n1,2\n")

    async with make_client(handler) as client:
        assert await client.export_responses("csv", assignment_id="a1") == b"a,b\n1,2\n"
        await client.export_responses("ednet-basic")
        with pytest.raises(ValueError):
            await client.export_responses("xml")

    assert paths == ["/api/responses/export/csv/a1", "/api/responses/export/ednet-basic-all"]


def test_is_already_answered():
    assert is_already_answered("Question already answered")
    assert is_already_answered("ALREADY ANSWERED")
    assert not is_already_answered("Invalid answer")
    assert not is_already_answered(None)


async def test_from_settings_uses_explicit_config():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[])

    settings = ClientSettings(api_url="http://other.test/v2/", token="abc")
    async with QuestifyApiClient.from_settings(settings, transport=httpx.MockTransport(handler)) as client:
        await client.get_assignments()

    assert seen == {"url": "http://other.test/v2/assignments", "auth": "Bearer abc"}


async def test_default_timeout_comes_from_network_constants():
    async with QuestifyApiClient(BASE_URL) as client:
        assert client._client.timeout.read == REQUEST_TIMEOUT_SECONDS
