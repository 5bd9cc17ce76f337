import json

import pytest
from fastapi.testclient import TestClient
from sse_starlette import sse

from backend.dependencies import get_prep_manager
from backend.prep_manager import PrepManager
from factories import RecordingClient
from main import app


@pytest.fixture(autouse=True)
def fresh_sse_exit_event():
    # Older sse-starlette releases bind this event to the first event loop they see.
    if hasattr(sse.AppStatus, "should_exit_event"):
        sse.AppStatus.should_exit_event = None
    yield


@pytest.fixture
def recording():
    return RecordingClient()


@pytest.fixture
def manager(recording):
    return PrepManager(recording)


@pytest.fixture
def client(manager):
    app.dependency_overrides[get_prep_manager] = lambda: manager
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def parse_events(body):
    """Splits a Server-Sent Events body into (event, data) pairs."""
    events = []
    for block in body.replace("\r\n", "\n").split("\n\n"):
        fields = {}
        for line in block.splitlines():
            if ":" in line and not line.startswith(":"):
                key, value = line.split(":", 1)
                fields[key] = value.strip()
        if "event" in fields:
            events.append((fields["event"], json.loads(fields.get("data", "null"))))
    return events


ANALYZE_BODY = {"mode": "text", "text": "Backend Engineer, Java, AWS", "companyName": "Amazon"}


def analyze(client, body=ANALYZE_BODY):
    response = client.post("/api/analyze", json=body)
    assert response.status_code == 200
    return parse_events(response.text)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "api_key_configured" in response.json()


def test_analyze_streams_until_ready(client):
    events = analyze(client)

    assert [event for event, _ in events] == ["status", "analysis", "status", "ready"]
    assert events[1][1]["company"] == "Amazon"
    ready = events[-1][1]
    assert ready["status"] == "ready"
    assert len(ready["challenges"]) == 3


def test_state_after_analysis(client):
    assert client.get("/api/state").status_code == 404

    analyze(client)
    state = client.get("/api/state").json()

    assert state["status"] == "ready"
    assert state["analysis"]["companyType"] == "Product"
    assert state["trainingPlan"]["techStack"] == ["Java", "AWS", "System Design"]


@pytest.mark.parametrize("body, message", [
    ({"mode": "text", "text": "JD", "companyName": ""}, "Please enter a target company name."),
    ({"mode": "text", "text": " ", "companyName": "Amazon"}, "Please paste the job description text."),
    ({"mode": "image", "companyName": "Amazon"}, "Please upload a job description image."),
])
def test_incomplete_form_is_rejected(client, recording, body, message):
    response = client.post("/api/analyze", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == message
    assert recording.events == []


def test_failed_run_ends_with_error_event(manager, client):
    manager.client = RecordingClient(fail_on={"plan"})

    events = analyze(client)

    assert events[-1] == ("error", "Something went wrong during analysis. Please try again.")
    assert client.get("/api/state").status_code == 404


def test_refresh_needs_analysis(client):
    assert client.post("/api/quiz/refresh").status_code == 409
    assert client.post("/api/challenges/refresh").status_code == 409
    assert client.post("/api/code/run", json={"code": "x", "challengeIndex": 0}).status_code == 409


def test_refresh_endpoints(client, recording):
    analyze(client)

    quiz = client.post("/api/quiz/refresh").json()["quiz"]
    challenges = client.post("/api/challenges/refresh").json()["challenges"]

    assert len(quiz) == 8
    assert "correctAnswer" in quiz[0]
    assert "starterCode" in challenges[0]
    assert [name for name, phase, _ in recording.events if phase == "start"][-2:] == ["quiz", "challenges"]


def test_code_run_and_hint(client):
    analyze(client)

    run = client.post("/api/code/run", json={"code": "def solve(): pass", "language": "python", "challengeIndex": 2})
    hint = client.post("/api/code/hint", json={"code": "", "language": "java", "challengeIndex": 0})

    assert run.status_code == 200
    assert run.json()["status"] == "Success"
    assert run.json()["testCases"][0]["passed"] is True
    assert hint.json() == {"hint": "Think about a hash map."}


def test_code_run_with_unknown_challenge(client):
    analyze(client)

    response = client.post("/api/code/run", json={"code": "", "challengeIndex": 7})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid challenge index."


def test_reset(client):
    analyze(client)

    response = client.post("/api/reset")

    assert response.status_code == 200
    assert response.json()["status"] == "idle"
    assert client.get("/api/state").status_code == 404
