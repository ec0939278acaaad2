import main
from services.llm_gateway import GatewayError, QuotaExhaustedError, RateLimitError


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_ai_coach_returns_feedback(client, fake_gateway, test_data):
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 200
    body = response.json()
    assert body["weakestMetric"] == "Pause Control"
    assert body["weakestScore"] == 61
    assert body["feedback"].startswith("Issue:")
    assert len(fake_gateway.calls) == 1


def test_ai_coach_rate_limit(client, fake_gateway, test_data):
    fake_gateway.error = RateLimitError()
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded. Please try again in a moment."}


def test_ai_coach_quota_exhausted(client, fake_gateway, test_data):
    fake_gateway.error = QuotaExhaustedError()
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 402
    assert response.json() == {"error": "AI credits exhausted. Please add credits to continue."}


def test_ai_coach_generic_failure(client, fake_gateway, test_data):
    fake_gateway.error = GatewayError("AI gateway error: 500")
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 500
    assert response.json() == {"error": "AI gateway error: 500"}


def test_ai_coach_missing_key(client, monkeypatch, test_data):
    monkeypatch.setattr(main.coach_service, "gateway", None)
    monkeypatch.setattr(main.Config, "COACH_PROVIDER", "gateway")
    monkeypatch.setattr(main.Config, "AI_GATEWAY_API_KEY", None)
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 500
    assert response.json() == {"error": "AI_GATEWAY_API_KEY is not configured"}


def test_ai_coach_rejects_out_of_range_scores(client, fake_gateway, test_data):
    test_data["pause_control_score"] = 140
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 422
    assert fake_gateway.calls == []


def test_cors_preflight(client):
    response = client.options(
        "/ai-coach",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, apikey",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def _create(client, **overrides):
    payload = {"user_id": "u1", "speech_mode": "startup_pitch", "audience_type": "supportive", "duration_seconds": 60}
    payload.update(overrides)
    return client.post("/tests", json=payload)


def test_create_test_runs_analysis_and_saves(client, repository):
    response = _create(client)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Processing started"
    result = body["result"]
    assert result["speech_mode"] == "startup_pitch"
    assert len(result["timeline_data"]) == 12

    listed = client.get("/users/u1/tests").json()
    assert [t["id"] for t in listed] == [result["id"]]


def test_create_test_rejects_unknown_mode(client):
    assert _create(client, speech_mode="karaoke").status_code == 422


def test_get_and_delete_test(client):
    test_id = _create(client).json()["result"]["id"]

    assert client.get(f"/users/u1/tests/{test_id}").status_code == 200
    assert client.get(f"/users/u2/tests/{test_id}").status_code == 404
    assert client.delete(f"/users/u2/tests/{test_id}").status_code == 404

    response = client.delete(f"/users/u1/tests/{test_id}")
    assert response.status_code == 200
    assert client.get("/users/u1/tests").json() == []


def test_list_limit(client):
    for _ in range(3):
        _create(client)

    assert len(client.get("/users/u1/tests", params={"limit": 2}).json()) == 2


def test_dashboard(client):
    _create(client)
    stats = client.get("/users/u1/dashboard").json()

    assert stats["total_tests"] == 1
    assert stats["best_area"] in ("Flow Continuity", "Pause Control", "Vocal Confidence", "Visual Confidence")


def test_practice_routes(client):
    scores = {
        "flow_continuity_score": 85,
        "pause_control_score": 80,
        "vocal_confidence_score": 90,
        "visual_confidence_score": 62,
    }

    task = client.post("/practice/task", json=scores).json()
    assert task["id"] == "camera_focus_drill"

    result = client.post("/practice/complete", json=scores).json()
    assert result["task"]["id"] == "camera_focus_drill"
    assert result["after"]["visual_confidence_score"] == 62 + result["improvement"]


def test_ai_coach_accepts_fractional_segment_confidence(client, fake_gateway, test_data):
    test_data["timeline_data"][1]["confidence"] = 0.87
    response = client.post("/ai-coach", json={"testData": test_data})

    assert response.status_code == 200
    assert response.json()["weakestMetric"] == "Pause Control"


def test_ai_coach_keeps_integer_scores_integral(client, fake_gateway, test_data):
    body = client.post("/ai-coach", json={"testData": test_data}).json()

    assert body["weakestScore"] == 61
    assert isinstance(body["weakestScore"], int)


def test_ai_coach_keeps_fractional_scores(client, fake_gateway, test_data):
    test_data["pause_control_score"] = 60.5
    body = client.post("/ai-coach", json={"testData": test_data}).json()

    assert body["weakestScore"] == 60.5


class _TaskResult:
    def __init__(self, state, result=None, info=None, traceback=None):
        self.state = state
        self.result = result
        self.info = info
        self.traceback = traceback


def test_status_success(client, monkeypatch):
    monkeypatch.setattr(main.celery_app, "AsyncResult", lambda task_id: _TaskResult("SUCCESS", result={"id": "t1"}))

    assert client.get("/status/abc").json() == {"status": "SUCCESS", "result": {"id": "t1"}}


def test_status_failure(client, monkeypatch):
    failed = _TaskResult("FAILURE", info=ValueError("bad duration"), traceback="Traceback ...")
    monkeypatch.setattr(main.celery_app, "AsyncResult", lambda task_id: failed)

    assert client.get("/status/abc").json() == {
        "status": "FAILURE",
        "message": "bad duration",
        "traceback": "Traceback ...",
    }


def test_status_pending_and_other_states(client, monkeypatch):
    monkeypatch.setattr(main.celery_app, "AsyncResult", lambda task_id: _TaskResult("PENDING"))
    assert client.get("/status/abc").json()["status"] == "PENDING"

    monkeypatch.setattr(main.celery_app, "AsyncResult", lambda task_id: _TaskResult("STARTED"))
    assert client.get("/status/abc").json() == {"status": "STARTED", "message": "Unknown state"}
