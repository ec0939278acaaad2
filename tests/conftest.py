import os

# Must be set before config.py is imported; load_dotenv never overrides these
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_KEY"] = ""
os.environ["AI_GATEWAY_API_KEY"] = ""
os.environ["COACH_PROVIDER"] = "gateway"

import pytest
from fastapi.testclient import TestClient

import main
from services.repository import InMemoryTestRepository


class FakeGateway:
    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.reply


WELL_FORMED_REPLY = """Issue:
You left long silences between your main points.

Explanation:
Pause Control scored lowest. Most awkward pauses fell in the body of the speech.

Practice Task:
Speak one sentence, pause for exactly two seconds, then continue for 45 seconds.

How This Helps:
Intentional pauses read as confidence instead of hesitation.
"""


@pytest.fixture
def test_data():
    return {
        "flow_continuity_score": 82,
        "pause_control_score": 61,
        "vocal_confidence_score": 77,
        "visual_confidence_score": 70,
        "timeline_data": [
            {"start": 0, "end": 5, "type": "smooth"},
            {"start": 25, "end": 30, "type": "awkward"},
            {"start": 30, "end": 35, "type": "awkward"},
            {"start": 50, "end": 55, "type": "awkward"},
        ],
        "audio_analysis": {"wordsPerMinute": 135, "silencePercentage": 18, "fillerWordCount": 3},
        "video_analysis": {"eyeContactPercentage": 72, "headMovementScore": 64},
        "duration_seconds": 60,
    }


@pytest.fixture
def repository(monkeypatch):
    repo = InMemoryTestRepository()
    monkeypatch.setattr(main, "test_repository", repo)
    return repo


@pytest.fixture
def fake_gateway(monkeypatch):
    gateway = FakeGateway(reply=WELL_FORMED_REPLY)
    monkeypatch.setattr(main.coach_service, "gateway", gateway)
    return gateway


@pytest.fixture
def client(repository):
    return TestClient(main.app)
