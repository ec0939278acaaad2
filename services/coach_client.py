import logging
from typing import Any, Dict, Optional

import httpx

from models import CoachingFeedback
from services.feedback_parser import FeedbackParser
from services.scoring import METRICS, score_field


class CoachClientError(Exception):
    """Raised when the coaching endpoint returns an error payload"""
    pass


class CoachClient:
    """Calls the /ai-coach endpoint and parses the reply into sections."""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 60.0):
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout
        self.parser = FeedbackParser()

    @staticmethod
    def build_payload(test_data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {score_field(key): test_data.get(score_field(key)) or 0 for key, _ in METRICS}
        payload.update({
            "timeline_data": test_data.get("timeline_data") or [],
            "audio_analysis": test_data.get("audio_analysis") or {},
            "video_analysis": test_data.get("video_analysis") or {},
            "duration_seconds": test_data.get("duration_seconds") or 0,
        })
        return {"testData": payload}

    async def fetch_feedback(self, test_data: Dict[str, Any]) -> CoachingFeedback:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            response = await client.post("/ai-coach", json=self.build_payload(test_data))

        try:
            data = response.json()
        except ValueError:
            raise CoachClientError(f"Coach request failed: {response.status_code}")

        if response.status_code != 200 or data.get("error"):
            message = data.get("error") or f"Coach request failed: {response.status_code}"
            logging.error(f"AI Coach error: {message}")
            raise CoachClientError(message)

        sections = self.parser.parse(data.get("feedback", ""))
        return CoachingFeedback(
            weakest_metric=data.get("weakestMetric", ""),
            weakest_score=data.get("weakestScore", 0),
            **sections,
        )
