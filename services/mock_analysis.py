import random
from typing import Any, Dict, List, Optional

from config import Config
from models import Insight, SpeechTest, SpeechTestCreate, TimelineSegment
from services.scoring import overall_score


class MockAnalysisGenerator:
    """Stand-in for real speech analysis.

    Scores, timeline and metrics are drawn at random; nothing here looks at
    the recording itself.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _draw(self, bounds) -> int:
        low, high = bounds
        return self.rng.randint(low, high)

    def generate_scores(self) -> Dict[str, int]:
        scores = {
            "flow_continuity_score": self._draw(Config.FLOW_CONTINUITY_RANGE),
            "pause_control_score": self._draw(Config.PAUSE_CONTROL_RANGE),
            "vocal_confidence_score": self._draw(Config.VOCAL_CONFIDENCE_RANGE),
            "visual_confidence_score": self._draw(Config.VISUAL_CONFIDENCE_RANGE),
        }
        scores["overall_score"] = overall_score(scores)
        return scores

    def generate_timeline(self, duration_seconds: float) -> List[TimelineSegment]:
        count = Config.TIMELINE_SEGMENT_COUNT
        width = duration_seconds / count
        return [
            TimelineSegment(
                start=i * width,
                end=(i + 1) * width,
                type=self.rng.choice(Config.SEGMENT_TYPE_POOL),
                confidence=self._draw(Config.SEGMENT_CONFIDENCE_RANGE),
            )
            for i in range(count)
        ]

    def generate_insights(self, scores: Dict[str, int]) -> List[Insight]:
        insights = []

        if scores["pause_control_score"] < Config.PAUSE_IMPROVEMENT_THRESHOLD:
            insights.append(Insight(
                type="improvement",
                title="Pause Control",
                message="You had a few awkward silences. Try to fill pauses with intentional breaths rather than letting silence linger.",
            ))

        if scores["vocal_confidence_score"] > Config.VOCAL_STRENGTH_THRESHOLD:
            insights.append(Insight(
                type="strength",
                title="Vocal Confidence",
                message="Your voice projection was strong and consistent throughout the speech.",
            ))

        if scores["visual_confidence_score"] < Config.VISUAL_IMPROVEMENT_THRESHOLD:
            insights.append(Insight(
                type="improvement",
                title="Eye Contact",
                message="Your eye contact dropped after the midpoint. Practice maintaining camera focus during key points.",
            ))

        insights.append(Insight(
            type="tip",
            title="Pace Variation",
            message="Consider slowing down slightly when making important points to emphasize them.",
        ))
        return insights

    def generate_audio_analysis(self) -> Dict[str, Any]:
        return {
            "averagePitch": 150 + self.rng.randrange(50),
            "pitchVariance": 20 + self.rng.randrange(30),
            "wordsPerMinute": 120 + self.rng.randrange(40),
            "fillerWordCount": self.rng.randrange(5),
            "silencePercentage": 10 + self.rng.randrange(15),
        }

    def generate_video_analysis(self) -> Dict[str, Any]:
        return {
            "eyeContactPercentage": 60 + self.rng.randrange(30),
            "headMovementScore": 50 + self.rng.randrange(40),
            "facePresencePercentage": 90 + self.rng.randrange(10),
        }

    def analyze(self, request: SpeechTestCreate) -> SpeechTest:
        """Produce a complete speech test record for a finished recording."""
        scores = self.generate_scores()
        return SpeechTest(
            user_id=request.user_id,
            speech_mode=request.speech_mode,
            audience_type=request.audience_type,
            duration_seconds=request.duration_seconds,
            audio_analysis=self.generate_audio_analysis(),
            video_analysis=self.generate_video_analysis(),
            timeline_data=self.generate_timeline(request.duration_seconds),
            insights=self.generate_insights(scores),
            **scores,
        )
