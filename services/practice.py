import random
from typing import Any, Dict, Optional

from config import Config
from models import PracticeResult, PracticeTask, SubScores
from services.scoring import METRICS, find_weakest_metric, overall_score, score_field

PRACTICE_TASKS: Dict[str, PracticeTask] = {
    "pause_control": PracticeTask(
        id="pause_drill",
        title="Intentional Pause Drill",
        metric="Pause Control",
        description="Practice deliberate pausing between key points to eliminate awkward silences.",
        instructions=[
            "Take a deep breath before starting",
            "Speak one sentence, then pause for 2 full seconds",
            "Use the pause to look at the camera",
            "Repeat for the next sentence",
        ],
        duration=45,
    ),
    "flow_continuity": PracticeTask(
        id="metronome_drill",
        title="Metronome Speaking Drill",
        metric="Flow Continuity",
        description="Maintain steady rhythm to improve speech flow and reduce speed variations.",
        instructions=[
            "Imagine a slow, steady beat (60 BPM)",
            "Speak one word per beat for the first 15 seconds",
            "Gradually speed up while maintaining rhythm",
            "Focus on smooth transitions between words",
        ],
        duration=45,
    ),
    "vocal_confidence": PracticeTask(
        id="emphasis_drill",
        title="Emphasis Repetition Drill",
        metric="Vocal Confidence",
        description="Practice projecting key words to build vocal confidence and clarity.",
        instructions=[
            'Pick a simple phrase: "This is important"',
            'Say it normally, then emphasize "THIS"',
            'Say it again, emphasizing "IMPORTANT"',
            "Vary your pitch and volume deliberately",
        ],
        duration=40,
    ),
    "visual_confidence": PracticeTask(
        id="camera_focus_drill",
        title="Camera Lock Drill",
        metric="Visual Confidence",
        description="Train consistent eye contact by focusing on the camera without looking away.",
        instructions=[
            "Look directly at the camera lens",
            "Speak about any topic for 30 seconds",
            "Do not look away, even during pauses",
            "Breathe and stay relaxed while maintaining focus",
        ],
        duration=35,
    ),
}


class PracticeDrillService:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.improvement_range = Config.PRACTICE_IMPROVEMENT_RANGE

    def select_task(self, scores: Dict[str, Any]) -> PracticeTask:
        """Pick the drill that targets the weakest sub-score."""
        key, _ = find_weakest_metric(scores)
        return PRACTICE_TASKS[key]

    def simulate(self, scores: SubScores) -> PracticeResult:
        """Re-score a finished drill.

        Nothing is analysed: the targeted metric gains a random 5-19 points and
        every other metric a third of that, all capped at 100.
        """
        before = scores.model_dump()
        weakest_key, _ = find_weakest_metric(before)
        low, high = self.improvement_range
        improvement = self.rng.randint(low, high)

        after = {}
        for key, _ in METRICS:
            field = score_field(key)
            gain = improvement if key == weakest_key else improvement // 3
            after[field] = min(100, before[field] + gain)

        return PracticeResult(
            task=PRACTICE_TASKS[weakest_key],
            improvement=improvement,
            before=scores,
            after=SubScores(**after),
            overall_before=overall_score(before),
            overall_after=overall_score(after),
        )
