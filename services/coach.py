import logging
from collections import Counter
from typing import Any, List, Tuple

from config import Config
from models import CoachResponse, CoachTestData, TimelineSegment
from services.llm_gateway import create_gateway
from services.scoring import find_weakest_metric, metric_label

SECTIONS = ["intro", "body", "conclusion"]
NO_SECTION = "throughout"

SYSTEM_PROMPT = """You are ORATORA's AI Speaking Coach. You analyze delivery metrics ONLY - pauses, pace, silence, and confidence.

CRITICAL RULES:
- Focus ONLY on delivery (pauses, pace, silence, visual/vocal confidence)
- Do NOT rewrite speech content or suggest different words
- Do NOT give motivational or generic advice like "practice more" or "believe in yourself"
- Keep responses SHORT (max 4-5 lines per section)
- Be specific about WHERE in the speech the issue occurred
- Give ONE clear, actionable practice task

You MUST respond in EXACTLY this format:
Issue:
[One sentence identifying the specific delivery problem]

Explanation:
[2-3 sentences explaining why this metric is low and where in the speech it occurred]

Practice Task:
[One specific 30-60 second drill to improve this issue]

How This Helps:
[One sentence explaining the benefit]"""


def format_number(value: Any) -> str:
    """Render whole floats without a trailing '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _or_default(value: Any, fallback: Any) -> str:
    # Zero and missing values both fall back
    return format_number(value) if value else str(fallback)


def weakest_metric(test_data: CoachTestData) -> Tuple[str, float]:
    """Return the display name and score of the weakest sub-score."""
    key, score = find_weakest_metric(test_data.model_dump())
    return metric_label(key), score


def section_for_position(position: float) -> str:
    if position < Config.INTRO_CUTOFF:
        return "intro"
    if position < Config.BODY_CUTOFF:
        return "body"
    return "conclusion"


def awkward_segments(timeline: List[TimelineSegment]) -> List[TimelineSegment]:
    return [segment for segment in timeline if segment.type == "awkward"]


def find_problematic_section(timeline: List[TimelineSegment], duration: float) -> str:
    """Return the speech third holding the most awkward pauses.

    Falls back to "throughout" when there are no awkward segments or the
    duration is not positive. Equal counts resolve to the earlier section.
    """
    segments = awkward_segments(timeline)
    if not segments or duration <= 0:
        return NO_SECTION

    counts = Counter(section_for_position(segment.start / duration) for segment in segments)
    return max(SECTIONS, key=lambda section: (counts[section], -SECTIONS.index(section)))


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(test_data: CoachTestData, metric: str, score: float, section: str) -> str:
    audio = test_data.audio_analysis or {}
    video = test_data.video_analysis or {}
    awkward_count = len(awkward_segments(test_data.timeline_data))

    return f"""Analyze this speaking test data:

WEAKEST METRIC: {metric} (Score: {format_number(score)}/100)

ALL SCORES:
- Flow Continuity: {format_number(test_data.flow_continuity_score)}/100
- Pause Control: {format_number(test_data.pause_control_score)}/100
- Vocal Confidence: {format_number(test_data.vocal_confidence_score)}/100
- Visual Confidence: {format_number(test_data.visual_confidence_score)}/100

TIMELINE DATA:
- Total duration: {format_number(test_data.duration_seconds)} seconds
- Awkward silences: {awkward_count} occurrences
- Most problematic section: {section}

AUDIO METRICS:
- Words per minute: {_or_default(audio.get('wordsPerMinute'), 'N/A')}
- Silence percentage: {_or_default(audio.get('silencePercentage'), 'N/A')}%
- Filler words: {_or_default(audio.get('fillerWordCount'), 0)}

VIDEO METRICS:
- Eye contact: {_or_default(video.get('eyeContactPercentage'), 'N/A')}%
- Head movement score: {_or_default(video.get('headMovementScore'), 'N/A')}

Provide targeted coaching for the weakest metric: {metric}."""


class CoachService:
    def __init__(self, gateway=None):
        # Resolved per call when unset so a missing key surfaces on the request
        self.gateway = gateway

    async def get_feedback(self, test_data: CoachTestData) -> CoachResponse:
        gateway = self.gateway or create_gateway()

        metric, score = weakest_metric(test_data)
        section = find_problematic_section(test_data.timeline_data, test_data.duration_seconds)
        logging.info(f"Coaching on {metric} ({format_number(score)}), problem section: {section}")

        feedback = await gateway.complete(
            build_system_prompt(),
            build_user_prompt(test_data, metric, score, section),
        )
        return CoachResponse(feedback=feedback, weakest_metric=metric, weakest_score=score)
