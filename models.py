from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union
import uuid

from pydantic import BaseModel, ConfigDict, Field

SpeechMode = Literal["academic", "startup_pitch", "debate_mun"]
AudienceType = Literal["neutral", "supportive", "critical"]


class TimelineSegment(BaseModel):
    start: float
    end: float
    type: str
    confidence: Optional[float] = None


class Insight(BaseModel):
    type: Literal["improvement", "strength", "tip"]
    title: str
    message: str


class SubScores(BaseModel):
    flow_continuity_score: int = Field(ge=0, le=100)
    pause_control_score: int = Field(ge=0, le=100)
    vocal_confidence_score: int = Field(ge=0, le=100)
    visual_confidence_score: int = Field(ge=0, le=100)


class SpeechTestCreate(BaseModel):
    user_id: str
    speech_mode: SpeechMode = "academic"
    audience_type: AudienceType = "neutral"
    duration_seconds: int = Field(ge=0)


class SpeechTest(SubScores):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    speech_mode: SpeechMode
    audience_type: AudienceType
    duration_seconds: int
    overall_score: int = Field(ge=0, le=100)
    audio_analysis: Dict[str, Any] = Field(default_factory=dict)
    video_analysis: Dict[str, Any] = Field(default_factory=dict)
    timeline_data: List[TimelineSegment] = Field(default_factory=list)
    insights: List[Insight] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CoachTestData(BaseModel):
    flow_continuity_score: Union[int, float] = Field(ge=0, le=100)
    pause_control_score: Union[int, float] = Field(ge=0, le=100)
    vocal_confidence_score: Union[int, float] = Field(ge=0, le=100)
    visual_confidence_score: Union[int, float] = Field(ge=0, le=100)
    timeline_data: List[TimelineSegment] = Field(default_factory=list)
    audio_analysis: Dict[str, Any] = Field(default_factory=dict)
    video_analysis: Dict[str, Any] = Field(default_factory=dict)
    duration_seconds: float = 0


class CoachRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_data: CoachTestData = Field(alias="testData")


class CoachResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    feedback: str
    weakest_metric: str = Field(alias="weakestMetric")
    weakest_score: Union[int, float] = Field(alias="weakestScore")


class CoachingFeedback(BaseModel):
    weakest_metric: str
    weakest_score: Union[int, float]
    issue: str
    explanation: str
    practice_task: str
    how_this_helps: str


class PracticeTask(BaseModel):
    id: str
    title: str
    metric: str
    description: str
    instructions: List[str]
    duration: int  # seconds


class PracticeResult(BaseModel):
    task: PracticeTask
    improvement: int
    before: SubScores
    after: SubScores
    overall_before: int
    overall_after: int


class SpeechTestSummary(BaseModel):
    id: str
    speech_mode: SpeechMode
    audience_type: AudienceType
    duration_seconds: int
    overall_score: int
    created_at: datetime


class DashboardStats(BaseModel):
    average_score: int
    total_tests: int
    best_area: Optional[str]
    recent_tests: List[SpeechTestSummary]
