from dotenv import load_dotenv
import os

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Configuration class for the application
class Config:
    # Language-model gateway (OpenAI-compatible chat completions)
    AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
    AI_GATEWAY_API_KEY = os.getenv("AI_GATEWAY_API_KEY")
    AI_GATEWAY_TIMEOUT = 60.0  # seconds

    # "gateway" or "gemini"
    COACH_PROVIDER = os.getenv("COACH_PROVIDER", "gateway")
    COACH_MODEL = os.getenv("COACH_MODEL", "google/gemini-3-flash-preview")
    COACH_MAX_TOKENS = 500
    COACH_TEMPERATURE = 0.7

    # Gemini API Configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-lite")

    # Managed database (Supabase PostgREST)
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY")
    SPEECH_TESTS_TABLE = "speech_tests"

    CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
    CELERY_TASK_ALWAYS_EAGER = _env_flag("CELERY_TASK_ALWAYS_EAGER")

    CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

    # Mock analysis ranges (inclusive)
    FLOW_CONTINUITY_RANGE = (65, 94)
    PAUSE_CONTROL_RANGE = (55, 89)
    VOCAL_CONFIDENCE_RANGE = (70, 94)
    VISUAL_CONFIDENCE_RANGE = (60, 89)
    SEGMENT_CONFIDENCE_RANGE = (60, 99)

    TIMELINE_SEGMENT_COUNT = 12
    SEGMENT_TYPE_POOL = ["smooth", "smooth", "smooth", "natural", "awkward"]

    # Insight thresholds
    PAUSE_IMPROVEMENT_THRESHOLD = 70
    VOCAL_STRENGTH_THRESHOLD = 80
    VISUAL_IMPROVEMENT_THRESHOLD = 70

    # Timeline position cut-offs for intro / body / conclusion
    INTRO_CUTOFF = 0.33
    BODY_CUTOFF = 0.66

    # Practice drills
    PRACTICE_IMPROVEMENT_RANGE = (5, 19)

    DASHBOARD_RECENT_LIMIT = 5
