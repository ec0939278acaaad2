import asyncio
import uuid
import logging
from typing import Optional
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from celery import Celery

from config import Config
from models import CoachRequest, SpeechTestCreate, SubScores
from services.coach import CoachService
from services.llm_gateway import ConfigurationError, QuotaExhaustedError, RateLimitError
from services.mock_analysis import MockAnalysisGenerator
from services.practice import PracticeDrillService
from services.repository import create_repository, dashboard_stats

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

app = FastAPI(title="Oratora Coach Service", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=Config.CORS_ALLOWED_HEADERS,
)

# Initialize Celery
celery_app = Celery(
    "oratora_coach",
    broker=Config.CELERY_BROKER_URL,
    backend=Config.CELERY_RESULT_BACKEND
)
celery_app.conf.task_always_eager = Config.CELERY_TASK_ALWAYS_EAGER
celery_app.conf.task_eager_propagates = True

# Initialize services
coach_service = CoachService()
analysis_generator = MockAnalysisGenerator()
practice_service = PracticeDrillService()
test_repository = create_repository()


def _request_id() -> str:
    return str(uuid.uuid4())[:8]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@celery_app.task(name="process_recording_task")
def process_recording_task(payload: dict) -> dict:
    """
    Analyse a finished recording and store the resulting speech test.
    Runs in a Celery worker, or inline when eager mode is on.
    """
    request_id = _request_id()
    request = SpeechTestCreate(**payload)
    logging.info(f"[{request_id}] Analysing {request.duration_seconds}s {request.speech_mode} recording for user {request.user_id}")

    try:
        record = analysis_generator.analyze(request)
        saved = asyncio.run(test_repository.create_test(record))
        logging.info(f"[{request_id}] Saved speech test {saved.id} (overall {saved.overall_score})")
        return saved.model_dump(mode="json")
    except Exception as e:
        logging.error(f"[{request_id}] Recording processing error for user {request.user_id}: {str(e)}")
        raise


@app.post("/ai-coach")
async def ai_coach(request: CoachRequest):
    """
    Target the weakest sub-score and ask the language model for coaching.
    """
    request_id = _request_id()
    logging.info(f"[{request_id}] Coaching request received")
    try:
        result = await coach_service.get_feedback(request.test_data)
        return result.model_dump(by_alias=True)
    except RateLimitError as e:
        logging.warning(f"[{request_id}] Upstream rate limit")
        return _error(429, str(e))
    except QuotaExhaustedError as e:
        logging.warning(f"[{request_id}] Upstream credits exhausted")
        return _error(402, str(e))
    except ConfigurationError as e:
        logging.error(f"[{request_id}] Configuration error: {str(e)}")
        return _error(500, str(e))
    except Exception as e:
        logging.error(f"[{request_id}] AI Coach error: {str(e)}")
        return _error(500, str(e) or "Unknown error")


# Sync handler: runs in the threadpool so an eager task can start its own event loop
@app.post("/tests")
def create_test(request: SpeechTestCreate):
    """
    Enqueue analysis of a completed recording. Returns a task ID.
    """
    request_id = _request_id()
    try:
        task = process_recording_task.delay(request.model_dump())
        logging.info(f"[{request_id}] Enqueued task {task.id} for user {request.user_id}")

        response = {"message": "Processing started", "task_id": task.id}
        if Config.CELERY_TASK_ALWAYS_EAGER:
            response["result"] = task.get()
        return response
    except Exception as e:
        logging.error(f"[{request_id}] Error enqueuing task: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to start processing: {str(e)}")


@app.get("/status/{task_id}", response_model=dict)
async def get_task_status(task_id: str):
    """
    Check the status of a background processing task.

    Only meaningful with a real worker and result backend. In eager mode
    results are never stored, so POST /tests returns the result directly
    and this route cannot see it.
    """
    task = celery_app.AsyncResult(task_id)

    if task.state == "PENDING":
        response = {
            "status": "PENDING",
            "message": "Task is pending or not found"
        }
    elif task.state == "SUCCESS":
        response = {
            "status": "SUCCESS",
            "result": task.result
        }
    elif task.state == "FAILURE":
        response = {
            "status": "FAILURE",
            "message": str(task.info),
            "traceback": task.traceback
        }
    else:
        response = {
            "status": task.state,
            "message": "Unknown state"
        }
    return response


@app.get("/users/{user_id}/tests")
async def list_tests(user_id: str, limit: Optional[int] = Query(default=None, ge=1)):
    """Speech tests for a user, newest first."""
    tests = await test_repository.list_tests(user_id, limit=limit)
    return [t.model_dump(mode="json") for t in tests]


@app.get("/users/{user_id}/tests/{test_id}")
async def get_test(user_id: str, test_id: str):
    test = await test_repository.get_test(test_id, user_id)
    if test is None:
        raise HTTPException(status_code=404, detail="Test not found")
    return test.model_dump(mode="json")


@app.delete("/users/{user_id}/tests/{test_id}")
async def delete_test(user_id: str, test_id: str):
    if not await test_repository.delete_test(test_id, user_id):
        raise HTTPException(status_code=404, detail="Test not found")
    logging.info(f"Deleted speech test {test_id} for user {user_id}")
    return {"message": "Test deleted", "id": test_id}


@app.get("/users/{user_id}/dashboard")
async def get_dashboard(user_id: str):
    stats = await dashboard_stats(test_repository, user_id)
    return stats.model_dump(mode="json")


@app.post("/practice/task")
async def practice_task(scores: SubScores):
    """Drill targeting the weakest sub-score."""
    return practice_service.select_task(scores.model_dump()).model_dump()


@app.post("/practice/complete")
async def practice_complete(scores: SubScores):
    """Simulated before/after scores for a finished drill."""
    return practice_service.simulate(scores).model_dump()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "Oratora Coach Service is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
