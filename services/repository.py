import logging
from typing import Any, Dict, List, Optional

import httpx

from config import Config
from models import DashboardStats, SpeechTest, SpeechTestSummary
from services.scoring import METRICS, find_strongest_metric, rounded_mean, score_field


class RepositoryError(Exception):
    """Raised when the persistence backend rejects a request"""
    pass


class InMemoryTestRepository:
    """Process-local store for development and tests."""

    def __init__(self):
        self._tests: Dict[str, SpeechTest] = {}

    async def create_test(self, record: SpeechTest) -> SpeechTest:
        self._tests[record.id] = record
        return record

    async def list_tests(self, user_id: str, limit: Optional[int] = None) -> List[SpeechTest]:
        tests = [t for t in self._tests.values() if t.user_id == user_id]
        tests.sort(key=lambda t: t.created_at, reverse=True)
        return tests[:limit] if limit is not None else tests

    async def get_test(self, test_id: str, user_id: str) -> Optional[SpeechTest]:
        test = self._tests.get(test_id)
        if test is None or test.user_id != user_id:
            return None
        return test

    async def delete_test(self, test_id: str, user_id: str) -> bool:
        if await self.get_test(test_id, user_id) is None:
            return False
        del self._tests[test_id]
        return True


class SupabaseTestRepository:
    """Speech tests stored in the managed Postgres behind Supabase's REST API."""

    def __init__(self,
                 url: str,
                 service_key: str,
                 table: str = Config.SPEECH_TESTS_TABLE,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = f"{url.rstrip('/')}/rest/v1/{table}"
        self.service_key = service_key
        self.transport = transport

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    async def _request(self, method: str, params: Optional[Dict[str, Any]] = None,
                       json: Any = None, **headers: str) -> List[Dict[str, Any]]:
        async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
            response = await client.request(
                method,
                self.base_url,
                params=params,
                json=json,
                headers=self._headers(**headers),
            )

        if not response.is_success:
            error_text = response.text if response.content else "Unknown error"
            logging.error(f"Supabase {method} failed: {response.status_code} - {error_text}")
            raise RepositoryError(f"Database request failed: {response.status_code}")
        return response.json() if response.content else []

    async def create_test(self, record: SpeechTest) -> SpeechTest:
        rows = await self._request(
            "POST",
            json=record.model_dump(mode="json"),
            Prefer="return=representation",
        )
        return SpeechTest.model_validate(rows[0]) if rows else record

    async def list_tests(self, user_id: str, limit: Optional[int] = None) -> List[SpeechTest]:
        params = {"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc"}
        if limit is not None:
            params["limit"] = str(limit)
        rows = await self._request("GET", params=params)
        return [SpeechTest.model_validate(row) for row in rows]

    async def get_test(self, test_id: str, user_id: str) -> Optional[SpeechTest]:
        params = {"select": "*", "id": f"eq.{test_id}", "user_id": f"eq.{user_id}"}
        rows = await self._request("GET", params=params)
        return SpeechTest.model_validate(rows[0]) if rows else None

    async def delete_test(self, test_id: str, user_id: str) -> bool:
        params = {"id": f"eq.{test_id}", "user_id": f"eq.{user_id}"}
        rows = await self._request("DELETE", params=params, Prefer="return=representation")
        return len(rows) > 0


def create_repository():
    if Config.SUPABASE_URL and Config.SUPABASE_SERVICE_KEY:
        return SupabaseTestRepository(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_KEY)
    logging.warning("SUPABASE_URL/SUPABASE_SERVICE_KEY not set, using in-memory speech test storage")
    return InMemoryTestRepository()


async def dashboard_stats(repository, user_id: str, limit: int = Config.DASHBOARD_RECENT_LIMIT) -> DashboardStats:
    """Summarise a user's most recent tests."""
    tests = await repository.list_tests(user_id, limit=limit)

    averages = {}
    if tests:
        for key, _ in METRICS:
            field = score_field(key)
            averages[key] = sum(getattr(t, field) for t in tests) / len(tests)

    return DashboardStats(
        average_score=rounded_mean([t.overall_score for t in tests]),
        total_tests=len(tests),
        best_area=find_strongest_metric(averages),
        recent_tests=[SpeechTestSummary(**t.model_dump()) for t in tests],
    )
