import logging
from typing import Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import DataFetchError
from app.schemas.contest import Contest
from app.schemas.problem import Problem

logger = logging.getLogger(__name__)


class CatalogClient:
    """Read-only source of problems, contests and participant counts."""

    def __init__(self, http: httpx.AsyncClient, base_url: str = None):
        self.http = http
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")

    async def _get_json(self, path: str, **params):
        try:
            response = await self.http.get(
                f"{self.base_url}{path}", params=params or None, timeout=settings.STORE_TIMEOUT_SEC
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"GET {path} failed: {type(e).__name__}: {e}")
            raise DataFetchError() from e
        except ValueError as e:
            logger.error(f"GET {path} returned a non-JSON body: {e}")
            raise DataFetchError() from e

    async def get_problem(self, problem_id: str) -> Optional[Problem]:
        try:
            body = await self._get_json(f"/problems/{problem_id}")
        except DataFetchError as e:
            cause = e.__cause__
            if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code == 404:
                return None
            raise
        try:
            return Problem.model_validate(body)
        except ValidationError as e:
            logger.error(f"Problem {problem_id} has an unexpected shape: {e}")
            raise DataFetchError("Problem data has an unexpected format.") from e

    async def get_contests(self) -> List[Contest]:
        body = await self._get_json("/contests")
        if not isinstance(body, list):
            raise DataFetchError("Contest data has an unexpected format.")
        contests = []
        for item in body:
            try:
                contests.append(Contest.model_validate(item))
            except ValidationError as e:
                contest_id = item.get("_id") if isinstance(item, dict) else None
                logger.warning(f"Skipping contest {contest_id} with an unexpected shape: {e}")
        return contests

    async def get_participant_counts(self, contest_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(contest_ids)
        if not ids:
            return {}
        body = await self._get_json("/contestParticipants/counts", contestIds=",".join(ids))
        if not isinstance(body, dict) or not body.get("success") or not isinstance(body.get("data"), dict):
            raise DataFetchError("Participant counts are unavailable.")
        try:
            return {str(contest_id): int(count) for contest_id, count in body["data"].items()}
        except (TypeError, ValueError) as e:
            raise DataFetchError("Participant counts are unavailable.") from e
