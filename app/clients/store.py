import logging
from typing import List

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import DataFetchError, RecordError
from app.schemas.submission import SubmissionAck, SubmissionRecord

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"


class SubmissionStore:
    """Append-only submission store (``POST /submissions``)."""

    def __init__(self, http: httpx.AsyncClient, base_url: str = None):
        self.http = http
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")

    async def record(self, record: SubmissionRecord, idempotency_key: str) -> SubmissionAck:
        try:
            response = await self.http.post(
                f"{self.base_url}/submissions",
                json=record.to_wire(),
                headers={IDEMPOTENCY_HEADER: idempotency_key},
                timeout=settings.STORE_TIMEOUT_SEC,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Submission store write failed for {record.user_email}: {type(e).__name__}: {e}")
            raise RecordError() from e

        try:
            body = response.json()
        except ValueError:
            body = None

        submission_id = None
        if isinstance(body, dict):
            submission_id = body.get("insertedId") or body.get("_id") or body.get("id")
        return SubmissionAck(id=str(submission_id) if submission_id else None)

    async def list_for_user(self, email: str) -> List[SubmissionRecord]:
        try:
            response = await self.http.get(
                f"{self.base_url}/users/submissions/{email}", timeout=settings.STORE_TIMEOUT_SEC
            )
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, list):
                raise DataFetchError("Submission history has an unexpected format.")
            return [SubmissionRecord.model_validate(item) for item in body]
        except httpx.HTTPError as e:
            logger.error(f"Could not load submissions for {email}: {type(e).__name__}: {e}")
            raise DataFetchError() from e
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed submission history for {email}: {e}")
            raise DataFetchError("Submission history has an unexpected format.") from e
