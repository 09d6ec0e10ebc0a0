import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import RunnerError
from app.schemas.ide import RunResult

logger = logging.getLogger(__name__)


class RunnerClient:
    """Client for the external code runner (``POST /run-code``)."""

    def __init__(self, http: httpx.AsyncClient, base_url: str = None, timeout_sec: Optional[float] = None):
        self.http = http
        self.base_url = (base_url or settings.RUNNER_URL).rstrip("/")
        self.timeout_sec = timeout_sec if timeout_sec is not None else settings.RUNNER_TIMEOUT_SEC

    async def run(self, code: str, language: str, run_input: str = "") -> RunResult:
        payload = {"code": code, "language": language, "input": run_input or ""}
        try:
            response = await self.http.post(f"{self.base_url}/run-code", json=payload, timeout=self.timeout_sec)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            logger.warning(f"Runner timed out after {self.timeout_sec}s: {e}")
            raise RunnerError("Code runner timed out. Please try again.") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Runner returned HTTP {e.response.status_code}")
            raise RunnerError() from e
        except httpx.HTTPError as e:
            logger.warning(f"Runner unreachable: {type(e).__name__}: {e}")
            raise RunnerError() from e
        except ValueError as e:
            logger.warning(f"Runner returned a non-JSON body: {e}")
            raise RunnerError() from e

        if not isinstance(body, dict):
            logger.warning(f"Runner returned unexpected body type {type(body).__name__}")
            raise RunnerError()
        try:
            return RunResult.model_validate(body)
        except ValidationError as e:
            logger.warning(f"Runner returned a malformed result: {e}")
            raise RunnerError() from e
