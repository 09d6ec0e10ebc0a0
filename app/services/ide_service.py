import logging
from typing import Optional

from fastapi import HTTPException, status

from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.core.errors import RunnerError
from app.core.logging_config import log_user_event
from app.judge.verdict import effective_output, run_preview
from app.schemas.ide import RunPreview
from app.schemas.user import UserContext

logger = logging.getLogger(__name__)


async def _resolve_input(catalog: Optional[CatalogClient], problem_id: Optional[str]) -> str:
    if not problem_id or catalog is None:
        return ""
    problem = await catalog.get_problem(problem_id)
    if not problem:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Problem not found")
    return problem.test_cases[0].input if problem.test_cases else ""


async def run_code(
        code: str,
        language: str,
        run_input: Optional[str],
        user: UserContext,
        runner: RunnerClient,
        catalog: Optional[CatalogClient] = None,
        problem_id: Optional[str] = None
) -> RunPreview:
    if run_input is None:
        run_input = await _resolve_input(catalog, problem_id)

    log_user_event(user_email=user.email, event_type="run_request",
                   details={"language": language, "problem_id": problem_id,
                            "code_length": len(code), "input_length": len(run_input)})

    try:
        result = await run_preview(code=code, language=language, run_input=run_input, runner=runner)
    except RunnerError as e:
        log_user_event(user_email=user.email, event_type="run_error",
                       details={"language": language, "error": e.detail})
        raise

    log_user_event(user_email=user.email, event_type="run_result",
                   details={
                       "language": language,
                       "has_stdout": bool(result.stdout),
                       "has_stderr": bool(result.stderr),
                       "has_compile_output": bool(result.compile_output)
                   })

    return RunPreview(**result.model_dump(), output=effective_output(result))
