import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException, status

from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.clients.store import SubmissionStore
from app.core.errors import RecordError, RunnerError
from app.core.logging_config import log_user_event
from app.judge.verdict import evaluate
from app.schemas.problem import Problem
from app.schemas.submission import (
    SubmissionAck, SubmissionCreate, SubmissionRecord, SubmissionResult, SubmissionStats, Verdict
)
from app.schemas.user import UserContext

logger = logging.getLogger(__name__)


def new_idempotency_key() -> str:
    return uuid.uuid4().hex


async def record_submission(
        verdict: Optional[Verdict],
        points: int,
        problem: Problem,
        user: UserContext,
        store: SubmissionStore,
        idempotency_key: str
) -> SubmissionAck:
    """
    Sends one submission record to the store.

    Delivery is at-least-once from the caller's side; retries must reuse
    ``idempotency_key`` so the store can drop duplicates.
    """
    if not verdict:
        raise ValueError("A verdict is required to record a submission.")

    record = SubmissionRecord(
        user_email=user.email,
        user_name=user.display_name,
        status=verdict,
        problem_title=problem.title,
        problem_difficulty=problem.difficulty,
        problem_category=problem.category,
        point=points,
    )
    return await store.record(record, idempotency_key=idempotency_key)


def _reject(user: UserContext, submission_data: SubmissionCreate, status_code: int, detail: str):
    log_user_event(user_email=user.email, event_type="submission_rejected",
                   details={"problem_id": submission_data.problem_id, "language": submission_data.language,
                            "detail": detail, "status_code": status_code})
    raise HTTPException(status_code=status_code, detail=detail)


async def submit_solution(
        submission_data: SubmissionCreate,
        user: UserContext,
        runner: RunnerClient,
        store: SubmissionStore,
        catalog: CatalogClient
) -> SubmissionResult:
    problem = await catalog.get_problem(submission_data.problem_id)
    if not problem:
        _reject(user, submission_data, status.HTTP_404_NOT_FOUND, "Problem not found")

    if not problem.supports(submission_data.language):
        _reject(user, submission_data, status.HTTP_400_BAD_REQUEST,
                f"Language {submission_data.language} not allowed for this problem.")

    if not problem.test_cases:
        _reject(user, submission_data, status.HTTP_400_BAD_REQUEST,
                "Problem has no sample test case to judge against.")

    # Only the first (sample) test case is judged.
    test_case = problem.test_cases[0]

    try:
        evaluation = await evaluate(
            code=submission_data.code,
            language=submission_data.language,
            test_case=test_case,
            runner=runner
        )
    except RunnerError as e:
        log_user_event(user_email=user.email, event_type="submission_runner_error",
                       details={"problem_id": problem.id, "language": submission_data.language, "error": e.detail})
        raise

    log_user_event(user_email=user.email, event_type="submission_evaluated",
                   details={"problem_id": problem.id, "language": submission_data.language,
                            "verdict": evaluation.verdict.value, "points": evaluation.points})

    idempotency_key = submission_data.idempotency_key or new_idempotency_key()
    result = SubmissionResult(
        verdict=evaluation.verdict,
        points=evaluation.points,
        output=evaluation.raw_output,
        recorded=False,
        idempotency_key=idempotency_key,
    )

    try:
        ack = await record_submission(
            verdict=evaluation.verdict,
            points=evaluation.points,
            problem=problem,
            user=user,
            store=store,
            idempotency_key=idempotency_key
        )
    except RecordError as e:
        log_user_event(user_email=user.email, event_type="submission_record_failed",
                       details={"problem_id": problem.id, "idempotency_key": idempotency_key, "error": e.detail})
        return result.model_copy(update={"record_error": e.detail})

    log_user_event(user_email=user.email, event_type="submission_recorded",
                   details={"problem_id": problem.id, "submission_id": ack.id, "idempotency_key": idempotency_key})

    return result.model_copy(update={"recorded": True, "submission_id": ack.id})


async def get_user_history(user: UserContext, store: SubmissionStore) -> List[SubmissionRecord]:
    submissions = await store.list_for_user(user.email)
    return sorted(
        submissions,
        key=lambda s: (s.submitted_at is not None, s.submitted_at.timestamp() if s.submitted_at else 0),
        reverse=True
    )


def summarize(submissions: List[SubmissionRecord]) -> SubmissionStats:
    successful = sum(1 for s in submissions if s.status == Verdict.SUCCESS)
    return SubmissionStats(
        total_submissions=len(submissions),
        successful_submissions=successful,
        failed_submissions=len(submissions) - successful,
        total_points=sum(s.point for s in submissions),
    )


async def get_user_stats(user: UserContext, store: SubmissionStore) -> SubmissionStats:
    return summarize(await store.list_for_user(user.email))
