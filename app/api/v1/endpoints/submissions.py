import logging
from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_catalog, get_runner, get_store, get_user_context
from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.clients.store import SubmissionStore
from app.schemas.submission import SubmissionCreate, SubmissionRecord, SubmissionResult, SubmissionStats
from app.schemas.user import UserContext
from app.services import submission_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=SubmissionResult)
async def create_new_submission(
        submission_in: SubmissionCreate,
        user: UserContext = Depends(get_user_context),
        runner: RunnerClient = Depends(get_runner),
        store: SubmissionStore = Depends(get_store),
        catalog: CatalogClient = Depends(get_catalog)
):
    return await submission_service.submit_solution(
        submission_data=submission_in,
        user=user,
        runner=runner,
        store=store,
        catalog=catalog
    )


@router.get("/stats", response_model=SubmissionStats)
async def get_user_stats_api(
        user: UserContext = Depends(get_user_context),
        store: SubmissionStore = Depends(get_store)
):
    return await submission_service.get_user_stats(user=user, store=store)


@router.get("/", response_model=List[SubmissionRecord])
async def get_user_submissions_api(
        user: UserContext = Depends(get_user_context),
        store: SubmissionStore = Depends(get_store)
):
    return await submission_service.get_user_history(user=user, store=store)
