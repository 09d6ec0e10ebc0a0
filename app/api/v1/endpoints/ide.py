import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_catalog, get_runner, get_user_context
from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.schemas.ide import IdeRunRequest, RunPreview
from app.schemas.user import UserContext
from app.services import ide_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/run", response_model=RunPreview)
async def run_ide_code(
        run_request: IdeRunRequest,
        user: UserContext = Depends(get_user_context),
        runner: RunnerClient = Depends(get_runner),
        catalog: CatalogClient = Depends(get_catalog)
) -> RunPreview:
    return await ide_service.run_code(
        code=run_request.code,
        language=run_request.language,
        run_input=run_request.input_str,
        user=user,
        runner=runner,
        catalog=catalog,
        problem_id=run_request.problem_id
    )
