import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.api import api_router as api_v1_router
from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.clients.store import SubmissionStore
from app.core.config import settings
from app.core.errors import DataFetchError, JudgeError, RunnerError
from app.core.logging_config import setup_log_queue_handler, teardown_log_queue_handler

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup sequence initiated...")

    queue_handler, listener = setup_log_queue_handler()
    listener.start()

    http = httpx.AsyncClient()
    app.state.runner = RunnerClient(http)
    app.state.store = SubmissionStore(http)
    app.state.catalog = CatalogClient(http)
    logger.info(f"Runner at {settings.RUNNER_URL}, data API at {settings.API_BASE_URL}.")

    logger.info("Application startup complete. Ready to accept requests.")
    yield

    logger.info("Application shutdown sequence initiated...")
    await http.aclose()
    teardown_log_queue_handler(queue_handler, listener)
    logger.info("Application shutdown complete.")


app = FastAPI(
    title="Code Clash Judge",
    lifespan=lifespan
)

app.include_router(api_v1_router, prefix="/api/v1", tags=["API"])


def _judge_error_response(exc: JudgeError, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "kind": exc.kind, "retryable": exc.retryable}
    )


@app.exception_handler(RunnerError)
async def runner_error_handler(request: Request, exc: RunnerError):
    logger.warning(f"Runner error for {request.url}: {exc.detail}")
    return _judge_error_response(exc, status.HTTP_502_BAD_GATEWAY)


@app.exception_handler(DataFetchError)
async def data_fetch_error_handler(request: Request, exc: DataFetchError):
    logger.warning(f"Data fetch error for {request.url}: {exc.detail}")
    return _judge_error_response(exc, status.HTTP_502_BAD_GATEWAY)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP Exception: {exc.status_code} for {request.url} - Detail: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled Internal Server Error for {request.url}:", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred. Please try again later."}
    )


@app.get("/health", name="health")
async def health():
    return {"status": "ok"}
