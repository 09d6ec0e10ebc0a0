import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from app.api.deps import get_catalog
from app.clients.catalog import CatalogClient
from app.core.errors import DataFetchError
from app.schemas.contest import ALL, ContestFilters, ContestListing, ContestSearchQuery, SortKey
from app.services import contest_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=ContestListing)
async def read_contests(
        q: str = "",
        type: str = ALL,
        status_filter: str = Query(ALL, alias="status"),
        sort: SortKey = SortKey.NEWEST,
        catalog: CatalogClient = Depends(get_catalog)
):
    try:
        filters = ContestFilters(q=q, type=type, status=status_filter)
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid contest filter.")
    return await contest_service.list_contests(catalog, filters, sort)


@router.get("/latest", response_model=ContestListing)
async def read_latest_contests(
        limit: Optional[int] = Query(None, ge=1, le=50),
        catalog: CatalogClient = Depends(get_catalog)
):
    return await contest_service.latest_contests(catalog, limit)


@router.websocket("/search")
async def search_contests(websocket: WebSocket, catalog: CatalogClient = Depends(get_catalog)):
    await websocket.accept()

    try:
        contests, counts = await contest_service.load_contests(catalog)
    except DataFetchError as e:
        await websocket.send_json(ContestListing(error=e.detail).model_dump(mode="json"))
        await websocket.close()
        return

    async def emit(listing: ContestListing):
        await websocket.send_json(listing.model_dump(mode="json"))

    session = contest_service.ContestSearchSession(contests, counts, emit)
    try:
        while True:
            try:
                message = await websocket.receive_json()
                query = ContestSearchQuery.model_validate(message)
            except ValueError:
                await websocket.send_json({"error": "Invalid search query."})
                continue
            session.submit(query)
    except WebSocketDisconnect:
        logger.info("Contest search client disconnected.")
    finally:
        session.close()
