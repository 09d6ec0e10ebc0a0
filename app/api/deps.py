from typing import Optional

from fastapi import Header, HTTPException, status
from fastapi.requests import HTTPConnection
from pydantic import ValidationError

from app.clients.catalog import CatalogClient
from app.clients.runner import RunnerClient
from app.clients.store import SubmissionStore
from app.schemas.user import UserContext


def get_runner(connection: HTTPConnection) -> RunnerClient:
    return connection.app.state.runner


def get_store(connection: HTTPConnection) -> SubmissionStore:
    return connection.app.state.store


def get_catalog(connection: HTTPConnection) -> CatalogClient:
    return connection.app.state.catalog


async def get_user_context(
        x_user_email: Optional[str] = Header(None),
        x_user_name: Optional[str] = Header(None)
) -> UserContext:
    if not x_user_email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return UserContext(email=x_user_email, display_name=x_user_name or "Guest User")
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user email")
