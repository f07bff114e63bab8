"""Shared dependencies: the document store and the current day's session."""
from typing import Annotated

from fastapi import Depends, Request

from daycare.services.session import DailySession
from daycare.services.store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


async def get_session(request: Request) -> DailySession:
    """Current day's session, reloaded from the store before every request."""
    session = request.app.state.sessions.current()
    await session.refresh()
    return session


# Type aliases for route injection
Store = Annotated[DocumentStore, Depends(get_store)]
CurrentSession = Annotated[DailySession, Depends(get_session)]
