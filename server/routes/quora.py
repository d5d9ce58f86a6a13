"""Quora search and thread endpoints."""

from fastapi import APIRouter, Depends, Query

from models.errors import InvalidReference, ProviderError
from orchestrator.dispatcher import RequestDispatcher
from server.dependencies import get_dispatcher
from server.errors import route_failure
from server.schemas.responses import CanonicalRecordDTO, CanonicalThreadDTO

router = APIRouter(prefix="/quora", tags=["Quora"])


@router.get("/search", response_model=list[CanonicalRecordDTO])
async def search_quora(
    query: str | None = Query(None),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """Quora questions matching the query, via Google Custom Search."""
    try:
        records = await dispatcher.search("quora", query)
    except ProviderError as e:
        raise route_failure(e, "Failed to fetch search results from Quora via Google API") from e
    return [CanonicalRecordDTO.from_record(r) for r in records]


@router.get("/thread", response_model=CanonicalThreadDTO)
async def quora_thread(
    url: str | None = Query(None),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """A Quora question and its answers, read through a browser session."""
    if not url or not url.strip():
        raise InvalidReference("Valid URL parameter is required")
    try:
        thread = await dispatcher.thread("quora", url)
    except ProviderError as e:
        raise route_failure(e, "Failed to fetch thread details from Quora") from e
    return CanonicalThreadDTO.from_thread(thread)
