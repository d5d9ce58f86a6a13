"""Reddit search and thread endpoints."""

from fastapi import APIRouter, Depends, Query

from models.errors import ProviderError
from orchestrator.dispatcher import RequestDispatcher
from server.dependencies import get_dispatcher
from server.errors import route_failure
from server.schemas.responses import CanonicalRecordDTO, CanonicalThreadDTO

router = APIRouter(tags=["Reddit"])


@router.get("/search", response_model=list[CanonicalRecordDTO])
async def search_reddit(
    query: str | None = Query(None),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """Recent Reddit posts matching the query."""
    try:
        records = await dispatcher.search("reddit", query)
    except ProviderError as e:
        raise route_failure(e, "Failed to fetch search results from Reddit") from e
    return [CanonicalRecordDTO.from_record(r) for r in records]


@router.get("/thread", response_model=CanonicalThreadDTO)
async def reddit_thread(
    id: str | None = Query(None),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """A Reddit post with its recent top-level comments."""
    try:
        thread = await dispatcher.thread("reddit", id)
    except ProviderError as e:
        raise route_failure(e, "Failed to fetch thread details from Reddit") from e
    return CanonicalThreadDTO.from_thread(thread)
