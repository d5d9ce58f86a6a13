"""News search and section endpoints."""

from fastapi import APIRouter, Depends, Query

from models.errors import InvalidRequest, ProviderError
from orchestrator.dispatcher import RequestDispatcher
from server.dependencies import get_dispatcher
from server.errors import route_failure
from server.schemas.responses import CanonicalRecordDTO

router = APIRouter(prefix="/news", tags=["News"])


@router.get("/search", response_model=list[CanonicalRecordDTO])
async def search_news(
    query: str | None = Query(None),
    source: str | None = Query(None, description="Optional NewsAPI source id, e.g. bbc-news"),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    try:
        records = await dispatcher.search("news", query, source=source)
    except ProviderError as e:
        raise route_failure(e, "Failed to fetch news articles") from e
    return [CanonicalRecordDTO.from_record(r) for r in records]


@router.get("/section", response_model=list[CanonicalRecordDTO])
async def news_section(
    name: str | None = Query(None, description="Section name as shown in the site navigation"),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """Articles listed under one section of the configured news site."""
    if not name or not name.strip():
        raise InvalidRequest("Section name parameter is required")
    try:
        records = await dispatcher.search("sections", name)
    except ProviderError as e:
        raise route_failure(e, f"Failed to fetch the {name} section") from e
    return [CanonicalRecordDTO.from_record(r) for r in records]
