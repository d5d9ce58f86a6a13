"""Aggregated search across several providers."""

from fastapi import APIRouter, Depends, Query

from models.errors import ProviderError
from orchestrator.dispatcher import RequestDispatcher
from server.dependencies import get_dispatcher
from server.errors import route_failure
from server.schemas.responses import CanonicalRecordDTO

router = APIRouter(tags=["Digest"])


def _parse_providers(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    providers = [p.strip() for p in raw.split(",") if p.strip()]
    return providers or None


@router.get("/digest", response_model=list[CanonicalRecordDTO])
async def digest(
    query: str | None = Query(None),
    providers: str | None = Query(None, description="Comma-separated providers in merge order"),
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """
    One record per source across the requested providers.

    Providers that fail or time out contribute nothing; a lone provider's
    failure is returned as an error.
    """
    try:
        records = await dispatcher.aggregate(query, _parse_providers(providers))
    except ProviderError as e:
        raise route_failure(e, "Failed to build digest") from e
    return [CanonicalRecordDTO.from_record(r) for r in records]
