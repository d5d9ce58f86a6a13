"""FastAPI dependencies for dispatcher access."""

from orchestrator.dispatcher import RequestDispatcher
from utils.logger import get_logger

logger = get_logger(__name__)


def get_dispatcher() -> RequestDispatcher:
    """Dependency to get the dispatcher instance (singleton pattern)."""
    from orchestrator.factory import build_dispatcher

    if not hasattr(get_dispatcher, "_instance"):
        get_dispatcher._instance = build_dispatcher()
        logger.info("Request dispatcher created")
    return get_dispatcher._instance


async def close_dispatcher() -> None:
    """Release the singleton's HTTP clients (called on shutdown)."""
    instance = getattr(get_dispatcher, "_instance", None)
    if instance is not None:
        await instance.aclose()
        del get_dispatcher._instance
