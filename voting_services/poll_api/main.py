"""
FastAPI application for the poll service.

Polls are keyed by a caller-chosen id and own a list of options whose ids
are unique within the poll. The votes service reads GET /polls to check
that a vote names an existing poll and option.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Request

from voting_services.shared.api import configure_logging, http_error, install_common
from voting_services.shared.errors import VotingError
from voting_services.shared.models import MAX_ID, Poll, PollOption
from voting_services.shared.stats import RequestStats
from voting_services.shared.storage import create_backend

from .config import Settings, settings as default_settings
from .models import PollOptionRequest, PollRequest, PollUpdateRequest
from .store import PollStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> PollStore:
    return request.app.state.store


@router.get("/polls", response_model=List[Poll])
async def list_all_polls(store: PollStore = Depends(get_store)) -> List[Poll]:
    """Return all polls with their options."""
    try:
        return await store.get_all()
    except VotingError as e:
        logger.error(f"Error getting polls: {e}")
        raise http_error(e)


@router.delete("/polls")
async def delete_all_polls(store: PollStore = Depends(get_store)):
    """Delete every poll."""
    try:
        await store.delete_all()
    except VotingError as e:
        logger.error(f"Error deleting polls: {e}")
        raise http_error(e)
    return {"message": "All polls deleted successfully."}


@router.get("/polls/{poll_id}", response_model=Poll)
async def get_poll(
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> Poll:
    """Return a single poll."""
    try:
        return await store.get(poll_id)
    except VotingError as e:
        logger.warning(f"Error getting poll {poll_id}: {e}")
        raise http_error(e)


@router.post("/polls/{poll_id}", response_model=Poll)
async def add_poll(
    body: PollRequest,
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> Poll:
    """
    Add a poll.

    - **pollTitle**: Poll title
    - **pollQuestion**: Poll question
    - **pollOptions**: Optional initial options with unique ids
    """
    try:
        return await store.add(body.to_poll(poll_id))
    except VotingError as e:
        logger.warning(f"Error adding poll {poll_id}: {e}")
        raise http_error(e)


@router.put("/polls/{poll_id}", response_model=Poll)
async def update_poll(
    body: PollUpdateRequest,
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> Poll:
    """Change the title and question of a poll. Options are left unchanged."""
    try:
        return await store.update(body.to_poll(poll_id))
    except VotingError as e:
        logger.warning(f"Error updating poll {poll_id}: {e}")
        raise http_error(e)


@router.delete("/polls/{poll_id}")
async def delete_poll(
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
):
    """Delete a single poll."""
    try:
        await store.delete(poll_id)
    except VotingError as e:
        logger.warning(f"Error deleting poll {poll_id}: {e}")
        raise http_error(e)
    return {"message": "Poll deleted successfully."}


@router.get("/polls/{poll_id}/options", response_model=List[PollOption])
async def get_poll_options(
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> List[PollOption]:
    """Return the options of a poll."""
    try:
        return await store.get_options(poll_id)
    except VotingError as e:
        logger.warning(f"Error getting options of poll {poll_id}: {e}")
        raise http_error(e)


@router.get("/polls/{poll_id}/options/{option_id}", response_model=PollOption)
async def get_poll_option(
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    option_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> PollOption:
    """Return one option of a poll."""
    try:
        return await store.get_option(poll_id, option_id)
    except VotingError as e:
        logger.warning(f"Error getting option {option_id} of poll {poll_id}: {e}")
        raise http_error(e)


@router.post("/polls/{poll_id}/options/{option_id}", response_model=PollOption)
async def add_poll_option(
    body: PollOptionRequest,
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    option_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> PollOption:
    """
    Add an option to a poll.

    - **optionText**: Option text
    """
    try:
        return await store.add_option(poll_id, option_id, body.option_text)
    except VotingError as e:
        logger.warning(f"Error adding option {option_id} to poll {poll_id}: {e}")
        raise http_error(e)


@router.put("/polls/{poll_id}/options/{option_id}", response_model=PollOption)
async def update_poll_option(
    body: PollOptionRequest,
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    option_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
) -> PollOption:
    """Change the text of a poll option."""
    try:
        return await store.update_option(poll_id, option_id, body.option_text)
    except VotingError as e:
        logger.warning(f"Error updating option {option_id} of poll {poll_id}: {e}")
        raise http_error(e)


@router.delete("/polls/{poll_id}/options/{option_id}")
async def delete_poll_option(
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    option_id: int = Path(..., ge=0, le=MAX_ID),
    store: PollStore = Depends(get_store)
):
    """Remove an option from a poll."""
    try:
        await store.delete_option(poll_id, option_id)
    except VotingError as e:
        logger.warning(f"Error deleting option {option_id} of poll {poll_id}: {e}")
        raise http_error(e)
    return {"message": "Poll option deleted successfully."}


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PollStore] = None,
    stats: Optional[RequestStats] = None
) -> FastAPI:
    """
    Build the poll service application.

    Args:
        settings: Service settings (defaults to environment)
        store: Pre-built store; when omitted one is created at startup
        stats: Request counters (a fresh instance by default)

    Returns:
        FastAPI application
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        logger.info(f"Starting {settings.SERVICE_NAME} service...")
        owned = app.state.store is None
        if owned:
            backend = create_backend(settings.STORE_BACKEND, settings.redis_url)
            if not await backend.check_health():
                logger.error(f"Failed to start {settings.SERVICE_NAME}: storage unavailable")
                raise RuntimeError("Storage backend unavailable")
            app.state.store = PollStore(backend)
        logger.info(f"{settings.SERVICE_NAME} started successfully")

        yield

        logger.info(f"Shutting down {settings.SERVICE_NAME} service...")
        if owned:
            await app.state.store.backend.close()
            app.state.store = None

    app = FastAPI(
        title="Poll API",
        description="API for managing polls and their options",
        version=settings.API_VERSION,
        lifespan=lifespan
    )
    app.state.store = store

    install_common(app, settings, stats or RequestStats(), "polls", "Welcome to poll API.")
    app.include_router(router)
    return app


app = create_app()


def run():
    """Run the poll service with uvicorn."""
    import uvicorn

    configure_logging(default_settings)
    uvicorn.run(
        "voting_services.poll_api.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level="info"
    )


if __name__ == "__main__":
    run()
