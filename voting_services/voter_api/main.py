"""
FastAPI application for the voter service.

Voters are keyed by a caller-chosen id and own a vote history with at most
one entry per poll. The votes service appends and removes history entries
through /voters/{id}/polls/{pollId}.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Path, Request

from voting_services.shared.api import configure_logging, http_error, install_common
from voting_services.shared.errors import VotingError
from voting_services.shared.models import MAX_ID, Voter, VoterPoll, utc_now
from voting_services.shared.stats import RequestStats
from voting_services.shared.storage import create_backend

from .config import Settings, settings as default_settings
from .models import VoterPollRequest, VoterRequest
from .store import VoterStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> VoterStore:
    return request.app.state.store


@router.get("/voters", response_model=List[Voter])
async def list_all_voters(store: VoterStore = Depends(get_store)) -> List[Voter]:
    """Return all voters with their vote history."""
    try:
        return await store.get_all()
    except VotingError as e:
        logger.error(f"Error getting voters: {e}")
        raise http_error(e)


@router.delete("/voters")
async def delete_all_voters(store: VoterStore = Depends(get_store)):
    """Delete every voter."""
    try:
        await store.delete_all()
    except VotingError as e:
        logger.error(f"Error deleting voters: {e}")
        raise http_error(e)
    return {"message": "All voters deleted successfully."}


@router.get("/voters/{voter_id}", response_model=Voter)
async def get_voter(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
) -> Voter:
    """Return a single voter."""
    try:
        return await store.get(voter_id)
    except VotingError as e:
        logger.warning(f"Error getting voter {voter_id}: {e}")
        raise http_error(e)


@router.post("/voters/{voter_id}", response_model=Voter)
async def add_voter(
    body: VoterRequest,
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
) -> Voter:
    """
    Add a voter with an empty vote history.

    - **firstName**: First name
    - **lastName**: Last name
    """
    voter = Voter(voter_id=voter_id, first_name=body.first_name, last_name=body.last_name)
    try:
        return await store.add(voter)
    except VotingError as e:
        logger.warning(f"Error adding voter {voter_id}: {e}")
        raise http_error(e)


@router.put("/voters/{voter_id}", response_model=Voter)
async def update_voter(
    body: VoterRequest,
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
) -> Voter:
    """Rename a voter. The vote history is left unchanged."""
    changes = Voter(voter_id=voter_id, first_name=body.first_name, last_name=body.last_name)
    try:
        return await store.update(changes)
    except VotingError as e:
        logger.warning(f"Error updating voter {voter_id}: {e}")
        raise http_error(e)


@router.delete("/voters/{voter_id}")
async def delete_voter(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
):
    """Delete a single voter."""
    try:
        await store.delete(voter_id)
    except VotingError as e:
        logger.warning(f"Error deleting voter {voter_id}: {e}")
        raise http_error(e)
    return {"message": "Voter deleted successfully."}


@router.get("/voters/{voter_id}/polls", response_model=List[VoterPoll])
async def get_voter_history(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
) -> List[VoterPoll]:
    """Return the vote history of a voter."""
    try:
        return await store.get_history(voter_id)
    except VotingError as e:
        logger.warning(f"Error getting history of voter {voter_id}: {e}")
        raise http_error(e)


@router.get("/voters/{voter_id}/polls/{poll_id}", response_model=VoterPoll)
async def get_voter_poll(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
) -> VoterPoll:
    """Return one entry of a voter's vote history."""
    try:
        return await store.get_voter_poll(voter_id, poll_id)
    except VotingError as e:
        logger.warning(f"Error getting poll {poll_id} of voter {voter_id}: {e}")
        raise http_error(e)


@router.post("/voters/{voter_id}/polls/{poll_id}", response_model=VoterPoll)
async def add_voter_poll(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    body: Optional[VoterPollRequest] = Body(default=None),
    store: VoterStore = Depends(get_store)
) -> VoterPoll:
    """
    Record that a voter voted in a poll.

    - **voteDate**: Optional timestamp, defaults to now
    """
    vote_date = body.vote_date if body and body.vote_date else utc_now()
    try:
        return await store.add_voter_poll(voter_id, poll_id, vote_date)
    except VotingError as e:
        logger.warning(f"Error adding poll {poll_id} to voter {voter_id}: {e}")
        raise http_error(e)


@router.put("/voters/{voter_id}/polls/{poll_id}", response_model=VoterPoll)
async def update_voter_poll(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    body: Optional[VoterPollRequest] = Body(default=None),
    store: VoterStore = Depends(get_store)
) -> VoterPoll:
    """Change the vote date of a history entry (defaults to now)."""
    vote_date = body.vote_date if body and body.vote_date else utc_now()
    try:
        return await store.update_voter_poll(voter_id, poll_id, vote_date)
    except VotingError as e:
        logger.warning(f"Error updating poll {poll_id} of voter {voter_id}: {e}")
        raise http_error(e)


@router.delete("/voters/{voter_id}/polls/{poll_id}")
async def delete_voter_poll(
    voter_id: int = Path(..., ge=0, le=MAX_ID),
    poll_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoterStore = Depends(get_store)
):
    """Remove a poll from a voter's vote history."""
    try:
        await store.delete_voter_poll(voter_id, poll_id)
    except VotingError as e:
        logger.warning(f"Error deleting poll {poll_id} of voter {voter_id}: {e}")
        raise http_error(e)
    return {"message": "Voter poll deleted successfully."}


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[VoterStore] = None,
    stats: Optional[RequestStats] = None
) -> FastAPI:
    """
    Build the voter service application.

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
            app.state.store = VoterStore(backend)
        logger.info(f"{settings.SERVICE_NAME} started successfully")

        yield

        logger.info(f"Shutting down {settings.SERVICE_NAME} service...")
        if owned:
            await app.state.store.backend.close()
            app.state.store = None

    app = FastAPI(
        title="Voter API",
        description="API for managing voters and their vote history",
        version=settings.API_VERSION,
        lifespan=lifespan
    )
    app.state.store = store

    install_common(app, settings, stats or RequestStats(), "voters", "Welcome to voter API.")
    app.include_router(router)
    return app


app = create_app()


def run():
    """Run the voter service with uvicorn."""
    import uvicorn

    configure_logging(default_settings)
    uvicorn.run(
        "voting_services.voter_api.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level="info"
    )


if __name__ == "__main__":
    run()
