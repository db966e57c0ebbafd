"""
FastAPI application for the votes service.

A vote is only stored after the voter service lists the voter and the poll
service lists the poll with the chosen option. Recording a vote then adds
the poll to the voter's history; deleting a vote removes it again.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Request

from voting_services.shared.api import configure_logging, http_error, install_common
from voting_services.shared.errors import VotingError
from voting_services.shared.models import MAX_ID, Vote
from voting_services.shared.stats import RequestStats
from voting_services.shared.storage import create_backend

from .clients import UpstreamClient
from .config import Settings, settings as default_settings
from .models import VoteRequest, VoteUpdateRequest
from .store import VoteStore
from .workflow import VoteRecorder

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> VoteStore:
    return request.app.state.store


def get_recorder(request: Request) -> VoteRecorder:
    return VoteRecorder(request.app.state.store, request.app.state.upstream)


@router.get("/votes", response_model=List[Vote])
async def list_all_votes(store: VoteStore = Depends(get_store)) -> List[Vote]:
    """Return all votes."""
    try:
        return await store.get_all()
    except VotingError as e:
        logger.error(f"Error getting votes: {e}")
        raise http_error(e)


@router.get("/votes/{vote_id}", response_model=Vote)
async def get_vote(
    vote_id: int = Path(..., ge=0, le=MAX_ID),
    store: VoteStore = Depends(get_store)
) -> Vote:
    """Return a single vote."""
    try:
        return await store.get(vote_id)
    except VotingError as e:
        logger.warning(f"Error getting vote {vote_id}: {e}")
        raise http_error(e)


@router.post("/votes/{vote_id}", response_model=Vote)
async def add_vote(
    body: VoteRequest,
    vote_id: int = Path(..., ge=0, le=MAX_ID),
    recorder: VoteRecorder = Depends(get_recorder)
) -> Vote:
    """
    Cast a vote.

    - **voterId**: Voter casting the vote (must exist)
    - **pollId**: Poll voted in (must exist)
    - **voteValue**: Option id within the poll (must exist)

    Fails with 404 when the voter, poll or option is unknown, 409 when the
    vote id is taken and 502 when the voter history could not be updated
    (the vote stays stored in that case).
    """
    result = await recorder.add_vote(body.to_vote(vote_id))
    if not result.ok:
        raise http_error(result.error)
    return result.vote


@router.put("/votes/{vote_id}", response_model=Vote)
async def update_vote(
    body: VoteUpdateRequest,
    vote_id: int = Path(..., ge=0, le=MAX_ID),
    recorder: VoteRecorder = Depends(get_recorder)
) -> Vote:
    """
    Change the chosen option of a vote.

    - **voteValue**: New option id within the vote's poll
    """
    result = await recorder.change_vote(vote_id, body.vote_value)
    if not result.ok:
        raise http_error(result.error)
    return result.vote


@router.delete("/votes/{vote_id}")
async def delete_vote(
    vote_id: int = Path(..., ge=0, le=MAX_ID),
    recorder: VoteRecorder = Depends(get_recorder)
):
    """
    Delete a vote and remove it from the voter's history.

    If the history cannot be updated the vote is kept and 502 is returned.
    """
    result = await recorder.delete_vote(vote_id)
    if not result.ok:
        raise http_error(result.error)
    return {"message": "Vote deleted successfully."}


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[VoteStore] = None,
    upstream: Optional[UpstreamClient] = None,
    stats: Optional[RequestStats] = None
) -> FastAPI:
    """
    Build the votes service application.

    Args:
        settings: Service settings (defaults to environment)
        store: Pre-built store; when omitted one is created at startup
        upstream: Voter/poll service client; when omitted one is built
            from VOTER_API_URL and POLL_API_URL at startup
        stats: Request counters (a fresh instance by default)

    Returns:
        FastAPI application
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        logger.info(f"Starting {settings.SERVICE_NAME} service...")
        owns_store = app.state.store is None
        owns_upstream = app.state.upstream is None
        if owns_store:
            backend = create_backend(settings.STORE_BACKEND, settings.redis_url)
            if not await backend.check_health():
                logger.error(f"Failed to start {settings.SERVICE_NAME}: storage unavailable")
                raise RuntimeError("Storage backend unavailable")
            app.state.store = VoteStore(backend)
        if owns_upstream:
            app.state.upstream = UpstreamClient.from_urls(
                settings.VOTER_API_URL,
                settings.POLL_API_URL,
                timeout=settings.UPSTREAM_TIMEOUT
            )
            logger.info(
                f"Using voter API at {settings.VOTER_API_URL}, poll API at {settings.POLL_API_URL}"
            )
        logger.info(f"{settings.SERVICE_NAME} started successfully")

        yield

        logger.info(f"Shutting down {settings.SERVICE_NAME} service...")
        if owns_upstream:
            await app.state.upstream.close()
            app.state.upstream = None
        if owns_store:
            await app.state.store.backend.close()
            app.state.store = None

    app = FastAPI(
        title="Votes API",
        description="API for casting and retracting votes",
        version=settings.API_VERSION,
        lifespan=lifespan
    )
    app.state.store = store
    app.state.upstream = upstream

    install_common(app, settings, stats or RequestStats(), "votes", "Welcome to votes API.")
    app.include_router(router)
    return app


app = create_app()


def run():
    """Run the votes service with uvicorn."""
    import uvicorn

    configure_logging(default_settings)
    uvicorn.run(
        "voting_services.votes_api.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level="info"
    )


if __name__ == "__main__":
    run()
