"""
Shared utilities and models for the voting services.

This package contains common code used across all services:
- Data models (Voter, Poll, Vote and their sub-entities)
- Error types and their HTTP status codes
- Storage backends and the generic entity store
- Request counters and FastAPI scaffolding
"""

from .errors import (
    VotingError,
    NotFoundError,
    AlreadyExistsError,
    ValidationFailure,
    StoreError,
    UpstreamServiceError,
)
from .models import (
    Voter,
    VoterPoll,
    Poll,
    PollOption,
    Vote,
    MAX_ID,
    REDIS_KEYS,
    get_redis_key,
    utc_now,
)
from .stats import RequestStats
from .storage import StorageBackend, MemoryBackend, RedisBackend, create_backend
from .store import EntityStore

__all__ = [
    'VotingError',
    'NotFoundError',
    'AlreadyExistsError',
    'ValidationFailure',
    'StoreError',
    'UpstreamServiceError',
    'Voter',
    'VoterPoll',
    'Poll',
    'PollOption',
    'Vote',
    'MAX_ID',
    'REDIS_KEYS',
    'get_redis_key',
    'utc_now',
    'RequestStats',
    'StorageBackend',
    'MemoryBackend',
    'RedisBackend',
    'create_backend',
    'EntityStore',
]
