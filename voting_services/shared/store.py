"""Generic keyed entity store over a storage backend."""
import logging
from typing import Generic, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import AlreadyExistsError, NotFoundError, StoreError
from .models import get_redis_key, REDIS_KEYS
from .storage import StorageBackend

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class EntityStore(Generic[T]):
    """
    Create/read/update/delete over entities keyed by a caller-chosen id.

    Subclasses set the entity model, its id attribute and its key kind, and
    decide which fields an update overwrites. Every call loads the entity
    from the backend, so returned objects are detached copies.
    """

    model: Type[T]
    key_type: str
    id_field: str
    entity_name: str = "entity"

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def _key(self, entity_id: int) -> str:
        return get_redis_key(self.key_type, entity_id)

    def _id_of(self, entity: T) -> int:
        return getattr(entity, self.id_field)

    def _decode(self, key: str, raw: str) -> T:
        try:
            return self.model.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Corrupt {self.entity_name} document at {key}: {e}")
            raise StoreError(f"Corrupt {self.entity_name} document at {key}") from e

    async def _save(self, entity: T) -> None:
        await self.backend.set(
            self._key(self._id_of(entity)),
            entity.model_dump_json(by_alias=True)
        )

    async def get_all(self) -> List[T]:
        """
        Return every stored entity.

        Returns:
            List of entities, empty when none exist
        """
        entities = []
        for key in await self.backend.keys(REDIS_KEYS[self.key_type]):
            raw = await self.backend.get(key)
            # Key vanished between listing and reading
            if raw is None:
                continue
            entities.append(self._decode(key, raw))
        return entities

    async def get(self, entity_id: int) -> T:
        """
        Return a single entity.

        Raises:
            NotFoundError: If no entity has this id
        """
        key = self._key(entity_id)
        raw = await self.backend.get(key)
        if raw is None:
            raise NotFoundError(f"{self.entity_name} {entity_id} does not exist")
        return self._decode(key, raw)

    async def exists(self, entity_id: int) -> bool:
        return await self.backend.get(self._key(entity_id)) is not None

    async def add(self, entity: T) -> T:
        """
        Insert a new entity.

        Raises:
            AlreadyExistsError: If the id is already a key
        """
        entity_id = self._id_of(entity)
        if await self.exists(entity_id):
            raise AlreadyExistsError(f"{self.entity_name} {entity_id} already exists")

        await self._save(entity)
        logger.info(f"Added {self.entity_name} {entity_id}")
        return entity

    def apply_update(self, existing: T, changes: T) -> T:
        """Copy the mutable fields of changes onto existing."""
        raise NotImplementedError

    async def update(self, entity: T) -> T:
        """
        Overwrite the mutable fields of an existing entity.

        Raises:
            NotFoundError: If no entity has this id
        """
        existing = await self.get(self._id_of(entity))
        updated = self.apply_update(existing, entity)
        await self._save(updated)
        logger.info(f"Updated {self.entity_name} {self._id_of(entity)}")
        return updated

    async def delete_all(self) -> None:
        """Remove every entity. Succeeds on an empty store."""
        keys = await self.backend.keys(REDIS_KEYS[self.key_type])
        for key in keys:
            await self.backend.delete(key)
        logger.info(f"Deleted all {self.entity_name} records ({len(keys)})")

    async def delete(self, entity_id: int) -> None:
        """
        Remove a single entity.

        Raises:
            NotFoundError: If no entity has this id
        """
        if not await self.backend.delete(self._key(entity_id)):
            raise NotFoundError(f"{self.entity_name} {entity_id} does not exist")
        logger.info(f"Deleted {self.entity_name} {entity_id}")
