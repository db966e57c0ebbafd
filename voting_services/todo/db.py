"""
JSON file database for todo items.

The database file holds a single JSON array of items. Every operation reads
the whole file into a dict keyed by item id; mutating operations write the
whole array back. There is no file locking, so concurrent invocations race
and the last writer wins.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Union

from pydantic import BaseModel, Field, ValidationError

from voting_services.shared.errors import AlreadyExistsError, NotFoundError, StoreError, ValidationFailure

logger = logging.getLogger(__name__)


class ToDoItem(BaseModel):
    """A single todo item."""

    id: int = Field(..., description="Item identifier")
    title: str = Field(default="", description="Item title")
    is_done: bool = Field(default=False, alias="done", description="Completion status")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": 99,
                "title": "sample item",
                "done": True
            }
        }


class ToDoStore:
    """Todo items persisted in a JSON array file."""

    def __init__(self, db_file: Union[str, Path]):
        """
        Open the database, creating it as an empty array if missing.

        Args:
            db_file: Path of the JSON database file
        """
        self.db_file = Path(db_file)
        if not self.db_file.exists():
            self._init_db()

    def _init_db(self) -> None:
        self.db_file.parent.mkdir(parents=True, exist_ok=True)
        self.db_file.write_text("[]", encoding="utf-8")
        logger.info(f"Created empty todo database at {self.db_file}")

    def _load(self) -> Dict[int, ToDoItem]:
        try:
            data = json.loads(self.db_file.read_text(encoding="utf-8"))
            items = [ToDoItem.model_validate(entry) for entry in data or []]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.error(f"Failed to load {self.db_file}: {e}")
            raise StoreError(f"Failed to load {self.db_file}: {e}") from e
        return {item.id: item for item in items}

    def _save(self, items: Dict[int, ToDoItem]) -> None:
        data = [item.model_dump(by_alias=True) for item in items.values()]
        try:
            self.db_file.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save {self.db_file}: {e}")
            raise StoreError(f"Failed to save {self.db_file}: {e}") from e

    def add_item(self, item: ToDoItem) -> None:
        """
        Add a new item.

        Raises:
            AlreadyExistsError: If an item with the same id exists
        """
        items = self._load()
        if item.id in items:
            raise AlreadyExistsError(f"item {item.id} already exists in the database")
        items[item.id] = item
        self._save(items)

    def delete_item(self, item_id: int) -> None:
        """
        Delete an item.

        Raises:
            NotFoundError: If the item does not exist
        """
        items = self._load()
        if item_id not in items:
            raise NotFoundError(f"item {item_id} does not exist in the database")
        del items[item_id]
        self._save(items)

    def update_item(self, item: ToDoItem) -> None:
        """
        Replace an existing item.

        Raises:
            NotFoundError: If the item does not exist
        """
        items = self._load()
        if item.id not in items:
            raise NotFoundError(f"item {item.id} does not exist in the database")
        items[item.id] = item
        self._save(items)

    def get_item(self, item_id: int) -> ToDoItem:
        """
        Return a single item.

        Raises:
            NotFoundError: If the item does not exist
        """
        items = self._load()
        if item_id not in items:
            raise NotFoundError(f"item {item_id} does not exist in the database")
        return items[item_id]

    def get_all_items(self) -> List[ToDoItem]:
        return list(self._load().values())

    def change_item_done_status(self, item_id: int, value: bool) -> None:
        """
        Set the done flag of an item.

        Implemented as get_item followed by update_item, so the file is read
        twice and written once.

        Raises:
            NotFoundError: If the item does not exist
        """
        item = self.get_item(item_id)
        self.update_item(item.model_copy(update={"is_done": value}))

    @staticmethod
    def json_to_item(json_string: str) -> ToDoItem:
        """
        Parse an item from its JSON form.

        Raises:
            ValidationFailure: If the JSON is malformed or not an item
        """
        try:
            return ToDoItem.model_validate_json(json_string)
        except ValidationError as e:
            raise ValidationFailure(f"invalid item JSON: {e}") from e

    @staticmethod
    def print_item(item: ToDoItem) -> None:
        print(item.model_dump_json(by_alias=True, indent=2))

    def print_all_items(self, items: List[ToDoItem]) -> None:
        for item in items:
            self.print_item(item)
