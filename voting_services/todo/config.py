"""Configuration for the todo CLI."""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for the todo CLI."""

    # Database file (a JSON array of items)
    TODO_DB_FILE = os.getenv('TODO_DB_FILE', './data/todo.json')

    # Logging Configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')
