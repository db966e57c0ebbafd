"""Configuration management for the Voter API service."""
from voting_services.shared.config import ServiceSettings


class Settings(ServiceSettings):
    """Voter API settings loaded from environment variables."""

    SERVICE_NAME: str = "voter-api"
    PORT: int = 1080


settings = Settings()
