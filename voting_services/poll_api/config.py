"""Configuration management for the Poll API service."""
from voting_services.shared.config import ServiceSettings


class Settings(ServiceSettings):
    """Poll API settings loaded from environment variables."""

    SERVICE_NAME: str = "poll-api"
    PORT: int = 1081


settings = Settings()
