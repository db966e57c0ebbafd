"""Configuration management for the Votes API service."""
from voting_services.shared.config import ServiceSettings


class Settings(ServiceSettings):
    """Votes API settings loaded from environment variables."""

    SERVICE_NAME: str = "votes-api"
    PORT: int = 1082

    # Upstream services
    VOTER_API_URL: str = "http://localhost:1080"
    POLL_API_URL: str = "http://localhost:1081"
    UPSTREAM_TIMEOUT: float = 5.0


settings = Settings()
