"""HTTP clients for the voter and poll services."""
import logging
from datetime import datetime
from typing import List, Optional

import httpx
from pydantic import ValidationError

from voting_services.shared.errors import UpstreamServiceError
from voting_services.shared.models import Poll, Voter

logger = logging.getLogger(__name__)


class UpstreamClient:
    """
    Calls the voter and poll services' REST surfaces.

    Any transport error, non-2xx status or unreadable body is raised as
    UpstreamServiceError, which keeps the upstream status when there was a
    response. There are no retries.
    """

    def __init__(self, voter_client: httpx.AsyncClient, poll_client: httpx.AsyncClient):
        self.voter_client = voter_client
        self.poll_client = poll_client

    @classmethod
    def from_urls(cls, voter_api_url: str, poll_api_url: str, timeout: float = 5.0) -> "UpstreamClient":
        """
        Build a client pair from base URLs.

        Args:
            voter_api_url: Base URL of the voter service
            poll_api_url: Base URL of the poll service
            timeout: Per-request timeout in seconds

        Returns:
            UpstreamClient owning two httpx.AsyncClient instances
        """
        return cls(
            httpx.AsyncClient(base_url=voter_api_url, timeout=timeout),
            httpx.AsyncClient(base_url=poll_api_url, timeout=timeout)
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        json: Optional[dict] = None
    ) -> httpx.Response:
        try:
            response = await client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise UpstreamServiceError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"{method} {path} returned {response.status_code}")
            raise UpstreamServiceError(
                f"{method} {path} returned {response.status_code}",
                upstream_status=response.status_code
            )
        return response

    async def list_voters(self) -> List[Voter]:
        """GET /voters"""
        response = await self._request(self.voter_client, "GET", "/voters")
        try:
            return [Voter.model_validate(item) for item in response.json()]
        except (ValueError, TypeError, ValidationError) as e:
            raise UpstreamServiceError(f"Unreadable voter list: {e}") from e

    async def list_polls(self) -> List[Poll]:
        """GET /polls"""
        response = await self._request(self.poll_client, "GET", "/polls")
        try:
            return [Poll.model_validate(item) for item in response.json()]
        except (ValueError, TypeError, ValidationError) as e:
            raise UpstreamServiceError(f"Unreadable poll list: {e}") from e

    async def add_voter_poll(self, voter_id: int, poll_id: int, vote_date: datetime) -> None:
        """POST /voters/{voter_id}/polls/{poll_id}"""
        await self._request(
            self.voter_client,
            "POST",
            f"/voters/{voter_id}/polls/{poll_id}",
            json={"voteDate": vote_date.isoformat()}
        )

    async def delete_voter_poll(self, voter_id: int, poll_id: int) -> bool:
        """
        DELETE /voters/{voter_id}/polls/{poll_id}

        Returns:
            False when the voter or the history entry was already gone (404)
        """
        try:
            await self._request(self.voter_client, "DELETE", f"/voters/{voter_id}/polls/{poll_id}")
        except UpstreamServiceError as e:
            if e.upstream_status == 404:
                logger.warning(f"Voter {voter_id} has no history entry for poll {poll_id}")
                return False
            raise
        return True

    async def close(self) -> None:
        await self.voter_client.aclose()
        await self.poll_client.aclose()
