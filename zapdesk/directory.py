from typing import Optional

import httpx
from loguru import logger

from .core.base import AgentProfile
from .core.errors import DirectoryLookupError, TicketCommentFailed
from .core.settings import settings


def _positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def tip_comment(amount_sats: int, message: Optional[str] = None) -> str:
    """Text of the private ticket comment that records a tip."""
    text = f"⚡ Lightning Tip Sent: {amount_sats:,} sats"
    if message:
        text += f"\n\nMessage: {message}"
    return text + "\n\nTip sent via Zapdesk by KnowAll AI"


class ZendeskDirectory:
    """Looks up support agents and their lightning address in Zendesk.

    The address is read from the `lightning_address` user field. Tips are
    recorded as private comments on the ticket they were sent from.
    """

    def __init__(
        self,
        subdomain: Optional[str] = None,
        email: Optional[str] = None,
        api_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.subdomain = subdomain or settings.zendesk_subdomain
        self.email = email or settings.zendesk_email
        self.api_token = api_token or settings.zendesk_api_token
        self.url = f"https://{self.subdomain}/api/v2"
        self.endpoint = f"{self.url}/users/search.json"
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=settings.lnurl_timeout)

    @property
    def configured(self) -> bool:
        return bool(self.email and self.api_token)

    @property
    def auth(self):
        return (f"{self.email}/token", self.api_token)

    async def lookup(self, agent_email: str) -> Optional[AgentProfile]:
        if not self.configured:
            raise DirectoryLookupError("Zendesk credentials not configured")

        try:
            r = await self.client.get(
                self.endpoint,
                params={"query": agent_email},
                auth=self.auth,
                headers={"Content-Type": "application/json"},
            )
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Zendesk API returned {e.response.status_code}")
            raise DirectoryLookupError(
                f"Zendesk API returned {e.response.status_code}"
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching agent data: {e}")
            raise DirectoryLookupError(str(e))

        if not isinstance(data, dict):
            raise DirectoryLookupError("Zendesk API returned an unexpected response")
        users = data.get("users") or []
        if not isinstance(users, list):
            raise DirectoryLookupError("Zendesk API returned an unexpected response")
        if not users:
            logger.debug(f"No Zendesk user found for {agent_email}")
            return None

        user = users[0]
        if not isinstance(user, dict):
            raise DirectoryLookupError("Zendesk API returned an unexpected response")
        photo = user.get("photo") or {}
        return AgentProfile(
            name=user.get("name") or "",
            email=user.get("email") or agent_email,
            lightning_address=(user.get("user_fields") or {}).get("lightning_address")
            or None,
            avatar_url=photo.get("content_url"),
        )

    async def post_tip_comment(
        self, ticket_id: int, amount_sats: int, message: Optional[str] = None
    ) -> str:
        """Add a private comment about a tip to ticket `ticket_id`.

        Returns the comment text. Nothing here checks that the tip was paid.
        """
        if not self.configured:
            raise TicketCommentFailed("Zendesk credentials not configured")
        if not _positive_int(ticket_id):
            raise TicketCommentFailed(f"invalid ticket id: {ticket_id}")
        if not _positive_int(amount_sats):
            raise TicketCommentFailed(f"invalid tip amount: {amount_sats}")

        body = tip_comment(amount_sats, message)
        url = f"{self.url}/requests/{ticket_id}/comments.json"
        logger.debug(f"Adding tip comment to ticket {ticket_id}")
        try:
            r = await self.client.post(
                url,
                json={"request": {"comment": {"body": body, "public": False}}},
                auth=self.auth,
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Zendesk API returned {e.response.status_code}")
            raise TicketCommentFailed(f"Zendesk API returned {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Error adding comment to ticket {ticket_id}: {e}")
            raise TicketCommentFailed(str(e))
        return body

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
