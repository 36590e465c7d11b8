"""Async client for the Resend transactional email API."""

import logging
from dataclasses import dataclass

import httpx

from cottagebook.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: list[str]
    subject: str
    html: str


class EmailClient:
    """Send HTML email through Resend's ``POST /emails`` endpoint.

    With no API key configured the client only logs what it would have sent,
    which keeps local development and CI free of outbound calls.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = settings.resend_api_key if api_key is None else api_key
        self._api_url = api_url or settings.resend_api_url
        self._sender = sender or settings.email_from
        self._timeout = timeout or settings.email_timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def send(self, message: EmailMessage) -> str | None:
        """Deliver ``message`` and return the provider's message id.

        Raises:
            httpx.HTTPError: If the API is unreachable or rejects the request.
        """
        if not message.to:
            logger.info("No recipients for %r, skipping", message.subject)
            return None

        if not self.enabled:
            logger.info("Email delivery disabled; would send %r to %s", message.subject, message.to)
            return None

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                self._api_url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={
                    "from": self._sender,
                    "to": message.to,
                    "subject": message.subject,
                    "html": message.html,
                },
            )
            response.raise_for_status()

        message_id = response.json().get("id")
        logger.info("Sent %r to %d recipient(s) (id=%s)", message.subject, len(message.to), message_id)
        return message_id
