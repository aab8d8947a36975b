"""Twilio messaging client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class SmsClient(Protocol):
    """Interface for outbound SMS delivery."""

    async def send_message(self, to: str, body: str) -> None:
        """Send a text message to a phone number."""


@dataclass
class HttpxTwilioClient:
    """Twilio Messages REST client implemented with httpx."""

    account_sid: str
    auth_token: str
    from_number: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout_seconds: float = 10.0,
    ) -> "HttpxTwilioClient":
        """Create a Twilio client with a managed httpx session."""
        return cls(
            account_sid=account_sid,
            auth_token=auth_token,
            from_number=from_number,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def send_message(self, to: str, body: str) -> None:
        """Send an SMS using Twilio's Messages API."""
        url = f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"
        payload = {"From": self.from_number, "To": to, "Body": body}
        response = await self.http_client.post(
            url,
            data=payload,
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
