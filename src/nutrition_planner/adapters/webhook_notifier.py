"""Webhook adapter for client notifications."""

from dataclasses import dataclass

import httpx

from nutrition_planner.services.notifications import ClientNotification, Notifier


@dataclass
class HttpxWebhookNotifier(Notifier):
    """Posts client notifications to a webhook with httpx."""

    webhook_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, webhook_url: str) -> "HttpxWebhookNotifier":
        """Create a notifier with a managed httpx session."""
        return cls(webhook_url=webhook_url, http_client=httpx.AsyncClient())

    async def notify(self, notification: ClientNotification) -> None:
        """POST the notification payload as JSON."""
        response = await self.http_client.post(
            self.webhook_url, json=notification.to_payload(), timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
