"""Client notification when a plan is published."""

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

from nutrition_planner.domain.access import PublishedAccess
from nutrition_planner.domain.plans import DietPlan
from nutrition_planner.domain.profiles import Locale
from nutrition_planner.services.profiles import ClientProfileRepository

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientNotification:
    """Payload handed to the notification collaborator."""

    client_name: str
    client_email: str
    access_token: str
    locale: Locale
    access_url: str

    def to_payload(self) -> dict[str, str]:
        """Return the JSON body sent to the collaborator."""
        return {
            "client_name": self.client_name,
            "client_email": self.client_email,
            "access_token": self.access_token,
            "locale": self.locale.value,
            "access_url": self.access_url,
        }


class Notifier(Protocol):
    """Interface for delivering client notifications."""

    async def notify(self, notification: ClientNotification) -> None:
        """Deliver a notification."""


@dataclass
class NotificationService:
    """Tells a client that their plan is available."""

    notifier: Notifier | None
    profile_repository: ClientProfileRepository
    app_url: str

    def build_access_url(self, access_token: str) -> str:
        """Return the client view link for an access token."""
        query = urlencode({"token": access_token})
        return f"{self.app_url.rstrip('/')}/diet-view?{query}"

    async def notify_published(
        self, plan: DietPlan, access: PublishedAccess
    ) -> ClientNotification | None:
        """Send the access link for a freshly published plan.

        Returns the delivered notification, or None when nothing was sent.
        Delivery errors are logged and swallowed; the plan stays published.
        """
        if self.notifier is None:
            _logger.info("Notification skipped: plan_id=%s reason=no_notifier", plan.id)
            return None
        profile = self.profile_repository.get_profile(plan.client_id)
        if profile is None:
            _logger.warning(
                "Notification skipped: plan_id=%s reason=profile_missing", plan.id
            )
            return None
        if not profile.email:
            _logger.warning(
                "Notification skipped: plan_id=%s reason=no_email", plan.id
            )
            return None
        notification = ClientNotification(
            client_name=profile.name,
            client_email=profile.email,
            access_token=access.access_token,
            locale=profile.locale,
            access_url=self.build_access_url(access.access_token),
        )
        try:
            await self.notifier.notify(notification)
        except Exception:
            _logger.exception("Notification failed: plan_id=%s", plan.id)
            return None
        _logger.info(
            "Notification sent: plan_id=%s access_id=%s", plan.id, access.id
        )
        return notification
