"""Resolution of client access tokens."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from nutrition_planner.domain.access import PublishedPlanView
from nutrition_planner.domain.errors import TokenResolutionFailure
from nutrition_planner.services.customization import CustomizationService
from nutrition_planner.services.lifecycle import (
    DietPlanRepository,
    PublishedAccessRepository,
)

_logger = logging.getLogger(__name__)


@dataclass
class AccessService:
    """Resolves access tokens to the published plan a client may view."""

    access_repository: PublishedAccessRepository
    plan_repository: DietPlanRepository
    customization_service: CustomizationService

    def resolve(
        self, access_token: str, now: datetime | None = None
    ) -> PublishedPlanView:
        """Return the plan behind an active, unexpired token.

        Every failure raises the same `TokenResolutionFailure`; the specific
        reason is only logged.
        """
        moment = now or datetime.now(tz=UTC)
        access = self.access_repository.get_by_token(access_token)
        if access is None:
            _logger.info("Token resolution failed: reason=unknown")
            raise TokenResolutionFailure
        if not access.is_active:
            _logger.info(
                "Token resolution failed: reason=inactive access_id=%s", access.id
            )
            raise TokenResolutionFailure
        if moment >= access.expires_at:
            _logger.info(
                "Token resolution failed: reason=expired access_id=%s", access.id
            )
            raise TokenResolutionFailure
        plan = self.plan_repository.get_plan(access.diet_plan_id)
        if plan is None:
            _logger.warning(
                "Token resolution failed: reason=plan_missing access_id=%s", access.id
            )
            raise TokenResolutionFailure
        return PublishedPlanView(
            access=access,
            plan=plan,
            document=self.customization_service.effective_document(plan),
        )
