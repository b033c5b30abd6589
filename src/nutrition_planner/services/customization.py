"""Admin customization overlays on top of generated plans."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from nutrition_planner.domain.errors import InvalidTransition
from nutrition_planner.domain.plans import (
    DietPlan,
    PlanCustomization,
    PlanDocument,
    PlanStatus,
    recompute_day_totals,
)
from nutrition_planner.services.lifecycle import LifecycleService

EDITABLE_STATUSES = frozenset(
    {PlanStatus.DRAFT, PlanStatus.PENDING_REVIEW, PlanStatus.APPROVED}
)

_logger = logging.getLogger(__name__)


class CustomizationRepository(Protocol):
    """Persistence interface for plan customizations."""

    def create_customization(
        self, customization: PlanCustomization
    ) -> PlanCustomization:
        """Insert a customization row."""

    def get_latest(self, diet_plan_id: UUID) -> PlanCustomization | None:
        """Return the newest customization of a plan, if any."""


@dataclass
class CustomizationService:
    """Stores edited plan documents without touching the generated one."""

    lifecycle_service: LifecycleService
    repository: CustomizationRepository

    def save_customization(
        self, plan_id: UUID, payload: Mapping[str, object], edited_by: str
    ) -> PlanCustomization:
        """Validate an edited document and store it as the newest overlay.

        Raises `pydantic.ValidationError` for a malformed document.
        """
        plan = self.lifecycle_service.get_plan(plan_id)
        if plan.status not in EDITABLE_STATUSES:
            raise InvalidTransition(
                f"Plan {plan_id} is {plan.status}; edits are closed"
            )
        document = recompute_day_totals(PlanDocument.model_validate(payload))
        customization = self.repository.create_customization(
            PlanCustomization(
                id=uuid4(),
                diet_plan_id=plan.id,
                document=document,
                edited_by=edited_by,
                created_at=datetime.now(tz=UTC),
            )
        )
        _logger.info(
            "Plan customized: plan_id=%s customization_id=%s editor=%s",
            plan.id,
            customization.id,
            edited_by,
        )
        return customization

    def get_latest(self, plan_id: UUID) -> PlanCustomization | None:
        """Return the newest overlay of a plan."""
        return self.repository.get_latest(plan_id)

    def effective_document(self, plan: DietPlan) -> PlanDocument:
        """Return the overlay document if one exists, else the generated one."""
        latest = self.repository.get_latest(plan.id)
        return latest.document if latest else plan.document
