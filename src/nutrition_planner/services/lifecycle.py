"""Diet plan review lifecycle and published access issuance."""

import logging
import secrets
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol
from uuid import UUID, uuid4

from nutrition_planner.domain.access import ACCESS_TTL, PublishedAccess
from nutrition_planner.domain.errors import (
    InvalidTransition,
    PlanDeletionRefused,
    PlanNotFound,
    StaleStateConflict,
)
from nutrition_planner.domain.plans import DietPlan, PlanStatus

ACCESS_TOKEN_BYTES = 32

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable


class PlanEvent(StrEnum):
    """Review actions that move a plan between statuses."""

    SUBMIT_FOR_REVIEW = "submit_for_review"
    REQUEST_CHANGES = "request_changes"
    APPROVE = "approve"
    REJECT = "reject"
    PUBLISH = "publish"


_REVIEWABLE = frozenset({PlanStatus.DRAFT, PlanStatus.PENDING_REVIEW})

TRANSITIONS: dict[PlanEvent, tuple[frozenset[PlanStatus], PlanStatus]] = {
    PlanEvent.SUBMIT_FOR_REVIEW: (
        frozenset({PlanStatus.DRAFT}),
        PlanStatus.PENDING_REVIEW,
    ),
    PlanEvent.REQUEST_CHANGES: (_REVIEWABLE, PlanStatus.DRAFT),
    PlanEvent.APPROVE: (_REVIEWABLE, PlanStatus.APPROVED),
    PlanEvent.REJECT: (_REVIEWABLE, PlanStatus.REJECTED),
    PlanEvent.PUBLISH: (
        frozenset({PlanStatus.APPROVED, PlanStatus.PUBLISHED}),
        PlanStatus.PUBLISHED,
    ),
}


class DietPlanRepository(Protocol):
    """Persistence interface for diet plans."""

    def create_plan(self, plan: DietPlan) -> DietPlan:
        """Insert a plan and return the stored row."""

    def get_plan(self, plan_id: UUID) -> DietPlan | None:
        """Return a plan by id, if present."""

    def list_plans(self, status: PlanStatus | None, limit: int) -> list[DietPlan]:
        """Return recent plans, optionally filtered by status."""

    def save_transition(
        self, plan: DietPlan, expected_status: PlanStatus, expected_version: int
    ) -> bool:
        """Write a transitioned plan if the stored row still matches."""

    def delete_plan(self, plan_id: UUID) -> None:
        """Delete a plan row."""


class PublishedAccessRepository(Protocol):
    """Persistence interface for published access grants."""

    def create_access(self, access: PublishedAccess) -> PublishedAccess:
        """Insert an access grant."""

    def deactivate_for_plan(
        self, diet_plan_id: UUID, except_id: UUID | None = None
    ) -> int:
        """Deactivate the plan's active grants other than `except_id`.

        Returns how many grants changed.
        """

    def get_by_token(self, access_token: str) -> PublishedAccess | None:
        """Return the grant for a token, active or not."""

    def list_for_plan(self, diet_plan_id: UUID) -> list[PublishedAccess]:
        """Return all grants of a plan, newest first."""


@dataclass
class LifecycleService:
    """Applies review transitions to diet plans."""

    plan_repository: DietPlanRepository
    access_repository: PublishedAccessRepository

    def create_draft(self, plan: DietPlan) -> DietPlan:
        """Persist a freshly structured plan in draft status."""
        if plan.status != PlanStatus.DRAFT:
            raise InvalidTransition(f"New plans must be drafts, got {plan.status}")
        stored = self.plan_repository.create_plan(plan)
        _logger.info(
            "Diet plan drafted: plan_id=%s client_id=%s", stored.id, stored.client_id
        )
        return stored

    def get_plan(self, plan_id: UUID) -> DietPlan:
        """Return a plan or raise `PlanNotFound`."""
        plan = self.plan_repository.get_plan(plan_id)
        if plan is None:
            raise PlanNotFound(plan_id)
        return plan

    def submit_for_review(self, plan_id: UUID) -> DietPlan:
        """Move a draft into the review queue."""
        return self._apply(plan_id, PlanEvent.SUBMIT_FOR_REVIEW)

    def request_changes(self, plan_id: UUID, reviewer: str, notes: str) -> DietPlan:
        """Send a plan back to draft with a review note."""
        return self._apply(
            plan_id,
            PlanEvent.REQUEST_CHANGES,
            lambda plan: _with_note(plan, reviewer, notes),
        )

    def approve(
        self, plan_id: UUID, reviewer: str, notes: str | None = None
    ) -> DietPlan:
        """Approve a plan and stamp the reviewer."""
        return self._apply(
            plan_id,
            PlanEvent.APPROVE,
            lambda plan: {
                **_with_note(plan, reviewer, notes),
                "approved_by": reviewer,
                "approved_at": datetime.now(tz=UTC),
            },
        )

    def reject(
        self, plan_id: UUID, reviewer: str, notes: str | None = None
    ) -> DietPlan:
        """Reject a plan; the plan is retained."""
        return self._apply(
            plan_id,
            PlanEvent.REJECT,
            lambda plan: _with_note(plan, reviewer, notes),
        )

    def publish(self, plan_id: UUID) -> tuple[DietPlan, PublishedAccess]:
        """Publish an approved plan and issue a fresh access token.

        The new grant is stored before older ones are deactivated. When
        publishes overlap, the newest grant survives and is returned to every
        caller, so a plan ends with one valid token.
        """
        plan = self._apply(plan_id, PlanEvent.PUBLISH)
        issued_at = datetime.now(tz=UTC)
        access = self.access_repository.create_access(
            PublishedAccess(
                id=uuid4(),
                diet_plan_id=plan.id,
                access_token=secrets.token_urlsafe(ACCESS_TOKEN_BYTES),
                issued_at=issued_at,
                expires_at=issued_at + ACCESS_TTL,
            )
        )
        live = self._newest_active(plan.id, access)
        deactivated = self.access_repository.deactivate_for_plan(
            plan.id, except_id=live.id
        )
        _logger.info(
            "Diet plan published: plan_id=%s access_id=%s replaced=%s",
            plan.id,
            live.id,
            deactivated,
        )
        return plan, live

    def _newest_active(
        self, plan_id: UUID, issued: PublishedAccess
    ) -> PublishedAccess:
        active = [
            access
            for access in self.access_repository.list_for_plan(plan_id)
            if access.is_active
        ]
        # Empty when a revoke ran between the insert and this read.
        return max(
            active or [issued], key=lambda access: (access.issued_at, str(access.id))
        )

    def revoke_access(self, plan_id: UUID) -> int:
        """Deactivate the plan's access grant without changing its status."""
        plan = self.get_plan(plan_id)
        if plan.status != PlanStatus.PUBLISHED:
            raise InvalidTransition(f"Plan {plan_id} is {plan.status}, not published")
        revoked = self.access_repository.deactivate_for_plan(plan_id)
        _logger.info("Access revoked: plan_id=%s count=%s", plan_id, revoked)
        return revoked

    def delete_plan(self, plan_id: UUID) -> None:
        """Delete a plan that no access grant references."""
        self.get_plan(plan_id)
        if self.access_repository.list_for_plan(plan_id):
            raise PlanDeletionRefused(
                f"Plan {plan_id} has published access records and cannot be deleted"
            )
        self.plan_repository.delete_plan(plan_id)
        _logger.info("Diet plan deleted: plan_id=%s", plan_id)

    def _apply(
        self,
        plan_id: UUID,
        event: PlanEvent,
        changes: "Callable[[DietPlan], dict[str, object]] | None" = None,
    ) -> DietPlan:
        plan = self.get_plan(plan_id)
        sources, target = TRANSITIONS[event]
        if plan.status not in sources:
            raise InvalidTransition(
                f"Cannot {event} plan {plan_id} from status {plan.status}"
            )
        update = changes(plan) if changes else {}
        updated = replace(
            plan,
            status=target,
            version=plan.version + 1,
            updated_at=datetime.now(tz=UTC),
            **update,
        )
        if not self.plan_repository.save_transition(
            updated, expected_status=plan.status, expected_version=plan.version
        ):
            raise StaleStateConflict(
                f"Plan {plan_id} changed while applying {event}; reload and retry"
            )
        _logger.info(
            "Diet plan transition: plan_id=%s event=%s from=%s to=%s",
            plan_id,
            event,
            plan.status,
            target,
        )
        return updated


def _with_note(plan: DietPlan, reviewer: str, notes: str | None) -> dict[str, object]:
    """Return the review-notes update for an optional reviewer note."""
    if not notes:
        return {}
    return {"review_notes": [*plan.review_notes, f"{reviewer}: {notes}"]}
