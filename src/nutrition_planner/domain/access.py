"""Published access domain models."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from nutrition_planner.domain.plans import DietPlan, PlanDocument

ACCESS_TTL = timedelta(days=90)


@dataclass(frozen=True)
class PublishedAccess:
    """Time-limited token granting a client read access to one plan."""

    id: UUID
    diet_plan_id: UUID
    access_token: str
    issued_at: datetime
    expires_at: datetime
    is_active: bool = True

    def is_valid_at(self, moment: datetime) -> bool:
        """Return True when the access is active and not yet expired."""
        return self.is_active and moment < self.expires_at


@dataclass(frozen=True)
class PublishedPlanView:
    """What a client sees when opening a valid access link."""

    access: PublishedAccess
    plan: DietPlan
    document: PlanDocument
