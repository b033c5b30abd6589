"""Supabase repository for published access grants."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_planner.adapters.supabase_rows import parse_timestamp
from nutrition_planner.domain.access import PublishedAccess
from nutrition_planner.services.lifecycle import PublishedAccessRepository

_COLUMNS = "id, diet_plan_id, access_token, issued_at, expires_at, is_active"


@dataclass
class SupabasePublishedAccessRepository(PublishedAccessRepository):
    """Supabase-backed published access repository."""

    client: Client

    def create_access(self, access: PublishedAccess) -> PublishedAccess:
        """Insert an access grant row."""
        response = (
            self.client.table("published_access")
            .insert(
                {
                    "id": str(access.id),
                    "diet_plan_id": str(access.diet_plan_id),
                    "access_token": access.access_token,
                    "issued_at": access.issued_at.isoformat(),
                    "expires_at": access.expires_at.isoformat(),
                    "is_active": access.is_active,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create published access")
        return _access_from_row(response.data[0])

    def deactivate_for_plan(
        self, diet_plan_id: UUID, except_id: UUID | None = None
    ) -> int:
        """Deactivate the plan's active grants and return how many changed."""
        query = (
            self.client.table("published_access")
            .update({"is_active": False})
            .eq("diet_plan_id", str(diet_plan_id))
            .eq("is_active", True)
        )
        if except_id is not None:
            query = query.neq("id", str(except_id))
        response = query.execute()
        return len(response.data or [])

    def get_by_token(self, access_token: str) -> PublishedAccess | None:
        """Return the grant for a token, if present."""
        response = (
            self.client.table("published_access")
            .select(_COLUMNS)
            .eq("access_token", access_token)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _access_from_row(response.data[0])

    def list_for_plan(self, diet_plan_id: UUID) -> list[PublishedAccess]:
        """Return all grants of a plan, newest first."""
        response = (
            self.client.table("published_access")
            .select(_COLUMNS)
            .eq("diet_plan_id", str(diet_plan_id))
            .order("issued_at", desc=True)
            .execute()
        )
        return [_access_from_row(row) for row in response.data or []]


def _access_from_row(row: dict[str, object]) -> PublishedAccess:
    return PublishedAccess(
        id=UUID(str(row["id"])),
        diet_plan_id=UUID(str(row["diet_plan_id"])),
        access_token=str(row["access_token"]),
        issued_at=parse_timestamp(row["issued_at"]),
        expires_at=parse_timestamp(row["expires_at"]),
        is_active=bool(row["is_active"]),
    )
