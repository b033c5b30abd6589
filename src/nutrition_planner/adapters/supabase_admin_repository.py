"""Supabase admin data access."""

from dataclasses import dataclass

from supabase import Client

from nutrition_planner.domain.plans import PlanStatus
from nutrition_planner.services.admin import AdminRepository


@dataclass
class SupabaseAdminRepository(AdminRepository):
    """Supabase implementation for admin aggregate queries."""

    client: Client

    def list_plan_statuses(self) -> list[PlanStatus]:
        """Return the status of every plan."""
        response = self.client.table("diet_plans").select("status").execute()
        return [PlanStatus(row["status"]) for row in response.data or []]

    def list_generation_outcomes(self) -> list[tuple[bool, float]]:
        """Return success flag and cost of every generation attempt."""
        response = (
            self.client.table("generation_logs").select("success, cost").execute()
        )
        return [
            (bool(row["success"]), float(row.get("cost") or 0))
            for row in response.data or []
        ]
