"""Supabase repository for plan customizations."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_planner.adapters.supabase_rows import parse_timestamp
from nutrition_planner.domain.plans import PlanCustomization, PlanDocument
from nutrition_planner.services.customization import CustomizationRepository


@dataclass
class SupabaseCustomizationRepository(CustomizationRepository):
    """Supabase-backed customization repository."""

    client: Client

    def create_customization(
        self, customization: PlanCustomization
    ) -> PlanCustomization:
        """Insert a customization row."""
        response = (
            self.client.table("diet_plan_customizations")
            .insert(
                {
                    "id": str(customization.id),
                    "diet_plan_id": str(customization.diet_plan_id),
                    "plan_json": customization.document.model_dump(
                        mode="json", by_alias=True
                    ),
                    "edited_by": customization.edited_by,
                    "created_at": customization.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create plan customization")
        return _customization_from_row(response.data[0])

    def get_latest(self, diet_plan_id: UUID) -> PlanCustomization | None:
        """Return the newest customization of a plan, if any."""
        response = (
            self.client.table("diet_plan_customizations")
            .select("id, diet_plan_id, plan_json, edited_by, created_at")
            .eq("diet_plan_id", str(diet_plan_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _customization_from_row(response.data[0])


def _customization_from_row(row: dict[str, object]) -> PlanCustomization:
    return PlanCustomization(
        id=UUID(str(row["id"])),
        diet_plan_id=UUID(str(row["diet_plan_id"])),
        document=PlanDocument.model_validate(row["plan_json"]),
        edited_by=str(row["edited_by"]),
        created_at=parse_timestamp(row["created_at"]),
    )
