"""Supabase repository for diet plans."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_planner.adapters.supabase_rows import (
    parse_optional_timestamp,
    parse_optional_uuid,
    parse_timestamp,
)
from nutrition_planner.domain.plans import DietPlan, PlanDocument, PlanStatus
from nutrition_planner.domain.targets import NutritionTargets
from nutrition_planner.services.lifecycle import DietPlanRepository

_COLUMNS = (
    "id, client_id, status, targets_json, plan_json, review_notes, approved_by, "
    "approved_at, generation_log_id, version, created_at, updated_at"
)


@dataclass
class SupabaseDietPlanRepository(DietPlanRepository):
    """Supabase-backed diet plan repository."""

    client: Client

    def create_plan(self, plan: DietPlan) -> DietPlan:
        """Insert a plan row and return the stored plan."""
        response = (
            self.client.table("diet_plans")
            .insert(
                {
                    "id": str(plan.id),
                    "client_id": str(plan.client_id),
                    "targets_json": _targets_json(plan.targets),
                    "created_at": plan.created_at.isoformat(),
                    **_mutable_columns(plan),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create diet plan")
        return _plan_from_row(response.data[0])

    def get_plan(self, plan_id: UUID) -> DietPlan | None:
        """Return a plan by id, if present."""
        response = (
            self.client.table("diet_plans")
            .select(_COLUMNS)
            .eq("id", str(plan_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _plan_from_row(response.data[0])

    def list_plans(self, status: PlanStatus | None, limit: int) -> list[DietPlan]:
        """Return recent plans, optionally filtered by status."""
        query = self.client.table("diet_plans").select(_COLUMNS)
        if status is not None:
            query = query.eq("status", status.value)
        response = query.order("created_at", desc=True).limit(limit).execute()
        return [_plan_from_row(row) for row in response.data or []]

    def save_transition(
        self, plan: DietPlan, expected_status: PlanStatus, expected_version: int
    ) -> bool:
        """Update the plan only if status and version are unchanged."""
        response = (
            self.client.table("diet_plans")
            .update(_mutable_columns(plan))
            .eq("id", str(plan.id))
            .eq("status", expected_status.value)
            .eq("version", expected_version)
            .execute()
        )
        return bool(response.data)

    def delete_plan(self, plan_id: UUID) -> None:
        """Delete a plan row."""
        self.client.table("diet_plans").delete().eq("id", str(plan_id)).execute()


def _mutable_columns(plan: DietPlan) -> dict[str, object]:
    return {
        "status": plan.status.value,
        "plan_json": plan.document.model_dump(mode="json", by_alias=True),
        "review_notes": list(plan.review_notes),
        "approved_by": plan.approved_by,
        "approved_at": plan.approved_at.isoformat() if plan.approved_at else None,
        "generation_log_id": str(plan.generation_log_id)
        if plan.generation_log_id
        else None,
        "version": plan.version,
        "updated_at": plan.updated_at.isoformat(),
    }


def _targets_json(targets: NutritionTargets) -> dict[str, int]:
    return {
        "bmr": targets.bmr,
        "total_calories": targets.total_calories,
        "protein_g": targets.protein_g,
        "carbs_g": targets.carbs_g,
        "fats_g": targets.fats_g,
        "protein_kcal": targets.protein_kcal,
        "carbs_kcal": targets.carbs_kcal,
        "fats_kcal": targets.fats_kcal,
    }


def _plan_from_row(row: dict[str, object]) -> DietPlan:
    targets = row["targets_json"]
    return DietPlan(
        id=UUID(str(row["id"])),
        client_id=UUID(str(row["client_id"])),
        status=PlanStatus(row["status"]),
        targets=NutritionTargets(**targets),
        document=PlanDocument.model_validate(row["plan_json"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
        review_notes=list(row.get("review_notes") or []),
        approved_by=row.get("approved_by"),
        approved_at=parse_optional_timestamp(row.get("approved_at")),
        generation_log_id=parse_optional_uuid(row.get("generation_log_id")),
        version=int(row.get("version") or 1),
    )
