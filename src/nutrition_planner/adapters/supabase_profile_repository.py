"""Supabase repository for client profiles."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_planner.domain.profiles import (
    ActivityLevel,
    ClientProfile,
    Goal,
    Locale,
    Sex,
)
from nutrition_planner.services.profiles import ClientProfileRepository

_COLUMNS = (
    "id, name, email, age, sex, height_cm, weight_kg, goal, activity_level, locale, "
    "restrictions, allergies, medical_conditions, current_diet, water_intake, "
    "sleep_hours, stress_level, budget, cooking_time"
)


@dataclass
class SupabaseClientProfileRepository(ClientProfileRepository):
    """Supabase-backed client profile repository."""

    client: Client

    def create_profile(self, profile: ClientProfile) -> UUID:
        """Insert a profile row and return its id."""
        response = (
            self.client.table("client_profiles")
            .insert(
                {
                    "name": profile.name,
                    "email": profile.email,
                    "age": profile.age,
                    "sex": profile.sex.value,
                    "height_cm": profile.height_cm,
                    "weight_kg": profile.weight_kg,
                    "goal": profile.goal.value,
                    "activity_level": profile.activity_level.value,
                    "locale": profile.locale.value,
                    "restrictions": profile.restrictions,
                    "allergies": profile.allergies,
                    "medical_conditions": profile.medical_conditions,
                    "current_diet": profile.current_diet,
                    "water_intake": profile.water_intake,
                    "sleep_hours": profile.sleep_hours,
                    "stress_level": profile.stress_level,
                    "budget": profile.budget,
                    "cooking_time": profile.cooking_time,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create client profile")
        return UUID(response.data[0]["id"])

    def get_profile(self, client_id: UUID) -> ClientProfile | None:
        """Return a profile by id, if present."""
        response = (
            self.client.table("client_profiles")
            .select(_COLUMNS)
            .eq("id", str(client_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return ClientProfile(
            name=row["name"],
            email=row.get("email") or "",
            age=int(row["age"]),
            sex=Sex(row["sex"]),
            height_cm=float(row["height_cm"]),
            weight_kg=float(row["weight_kg"]),
            goal=Goal(row["goal"]),
            activity_level=ActivityLevel(row["activity_level"]),
            locale=Locale(row["locale"]),
            restrictions=row["restrictions"],
            allergies=row["allergies"],
            medical_conditions=row["medical_conditions"],
            current_diet=row["current_diet"],
            water_intake=row["water_intake"],
            sleep_hours=row["sleep_hours"],
            stress_level=row["stress_level"],
            budget=row["budget"],
            cooking_time=row["cooking_time"],
        )
