"""Supabase repository for the append-only generation log."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_planner.adapters.supabase_rows import parse_timestamp
from nutrition_planner.domain.generation import (
    GenerationFailure,
    GenerationPurpose,
    GenerationResult,
    GenerationUsage,
)
from nutrition_planner.services.generation import GenerationLogRepository

_COLUMNS = (
    "id, purpose, model_identifier, raw_json, parsed_json, prompt_tokens, "
    "completion_tokens, total_tokens, generation_time_ms, cost, success, "
    "error_message, failure, created_at"
)


@dataclass
class SupabaseGenerationLogRepository(GenerationLogRepository):
    """Supabase-backed generation log."""

    client: Client

    def append(self, result: GenerationResult) -> None:
        """Insert a log row; an existing id is left untouched."""
        self.client.table("generation_logs").upsert(
            {
                "id": str(result.id),
                "purpose": result.purpose.value,
                "model_identifier": result.model_identifier,
                "raw_json": result.raw_json,
                "parsed_json": result.parsed,
                "prompt_tokens": result.usage.prompt_tokens,
                "completion_tokens": result.usage.completion_tokens,
                "total_tokens": result.usage.total_tokens,
                "generation_time_ms": result.generation_time_ms,
                "cost": result.cost,
                "success": result.success,
                "error_message": result.error_message,
                "failure": result.failure.value if result.failure else None,
                "created_at": result.created_at.isoformat(),
            },
            on_conflict="id",
            ignore_duplicates=True,
        ).execute()

    def list_recent(self, limit: int) -> list[GenerationResult]:
        """Return the most recent log rows."""
        response = (
            self.client.table("generation_logs")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_result_from_row(row) for row in response.data or []]


def _result_from_row(row: dict[str, object]) -> GenerationResult:
    failure = row.get("failure")
    return GenerationResult(
        id=UUID(str(row["id"])),
        purpose=GenerationPurpose(row["purpose"]),
        model_identifier=str(row["model_identifier"]),
        raw_json=row.get("raw_json"),
        parsed=row.get("parsed_json"),
        usage=GenerationUsage(
            prompt_tokens=int(row.get("prompt_tokens") or 0),
            completion_tokens=int(row.get("completion_tokens") or 0),
            total_tokens=int(row.get("total_tokens") or 0),
        ),
        generation_time_ms=int(row.get("generation_time_ms") or 0),
        cost=float(row.get("cost") or 0),
        success=bool(row["success"]),
        error_message=row.get("error_message"),
        failure=GenerationFailure(failure) if failure else None,
        created_at=parse_timestamp(row["created_at"]),
    )
