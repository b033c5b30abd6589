"""Domain models for generation requests and results."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from nutrition_planner.domain.profiles import Locale


class GenerationPurpose(StrEnum):
    """What a generation request is for."""

    PLAN = "plan"
    DIAGNOSTIC = "diagnostic"


class GenerationFailure(StrEnum):
    """Why a generation attempt did not produce usable JSON."""

    TRANSPORT = "transport"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class GenerationRequest:
    """Fully rendered instructions for one generation attempt."""

    locale: Locale
    system_instruction: str
    user_instruction: str
    output_schema: str
    max_output_tokens: int
    purpose: GenerationPurpose = GenerationPurpose.PLAN


@dataclass(frozen=True)
class GenerationUsage:
    """Token usage reported by the provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class ProviderCompletion:
    """Raw completion returned by a generation provider."""

    content: str | None
    model: str
    usage: GenerationUsage


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a single generation attempt, persisted as a log row."""

    id: UUID
    purpose: GenerationPurpose
    model_identifier: str
    raw_json: str | None
    parsed: object | None
    usage: GenerationUsage
    generation_time_ms: int
    cost: float
    success: bool
    error_message: str | None
    failure: GenerationFailure | None
    created_at: datetime
