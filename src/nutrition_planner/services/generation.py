"""Generation orchestration: provider call, accounting and logging."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from nutrition_planner.domain.generation import (
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    GenerationUsage,
    ProviderCompletion,
)

_logger = logging.getLogger(__name__)


class GenerationClient(Protocol):
    """Interface for a text-generation provider."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_instruction: str,
        user_instruction: str,
        temperature: float,
        max_output_tokens: int,
    ) -> ProviderCompletion:
        """Return the provider's JSON-mode completion."""


class GenerationLogRepository(Protocol):
    """Append-only persistence for generation attempts."""

    def append(self, result: GenerationResult) -> None:
        """Store one log row per attempt; repeating an id is a no-op."""

    def list_recent(self, limit: int) -> list[GenerationResult]:
        """Return the most recent attempts."""


@dataclass(frozen=True)
class TokenPricing:
    """Provider prices in dollars per 1000 tokens."""

    input_per_1k: float = 0.01
    output_per_1k: float = 0.03

    def cost(self, usage: GenerationUsage) -> float:
        """Return the dollar cost of a call."""
        input_cost = usage.prompt_tokens / 1000 * self.input_per_1k
        output_cost = usage.completion_tokens / 1000 * self.output_per_1k
        return round(input_cost + output_cost, 4)


@dataclass
class GenerationService:
    """Runs single generation attempts and records each one."""

    client: GenerationClient
    log_repository: GenerationLogRepository
    model: str
    temperature: float
    timeout_seconds: float
    pricing: TokenPricing = field(default_factory=TokenPricing)
    _inflight: set[asyncio.Task[GenerationResult]] = field(
        default_factory=set, init=False, repr=False
    )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Call the provider once and return a tagged result.

        Provider, timeout and JSON errors come back as a failed result rather
        than an exception. A log store failure is logged and the result is
        still returned. If the caller is cancelled the attempt keeps running
        in the background so its log row is still written.
        """
        task = asyncio.ensure_future(self._attempt(request))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await asyncio.shield(task)

    async def _attempt(self, request: GenerationRequest) -> GenerationResult:
        started = time.perf_counter()
        try:
            completion = await asyncio.wait_for(
                self.client.complete(
                    model=self.model,
                    system_instruction=request.system_instruction,
                    user_instruction=request.user_instruction,
                    temperature=self.temperature,
                    max_output_tokens=request.max_output_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            result = self._failure(
                request,
                started,
                f"Generation timed out after {self.timeout_seconds:g}s",
            )
        except Exception as exc:
            result = self._failure(request, started, f"Provider error: {exc}")
        else:
            result = self._from_completion(request, started, completion)

        try:
            self.log_repository.append(result)
        except Exception:
            _logger.exception("Failed to store generation log: id=%s", result.id)
        if result.success:
            _logger.info(
                "Generation succeeded: purpose=%s model=%s tokens=%s cost=%s ms=%s",
                result.purpose,
                result.model_identifier,
                result.usage.total_tokens,
                result.cost,
                result.generation_time_ms,
            )
        else:
            _logger.warning(
                "Generation failed: purpose=%s failure=%s error=%s raw=%r",
                result.purpose,
                result.failure,
                result.error_message,
                result.raw_json,
            )
        return result

    def _from_completion(
        self,
        request: GenerationRequest,
        started: float,
        completion: ProviderCompletion,
    ) -> GenerationResult:
        elapsed_ms = _elapsed_ms(started)
        cost = self.pricing.cost(completion.usage)
        content = completion.content
        error_message: str | None = None
        parsed: object | None = None
        if not content or not content.strip():
            error_message = "Provider returned an empty response"
        else:
            try:
                parsed = json.loads(content)
            except json.JSONDecodeError as exc:
                error_message = f"Response is not valid JSON: {exc}"
        return GenerationResult(
            id=uuid4(),
            purpose=request.purpose,
            model_identifier=completion.model or self.model,
            raw_json=content,
            parsed=parsed,
            usage=completion.usage,
            generation_time_ms=elapsed_ms,
            cost=cost,
            success=error_message is None,
            error_message=error_message,
            failure=GenerationFailure.MALFORMED if error_message else None,
            created_at=datetime.now(tz=UTC),
        )

    def _failure(
        self, request: GenerationRequest, started: float, message: str
    ) -> GenerationResult:
        return GenerationResult(
            id=uuid4(),
            purpose=request.purpose,
            model_identifier=self.model,
            raw_json=None,
            parsed=None,
            usage=GenerationUsage(),
            generation_time_ms=_elapsed_ms(started),
            cost=0.0,
            success=False,
            error_message=message,
            failure=GenerationFailure.TRANSPORT,
            created_at=datetime.now(tz=UTC),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
