"""OpenAI Chat Completions client for plan generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_planner.domain.generation import GenerationUsage, ProviderCompletion
from nutrition_planner.services.generation import GenerationClient


@dataclass
class OpenAIGenerationClient(GenerationClient):
    """Generation client backed by OpenAI JSON-mode chat completions."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout: float) -> "OpenAIGenerationClient":
        """Create an OpenAI generation client.

        SDK retries are disabled; retry policy belongs to the plan pipeline.
        """
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_instruction: str,
        user_instruction: str,
        temperature: float,
        max_output_tokens: int,
    ) -> ProviderCompletion:
        """Call the Chat Completions API in JSON mode."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_instruction},
            ],
            temperature=temperature,
            max_tokens=max_output_tokens,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content if response.choices else None
        usage = response.usage
        return ProviderCompletion(
            content=content,
            model=response.model or model,
            usage=GenerationUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
