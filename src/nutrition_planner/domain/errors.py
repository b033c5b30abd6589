"""Named error conditions raised by the plan engine."""

from uuid import UUID

from nutrition_planner.domain.generation import GenerationResult


class PlanEngineError(Exception):
    """Base class for plan engine errors."""


class InvalidGenerationOutput(PlanEngineError):
    """The model answered with JSON that is not an object."""


class GenerationFailed(PlanEngineError):
    """Every generation attempt failed at the transport or parse step."""

    retryable = True

    def __init__(self, result: GenerationResult) -> None:
        super().__init__(result.error_message or "Generation failed")
        self.result = result


class PlanNotFound(PlanEngineError):
    """No diet plan exists for the given id."""

    def __init__(self, plan_id: UUID) -> None:
        super().__init__(f"Diet plan {plan_id} not found")
        self.plan_id = plan_id


class InvalidTransition(PlanEngineError):
    """A lifecycle action is not allowed from the plan's current status."""


class StaleStateConflict(InvalidTransition):
    """The plan changed between read and conditional update."""


class PlanDeletionRefused(PlanEngineError):
    """The plan is referenced by published access records."""


class TokenResolutionFailure(PlanEngineError):
    """The access token does not resolve to an active, unexpired grant."""

    def __init__(self) -> None:
        super().__init__("Diet plan not found or access link is expired")
