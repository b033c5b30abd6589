"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from nutrition_planner.api.admin import router as admin_router
from nutrition_planner.api.api_models import IntakeSubmission
from nutrition_planner.app_logging import configure_logging
from nutrition_planner.containers import AppContainer
from nutrition_planner.domain.errors import (
    GenerationFailed,
    InvalidGenerationOutput,
    InvalidTransition,
    PlanDeletionRefused,
    PlanNotFound,
    TokenResolutionFailure,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    _register_error_handlers(app, logger)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/intake", status_code=status.HTTP_201_CREATED)
    async def submit_intake(
        submission: IntakeSubmission, request: Request
    ) -> dict[str, object]:
        """Generate a draft plan for a completed questionnaire."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.plan_generation_service.generate_plan(
            submission.answers, submission.form_locale
        )
        return {
            "plan_id": str(outcome.plan.id),
            "client_id": str(outcome.client_id),
            "status": outcome.plan.status.value,
            "total_calories": outcome.targets.total_calories,
            "generation_id": str(outcome.result.id),
        }

    @app.get("/diet-view")
    async def diet_view(
        request: Request, token: str = Query(min_length=1)
    ) -> dict[str, object]:
        """Return the published plan behind a client access token."""
        state_container: AppContainer = request.app.state.container
        view = state_container.access_service.resolve(token)
        return {
            "plan_id": str(view.plan.id),
            "status": view.plan.status.value,
            "expires_at": view.access.expires_at.isoformat(),
            "plan": view.document.model_dump(mode="json", by_alias=True),
        }

    return app


def _register_error_handlers(app: FastAPI, logger: logging.Logger) -> None:
    @app.exception_handler(PlanNotFound)
    async def plan_not_found(_request: Request, exc: PlanNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(TokenResolutionFailure)
    async def token_failure(
        _request: Request, exc: TokenResolutionFailure
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidTransition)
    async def invalid_transition(
        _request: Request, exc: InvalidTransition
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(PlanDeletionRefused)
    async def deletion_refused(
        _request: Request, exc: PlanDeletionRefused
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidGenerationOutput)
    async def invalid_output(
        _request: Request, exc: InvalidGenerationOutput
    ) -> JSONResponse:
        logger.warning("Plan generation produced unusable output: %s", exc)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(GenerationFailed)
    async def generation_failed(
        _request: Request, exc: GenerationFailed
    ) -> JSONResponse:
        logger.error("Plan generation failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "detail": str(exc),
                "retryable": exc.retryable,
                "generation_id": str(exc.result.id),
            },
        )
