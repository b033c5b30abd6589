"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from pydantic import ValidationError

from nutrition_planner.api.api_models import (
    ChangeRequest,
    CustomizationBody,
    IntakeSubmission,
    ReviewAction,
)
from nutrition_planner.domain.plans import DietPlan, PlanStatus

if TYPE_CHECKING:
    from nutrition_planner.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/plans", dependencies=[Depends(require_admin)])
async def list_plans(
    request: Request,
    status_filter: PlanStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
) -> dict[str, object]:
    """Return plan summaries, optionally filtered by status."""
    container: AppContainer = request.app.state.container
    return {"plans": container.admin_service.list_plans(status_filter, limit)}


@router.get("/plans/{plan_id}", dependencies=[Depends(require_admin)])
async def plan_detail(plan_id: UUID, request: Request) -> dict[str, object]:
    """Return a plan with its access grants and customization."""
    container: AppContainer = request.app.state.container
    plan = container.lifecycle_service.get_plan(plan_id)
    return container.admin_service.get_plan_detail(plan)


@router.post("/plans/{plan_id}/submit", dependencies=[Depends(require_admin)])
async def submit_plan(plan_id: UUID, request: Request) -> dict[str, object]:
    """Move a draft into review."""
    container: AppContainer = request.app.state.container
    return _status_payload(container.lifecycle_service.submit_for_review(plan_id))


@router.post("/plans/{plan_id}/request-changes", dependencies=[Depends(require_admin)])
async def request_changes(
    plan_id: UUID, body: ChangeRequest, request: Request
) -> dict[str, object]:
    """Send a plan back to draft with a note."""
    container: AppContainer = request.app.state.container
    plan = container.lifecycle_service.request_changes(
        plan_id, body.reviewer, body.notes
    )
    return _status_payload(plan)


@router.post("/plans/{plan_id}/approve", dependencies=[Depends(require_admin)])
async def approve_plan(
    plan_id: UUID, body: ReviewAction, request: Request
) -> dict[str, object]:
    """Approve a plan."""
    container: AppContainer = request.app.state.container
    plan = container.lifecycle_service.approve(plan_id, body.reviewer, body.notes)
    return _status_payload(plan)


@router.post("/plans/{plan_id}/reject", dependencies=[Depends(require_admin)])
async def reject_plan(
    plan_id: UUID, body: ReviewAction, request: Request
) -> dict[str, object]:
    """Reject a plan."""
    container: AppContainer = request.app.state.container
    plan = container.lifecycle_service.reject(plan_id, body.reviewer, body.notes)
    return _status_payload(plan)


@router.post("/plans/{plan_id}/publish", dependencies=[Depends(require_admin)])
async def publish_plan(plan_id: UUID, request: Request) -> dict[str, object]:
    """Publish a plan, issue its access link and notify the client."""
    container: AppContainer = request.app.state.container
    plan, access = container.lifecycle_service.publish(plan_id)
    notification = await container.notification_service.notify_published(
        plan, access
    )
    return {
        **_status_payload(plan),
        "access_token": access.access_token,
        "access_url": container.notification_service.build_access_url(
            access.access_token
        ),
        "expires_at": access.expires_at.isoformat(),
        "notified": notification is not None,
    }


@router.post("/plans/{plan_id}/revoke", dependencies=[Depends(require_admin)])
async def revoke_access(plan_id: UUID, request: Request) -> dict[str, object]:
    """Deactivate a published plan's access link."""
    container: AppContainer = request.app.state.container
    revoked = container.lifecycle_service.revoke_access(plan_id)
    return {"id": str(plan_id), "revoked": revoked}


@router.delete(
    "/plans/{plan_id}",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_plan(plan_id: UUID, request: Request) -> None:
    """Delete a plan that was never published."""
    container: AppContainer = request.app.state.container
    container.lifecycle_service.delete_plan(plan_id)


@router.put("/plans/{plan_id}/customization", dependencies=[Depends(require_admin)])
async def customize_plan(
    plan_id: UUID, body: CustomizationBody, request: Request
) -> dict[str, object]:
    """Store an edited plan document."""
    container: AppContainer = request.app.state.container
    try:
        customization = container.customization_service.save_customization(
            plan_id, body.plan, body.edited_by
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc
    return {
        "id": str(customization.id),
        "diet_plan_id": str(customization.diet_plan_id),
        "created_at": customization.created_at.isoformat(),
    }


@router.get("/generation-logs", dependencies=[Depends(require_admin)])
async def generation_logs(
    request: Request, limit: int = Query(default=30, ge=1, le=200)
) -> dict[str, object]:
    """Return recent generation attempts."""
    container: AppContainer = request.app.state.container
    return {"logs": container.admin_service.list_generation_logs(limit)}


@router.get("/statistics", dependencies=[Depends(require_admin)])
async def statistics(request: Request) -> dict[str, object]:
    """Return plan and generation statistics."""
    container: AppContainer = request.app.state.container
    return container.admin_service.get_statistics()


@router.post("/diagnostic", dependencies=[Depends(require_admin)])
async def diagnostic(body: IntakeSubmission, request: Request) -> dict[str, object]:
    """Run a short generation against the provider for an intake."""
    container: AppContainer = request.app.state.container
    return await container.admin_service.run_diagnostic(
        body.answers, body.form_locale
    )


def _status_payload(plan: DietPlan) -> dict[str, object]:
    return {
        "id": str(plan.id),
        "status": plan.status.value,
        "version": plan.version,
    }
