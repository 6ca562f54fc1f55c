"""Admin API — lawyer moderation, request overrides and dashboard."""

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request

from jurist.admin.dashboard import dashboard_stats
from jurist.api.v1.requests import client_ip
from jurist.auth.dependencies import get_lifecycle, get_moderation, require_admin
from jurist.auth.principal import AdminPrincipal
from jurist.lifecycle.engine import RequestLifecycle
from jurist.models.enums import LawyerStatus, LawyerType, RequestStatus
from jurist.moderation.engine import ModerationEngine
from jurist.schemas.common import Page
from jurist.schemas.lawyer import LawyerDetail, LawyerSummary, ModerationResult, RejectLawyer
from jurist.schemas.request import RequestAdmin, RequestStatusUpdate


router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/stats")
async def get_stats(
    admin: AdminPrincipal = Depends(require_admin),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
    moderation: ModerationEngine = Depends(get_moderation),
) -> dict[str, Any]:
    return await dashboard_stats(lifecycle, moderation)


# ─── Lawyers ─────────────────────────────────────────────────────────


@router.get("/lawyers", response_model=Page[LawyerSummary])
async def list_lawyers(
    status: Optional[LawyerStatus] = Query(None),
    lawyer_type: Optional[LawyerType] = Query(None),
    search: Optional[str] = Query(None, description="Name, email or national ID"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: AdminPrincipal = Depends(require_admin),
    moderation: ModerationEngine = Depends(get_moderation),
) -> Page[LawyerSummary]:
    return await moderation.list_lawyers(status, lawyer_type, search, page, limit)


@router.get("/lawyers/{profile_id}", response_model=LawyerDetail)
async def get_lawyer(
    profile_id: uuid.UUID,
    admin: AdminPrincipal = Depends(require_admin),
    moderation: ModerationEngine = Depends(get_moderation),
) -> LawyerDetail:
    return await moderation.lawyer_details(profile_id)


@router.patch("/lawyers/{profile_id}/approve", response_model=ModerationResult)
async def approve_lawyer(
    profile_id: uuid.UUID,
    request: Request,
    admin: AdminPrincipal = Depends(require_admin),
    moderation: ModerationEngine = Depends(get_moderation),
) -> ModerationResult:
    profile = await moderation.approve(profile_id, admin.admin_id, client_ip(request))
    return ModerationResult(
        message="Lawyer approved successfully",
        lawyer=LawyerSummary.model_validate(profile),
    )


@router.patch("/lawyers/{profile_id}/reject", response_model=ModerationResult)
async def reject_lawyer(
    profile_id: uuid.UUID,
    data: RejectLawyer,
    request: Request,
    admin: AdminPrincipal = Depends(require_admin),
    moderation: ModerationEngine = Depends(get_moderation),
) -> ModerationResult:
    profile = await moderation.reject(
        profile_id, admin.admin_id, data.reason, client_ip(request)
    )
    return ModerationResult(
        message="Lawyer rejected",
        lawyer=LawyerSummary.model_validate(profile),
    )


# ─── Requests ────────────────────────────────────────────────────────


@router.get("/requests", response_model=Page[RequestAdmin])
async def list_requests(
    status: Optional[RequestStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: AdminPrincipal = Depends(require_admin),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> Page[RequestAdmin]:
    return await lifecycle.admin_list(status, page, limit)


@router.get("/requests/{request_id}", response_model=RequestAdmin)
async def get_request(
    request_id: uuid.UUID,
    admin: AdminPrincipal = Depends(require_admin),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> RequestAdmin:
    return RequestAdmin.model_validate(await lifecycle.admin_get(request_id))


@router.patch("/requests/{request_id}", response_model=RequestAdmin)
async def update_request_status(
    request_id: uuid.UUID,
    data: RequestStatusUpdate,
    request: Request,
    admin: AdminPrincipal = Depends(require_admin),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> RequestAdmin:
    updated = await lifecycle.admin_set_status(
        request_id, data.status, admin.admin_id, client_ip(request)
    )
    return RequestAdmin.model_validate(updated)


@router.delete("/requests/{request_id}")
async def delete_request(
    request_id: uuid.UUID,
    request: Request,
    admin: AdminPrincipal = Depends(require_admin),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> dict:
    await lifecycle.admin_delete(request_id, admin.admin_id, client_ip(request))
    return {"message": "Request deleted successfully"}
