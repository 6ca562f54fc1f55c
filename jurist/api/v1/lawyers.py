"""Lawyer API — registration, own profile and the request pool."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile

from jurist.auth.dependencies import get_lifecycle, get_moderation, require_lawyer
from jurist.auth.principal import LawyerPrincipal
from jurist.exceptions import Unauthorized, ValidationError
from jurist.lifecycle.engine import RequestLifecycle
from jurist.models.enums import LawyerType, RequestStatus
from jurist.moderation.engine import ModerationEngine, UploadedDocument
from jurist.schemas.common import Page
from jurist.schemas.lawyer import LawyerProfileOut, LawyerProfileUpdate
from jurist.schemas.request import RequestDetail, RequestPoolItem


router = APIRouter(prefix="/api/v1", tags=["lawyers"])


async def _read_upload(upload: UploadFile) -> UploadedDocument:
    return UploadedDocument(
        data=await upload.read(),
        mime_type=upload.content_type or "application/octet-stream",
    )


# ─── Registration ────────────────────────────────────────────────────


@router.post("/lawyers/register", response_model=LawyerProfileOut, status_code=201)
async def register_lawyer(
    email: str = Form(...),
    lawyer_type: LawyerType = Form(...),
    full_name: str = Form(...),
    national_id: str = Form(...),
    phone: str = Form(...),
    photo: UploadFile = File(...),
    diploma: UploadFile = File(...),
    license: UploadFile = File(...),
    x_identity_id: Optional[str] = Header(None),
    moderation: ModerationEngine = Depends(get_moderation),
) -> LawyerProfileOut:
    """Register a lawyer with three verification documents.

    The identity provider forwards the new account's reference in the
    X-Identity-Id header.
    """
    if not x_identity_id:
        raise Unauthorized("Identity reference is missing")

    documents = {
        "photo_url": await _read_upload(photo),
        "diploma_url": await _read_upload(diploma),
        "license_url": await _read_upload(license),
    }
    profile = await moderation.register(
        {
            "email": email,
            "lawyer_type": lawyer_type,
            "full_name": full_name,
            "national_id": national_id,
            "phone": phone,
        },
        documents,
        external_id=x_identity_id,
    )
    return LawyerProfileOut.model_validate(profile)


# ─── Own profile ─────────────────────────────────────────────────────


@router.get("/lawyer/profile", response_model=LawyerProfileOut)
async def get_profile(
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    moderation: ModerationEngine = Depends(get_moderation),
) -> LawyerProfileOut:
    profile = await moderation.get_profile(lawyer.profile_id)
    return LawyerProfileOut.model_validate(profile)


@router.patch("/lawyer/profile", response_model=LawyerProfileOut)
async def update_profile(
    data: LawyerProfileUpdate,
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    moderation: ModerationEngine = Depends(get_moderation),
) -> LawyerProfileOut:
    profile = await moderation.update_profile(lawyer.profile_id, data)
    return LawyerProfileOut.model_validate(profile)


@router.post("/lawyer/documents", response_model=LawyerProfileOut)
async def upload_documents(
    photo: Optional[UploadFile] = File(None),
    diploma: Optional[UploadFile] = File(None),
    license: Optional[UploadFile] = File(None),
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    moderation: ModerationEngine = Depends(get_moderation),
) -> LawyerProfileOut:
    """Replace one or more documents. A rejected profile returns to review."""
    files = {}
    for field, upload in (("photo_url", photo), ("diploma_url", diploma), ("license_url", license)):
        if upload is not None:
            files[field] = await _read_upload(upload)
    if not files:
        raise ValidationError("At least one document is required", field="documents")

    profile = await moderation.upload_documents(lawyer.profile_id, files)
    return LawyerProfileOut.model_validate(profile)


# ─── Request pool ────────────────────────────────────────────────────


@router.get("/lawyer/requests", response_model=Page[RequestPoolItem])
async def list_available_requests(
    status: Optional[RequestStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> Page[RequestPoolItem]:
    return await lifecycle.list_available(lawyer.profile_id, status, page, limit)


@router.get("/lawyer/requests/my", response_model=Page[RequestDetail])
async def list_my_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> Page[RequestDetail]:
    return await lifecycle.my_requests(lawyer.profile_id, page, limit)


@router.get("/lawyer/requests/{request_id}", response_model=RequestDetail)
async def get_request(
    request_id: uuid.UUID,
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> RequestDetail:
    return await lifecycle.request_details(request_id, lawyer.profile_id)


@router.post("/lawyer/requests/{request_id}/claim", response_model=RequestDetail)
async def claim_request(
    request_id: uuid.UUID,
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> RequestDetail:
    request = await lifecycle.claim(request_id, lawyer.profile_id)
    return RequestDetail.model_validate(request)


@router.post("/lawyer/requests/{request_id}/release", response_model=RequestDetail)
async def release_request(
    request_id: uuid.UUID,
    lawyer: LawyerPrincipal = Depends(require_lawyer),
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> RequestDetail:
    request = await lifecycle.release(request_id, lawyer.profile_id)
    return RequestDetail.model_validate(request)
