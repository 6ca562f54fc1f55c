"""Public requests API — the client-facing submission form."""

from fastapi import APIRouter, Depends, Request

from jurist.auth.dependencies import get_lifecycle
from jurist.lifecycle.engine import RequestLifecycle
from jurist.schemas.request import RequestCreate, RequestSubmitted


router = APIRouter(prefix="/api/v1", tags=["requests"])


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/requests", response_model=RequestSubmitted, status_code=201)
async def submit_request(
    data: RequestCreate,
    request: Request,
    lifecycle: RequestLifecycle = Depends(get_lifecycle),
) -> RequestSubmitted:
    """Accept an anonymous client request.

    Args:
        data: Submission form
        request: Incoming HTTP request (source of the client IP)
        lifecycle: Request lifecycle service

    Returns:
        The generated request number
    """
    request_number = await lifecycle.submit(data, client_ip(request))
    return RequestSubmitted(request_number=request_number)
