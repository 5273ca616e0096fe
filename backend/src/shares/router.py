"""FastAPI router for public share links.

POST /api/share stores an ExamRecord for a limited time and returns its link.
GET /api/share/{share_id} returns the record while the link is live. Unknown
and expired links get the same 404 so a caller cannot tell whether a link
ever existed.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from config import Settings
from dependencies import get_app_settings, get_share_store
from .schemas import (
    CreateShareRequest,
    ShareCreatedResponse,
    SharedExamResponse,
    to_iso8601,
)
from .store import ShareStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/share", tags=["share"])

NOT_FOUND_BODY = {"error": "not_found", "message": "Not found or expired"}


def build_share_url(request: Request, settings: Settings, share_id: str) -> str:
    """Public URL of the share page.

    PUBLIC_BASE_URL wins; otherwise the link is built from the Host header,
    always over https.
    """
    if settings.PUBLIC_BASE_URL:
        base = settings.PUBLIC_BASE_URL.rstrip("/")
    else:
        host = request.headers.get("host") or "localhost:3000"
        base = f"https://{host}"
    return f"{base}/share/{share_id}"


@router.post("", response_model=ShareCreatedResponse, response_model_by_alias=True)
def create_share(
    body: CreateShareRequest,
    request: Request,
    store: ShareStore = Depends(get_share_store),
    settings: Settings = Depends(get_app_settings),
) -> ShareCreatedResponse:
    """Create a share link for an extracted record.

    Raises:
        InvalidTTL: expiresIn is zero, negative or above SHARE_MAX_TTL_SECONDS (400)
    """
    entry = store.create(body.data, body.expires_in)

    return ShareCreatedResponse(
        id=entry.id,
        url=build_share_url(request, settings, entry.id),
        expires_at=to_iso8601(entry.expires_at),
    )


@router.get(
    "/{share_id}",
    response_model=SharedExamResponse,
    response_model_by_alias=True,
    responses={status.HTTP_404_NOT_FOUND: {"description": "Not found or expired"}},
)
def get_share(
    share_id: str,
    store: ShareStore = Depends(get_share_store),
):
    entry = store.resolve(share_id)
    if entry is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=NOT_FOUND_BODY)

    return SharedExamResponse(data=entry.record, expires_at=entry.expires_at)
