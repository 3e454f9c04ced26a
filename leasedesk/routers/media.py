"""Media preview endpoints for offer photo links."""

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from leasedesk.services.auth import RequireAuth
from leasedesk.services.media_preview import MediaPreviewService

router = APIRouter()

PREVIEW_IMAGE_MAX_AGE = 600


def _get_service(request: Request) -> MediaPreviewService:
    return request.app.state.media_preview


def _require_url(url: str | None) -> str:
    if not url or not url.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="url is required")
    return url.strip()


@router.get("/preview")
async def get_preview(
    request: Request,
    _: RequireAuth,
    url: str | None = Query(None, description="Offer media link"),
) -> dict:
    """Resolve a media link to one preview image URL (null if none)."""
    preview_url = await _get_service(request).resolve_preview(_require_url(url))
    return {"previewUrl": preview_url}


@router.get("/gallery")
async def get_gallery(
    request: Request,
    _: RequireAuth,
    url: str | None = Query(None, description="Offer media link"),
) -> dict:
    """Resolve a media link to every image URL behind it."""
    images = await _get_service(request).resolve_gallery(_require_url(url))
    return {"galleryUrls": images}


@router.get("/preview-image")
async def get_preview_image(
    request: Request,
    _: RequireAuth,
    url: str | None = Query(None, description="Offer media link"),
) -> Response:
    """Proxy the preview image bytes of a media link."""
    result = await _get_service(request).fetch_preview_image(_require_url(url))
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preview not found")

    content, content_type = result
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": f"private, max-age={PREVIEW_IMAGE_MAX_AGE}"},
    )
