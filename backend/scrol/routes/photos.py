"""
Scrol Backend — Photo Route Handlers
=====================================

What:  POST /getpicture (caller's own photo) and POST /updatepicture.
How:   Photos are streamed from the blob store with their stored content type.
       The upload is a multipart form with `token` and `file` fields.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from scrol.database import get_db_session
from scrol.dependencies import Principal, get_principal, require_feature
from scrol.exceptions import ValidationError
from scrol.schemas.common import ErrorResponse
from scrol.services.blob_store import BlobObject
from scrol.services.candidate_service import LookupKey
from scrol.services.photo_service import photo_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Photos"])


def picture_response(blob: BlobObject, content_type: str) -> StreamingResponse:
    """Stream a stored photo back to the client."""
    return StreamingResponse(
        blob.iter_bytes(),
        media_type=content_type,
        headers={"Content-Length": str(blob.size)},
    )


@router.post(
    "/getpicture",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Photo bytes", "content": {"image/*": {}}},
        400: {"description": "Unknown candidate or invalid token", "model": ErrorResponse},
        404: {"description": "Photo blob missing", "model": ErrorResponse},
    },
    summary="Get the caller's profile photo",
)
async def get_own_picture(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> StreamingResponse:
    blob, content_type = await photo_service.get_picture(db, principal.email, LookupKey.EMAIL)
    return picture_response(blob, content_type)


@router.post(
    "/updatepicture",
    dependencies=[Depends(require_feature("feature_photo_upload"))],
    responses={
        400: {"description": "Invalid upload or token", "model": ErrorResponse},
        404: {"description": "Photo upload disabled", "model": ErrorResponse},
    },
    summary="Replace the caller's profile photo",
    description=(
        "multipart/form-data with a `token` field and a `file` field holding the image. "
        "The image is stored under a new key and the profile is pointed at it."
    ),
)
async def update_picture(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> dict:
    if principal.form is None:
        raise ValidationError(message="Content-Type must be multipart/form-data")

    upload = principal.form.get("file")
    if not isinstance(upload, UploadFile):
        raise ValidationError(message="File is required", field="file")

    result = await photo_service.update_picture(db, principal.email, upload)
    return result.model_dump()
