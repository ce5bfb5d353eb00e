"""
Scrol Backend — Photo Service
==============================

What:  Resolves and serves candidate profile photos, and replaces them.
How:   The candidate row holds the blob key; the bytes and their content
       type live in the blob store. Candidates without a photo fall back to
       the configured default key.
Who:   Called by the photos router (GET/POST /getpicture, POST /updatepicture).

Upload workflow (update_picture):
    1. Validate declared content type, emptiness and size (→ 400)
    2. Resolve the candidate by the verified email (→ 400 if unknown)
    3. Store the bytes under a fresh key `profile-<hex>`
    4. Point candidate.photo at the new key and flush
       Step 4 fails → the blob from step 3 is deleted, error propagates
       Step 3 fails → step 4 never runs
"""

import logging
import uuid
from typing import Tuple, Union

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from scrol.config import settings
from scrol.exceptions import (
    BlobNotFoundError,
    CandidateNotFoundError,
    DatabaseError,
    ScrolError,
    ValidationError,
)
from scrol.schemas.candidate import PhotoUpdateResponse
from scrol.services.blob_store import BlobObject, blob_store
from scrol.services.candidate_service import LookupKey, find_candidate

logger = logging.getLogger(__name__)

PHOTO_KEY_PREFIX = "profile-"


def new_photo_key() -> str:
    return f"{PHOTO_KEY_PREFIX}{uuid.uuid4().hex}"


class PhotoService:
    """Business logic for profile photos."""

    async def get_picture(
        self,
        db: AsyncSession,
        value: Union[str, int],
        by: LookupKey,
    ) -> Tuple[BlobObject, str]:
        """
        Locate the photo of a candidate.

        Returns:
            (blob, content_type) where content_type falls back to
            settings.default_photo_content_type when none was recorded.

        Raises:
            CandidateNotFoundError: no candidate for the value (→ 400)
            BlobNotFoundError:      no blob under the resolved key (→ 404)
            DatabaseError:          candidate lookup failed (→ 500)
        """
        logger.info("Retrieving picture for candidate with %s %s", by.value, value)
        try:
            candidate = await find_candidate(db, value, by)
        except Exception as e:
            logger.error("Error fetching candidate with %s %s: %s", by.value, value, str(e), exc_info=True)
            raise DatabaseError(context={"lookup": by.value, "error_type": type(e).__name__})

        if candidate is None:
            raise CandidateNotFoundError(lookup_value=str(value))

        key = candidate.photo or settings.default_photo_key
        blob = await blob_store.get(key)
        if blob is None:
            logger.warning("Photo blob %s missing for candidate %s", key, candidate.id)
            raise BlobNotFoundError(key=key)

        return blob, blob.content_type or settings.default_photo_content_type

    def validate_upload(self, content_type: str, content: bytes) -> None:
        """
        Check an uploaded photo before anything is written.

        Raises:
            ValidationError: empty file, oversized file, or disallowed type (→ 400)
        """
        allowed = settings.allowed_photo_types_list
        if content_type not in allowed:
            raise ValidationError(
                message=(
                    f"File type '{content_type or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(allowed)}"
                ),
                field="file",
                context={"content_type": content_type},
            )

        if not content:
            raise ValidationError(message="Uploaded file is empty", field="file")

        if len(content) > settings.max_photo_size:
            max_mb = settings.max_photo_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
                field="file",
                context={"max_size": settings.max_photo_size},
            )

    async def update_picture(
        self,
        db: AsyncSession,
        email: str,
        upload: UploadFile,
    ) -> PhotoUpdateResponse:
        """
        Replace the candidate's photo with an uploaded image.

        The previous blob is left in place; other keys may still be cached
        by clients.

        Raises:
            ValidationError:        upload rejected (→ 400)
            CandidateNotFoundError: no candidate with this email (→ 400)
            BlobStorageError:       blob write failed (→ 500)
            DatabaseError:          column update failed, blob removed (→ 500)
        """
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        # One byte past the limit is enough to detect an oversized file
        content = await upload.read(settings.max_photo_size + 1)
        self.validate_upload(content_type, content)

        try:
            candidate = await find_candidate(db, email, LookupKey.EMAIL)
        except Exception as e:
            logger.error("Error fetching candidate with email %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(context={"email": email, "error_type": type(e).__name__})

        if candidate is None:
            raise CandidateNotFoundError(
                message=f"No user found with email {email}",
                lookup_value=email,
            )

        key = new_photo_key()
        await blob_store.put(key, content, content_type)

        try:
            candidate.photo = key
            await db.flush()
        except Exception as e:
            logger.error("Photo column update failed for %s, removing blob %s: %s", email, key, str(e))
            await blob_store.delete(key)
            if isinstance(e, ScrolError):
                raise
            raise DatabaseError(context={"email": email, "error_type": type(e).__name__})

        logger.info("Photo for %s replaced with %s (%d bytes)", email, key, len(content))
        return PhotoUpdateResponse(photo=key)


# ── Singleton Instance ────────────────────────────────────────────────────
photo_service = PhotoService()
