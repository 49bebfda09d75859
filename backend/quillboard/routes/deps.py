"""
Quillboard Backend: Route Dependencies
=======================================

What:  FastAPI dependencies shared by the route modules.

    get_current_identity   Bearer token → Identity, or 401
    get_optional_identity  Bearer token → Identity, or None when absent
    read_post_submission   JSON or multipart body → PostSubmission

The identity dependencies share the request's database session with the
handler (FastAPI caches get_db_session per request).
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from quillboard.database import get_db_session
from quillboard.exceptions import UnauthenticatedError, ValidationError
from quillboard.schemas.post import PostSubmission, UploadedImage
from quillboard.services.access_control import Identity, access_control

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must surface as our 401 envelope,
# not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False, description="JWT from /api/auth/login")

# Body key → model attribute. Anything else (author, id, createdAt...) is dropped.
POST_FIELDS = {
    "title": "title",
    "content": "content",
    "excerpt": "excerpt",
    "categories": "categories",
    "featuredImage": "featured_image",
    "featured_image": "featured_image",
}

IMAGE_FIELDS = ("image", "featuredImage", "featured_image")


# ── Identity ──────────────────────────────────────────────────────────────

async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[Identity]:
    if credentials is None:
        return None
    return await access_control.resolve_identity(db, credentials.credentials)


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise UnauthenticatedError()
    return identity


# ── Post Bodies ───────────────────────────────────────────────────────────

def _split_categories(values: List[Any]) -> List[str]:
    """Form values may repeat, be comma-separated, or hold a JSON array."""
    ids: List[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        text = value.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except ValueError:
                raise ValidationError(message="Categories must be a list of category ids", field="categories")
            if not isinstance(parsed, list):
                raise ValidationError(message="Categories must be a list of category ids", field="categories")
            ids.extend(str(item) for item in parsed)
        else:
            ids.extend(part for part in text.split(",") if part.strip())
    return ids


async def _read_form(request: Request) -> PostSubmission:
    form = await request.form()
    try:
        fields: Dict[str, Any] = {}
        image: Optional[UploadedImage] = None

        for key in form.keys():
            values = form.getlist(key)

            if key in IMAGE_FIELDS:
                upload = next((v for v in values if isinstance(v, UploadFile)), None)
                if upload is not None:
                    content = await upload.read()
                    # Browsers send an empty part when no file was chosen
                    if upload.filename or content:
                        image = UploadedImage(
                            filename=upload.filename or "",
                            content_type=upload.content_type or "",
                            content=content,
                        )
                    continue

            attribute = POST_FIELDS.get(key)
            if attribute is None:
                continue
            if attribute == "categories":
                fields[attribute] = _split_categories(values)
            else:
                text_values = [v for v in values if isinstance(v, str)]
                fields[attribute] = text_values[-1] if text_values else None

        return PostSubmission(fields=fields, image=image)
    finally:
        await form.close()


async def _read_json(request: Request) -> PostSubmission:
    body = await request.body()
    if not body.strip():
        return PostSubmission()
    try:
        data = json.loads(body)
    except ValueError:
        raise ValidationError(message="Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object")

    fields = {POST_FIELDS[key]: value for key, value in data.items() if key in POST_FIELDS}
    return PostSubmission(fields=fields)


async def read_post_submission(request: Request) -> PostSubmission:
    """
    Parse a create/update body.

    multipart/form-data and urlencoded forms may carry an `image` file;
    everything else is read as a JSON object.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        submission = await _read_form(request)
    else:
        submission = await _read_json(request)

    logger.debug(
        "Post submission fields=%s image=%s",
        sorted(submission.fields),
        submission.image.filename if submission.image else None,
    )
    return submission
