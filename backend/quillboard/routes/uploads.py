"""
Quillboard Backend: Uploaded Image Route
=========================================

    GET {upload_url_prefix}/{path}   serve a stored post image   (public)

The `featuredImage` returned on a post is exactly this URL. Paths are
resolved under the storage root; anything escaping it is a 404.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse

from quillboard.config import settings
from quillboard.exceptions import NotFoundError
from quillboard.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"], include_in_schema=False)


@router.get(settings.upload_url_prefix + "/{file_path:path}")
async def serve_upload(file_path: str) -> FileResponse:
    resolved = file_service.resolve_path(file_path)
    if resolved is None or not resolved.is_file():
        if resolved is None:
            logger.warning("Rejected upload path outside storage root: %s", file_path)
        raise NotFoundError(resource="Image", resource_id=file_path)
    return FileResponse(resolved)
