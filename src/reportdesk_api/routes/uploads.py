"""File upload route."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from reportdesk_api.auth import CurrentUser
from reportdesk_api.schemas import UploadedFile, UploadResponse
from reportdesk_api.services.storage import FileStorage, get_file_storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    current_user: CurrentUser,
    storage: Annotated[FileStorage, Depends(get_file_storage)],
    file: UploadFile = File(...),
):
    """Store an uploaded report file.

    The returned ``path`` is what a subsequent ``POST /reports`` records.
    """
    original_name = file.filename or ""
    content = await file.read()
    stored = storage.save(original_name, content)
    logger.info("User %s uploaded %s as %s", current_user.id, original_name, stored.filename)
    return UploadResponse(
        message="File uploaded successfully",
        file=UploadedFile(
            original_name=original_name,
            filename=stored.filename,
            path=stored.path,
            url=stored.url,
            size=stored.size,
            file_type=stored.file_type,
        ),
    )
