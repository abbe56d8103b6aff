"""API routes for uploading and serving stored files."""

import logging
import mimetypes
from uuid import uuid4

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status

from student_tracker.api.deps import CurrentUser
from student_tracker.config import get_settings, sanitize_error
from student_tracker.schemas import FileUploadResponse
from student_tracker.services import storage_service
from student_tracker.services.storage import StorageError

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/files", tags=["files"])

UPLOAD_KINDS = ("note", "assignment", "pastpaper", "profile")


async def delete_stored_file(url: str) -> bool:
    """
    Delete a content item's file once the item's row is committed.

    A storage failure leaves an orphaned file rather than a row pointing
    at a missing one, so it is logged and reported as False instead of
    failing the request.
    """
    try:
        await storage_service.delete(url)
    except StorageError as e:
        logger.error("Failed to delete stored file (url=%s): %s", url, str(e), exc_info=True)
        return False
    return True


@router.post("", response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    current_user: CurrentUser,
    file: UploadFile = File(...),
    kind: str = Form("note"),
) -> FileUploadResponse:
    """
    Upload a file and get back the URL to attach to a note, assignment or paper.

    Flow:
    1. Client uploads the file here
    2. Client sends the returned url as file_url when creating the item
    """
    if kind not in UPLOAD_KINDS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"kind must be one of: {', '.join(UPLOAD_KINDS)}",
        )

    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    if len(data) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_size_bytes} bytes.",
        )

    filename = (file.filename or "upload").replace("/", "_").replace("\\", "_")
    content_type = file.content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    file_key = f"{kind}s/{current_user.id}/{uuid4()}_{filename}"

    try:
        url = await storage_service.store(file_key, data, content_type)
    except StorageError as e:
        logger.error("Failed to store upload %s: %s", file_key, str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=sanitize_error(e, generic_message="Failed to store file."),
        )

    return FileUploadResponse(url=url, filename=filename, content_type=content_type, size=len(data))


@router.get("/{file_key:path}")
async def download_file(file_key: str, current_user: CurrentUser) -> Response:
    """Serve a stored file."""
    try:
        data = await storage_service.retrieve(storage_service.url_for(file_key))
    except StorageError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    media_type = mimetypes.guess_type(file_key)[0] or "application/octet-stream"
    return Response(content=data, media_type=media_type)
