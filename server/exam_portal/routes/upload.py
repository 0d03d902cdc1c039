import logging
import os
import re
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from exam_portal.config import settings
from exam_portal.errors import Forbidden, ValidationError, guarded
from exam_portal.repository import ExamRepository, get_repository
from exam_portal.schemas import ErrorResponse, UploadResponse
from exam_portal.security import Identity, require_identity
from exam_portal.services import exam_lookup
from exam_portal.services.authorization import resolve_caller

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"], responses={
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
})

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
CHUNK_SIZE = 1024 * 1024


def _too_large() -> ValidationError:
    return ValidationError(f"File size exceeds {settings.max_upload_size_mb}MB limit")


def safe_filename(filename: str) -> str:
    """Basename of ``filename`` with anything outside [A-Za-z0-9._-] replaced."""
    name = os.path.basename(filename or "").strip()
    return _UNSAFE_CHARS.sub("_", name) or "upload"


@router.post("/upload", response_model=UploadResponse)
@guarded("Error uploading file")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    exam_id: Optional[str] = Form(None, alias="examId"),
    identity: Identity = Depends(require_identity),
    repo: ExamRepository = Depends(get_repository),
):
    """
    Store one document, optionally attached to an exam the caller owns
    """
    user = resolve_caller(repo, identity)

    if file is None:
        raise ValidationError("No file provided")

    if file.content_type not in settings.allowed_upload_types_list:
        raise ValidationError("Invalid file type. Only PDF, Word documents, and text files are allowed.")

    limit = settings.max_upload_size_mb * 1024 * 1024
    if file.size is not None and file.size > limit:
        raise _too_large()

    if exam_id:
        exam = exam_lookup.require_exam(repo.find_exam(exam_id))
        if exam.user_id != user.id:
            raise Forbidden("You do not have permission to upload files to this exam")

    stored_name = f"{uuid.uuid4().hex}-{safe_filename(file.filename)}"
    os.makedirs(settings.upload_dir, exist_ok=True)
    stored_path = os.path.join(settings.upload_dir, stored_name)

    size = 0
    try:
        with open(stored_path, "wb") as buffer:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                # the declared size can be missing or wrong
                if size > limit:
                    raise _too_large()
                buffer.write(chunk)

        record = repo.add_file(
            filename=file.filename or stored_name,
            path=f"/uploads/{stored_name}",
            content_type=file.content_type,
            size=size,
            exam_id=exam_id or None,
        )
    except Exception:
        if os.path.exists(stored_path):
            os.remove(stored_path)
        raise

    logger.info("User %s uploaded %s (%d bytes)", user.id, record.filename, record.size)
    return UploadResponse.model_validate(record)
