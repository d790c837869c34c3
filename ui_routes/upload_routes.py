"""
Upload Routes
=============

The composer uploads attachments here before publishing so each one gets a
URL the platform plugins can fetch. Files are written to ``UPLOAD_DIR``
under randomized names and served back by the static mount at
``UPLOAD_URL_PREFIX``.
"""

import logging
import secrets
import time
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Request
from starlette.datastructures import UploadFile

from config import get_settings
from errors import InvalidRequest
from models import UploadedFile, UploadResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


def stored_filename(original_name: str) -> str:
    """Build a collision-resistant file name that keeps the original base name."""
    base_name = Path((original_name or "").replace("\\", "/")).name or "upload"
    return f"{int(time.time() * 1000)}_{secrets.token_hex(4)}_{base_name}"


@router.post("/uploads", response_model=UploadResult)
async def upload_files(request: Request):
    """Store every ``files`` part of a multipart form and return their public URLs."""
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        raise InvalidRequest("Expected multipart/form-data")

    settings = get_settings()
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)

    saved = []
    form = await request.form()
    try:
        for part in form.getlist("files"):
            if not isinstance(part, UploadFile):
                continue

            data = await part.read()
            name = stored_filename(part.filename)
            (upload_dir / name).write_bytes(data)

            saved.append(UploadedFile(
                url=f"{settings.UPLOAD_URL_PREFIX}/{quote(name)}",
                name=part.filename or "",
                size=len(data),
                type=part.content_type or ""
            ))
            logger.info(f"Stored upload {name} ({len(data)} bytes)")
    finally:
        await form.close()

    return UploadResult(files=saved)
