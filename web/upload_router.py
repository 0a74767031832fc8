import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import BaseModel

import config
from db import Database
from exceptions.asset import InvalidFileException
from services.upload import AssetService
from utils.transaction_manager import TransactionManager
from web.dependencies import get_db
from web.responses import success_response

logger = logging.getLogger(__name__)

upload_router = APIRouter(prefix="/api/uploads", tags=["uploads"])


class SignedUrlRequest(BaseModel):
    filename: str | None = None
    filetype: str | None = None


@upload_router.post("/signed-url")
async def get_signed_url(payload: SignedUrlRequest):
    return success_response(AssetService.get_upload_instructions(payload.filename, payload.filetype))


@upload_router.post("/file", status_code=status.HTTP_201_CREATED)
async def upload_file(file: UploadFile | None = File(None), db: Database = Depends(get_db)):
    """
    Upload customer artwork as multipart form data (field "file").

    Returns:
        201: {"asset": {...}}
        400: No file, invalid type or file too large
    """
    if file is None:
        raise InvalidFileException("No file provided")

    # Read one byte past the limit so oversized uploads are rejected without buffering them whole
    max_bytes = config.MAX_FILE_SIZE_MB * 1024 * 1024
    content = await file.read(max_bytes + 1)

    async with TransactionManager.atomic_transaction(db) as session:
        asset = await AssetService.save_file(content, file.filename, file.content_type, "customer", session)
    return success_response({"asset": asset}, status_code=status.HTTP_201_CREATED)
