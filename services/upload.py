import asyncio
import hashlib
import logging
import re
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import Database
from exceptions.asset import AssetNotFoundException, InvalidFileException
from models.asset import AssetDTO
from repositories.asset import AssetRepository
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_FILE_TYPES = (
    "image/png",
    "image/jpeg",
    "image/svg+xml",
    "application/pdf",
)

UPLOAD_URL_PREFIX = "/uploads"

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class AssetService:
    """
    Uploaded artwork files.

    Files are stored content-addressed under UPLOAD_DIR as <md5><ext>, so
    uploading identical bytes twice writes the same file again and yields
    two asset rows pointing at it.
    """

    @staticmethod
    def get_upload_dir() -> Path:
        return Path(config.UPLOAD_DIR)

    @staticmethod
    def validate_file_type(content_type: str | None) -> bool:
        return bool(content_type) and (
            content_type in config.ALLOWED_FILE_TYPES or content_type in DEFAULT_ALLOWED_FILE_TYPES
        )

    @staticmethod
    def validate_file_size(size: int) -> bool:
        return size <= config.MAX_FILE_SIZE_MB * 1024 * 1024

    @staticmethod
    def _extension(original_name: str | None) -> str:
        suffix = Path(original_name or "").suffix
        # Extension ends up in a filesystem path, accept plain ones only
        return suffix.lower() if _SAFE_EXTENSION.match(suffix) else ""

    @staticmethod
    async def save_file(content: bytes,
                        original_name: str | None,
                        content_type: str | None,
                        owner_type: str,
                        session: AsyncSession,
                        owner_id: str | None = None) -> AssetDTO:
        """
        Validate and store an uploaded file, then record it as an asset.

        Raises:
            InvalidFileException: If the file is empty, of a disallowed type or too large
        """
        if not content:
            raise InvalidFileException("No file provided")
        if not AssetService.validate_file_type(content_type):
            raise InvalidFileException("Invalid file type")
        if not AssetService.validate_file_size(len(content)):
            raise InvalidFileException("File too large")

        file_hash = hashlib.md5(content).hexdigest()
        filename = f"{file_hash}{AssetService._extension(original_name)}"
        upload_dir = AssetService.get_upload_dir()
        upload_dir.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread((upload_dir / filename).write_bytes, content)

        asset = await AssetRepository.create(AssetDTO(
            owner_type=owner_type,
            owner_id=owner_id,
            file_url=f"{UPLOAD_URL_PREFIX}/{filename}",
            file_type=content_type,
            file_size=len(content),
            original_name=original_name,
            hash=file_hash
        ), session)
        logger.info(f"📁 Stored upload {filename} ({len(content)} bytes) as asset {asset.id}")
        return asset

    @staticmethod
    async def get_asset(asset_id: str, session: AsyncSession) -> AssetDTO:
        asset = await AssetRepository.get_by_id(asset_id, session)
        if asset is None:
            raise AssetNotFoundException(asset_id)
        return asset

    @staticmethod
    async def delete_asset(asset_id: str, db: Database) -> None:
        """
        Delete the asset row and, when no other asset shares its content, the stored file.

        The file is unlinked only after the row deletion has committed, so a
        failed commit never leaves a row pointing at a missing file.

        Raises:
            AssetNotFoundException: If asset doesn't exist
        """
        async with TransactionManager.atomic_transaction(db) as session:
            asset = await AssetService.get_asset(asset_id, session)
            await AssetRepository.delete(asset_id, session)
            file_orphaned = await AssetRepository.count_by_hash(asset.hash, session) == 0
        logger.info(f"Asset {asset_id} deleted")

        if file_orphaned:
            file_path = AssetService.get_upload_dir() / Path(asset.file_url).name
            file_path.unlink(missing_ok=True)
            logger.info(f"🗑️ Removed stored file {file_path.name}")

    @staticmethod
    def get_upload_instructions(filename: str | None, filetype: str | None) -> dict:
        """
        Local storage has no presigned URLs; point clients at the multipart endpoint.

        Raises:
            InvalidFileException: If filename or filetype is missing, or the type is not allowed
        """
        if not filename or not filetype:
            raise InvalidFileException("filename and filetype are required")
        if not AssetService.validate_file_type(filetype):
            raise InvalidFileException("Invalid file type")
        return {
            "upload_url": "/api/uploads/file",
            "message": "Use POST /api/uploads/file with multipart form data",
        }
