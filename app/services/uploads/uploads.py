import os
import random
import time
from typing import Optional

from starlette.datastructures import UploadFile

from app.utils.exceptions import BadRequest
from app.utils.logger_utils import logger
from config import UPLOAD_CONFIG


class DocumentStorage:
    """Helper class for project documents kept on local disk"""

    @staticmethod
    def generate_filename(original_name: Optional[str], field_name: str = "document") -> str:
        """
        Build a collision resistant file name
        Format: {field}-{epoch ms}-{random 0..1e9}{original extension}
        """
        extension = os.path.splitext(original_name or "")[1]
        return f"{field_name}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"

    @staticmethod
    def public_url(filename: str) -> str:
        return f"{UPLOAD_CONFIG['UPLOAD_URL_PREFIX']}/{filename}"

    @staticmethod
    def check_content_type(upload: UploadFile) -> None:
        if upload.content_type not in UPLOAD_CONFIG["ALLOWED_CONTENT_TYPES"]:
            raise BadRequest("Only PDF files are allowed")

    @staticmethod
    async def read_limited(upload: UploadFile) -> bytes:
        """Read at most one byte past the limit, so an oversized file is never held whole"""
        limit = UPLOAD_CONFIG["MAX_FILE_SIZE"]
        content = await upload.read(limit + 1)
        if len(content) > limit:
            raise BadRequest(f"File too large. Maximum size is {limit} bytes")
        return content

    @staticmethod
    async def save_document(upload: UploadFile) -> str:
        """
        Validate and store an uploaded document

        Returns:
            The URL the stored file is served from, e.g. /uploads/document-1700000000000-42.pdf
        """
        DocumentStorage.check_content_type(upload)
        content = await DocumentStorage.read_limited(upload)

        os.makedirs(UPLOAD_CONFIG["UPLOAD_DIR"], exist_ok=True)
        filename = DocumentStorage.generate_filename(upload.filename)
        path = os.path.join(UPLOAD_CONFIG["UPLOAD_DIR"], filename)
        with open(path, "wb") as f:
            f.write(content)

        logger.info(f"Stored document {upload.filename!r} as {filename} ({len(content)} bytes)")
        return DocumentStorage.public_url(filename)
