"""
File upload utilities for validating property images, application documents
and profile pictures before they reach the blob store.
"""

import io
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from PIL import Image, UnidentifiedImageError
from fastapi import UploadFile

from app.utils.exceptions import (
    ValidationError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


@dataclass
class ValidatedUpload:
    """An upload that passed validation, read fully into memory."""
    filename: str
    extension: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def storage_name(self) -> str:
        """Unique object name preserving the extension."""
        return f"{uuid.uuid4()}.{self.extension}"


class FileValidator:
    """Utility class for file validation operations."""

    @classmethod
    def validate_file_extension(cls, filename: str, allowed: List[str]) -> str:
        """
        Validate file extension.

        Returns:
            Lowercase extension without the dot

        Raises:
            ValidationError: If extension is missing or not allowed
        """
        if not filename:
            raise ValidationError("Filename is required")

        extension = Path(filename).suffix.lower().lstrip(".")
        if not extension:
            raise ValidationError("File must have an extension")

        if extension not in allowed:
            raise UnsupportedFileTypeError(extension, allowed)

        return extension

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: int) -> int:
        if file_size <= 0:
            raise ValidationError("File size must be greater than 0")
        if file_size > max_size:
            raise FileSizeExceededError(file_size, max_size)
        return file_size

    @classmethod
    def validate_image_content(cls, content: bytes) -> str:
        """
        Check the bytes decode as an image.

        Returns:
            Pillow format name in lowercase
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                return (img.format or "").lower()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

    @classmethod
    async def read_upload(
        cls,
        file: UploadFile,
        allowed_extensions: List[str],
        max_size: int
    ) -> ValidatedUpload:
        """
        Comprehensive validation of an uploaded file.

        Image extensions must contain decodable image data; other allowed
        extensions (PDF documents) are checked for extension and size only.
        """
        extension = cls.validate_file_extension(file.filename or "", allowed_extensions)

        await file.seek(0)
        content = await file.read()
        cls.validate_file_size(len(content), max_size)

        if extension in IMAGE_EXTENSIONS:
            cls.validate_image_content(content)
        elif extension == "pdf" and not content.startswith(b"%PDF"):
            raise ValidationError("Invalid PDF document")

        return ValidatedUpload(
            filename=file.filename,
            extension=extension,
            content_type=file.content_type or "application/octet-stream",
            content=content,
        )

    @classmethod
    async def read_uploads(
        cls,
        files: Optional[List[UploadFile]],
        allowed_extensions: List[str],
        max_size: int,
        max_count: int
    ) -> List[ValidatedUpload]:
        files = [f for f in (files or []) if f is not None and f.filename]
        if len(files) > max_count:
            raise ValidationError(f"Too many files (maximum: {max_count})")
        return [await cls.read_upload(f, allowed_extensions, max_size) for f in files]
