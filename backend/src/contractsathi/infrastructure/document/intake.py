"""Upload validation and base64 transport encoding."""

import base64
import binascii
from dataclasses import dataclass

from contractsathi.shared.exceptions import (
    FileTooLargeError,
    UnsupportedFileTypeError,
    ValidationError,
)
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_DOCUMENT_TYPES = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}

# Max upload size: 10 MiB
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

_EXTENSION_TYPES = {ext: mime for mime, ext in SUPPORTED_DOCUMENT_TYPES.items()}

# Generic types browsers send when they do not know better
_UNSPECIFIC_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


@dataclass(frozen=True)
class IncomingDocument:
    """A decoded upload ready for extraction."""

    mime_type: str
    content: bytes
    base64_payload: str
    filename: str = "document"

    @property
    def size(self) -> int:
        return len(self.content)


class DocumentIntake:
    """Validates uploads and converts between bytes and data URIs."""

    def __init__(self, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
        self.max_bytes = max_bytes

    def resolve_mime_type(
        self,
        filename: str | None,
        declared: str | None,
        content: bytes | None = None,
    ) -> str:
        """Resolve the document type from declared type, extension, then magic bytes."""
        declared = (declared or "").split(";")[0].strip().lower()
        if declared not in _UNSPECIFIC_TYPES:
            return declared

        if filename and "." in filename:
            ext = filename.rsplit(".", 1)[1].lower()
            if ext in _EXTENSION_TYPES:
                return _EXTENSION_TYPES[ext]

        if content:
            if content.startswith(b"%PDF"):
                return "application/pdf"
            if content.startswith(b"PK\x03\x04"):
                return _EXTENSION_TYPES["docx"]

        return declared or "application/octet-stream"

    def validate(self, filename: str | None, mime_type: str, size: int) -> None:
        """Reject unsupported types and oversized files.

        Raises:
            UnsupportedFileTypeError: If the type is not PDF or DOCX
            FileTooLargeError: If the file exceeds the size limit
            ValidationError: If the file is empty
        """
        if mime_type not in SUPPORTED_DOCUMENT_TYPES:
            logger.info("upload_rejected", filename=filename, reason="type", mime_type=mime_type)
            raise UnsupportedFileTypeError(
                file_type=mime_type,
                supported=list(SUPPORTED_DOCUMENT_TYPES.keys()),
            )
        if size > self.max_bytes:
            logger.info("upload_rejected", filename=filename, reason="size", size=size)
            raise FileTooLargeError(max_size_mb=self.max_bytes // (1024 * 1024))
        if size == 0:
            raise ValidationError("Uploaded file is empty")

    def encode(self, content: bytes, mime_type: str) -> str:
        """Encode bytes as a ``data:<mime>;base64,<payload>`` URI."""
        payload = base64.b64encode(content).decode("ascii")
        return f"data:{mime_type};base64,{payload}"

    def decode(self, data: str, filename: str | None = None) -> IncomingDocument:
        """Decode a data URI or bare base64 string.

        Raises:
            ValidationError: If the payload is not valid base64
        """
        declared = None
        payload = data.strip()
        if payload.startswith("data:") and "," in payload:
            header, payload = payload.split(",", 1)
            declared = header[len("data:") :].split(";")[0]

        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("File is not valid base64", details={"reason": str(e)}) from e

        mime_type = self.resolve_mime_type(filename, declared, content)
        return IncomingDocument(
            mime_type=mime_type,
            content=content,
            base64_payload=payload,
            filename=filename or "document",
        )
