"""Unit tests for upload validation and base64 transport."""

import base64

import pytest

from contractsathi.infrastructure.document.intake import (
    MAX_UPLOAD_BYTES,
    SUPPORTED_DOCUMENT_TYPES,
    DocumentIntake,
)
from contractsathi.shared.exceptions import (
    FileTooLargeError,
    UnsupportedFileTypeError,
    ValidationError,
)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestResolveMimeType:
    """Type resolution order: declared, extension, magic bytes."""

    def test_declared_type_wins(self):
        assert DocumentIntake().resolve_mime_type("x.docx", PDF) == PDF

    def test_declared_parameters_stripped(self):
        assert DocumentIntake().resolve_mime_type("x", "Application/PDF; charset=binary") == PDF

    def test_extension_used_for_octet_stream(self):
        intake = DocumentIntake()

        assert intake.resolve_mime_type("lease.DOCX", "application/octet-stream") == DOCX

    def test_magic_bytes_used_last(self):
        intake = DocumentIntake()

        assert intake.resolve_mime_type("upload", None, b"%PDF-1.7 ...") == PDF
        assert intake.resolve_mime_type("upload", None, b"PK\x03\x04rest") == DOCX

    def test_unknown_stays_unknown(self):
        assert DocumentIntake().resolve_mime_type("notes", None, b"hello") == (
            "application/octet-stream"
        )


class TestValidate:
    """Type and size limits."""

    @pytest.mark.parametrize("mime_type", list(SUPPORTED_DOCUMENT_TYPES))
    def test_supported_types_accepted(self, mime_type):
        DocumentIntake().validate("contract", mime_type, 2048)

    def test_text_file_rejected(self):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            DocumentIntake().validate("notes.txt", "text/plain", 10)

        assert exc_info.value.details["supported_types"] == list(SUPPORTED_DOCUMENT_TYPES)

    def test_exact_limit_accepted(self):
        DocumentIntake().validate("big.pdf", PDF, MAX_UPLOAD_BYTES)

    def test_over_limit_rejected(self):
        with pytest.raises(FileTooLargeError):
            DocumentIntake().validate("big.pdf", PDF, MAX_UPLOAD_BYTES + 1)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError):
            DocumentIntake().validate("empty.pdf", PDF, 0)


class TestEncoding:
    """Data URI encoding and decoding."""

    def test_encode_builds_data_uri(self):
        encoded = DocumentIntake().encode(b"%PDF-1.4", PDF)

        assert encoded == f"data:{PDF};base64,{base64.b64encode(b'%PDF-1.4').decode()}"

    def test_decode_data_uri(self):
        payload = base64.b64encode(b"%PDF-1.4 body").decode()

        document = DocumentIntake().decode(f"data:{PDF};base64,{payload}", filename="a.pdf")

        assert document.mime_type == PDF
        assert document.content == b"%PDF-1.4 body"
        assert document.base64_payload == payload
        assert document.filename == "a.pdf"
        assert document.size == len(b"%PDF-1.4 body")

    def test_decode_bare_base64_sniffs_type(self):
        payload = base64.b64encode(b"%PDF-1.4 body").decode()

        document = DocumentIntake().decode(payload)

        assert document.mime_type == PDF
        assert document.filename == "document"

    def test_decode_invalid_base64(self):
        with pytest.raises(ValidationError, match="base64"):
            DocumentIntake().decode("data:application/pdf;base64,@@not-base64@@")
