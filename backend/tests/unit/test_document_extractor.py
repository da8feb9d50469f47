"""Unit tests for native PDF and DOCX text extraction."""

import pytest

from contractsathi.infrastructure.document.extractor import DocumentExtractor
from contractsathi.shared.exceptions import UnsupportedFileTypeError, ValidationError

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestPdfExtraction:
    """PDF text layer via PyMuPDF."""

    def test_text_layer_extracted(self, sample_pdf_bytes):
        result = DocumentExtractor().extract(sample_pdf_bytes, "contract.pdf", PDF)

        assert "SERVICE AGREEMENT" in result.text
        assert result.page_count == 1
        assert result.mime_type == PDF

    def test_scanned_pdf_has_no_text_layer(self, scanned_pdf_bytes):
        with pytest.raises(ValidationError, match="readable text"):
            DocumentExtractor().extract(scanned_pdf_bytes, "scan.pdf", PDF)

    def test_corrupted_pdf(self):
        with pytest.raises(ValidationError):
            DocumentExtractor().extract(b"%PDF-1.4 truncated garbage", "bad.pdf", PDF)


class TestDocxExtraction:
    """DOCX paragraphs and tables via python-docx."""

    def test_paragraphs_and_tables(self, sample_docx_bytes):
        result = DocumentExtractor().extract(sample_docx_bytes, "contract.docx", DOCX)

        assert "Acme Traders" in result.text
        assert "Governing Law | Laws of India" in result.text
        assert result.page_count == 1

    def test_corrupted_docx(self):
        with pytest.raises(ValidationError, match="DOCX could not be read"):
            DocumentExtractor().extract(b"PK\x03\x04 not a zip", "bad.docx", DOCX)


class TestUnsupportedTypes:
    def test_plain_text_rejected(self):
        with pytest.raises(UnsupportedFileTypeError):
            DocumentExtractor().extract(b"hello", "notes.txt", "text/plain")
