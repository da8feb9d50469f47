"""Native text extraction for PDF and DOCX files."""

import io
from dataclasses import dataclass

import fitz  # PyMuPDF
from docx import Document

from contractsathi.infrastructure.document.intake import SUPPORTED_DOCUMENT_TYPES
from contractsathi.shared.exceptions import UnsupportedFileTypeError, ValidationError
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

# Below this many characters the text layer is treated as missing
MIN_EXTRACTED_TEXT_LENGTH = 50


@dataclass
class ExtractedDocument:
    """Result of document text extraction."""

    text: str
    page_count: int
    mime_type: str


class DocumentExtractor:
    """Reads the embedded text layer of PDF and DOCX documents.

    Scanned documents have no text layer; callers fall through to the
    vision model when this raises ``ValidationError``.
    """

    def extract(self, content: bytes, filename: str, mime_type: str) -> ExtractedDocument:
        """Extract text from a document.

        Raises:
            UnsupportedFileTypeError: If file type is not supported
            ValidationError: If document is corrupted or has too little text
        """
        doc_type = SUPPORTED_DOCUMENT_TYPES.get(mime_type)
        if doc_type == "pdf":
            text, page_count = self._extract_pdf(content)
        elif doc_type == "docx":
            text, page_count = self._extract_docx(content)
        else:
            raise UnsupportedFileTypeError(
                file_type=mime_type,
                supported=list(SUPPORTED_DOCUMENT_TYPES.keys()),
            )

        if len(text.strip()) < MIN_EXTRACTED_TEXT_LENGTH:
            raise ValidationError(
                "Document has no readable text layer",
                details={"text_length": len(text.strip())},
            )

        logger.info(
            "document_extracted",
            filename=filename,
            mime_type=mime_type,
            page_count=page_count,
            text_length=len(text),
        )

        return ExtractedDocument(text=text, page_count=page_count, mime_type=mime_type)

    def _extract_pdf(self, content: bytes) -> tuple[str, int]:
        """Extract text from PDF using PyMuPDF."""
        try:
            with fitz.open(stream=content, filetype="pdf") as doc:
                page_count = len(doc)
                text_parts = []
                for page in doc:
                    page_text = page.get_text("text")
                    if page_text.strip():
                        text_parts.append(page_text.strip())
            return "\n\n".join(text_parts), page_count

        except Exception as e:
            logger.warning("pdf_extraction_failed", error=str(e))
            raise ValidationError(f"PDF could not be read: {e}") from e

    def _extract_docx(self, content: bytes) -> tuple[str, int]:
        """Extract paragraphs and table rows from DOCX."""
        try:
            doc = Document(io.BytesIO(content))
            text_parts = [para.text for para in doc.paragraphs if para.text.strip()]

            for table in doc.tables:
                for row in table.rows:
                    row_text = " | ".join(cell.text.strip() for cell in row.cells if cell.text.strip())
                    if row_text:
                        text_parts.append(row_text)

            text = "\n".join(text_parts)
            # Rough estimate, DOCX has no fixed pagination
            return text, max(1, len(text) // 3000)

        except Exception as e:
            logger.warning("docx_extraction_failed", error=str(e))
            raise ValidationError(f"DOCX could not be read: {e}") from e
