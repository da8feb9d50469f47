"""Document text extraction (OCR) prompt v1."""

from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import PromptVersion


class DocumentExtractionPromptV1:
    """Vision prompt that turns a scanned or binary document into plain text."""

    version = PromptVersion(
        version="1.0.0",
        name="document_extraction",
        description="Verbatim text extraction from PDF/DOCX/images",
    )

    def render_system(self) -> str:
        return (
            "You are a precise OCR engine for legal documents. Extract ALL text from the "
            "document exactly as written. Preserve the structure: headings, numbered "
            "clauses, paragraphs and lists. If a passage cannot be read reliably, write "
            "[unclear] in its place. Describe non-text marks such as stamps, seals and "
            "signatures in square brackets, e.g. [signature] or [company stamp]. "
            "Return only the extracted text, with no commentary."
        )

    def render_user(self, filename: str) -> str:
        return f"Extract the complete text of the attached document '{filename}'."
