"""Text extraction: native text layer, then vision model, then fixed text."""

from dataclasses import dataclass
from uuid import UUID

from contractsathi.domain.contracts.fallbacks import FALLBACK_CONTRACT_TEXT
from contractsathi.infrastructure.ai.factory import AIClient
from contractsathi.infrastructure.ai.prompts import DocumentExtractionPromptV1
from contractsathi.infrastructure.document.extractor import (
    MIN_EXTRACTED_TEXT_LENGTH,
    DocumentExtractor,
)
from contractsathi.infrastructure.document.intake import IncomingDocument
from contractsathi.shared.concurrency import document_work
from contractsathi.shared.exceptions import AIServiceError, AITimeoutError, ContractSathiError
from contractsathi.shared.logging import get_logger
from contractsathi.shared.result import Outcome

logger = get_logger(__name__)

SOURCE_NATIVE = "native"
SOURCE_VISION = "vision"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class ExtractedText:
    """Plain text of a document and the stage that produced it."""

    text: str
    source: str


class TextExtractionService:
    """Turns an uploaded document into plain text.

    Never raises on upstream problems. When neither the text layer nor the
    vision model yields enough text, the fixed fallback contract text is
    returned as a degraded outcome.
    """

    def __init__(
        self,
        ai_client: AIClient | None,
        extractor: DocumentExtractor | None = None,
        *,
        native_enabled: bool = True,
    ) -> None:
        self.ai_client = ai_client
        self.extractor = extractor or DocumentExtractor()
        self.native_enabled = native_enabled
        self.prompt = DocumentExtractionPromptV1()

    async def extract(
        self,
        document: IncomingDocument,
        resource_id: UUID | None = None,
    ) -> Outcome[ExtractedText]:
        if self.native_enabled:
            try:
                native = await document_work.run(
                    self.extractor.extract,
                    document.content,
                    document.filename,
                    document.mime_type,
                )
                return Outcome.ok(ExtractedText(text=native.text, source=SOURCE_NATIVE))
            except ContractSathiError as e:
                logger.info(
                    "native_extraction_skipped",
                    filename=document.filename,
                    reason=e.message,
                )

        if self.ai_client is None:
            return self._fallback("ai_not_configured", document)

        try:
            response = await self.ai_client.complete_with_document(
                system_prompt=self.prompt.render_system(),
                user_prompt=self.prompt.render_user(document.filename),
                document_base64=document.base64_payload,
                mime_type=document.mime_type,
                filename=document.filename,
                action="document_extraction",
                resource_id=resource_id,
            )
        except AITimeoutError as e:
            logger.warning("vision_extraction_timeout", error=e.message)
            return self._fallback("timeout", document)
        except AIServiceError as e:
            logger.warning("vision_extraction_failed", error=e.message)
            return self._fallback("ai_error", document)

        text = (response.content or "").strip()
        if len(text) < MIN_EXTRACTED_TEXT_LENGTH:
            return self._fallback("insufficient_text", document)

        logger.info(
            "vision_extraction_completed",
            filename=document.filename,
            text_length=len(text),
            model=response.model,
        )
        return Outcome.ok(ExtractedText(text=text, source=SOURCE_VISION))

    def _fallback(self, reason: str, document: IncomingDocument) -> Outcome[ExtractedText]:
        logger.warning("extraction_degraded", reason=reason, filename=document.filename)
        return Outcome.degraded(
            ExtractedText(text=FALLBACK_CONTRACT_TEXT, source=SOURCE_FALLBACK),
            reason=f"extraction:{reason}",
        )
