"""Versioned AI prompts.

Prompts are versioned as code so the version used for an analysis can be
audited and rolled back.
"""

from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import (
    ContractAnalysisPromptV1,
)
from contractsathi.infrastructure.ai.prompts.document_extraction_v1 import (
    DocumentExtractionPromptV1,
)

__all__ = ["ContractAnalysisPromptV1", "DocumentExtractionPromptV1"]
