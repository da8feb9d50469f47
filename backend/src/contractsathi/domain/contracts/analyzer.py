"""LLM contract analysis with a fixed fallback."""

import json
from uuid import UUID

from contractsathi.domain.contracts.fallbacks import fallback_analysis
from contractsathi.infrastructure.ai.factory import AIClient
from contractsathi.infrastructure.ai.prompts import ContractAnalysisPromptV1
from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import ContractAnalysisData
from contractsathi.infrastructure.database.models.contract import RiskLevel
from contractsathi.shared.exceptions import AIServiceError, AITimeoutError
from contractsathi.shared.logging import get_logger
from contractsathi.shared.result import Outcome

logger = get_logger(__name__)

ANALYSIS_TEMPERATURE = 0.1


class ContractAnalyzer:
    """Produces a structured analysis for contract text.

    Every return path yields a valid analysis. Model output is post-processed
    so clauses are numbered 1..n and the aggregate risk matches
    ``prior_risk_level`` when one is given.
    """

    def __init__(self, ai_client: AIClient | None, max_tokens: int = 2000) -> None:
        self.ai_client = ai_client
        self.max_tokens = max_tokens
        self.prompt = ContractAnalysisPromptV1()

    async def analyze(
        self,
        text: str,
        client_name: str | None = None,
        client_notes: str | None = None,
        prior_risk_level: RiskLevel | None = None,
        resource_id: UUID | None = None,
    ) -> Outcome[ContractAnalysisData]:
        if self.ai_client is None:
            return self._fallback("ai_not_configured", prior_risk_level)

        try:
            response = await self.ai_client.complete(
                system_prompt=self.prompt.render_system(),
                user_prompt=self.prompt.render_user(
                    contract_text=text,
                    client_name=client_name,
                    client_notes=client_notes,
                    prior_risk_level=prior_risk_level,
                ),
                max_tokens=self.max_tokens,
                temperature=ANALYSIS_TEMPERATURE,
                action="contract_analysis",
                resource_id=resource_id,
            )
        except AITimeoutError as e:
            logger.warning("analysis_timeout", error=e.message)
            return self._fallback("timeout", prior_risk_level)
        except AIServiceError as e:
            logger.warning("analysis_ai_failed", error=e.message)
            return self._fallback("ai_error", prior_risk_level)

        try:
            analysis = self.prompt.parse_response(response.content)
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.warning(
                "ai_response_parse_failed",
                error=str(e),
                response=response.content[:500],
            )
            return self._fallback("parse_error", prior_risk_level)

        analysis.renumber()
        if prior_risk_level is not None and analysis.risk_score != prior_risk_level:
            logger.info(
                "analysis_risk_aligned",
                model_risk=analysis.risk_score.value,
                prior_risk=prior_risk_level.value,
            )
            analysis.risk_score = prior_risk_level

        return Outcome.ok(analysis)

    def _fallback(
        self,
        reason: str,
        prior_risk_level: RiskLevel | None,
    ) -> Outcome[ContractAnalysisData]:
        logger.warning("analysis_degraded", reason=reason)
        analysis = fallback_analysis(prior_risk_level)
        analysis.renumber()
        return Outcome.degraded(analysis, reason=f"analysis:{reason}")
