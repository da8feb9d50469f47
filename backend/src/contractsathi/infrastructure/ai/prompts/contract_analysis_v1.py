"""Contract analysis prompt v1 - Indian contract law focus."""

import json
from dataclasses import dataclass, field
from typing import Any

from contractsathi.infrastructure.database.models.contract import ClauseRisk, RiskLevel

# Only the head of the contract is sent to the model
MAX_PROMPT_CONTRACT_CHARS = 4000

# Column widths of the fields the model fills in
MAX_TITLE_CHARS = 500
MAX_FLAG_TYPE_CHARS = 100
MAX_CONTRACT_TYPE_CHARS = 255
MAX_JURISDICTION_CHARS = 255


def _bounded(value: Any, limit: int) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()[:limit]


def _flag_type(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip()[:MAX_FLAG_TYPE_CHARS] or None


@dataclass
class PromptVersion:
    """Prompt version metadata."""

    version: str
    name: str
    description: str


@dataclass
class ClauseData:
    """One clause of an analysis."""

    clause_number: int
    title: str
    clause_text: str
    summary_en: str
    summary_hi: str
    risk_score: ClauseRisk
    suggestion: str
    flag_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "clauseNumber": self.clause_number,
            "title": self.title,
            "clauseText": self.clause_text,
            "summaryEn": self.summary_en,
            "summaryHi": self.summary_hi,
            "riskScore": self.risk_score.value,
            "suggestion": self.suggestion,
            "flagType": self.flag_type,
        }


@dataclass
class ContractAnalysisData:
    """Structured analysis of a contract, from the model or the fallback."""

    contract_type: str
    risk_score: RiskLevel
    jurisdiction: str
    arbitration_present: bool
    clauses: list[ClauseData]
    hindi_summary: str
    executive_summary: str = ""
    red_flags: list[str] = field(default_factory=list)
    client_context: str | None = None
    source: str = "model"

    def renumber(self) -> None:
        """Number clauses 1..n in list order, ignoring whatever the model sent."""
        for index, clause in enumerate(self.clauses):
            clause.clause_number = index + 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys of the response schema."""
        return {
            "contractType": self.contract_type,
            "riskScore": self.risk_score.value,
            "jurisdiction": self.jurisdiction,
            "arbitrationPresent": self.arbitration_present,
            "redFlags": list(self.red_flags),
            "clauses": [c.to_dict() for c in self.clauses],
            "hindiSummary": self.hindi_summary,
            "executiveSummary": self.executive_summary,
            "clientContext": self.client_context,
            "source": self.source,
        }


class ContractAnalysisPromptV1:
    """Contract analysis prompt for Indian contract law.

    The model must:
    1. Number clauses sequentially from 1 with no gaps
    2. Only report clauses that exist in the text
    3. Keep the aggregate risk equal to a previously assigned level
    4. Answer with a single JSON object
    """

    version = PromptVersion(
        version="1.0.0",
        name="contract_analysis",
        description="Bilingual (English/Hindi) contract risk analysis, Indian law",
    )

    def render_system(self) -> str:
        """Render the system prompt."""
        return (
            "You are a legal expert specializing in Indian contract law. "
            "Provide detailed, accurate analysis in the requested JSON format only. "
            "Return only valid JSON without any additional text or formatting."
        )

    def render_user(
        self,
        contract_text: str,
        client_name: str | None = None,
        client_notes: str | None = None,
        prior_risk_level: RiskLevel | None = None,
    ) -> str:
        """Render the user prompt with contract text and optional context."""
        context = ""
        if client_name or client_notes:
            context = "\nCLIENT CONTEXT:\n"
            if client_name:
                context += f"- Client name: {client_name}\n"
            if client_notes:
                context += f"- Notes: {client_notes}\n"
            context += "Summarize how the contract affects this client in clientContext.\n"

        consistency = ""
        if prior_risk_level is not None:
            consistency = (
                "\nCONSISTENCY: This exact contract was analyzed before with overall risk "
                f'"{prior_risk_level.value}". riskScore MUST be "{prior_risk_level.value}".\n'
            )

        return f"""Analyze this legal contract and provide a detailed analysis in JSON format:

Contract Text: {contract_text[:MAX_PROMPT_CONTRACT_CHARS]}
{context}{consistency}
Please provide analysis in this exact JSON structure:
{{
  "contractType": "string (e.g., Employment Agreement, Service Agreement, etc.)",
  "riskScore": "low|medium|high",
  "jurisdiction": "string",
  "arbitrationPresent": boolean,
  "redFlags": ["string"],
  "clauses": [
    {{
      "clauseNumber": number,
      "title": "string",
      "clauseText": "string (first 200 chars of clause)",
      "summaryEn": "string (English summary)",
      "summaryHi": "string (Hindi summary)",
      "riskScore": "safe|caution|risky",
      "suggestion": "string (legal suggestion)",
      "flagType": "string (optional: termination, payment, liability, etc.)"
    }}
  ],
  "hindiSummary": "string (plain Hindi summary of the whole contract)",
  "executiveSummary": "string (2-3 sentence English overview)",
  "clientContext": "string or null"
}}

RULES:
- Number clauses sequentially starting at 1, with no gaps.
- Only describe clauses that actually appear in the contract text. Never invent clauses.
- If the jurisdiction is not stated, use "India".
- Focus on Indian law context. Provide 3-8 key clauses analysis."""

    def parse_response(self, response: str) -> ContractAnalysisData:
        """Parse AI response JSON into structured result.

        Raises:
            ValueError: If the response is not a JSON object.
        """
        cleaned = response.strip()
        if cleaned.startswith("```"):
            # Drop the fence lines, keep what is between them
            lines = cleaned.split("\n")
            if lines[-1].strip().startswith("```"):
                lines = lines[:-1]
            cleaned = "\n".join(lines[1:])

        data = json.loads(cleaned)
        if not isinstance(data, dict):
            raise ValueError("Analysis response is not a JSON object")

        clauses = []
        for c in data.get("clauses") or []:
            if not isinstance(c, dict):
                continue
            clauses.append(
                ClauseData(
                    clause_number=0,
                    title=_bounded(c.get("title"), MAX_TITLE_CHARS) or "Untitled clause",
                    clause_text=str(c.get("clauseText") or ""),
                    summary_en=str(c.get("summaryEn") or ""),
                    summary_hi=str(c.get("summaryHi") or ""),
                    risk_score=self._parse_clause_risk(c.get("riskScore")),
                    suggestion=str(c.get("suggestion") or ""),
                    flag_type=_flag_type(c.get("flagType")),
                )
            )

        red_flags = data.get("redFlags") or []
        if not isinstance(red_flags, list):
            red_flags = [str(red_flags)]

        result = ContractAnalysisData(
            contract_type=_bounded(data.get("contractType"), MAX_CONTRACT_TYPE_CHARS) or "Unknown",
            risk_score=self._parse_risk_level(data.get("riskScore")),
            jurisdiction=_bounded(data.get("jurisdiction"), MAX_JURISDICTION_CHARS) or "India",
            arbitration_present=bool(data.get("arbitrationPresent", False)),
            clauses=clauses,
            hindi_summary=str(data.get("hindiSummary") or ""),
            executive_summary=str(data.get("executiveSummary") or ""),
            red_flags=[str(f) for f in red_flags],
            client_context=data.get("clientContext") or None,
            source="model",
        )
        result.renumber()
        return result

    def _parse_risk_level(self, value: Any) -> RiskLevel:
        """Parse aggregate risk string to enum."""
        mapping = {
            "low": RiskLevel.LOW,
            "medium": RiskLevel.MEDIUM,
            "high": RiskLevel.HIGH,
        }
        return mapping.get(str(value or "").lower(), RiskLevel.MEDIUM)

    def _parse_clause_risk(self, value: Any) -> ClauseRisk:
        """Parse clause risk string to enum."""
        mapping = {
            "safe": ClauseRisk.SAFE,
            "caution": ClauseRisk.CAUTION,
            "risky": ClauseRisk.RISKY,
        }
        return mapping.get(str(value or "").lower(), ClauseRisk.CAUTION)
