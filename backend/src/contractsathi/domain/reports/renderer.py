"""PDF rendering of a contract risk report."""

import io
from collections.abc import Sequence
from datetime import UTC, datetime

from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from contractsathi.infrastructure.database.models.contract import Clause, ClauseRisk, Contract
from contractsathi.shared.logging import get_logger

logger = get_logger(__name__)

REPORT_TITLE = "Contract Risk Analysis Report"

MARGIN_X = 50
PAGE_BREAK_Y = 100
CLAUSE_BREAK_Y = 150

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
UNICODE_FONT = "ContractSathiUnicode"

BLACK = (0, 0, 0)
GREY = (0.5, 0.5, 0.5)
BOX_GREY = (0.95, 0.95, 0.95)
GREEN_TEXT = (0.2, 0.6, 0.2)
RISK_COLORS = {
    "high": (0.8, 0.2, 0.2),
    "medium": (0.9, 0.6, 0.0),
    "low": (0.2, 0.8, 0.2),
}
CLAUSE_LABELS = {
    ClauseRisk.RISKY.value: "[HIGH RISK]",
    ClauseRisk.CAUTION.value: "[CAUTION]",
    ClauseRisk.SAFE.value: "[SAFE]",
}

DEFAULT_RECOMMENDATIONS = [
    "Consider legal consultation for contract optimization",
    "Review payment and termination terms carefully",
]

DISCLAIMER = (
    "This report is for informational purposes only and does not constitute legal advice. "
    "Please consult with a qualified attorney for specific legal guidance."
)


def wrap_text(text: str, max_chars: int) -> list[str]:
    """Greedy word wrap by character count.

    Lines break only at whitespace, so a single word longer than
    ``max_chars`` gets a line of its own.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= max_chars:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def _value(raw: object) -> str:
    return str(getattr(raw, "value", raw) or "")


def build_recommendations(clauses: Sequence[Clause]) -> list[str]:
    """Key issues: URGENT per risky clause, REVIEW per caution clause."""
    recommendations = []
    for clause in clauses:
        risk = _value(clause.risk_score)
        if risk == ClauseRisk.RISKY.value:
            recommendations.append(
                f"URGENT: {clause.title} needs immediate revision - "
                f"{clause.suggestion or 'Requires legal attention'}"
            )
        elif risk == ClauseRisk.CAUTION.value:
            recommendations.append(
                f"REVIEW: {clause.title} - {clause.suggestion or 'Needs improvement'}"
            )
    return recommendations or list(DEFAULT_RECOMMENDATIONS)


class _Page:
    """Canvas plus a running y cursor."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.width, self.height = A4
        self.y = self.height - 50

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = self.height - 50

    def ensure_space(self, limit: float = PAGE_BREAK_Y) -> None:
        if self.y < limit:
            self.new_page()

    def text(
        self,
        value: str,
        *,
        size: float = 11,
        font: str = FONT,
        color: tuple[float, float, float] = BLACK,
        x: float = MARGIN_X,
    ) -> None:
        self.pdf.setFont(font, size)
        self.pdf.setFillColorRGB(*color)
        self.pdf.drawString(x, self.y, value)

    def wrapped(
        self,
        value: str,
        max_chars: int,
        *,
        size: float = 11,
        leading: float = 15,
        font: str = FONT,
        color: tuple[float, float, float] = BLACK,
    ) -> None:
        for line in wrap_text(value, max_chars):
            self.ensure_space()
            self.text(line, size=size, font=font, color=color)
            self.y -= leading


class ReportRenderer:
    """Renders a contract and its clauses into a PDF document."""

    def __init__(self, unicode_font_path: str | None = None) -> None:
        self.unicode_font: str | None = None
        if unicode_font_path:
            try:
                pdfmetrics.registerFont(TTFont(UNICODE_FONT, unicode_font_path))
                self.unicode_font = UNICODE_FONT
            except (TTFError, OSError) as e:
                logger.warning("report_font_unavailable", path=unicode_font_path, error=str(e))

    def render(
        self,
        contract: Contract,
        clauses: Sequence[Clause],
        generated_at: datetime | None = None,
    ) -> bytes:
        ordered = sorted(clauses, key=lambda c: c.clause_number)
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(REPORT_TITLE)
        page = _Page(pdf)

        self._header(page, contract, generated_at or datetime.now(UTC))
        self._executive_summary(page, contract, ordered)
        self._recommendations(page, ordered)
        self._clauses(page, ordered)
        self._plain_summary(page, ordered)
        self._disclaimer(page)

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    def _header(self, page: _Page, contract: Contract, generated_at: datetime) -> None:
        page.text(REPORT_TITLE, size=20, font=FONT_BOLD)
        page.y -= 25
        page.text(f"Generated on: {generated_at.strftime('%d/%m/%Y')}", size=10, color=GREY)
        page.y -= 15
        page.text(f"Document: {contract.filename}", size=10, color=GREY)

    def _executive_summary(
        self,
        page: _Page,
        contract: Contract,
        clauses: Sequence[Clause],
    ) -> None:
        page.y -= 40
        page.text("EXECUTIVE SUMMARY", size=16, font=FONT_BOLD)

        page.y -= 10
        page.pdf.setFillColorRGB(*BOX_GREY)
        page.pdf.rect(MARGIN_X, page.y - 100, page.width - 2 * MARGIN_X, 95, stroke=0, fill=1)

        risk = _value(contract.risk_score)
        risky_count = sum(1 for c in clauses if _value(c.risk_score) == ClauseRisk.RISKY.value)
        if contract.arbitration_present is None:
            arbitration = "Unknown"
        else:
            arbitration = "Yes" if contract.arbitration_present else "No"

        page.y -= 25
        page.text(f"Contract Type: {contract.contract_type or 'Not specified'}", size=12, x=60)
        page.y -= 20
        page.text(
            f"Overall Risk Level: {risk.upper() or 'UNKNOWN'}",
            size=12,
            font=FONT_BOLD,
            color=RISK_COLORS.get(risk, BLACK),
            x=60,
        )
        page.y -= 20
        page.text(
            f"Jurisdiction: {contract.jurisdiction or 'Not specified'} | Arbitration: {arbitration}",
            size=11,
            x=60,
        )
        page.y -= 20
        page.text(
            f"Total Clauses Reviewed: {len(clauses)} | High Risk Issues Found: {risky_count}",
            size=11,
            x=60,
        )

        executive = (contract.analysis_metadata or {}).get("executiveSummary")
        if executive:
            page.y -= 35
            page.wrapped(executive, 80)

    def _recommendations(self, page: _Page, clauses: Sequence[Clause]) -> None:
        page.y -= 40
        page.ensure_space()
        page.text("KEY ISSUES", size=16, font=FONT_BOLD, color=RISK_COLORS["high"])
        page.y -= 25
        for recommendation in build_recommendations(clauses):
            page.wrapped(f"- {recommendation}", 80)
            page.y -= 5

    def _clauses(self, page: _Page, clauses: Sequence[Clause]) -> None:
        page.y -= 30
        page.ensure_space()
        page.text("DETAILED CLAUSE ANALYSIS", size=16, font=FONT_BOLD)

        if not clauses:
            page.y -= 30
            page.text("No detailed clause analysis available", size=12, color=GREY)
            return

        for clause in clauses:
            page.ensure_space(CLAUSE_BREAK_Y)
            risk = _value(clause.risk_score)

            page.y -= 30
            label = CLAUSE_LABELS.get(risk, "[SAFE]")
            heading = f"{label} Clause {clause.clause_number}: {clause.title}"
            page.wrapped(heading, 60, size=14, leading=20, font=FONT_BOLD)
            page.text(f"Risk Level: {risk.upper()}", size=12, color=self._clause_color(risk))

            if clause.summary_en:
                page.y -= 20
                page.wrapped(f"Summary: {clause.summary_en}", 80)
            if clause.suggestion:
                page.y -= 5
                page.wrapped(f"Recommendation: {clause.suggestion}", 80, color=GREEN_TEXT)
            if clause.summary_hi and self.unicode_font:
                page.y -= 5
                page.wrapped(f"सारांश: {clause.summary_hi}", 80, font=self.unicode_font)
            page.y -= 10

    def _plain_summary(self, page: _Page, clauses: Sequence[Clause]) -> None:
        risky_count = sum(1 for c in clauses if _value(c.risk_score) == ClauseRisk.RISKY.value)
        page.y -= 30
        page.ensure_space()
        page.text("PLAIN LANGUAGE SUMMARY", size=16, font=FONT_BOLD)
        page.y -= 25
        summary = (
            f"This contract analysis found {risky_count} high-risk issues that need immediate "
            "attention. We recommend reviewing the flagged clauses with your legal advisor "
            "before signing. This analysis is designed to help you understand potential risks "
            "in plain language."
        )
        page.wrapped(summary, 70, size=12, leading=18)

    def _disclaimer(self, page: _Page) -> None:
        page.y -= 30
        page.ensure_space()
        page.text("LEGAL DISCLAIMER", size=12, font=FONT_BOLD, color=GREY)
        page.y -= 20
        page.wrapped(DISCLAIMER, 70, size=10, color=GREY)

    def _clause_color(self, risk: str) -> tuple[float, float, float]:
        return {
            ClauseRisk.RISKY.value: RISK_COLORS["high"],
            ClauseRisk.CAUTION.value: RISK_COLORS["medium"],
            ClauseRisk.SAFE.value: RISK_COLORS["low"],
        }.get(risk, BLACK)
