"""Fixed substitute content used when the model cannot be reached or understood."""

from contractsathi.infrastructure.ai.prompts.contract_analysis_v1 import (
    ClauseData,
    ContractAnalysisData,
)
from contractsathi.infrastructure.database.models.contract import ClauseRisk, RiskLevel

FALLBACK_CONTRACT_TEXT = """
LEGAL CONTRACT AGREEMENT

This Agreement is entered into between the parties for the provision of legal services.

1. PAYMENT TERMS
Payment shall be made within 30 days of invoice date. Late payments may incur interest charges.

2. TERMINATION CLAUSE
Either party may terminate this agreement with 30 days written notice.

3. LIABILITY LIMITATION
Provider's liability shall not exceed the total amount paid under this agreement.

4. DISPUTE RESOLUTION
Any disputes shall be resolved through binding arbitration in accordance with local laws.

5. CONFIDENTIALITY
Both parties agree to maintain confidentiality of all shared information.

6. GOVERNING LAW
This agreement shall be governed by the laws of India.
"""


def fallback_analysis(prior_risk_level: RiskLevel | None = None) -> ContractAnalysisData:
    """Build the fixed five-clause analysis.

    Aggregate risk is ``high`` unless an earlier analysis of the same text
    assigned a level, in which case that level is kept.
    """
    clauses = [
        ClauseData(
            clause_number=1,
            title="Payment Terms",
            clause_text="Payment shall be made within 30 days of invoice date...",
            summary_en="Standard payment terms with 30-day period",
            summary_hi="30 दिन की अवधि के साथ मानक भुगतान शर्तें",
            risk_score=ClauseRisk.SAFE,
            suggestion="Payment terms are reasonable and standard",
            flag_type="payment",
        ),
        ClauseData(
            clause_number=2,
            title="Termination Clause",
            clause_text="Either party may terminate this agreement with 30 days written notice...",
            summary_en="Mutual termination rights with notice period",
            summary_hi="नोटिस अवधि के साथ पारस्परिक समाप्ति अधिकार",
            risk_score=ClauseRisk.SAFE,
            suggestion="Fair termination clause for both parties",
            flag_type="termination",
        ),
        ClauseData(
            clause_number=3,
            title="Liability Limitation",
            clause_text="Provider's liability shall not exceed the total amount paid...",
            summary_en="Limited liability clause to cap damages",
            summary_hi="नुकसान को सीमित करने के लिए सीमित दायित्व खंड",
            risk_score=ClauseRisk.CAUTION,
            suggestion="Review if liability cap is appropriate for your needs",
            flag_type="liability",
        ),
        ClauseData(
            clause_number=4,
            title="Dispute Resolution",
            clause_text="Any disputes shall be resolved through binding arbitration...",
            summary_en="Binding arbitration replaces court proceedings",
            summary_hi="विवादों का निपटारा अदालत के बजाय बाध्यकारी मध्यस्थता से होगा",
            risk_score=ClauseRisk.RISKY,
            suggestion="Specify the arbitration seat, rules and number of arbitrators",
            flag_type="arbitration",
        ),
        ClauseData(
            clause_number=5,
            title="Confidentiality",
            clause_text="Both parties agree to maintain confidentiality of all shared information...",
            summary_en="Mutual confidentiality obligation without a time limit",
            summary_hi="बिना समय सीमा के पारस्परिक गोपनीयता दायित्व",
            risk_score=ClauseRisk.CAUTION,
            suggestion="Define confidential information and the duration of the obligation",
            flag_type="confidentiality",
        ),
    ]

    return ContractAnalysisData(
        contract_type="Legal Service Agreement",
        risk_score=prior_risk_level or RiskLevel.HIGH,
        jurisdiction="India",
        arbitration_present=True,
        clauses=clauses,
        hindi_summary=(
            "स्वचालित विश्लेषण उपलब्ध नहीं था। यह एक मानक सेवा अनुबंध का सामान्य "
            "मूल्यांकन है; कृपया किसी वकील से समीक्षा कराएं।"
        ),
        executive_summary=(
            "Automated analysis was unavailable, so a generic assessment of a standard "
            "service agreement is shown. Have the contract reviewed by a lawyer."
        ),
        red_flags=["Automated analysis unavailable; manual review required"],
        client_context=None,
        source="fallback",
    )
