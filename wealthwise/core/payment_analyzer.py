"""
Payment Analyzer

Asks Claude for a fraud risk score before a payment goes through.
"""
import logging
import math
from typing import Any, Dict, Optional

from .exceptions import InvalidInputError, LLMError, RiskAnalysisError
from .llm_client import LLMClient
from .models import HIGH_RISK_THRESHOLD, RiskAssessment


logger = logging.getLogger(__name__)


class PaymentAnalyzer:
    """
    Scores payments for fraud risk using Claude API
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm_client = llm_client or LLMClient()

    def build_prompt(self, uid: str, amount: float, currency: str) -> str:
        return f"""You are a fraud detection expert for a financial application.
Analyze the following transaction details and provide a risk score from 0-100.
A score above {HIGH_RISK_THRESHOLD} should be considered high risk.
Consider factors like amount, currency, and user history if available (not provided here, so focus on general patterns).
Large, unusual amounts should have higher risk scores.

Transaction:
- User ID: {uid}
- Amount: {amount}
- Currency: {currency}

Respond with ONLY a JSON object (no markdown, no explanations):
{{
  "risk_score": 12,
  "reasoning": "Brief explanation for the score"
}}"""

    def analyze(self, uid: str, amount: float, currency: str) -> RiskAssessment:
        """
        Score one payment

        Args:
            uid: Paying user
            amount: Payment amount
            currency: ISO currency code, e.g. "usd"

        Returns:
            RiskAssessment with a score clamped to 0-100

        Raises:
            InvalidInputError: if uid, amount or currency is unusable (no model call)
            RiskAnalysisError: if the model fails or returns no usable score
        """
        if not uid:
            raise InvalidInputError("User ID is required")
        if (isinstance(amount, bool) or not isinstance(amount, (int, float))
                or not math.isfinite(amount) or amount <= 0):
            raise InvalidInputError("Amount must be a positive number")
        if not isinstance(currency, str) or not currency.strip():
            raise InvalidInputError("Currency is required")

        try:
            result = self.llm_client.complete_json(
                self.build_prompt(uid, amount, currency.strip()), max_tokens=300)
        except LLMError as e:
            raise RiskAnalysisError(f"Fraud analysis failed: {e}") from e

        return self.parse_result(result)

    def parse_result(self, result: Dict[str, Any]) -> RiskAssessment:
        score = result.get('risk_score')
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
            raise RiskAnalysisError(f"Model response has invalid risk_score: {score!r}")

        clamped = min(max(float(score), 0.0), 100.0)
        if clamped != score:
            logger.warning("Risk score %r out of range, clamped to %s", score, clamped)

        reasoning = result.get('reasoning')
        return RiskAssessment(
            risk_score=clamped,
            reasoning=reasoning.strip() if isinstance(reasoning, str) else '',
        )
