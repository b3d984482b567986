"""
LLM Categorizer

Turns a natural-language transaction ("spent 25 dollars on lunch with
friends") into a description, amount and category using Claude.
The category is always one of ALL_CATEGORIES; anything the model
invents is clamped to "Other".
"""
import math
import logging
from typing import Dict, Optional

from .categories import (
    ALL_CATEGORIES,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    Category,
    is_known_category,
)
from .exceptions import CategorizationError, InvalidInputError, LLMError
from .llm_client import LLMClient
from .models import CategorizationResult


logger = logging.getLogger(__name__)


class LLMCategorizer:
    """
    Categorizes free-text transactions using Claude API
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        """
        Args:
            llm_client: Configured client (defaults to one built from env vars)
        """
        self.llm_client = llm_client or LLMClient()

    def build_prompt(self, text: str) -> str:
        """Build the categorization prompt for one transaction"""
        return f"""You are the Auto Categorization Agent for the WealthWise app. Your job is to classify each financial transaction into a spending category.
Analyze the following text and extract the transaction details.
The currency is assumed to be USD unless specified otherwise.

Assign one category from this list for expenses: {', '.join(EXPENSE_CATEGORIES)}.
For income, use one of: {', '.join(INCOME_CATEGORIES)}.
If unsure, choose "Other".
Be consistent across similar merchants (e.g., Starbucks -> Food & Dining, Uber -> Transport).

TEXT:
{text}

Respond with ONLY a JSON object (no markdown, no explanations):
{{
  "description": "Concise description of the transaction",
  "amount": 25.00,
  "category": "Category Name"
}}

Rules:
- category must be exactly one of: {', '.join(ALL_CATEGORIES)}
- amount must be a positive number
- description should be max 8 words"""

    def categorize(self, text: str) -> CategorizationResult:
        """
        Categorize one natural-language transaction

        Args:
            text: Raw user text, e.g. "spent 20 dollars on groceries"

        Returns:
            CategorizationResult with description, amount and category

        Raises:
            InvalidInputError: if text is empty (no model call is made)
            CategorizationError: if the model fails or returns unusable data
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Transaction text is required")

        try:
            result = self.llm_client.complete_json(self.build_prompt(text.strip()), max_tokens=300)
        except LLMError as e:
            raise CategorizationError(f"Categorization failed: {e}") from e

        return self.parse_result(result)

    def parse_result(self, result: Dict) -> CategorizationResult:
        """
        Validate a model response at the schema boundary

        Raises:
            CategorizationError: if description or amount are missing/invalid
        """
        description = result.get('description')
        if not isinstance(description, str) or not description.strip():
            raise CategorizationError(f"Model response missing description: {result}")

        amount = _parse_amount(result.get('amount'))
        if amount is None:
            raise CategorizationError(f"Model response has invalid amount: {result.get('amount')!r}")

        label = result.get('category')
        category = Category.from_label(label)
        if not is_known_category(label):
            logger.warning("Model suggested non-canonical category %r, using %r", label, category.value)

        return CategorizationResult(
            description=description.strip(),
            amount=amount,
            category=category.value,
        )


def _parse_amount(value) -> Optional[float]:
    """Positive float from a model amount, or None when unusable"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace('$', '').replace(',', '').strip()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None

    if math.isnan(amount) or math.isinf(amount) or amount == 0:
        return None
    return abs(amount)
