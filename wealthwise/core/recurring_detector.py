"""
Recurring Expense Detector

Rule-based check for whether a new transaction is likely to repeat:
1. Description contains a subscription-style keyword
2. More than one past transaction with the same description and an
   amount within AMOUNT_TOLERANCE
"""
import logging
from typing import Any, Iterable, Optional, Tuple

from .models import RecurrenceResult


logger = logging.getLogger(__name__)

RECURRING_KEYWORDS = ('netflix', 'rent', 'gym', 'spotify', 'subscription', 'membership')

AMOUNT_TOLERANCE = 1.0

REASON_KEYWORD = 'keyword match'
REASON_HISTORY = 'multiple similar transactions found'


class RecurringExpenseDetector:
    """
    Flags recurring expenses from keywords and transaction history
    """

    def __init__(self,
                 keywords: Iterable[str] = RECURRING_KEYWORDS,
                 amount_tolerance: float = AMOUNT_TOLERANCE):
        self.keywords = tuple(k.lower() for k in keywords)
        self.amount_tolerance = amount_tolerance

    def check(self, transaction: Any, past_transactions: Iterable[Any]) -> RecurrenceResult:
        """
        Decide whether a transaction is recurring

        Args:
            transaction: New transaction (object or dict with description, amount)
            past_transactions: The user's history (objects or dicts)

        Returns:
            RecurrenceResult; malformed input yields a non-recurring result
        """
        fields = _description_and_amount(transaction)
        if fields is None:
            logger.warning("Skipping recurrence check for malformed transaction: %r", transaction)
            return RecurrenceResult(is_recurring=False)

        description, amount = fields

        # Rule 1: keyword
        if any(keyword in description for keyword in self.keywords):
            return RecurrenceResult(is_recurring=True, reason=REASON_KEYWORD)

        # Rule 2: repeated history
        similar = 0
        for past in past_transactions or ():
            past_fields = _description_and_amount(past)
            if past_fields is None:
                continue
            past_description, past_amount = past_fields
            if past_description == description and abs(past_amount - amount) < self.amount_tolerance:
                similar += 1

        if similar > 1:
            return RecurrenceResult(is_recurring=True, reason=REASON_HISTORY)

        return RecurrenceResult(is_recurring=False)


def _description_and_amount(entry: Any) -> Optional[Tuple[str, float]]:
    """Lower-cased description and float amount, or None if malformed"""
    if isinstance(entry, dict):
        description = entry.get('description')
        amount = entry.get('amount')
    else:
        description = getattr(entry, 'description', None)
        amount = getattr(entry, 'amount', None)

    if not isinstance(description, str) or amount is None or isinstance(amount, bool):
        return None
    try:
        return description.lower(), float(amount)
    except (TypeError, ValueError):
        return None
