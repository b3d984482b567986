"""
Transaction Manager

The main engine that processes one raw transaction description:
1. Categorization (LLM, failure aborts)
2. Recurring expense detection (rules)
3. Spending insights (LLM, failure degrades to no insights)
4. Budget alerts (rules, current category only)
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .budget_alerts import generate_budget_alerts
from .exceptions import InsightError
from .llm_categorizer import LLMCategorizer
from .models import Budget, ProcessTransactionResult, Transaction, positive_amount, utcnow
from .recurring_detector import RecurringExpenseDetector
from .spending_insights import SpendingInsightGenerator, aggregate_monthly_expenses, total_income


logger = logging.getLogger(__name__)


def coerce_transactions(entries: Optional[Iterable[Any]]) -> List[Transaction]:
    """Convert history entries to Transactions, dropping malformed ones"""
    transactions = []
    for entry in entries or ():
        try:
            if isinstance(entry, Transaction):
                positive_amount(entry.amount, 'Transaction amount')
                transactions.append(entry)
            else:
                transactions.append(Transaction.from_document(entry))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring malformed history entry %r: %s", entry, e)
    return transactions


def coerce_budgets(entries: Optional[Iterable[Any]]) -> List[Budget]:
    """Convert budget entries to Budgets, dropping malformed ones"""
    budgets = []
    for entry in entries or ():
        try:
            if isinstance(entry, Budget):
                positive_amount(entry.limit, 'Budget limit')
                budgets.append(entry)
            else:
                budgets.append(Budget.from_dict(entry))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Ignoring malformed budget %r: %s", entry, e)
    return budgets


class TransactionManager:
    """
    Orchestrates categorization, recurrence, insights and alerts
    """

    def __init__(self,
                 categorizer: Optional[LLMCategorizer] = None,
                 insight_generator: Optional[SpendingInsightGenerator] = None,
                 recurring_detector: Optional[RecurringExpenseDetector] = None):
        """
        Args:
            categorizer: Transaction categorizer (default: Claude-backed)
            insight_generator: Spending insight generator (default: Claude-backed)
            recurring_detector: Recurrence rules (default keywords and tolerance)
        """
        self.categorizer = categorizer or LLMCategorizer()
        self.insight_generator = insight_generator or SpendingInsightGenerator(
            getattr(self.categorizer, 'llm_client', None)
        )
        self.recurring_detector = recurring_detector or RecurringExpenseDetector()

        # Stats
        self.stats = {
            'total': 0,
            'recurring': 0,
            'with_alerts': 0,
            'insight_failures': 0,
        }

    def process(self,
                raw_input: str,
                past_transactions: Optional[Iterable[Any]] = None,
                budgets: Optional[Iterable[Any]] = None,
                now: Optional[datetime] = None) -> ProcessTransactionResult:
        """
        Process one raw transaction description

        Args:
            raw_input: Natural-language transaction text
            past_transactions: The user's history (Transactions or dicts)
            budgets: Budget limits (Budgets or dicts)
            now: Reference time for the current month (default: now, UTC)

        Returns:
            ProcessTransactionResult

        Raises:
            InvalidInputError: if raw_input is empty
            CategorizationError: if the model cannot categorize the text
        """
        now = now or utcnow()
        history = coerce_transactions(past_transactions)
        budget_list = coerce_budgets(budgets)

        # Step 1: Categorize
        categorized = self.categorizer.categorize(raw_input)
        self.stats['total'] += 1

        # Step 2: Recurring check
        recurrence = self.recurring_detector.check(categorized, history)
        if recurrence.is_recurring:
            self.stats['recurring'] += 1

        # Step 3: Spending insights
        monthly_expenses = aggregate_monthly_expenses(history, now)
        insights: List[str] = []
        try:
            result = self.insight_generator.generate(
                income=total_income(history),
                expenses=monthly_expenses,
                budget_limits=budget_list,
            )
            insights = result.messages()
        except InsightError as e:
            self.stats['insight_failures'] += 1
            logger.warning("Spending insights unavailable, continuing without them: %s", e)

        # Step 4: Budget alerts for this category only
        alerts: List[str] = []
        budget = next((b for b in budget_list if b.category == categorized.category), None)
        if budget is not None:
            total_spent = monthly_expenses.get(categorized.category, 0.0) + categorized.amount
            alerts = generate_budget_alerts(categorized.category, total_spent, budget.limit)
            if alerts:
                self.stats['with_alerts'] += 1

        return ProcessTransactionResult(
            description=categorized.description,
            amount=categorized.amount,
            category=categorized.category,
            recurring=recurrence.is_recurring,
            recurring_reason=recurrence.reason,
            insights=insights,
            alerts=alerts,
        )

    def process_request(self, request: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Entry point taking and returning the external payload shapes

        request: {rawInput, pastTransactions, budgets}
        """
        result = self.process(
            request.get('rawInput'),
            request.get('pastTransactions'),
            request.get('budgets'),
            now=now,
        )
        return result.to_dict()

    def print_stats(self):
        """Print processing statistics"""
        if self.stats['total'] == 0:
            print("No transactions processed yet")
            return

        total = self.stats['total']

        print("\n" + "=" * 80)
        print("📊 TRANSACTION PROCESSING STATISTICS")
        print("=" * 80)
        print(f"Total transactions: {total}")
        print(f"  • Recurring: {self.stats['recurring']} ({self.stats['recurring']/total*100:.1f}%)")
        print(f"  • With budget alerts: {self.stats['with_alerts']} ({self.stats['with_alerts']/total*100:.1f}%)")
        print(f"  • Insight failures: {self.stats['insight_failures']}")
        print("=" * 80)
