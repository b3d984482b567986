"""
Spending Insights

Aggregates month-to-date expenses and asks Claude for a spending
analysis and savings suggestions. Also generates standalone savings
plans from income, expenses and a free-text goal.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .budget_alerts import round_half_up
from .exceptions import InsightError, LLMError
from .llm_client import LLMClient
from .models import Budget, SpendingInsights, Transaction, utcnow


logger = logging.getLogger(__name__)


def aggregate_monthly_expenses(transactions: Iterable[Transaction],
                               now: Optional[datetime] = None) -> Dict[str, float]:
    """
    Sum this calendar month's expenses per category

    Args:
        transactions: The user's history
        now: Reference time (default: current UTC time)

    Returns:
        Dict of category -> total, in first-seen order
    """
    now = now or utcnow()
    totals: Dict[str, float] = {}

    for txn in transactions:
        if txn.type != 'expense':
            continue
        if (txn.date.year, txn.date.month) != (now.year, now.month):
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount

    return totals


def total_income(transactions: Iterable[Transaction]) -> float:
    """Sum of all income transactions, across every period"""
    return sum(txn.amount for txn in transactions if txn.type == 'income')


def _format_money(value: float) -> str:
    if value == round_half_up(value):
        return f"{value:.0f}"
    return f"{value:.2f}"


class SpendingInsightGenerator:
    """
    Generates AI spending analysis and savings suggestions
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm_client = llm_client or LLMClient()

    def generate(self,
                 income: float,
                 expenses: Mapping[str, float],
                 budget_limits: Iterable[Budget]) -> SpendingInsights:
        """
        Ask the model for a spending analysis

        Args:
            income: Total income
            expenses: Category -> amount spent this month
            budget_limits: Configured budgets

        Returns:
            SpendingInsights (advisory text only)

        Raises:
            InsightError: if the model call fails or the reply is unusable
        """
        expense_lines = [
            f"- Category: {category}, Amount: {_format_money(amount)}"
            for category, amount in expenses.items()
        ] or ["- (no expenses this month)"]
        budget_lines = [
            f"- Category: {budget.category}, Limit: {_format_money(budget.limit)}"
            for budget in budget_limits
        ] or ["- (no budgets configured)"]

        prompt = f"""You are a personal finance advisor providing insights and advice based on spending data.

Analyze the following income, expenses, and budget limits to identify spending patterns, trends, and potential areas for savings.

Income: {_format_money(income)}

Expenses:
{chr(10).join(expense_lines)}

Budget Limits:
{chr(10).join(budget_lines)}

The spendingAnalysis should explain where the user is overspending, where they are doing well, and any notable trends.
The savingsSuggestions should be concrete and easy to implement.

Respond with ONLY a JSON object (no markdown, no preamble):
{{
  "spendingAnalysis": "...",
  "savingsSuggestions": "..."
}}"""

        try:
            result = self.llm_client.complete_json(prompt, max_tokens=1000)
        except LLMError as e:
            raise InsightError(f"Spending insights failed: {e}") from e

        analysis = result.get('spendingAnalysis')
        suggestions = result.get('savingsSuggestions')
        if not isinstance(analysis, str) or not isinstance(suggestions, str):
            raise InsightError(f"Insight response missing required fields: {result}")

        return SpendingInsights(
            spending_analysis=analysis.strip(),
            savings_suggestions=suggestions.strip(),
        )

    def suggest_savings_plans(self,
                              income: float,
                              expenses: Mapping[str, float],
                              budget_goals: str) -> List[str]:
        """
        Generate personalized savings plans

        Args:
            income: Monthly income
            expenses: Category -> monthly amount
            budget_goals: The user's own description of their goals

        Returns:
            List of savings plan strings

        Raises:
            InsightError: if the model call fails or the reply is unusable
        """
        expense_lines = [
            f"- {category}: {_format_money(amount)}" for category, amount in expenses.items()
        ]

        prompt = f"""You are a financial advisor who specializes in creating personalized savings plans.

Based on the user's income, expenses, and budgeting goals, generate a list of savings plans that the user can implement to improve their financial health.

Income: {_format_money(income)}
Expenses:
{chr(10).join(expense_lines) or '- (none)'}
Budgeting Goals: {budget_goals}

Respond with ONLY a JSON object:
{{"savingsPlans": ["...", "..."]}}"""

        try:
            result = self.llm_client.complete_json(prompt, max_tokens=1000)
        except LLMError as e:
            raise InsightError(f"Savings plan generation failed: {e}") from e

        plans: Any = result.get('savingsPlans')
        if not isinstance(plans, list):
            raise InsightError(f"Savings plan response missing savingsPlans: {result}")
        return [str(plan).strip() for plan in plans if str(plan).strip()]
