"""
Transaction pipeline: categorization, recurrence, insights and alerts,
plus payment risk scoring and the chat assistant
"""
from .budget_alerts import generate_budget_alerts
from .chat_assistant import ChatAssistant
from .llm_categorizer import LLMCategorizer
from .payment_analyzer import PaymentAnalyzer
from .recurring_detector import RecurringExpenseDetector
from .spending_insights import SpendingInsightGenerator
from .transaction_manager import TransactionManager

__all__ = [
    'generate_budget_alerts',
    'ChatAssistant',
    'LLMCategorizer',
    'PaymentAnalyzer',
    'RecurringExpenseDetector',
    'SpendingInsightGenerator',
    'TransactionManager',
]
