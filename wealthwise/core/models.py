"""
Data structures shared by the transaction pipeline
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from .categories import Category, transaction_type


# Payments scoring above this are held for review
HIGH_RISK_THRESHOLD = 80


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Any) -> datetime:
    """
    Coerce a stored date into an aware datetime

    Accepts datetimes, dates and ISO-8601 strings. Naive values are
    taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    else:
        raise ValueError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def positive_amount(value: Any, label: str = 'Amount') -> float:
    """
    Coerce a stored amount to a finite float greater than zero

    Raises:
        ValueError: if the value is missing, non-numeric, non-finite or <= 0
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"{label} missing: {value!r}")
    amount = float(value)
    if not math.isfinite(amount) or amount <= 0:
        raise ValueError(f"{label} must be a positive number: {value!r}")
    return amount


@dataclass
class Transaction:
    """A persisted financial event"""
    description: str
    amount: float
    category: str
    date: datetime = field(default_factory=utcnow)
    id: Optional[str] = None

    @property
    def type(self) -> str:
        return transaction_type(self.category)

    @classmethod
    def from_document(cls, doc: Dict[str, Any], doc_id: Optional[str] = None) -> 'Transaction':
        """
        Build a transaction from a store document or request payload

        Raises:
            ValueError: if description, amount or date are missing or malformed
        """
        description = doc.get('description')
        if not isinstance(description, str):
            raise ValueError(f"Transaction description missing: {doc!r}")

        amount = positive_amount(doc.get('amount'), 'Transaction amount')

        return cls(
            id=doc_id or doc.get('id'),
            date=parse_date(doc.get('date')) if doc.get('date') is not None else utcnow(),
            description=description,
            amount=amount,
            category=Category.from_label(doc.get('category')).value,
        )

    def to_document(self) -> Dict[str, Any]:
        """Document shape written to the transactions collection"""
        return {
            'description': self.description,
            'amount': self.amount,
            'category': self.category,
            'type': self.type,
            'date': self.date,
        }


@dataclass
class Budget:
    """Monthly spending ceiling for one category"""
    category: str
    limit: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        return cls(category=str(data['category']), limit=positive_amount(data['limit'], 'Budget limit'))

    def to_dict(self) -> Dict[str, Any]:
        return {'category': self.category, 'limit': self.limit}


@dataclass
class CategorizationResult:
    """Structured output of the categorizer"""
    description: str
    amount: float
    category: str

    @property
    def type(self) -> str:
        return transaction_type(self.category)


@dataclass
class RecurrenceResult:
    is_recurring: bool
    reason: Optional[str] = None


@dataclass
class SpendingInsights:
    """Advisory text returned by the insight model"""
    spending_analysis: str = ''
    savings_suggestions: str = ''

    def messages(self) -> List[str]:
        """Non-empty insight strings, analysis first"""
        return [m for m in (self.spending_analysis, self.savings_suggestions) if m]


@dataclass
class ProcessTransactionResult:
    """Consolidated result of processing one raw transaction"""
    description: str
    amount: float
    category: str
    recurring: bool
    insights: List[str] = field(default_factory=list)
    alerts: List[str] = field(default_factory=list)
    recurring_reason: Optional[str] = None

    @property
    def type(self) -> str:
        return transaction_type(self.category)

    def to_dict(self) -> Dict[str, Any]:
        """Response shape returned to web callers"""
        return {
            'transaction': {
                'description': self.description,
                'amount': self.amount,
            },
            'category': self.category,
            'recurring': self.recurring,
            'insights': list(self.insights),
            'alerts': list(self.alerts),
        }


@dataclass
class ActionResult:
    """Outcome of a user-facing action that never raises"""
    success: bool
    message: str


@dataclass
class RiskAssessment:
    """Fraud risk for one payment, 0 (safe) to 100 (certain fraud)"""
    risk_score: float
    reasoning: str = ''

    @property
    def is_high_risk(self) -> bool:
        return self.risk_score > HIGH_RISK_THRESHOLD


@dataclass
class PaymentResult:
    """Outcome of a payment request"""
    status: str
    message: Optional[str] = None
    risk_score: float = -1
    payment_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'status': self.status}
        if self.message:
            result['message'] = self.message
        if self.payment_id:
            result['paymentId'] = self.payment_id
        return result


@dataclass
class ChatReply:
    """What the assistant said, or which tool it asked for"""
    text: str = ''
    tool_name: Optional[str] = None
    tool_input: Dict[str, Any] = field(default_factory=dict)

    @property
    def wants_tool(self) -> bool:
        return self.tool_name is not None
