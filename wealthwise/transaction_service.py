"""
Transaction Service

Runs the transaction pipeline for a user and writes its results to the
user's document collections:
- transactions: the categorized transaction
- recurring_expenses: a copy of it when flagged recurring
- insights: one document per insight message
- alerts: one document per budget alert (unread)

Also hosts the direct CRUD actions used by manual entry forms and the
voice command handler, the chat assistant turn, and the payment flow
(fraud scoring, then a record in the payments collection).
"""
import os
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv

from .core.categories import Category
from .core.chat_assistant import ADD_TRANSACTION_TOOL, ChatAssistant, clean_message
from .core.exceptions import InvalidInputError, TransactionProcessingError
from .core.llm_categorizer import LLMCategorizer
from .core.models import ActionResult, Budget, PaymentResult, Transaction, utcnow
from .core.payment_analyzer import PaymentAnalyzer
from .core.transaction_manager import TransactionManager, coerce_budgets
from .storage.document_store import (
    ALERTS,
    INSIGHTS,
    PAYMENTS,
    RECURRING_EXPENSES,
    TRANSACTIONS,
    DocumentStore,
    check_user,
)


load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_BUDGETS_FILE = Path(__file__).parent / "data" / "default_budgets.json"

PAYMENT_STATUSES = ('ok', 'flagged', 'error')

CHAT_FALLBACK = "I didn’t quite get that. Can you rephrase?"
CHAT_ERROR = "Sorry, I ran into an unexpected issue."


def load_budgets(budgets_file: Optional[Path] = None) -> List[Budget]:
    """
    Load the budget table from JSON

    Args:
        budgets_file: Path to a budgets JSON file (default: WEALTHWISE_BUDGETS_FILE
            env var, then the packaged default table)
    """
    path = budgets_file or os.getenv('WEALTHWISE_BUDGETS_FILE') or DEFAULT_BUDGETS_FILE
    with open(path) as f:
        raw_data = json.load(f)

    # Accept either {"budgets": [...]} or a bare list
    if isinstance(raw_data, dict):
        raw_data = raw_data.get('budgets', [])
    return coerce_budgets(raw_data)


def _validate_entry(description: str, amount: float):
    if not isinstance(description, str) or not description.strip():
        raise InvalidInputError("Description is required")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        raise InvalidInputError("Amount must be a positive number")


class TransactionService:
    """
    Processes and stores transactions for users
    """

    def __init__(self,
                 store: DocumentStore,
                 manager: Optional[TransactionManager] = None,
                 budgets: Optional[Iterable[Any]] = None,
                 payment_analyzer: Optional[PaymentAnalyzer] = None,
                 assistant: Optional[ChatAssistant] = None):
        """
        Args:
            store: Document store holding the per-user collections
            manager: Transaction manager (default: Claude-backed)
            budgets: Budget table (default: load_budgets())
            payment_analyzer: Fraud scorer (default: shares the manager's LLM client)
            assistant: Chat assistant (default: shares the manager's LLM client)
        """
        self.store = store
        self.manager = manager or TransactionManager()
        self.budgets = coerce_budgets(budgets) if budgets is not None else load_budgets()

        llm_client = getattr(self.manager.categorizer, 'llm_client', None)
        self.payment_analyzer = payment_analyzer or PaymentAnalyzer(llm_client)
        self.assistant = assistant or ChatAssistant(llm_client)

    def process_and_save(self, user_id: str, raw_input: str) -> str:
        """
        Run the full pipeline on raw text and persist the results

        Args:
            user_id: Owner of the transaction
            raw_input: Natural-language transaction text

        Returns:
            Confirmation message for the user

        Raises:
            InvalidInputError: if user_id or raw_input is missing
            TransactionProcessingError: if processing or saving fails
        """
        check_user(user_id)
        if not isinstance(raw_input, str) or not raw_input.strip():
            raise InvalidInputError("Transaction text is required")

        try:
            past_transactions = self.get_transactions(user_id)
            result = self.manager.process(raw_input, past_transactions, self.budgets)
        except InvalidInputError:
            raise
        except Exception as e:
            logger.error("Transaction pipeline failed for user %s: %s", user_id, e)
            raise TransactionProcessingError('Failed to process and save transaction.') from e

        now = utcnow()
        transaction_doc = {
            'description': result.description,
            'amount': result.amount,
            'category': result.category,
            'type': result.type,
            'date': now,
        }

        try:
            self.store.append(user_id, TRANSACTIONS, transaction_doc)

            if result.recurring:
                self.store.append(user_id, RECURRING_EXPENSES, dict(
                    transaction_doc,
                    recurring=True,
                    reason=result.recurring_reason,
                ))

            for insight in result.insights:
                self.store.append(user_id, INSIGHTS, {'message': insight, 'date': now})

            for alert in result.alerts:
                self.store.append(user_id, ALERTS, {'message': alert, 'date': now, 'read': False})
        except Exception as e:
            logger.error("Saving processed transaction failed for user %s: %s", user_id, e)
            raise TransactionProcessingError('Failed to process and save transaction.') from e

        logger.info("Saved transaction for user %s: %s %.2f (%s)",
                    user_id, result.description, result.amount, result.category)
        return (f"Transaction: {result.description} for ${result.amount:.2f} "
                f"has been added under {result.category}.")

    def add_transaction(self, user_id: str, text: str) -> ActionResult:
        """
        Categorize text and save it, skipping insights and alerts

        Used by the voice command handler. Never raises; failures come
        back as an unsuccessful ActionResult with a user-facing message.
        """
        if not user_id:
            return ActionResult(
                success=False,
                message="I'm sorry, I wasn't able to add this transaction. "
                        "User ID is required to add a transaction.",
            )

        try:
            categorized = self.manager.categorizer.categorize(text)
            self.store.append(user_id, TRANSACTIONS, {
                'description': categorized.description,
                'amount': categorized.amount,
                'category': categorized.category,
                'type': categorized.type,
                'date': utcnow(),
            })
        except Exception:
            logger.exception("Error adding transaction for user %s", user_id)
            return ActionResult(
                success=False,
                message="There was an error adding the transaction. Please try again.",
            )

        return ActionResult(
            success=True,
            message=f'Transaction "{categorized.description}" was added successfully.',
        )

    def add_manual_transaction(self,
                               user_id: str,
                               description: str,
                               amount: float,
                               category: str,
                               date: Optional[datetime] = None) -> str:
        """
        Save a transaction entered by hand

        Returns:
            The new transaction id

        Raises:
            InvalidInputError: on missing user, description or non-positive amount
        """
        check_user(user_id)
        _validate_entry(description, amount)

        transaction = Transaction(
            description=description.strip(),
            amount=float(amount),
            category=Category.from_label(category).value,
            date=date or utcnow(),
        )
        return self.store.append(user_id, TRANSACTIONS, transaction.to_document())

    def update_transaction(self,
                           user_id: str,
                           transaction_id: str,
                           description: str,
                           amount: float,
                           category: str,
                           date: datetime):
        """Replace a transaction's fields; type follows the new category"""
        check_user(user_id)
        _validate_entry(description, amount)

        transaction = Transaction(
            description=description.strip(),
            amount=float(amount),
            category=Category.from_label(category).value,
            date=date,
        )
        self.store.update(user_id, TRANSACTIONS, transaction_id, transaction.to_document())

    def delete_transaction(self, user_id: str, transaction_id: str):
        check_user(user_id)
        self.store.delete(user_id, TRANSACTIONS, transaction_id)

    def get_transactions(self, user_id: str) -> List[Transaction]:
        """User's transactions, newest first; malformed documents are skipped"""
        transactions = []
        for doc in self.store.list(user_id, TRANSACTIONS):
            try:
                transactions.append(Transaction.from_document(doc, doc.get('id')))
            except (ValueError, TypeError) as e:
                logger.warning("Skipping malformed transaction %s: %s", doc.get('id'), e)
        return transactions

    def get_recurring_expenses(self, user_id: str) -> List[Dict[str, Any]]:
        return self.store.list(user_id, RECURRING_EXPENSES)

    def get_insights(self, user_id: str) -> List[Dict[str, Any]]:
        return self.store.list(user_id, INSIGHTS)

    def get_alerts(self, user_id: str, unread_only: bool = False) -> List[Dict[str, Any]]:
        alerts = self.store.list(user_id, ALERTS)
        if unread_only:
            alerts = [a for a in alerts if not a.get('read')]
        return alerts

    def mark_alert_read(self, user_id: str, alert_id: str):
        self.store.update(user_id, ALERTS, alert_id, {'read': True})

    def log_payment(self,
                    user_id: str,
                    amount: float,
                    currency: str,
                    risk_score: float,
                    status: str,
                    error: Optional[str] = None) -> Optional[str]:
        """
        Record a payment attempt in the payments collection

        Storage failures are logged and swallowed so the payment flow that
        called this is never interrupted.

        Returns:
            The payment document id, or None if it could not be saved
        """
        if status not in PAYMENT_STATUSES:
            raise ValueError(f"Unknown payment status: {status!r}")

        document = {
            'uid': user_id,
            'amount': amount,
            'currency': currency,
            'riskScore': risk_score,
            'status': status,
            'date': utcnow(),
        }
        if error:
            document['error'] = error

        try:
            return self.store.append(user_id, PAYMENTS, document)
        except Exception as e:
            logger.error("Error logging payment for user %s: %s", user_id, e)
            return None

    def process_payment(self, user_id: str, amount: float, currency: str = 'usd') -> PaymentResult:
        """
        Score a payment for fraud and record the outcome

        Payments scoring above the high-risk threshold are flagged for review.
        Any failure is recorded with a risk score of -1 and reported as an
        'error' result rather than raised.

        Raises:
            InvalidInputError: if user_id is missing (nowhere to record it)
        """
        check_user(user_id)

        try:
            assessment = self.payment_analyzer.analyze(user_id, amount, currency)
        except Exception as e:
            logger.error("Error in payment flow for user %s: %s", user_id, e)
            payment_id = self.log_payment(user_id, amount, currency, -1, 'error', error=str(e))
            return PaymentResult(
                status='error',
                message='An unexpected error occurred.',
                payment_id=payment_id,
            )

        if assessment.is_high_risk:
            logger.warning("Payment flagged for user %s with risk score %s",
                           user_id, assessment.risk_score)
            payment_id = self.log_payment(user_id, amount, currency, assessment.risk_score, 'flagged')
            return PaymentResult(
                status='flagged',
                message='This transaction has been flagged for review due to a high risk score.',
                risk_score=assessment.risk_score,
                payment_id=payment_id,
            )

        payment_id = self.log_payment(user_id, amount, currency, assessment.risk_score, 'ok')
        return PaymentResult(status='ok', risk_score=assessment.risk_score, payment_id=payment_id)

    def chat(self,
             user_id: str,
             message: str,
             history: Optional[Iterable[Dict[str, Any]]] = None) -> str:
        """
        Answer one chat turn

        When the model asks to add a transaction, the description goes
        through add_transaction and its message is the reply. Never raises.
        """
        try:
            reply = self.assistant.respond(message, history)
        except InvalidInputError:
            return CHAT_FALLBACK
        except Exception:
            logger.exception("Unexpected error in chat for user %s", user_id)
            return CHAT_ERROR

        if reply.wants_tool:
            if reply.tool_name != ADD_TRANSACTION_TOOL:
                logger.warning("Model requested unknown tool %r", reply.tool_name)
                return CHAT_FALLBACK
            description = reply.tool_input.get('description')
            if not isinstance(description, str) or not description.strip():
                description = clean_message(message)
            return self.add_transaction(user_id, description).message

        return reply.text or CHAT_FALLBACK


def build_default_service(store: Optional[DocumentStore] = None) -> TransactionService:
    """Service wired to Postgres and Claude from environment settings"""
    if store is None:
        from .storage.postgres_store import PostgresDocumentStore
        store = PostgresDocumentStore()
    return TransactionService(store=store, manager=TransactionManager(LLMCategorizer()))
