from datetime import datetime, timezone

from wealthwise.core.models import CategorizationResult, Transaction
from wealthwise.core.recurring_detector import (
    REASON_HISTORY,
    REASON_KEYWORD,
    RecurringExpenseDetector,
)


def _past(description, amount, day=1):
    return Transaction(
        description=description,
        amount=amount,
        category='Food & Dining',
        date=datetime(2024, 6, day, tzinfo=timezone.utc),
    )


def test_keyword_marks_recurring():
    detector = RecurringExpenseDetector()
    txn = CategorizationResult('Netflix Subscription', 15.99, 'Entertainment')

    result = detector.check(txn, [])

    assert result.is_recurring
    assert result.reason == REASON_KEYWORD


def test_keyword_match_ignores_amount_and_case():
    detector = RecurringExpenseDetector()
    for description in ('Monthly RENT', 'gym fee', 'Spotify premium', 'Costco Membership'):
        assert detector.check({'description': description, 'amount': 9999}, []).is_recurring


def test_two_similar_past_transactions_mark_recurring():
    detector = RecurringExpenseDetector()
    history = [_past('Coffee', 4.50, 1), _past('Coffee', 4.75, 2)]

    result = detector.check(CategorizationResult('Coffee', 4.60, 'Food & Dining'), history)

    assert result.is_recurring
    assert result.reason == REASON_HISTORY


def test_single_similar_past_transaction_is_not_enough():
    detector = RecurringExpenseDetector()
    history = [_past('Coffee', 4.50)]
    assert not detector.check(CategorizationResult('Coffee', 4.60, 'Food & Dining'), history).is_recurring


def test_amount_outside_tolerance_is_not_similar():
    detector = RecurringExpenseDetector()
    history = [_past('Coffee', 4.50), _past('Coffee', 6.00)]
    assert not detector.check(CategorizationResult('Coffee', 5.00, 'Food & Dining'), history).is_recurring


def test_description_comparison_is_case_insensitive_but_exact():
    detector = RecurringExpenseDetector()
    history = [_past('coffee', 4.50), _past('COFFEE', 4.50), _past('Coffee beans', 4.50)]
    assert detector.check(CategorizationResult('Coffee', 4.50, 'Food & Dining'), history).is_recurring


def test_new_description_is_not_recurring():
    detector = RecurringExpenseDetector()
    result = detector.check(CategorizationResult('Concert tickets', 80, 'Entertainment'), [_past('Coffee', 4.5)])
    assert not result.is_recurring
    assert result.reason is None


def test_malformed_history_entries_are_skipped():
    detector = RecurringExpenseDetector()
    history = [
        {'description': 'Coffee', 'amount': 'n/a'},
        {'amount': 4.5},
        None,
        {'description': 'Coffee', 'amount': 4.5},
    ]
    assert not detector.check({'description': 'Coffee', 'amount': 4.5}, history).is_recurring


def test_malformed_transaction_is_not_recurring():
    assert not RecurringExpenseDetector().check({'amount': 5}, []).is_recurring


def test_check_is_pure():
    detector = RecurringExpenseDetector()
    history = [_past('Coffee', 4.50, 1), _past('Coffee', 4.75, 2)]
    txn = CategorizationResult('Coffee', 4.60, 'Food & Dining')

    first = detector.check(txn, history)
    second = detector.check(txn, history)

    assert first == second
    assert len(history) == 2
