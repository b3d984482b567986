import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from wealthwise.core.llm_categorizer import LLMCategorizer
from wealthwise.core.llm_client import LLMClient
from wealthwise.core.spending_insights import SpendingInsightGenerator
from wealthwise.core.transaction_manager import TransactionManager
from wealthwise.storage.document_store import InMemoryDocumentStore


NOW = datetime(2024, 7, 20, 12, 0, tzinfo=timezone.utc)


class FakeMessages:
    """Stands in for anthropic.Anthropic().messages"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.responses:
            raise RuntimeError("No canned response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, SimpleNamespace):
            return response
        if isinstance(response, dict):
            response = json.dumps(response)
        return SimpleNamespace(content=[SimpleNamespace(text=response)])


class FakeAnthropic:
    def __init__(self, *responses):
        self.messages = FakeMessages(responses)


def make_llm(*responses):
    return LLMClient(client=FakeAnthropic(*responses))


def make_manager(*responses):
    llm = make_llm(*responses)
    return TransactionManager(
        categorizer=LLMCategorizer(llm),
        insight_generator=SpendingInsightGenerator(llm),
    )


INSIGHTS_REPLY = {
    'spendingAnalysis': 'Food spending is on track.',
    'savingsSuggestions': 'Cook at home twice a week.',
}


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def budgets():
    return [
        {'category': 'Food & Dining', 'limit': 400},
        {'category': 'Transport', 'limit': 150},
        {'category': 'Entertainment', 'limit': 100},
    ]


def text_block(text):
    return SimpleNamespace(type='text', text=text)


def tool_block(name, tool_input):
    return SimpleNamespace(type='tool_use', name=name, input=tool_input)


def reply(*blocks):
    return SimpleNamespace(content=list(blocks))
