"""
WealthWise

Personal finance assistant that turns natural-language transactions into
categorized records, flags recurring expenses, and produces AI spending
insights and budget alerts.
"""

__version__ = "1.0.0"

# Expose main classes for easy imports
from .core.categories import ALL_CATEGORIES, Category
from .core.transaction_manager import TransactionManager
from .storage.document_store import DocumentStore, InMemoryDocumentStore
from .transaction_service import TransactionService

__all__ = [
    'ALL_CATEGORIES',
    'Category',
    'TransactionManager',
    'DocumentStore',
    'InMemoryDocumentStore',
    'TransactionService',
]
