"""
WealthWise exceptions
"""


class WealthWiseError(Exception):
    """Base class for all WealthWise errors"""


class InvalidInputError(WealthWiseError, ValueError):
    """Raised before any remote call when the request itself is unusable"""


class LLMError(WealthWiseError):
    """The hosted model could not produce a usable response"""


class CategorizationError(LLMError):
    """Categorization failed; the transaction must not be persisted"""


class InsightError(LLMError):
    """Spending insight generation failed"""


class TransactionProcessingError(WealthWiseError):
    """Generic pipeline failure surfaced to end users"""


class DocumentNotFound(WealthWiseError, KeyError):
    """No document with the given id exists in the collection"""


class RiskAnalysisError(LLMError):
    """Payment risk analysis failed"""
