"""
Category Table

The closed set of transaction categories used by the categorizer, the
budget table and the income/expense split.
"""
from enum import Enum
from typing import Optional, Tuple


EXPENSE_CATEGORIES: Tuple[str, ...] = (
    'Food & Dining',
    'Transport',
    'Shopping',
    'Entertainment',
    'Bills & Utilities',
    'Rent & Housing',
    'Health & Fitness',
    'Other',
)

INCOME_CATEGORIES: Tuple[str, ...] = (
    'Salary',
    'Freelance',
    'Investment',
)

# Union of both lists, first occurrence wins
ALL_CATEGORIES: Tuple[str, ...] = tuple(dict.fromkeys(EXPENSE_CATEGORIES + INCOME_CATEGORIES))


class Category(str, Enum):
    """A transaction category label"""
    FOOD_AND_DINING = 'Food & Dining'
    TRANSPORT = 'Transport'
    SHOPPING = 'Shopping'
    ENTERTAINMENT = 'Entertainment'
    BILLS_AND_UTILITIES = 'Bills & Utilities'
    RENT_AND_HOUSING = 'Rent & Housing'
    HEALTH_AND_FITNESS = 'Health & Fitness'
    OTHER = 'Other'
    SALARY = 'Salary'
    FREELANCE = 'Freelance'
    INVESTMENT = 'Investment'

    @classmethod
    def from_label(cls, label: Optional[str]) -> 'Category':
        """
        Resolve a label to a category, falling back to OTHER

        Matching is exact first, then case-insensitive.
        """
        if not label:
            return cls.OTHER

        text = str(label).strip()
        try:
            return cls(text)
        except ValueError:
            pass

        lowered = text.lower()
        for category in cls:
            if category.value.lower() == lowered:
                return category
        return cls.OTHER

    @property
    def is_income(self) -> bool:
        return self.value in INCOME_CATEGORIES


def is_known_category(label: Optional[str]) -> bool:
    return label in ALL_CATEGORIES


def transaction_type(category) -> str:
    """'income' if the category is an income category, else 'expense'"""
    if isinstance(category, Category):
        category = category.value
    return 'income' if category in INCOME_CATEGORIES else 'expense'
