"""
Budget Alert Generator

Compares category spend against its monthly limit.
"""
import math
from typing import List


EXCEEDED_RATIO = 1.0
WARNING_RATIO = 0.8


def round_half_up(value: float) -> int:
    """Round .5 upwards (Python's round() rounds half to even)"""
    return int(math.floor(value + 0.5))


def generate_budget_alerts(category: str, total_spent: float, budget_limit: float) -> List[str]:
    """
    Build alert messages for one category

    Args:
        category: Category being checked
        total_spent: Month-to-date spend including the new transaction
        budget_limit: Monthly limit for the category

    Returns:
        Zero or one alert message
    """
    if not budget_limit or budget_limit <= 0:
        return []

    ratio = total_spent / budget_limit

    if ratio >= EXCEEDED_RATIO:
        over = round_half_up((ratio - 1) * 100)
        return [f"🚨 You have exceeded your budget for {category} by {over}%."]

    if ratio >= WARNING_RATIO:
        spent = round_half_up(ratio * 100)
        return [
            f"⚠️ You have spent {spent}% of your {category} budget. "
            f"Consider reducing spending in this area."
        ]

    return []
