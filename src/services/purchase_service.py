"""Purchase Service - latest purchase cost per canonical ingredient.

Purchase records carry their own cost and unit. Reports that value stock by
canonical ingredient (withdrawals, inventory variance) price it at the most
recent purchase of that ingredient.

Example Usage:
    >>> from src.services.purchase_service import get_latest_purchases
    >>> latest = get_latest_purchases(ingredients)
    >>> latest["Harina de Trigo"].cost_per_unit
    Decimal('850.0000')
"""

from datetime import date
from typing import Dict, Sequence

from src.models import Ingredient


def get_latest_purchases(ingredients: Sequence[Ingredient]) -> Dict[str, Ingredient]:
    """
    Get the most recent purchase record of each canonical ingredient.

    Undated purchases count as the oldest. Among purchases on the same date
    the first one in ``ingredients`` wins.

    Args:
        ingredients: Purchase records

    Returns:
        Dict of canonical name -> most recent Ingredient purchase record
    """
    latest: Dict[str, Ingredient] = {}
    for ingredient in ingredients:
        name = ingredient.stock_name
        existing = latest.get(name)
        if existing is None or _purchase_day(ingredient) > _purchase_day(existing):
            latest[name] = ingredient
    return latest


def _purchase_day(ingredient: Ingredient) -> date:
    return ingredient.purchase_date or date.min
