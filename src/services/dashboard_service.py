"""
Dashboard Service - sales profitability and stock alerts.

Combines recipe costs, the price list, sales and stock ledgers into the
figures shown on the dashboard:
- Top selling, most profitable and highest total profit products
- Menu engineering (popularity vs. profit per unit quadrants)
- Cover charge summary
- Top internal consumptions
- Ingredients at or below their low-stock threshold

Sales are matched to recipes by exact name; unmatched sales are left out
of the profitability figures.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from src.models import (
    Ingredient,
    MenuQuadrant,
    ProductPrice,
    ProductSale,
    Recipe,
    Withdrawal,
)
from src.services.cost_utils import to_decimal
from src.services.logging_utils import get_service_logger, log_operation
from src.services.recipe_cost_service import calculate_margin
from src.services.recipe_graph import CostingContext
from src.services.stock_ledger_service import StockLedger, build_ledgers
from src.utils.config import get_config
from src.utils.constants import (
    COVER_CHARGE_MARKER,
    COVER_CHARGE_PRODUCTS,
    COVER_CHARGE_SUMMARY_NAME,
    DASHBOARD_TOP_N,
    UNANALYZED_CATEGORY,
)

logger = get_service_logger(__name__)


@dataclass
class SaleProfitability:
    """Profitability of one matched sale line."""

    name: str
    category: str
    quantity: float
    profit_per_unit: Decimal
    total_profit: Decimal
    margin_percent: Decimal


@dataclass
class MenuEngineeringItem:
    name: str
    popularity: float
    profitability: Decimal
    margin_percent: Decimal
    quadrant: MenuQuadrant


@dataclass
class MenuEngineering:
    items: List[MenuEngineeringItem] = field(default_factory=list)
    average_popularity: float = 0.0
    average_profitability: Decimal = Decimal("0.00")


@dataclass
class LowStockItem:
    name: str
    balance: float
    threshold: float
    unit: str


@dataclass
class CoverSummary:
    name: str
    quantity: float


@dataclass
class DashboardData:
    top_selling: List[SaleProfitability]
    most_profitable: List[SaleProfitability]
    sales_force: List[SaleProfitability]
    menu_engineering: MenuEngineering
    covers: CoverSummary
    internal_consumptions: List[ProductSale]
    low_stock_items: List[LowStockItem]


def calculate_dashboard_data(
    recipes: Sequence[Recipe],
    ingredients: Sequence[Ingredient],
    sales: Sequence[ProductSale],
    prices: Sequence[ProductPrice],
    internal_consumptions: Sequence[ProductSale],
    menu_item_names: Optional[Iterable[str]],
    low_stock_settings: Mapping[str, float],
    withdrawals: Sequence[Withdrawal],
    vat_rate: Optional[float] = None,
) -> DashboardData:
    """
    Calculate every dashboard figure from one snapshot.

    Args:
        recipes: Every recipe
        ingredients: Every purchase record
        sales: Product sales
        prices: Point-of-sale price list; overrides recipe sale prices
        internal_consumptions: Internally consumed products
        menu_item_names: Names on the current menu. When given and not
            empty, menu engineering only considers these products.
        low_stock_settings: Canonical ingredient name -> alert threshold
        withdrawals: Direct withdrawals (they affect stock balances)
        vat_rate: VAT rate; defaults to the configured rate

    Returns:
        DashboardData
    """
    if vat_rate is None:
        vat_rate = get_config().vat_rate

    context = CostingContext(ingredients, recipes)
    # Duplicate names: the last recipe wins, the first price wins
    recipe_by_name: Dict[str, Recipe] = {recipe.name: recipe for recipe in recipes}
    price_by_name: Dict[str, Decimal] = {}
    for price in prices:
        price_by_name.setdefault(price.name, to_decimal(price.sale_price))

    covers = _summarize_covers(sales)
    regular_sales = [s for s in sales if COVER_CHARGE_MARKER not in s.name.lower()]

    processed = []
    for sale in regular_sales:
        recipe = recipe_by_name.get(sale.name)
        if recipe is None:
            continue
        price = price_by_name.get(recipe.name, to_decimal(recipe.sale_price))
        margin = calculate_margin(context.costs.resolve(recipe), price, vat_rate)
        processed.append(
            SaleProfitability(
                name=sale.name,
                category=recipe.category,
                quantity=sale.quantity,
                profit_per_unit=margin["profit_per_serving"],
                total_profit=margin["profit_per_serving"] * to_decimal(sale.quantity),
                margin_percent=margin["margin_percent"],
            )
        )

    top_selling = sorted(processed, key=lambda item: item.quantity, reverse=True)[:DASHBOARD_TOP_N]
    most_profitable = sorted(
        (item for item in processed if item.margin_percent < 100),
        key=lambda item: item.margin_percent,
        reverse=True,
    )[:DASHBOARD_TOP_N]
    sales_force = sorted(processed, key=lambda item: item.total_profit, reverse=True)[
        :DASHBOARD_TOP_N
    ]

    menu_names = set(menu_item_names or [])
    menu_engineering = classify_menu_items(
        [
            item
            for item in processed
            if item.category != UNANALYZED_CATEGORY
            and item.margin_percent < 100
            and (not menu_names or item.name in menu_names)
        ]
    )

    top_internal = sorted(internal_consumptions, key=lambda s: s.quantity, reverse=True)[
        :DASHBOARD_TOP_N
    ]

    ledgers = build_ledgers(
        recipes, ingredients, sales, internal_consumptions, withdrawals, context=context
    )
    low_stock = find_low_stock_items(ledgers, low_stock_settings)

    log_operation(
        logger,
        operation="calculate_dashboard_data",
        outcome="success",
        matched_sales=len(processed),
        unmatched_sales=len(regular_sales) - len(processed),
        low_stock_count=len(low_stock),
    )

    return DashboardData(
        top_selling=top_selling,
        most_profitable=most_profitable,
        sales_force=sales_force,
        menu_engineering=menu_engineering,
        covers=covers,
        internal_consumptions=top_internal,
        low_stock_items=low_stock,
    )


def classify_menu_items(items: Sequence[SaleProfitability]) -> MenuEngineering:
    """
    Place products in menu engineering quadrants.

    A product is popular when its quantity sold is at least the average,
    and profitable when its profit per unit is at least the average.
    """
    if not items:
        return MenuEngineering()

    average_popularity = sum(item.quantity for item in items) / len(items)
    average_profitability = sum(
        (to_decimal(item.profit_per_unit) for item in items), Decimal("0.00")
    ) / len(items)

    classified = []
    for item in items:
        popular = item.quantity >= average_popularity
        profitable = item.profit_per_unit >= average_profitability
        if popular and profitable:
            quadrant = MenuQuadrant.STAR
        elif profitable:
            quadrant = MenuQuadrant.PUZZLE
        elif popular:
            quadrant = MenuQuadrant.PLOWHORSE
        else:
            quadrant = MenuQuadrant.DOG
        classified.append(
            MenuEngineeringItem(
                name=item.name,
                popularity=item.quantity,
                profitability=item.profit_per_unit,
                margin_percent=item.margin_percent,
                quadrant=quadrant,
            )
        )

    return MenuEngineering(
        items=classified,
        average_popularity=average_popularity,
        average_profitability=average_profitability,
    )


def find_low_stock_items(
    ledgers: Sequence[StockLedger],
    low_stock_settings: Mapping[str, float],
) -> List[LowStockItem]:
    """Ledgers whose final balance is at or below their configured threshold."""
    items = []
    for ledger in ledgers:
        threshold = low_stock_settings.get(ledger.ingredient_name)
        if threshold is not None and ledger.final_balance <= threshold:
            items.append(
                LowStockItem(
                    name=ledger.ingredient_name,
                    balance=ledger.final_balance,
                    threshold=threshold,
                    unit=ledger.unit,
                )
            )
    return items


def _summarize_covers(sales: Sequence[ProductSale]) -> CoverSummary:
    # First sale of each cover product, as the point-of-sale export lists one line per product
    quantity = 0.0
    for product in COVER_CHARGE_PRODUCTS:
        match = next((s for s in sales if product in s.name.lower()), None)
        if match is not None:
            quantity += match.quantity
    return CoverSummary(name=COVER_CHARGE_SUMMARY_NAME, quantity=quantity)
