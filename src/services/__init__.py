"""Services package - costing logic for restaurant-costing.

Architecture:
- Core: pure functions over a snapshot of records (no database access)
- Boundary: snapshot loading and inventory count storage via session_scope()
- Exceptions: ServiceError hierarchy, raised only at the boundary

Service Modules:
- recipe_graph: Shared memoized walk over nested recipes
- recipe_cost_service: Cost per serving and cost breakdowns
- ingredient_breakdown_service: Ingredients consumed per serving
- stock_ledger_service: Chronological stock ledgers per canonical ingredient
- purchase_service: Latest purchase cost per canonical ingredient
- withdrawal_service: Pricing of direct withdrawals
- inventory_count_service: Physical counts and variance
- dashboard_service: Profitability rankings, menu engineering, low stock
- snapshot_service: Loading every record in one transaction

Infrastructure:
- database: Session management and database utilities
- cost_utils: Decimal conversion and formatting of money
- exceptions: Custom exception classes
- logging_utils: Structured operation logging
"""

from . import (
    database,
    recipe_cost_service,
    ingredient_breakdown_service,
    stock_ledger_service,
    purchase_service,
    withdrawal_service,
    inventory_count_service,
    dashboard_service,
    snapshot_service,
)

from .exceptions import (
    ServiceError,
    RecipeNotFound,
    ValidationError,
    DatabaseError,
)

from .recipe_graph import CostingContext
from .recipe_cost_service import resolve_cost, get_recipe_cost_breakdown
from .ingredient_breakdown_service import decompose_recipe
from .stock_ledger_service import Movement, StockLedger, build_ledgers

__all__ = [
    "database",
    "recipe_cost_service",
    "ingredient_breakdown_service",
    "stock_ledger_service",
    "purchase_service",
    "withdrawal_service",
    "inventory_count_service",
    "dashboard_service",
    "snapshot_service",
    "ServiceError",
    "RecipeNotFound",
    "ValidationError",
    "DatabaseError",
    "CostingContext",
    "resolve_cost",
    "get_recipe_cost_breakdown",
    "decompose_recipe",
    "Movement",
    "StockLedger",
    "build_ledgers",
]
