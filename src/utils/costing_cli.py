"""
Costing CLI Utility

Command-line access to recipe costs and stock ledgers.
Reads every record once, then runs the costing core on that snapshot.

Usage Examples:
    # Cost per serving and margin of one recipe
    python -m src.utils.costing_cli cost "Lasagna"

    # Final balance of every ingredient
    python -m src.utils.costing_cli stock

    # Movements of one ingredient up to a date
    python -m src.utils.costing_cli stock --ingredient "Harina de Trigo" --as-of 2024-01-31

    # Ingredients at or below their alert threshold
    python -m src.utils.costing_cli low-stock
"""

import sys
import argparse
import logging
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from sqlalchemy.exc import SQLAlchemyError

from src.services.dashboard_service import find_low_stock_items
from src.services.cost_utils import cost_to_string
from src.services.database import close_connections, initialize_app_database
from src.services.exceptions import RecipeNotFound, ServiceError
from src.services.recipe_cost_service import get_recipe_by_name, get_recipe_cost_breakdown
from src.services.recipe_graph import CostingContext
from src.services.snapshot_service import load_snapshot
from src.services.stock_ledger_service import build_ledgers, find_ledger
from src.utils.config import get_config


def show_cost(snapshot, recipe_name: str) -> int:
    """Print the cost breakdown of one recipe."""
    try:
        recipe = get_recipe_by_name(recipe_name, snapshot.recipes)
    except RecipeNotFound as e:
        print(f"ERROR: {e}")
        return 1

    context = CostingContext(snapshot.ingredients, snapshot.recipes)
    breakdown = get_recipe_cost_breakdown(
        recipe, snapshot.ingredients, snapshot.recipes, context=context
    )

    print(f"{breakdown.recipe_name} (yield {breakdown.yield_quantity:g})")
    for line in breakdown.ingredient_lines:
        name = line.ingredient_name or f"<missing ingredient {line.ingredient_id}>"
        print(
            f"  {name}: {line.quantity:g} {line.unit} "
            f"({line.waste_percentage:g}% waste) = {cost_to_string(line.cost)}"
        )
    for line in breakdown.sub_recipe_lines:
        name = line.sub_recipe_name or f"<missing recipe {line.sub_recipe_id}>"
        marker = " [direct cost]" if line.uses_direct_cost else ""
        print(
            f"  {name}: {line.quantity:g} x {cost_to_string(line.cost_per_serving)}{marker} "
            f"= {cost_to_string(line.cost)}"
        )
    print(f"Batch cost:       {cost_to_string(breakdown.batch_cost)}")
    print(f"Cost per serving: {cost_to_string(breakdown.cost_per_serving)}")
    print(f"Cost with VAT:    {cost_to_string(breakdown.cost_with_vat)}")
    print(f"Sale price:       {cost_to_string(breakdown.sale_price)}")
    print(f"Margin:           {breakdown.margin_percent:.1f}%")
    return 0


def _ledgers(snapshot, as_of_date=None):
    return build_ledgers(
        snapshot.recipes,
        snapshot.ingredients,
        snapshot.sales,
        snapshot.internal_consumptions,
        snapshot.withdrawals,
        as_of_date=as_of_date,
    )


def show_stock(snapshot, as_of_date=None, ingredient_name=None) -> int:
    """Print final balances, or the movements of one ingredient."""
    ledgers = _ledgers(snapshot, as_of_date)

    if ingredient_name is None:
        for ledger in ledgers:
            print(f"{ledger.ingredient_name}: {ledger.final_balance:.3f} {ledger.unit}")
        print(f"\n{len(ledgers)} ingredients")
        return 0

    ledger = find_ledger(ledgers, ingredient_name)
    if ledger is None:
        print(f"ERROR: No stock ledger for: {ingredient_name}")
        return 1

    print(f"{ledger.ingredient_name} ({ledger.unit})")
    for movement in ledger.movements:
        print(
            f"  {movement.movement_date:%Y-%m-%d}  {movement.movement_type.value:<20} "
            f"{movement.debit:>10.3f} {movement.credit:>10.3f} {movement.balance:>10.3f}  "
            f"{movement.description}"
        )
    print(f"Final balance: {ledger.final_balance:.3f} {ledger.unit}")
    return 0


def show_low_stock(snapshot) -> int:
    """Print ingredients at or below their alert threshold."""
    items = find_low_stock_items(_ledgers(snapshot), snapshot.low_stock_settings)
    if not items:
        print("No ingredients below their threshold")
        return 0
    for item in items:
        print(f"{item.name}: {item.balance:.3f} {item.unit} (threshold {item.threshold:g})")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Recipe cost and stock utility for Restaurant Costing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Cost of a recipe:
    python -m src.utils.costing_cli cost "Lasagna"

  Stock as of a date:
    python -m src.utils.costing_cli stock --as-of 2024-01-31

  Movements of one ingredient:
    python -m src.utils.costing_cli stock --ingredient "Harina de Trigo"
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    cost_parser = subparsers.add_parser("cost", help="Show the cost breakdown of a recipe")
    cost_parser.add_argument("recipe_name", help="Exact recipe name")

    stock_parser = subparsers.add_parser("stock", help="Show theoretical stock")
    stock_parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Only count movements up to this date (YYYY-MM-DD)",
    )
    stock_parser.add_argument(
        "--ingredient",
        default=None,
        help="Show the movements of this canonical ingredient",
    )

    subparsers.add_parser("low-stock", help="Show ingredients below their threshold")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(level=get_config().log_level)

    try:
        initialize_app_database()
        snapshot = load_snapshot()
    except (ServiceError, SQLAlchemyError) as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        # The snapshot is fully loaded; nothing below touches the database
        close_connections()

    if args.command == "cost":
        return show_cost(snapshot, args.recipe_name)
    elif args.command == "stock":
        return show_stock(snapshot, args.as_of, args.ingredient)
    elif args.command == "low-stock":
        return show_low_stock(snapshot)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
