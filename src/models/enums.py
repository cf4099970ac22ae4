"""
Enumerations shared by records and costing results.

- MovementType: Kind of stock ledger entry
- SaleKind: Which consumption stream a product sale belongs to
- MenuQuadrant: Menu engineering classification
"""

from enum import Enum


class MovementType(str, Enum):
    """
    Stock ledger movement type.

    Values:
        PURCHASE: Stock entering from a purchase invoice (debit)
        SALE_CONSUMPTION: Ingredients consumed by products sold (credit)
        INTERNAL_CONSUMPTION: Staff meals, comps, spoilage tables (credit)
        WITHDRAWAL: Direct removal of a named ingredient (credit)
    """

    PURCHASE = "Purchase"
    SALE_CONSUMPTION = "SaleConsumption"
    INTERNAL_CONSUMPTION = "InternalConsumption"
    WITHDRAWAL = "Withdrawal"


class SaleKind(str, Enum):
    """Stream a ProductSale row feeds into."""

    SALE = "sale"
    INTERNAL = "internal"


class MenuQuadrant(str, Enum):
    """
    Menu engineering quadrant.

    Values:
        STAR: Popular and profitable
        PUZZLE: Profitable but not popular
        PLOWHORSE: Popular but not profitable
        DOG: Neither popular nor profitable
    """

    STAR = "star"
    PUZZLE = "puzzle"
    PLOWHORSE = "plowhorse"
    DOG = "dog"
