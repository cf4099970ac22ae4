"""
Constants for the restaurant-costing application.

Storage locations, fallback values used when the data is incomplete, and
the fixed parameters of the dashboard reports.
"""

from typing import List

# ============================================================================
# Storage
# ============================================================================

DATABASE_FILENAME = "restaurant_costing.db"
USER_DATA_DIRNAME = ".restaurant_costing"

# ============================================================================
# Fallbacks
# ============================================================================

# Unit reported for a ledger whose name no purchase record carries
DEFAULT_UNIT = "unidad"

# Category of recipes nobody has reviewed yet; left out of menu engineering
UNANALYZED_CATEGORY = "Sin Analizar"

# ============================================================================
# Pricing and Reporting
# ============================================================================

DEFAULT_VAT_RATE = 0.21

# Point-of-sale products that represent cover charges rather than dishes
COVER_CHARGE_MARKER = "cubierto"
COVER_CHARGE_PRODUCTS: List[str] = ["cubierto almuerzo", "cubierto cena"]
COVER_CHARGE_SUMMARY_NAME = "Cubiertos"

DASHBOARD_TOP_N = 10
