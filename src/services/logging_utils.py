"""Structured logging for costing operations.

Each batch computation (building ledgers, loading a snapshot, saving a
count) leaves one record named "<operation>: <outcome>" whose context
values are attached to the LogRecord as attributes. Anomalies that the core
absorbs (missing references, unmatched sales, cycles) are logged at DEBUG,
one record each.

    logger = get_service_logger(__name__)
    log_operation(logger, operation="build_ledgers", outcome="success", ledger_count=42)
"""

import logging
from typing import Any

LOGGER_PREFIX = "restaurant_costing.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Logger for a service module, named after the module's last component.

    >>> get_service_logger("src.services.stock_ledger_service").name
    'restaurant_costing.services.stock_ledger_service'
    """
    return logging.getLogger(f"{LOGGER_PREFIX}.{name.rsplit('.', 1)[-1]}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Emit one record for an operation.

    Args:
        logger: Logger from get_service_logger()
        operation: What ran, e.g. "resolve_cost"
        outcome: How it ended, e.g. "success" or "missing_ingredient"
        level: INFO for batch summaries, DEBUG for per-record anomalies
        **context: Values such as recipe_id or ledger_count, available to
            handlers as record attributes
    """
    logger.log(
        level,
        f"{operation}: {outcome}",
        extra={"operation": operation, "outcome": outcome, **context},
    )
