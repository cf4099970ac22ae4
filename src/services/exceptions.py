"""Service layer exception classes for restaurant-costing.

The costing core (cost resolution, portion decomposition, ledger building)
never raises: anomalies in the data degrade to zero or skipped
contributions. These exceptions belong to the boundary around it: loading
snapshots, saving counts, validating user input and CLI lookups.

Exception Hierarchy:
    ServiceError (base)
    ├── RecipeNotFound
    ├── ValidationError
    └── DatabaseError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    pass


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by name or ID.

    Example:
        >>> raise RecipeNotFound("Ñoquis con Salsa")
        RecipeNotFound: Recipe 'Ñoquis con Salsa' not found
    """

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"Recipe '{identifier}' not found")


class ValidationError(ServiceError):
    """Raised when input validation fails.

    Args:
        errors: List of human-readable validation messages
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
