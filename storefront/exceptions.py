"""
Domain exceptions for the storefront core.

Every error the services raise derives from StorefrontError, so the API layer
maps the whole taxonomy with a single exception handler. Storage errors are
never returned verbatim: they are wrapped in DependencyUnavailable and the
original stays attached as ``__cause__`` for server-side logs.
"""


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error message (safe to show to the caller)
        details: Optional dict with additional context (entity IDs, states, etc.)
        status_code: HTTP status the API layer responds with
    """

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class NotFound(StorefrontError):
    """Product, order or verification is absent or not owned by the caller."""

    status_code = 404


class InsufficientStock(StorefrontError):
    """Requested quantity exceeds the product's current stock."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            "Insufficient stock",
            details={'product_id': product_id, 'requested': requested, 'available': available}
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class EmptyCart(StorefrontError):
    """Raised when trying to create an order from an empty cart."""

    def __init__(self, user_id: int):
        super().__init__("Cart is empty", details={'user_id': user_id})
        self.user_id = user_id


class DuplicateSubmission(StorefrontError):
    """A record that may exist only once already exists."""

    status_code = 409


class InvalidTransition(StorefrontError):
    """Illegal order or verification status change."""

    def __init__(self, message: str, current_status: str):
        super().__init__(message, details={'current_status': current_status})
        self.current_status = current_status


class ValidationError(StorefrontError):
    """Missing or malformed required fields."""


class InvalidCredentials(StorefrontError):
    """Credentials or auth token rejected."""

    status_code = 401


class DependencyUnavailable(StorefrontError):
    """Session Store or Ledger Store is unreachable or failed mid-operation."""

    status_code = 503
