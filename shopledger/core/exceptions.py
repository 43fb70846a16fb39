"""
Domain exceptions for shopledger.

Services raise these; the HTTP layer maps them to status codes in
``shopledger.core.errors``.
"""

from typing import Any, Optional


class ShopLedgerError(Exception):
    """Base exception for all shopledger errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationError(ShopLedgerError):
    """Missing or invalid input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundError(ShopLedgerError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class ConflictError(ShopLedgerError):
    """Write would violate a uniqueness or reference constraint."""

    def __init__(self, message: str, **details: Any):
        super().__init__(message, code="CONFLICT", details=details)


class InsufficientStockError(ShopLedgerError):
    """The product's lots cannot cover the requested quantity."""

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        shortfall = requested - available
        super().__init__(
            f"Insufficient stock for product {product_name}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
                "shortfall": shortfall,
            },
        )
        self.product_id = product_id
        self.shortfall = shortfall


class AuthenticationError(ShopLedgerError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="NOT_AUTHENTICATED")


class InternalError(ShopLedgerError):
    """Datastore or other unexpected failure."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Internal error during {operation}",
            code="INTERNAL_ERROR",
            details={"operation": operation, "error": error},
        )


__all__ = [
    "AuthenticationError",
    "ConflictError",
    "InsufficientStockError",
    "InternalError",
    "NotFoundError",
    "ShopLedgerError",
    "ValidationError",
]
