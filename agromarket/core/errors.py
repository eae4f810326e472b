"""
Errores de dominio del marketplace.

Los servicios lanzan estas excepciones y `main.py` las convierte en respuestas
JSON con la forma `{"error": code, "detail": message, ...}`.
"""
from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    status_code = 500
    code = "internal_failure"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.code, "detail": self.message}
        body.update(self.context)
        return body


class NotAuthenticated(MarketplaceError):
    status_code = 401
    code = "not_authenticated"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotAuthorized(MarketplaceError):
    status_code = 403
    code = "not_authorized"

    def __init__(self, message: str = "Not authorized to perform this action"):
        super().__init__(message)


class ValidationError(MarketplaceError):
    status_code = 422
    code = "validation_error"


class NotFound(MarketplaceError):
    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource.capitalize()} {resource_id} not found",
            resource=resource,
            id=resource_id,
        )
        self.resource = resource
        self.resource_id = resource_id


class AlreadyExists(MarketplaceError):
    status_code = 409
    code = "already_exists"


class InsufficientStock(MarketplaceError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, product_id: int, requested: int, available: int, name: Optional[str] = None):
        label = name or f"product {product_id}"
        super().__init__(
            f"Not enough stock for {label}: requested {requested}, available {available}",
            product_id=product_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTransition(MarketplaceError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Cannot change order status from '{from_status}' to '{to_status}'",
            **{"from": from_status, "to": to_status},
        )
        self.from_status = from_status
        self.to_status = to_status


class InternalFailure(MarketplaceError):
    status_code = 500
    code = "internal_failure"

    def __init__(self, message: str = "The request could not be completed, please try again"):
        super().__init__(message)
