__all__ = ["RestaurantError", "NotFound", "MenuItemNotFound", "OrderNotFound", "PaymentNotFound",
           "ValidationError", "Conflict", "TransportError"]


class RestaurantError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Lookup exceptions
class NotFound(RestaurantError):
    status_code = 404


class MenuItemNotFound(NotFound):
    pass


class OrderNotFound(NotFound):
    pass


class PaymentNotFound(NotFound):
    pass


# Validations exceptions
class ValidationError(RestaurantError):
    status_code = 400


class Conflict(RestaurantError):
    status_code = 409


# Real-time delivery exceptions, never surfaced to the caller of a mutation
class TransportError(Exception):
    pass
