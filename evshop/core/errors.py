"""Domain errors raised by the cart/order services.

Routes never build HTTP responses for these themselves; ``evshop.main``
registers one handler that maps ``ShopError.status_code`` to the response.
"""


class ShopError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(ShopError):
    status_code = 400


class NotFound(ShopError):
    status_code = 404


class InsufficientStock(ShopError):
    status_code = 400


class EmptyCart(ShopError):
    status_code = 400


class Busy(ShopError):
    status_code = 409
