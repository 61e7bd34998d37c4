"""Custom exceptions for the inventory application."""


class InventoryError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class BusinessLogicError(InventoryError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class ValidationError(BusinessLogicError):
    """Raised when a single field fails validation."""
    def __init__(self, message, field=None):
        payload = {'field': field} if field else None
        super().__init__(message, status_code=400, payload=payload)
        self.field = field


class NotFoundError(InventoryError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ProductNotFoundError(NotFoundError):
    """Raised when a cart line references an unknown product."""
    def __init__(self, product_id):
        super().__init__(f'Product {product_id} not found', payload={'product_id': product_id})
        self.product_id = product_id


class EmptyCartError(BusinessLogicError):
    """Raised when a sale is submitted without line items."""
    def __init__(self, message='A sale must contain at least one item'):
        super().__init__(message)


class InsufficientStockError(BusinessLogicError):
    """Raised when an operation fails due to lack of stock."""
    def __init__(self, stock_codes):
        self.stock_codes = list(stock_codes)
        message = f"Insufficient stock for: {', '.join(self.stock_codes)}"
        super().__init__(message, status_code=409, payload={'stock_codes': self.stock_codes})


class DuplicateError(BusinessLogicError):
    """Raised when a unique business key (stock code, receipt number) is taken."""
    def __init__(self, message):
        super().__init__(message, status_code=409)


class ReferentialIntegrityError(BusinessLogicError):
    """Raised when deleting a record that other rows still reference."""
    def __init__(self, message):
        super().__init__(message, status_code=409)
