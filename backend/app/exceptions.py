"""Errors raised by the inventory core.

Every failure surfaced by the service or the repository is one of these, so
the API layer can map each kind to a status code without inspecting messages.
"""
from typing import List, Optional


class InventoryException(Exception):
    pass


class ProductNotFound(InventoryException):
    def __init__(self, message: str = "Product not found"):
        super().__init__(message)


class DuplicateSku(InventoryException):
    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"Product with SKU '{sku}' already exists")


class DuplicateBarcode(InventoryException):
    def __init__(self, barcode: str):
        self.barcode = barcode
        super().__init__(f"Product with barcode '{barcode}' already exists")


class InvalidQuantity(InventoryException):
    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(f"Quantity must be between 0 and 2147483647, got {quantity}")


class InvalidPriceRange(InventoryException):
    def __init__(self, min_price, max_price):
        super().__init__(
            f"minPrice ({min_price}) must not be greater than maxPrice ({max_price})"
        )


class InvalidProduct(InventoryException):
    """Draft failed field validation; `violations` holds one entry per bad field."""

    def __init__(self, violations: Optional[List] = None):
        self.violations = list(violations or [])
        fields = ", ".join(v.field for v in self.violations)
        super().__init__(f"Invalid product fields: {fields}")


class StorageUnavailable(InventoryException):
    def __init__(self, message: str = "Storage unavailable"):
        super().__init__(message)
