# backend/app/schemas/product_schema.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional
from pydantic import BaseModel, PlainSerializer
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

# the web client reads money as JSON numbers; values stay Decimal in Python
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _CamelModel(BaseModel):
    # the web client speaks camelCase; snake_case is still accepted on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductIn(_CamelModel):
    """Draft for create and full update. Field rules live in app.utils.validation."""
    name: str
    sku: str
    category: str
    quantity: int
    price: Decimal
    supplier: str
    barcode: Optional[str] = None
    min_stock_level: int


class StockUpdateIn(_CamelModel):
    quantity: int


class ProductOut(_CamelModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )
    id: int
    name: str
    sku: str
    category: str
    quantity: int
    price: Money
    supplier: str
    barcode: Optional[str] = None
    min_stock_level: int
    created_at: datetime
    updated_at: datetime
    is_low_stock: bool
    is_out_of_stock: bool
    total_value: Money


class InventoryStatsOut(_CamelModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )
    total_products: int
    low_stock_products: int
    out_of_stock_products: int
    total_value: Money
    total_quantity: int


class TotalValueOut(_CamelModel):
    total_value: Money


class CategorySummaryOut(_CamelModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )
    category: str
    product_count: int
    total_quantity: int


class SupplierSummaryOut(_CamelModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )
    supplier: str
    product_count: int


class MessageOut(BaseModel):
    message: str
