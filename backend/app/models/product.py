from decimal import Decimal

from sqlalchemy import Column, DateTime, Integer, Numeric, String, UniqueConstraint
from app.db import Base

class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("sku", name="uq_products_sku"),
        # NULL barcodes never collide on sqlite or postgres
        UniqueConstraint("barcode", name="uq_products_barcode"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False)
    supplier = Column(String(255), nullable=False, index=True)
    barcode = Column(String(100), nullable=True)
    min_stock_level = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock_level

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0

    @property
    def total_value(self) -> Decimal:
        return Decimal(str(self.price)) * self.quantity

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku} name={self.name}>"
