import functools
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from app.exceptions import StorageUnavailable
from app.models.product import Product
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

log = logging.getLogger("inventory.repo")

CENTS = Decimal("0.01")


def _storage_guard(fn):
    """
    Translate driver/engine failures into StorageUnavailable.
    IntegrityError is left alone so the service can attribute unique violations.
    """

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            log.error("storage failure in %s: %s", fn.__name__, e)
            raise StorageUnavailable(f"Storage unavailable: {e.__class__.__name__}") from e

    return wrapper


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    @_storage_guard
    def find_all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    @_storage_guard
    def find_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    @_storage_guard
    def find_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.sku == sku).first()

    @_storage_guard
    def find_by_barcode(self, barcode: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.barcode == barcode).first()

    @_storage_guard
    def find_by_category(self, category: str) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.category == category)
            .order_by(Product.id)
            .all()
        )

    @_storage_guard
    def find_by_supplier(self, supplier: str) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.supplier == supplier)
            .order_by(Product.id)
            .all()
        )

    @_storage_guard
    def find_low_stock(self) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.quantity <= Product.min_stock_level)
            .order_by(Product.id)
            .all()
        )

    @_storage_guard
    def find_out_of_stock(self) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.quantity == 0)
            .order_by(Product.id)
            .all()
        )

    @_storage_guard
    def search(self, term: str) -> List[Product]:
        """Case-insensitive substring match on name or sku."""
        like = f"%{_escape_like(term)}%"
        return (
            self.db.query(Product)
            .filter(
                or_(
                    Product.name.ilike(like, escape="\\"),
                    Product.sku.ilike(like, escape="\\"),
                )
            )
            .order_by(Product.id)
            .all()
        )

    @_storage_guard
    def find_by_price_range(self, min_price: Decimal, max_price: Decimal) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.price.between(min_price, max_price))
            .order_by(Product.id)
            .all()
        )

    @_storage_guard
    def total_inventory_value(self) -> Decimal:
        """
        Sum of price * quantity over every product. Folded in Python: sqlite
        keeps NUMERIC values as REAL, so an in-database SUM is a float sum.
        """
        rows = self.db.query(Product.price, Product.quantity).all()
        total = sum(
            (Decimal(str(price)) * quantity for price, quantity in rows), Decimal("0")
        )
        return total.quantize(CENTS)

    @_storage_guard
    def exists_sku_excluding(self, sku: str, product_id: int) -> bool:
        hit = (
            self.db.query(Product.id)
            .filter(Product.sku == sku, Product.id != product_id)
            .first()
        )
        return hit is not None

    @_storage_guard
    def exists_barcode_excluding(self, barcode: str, product_id: int) -> bool:
        hit = (
            self.db.query(Product.id)
            .filter(Product.barcode == barcode, Product.id != product_id)
            .first()
        )
        return hit is not None

    @_storage_guard
    def category_summary(self) -> List[Tuple[str, int, int]]:
        rows = (
            self.db.query(
                Product.category,
                func.count(Product.id),
                func.coalesce(func.sum(Product.quantity), 0),
            )
            .group_by(Product.category)
            .order_by(Product.category)
            .all()
        )
        return [(category, int(count), int(qty)) for category, count, qty in rows]

    @_storage_guard
    def supplier_summary(self) -> List[Tuple[str, int]]:
        rows = (
            self.db.query(Product.supplier, func.count(Product.id))
            .group_by(Product.supplier)
            .order_by(Product.supplier)
            .all()
        )
        return [(supplier, int(count)) for supplier, count in rows]

    @_storage_guard
    def save(self, product: Product) -> Product:
        """Insert when the product has no id yet, otherwise flush pending changes."""
        if product.id is None:
            self.db.add(product)
        self.db.flush()
        return product

    @_storage_guard
    def refresh(self, product: Product) -> Product:
        self.db.refresh(product)
        return product

    @_storage_guard
    def delete_by_id(self, product_id: int) -> None:
        p = self.db.get(Product, product_id)
        if p:
            self.db.delete(p)
            self.db.flush()
