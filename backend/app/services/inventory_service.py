import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List

from app.config import settings
from app.exceptions import (
    DuplicateBarcode,
    DuplicateSku,
    InvalidPriceRange,
    InvalidProduct,
    InvalidQuantity,
    ProductNotFound,
    StorageUnavailable,
)
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.utils.validation import MAX_COUNT, normalize_barcode, validate_product
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

log = logging.getLogger("inventory")
log.setLevel(settings.LOG_LEVEL.upper())
if not log.handlers:
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter("[INVENTORY] %(levelname)s %(message)s"))
    log.addHandler(h)
    log.propagate = False


@dataclass(frozen=True)
class InventoryStats:
    total_products: int
    low_stock_products: int
    out_of_stock_products: int
    total_value: Decimal
    total_quantity: int


@dataclass(frozen=True)
class CategorySummary:
    category: str
    product_count: int
    total_quantity: int


@dataclass(frozen=True)
class SupplierSummary:
    supplier: str
    product_count: int


class InventoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository(db)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _require(self, product_id: int) -> Product:
        p = self.repo.find_by_id(product_id)
        if not p:
            raise ProductNotFound(f"Product not found with ID: {product_id}")
        return p

    def _validate(self, draft):
        violations = validate_product(draft)
        if violations:
            log.warning(
                "rejected draft sku=%r: %s",
                getattr(draft, "sku", None),
                [v.field for v in violations],
            )
            raise InvalidProduct(violations)

    def _commit(self, sku: str, barcode):
        """
        Commit the pending unit of work. A unique violation raised by the
        database here means a concurrent writer won the race after our
        pre-check; it is reported as the matching duplicate error.
        """
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise self._duplicate_from(e, sku, barcode) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("commit failed: %s", e)
            raise StorageUnavailable(f"Storage unavailable: {e.__class__.__name__}") from e

    def _save(self, product: Product) -> Product:
        # rollback expires loaded rows, so read the keys up front
        sku, barcode = product.sku, product.barcode
        try:
            return self.repo.save(product)
        except IntegrityError as e:
            self.db.rollback()
            raise self._duplicate_from(e, sku, barcode) from e

    @staticmethod
    def _duplicate_from(err: IntegrityError, sku: str, barcode):
        log.warning("storage rejected write for sku=%r: %s", sku, err.orig)
        if barcode and "barcode" in str(err.orig).lower():
            return DuplicateBarcode(barcode)
        return DuplicateSku(sku)

    # -- reads -------------------------------------------------------------

    def list_products(self) -> List[Product]:
        return self.repo.find_all()

    def get_product(self, product_id: int) -> Product:
        return self._require(product_id)

    def get_by_sku(self, sku: str) -> Product:
        p = self.repo.find_by_sku(sku)
        if not p:
            raise ProductNotFound(f"Product not found with SKU: {sku}")
        return p

    def get_by_barcode(self, barcode: str) -> Product:
        p = self.repo.find_by_barcode(barcode)
        if not p:
            raise ProductNotFound(f"Product not found with barcode: {barcode}")
        return p

    def search(self, term: str) -> List[Product]:
        return self.repo.search(term)

    def by_category(self, category: str) -> List[Product]:
        return self.repo.find_by_category(category)

    def by_supplier(self, supplier: str) -> List[Product]:
        return self.repo.find_by_supplier(supplier)

    def low_stock(self) -> List[Product]:
        return self.repo.find_low_stock()

    def out_of_stock(self) -> List[Product]:
        return self.repo.find_out_of_stock()

    def by_price_range(self, min_price: Decimal, max_price: Decimal) -> List[Product]:
        if min_price > max_price:
            raise InvalidPriceRange(min_price, max_price)
        return self.repo.find_by_price_range(min_price, max_price)

    def total_inventory_value(self) -> Decimal:
        return self.repo.total_inventory_value()

    def inventory_stats(self) -> InventoryStats:
        """
        Recompute the dashboard figures from the current table contents.
        Nothing is cached; each call issues the four underlying queries.
        """
        all_products = self.repo.find_all()
        low = self.repo.find_low_stock()
        out = self.repo.find_out_of_stock()
        total_value = self.repo.total_inventory_value()
        return InventoryStats(
            total_products=len(all_products),
            low_stock_products=len(low),
            out_of_stock_products=len(out),
            total_value=total_value,
            total_quantity=sum(p.quantity for p in all_products),
        )

    def category_summary(self) -> List[CategorySummary]:
        return [
            CategorySummary(category=c, product_count=n, total_quantity=q)
            for c, n, q in self.repo.category_summary()
        ]

    def supplier_summary(self) -> List[SupplierSummary]:
        return [
            SupplierSummary(supplier=s, product_count=n)
            for s, n in self.repo.supplier_summary()
        ]

    # -- writes ------------------------------------------------------------

    def create_product(self, draft) -> Product:
        self._validate(draft)
        barcode = normalize_barcode(draft.barcode)

        if self.repo.find_by_sku(draft.sku):
            log.warning("create rejected: duplicate sku %r", draft.sku)
            raise DuplicateSku(draft.sku)
        if barcode and self.repo.find_by_barcode(barcode):
            log.warning("create rejected: duplicate barcode %r", barcode)
            raise DuplicateBarcode(barcode)

        now = self._now()
        p = Product(
            name=draft.name,
            sku=draft.sku,
            category=draft.category,
            quantity=draft.quantity,
            price=Decimal(str(draft.price)),
            supplier=draft.supplier,
            barcode=barcode,
            min_stock_level=draft.min_stock_level,
            created_at=now,
            updated_at=now,
        )
        self._save(p)
        self._commit(p.sku, barcode)
        self.repo.refresh(p)
        log.info("created product id=%s sku=%s", p.id, p.sku)
        return p

    def update_product(self, product_id: int, draft) -> Product:
        """Full replace of every mutable field; id and created_at are kept."""
        p = self._require(product_id)
        self._validate(draft)
        barcode = normalize_barcode(draft.barcode)

        if self.repo.exists_sku_excluding(draft.sku, product_id):
            log.warning("update of id=%s rejected: duplicate sku %r", product_id, draft.sku)
            raise DuplicateSku(draft.sku)
        if barcode and self.repo.exists_barcode_excluding(barcode, product_id):
            log.warning("update of id=%s rejected: duplicate barcode %r", product_id, barcode)
            raise DuplicateBarcode(barcode)

        p.name = draft.name
        p.sku = draft.sku
        p.category = draft.category
        p.quantity = draft.quantity
        p.price = Decimal(str(draft.price))
        p.supplier = draft.supplier
        p.barcode = barcode
        p.min_stock_level = draft.min_stock_level
        p.updated_at = self._now()

        self._save(p)
        self._commit(p.sku, barcode)
        self.repo.refresh(p)
        log.info("updated product id=%s sku=%s", p.id, p.sku)
        return p

    def delete_product(self, product_id: int) -> None:
        p = self._require(product_id)
        sku, barcode = p.sku, p.barcode
        self.repo.delete_by_id(p.id)
        self._commit(sku, barcode)
        log.info("deleted product id=%s", product_id)

    def update_stock(self, product_id: int, new_quantity: int) -> Product:
        p = self._require(product_id)
        if new_quantity is None or not 0 <= new_quantity <= MAX_COUNT:
            log.warning("stock update of id=%s rejected: quantity=%s", product_id, new_quantity)
            raise InvalidQuantity(new_quantity)

        p.quantity = new_quantity
        p.updated_at = self._now()
        self._save(p)
        self._commit(p.sku, p.barcode)
        self.repo.refresh(p)
        log.info("stock for id=%s set to %s", product_id, new_quantity)
        return p
