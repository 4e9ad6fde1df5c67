from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.exceptions import (
    DuplicateBarcode,
    DuplicateSku,
    InvalidPriceRange,
    InvalidProduct,
    InvalidQuantity,
    InventoryException,
    ProductNotFound,
)
from app.schemas.product_schema import (
    CategorySummaryOut,
    InventoryStatsOut,
    MessageOut,
    ProductIn,
    ProductOut,
    StockUpdateIn,
    SupplierSummaryOut,
    TotalValueOut,
)
from app.services.inventory_service import InventoryService

router = APIRouter(tags=["products"])


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, ProductNotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidProduct):
        return HTTPException(
            status_code=400, detail=[v.as_dict() for v in e.violations]
        )
    if isinstance(e, (DuplicateSku, DuplicateBarcode, InvalidQuantity, InvalidPriceRange)):
        return HTTPException(status_code=400, detail=str(e))
    # StorageUnavailable and anything we did not anticipate
    return HTTPException(status_code=500, detail="Internal server error")


def _service(db: Session = Depends(get_db)) -> InventoryService:
    return InventoryService(db)


# Static paths are declared before "/{product_id}" so they are not shadowed.


@router.get("", response_model=List[ProductOut], summary="List products")
def list_products(svc: InventoryService = Depends(_service)):
    try:
        return svc.list_products()
    except InventoryException as e:
        raise _http_error(e)


@router.get("/search", response_model=List[ProductOut], summary="Search by name or SKU")
def search_products(
    q: str = Query(..., description="search term"),
    svc: InventoryService = Depends(_service),
):
    try:
        return svc.search(q)
    except InventoryException as e:
        raise _http_error(e)


@router.get("/low-stock", response_model=List[ProductOut])
def low_stock(svc: InventoryService = Depends(_service)):
    try:
        return svc.low_stock()
    except InventoryException as e:
        raise _http_error(e)


@router.get("/out-of-stock", response_model=List[ProductOut])
def out_of_stock(svc: InventoryService = Depends(_service)):
    try:
        return svc.out_of_stock()
    except InventoryException as e:
        raise _http_error(e)


@router.get("/price-range", response_model=List[ProductOut])
def price_range(
    min_price: Decimal = Query(..., alias="minPrice"),
    max_price: Decimal = Query(..., alias="maxPrice"),
    svc: InventoryService = Depends(_service),
):
    try:
        return svc.by_price_range(min_price, max_price)
    except InventoryException as e:
        raise _http_error(e)


@router.get("/stats", response_model=InventoryStatsOut, summary="Inventory statistics")
def inventory_stats(svc: InventoryService = Depends(_service)):
    try:
        return InventoryStatsOut.model_validate(svc.inventory_stats())
    except InventoryException as e:
        raise _http_error(e)


@router.get("/total-value", response_model=TotalValueOut)
def total_value(svc: InventoryService = Depends(_service)):
    try:
        return TotalValueOut(total_value=svc.total_inventory_value())
    except InventoryException as e:
        raise _http_error(e)


@router.get("/summary/categories", response_model=List[CategorySummaryOut])
def category_summary(svc: InventoryService = Depends(_service)):
    try:
        return [CategorySummaryOut.model_validate(s) for s in svc.category_summary()]
    except InventoryException as e:
        raise _http_error(e)


@router.get("/summary/suppliers", response_model=List[SupplierSummaryOut])
def supplier_summary(svc: InventoryService = Depends(_service)):
    try:
        return [SupplierSummaryOut.model_validate(s) for s in svc.supplier_summary()]
    except InventoryException as e:
        raise _http_error(e)


@router.get("/category/{category}", response_model=List[ProductOut])
def by_category(category: str, svc: InventoryService = Depends(_service)):
    try:
        return svc.by_category(category)
    except InventoryException as e:
        raise _http_error(e)


@router.get("/supplier/{supplier}", response_model=List[ProductOut])
def by_supplier(supplier: str, svc: InventoryService = Depends(_service)):
    try:
        return svc.by_supplier(supplier)
    except InventoryException as e:
        raise _http_error(e)


@router.get("/sku/{sku}", response_model=ProductOut, summary="Get product by SKU")
def get_by_sku(sku: str, svc: InventoryService = Depends(_service)):
    try:
        return svc.get_by_sku(sku)
    except InventoryException as e:
        raise _http_error(e)


@router.get("/barcode/{barcode}", response_model=ProductOut, summary="Get product by barcode")
def get_by_barcode(barcode: str, svc: InventoryService = Depends(_service)):
    try:
        return svc.get_by_barcode(barcode)
    except InventoryException as e:
        raise _http_error(e)


@router.post("", response_model=ProductOut, status_code=201, summary="Create product")
def create_product(payload: ProductIn, svc: InventoryService = Depends(_service)):
    try:
        return svc.create_product(payload)
    except InventoryException as e:
        raise _http_error(e)


@router.get("/{product_id}", response_model=ProductOut, summary="Get product by id")
def get_product(product_id: int, svc: InventoryService = Depends(_service)):
    try:
        return svc.get_product(product_id)
    except InventoryException as e:
        raise _http_error(e)


@router.put("/{product_id}", response_model=ProductOut, summary="Replace product")
def update_product(
    product_id: int, payload: ProductIn, svc: InventoryService = Depends(_service)
):
    try:
        return svc.update_product(product_id, payload)
    except InventoryException as e:
        raise _http_error(e)


@router.delete("/{product_id}", response_model=MessageOut, summary="Delete product")
def delete_product(product_id: int, svc: InventoryService = Depends(_service)):
    try:
        svc.delete_product(product_id)
    except InventoryException as e:
        raise _http_error(e)
    return {"message": "Product deleted successfully"}


@router.put("/{product_id}/stock", response_model=ProductOut, summary="Set stock quantity")
def update_stock(
    product_id: int, payload: StockUpdateIn, svc: InventoryService = Depends(_service)
):
    try:
        return svc.update_stock(product_id, payload.quantity)
    except InventoryException as e:
        raise _http_error(e)
