#!/usr/bin/env python3
"""
Seed products from a JSON file (scripts/sample_products.json by default).
The file may be a list of product entries or an object with an "items" list.
Entries use the same field names as the API (camelCase or snake_case).

Existing SKUs are skipped, so the script can be re-run safely.

Usage:
    python scripts/seed_products.py --file scripts/sample_products.json
"""
import json
import argparse
import logging
import sys
import os

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pydantic import ValidationError

from app.db import SessionLocal, init_db
from app.exceptions import DuplicateBarcode, DuplicateSku, InvalidProduct
from app.schemas.product_schema import ProductIn
from app.services.inventory_service import InventoryService

log = logging.getLogger("inventory.seed")

DEFAULT_SOURCE = os.path.join(os.path.dirname(__file__), "sample_products.json")


def load_entries(path: str):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        # if JSON is an object with an items list
        if "items" in data and isinstance(data["items"], list):
            return data["items"]
        return list(data.values())
    if isinstance(data, list):
        return data
    return []


def seed_from_file(path: str, db=None):
    """
    Create every valid entry of `path` that is not already present.
    Returns a dict of counts: created / skipped / invalid.
    """
    entries = load_entries(path)
    own_session = db is None
    db = db or SessionLocal()
    svc = InventoryService(db)
    counts = {"created": 0, "skipped": 0, "invalid": 0}
    try:
        for entry in entries:
            try:
                draft = ProductIn.model_validate(entry)
            except ValidationError as e:
                log.warning("invalid entry %r: %s", entry.get("sku"), e.errors())
                counts["invalid"] += 1
                continue
            try:
                svc.create_product(draft)
                counts["created"] += 1
            except (DuplicateSku, DuplicateBarcode) as e:
                log.info("skipping %s: %s", draft.sku, e)
                counts["skipped"] += 1
            except InvalidProduct as e:
                log.warning("invalid entry %s: %s", draft.sku, [v.as_dict() for v in e.violations])
                counts["invalid"] += 1
    finally:
        if own_session:
            db.close()
    return counts


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=DEFAULT_SOURCE, help="Path to product json (list or {items: [...]})")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate the products table first")
    args = parser.parse_args()
    if not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    init_db(reset=args.reset)
    result = seed_from_file(args.file)
    print("Seeded products:", result)
