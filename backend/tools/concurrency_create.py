import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import requests
import concurrent.futures
import argparse
from collections import Counter
from uuid import uuid4

BASE = os.environ.get("INVENTORY_BASE", "http://127.0.0.1:8000")


def create_task(i, payload):
    try:
        r = requests.post(f"{BASE}/api/products", json=payload, timeout=10)
        return (i, r.status_code, r.text)
    except requests.RequestException as e:
        return (i, "ERR", str(e))


def build_payload(sku, barcode=None):
    return {
        "name": f"Race probe {sku}",
        "sku": sku,
        "category": "Probe",
        "quantity": 1,
        "price": "1.00",
        "supplier": "Probe Supplier",
        "barcode": barcode,
        "minStockLevel": 0,
    }


def run_create_concurrent(workers, sku, barcode=None):
    """
    Fire `workers` creates for the same SKU at once. The storage unique
    constraint must let exactly one through; the others come back as 400.
    """
    print(f"Running create race: workers={workers}, sku={sku}, barcode={barcode}")
    payload = build_payload(sku, barcode)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(create_task, i, payload) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r)
    histogram = Counter(r[1] for r in results)
    print("Status histogram:", dict(histogram))
    if histogram.get(201, 0) != 1:
        print("UNEXPECTED: expected exactly one 201")
        return 1
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent duplicate-create probe.")
    parser.add_argument("--sku", default=None, help="SKU to race on (random when omitted)")
    parser.add_argument("--barcode", default=None)
    parser.add_argument("--workers", type=int, default=8)
    args = parser.parse_args()

    sku = args.sku or f"RACE-{uuid4().hex[:8].upper()}"
    sys.exit(run_create_concurrent(args.workers, sku, args.barcode))
