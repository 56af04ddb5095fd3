#!/usr/bin/env python
"""Run one startup sync and print every bound selection control.

Usage:
    python scripts/sync_snapshot.py
    python scripts/sync_snapshot.py --base-url http://localhost:8080
    python scripts/sync_snapshot.py --metrics
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.observability.metrics import get_metrics
from models.records import TransactionalCollection
from models.reference import ReferenceCategory
from refsync.reports import stock_rows
from refsync.selection import SelectionControl
from refsync.synchronizer import ReferenceSynchronizer
from warehouse_client import configure_logging_from_env, load_api_config
from connectors.warehouse_api import WarehouseApiClient

BOUND_SOURCES = [c.value for c in ReferenceCategory] + [
    TransactionalCollection.ORE_BATCHES.value,
    TransactionalCollection.EQUIPMENT.value,
    TransactionalCollection.ORDERS.value,
    TransactionalCollection.SHIPMENTS.value,
]


def print_control(control: SelectionControl) -> None:
    print(f"{control.name} ({len(control.options) - 1} items)")
    for option in control.options:
        marker = "*" if option.value == control.value else " "
        print(f"  {marker} [{option.value or '-'}] {option.label}")


async def snapshot(args) -> int:
    config = load_api_config()
    if args.base_url:
        config.base_url = args.base_url

    async with WarehouseApiClient(config) as client:
        sync = ReferenceSynchronizer(client)
        controls = []
        for source in BOUND_SOURCES:
            control = SelectionControl(source)
            sync.context.bind(control, source)
            controls.append(control)

        ok = await sync.start()

    for control in controls:
        print_control(control)

    print("\nStock")
    for row in stock_rows(sync.context.collections[TransactionalCollection.ORE_BATCHES], sync.context.reference_set):
        flag = "!" if row.critical else " "
        print(f"  {flag} {row.ore_type:<20} {row.warehouse:<20} {row.quantity:>10} {row.status}")

    if args.metrics:
        print("\nMetrics")
        print(json.dumps(get_metrics().get_summary(), indent=2))

    return 0 if ok else 1


def main():
    parser = argparse.ArgumentParser(description="Print a snapshot of the synchronized dropdowns")
    parser.add_argument("--base-url", help="Backend root URL (overrides WAREHOUSE_API_URL)")
    parser.add_argument("--metrics", action="store_true", help="Also print fetch metrics")
    args = parser.parse_args()

    configure_logging_from_env()
    sys.exit(asyncio.run(snapshot(args)))


if __name__ == "__main__":
    main()
