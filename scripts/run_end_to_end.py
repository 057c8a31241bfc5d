#!/usr/bin/env python3
"""
End-to-end smoke run against the configured record store.

Runs the save -> save -> list -> save -> delete -> list sequence, awaiting
each step before the next, and checks the results. Waits between writes and
reads because the backend is eventually consistent.

Usage:
    python scripts/run_end_to_end.py [--pause SECONDS]

WARNING: deletes every Customer record in the configured zone first.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add repo root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


logger = logging.getLogger(__name__)


def _by_name(customer) -> str:
    return customer.customer_name or ""


async def run_scenario(pause_seconds: float) -> int:
    from recordstore.client import create_customer_client
    from recordstore.models.customer import Customer

    async with create_customer_client() as client:
        deleted = await client.delete_all()
        logger.info(f"Removed {deleted} leftover customers")

        first = Customer.new("Apple", "Tim Cook", "tim@apple.com")
        second = Customer.new("Google", "Sundar Pichai", "sundar@google.com")
        await client.save(first)
        await client.save(second)
        await asyncio.sleep(pause_seconds)

        customers = sorted(await client.list_all(), key=_by_name)
        if [c.guid for c in customers] != [first.guid, second.guid]:
            logger.error(f"Expected 2 customers after insert, got {len(customers)}")
            return 1

        first.customer_name = "iApple"
        await client.save(first)
        await client.delete(second)
        await asyncio.sleep(pause_seconds)

        customers = await client.list_all()
        if len(customers) != 1 or customers[0] != first:
            logger.error(f"Unexpected customers after update/delete: {customers}")
            return 1

    logger.info("✓ End-to-end scenario passed")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the record store end-to-end scenario")
    parser.add_argument(
        "--pause",
        type=float,
        default=5.0,
        help="Seconds to wait between writes and reads (default: 5)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    exit_code = asyncio.run(run_scenario(pause_seconds=args.pause))
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
