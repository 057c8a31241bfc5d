"""
Command line access to the customer record store.

Usage:
    recordstore ensure-zone
    recordstore list [--json]
    recordstore save [--guid GUID] [--name NAME] [--contact NAME] [--email EMAIL]
    recordstore delete GUID
    recordstore purge
    recordstore reset-zone-flag

Backend, zone and local settings come from the environment (see config.py).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from recordstore.backend.base import BackendError
from recordstore.client import CustomerRecordClient, create_customer_client
from recordstore.config import get_settings
from recordstore.models.customer import Customer
from recordstore.observability.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recordstore",
        description="Manage Customer records in the remote record store",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("ensure-zone", help="Create the customer zone if not yet created")

    list_parser = commands.add_parser("list", help="List all customers")
    list_parser.add_argument("--json", action="store_true", help="Print records as JSON")

    save_parser = commands.add_parser(
        "save",
        help="Create or update a customer",
        description="Create a customer, or update one by guid. Options left out keep "
        "their stored values.",
    )
    save_parser.add_argument("--guid", help="Existing customer guid (a new one is minted if omitted)")
    save_parser.add_argument("--name", dest="customer_name", help="Customer name")
    save_parser.add_argument("--contact", dest="contact_name", help="Contact name")
    save_parser.add_argument("--email", dest="contact_email", help="Contact email")

    delete_parser = commands.add_parser("delete", help="Delete a customer by guid")
    delete_parser.add_argument("guid", help="Customer guid")

    commands.add_parser("purge", help="Delete every customer in the zone")
    commands.add_parser(
        "reset-zone-flag", help="Forget that the zone was created (it is recreated on next use)"
    )
    return parser


async def _find(client: CustomerRecordClient, guid: str) -> Customer | None:
    for customer in await client.list_all():
        if customer.guid == guid:
            return customer
    return None


async def run_command(args: argparse.Namespace, client: CustomerRecordClient) -> int:
    if args.command == "ensure-zone":
        await client.ensure_zone_exists()
        print(f"Zone {client.zone_name} ready")

    elif args.command == "list":
        customers = await client.list_all()
        if args.json:
            print(json.dumps([c.model_dump() for c in customers], indent=2))
        else:
            for c in customers:
                print(f"{c.guid}\t{c.customer_name or ''}\t{c.contact_name or ''}\t{c.contact_email or ''}")

    elif args.command == "save":
        fields = {
            "customer_name": args.customer_name,
            "contact_name": args.contact_name,
            "contact_email": args.contact_email,
        }
        if args.guid:
            customer = await _find(client, args.guid) or Customer(guid=args.guid)
            for name, value in fields.items():
                if value is not None:
                    setattr(customer, name, value)
        else:
            customer = Customer.new(**fields)
        await client.save(customer)
        print(customer.guid)

    elif args.command == "delete":
        await client.delete(Customer(guid=args.guid))
        print(f"Deleted {args.guid}")

    elif args.command == "purge":
        deleted = await client.delete_all()
        print(f"Deleted {deleted} customers")

    elif args.command == "reset-zone-flag":
        client.reset_zone_flag()
        print(f"Zone flag {client.created_flag_key} cleared")

    return 0


async def _run(args: argparse.Namespace) -> int:
    async with create_customer_client() as client:
        try:
            return await run_command(args, client)
        except BackendError as e:
            logger.error(f"{e.operation or args.command} failed: {e}")
            return 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(
        log_level=settings.logging.level,
        json_output=settings.logging.json_output,
        colorized=settings.logging.colorized,
        stream=sys.stderr,
    )

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
