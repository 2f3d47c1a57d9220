"""GiftShop storefront command line: order tracking and admin actions.

Talks to the order store configured by ``STOREFRONT_API_BASE_URL``.

Usage:
    python -m storefront.cli track TRK1700000000000AB12
    python -m storefront.cli track TRK1700000000000AB12 --watch
    python -m storefront.cli orders --status pending
    python -m storefront.cli set-status <order_id> confirmed
    python -m storefront.cli add-note <order_id> "Customer asked for evening delivery"
"""

import argparse
import asyncio
import sys

from protean.exceptions import ValidationError

from shared.status import IllegalTransition, OrderStatus
from storefront.errors import OrderNotFound, TransportFailure
from storefront.session import StorefrontSession
from storefront.utils.logging import configure_logging


def format_order(order) -> str:
    lines = [
        f"{order.tracking_id}  [{order.status.value}] {order.status_label}",
        f"  {order.customer_name} {order.phone}, {order.thana}, {order.district}",
    ]
    for item in order.items:
        amount = item.line_total if item.line_total is not None else item.unit_price * item.quantity
        lines.append(f"  - {item.name} x{item.quantity} = {amount}")
    lines.append(f"  total {order.total}, delivery {order.delivery_fee}, due on delivery {order.remaining_on_delivery}")
    lines.extend(f"  note {note}" for note in order.notes)
    return "\n".join(lines)


def format_timeline(order) -> str:
    marks = []
    for step in order.timeline():
        mark = ">" if step.current else ("x" if step.completed else " ")
        marks.append(f"[{mark}] {step.label}")
    return "  ".join(marks)


async def track(session, tracking_id, watch=False):
    order = await session.tracking.resolve(tracking_id)
    print(format_order(order))
    print(format_timeline(order))
    if not watch or order.is_terminal:
        return

    def on_update(updated):
        if updated != order:
            print(f"status now {updated.status.value}: {updated.status_label}")

    def on_error(exc):
        print(f"tracking problem: {exc}", file=sys.stderr)

    subscription = session.tracking.watch(tracking_id, on_update, on_error)
    try:
        await subscription.wait()
    finally:
        await subscription.stop()


async def list_orders(session, status=None):
    orders = await session.admin.list_orders(status)
    for order in orders:
        print(f"{order.id}  {order.tracking_id}  {order.status.value:<10}  {order.total:>7}  {order.customer_name}")
    print(f"{len(orders)} order(s)")


async def set_status(session, order_id, status):
    order = await session.admin.change_status(order_id, status)
    print(format_order(order))


async def add_note(session, order_id, note):
    order = await session.admin.add_note(order_id, note)
    print(format_order(order))


async def run(args, session=None):
    session = session or StorefrontSession.from_settings()
    async with session:
        if args.command == "track":
            await track(session, args.tracking_id, watch=args.watch)
        elif args.command == "orders":
            await list_orders(session, args.status)
        elif args.command == "set-status":
            await set_status(session, args.order_id, args.status)
        elif args.command == "add-note":
            await add_note(session, args.order_id, args.note)


def build_parser() -> argparse.ArgumentParser:
    statuses = [status.value for status in OrderStatus]

    parser = argparse.ArgumentParser(description="GiftShop order tracking and administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    track_parser = subparsers.add_parser("track", help="Show an order by tracking id")
    track_parser.add_argument("tracking_id")
    track_parser.add_argument("--watch", action="store_true", help="Keep polling and print status changes")

    orders_parser = subparsers.add_parser("orders", help="List orders, newest first")
    orders_parser.add_argument("--status", choices=statuses, help="Only orders in this status")

    status_parser = subparsers.add_parser("set-status", help="Move an order to a new status")
    status_parser.add_argument("order_id")
    status_parser.add_argument("status", choices=statuses)

    note_parser = subparsers.add_parser("add-note", help="Append an admin note to an order")
    note_parser.add_argument("order_id")
    note_parser.add_argument("note")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)
    except OrderNotFound as exc:
        print(f"Not found: {exc.reference}", file=sys.stderr)
        sys.exit(1)
    except IllegalTransition as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)
    except ValidationError as exc:
        print(f"Invalid input: {exc.messages}", file=sys.stderr)
        sys.exit(1)
    except TransportFailure as exc:
        print(f"Order store error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
