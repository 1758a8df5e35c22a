"""Entry point for the table ordering Textual app."""

from __future__ import annotations

import argparse
import logging

from tableorder.cafe_app import TableOrderApp
from tableorder.config import DEBUG_LOG_PATH, STATE_DB_PATH
from tableorder.services import build_services
from tableorder.session import order_id_from_url, table_from_url


def configure_logging(path: str = DEBUG_LOG_PATH) -> None:
    """Send logs to a file; Textual owns the terminal."""
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tableorder", description="Café table ordering client")
    parser.add_argument("--table", help="table identifier, e.g. H3")
    parser.add_argument("--url", help="scanned menu or order-status link")
    parser.add_argument("--order", help="order id to track")
    parser.add_argument("--admin", action="store_true", help="open the staff board")
    parser.add_argument("--db", default=STATE_DB_PATH, help="snapshot database path")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    args = parse_args(argv)
    configure_logging()

    url_table = args.table
    order_id = args.order
    if args.url:
        url_table = url_table or table_from_url(args.url)
        order_id = order_id or order_id_from_url(args.url)

    services = build_services(args.db)
    TableOrderApp(services, url_table=url_table, order_id=order_id, admin=args.admin).run()


if __name__ == "__main__":
    main()
