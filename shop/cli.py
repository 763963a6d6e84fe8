"""Command-line maintenance tasks for the hosted catalog."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from shop.config import FALLBACK_DB_PATH, LOG_LEVEL, SITE_CONFIG_ID
from shop.exceptions import ShopError
from shop.fallback import FallbackStore
from shop.logging_config import get_logger, setup_logging
from shop.remote import AuthClient, RemoteStoreClient
from shop.state import ShopStore

__all__ = ["main", "parse_args", "check_connection"]

logger = get_logger("cli")


def check_connection(remote: RemoteStoreClient) -> bool:
    """Read one collection, then write and delete a probe row."""
    print(f"Testing connection to {remote.url} ...")
    try:
        rows = remote.select("collections", limit=1)
        print(f"  read ok ({len(rows)} row)")
    except ShopError as e:
        print(f"  read FAILED: {e}")
        return False

    probe = f"test_collection_{int(time.time() * 1000)}"
    try:
        remote.insert("collections", {"name": probe, "description": "connection probe"})
        print("  write ok")
    except ShopError as e:
        print(f"  write FAILED: {e}")
        return False

    try:
        remote.delete("collections", filters={"name": probe})
        print("  cleanup ok")
    except ShopError as e:
        print(f"  cleanup FAILED (remove '{probe}' by hand): {e}")
        return False
    return True


def show_config(remote: RemoteStoreClient) -> int:
    rows = remote.select("site_config", filters={"id": SITE_CONFIG_ID})
    if not rows:
        print("No site_config row stored yet (defaults will be seeded on first load).")
        return 0
    print(json.dumps(rows[0], indent=2, ensure_ascii=False))
    return 0


def export_snapshot(store: ShopStore, output: str) -> int:
    store.load()
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(store.snapshot(), indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Exported {len(store.products)} products from {store.loaded_from} to {path}")
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Maintenance tasks for the jewelry catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check that the data service is reachable and writable
  python -m shop.cli check

  # Print the stored branding row
  python -m shop.cli show-config

  # Dump the current catalog to JSON
  python -m shop.cli export --output data/catalog.json

  # Wipe everything and restore the built-in catalog
  python -m shop.cli reset --yes

  # Create the editor account (needs SUPABASE_SERVICE_KEY)
  python -m shop.cli create-admin --email editor@example.com --password secret
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument(
        "--fallback-db",
        default=FALLBACK_DB_PATH,
        help=f"Local snapshot database (default: {FALLBACK_DB_PATH})",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Test read and write access")
    sub.add_parser("show-config", help="Print the stored site configuration")

    export = sub.add_parser("export", help="Export the loaded catalog as JSON")
    export.add_argument("--output", "-o", required=True, help="Output JSON file")

    reset = sub.add_parser("reset", help="Reset the remote catalog to the defaults")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    admin = sub.add_parser("create-admin", help="Create a confirmed editor account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else getattr(logging, LOG_LEVEL, logging.INFO)
    setup_logging(level=level)

    if args.command == "create-admin":
        auth = AuthClient()
        try:
            user = auth.create_user(args.email, args.password)
        except ShopError as e:
            print(f"Error creating user: {e}")
            return 1
        finally:
            auth.close()
        print(f"Admin user created: {user.email}")
        return 0

    remote = RemoteStoreClient()
    try:
        if args.command == "check":
            return 0 if check_connection(remote) else 1
        if args.command == "show-config":
            return show_config(remote)

        store = ShopStore(remote, fallback=FallbackStore(args.fallback_db))
        if args.command == "export":
            return export_snapshot(store, args.output)
        if args.command == "reset":
            if not args.yes:
                print("Refusing to reset without --yes")
                return 1
            store.reset_to_default(confirm=True)
            print("Catalog reset to defaults.")
            return 0
    except ShopError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        remote.close()
    return 1


if __name__ == "__main__":
    sys.exit(main())
