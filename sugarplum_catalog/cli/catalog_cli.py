"""
Command-line interface for the catalog service.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

from sugarplum_catalog.config.app_config import SALES_CHANNELS
from sugarplum_catalog.exceptions import CatalogError
from sugarplum_catalog.main import CatalogApp

# Exit code for a cart the current stock cannot satisfy
EXIT_CONFLICT = 2


def parse_pair(value: str) -> Tuple[str, str]:
    """
    Parse an ``IDENTIFIER=QUANTITY`` argument.

    Args:
        value (str): The raw argument

    Returns:
        Tuple[str, str]: Identifier and quantity text
    """
    identifier, sep, quantity = value.rpartition("=")
    if not sep or not identifier.strip() or not quantity.strip():
        raise argparse.ArgumentTypeError(f"expected IDENTIFIER=QUANTITY, got {value!r}")
    return identifier.strip(), quantity.strip()


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args (Optional[List[str]]): Command-line arguments (uses sys.argv if None)

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Sugarplum Catalog - Cached apparel catalog and inventory for the shop"
    )

    parser.add_argument(
        "--flags-path",
        type=str,
        help="Product flag JSON file (default: PRODUCT_FLAGS_PATH or productConfig.json)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    products = subparsers.add_parser("products", help="List storefront products")
    products.add_argument("--channel", choices=SALES_CHANNELS, default="online")

    subparsers.add_parser("admin-products", help="List every product with stock totals and flags")

    count_sheet = subparsers.add_parser("count-sheet", help="List one row per variation for counting")
    count_sheet.add_argument("--search", type=str, help="Match item name, SKU or color")
    count_sheet.add_argument("--subcategory", type=str, help="Only this subcategory")
    count_sheet.add_argument("--hide-zero", action="store_true", help="Hide variations with no stock")

    sync = subparsers.add_parser("sync", help="Force a refresh from the vendor")
    sync.add_argument("tier", choices=["catalog", "inventory"])

    check = subparsers.add_parser("check", help="Check a cart against fresh inventory")
    check.add_argument("lines", nargs="+", type=parse_pair, metavar="VARIATION_ID=QTY")

    apply_counts = subparsers.add_parser("apply-counts", help="Send counted stock changes to the vendor")
    apply_counts.add_argument("updates", nargs="+", type=parse_pair, metavar="ID=QTY")
    apply_counts.add_argument(
        "--set",
        action="store_true",
        help="Treat quantities as absolute counts instead of deltas"
    )

    export = subparsers.add_parser("export", help="Export the count sheet as CSV")
    export.add_argument("--output-dir", type=str, help="Base directory for the export")

    subparsers.add_parser("status", help="Show cache status")
    subparsers.add_parser("serve", help="Keep the cache fresh until interrupted")

    # Parse arguments
    return parser.parse_args(args)


def create_app(parsed_args: argparse.Namespace) -> CatalogApp:
    log_level = logging.DEBUG if parsed_args.verbose else logging.INFO
    return CatalogApp(flags_path=parsed_args.flags_path, log_level=log_level)


async def run_command(app: CatalogApp, parsed_args: argparse.Namespace) -> Tuple[int, Any]:
    """
    Run one subcommand against the application.

    Args:
        app (CatalogApp): The application
        parsed_args (argparse.Namespace): Parsed arguments

    Returns:
        Tuple[int, Any]: Exit code and the JSON-serializable output
    """
    command = parsed_args.command

    if command == "products":
        return 0, await app.listing.list_storefront(parsed_args.channel)

    if command == "admin-products":
        return 0, await app.listing.list_admin_products()

    if command == "count-sheet":
        rows = await app.listing.list_count_sheet(
            search=parsed_args.search,
            subcategory=parsed_args.subcategory,
            show_zero=not parsed_args.hide_zero,
        )
        return 0, rows

    if command == "sync":
        if parsed_args.tier == "catalog":
            return 0, await app.sync_catalog()
        return 0, await app.sync_inventory()

    if command == "check":
        lines = [{"variation_id": vid, "quantity": qty} for vid, qty in parsed_args.lines]
        result = await app.validate_and_reserve_none(lines)
        return (0 if result.ok else EXIT_CONFLICT), result.to_dict()

    if command == "apply-counts":
        key = "absolute" if parsed_args.set else "delta"
        updates = [{"identifier": identifier, key: qty} for identifier, qty in parsed_args.updates]
        result = await app.apply_inventory_counts(updates)
        return 0, result.to_dict()

    if command == "export":
        return 0, {"output_dir": await app.export_count_sheet(parsed_args.output_dir)}

    if command == "status":
        return 0, app.status()

    if command == "serve":
        await app.serve()
        return 0, None

    raise ValueError(f"Unknown command: {command}")


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args (Optional[List[str]]): Command-line arguments (uses sys.argv if None)

    Returns:
        int: Exit code (0 for success, 2 for a rejected cart, 1 for errors)
    """
    # Parse arguments
    parsed_args = parse_args(args)

    app = create_app(parsed_args)
    try:
        exit_code, output = asyncio.run(run_command(app, parsed_args))
    except KeyboardInterrupt:
        return 0
    except (CatalogError, ValueError) as e:
        error: Dict[str, Any] = {"error": str(e)}
        errors = getattr(e, "errors", None)
        if errors:
            error["vendor_errors"] = errors
        applied_changes = getattr(e, "applied_changes", 0)
        if applied_changes:
            error["applied_changes"] = applied_changes
        print(json.dumps(error), file=sys.stderr)
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        app.close()

    if output is not None:
        print(json.dumps(output, indent=2, default=str))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
