"""
CLI for OrderHub.
Initialise or seed the database, print dashboard stats, or start the server.
"""

import sys
import json
import argparse


def _bootstrap():
    from orderhub.core.config import get_config
    from orderhub.core.logging import setup_logging_from_config

    config = get_config()
    setup_logging_from_config(config)
    return config


def cmd_init_db(args):
    """Create tables."""
    from orderhub.core.database import get_database

    config = _bootstrap()
    get_database()
    print(f"[OK] Database ready at {config.db_path}")


def cmd_seed(args):
    """Insert demo marketplaces, products, customers and orders."""
    from orderhub.core.database import get_database
    from orderhub.marketplaces.sync import get_stock_sync
    from orderhub.orders.service import OrderService
    from orderhub.seed import seed_database

    _bootstrap()
    db = get_database()
    stock_sync = get_stock_sync()
    try:
        result = seed_database(db, OrderService.from_config(db, stock_sync))
    finally:
        stock_sync.shutdown(wait=True)

    if result['skipped']:
        print("[SEED] Database already has data, nothing to do")
        return

    print(f"\n[OK] Seed complete!")
    print(f"   Marketplaces: {result['marketplaces']}")
    print(f"   Products: {result['products']}")
    print(f"   Customers: {result['customers']}")
    print(f"   Orders: {result['orders']}")


def cmd_stats(args):
    """Print dashboard statistics as JSON."""
    from orderhub.core.database import get_database
    from orderhub.analytics.stats import get_sales_stats
    from orderhub.api.schemas import SalesStats

    _bootstrap()
    stats = SalesStats(**get_sales_stats(get_database()))
    print(json.dumps(stats.model_dump(by_alias=True), indent=2))


def cmd_serve(args):
    """Run the API under uvicorn; config and logging load on app startup."""
    import uvicorn

    base = f"http://{args.host}:{args.port}"
    print(f"[SERVER] OrderHub API on {base}/api  (docs: {base}/docs)")
    uvicorn.run("orderhub.main:app", host=args.host, port=args.port, reload=args.reload)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orderhub",
        description="OrderHub command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  orderhub init-db
  orderhub seed
  orderhub stats
  orderhub serve --port 8080 --reload
        """
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser("init-db", help="Create the SQLite schema").set_defaults(func=cmd_init_db)
    subparsers.add_parser("seed", help="Load demo data into an empty database").set_defaults(func=cmd_seed)
    subparsers.add_parser("stats", help="Print dashboard statistics as JSON").set_defaults(func=cmd_stats)

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: %(default)s)")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: %(default)s)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    args.func(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
