"""Storefront management CLI.

Usage:
    python src/manage.py seed-orders              # 50 demo orders
    python src/manage.py seed-orders --count 10   # A smaller history
    python src/manage.py seed-orders --seed 42    # Reproducible data

Orders are written to the domain's default database. With the in-memory
provider configured in ``pyproject.toml`` they last only as long as this
process, so the command previews a history; the API seeds its own at
startup (``SEED_DEMO_ORDERS``). Point ``[tool.protean.databases.default]``
at a persistent provider to keep what this command writes.
"""

import argparse
import sys


def seed_history(count, seed_value=None):
    """Add demo orders to the active domain and summarise the history."""
    from storefront.order.collection import order_history
    from storefront.order.seed import seed_orders

    orders = seed_orders(count, seed=seed_value)
    stats = order_history().stats()

    print(f"  {len(orders)} demo orders seeded.")
    print(
        f"  {stats.total_orders} orders: {stats.active_orders} active, "
        f"{stats.delivered_orders} delivered, {stats.total_spent:,.2f} spent."
    )
    return stats


def seed(count, seed_value=None):
    """Initialize the storefront domain and add demo orders to it."""
    from storefront.domain import storefront
    from storefront.utils.logging import configure_logging

    configure_logging()

    print("Initializing storefront domain...")
    storefront.init()

    with storefront.domain_context():
        stats = seed_history(count, seed_value)

    print("Done.")
    return stats


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed-orders", help="Seed demo order history")
    seed_parser.add_argument("--count", type=int, default=50, help="Number of orders to create (default: 50)")
    seed_parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible orders")

    args = parser.parse_args(argv)

    if args.command == "seed-orders":
        if args.count < 1:
            parser.error("--count must be at least 1")
        seed(args.count, args.seed)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
