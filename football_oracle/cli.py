"""
CLI for the football result oracle

Usage:
    football-oracle --pool               # Show spendable output pool
    football-oracle --feed <FEED_NAME>   # Show publication status of a feed
    football-oracle --init-db            # Create local database tables
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Football result oracle - reliable data feed publisher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  football-oracle --pool                              Show spendable outputs
  football-oracle --feed _CHELSEA_ARSENAL_01-05-2017  Show feed status
  football-oracle --init-db                           Create tables
        """,
    )
    parser.add_argument("--pool", action="store_true", help="Show spendable output pool")
    parser.add_argument("--feed", metavar="FEED_NAME", help="Show publication status of a feed")
    parser.add_argument("--init-db", action="store_true", help="Create database tables")

    args = parser.parse_args(argv)

    from .config import OracleConfig
    from .db import init_db
    from .errors import OracleError
    from .oracle import FactOracle

    config = OracleConfig.from_env()

    if args.init_db:
        init_db(config.database_url)
        print(f"[OK] Tables created: {config.database_url}")
        return 0

    if not args.pool and not args.feed:
        parser.print_help()
        return 0

    try:
        oracle = FactOracle.from_config(config, ledger=None)
    except OracleError as e:
        print(f"[!] {e}")
        return 1

    # --pool: Show resource pool
    if args.pool:
        snapshot = asyncio.run(oracle.resource_pool.snapshot())
        largest = asyncio.run(oracle.resource_pool.find_largest_splittable_output())

        print("=" * 60)
        print("Spendable Output Pool")
        print("=" * 60)
        print(f"Address:            {oracle.oracle_address}")
        print(f"Unit cost:          {snapshot.unit_cost}")
        print(f"Big outputs:        {snapshot.big_output_count}")
        print(f"Small + credits:    {snapshot.small_output_credit_total}")
        print(f"Payable units:      {snapshot.payable_count}")
        print(f"Split threshold:    {config.min_available_outputs}")
        print(f"Largest splittable: {largest.amount if largest is not None else '(none)'}")
        print("=" * 60)

    # --feed: Show feed status
    if args.feed:
        row = asyncio.run(oracle.resolver.read_published(args.feed))
        if row is None:
            print(f"{args.feed}: not published")
        else:
            print(f"{args.feed}: published, {'stable' if row['is_stable'] else 'not stable yet'}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
