#!/usr/bin/env python3
"""
Create the shop tables (products, orders, donations) and seed the product
table from the bundled fallback catalog.

Uses DATABASE_URL environment variable. Does NOT drop existing tables; products
whose slug already exists are left untouched.
"""

from __future__ import annotations
import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# Make sure the storefront package is on sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from storefront.database.records import RepositoryError
from storefront.database.seed import seed_products
from storefront.database.sql import SqlShopRepository


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create shop tables and seed products")
    parser.add_argument("--no-seed", action="store_true", help="Only create tables")
    args = parser.parse_args(argv)

    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    try:
        repository = SqlShopRepository(connection_string=url)
        repository.ping()
        print("✅ Database connection OK")

        repository.create_tables()
        tables = inspect(repository.engine).get_table_names()
        print("✅ Shop tables now exist:", sorted(tables))

        if not args.no_seed:
            added = seed_products(repository)
            print(f"✅ Seeded {added} products from the fallback catalog")
        return 0

    except (OperationalError, RepositoryError) as e:
        print(f"❌ Failed to connect to database: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
