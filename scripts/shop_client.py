#!/usr/bin/env python3
"""
Command-line client for the storefront API, going through the same cache,
fallback and cart layers a shopfront uses.

Examples:
  python scripts/shop_client.py products
  python scripts/shop_client.py product mawu-kente-heritage-tee
  python scripts/shop_client.py cart add volta-water-bottle
  python scripts/shop_client.py cart validate --apply
  python scripts/shop_client.py cache stats
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from storefront.cart.cart import CartError, CartItem
from storefront.clients.factory import Storefront, build_storefront
from storefront.error_handler import ErrorHandler
from storefront.utils.monitoring import get_cache_statistics, get_performance_summary


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


async def cmd_products(shop: Storefront, args) -> int:
    result = await shop.catalog.refetch_products() if args.refresh else await shop.catalog.fetch_products()
    print(f"Source: {result.source}")
    for p in result.products:
        print(f"  {p.slug:<32} {p.currency} {p.price:>8.2f}  stock={p.inventory:<4} {p.availability}")
    return 0


async def cmd_product(shop: Storefront, args) -> int:
    result = await shop.catalog.fetch_product(args.slug)
    if result.product is None:
        print(f"❌ {result.error or 'Product not found'}", file=sys.stderr)
        return 1
    print(f"Source: {result.source}")
    print(json.dumps(result.product.to_wire(), indent=2))
    return 0


async def cmd_cart(shop: Storefront, args) -> int:
    cart = shop.cart
    if args.action == "add":
        result = await shop.catalog.fetch_product(args.slug)
        if result.product is None:
            print(f"❌ {result.error or 'Product not found'}", file=sys.stderr)
            return 1
        p = result.product
        try:
            cart.add_item(
                CartItem(
                    id=p.slug,
                    name=p.name,
                    price=p.price,
                    image=p.images[0] if p.images else "",
                    impact_statement=p.impact_statement or None,
                    product_id=str(p.id),
                    product_slug=p.slug,
                    max_inventory=p.inventory,
                )
            )
        except CartError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 1
    elif args.action == "remove":
        cart.remove_item(args.slug)
    elif args.action == "clear":
        cart.clear()
    elif args.action == "validate":
        results = await cart.validate(shop.api)
        for r in results:
            mark = "✅" if r.valid else "⚠️"
            print(f"{mark} {r.item_id}: {r.message or 'OK'}")
        if args.apply:
            cart.apply_suggestions(results)

    for item in cart.items:
        print(f"  {item.id:<32} x{item.quantity:<3} {shop.config.cart.currency_label} {item.price * item.quantity:.2f}")
    print(f"Items: {cart.item_count}  Total: {shop.config.cart.currency_label} {cart.total:.2f}")
    return 0


async def cmd_cache(shop: Storefront, args) -> int:
    if args.action == "clear":
        shop.cache.clear_product_cache()
        print("Product cache cleared")
        return 0
    print(json.dumps({"cache": shop.cache.stats(), "session": get_cache_statistics()}, indent=2))
    print(json.dumps(get_performance_summary(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storefront API client")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("products", help="List products")
    p.add_argument("--refresh", action="store_true", help="Ignore the cache")

    p = sub.add_parser("product", help="Show one product")
    p.add_argument("slug")

    p = sub.add_parser("cart", help="Show or change the cart")
    p.add_argument("action", choices=["show", "add", "remove", "clear", "validate"])
    p.add_argument("slug", nargs="?")
    p.add_argument("--apply", action="store_true", help="Apply suggested quantities after validating")

    p = sub.add_parser("cache", help="Cache statistics or clear")
    p.add_argument("action", choices=["stats", "clear"])
    return parser


COMMANDS = {"products": cmd_products, "product": cmd_product, "cart": cmd_cart, "cache": cmd_cache}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    if args.command == "cart" and args.action in {"add", "remove"} and not args.slug:
        print("A product slug is required", file=sys.stderr)
        return 2

    shop = build_storefront()
    try:
        return asyncio.run(COMMANDS[args.command](shop, args))
    except Exception as e:
        print(f"❌ {ErrorHandler().user_message(e)}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
