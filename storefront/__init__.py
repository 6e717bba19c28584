"""Mawu Foundation storefront: product catalog cache, cart, checkout API."""
