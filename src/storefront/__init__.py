"""Storefront transaction core: shopping cart pricing, order lifecycle and order history queries."""
