"""Storefront settings, read from the domain's ``custom`` configuration.

Values live under ``[tool.protean.custom]`` in ``pyproject.toml`` (or the
``[custom]`` section of a ``domain.toml``). Anything not configured falls
back to the reference storefront values below.
"""

from protean.utils.globals import current_domain

DEFAULTS = {
    "FREE_SHIPPING_THRESHOLD": 500.0,
    "FLAT_SHIPPING_FEE": 50.0,
    "TAX_RATE": 0.08,
    "CURRENCY": "USD",
    "ORDER_PAGE_SIZE": 12,
    "ORDER_LOAD_LIMIT": 1000,
    "SEED_DEMO_ORDERS": 0,
    "DEMO_ORDER_SEED": None,
    "PROMO_CODES": {
        "SAVE10": 0.10,
        "WELCOME20": 0.20,
        "FREESHIP": 0.05,
    },
}


def setting(name):
    """Return a configured storefront setting, or its default."""
    custom = (current_domain.config.get("custom") if current_domain else None) or {}
    return custom.get(name, DEFAULTS[name])
