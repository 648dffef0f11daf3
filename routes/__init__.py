"""Routes package initializer."""

from .inventory_routes import register_inventory_routes
from .ledger_routes import register_ledger_routes

__all__ = [
    "register_ledger_routes",
    "register_inventory_routes",
]
