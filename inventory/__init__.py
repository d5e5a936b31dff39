"""Inventory: stock levels, stock movements and audit trail"""
__version__ = "1.0.00"

from flask import Blueprint

inventory_bp = Blueprint(
    "inventory", __name__,
    template_folder="templates",
    )

from . import views
