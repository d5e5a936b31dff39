"""Cashflow ledger (sales / purchases / expenses with running balance, Excel download)"""
__version__ = "1.0.00"

from flask import Blueprint

cashflow_bp = Blueprint(
    "cashflow", __name__,
    template_folder="templates",
    )

from . import views
