"""Sales list and end-of-day report"""
__version__ = "1.0.00"

from flask import Blueprint

sales_bp = Blueprint(
    "sales", __name__,
    template_folder="templates",
    )

from . import views
