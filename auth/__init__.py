"""Login / logout and session checks"""
__version__ = "1.0.00"

from flask import Blueprint

auth_bp = Blueprint(
    "auth",
    __name__,
    template_folder="templates",
)

from . import routes
