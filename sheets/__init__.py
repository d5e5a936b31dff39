"""Spreadsheet admin: API health, metadata, raw sheet viewer, clear"""
__version__ = "1.0.00"

from flask import Blueprint, request, render_template_string
from common.api_check_util import is_api_available, MAINTENANCE_HTML

sheets_bp = Blueprint(
    "sheets", __name__,
    template_folder="templates",
    )

@sheets_bp.before_request
def before_request_handler():
    if request.endpoint and 'static' in request.endpoint:
        return

    if request.method == "POST" and not is_api_available():
        return render_template_string(MAINTENANCE_HTML), 503

from . import views
