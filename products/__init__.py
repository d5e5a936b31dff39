"""Product catalog (list / add / edit)"""
__version__ = "1.0.00"

from flask import Blueprint, request, render_template_string
from common.api_check_util import is_api_available, MAINTENANCE_HTML

products_bp = Blueprint(
    "products", __name__,
    template_folder="templates",
    )

@products_bp.before_request
def before_request_handler():
    # 1. static files pass
    if request.endpoint and 'static' in request.endpoint:
        return

    # 2. writes need the sheets API
    if request.method == "POST" and not is_api_available():
        return render_template_string(MAINTENANCE_HTML), 503

from . import views
