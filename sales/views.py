from flask import render_template, request, jsonify

from . import sales_bp
from auth.auth_utils import login_required
from common.catalog_logic import load_sales
from common.config_util import get_row_limit
from common.report_logic import build_end_of_day, EOD_ROW_LIMIT
from common.sheet_fetch import fetch_page_sheets


@sales_bp.route("/")
@login_required
def index():
    search = request.args.get("search", "").strip().lower()

    values, error, notices = fetch_page_sheets("sales", ["Sales"])
    sales = load_sales(values["Sales"])

    shown = [
        s for s in sales
        if not search or any(search in s[k].lower() for k in ("product", "receipt_no", "sold_by"))
    ]
    return render_template(
        "sales/index.html",
        sales=shown,
        total_revenue=sum(s["revenue"] for s in shown),
        search=search,
        error=error, notices=notices,
    )


@sales_bp.route("/end_of_day")
@login_required
def end_of_day():
    values, error, notices = fetch_page_sheets("end of day", ["Sales"])
    report = build_end_of_day(values["Sales"], limit=get_row_limit("end_of_day", EOD_ROW_LIMIT))

    if request.args.get("format") == "json":
        if error:
            return jsonify({"success": False, "message": error}), 502
        return jsonify({"success": True, "report": report})

    return render_template("sales/end_of_day.html", report=report, error=error, notices=notices)
