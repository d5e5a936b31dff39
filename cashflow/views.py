from datetime import datetime

from flask import render_template, request, jsonify, send_file

from . import cashflow_bp
from auth.auth_utils import login_required
from common.auth_util import get_login_user
from common.config_util import get_row_limit
from common.format_common import build_ledger_workbook
from common.ledger_logic import (
    derive_cashflow, summarize_cashflow, filter_ledger, CASHFLOW_ROW_LIMIT
)
from common.log_util import write_op_log
from common.sheet_fetch import fetch_page_sheets

SOURCE_SHEETS = ["Sales", "Purchases", "Expenses"]


def _load_entries():
    values, error, notices = fetch_page_sheets("cashflow", SOURCE_SHEETS)
    if error:
        return [], error, notices
    entries = derive_cashflow(
        values["Sales"], values["Purchases"], values["Expenses"],
        limit=get_row_limit("cashflow", CASHFLOW_ROW_LIMIT),
    )
    return entries, "", notices


# ---------------------------------------------------
# Ledger page
# ---------------------------------------------------
@cashflow_bp.route("/")
@login_required
def index():
    search = request.args.get("search", "")
    kind = request.args.get("type", "all")

    entries, error, notices = _load_entries()
    shown = filter_ledger(entries, search, kind)

    return render_template(
        "cashflow/index.html",
        entries=shown,
        summary=summarize_cashflow(entries),
        search=search,
        kind=kind,
        error=error,
        notices=notices,
    )


# ===================================================
#  JSON API
# ===================================================
@cashflow_bp.route("/api/entries")
@login_required
def api_entries():
    entries, error, _ = _load_entries()
    if error:
        return jsonify({"success": False, "message": error}), 502

    shown = filter_ledger(entries, request.args.get("search", ""), request.args.get("type", "all"))
    return jsonify({
        "success": True,
        "entries": [e.to_dict() for e in shown],
        "summary": summarize_cashflow(entries),
    })


# ---------------------------------------------------
# Excel download
# ---------------------------------------------------
@cashflow_bp.route("/export_excel")
@login_required
def export_excel():
    entries, error, _ = _load_entries()
    if error:
        return error, 502

    summary = summarize_cashflow(entries)
    rows = [
        [e.date, e.description, e.category, e.type, e.signed_amount, e.running_balance, e.reference]
        for e in entries
    ]
    buf = build_ledger_workbook(
        "Cashflow",
        ["Date", "Description", "Category", "Type", "Amount", "Balance", "Reference"],
        rows,
        widths=[14, 36, 18, 10, 14, 14, 22],
        currency_cols=(5, 6),
        totals={5: summary["net"]},
        negative_red_cols=(5, 6),
    )

    write_op_log(get_login_user(), "cashflow", "EXPORT", f"{len(rows)} rows")

    filename = f"cashflow_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return send_file(
        buf,
        as_attachment=True,
        download_name=filename,
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
