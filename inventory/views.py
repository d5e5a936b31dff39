from datetime import datetime

from flask import render_template, request, jsonify, send_file

from . import inventory_bp
from auth.auth_utils import login_required
from common.auth_util import get_login_user
from common.catalog_logic import load_inventory
from common.config_util import get_row_limit
from common.format_common import build_ledger_workbook
from common.ledger_logic import (
    derive_movements, summarize_movements, filter_movements,
    derive_audit_trail, summarize_audit, filter_audit,
    MOVEMENT_ROW_LIMIT, AUDIT_ROW_LIMIT, AUDIT_INVENTORY_ROW_LIMIT,
)
from common.log_util import write_op_log
from common.sheet_fetch import fetch_page_sheets


def _load_movements():
    values, error, notices = fetch_page_sheets("inventory movement", ["Purchases", "Sales"])
    if error:
        return [], error, notices
    movements = derive_movements(
        values["Purchases"], values["Sales"],
        limit=get_row_limit("movements", MOVEMENT_ROW_LIMIT),
    )
    return movements, "", notices


def _load_audit():
    values, error, notices = fetch_page_sheets("audit trail", ["Purchases", "Sales", "Inventory"])
    if error:
        return [], error, notices
    records = derive_audit_trail(
        values["Purchases"], values["Sales"], values["Inventory"],
        limit=get_row_limit("audit", AUDIT_ROW_LIMIT),
        inventory_limit=get_row_limit("audit_inventory", AUDIT_INVENTORY_ROW_LIMIT),
    )
    return records, "", notices


# ---------------------------------------------------
# 1. Stock levels
# ---------------------------------------------------
@inventory_bp.route("/")
@login_required
def stock():
    search = request.args.get("search", "").strip().lower()
    status = request.args.get("status", "all")

    values, error, notices = fetch_page_sheets("inventory", ["Inventory"])
    items = load_inventory(values["Inventory"])

    shown = [
        i for i in items
        if (status == "all" or i["status"] == status)
        and (not search or search in i["product"].lower() or search in i["category"].lower())
    ]
    counts = {
        "total": len(items),
        "low": sum(1 for i in items if i["status"] == "low"),
        "out": sum(1 for i in items if i["status"] == "out"),
    }
    return render_template(
        "inventory/stock.html",
        items=shown, counts=counts, search=search, status=status,
        error=error, notices=notices,
    )


# ---------------------------------------------------
# 2. Stock movements
# ---------------------------------------------------
@inventory_bp.route("/movements")
@login_required
def movements():
    search = request.args.get("search", "")
    direction = request.args.get("direction", "all")

    records, error, notices = _load_movements()
    return render_template(
        "inventory/movements.html",
        movements=filter_movements(records, search, direction),
        summary=summarize_movements(records),
        search=search, direction=direction,
        error=error, notices=notices,
    )


@inventory_bp.route("/api/movements")
@login_required
def api_movements():
    records, error, _ = _load_movements()
    if error:
        return jsonify({"success": False, "message": error}), 502

    shown = filter_movements(records, request.args.get("search", ""), request.args.get("direction", "all"))
    return jsonify({
        "success": True,
        "movements": [m.to_dict() for m in shown],
        "summary": summarize_movements(records),
    })


@inventory_bp.route("/movements/export_excel")
@login_required
def export_movements():
    records, error, _ = _load_movements()
    if error:
        return error, 502

    summary = summarize_movements(records)
    rows = [
        [m.date, m.product, m.category, m.direction.upper(), m.quantity,
         m.unit_price, m.total_value, m.reason, m.reference, m.location]
        for m in records
    ]
    buf = build_ledger_workbook(
        "Stock Movements",
        ["Date", "Product", "Category", "Direction", "Quantity",
         "Unit Price", "Total Value", "Reason", "Reference", "Location"],
        rows,
        widths=[14, 28, 16, 10, 10, 14, 14, 12, 20, 14],
        currency_cols=(6, 7),
        totals={5: summary["net_quantity"], 7: summary["value_in"] - summary["value_out"]},
    )

    write_op_log(get_login_user(), "inventory", "EXPORT", f"movements {len(rows)} rows")

    filename = f"stock_movements_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return send_file(
        buf,
        as_attachment=True,
        download_name=filename,
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


# ---------------------------------------------------
# 3. Audit trail
# ---------------------------------------------------
@inventory_bp.route("/audit")
@login_required
def audit():
    search = request.args.get("search", "")
    action = request.args.get("action", "all")

    records, error, notices = _load_audit()
    return render_template(
        "inventory/audit.html",
        records=filter_audit(records, search, action),
        summary=summarize_audit(records),
        search=search, action=action,
        error=error, notices=notices,
    )


@inventory_bp.route("/api/audit")
@login_required
def api_audit():
    records, error, _ = _load_audit()
    if error:
        return jsonify({"success": False, "message": error}), 502

    shown = filter_audit(records, request.args.get("search", ""), request.args.get("action", "all"))
    return jsonify({
        "success": True,
        "records": [r.to_dict() for r in shown],
        "summary": summarize_audit(records),
    })
