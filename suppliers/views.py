from flask import render_template, request, jsonify, current_app, redirect, url_for, flash

from . import suppliers_bp
from auth.auth_utils import login_required, role_required
from common.api_connection import get_connection, SheetsApiError
from common.auth_util import get_login_user
from common.catalog_logic import load_suppliers, chk_supplier, filter_supplier_directory
from common.config_util import get_row_limit
from common.log_util import write_op_log
from common.sheet_fetch import fetch_page_sheets
from common.sheet_schema import SUPPLIERS_SCHEMA
from common.supplier_logic import (
    derive_supplier_performance, summarize_suppliers, filter_suppliers,
    RandomMetricsProvider, SUPPLIER_ROW_LIMIT,
)


def _load_suppliers():
    values, error, notices = fetch_page_sheets("supplier", ["Purchases"])
    if error:
        return [], error, notices

    # app.config["SUPPLIER_METRICS"] replaces the random placeholder metrics
    metrics = current_app.config.get("SUPPLIER_METRICS") or RandomMetricsProvider()
    suppliers = derive_supplier_performance(
        values["Purchases"], metrics=metrics,
        limit=get_row_limit("suppliers", SUPPLIER_ROW_LIMIT),
    )
    return suppliers, "", notices


@suppliers_bp.route("/")
@login_required
def index():
    search = request.args.get("search", "")
    status = request.args.get("status", "all")

    suppliers, error, notices = _load_suppliers()
    return render_template(
        "suppliers/index.html",
        suppliers=filter_suppliers(suppliers, search, status),
        summary=summarize_suppliers(suppliers),
        search=search, status=status,
        error=error, notices=notices,
    )


@suppliers_bp.route("/api/performance")
@login_required
def api_performance():
    suppliers, error, _ = _load_suppliers()
    if error:
        return jsonify({"success": False, "message": error}), 502

    shown = filter_suppliers(suppliers, request.args.get("search", ""), request.args.get("status", "all"))
    return jsonify({
        "success": True,
        "suppliers": [s.to_dict() for s in shown],
        "summary": summarize_suppliers(suppliers),
    })


# ---------------------------------------------------
# Directory (Suppliers sheet)
# ---------------------------------------------------
@suppliers_bp.route("/directory")
@login_required
def directory():
    search = request.args.get("search", "")
    status = request.args.get("status", "all")

    values, error, notices = fetch_page_sheets("suppliers", [SUPPLIERS_SCHEMA.sheet_name])
    suppliers = load_suppliers(values[SUPPLIERS_SCHEMA.sheet_name])
    return render_template(
        "suppliers/directory.html",
        suppliers=filter_supplier_directory(suppliers, search, status),
        counts={
            "total": len(suppliers),
            "active": sum(1 for s in suppliers if s["status"] == "active"),
            "inactive": sum(1 for s in suppliers if s["status"] == "inactive"),
        },
        search=search, status=status,
        error=error, notices=notices,
    )


@suppliers_bp.route("/api/directory")
@login_required
def api_directory():
    values, error, _ = fetch_page_sheets("suppliers", [SUPPLIERS_SCHEMA.sheet_name])
    if error:
        return jsonify({"success": False, "message": error}), 502

    suppliers = load_suppliers(values[SUPPLIERS_SCHEMA.sheet_name])
    shown = filter_supplier_directory(
        suppliers, request.args.get("search", ""), request.args.get("status", "all")
    )
    return jsonify({"success": True, "suppliers": shown})


@suppliers_bp.route("/add", methods=["GET", "POST"])
@role_required("admin", "manager")
def add():
    error = ""
    form = request.form if request.method == "POST" else {}

    if request.method == "POST":
        ok, msg, record = chk_supplier(request.form)
        if not ok:
            error = msg
        else:
            try:
                with get_connection() as conn:
                    conn.append(SUPPLIERS_SCHEMA.sheet_name, [SUPPLIERS_SCHEMA.to_row(record)])
            except SheetsApiError as e:
                error = f"Failed to save supplier: {e}"
            else:
                write_op_log(get_login_user(), "suppliers", "ADD", f"{record['id']} {record['name']}")
                flash(f"Supplier {record['name']} added", "success")
                return redirect(url_for("suppliers.directory"))

    return render_template("suppliers/form.html", form=form, error=error)
