from flask import render_template, request, redirect, url_for, flash

from . import purchases_bp
from auth.auth_utils import login_required, role_required
from common.api_connection import get_connection, SheetsApiError
from common.auth_util import get_login_user
from common.catalog_logic import load_purchases, load_products, chk_purchase, PURCHASE_LIST_LIMIT
from common.config_util import get_row_limit
from common.log_util import write_op_log
from common.sheet_fetch import fetch_page_sheets
from common.sheet_schema import PURCHASES_SCHEMA


@purchases_bp.route("/")
@login_required
def index():
    search = request.args.get("search", "").strip().lower()

    values, error, notices = fetch_page_sheets("purchases", ["Purchases"])
    purchases = load_purchases(values["Purchases"], limit=get_row_limit("purchases", PURCHASE_LIST_LIMIT))

    shown = [
        p for p in purchases
        if not search or any(search in p[k].lower() for k in ("product", "supplier", "receipt_no"))
    ]
    return render_template(
        "purchases/index.html",
        purchases=shown,
        total_amount=sum(p["amount"] for p in shown),
        search=search,
        error=error, notices=notices,
    )


@purchases_bp.route("/add", methods=["GET", "POST"])
@role_required("admin", "manager")
def add():
    error = ""
    form = request.form if request.method == "POST" else {}

    if request.method == "POST":
        ok, msg, record = chk_purchase(request.form)
        if not ok:
            error = msg
        else:
            try:
                with get_connection() as conn:
                    conn.append(PURCHASES_SCHEMA.sheet_name, [PURCHASES_SCHEMA.to_row(record)])
            except SheetsApiError as e:
                error = f"Failed to add purchase: {e}"
            else:
                write_op_log(
                    get_login_user(), "purchases", "ADD",
                    f"{record['product']} x{record['quantity']} from {record['supplier']}"
                )
                flash("Purchase recorded", "success")
                return redirect(url_for("purchases.index"))

    # product picker (name + category + supplier)
    values, _, _ = fetch_page_sheets("product", ["Products"])
    products = load_products(values["Products"])

    return render_template("purchases/form.html", form=form, error=error, products=products)
