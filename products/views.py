from flask import render_template, request, redirect, url_for, flash, abort

from . import products_bp
from auth.auth_utils import login_required, role_required
from common.api_connection import get_connection, SheetsApiError
from common.auth_util import get_login_user
from common.catalog_logic import load_products, find_product, chk_product, product_range
from common.log_util import write_op_log
from common.sheet_fetch import fetch_page_sheets
from common.sheet_schema import PRODUCTS_SCHEMA


# ---------------------------------------------------
# 1. List
# ---------------------------------------------------
@products_bp.route("/")
@login_required
def index():
    search = request.args.get("search", "").strip().lower()
    category = request.args.get("category", "all")

    values, error, notices = fetch_page_sheets("product", ["Products"])
    products = load_products(values["Products"])

    categories = sorted({p["category"] for p in products})
    shown = [
        p for p in products
        if (category == "all" or p["category"] == category)
        and (not search or search in p["name"].lower() or search in p["id"].lower())
    ]
    return render_template(
        "products/index.html",
        products=shown, categories=categories,
        search=search, category=category,
        error=error, notices=notices,
    )


# ---------------------------------------------------
# 2. Add
# ---------------------------------------------------
@products_bp.route("/add", methods=["GET", "POST"])
@role_required("admin", "manager")
def add():
    error = ""
    form = request.form if request.method == "POST" else {}

    if request.method == "POST":
        ok, msg, record = chk_product(request.form)
        if not ok:
            error = msg
        else:
            try:
                with get_connection() as conn:
                    conn.append(PRODUCTS_SCHEMA.sheet_name, [PRODUCTS_SCHEMA.to_row(record)])
            except SheetsApiError as e:
                error = f"Failed to add product: {e}"
            else:
                write_op_log(get_login_user(), "products", "ADD", f"{record['id']} {record['name']}")
                flash(f"Product {record['name']} added", "success")
                return redirect(url_for("products.index"))

    return render_template("products/form.html", form=form, error=error, mode="add")


# ---------------------------------------------------
# 3. Edit (row = sheet row number)
# ---------------------------------------------------
@products_bp.route("/edit/<int:row>", methods=["GET", "POST"])
@role_required("admin", "manager")
def edit(row):
    if row < 2:
        abort(404)

    error = ""
    if request.method == "POST":
        form = request.form
        ok, msg, record = chk_product(request.form)
        if not ok:
            error = msg
        else:
            try:
                with get_connection() as conn:
                    conn.update_range(
                        PRODUCTS_SCHEMA.sheet_name, product_range(row), [PRODUCTS_SCHEMA.to_row(record)]
                    )
            except SheetsApiError as e:
                error = f"Failed to update product: {e}"
            else:
                write_op_log(get_login_user(), "products", "UPDATE", f"row {row} {record['id']}")
                flash(f"Product {record['name']} updated", "success")
                return redirect(url_for("products.index"))
        return render_template("products/form.html", form=form, error=error, mode="edit", row=row)

    values, fetch_error, _ = fetch_page_sheets("product", ["Products"])
    if fetch_error:
        return render_template("products/form.html", form={}, error=fetch_error, mode="edit", row=row)

    product = find_product(load_products(values["Products"]), row)
    if product is None:
        abort(404)

    form = {k: product[k] for k in
            ("id", "name", "category", "price", "cost", "stock", "supplier", "status", "description")}
    return render_template("products/form.html", form=form, error=error, mode="edit", row=row)
