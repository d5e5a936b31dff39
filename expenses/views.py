from flask import render_template, request, redirect, url_for, flash

from . import expenses_bp
from auth.auth_utils import login_required
from common.api_connection import get_connection, SheetsApiError
from common.auth_util import get_login_user
from common.catalog_logic import load_expenses, chk_expense
from common.log_util import write_op_log
from common.sheet_fetch import fetch_page_sheets
from common.sheet_schema import EXPENSES_SCHEMA

EXPENSE_CATEGORIES = (
    "Rent", "Utilities", "Salaries", "Transport", "Maintenance", "Supplies", "Marketing", "Other",
)


@expenses_bp.route("/")
@login_required
def index():
    search = request.args.get("search", "").strip().lower()
    category = request.args.get("category", "all")

    values, error, notices = fetch_page_sheets("expenses", ["Expenses"])
    expenses = load_expenses(values["Expenses"])

    by_category = {}
    for e in expenses:
        by_category[e["category"]] = by_category.get(e["category"], 0.0) + e["amount"]

    shown = [
        e for e in expenses
        if (category == "all" or e["category"] == category)
        and (not search or search in e["description"].lower())
    ]
    return render_template(
        "expenses/index.html",
        expenses=shown,
        by_category=sorted(by_category.items(), key=lambda kv: kv[1], reverse=True),
        total_amount=sum(e["amount"] for e in shown),
        search=search, category=category,
        error=error, notices=notices,
    )


@expenses_bp.route("/add", methods=["GET", "POST"])
@login_required
def add():
    error = ""
    form = request.form if request.method == "POST" else {}

    if request.method == "POST":
        ok, msg, record = chk_expense(request.form)
        if not ok:
            error = msg
        else:
            try:
                with get_connection() as conn:
                    conn.append(EXPENSES_SCHEMA.sheet_name, [EXPENSES_SCHEMA.to_row(record)])
            except SheetsApiError as e:
                error = f"Failed to add expense: {e}"
            else:
                write_op_log(
                    get_login_user(), "expenses", "ADD",
                    f"{record['category']} {record['amount']} {record['description']}"
                )
                flash("Expense recorded", "success")
                return redirect(url_for("expenses.index"))

    return render_template("expenses/form.html", form=form, error=error, categories=EXPENSE_CATEGORIES)
