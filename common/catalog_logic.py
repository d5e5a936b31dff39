"""
common/catalog_logic.py
-----------------------
List mappers and entry-form checks for the Products, Inventory, Purchases,
Expenses, Sales and Suppliers sheets.
Check functions follow the (ok, msg, record) convention used by the views.
"""
import math
import re
import time
from datetime import datetime

from .cell_logic import parse_currency, parse_int, text_or
from .sheet_schema import (
    bind, PRODUCTS_SCHEMA, INVENTORY_SCHEMA, PURCHASES_SCHEMA, EXPENSES_SCHEMA, SALES_SCHEMA,
    SUPPLIERS_SCHEMA,
)

PURCHASE_LIST_LIMIT = 50
LOW_STOCK_THRESHOLD = 10

PRODUCT_STATUSES = ("active", "inactive")


# ---------------------------------------------------
# Products
# ---------------------------------------------------
def product_stock_status(stock: int) -> str:
    if stock > LOW_STOCK_THRESHOLD:
        return "active"
    if stock > 0:
        return "low"
    return "out"


def load_products(values):
    products = []
    for rec in bind(PRODUCTS_SCHEMA, values).rows:
        stock = parse_int(rec["stock"])
        products.append({
            "row": rec["_row"],
            "id": text_or(rec["id"], str(rec["_index"] + 1)),
            "name": text_or(rec["name"], "Unknown Product"),
            "category": text_or(rec["category"], "Uncategorized"),
            "price": parse_currency(rec["price"]),
            "cost": parse_currency(rec["cost"]),
            "stock": stock,
            "supplier": text_or(rec["supplier"], "Unknown Supplier"),
            "status": text_or(rec["status"], "active"),
            "stock_status": product_stock_status(stock),
            "description": text_or(rec["description"], ""),
        })
    return products


def find_product(products, row: int):
    for p in products:
        if p["row"] == row:
            return p
    return None


def generate_product_id() -> str:
    return f"P{str(int(time.time() * 1000))[-6:]}"


def chk_product(form: dict):
    """
    Validate the add / edit product form.

    Returns:
        (ok: bool, msg: str, record: dict|None)
    """
    name = (form.get("name") or "").strip()
    category = (form.get("category") or "").strip()
    price_s = (form.get("price") or "").strip()
    cost_s = (form.get("cost") or "").strip()
    stock_s = (form.get("stock") or "").strip()
    supplier = (form.get("supplier") or "").strip()
    status = (form.get("status") or "active").strip().lower()

    if not name:
        return False, "Product name is required", None
    if not category:
        return False, "Category is required", None
    if not _is_number(price_s):
        return False, "Valid price is required", None
    if not _is_number(cost_s):
        return False, "Valid cost is required", None
    if not _is_int(stock_s):
        return False, "Valid stock quantity is required", None
    if not supplier:
        return False, "Supplier is required", None
    if status not in PRODUCT_STATUSES:
        return False, "Status must be active or inactive", None

    record = {
        "id": (form.get("id") or "").strip() or generate_product_id(),
        "name": name,
        "category": category,
        "price": _num_text(price_s),
        "cost": _num_text(cost_s),
        "stock": str(int(stock_s)),
        "supplier": supplier,
        "status": status,
        "description": (form.get("description") or "").strip(),
    }
    return True, "OK", record


def product_range(row: int) -> str:
    """A1 range of one product row (columns A..I)."""
    return f"{PRODUCTS_SCHEMA.sheet_name}!A{row}:I{row}"


# ---------------------------------------------------
# Inventory
# ---------------------------------------------------
def inventory_status(current: int, minimum: int) -> str:
    if current > minimum:
        return "active"
    if current > 0:
        return "low"
    return "out"


def load_inventory(values):
    items = []
    for rec in bind(INVENTORY_SCHEMA, values).rows:
        current = parse_int(rec["current_stock"])
        minimum = parse_int(rec["min_stock"])
        items.append({
            "id": text_or(rec["id"], str(rec["_index"] + 1)),
            "product": text_or(rec["product"], "Unknown Product"),
            "category": text_or(rec["category"], "Uncategorized"),
            "current_stock": current,
            "min_stock": minimum,
            "max_stock": parse_int(rec["max_stock"]),
            "unit": text_or(rec["unit"], "Unit"),
            "last_updated": text_or(rec["last_updated"], "Unknown"),
            "status": inventory_status(current, minimum),
        })
    return items


# ---------------------------------------------------
# Purchases
# ---------------------------------------------------
def load_purchases(values, limit=PURCHASE_LIST_LIMIT):
    purchases = []
    for rec in bind(PURCHASES_SCHEMA, values, limit).rows:
        purchases.append({
            "id": text_or(rec["id"], str(rec["_index"] + 1)),
            "receipt_no": text_or(rec["receipt_no"], "N/A"),
            "date": text_or(rec["date"], "Unknown Date"),
            "time": text_or(rec["time"], "Unknown Time"),
            "product": text_or(rec["product"], "Unknown Product"),
            "category": text_or(rec["category"], "Uncategorized"),
            "quantity": parse_int(rec["quantity"]),
            "unit_cost": parse_currency(rec["unit_cost"]),
            "amount": parse_currency(rec["amount"]),
            "location": text_or(rec["location"], "Unknown"),
            "supplier": text_or(rec["supplier"], "Unknown Supplier"),
        })
    return purchases


def chk_purchase(form: dict, now=None):
    """Validate the add purchase form and build the sheet record."""
    product = (form.get("product") or "").strip()
    qty_s = (form.get("quantity") or "").strip()
    cost_s = (form.get("unit_cost") or "").strip()
    supplier = (form.get("supplier") or "").strip()

    if not product:
        return False, "Product is required", None
    if not _is_int(qty_s) or int(qty_s) < 1:
        return False, "Quantity must be a whole number of 1 or more", None
    if not _is_number(cost_s) or float(cost_s) < 0:
        return False, "Valid unit cost is required", None
    if not supplier:
        return False, "Supplier is required", None

    quantity = int(qty_s)
    unit_cost = float(cost_s)
    if not math.isfinite(float(qty_s) * unit_cost):
        return False, "Purchase amount is too large", None

    now = now or datetime.now()
    record = {
        "id": (form.get("id") or "").strip() or f"PU{now.strftime('%Y%m%d%H%M%S')}",
        "receipt_no": (form.get("receipt_no") or "").strip(),
        "date": now.strftime("%Y-%m-%d"),
        "time": now.strftime("%H:%M:%S"),
        "product": product,
        "category": (form.get("category") or "").strip() or "Uncategorized",
        "quantity": str(quantity),
        "unit_cost": _num_text(cost_s),
        "amount": _num_text(str(float(qty_s) * unit_cost)),
        "location": (form.get("location") or "").strip() or "Store",
        "supplier": supplier,
    }
    return True, "OK", record


# ---------------------------------------------------
# Expenses
# ---------------------------------------------------
def load_expenses(values):
    expenses = []
    for rec in bind(EXPENSES_SCHEMA, values).rows:
        expenses.append({
            "id": text_or(rec["id"], str(rec["_index"] + 1)),
            "date": text_or(rec["date"], "Unknown Date"),
            "category": text_or(rec["category"], "Uncategorized"),
            "description": text_or(rec["description"], "No Description"),
            "amount": parse_currency(rec["amount"]),
        })
    return expenses


def chk_expense(form: dict, now=None):
    """Validate the add expense form and build the sheet record."""
    category = (form.get("category") or "").strip()
    description = (form.get("description") or "").strip()
    amount_s = (form.get("amount") or "").strip()
    date_s = (form.get("date") or "").strip()

    if not category:
        return False, "Category is required", None
    if not description:
        return False, "Description is required", None
    if not _is_number(amount_s) or float(amount_s) <= 0:
        return False, "Amount must be greater than 0", None

    now = now or datetime.now()
    if date_s:
        try:
            datetime.strptime(date_s, "%Y-%m-%d")
        except ValueError:
            return False, "Date must be YYYY-MM-DD", None
    else:
        date_s = now.strftime("%Y-%m-%d")

    record = {
        "id": f"EX{now.strftime('%Y%m%d%H%M%S')}",
        "date": date_s,
        "category": category,
        "description": description,
        "amount": _num_text(amount_s),
    }
    return True, "OK", record


# ---------------------------------------------------
# Sales
# ---------------------------------------------------
def load_sales(values, limit=None):
    sales = []
    for rec in bind(SALES_SCHEMA, values, limit).rows:
        sales.append({
            "id": text_or(rec["id"], str(rec["_index"] + 1)),
            "receipt_no": text_or(rec["receipt_no"], "N/A"),
            "date": text_or(rec["date"], "Unknown Date"),
            "time": text_or(rec["time"], "Unknown Time"),
            "category": text_or(rec["category"], "Uncategorized"),
            "product": text_or(rec["product"], "Unknown Product"),
            "unit_price": parse_currency(rec["unit_price"]),
            "discount": parse_currency(rec["discount"]),
            "quantity": parse_int(rec["quantity"]),
            "revenue": parse_currency(rec["revenue"]),
            "sold_by": text_or(rec["sold_by"], "Unknown User"),
        })
    return sales


# ---------------------------------------------------
# Suppliers (directory)
# ---------------------------------------------------
SUPPLIER_STATUSES = ("active", "inactive")

_EMAIL_TEXT = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_PHONE_TEXT = re.compile(r"[0-9+\-\s()]+")


def load_suppliers(values):
    suppliers = []
    for rec in bind(SUPPLIERS_SCHEMA, values).rows:
        suppliers.append({
            "id": text_or(rec["id"], f"supplier-{rec['_index'] + 1}"),
            "name": text_or(rec["name"], "Unknown Supplier"),
            "contact_person": text_or(rec["contact_person"], ""),
            "email": text_or(rec["email"], ""),
            "phone": text_or(rec["phone"], ""),
            "address": text_or(rec["address"], ""),
            "city": text_or(rec["city"], ""),
            "country": text_or(rec["country"], ""),
            # anything but an explicit "inactive" counts as active
            "status": "inactive" if text_or(rec["status"], "").lower() == "inactive" else "active",
            "notes": text_or(rec["notes"], ""),
            "created_at": text_or(rec["created_at"], ""),
            "updated_at": text_or(rec["updated_at"], ""),
        })
    return suppliers


def chk_supplier(form: dict, now=None):
    """
    Validate the add supplier form.
    Email and phone are optional but must look right when given.

    Returns:
        (ok: bool, msg: str, record: dict|None)
    """
    name = (form.get("name") or "").strip()
    email = (form.get("email") or "").strip()
    phone = (form.get("phone") or "").strip()
    status = (form.get("status") or "active").strip().lower()

    if not name:
        return False, "Supplier name is required", None
    if email and not _EMAIL_TEXT.fullmatch(email):
        return False, "Invalid email format", None
    if phone and not _PHONE_TEXT.fullmatch(phone):
        return False, "Invalid phone number format", None
    if status not in SUPPLIER_STATUSES:
        return False, "Status must be active or inactive", None

    now = now or datetime.now()
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S")
    record = {
        "id": f"supplier-{int(now.timestamp() * 1000)}",
        "name": name,
        "contact_person": (form.get("contact_person") or "").strip(),
        "email": email,
        "phone": phone,
        "address": (form.get("address") or "").strip(),
        "city": (form.get("city") or "").strip(),
        "country": (form.get("country") or "").strip(),
        "status": status,
        "notes": (form.get("notes") or "").strip(),
        "created_at": stamp,
        "updated_at": stamp,
    }
    return True, "OK", record


def filter_supplier_directory(suppliers, search="", status="all"):
    """Search name / contact person / email, status = all | active | inactive."""
    term = (search or "").strip().lower()
    return [
        s for s in suppliers
        if (status == "all" or s["status"] == status)
        and (not term or any(term in s[k].lower() for k in ("name", "contact_person", "email")))
    ]


_INT_TEXT = re.compile(r"[+-]?\d+", re.ASCII)


def _is_int(s: str) -> bool:
    return bool(s) and _INT_TEXT.fullmatch(s) is not None


def _is_number(s: str) -> bool:
    """Finite decimal text ("12", "-3.5", "1e3"); nan / inf / overflow are refused."""
    if not s or not s.isascii():
        return False
    try:
        number = float(s)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number)


def _num_text(s: str) -> str:
    """Number as the sheet stores it: "12.0" -> "12", "12.50" -> "12.5"."""
    number = float(s)
    if number == int(number):
        return str(int(number))
    return repr(number)
