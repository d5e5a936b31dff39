"""Catalog lists, entry-form checks and the end-of-day report."""

import re
from datetime import datetime

import pytest

from common.catalog_logic import (
    load_products, load_inventory, load_purchases, load_expenses, load_sales,
    product_stock_status, inventory_status, find_product,
    chk_product, chk_purchase, chk_expense, generate_product_id, product_range,
    load_suppliers, chk_supplier, filter_supplier_directory,
)
from common.report_logic import build_end_of_day
from common.sheet_schema import SUPPLIERS_SCHEMA

NOW = datetime(2024, 5, 6, 7, 8, 9)


# ---------------------------------------------------
# Lists
# ---------------------------------------------------
@pytest.mark.parametrize("stock, expected", [(11, "active"), (10, "low"), (1, "low"), (0, "out"), (-2, "out")])
def test_product_stock_status(stock, expected):
    assert product_stock_status(stock) == expected


@pytest.mark.parametrize("current, minimum, expected", [(6, 5, "active"), (5, 5, "low"), (0, 5, "out")])
def test_inventory_status(current, minimum, expected):
    assert inventory_status(current, minimum) == expected


def test_load_products():
    values = [
        ["ID", "Name", "Category", "Price", "Cost", "Stock", "Supplier", "Status", "Description"],
        ["P1", "Soda", "Drinks", "TSh1,000", "600", "25", "Acme", "active", "330ml"],
        ["", "", "", "", "", "", "", "", ""],
    ]
    soda, blank = load_products(values)
    assert soda["row"] == 2
    assert soda["price"] == 1000
    assert soda["stock_status"] == "active"
    assert soda["description"] == "330ml"
    assert blank["name"] == "Unknown Product"
    assert blank["id"] == "2"
    assert blank["stock_status"] == "out"
    assert find_product([soda, blank], 3) is blank
    assert find_product([soda, blank], 9) is None


def test_load_inventory_uses_last_updated_column():
    values = [["h"] * 11, ["I1", "Soda", "Drinks", "3", "5", "50", "Bottle", "x", "x", "x", "2024-02-20"]]
    [item] = load_inventory(values)
    assert item["last_updated"] == "2024-02-20"
    assert item["status"] == "low"


def test_load_purchases_cap():
    values = [["h"] * 11] + [["", "", "2024-01-01", "", "Soda", "", "1", "1", "1", "", "Acme"]] * 80
    assert len(load_purchases(values)) == 50


def test_load_expenses_and_sales():
    [expense] = load_expenses([["h"] * 5, ["E1", "2024-01-01", "Rent", "", "TSh3,000"]])
    assert expense["amount"] == 3000
    assert expense["description"] == "No Description"

    [sale] = load_sales([["h"] * 11, ["S1", "R1", "2024-01-01", "", "Drinks", "Soda", "100", "10", "2", "190", ""]])
    assert sale["revenue"] == 190
    assert sale["time"] == "Unknown Time"
    assert sale["sold_by"] == "Unknown User"


# ---------------------------------------------------
# Forms
# ---------------------------------------------------
def product_form(**overrides):
    form = {"name": "Soda", "category": "Drinks", "price": "1000", "cost": "600.50",
            "stock": "24", "supplier": "Acme", "status": "active", "description": "330ml"}
    form.update(overrides)
    return form


def test_chk_product_ok():
    ok, msg, record = chk_product(product_form())
    assert ok
    assert record["price"] == "1000"
    assert record["cost"] == "600.5"
    assert record["stock"] == "24"
    assert re.fullmatch(r"P\d{6}", record["id"])


def test_chk_product_keeps_existing_id():
    ok, _, record = chk_product(product_form(id="P123456"))
    assert ok
    assert record["id"] == "P123456"


@pytest.mark.parametrize("field, value, message", [
    ("name", "", "Product name is required"),
    ("category", " ", "Category is required"),
    ("price", "abc", "Valid price is required"),
    ("cost", "", "Valid cost is required"),
    ("stock", "2.5", "Valid stock quantity is required"),
    ("supplier", "", "Supplier is required"),
    ("status", "deleted", "Status must be active or inactive"),
])
def test_chk_product_rejects(field, value, message):
    ok, msg, record = chk_product(product_form(**{field: value}))
    assert not ok
    assert msg == message
    assert record is None


def test_generate_product_id_format():
    assert re.fullmatch(r"P\d{6}", generate_product_id())


def test_product_range():
    assert product_range(5) == "Products!A5:I5"


def test_chk_purchase_computes_amount():
    ok, msg, record = chk_purchase(
        {"product": "Soda", "quantity": "3", "unit_cost": "250.5", "supplier": "Acme"}, now=NOW
    )
    assert ok, msg
    assert record["amount"] == "751.5"
    assert record["date"] == "2024-05-06"
    assert record["time"] == "07:08:09"
    assert record["category"] == "Uncategorized"
    assert record["location"] == "Store"
    assert record["id"] == "PU20240506070809"


@pytest.mark.parametrize("form", [
    {"product": "", "quantity": "1", "unit_cost": "1", "supplier": "A"},
    {"product": "Soda", "quantity": "0", "unit_cost": "1", "supplier": "A"},
    {"product": "Soda", "quantity": "x", "unit_cost": "1", "supplier": "A"},
    {"product": "Soda", "quantity": "1", "unit_cost": "-1", "supplier": "A"},
    {"product": "Soda", "quantity": "1", "unit_cost": "1", "supplier": ""},
])
def test_chk_purchase_rejects(form):
    ok, msg, record = chk_purchase(form, now=NOW)
    assert not ok
    assert msg
    assert record is None


def test_chk_expense():
    ok, _, record = chk_expense({"category": "Rent", "description": "May", "amount": "3000"}, now=NOW)
    assert ok
    assert record == {"id": "EX20240506070809", "date": "2024-05-06",
                      "category": "Rent", "description": "May", "amount": "3000"}

    ok, _, record = chk_expense(
        {"category": "Rent", "description": "May", "amount": "10", "date": "2024-04-30"}, now=NOW
    )
    assert record["date"] == "2024-04-30"


@pytest.mark.parametrize("form, message", [
    ({"category": "", "description": "x", "amount": "1"}, "Category is required"),
    ({"category": "Rent", "description": "", "amount": "1"}, "Description is required"),
    ({"category": "Rent", "description": "x", "amount": "0"}, "Amount must be greater than 0"),
    ({"category": "Rent", "description": "x", "amount": "1", "date": "30/04/2024"}, "Date must be YYYY-MM-DD"),
])
def test_chk_expense_rejects(form, message):
    ok, msg, _ = chk_expense(form, now=NOW)
    assert not ok
    assert msg == message


# ---------------------------------------------------
# End of day
# ---------------------------------------------------
def eod_sale(product, revenue, discount="0", qty="1"):
    return ["", "R", "2024-01-01", "", "", product, "", discount, qty, revenue, ""]


def test_end_of_day_totals_and_top_products():
    values = [["h"] * 11,
              eod_sale("Soda", "100", "10", "2"),
              eod_sale("Bread", "300", qty="3"),
              eod_sale("Soda", "150", qty="1"),
              eod_sale("Milk", "50"),
              eod_sale("Tea", "20"),
              eod_sale("Eggs", "10"),
              eod_sale("Salt", "5")]
    report = build_end_of_day(values)

    assert report["transactions"] == 7
    assert report["revenue"] == 635
    assert report["discounts"] == 10
    assert report["quantity"] == 10
    assert report["average_transaction"] == pytest.approx(635 / 7)

    top = report["top_products"]
    assert [p["product"] for p in top] == ["Bread", "Soda", "Milk", "Tea", "Eggs"]
    assert top[1]["revenue"] == 250
    assert top[1]["quantity"] == 3


def test_end_of_day_cap_and_empty():
    values = [["h"] * 11] + [eod_sale("Soda", "1")] * 80
    assert build_end_of_day(values)["transactions"] == 50

    empty = build_end_of_day([])
    assert empty["transactions"] == 0
    assert empty["average_transaction"] == 0
    assert empty["top_products"] == []


@pytest.mark.parametrize("field, value, message", [
    ("price", "+nan", "Valid price is required"),
    ("price", "+inf", "Valid price is required"),
    ("cost", "1e400", "Valid cost is required"),
    ("cost", "-Infinity", "Valid cost is required"),
    ("stock", "-+5", "Valid stock quantity is required"),
    ("stock", "²", "Valid stock quantity is required"),
    ("stock", "٣", "Valid stock quantity is required"),
])
def test_chk_product_rejects_non_finite_and_odd_digits(field, value, message):
    ok, msg, record = chk_product(product_form(**{field: value}))
    assert not ok
    assert msg == message
    assert record is None


def test_chk_product_accepts_signed_stock():
    ok, _, record = chk_product(product_form(stock="+7"))
    assert ok
    assert record["stock"] == "7"


@pytest.mark.parametrize("quantity, unit_cost", [
    ("²", "1"),
    ("-+1", "1"),
    ("1", "+nan"),
    ("1", "1e400"),
    ("9" * 400, "1e300"),
])
def test_chk_purchase_rejects_odd_numbers(quantity, unit_cost):
    ok, msg, record = chk_purchase(
        {"product": "Soda", "quantity": quantity, "unit_cost": unit_cost, "supplier": "Acme"}, now=NOW
    )
    assert not ok
    assert msg
    assert record is None


def test_chk_expense_rejects_non_finite_amount():
    ok, msg, _ = chk_expense({"category": "Rent", "description": "x", "amount": "+inf"}, now=NOW)
    assert not ok
    assert msg == "Amount must be greater than 0"


# ---------------------------------------------------
# Supplier directory
# ---------------------------------------------------
def test_load_suppliers():
    values = [
        ["h"] * 12,
        ["S1", "Acme", "Jane", "jane@acme.test", "+255 700", "Plot 4", "Dar", "TZ",
         "Inactive", "", "2024-01-01T08:00:00", ""],
        ["", "", "", "", "", "", "", "", "paused"],
    ]
    acme, blank = load_suppliers(values)
    assert acme["status"] == "inactive"
    assert acme["contact_person"] == "Jane"
    assert acme["created_at"] == "2024-01-01T08:00:00"
    assert blank["id"] == "supplier-2"
    assert blank["name"] == "Unknown Supplier"
    assert blank["status"] == "active"


def test_chk_supplier_builds_row_record():
    ok, msg, record = chk_supplier(
        {"name": " Acme ", "email": "sales@acme.test", "phone": "+255 (0) 700-000", "status": "inactive"},
        now=NOW,
    )
    assert ok, msg
    assert record["name"] == "Acme"
    assert record["status"] == "inactive"
    assert record["id"].startswith("supplier-")
    assert record["created_at"] == record["updated_at"] == "2024-05-06T07:08:09"
    assert len(SUPPLIERS_SCHEMA.to_row(record)) == 12


@pytest.mark.parametrize("form, message", [
    ({"name": ""}, "Supplier name is required"),
    ({"name": "Acme", "email": "not-an-email"}, "Invalid email format"),
    ({"name": "Acme", "phone": "call me"}, "Invalid phone number format"),
    ({"name": "Acme", "status": "deleted"}, "Status must be active or inactive"),
])
def test_chk_supplier_rejects(form, message):
    ok, msg, record = chk_supplier(form, now=NOW)
    assert not ok
    assert msg == message
    assert record is None


def test_filter_supplier_directory():
    suppliers = [
        {"name": "Acme", "contact_person": "Jane", "email": "jane@acme.test", "status": "active"},
        {"name": "Bakery", "contact_person": "Sam", "email": "", "status": "inactive"},
    ]
    assert [s["name"] for s in filter_supplier_directory(suppliers, "JANE")] == ["Acme"]
    assert [s["name"] for s in filter_supplier_directory(suppliers, status="inactive")] == ["Bakery"]
    assert len(filter_supplier_directory(suppliers)) == 2
