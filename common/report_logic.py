"""
common/report_logic.py
----------------------
End-of-day sales report.
"""
from .catalog_logic import load_sales

EOD_ROW_LIMIT = 50
TOP_PRODUCT_COUNT = 5


def build_end_of_day(sales_values, limit=EOD_ROW_LIMIT):
    """
    Summarize the first `limit` sales rows.

    Returns:
        dict: transactions, revenue, discounts, quantity,
              average_transaction, top_products [{product, revenue, quantity}]
    """
    sales = load_sales(sales_values, limit)

    revenue = sum(s["revenue"] for s in sales)
    discounts = sum(s["discount"] for s in sales)
    quantity = sum(s["quantity"] for s in sales)
    transactions = len(sales)

    per_product = {}
    for s in sales:
        slot = per_product.setdefault(s["product"], {"product": s["product"], "revenue": 0.0, "quantity": 0})
        slot["revenue"] += s["revenue"]
        slot["quantity"] += s["quantity"]

    # sorted() is stable: ties keep first-seen order
    top = sorted(per_product.values(), key=lambda p: p["revenue"], reverse=True)[:TOP_PRODUCT_COUNT]

    return {
        "transactions": transactions,
        "revenue": revenue,
        "discounts": discounts,
        "quantity": quantity,
        "average_transaction": revenue / transactions if transactions else 0.0,
        "top_products": top,
    }
