"""
common/supplier_logic.py
------------------------
Supplier performance computed from the Purchases sheet.

On-time delivery and quality rating are not recorded anywhere in the
spreadsheet. They come from a metrics provider: RandomMetricsProvider is a
placeholder that draws fresh values on every call (so the status of a
supplier can change between reloads), FixedMetricsProvider returns constant
values.
"""
import random
import re
from dataclasses import dataclass, asdict

from .cell_logic import parse_currency, parse_sheet_date, text_or
from .sheet_schema import bind, PURCHASES_SCHEMA

SUPPLIER_ROW_LIMIT = 100
UNKNOWN_SUPPLIER = "Unknown Supplier"

PREFERRED_MIN_PURCHASES = 10
PREFERRED_MIN_ON_TIME = 90
PREFERRED_MIN_QUALITY = 4.0


@dataclass
class SupplierPerformance:
    id: str
    name: str
    total_purchases: int
    total_spent: float
    average_order_value: float
    last_order_date: object   # datetime | None
    on_time_delivery: int     # percent
    quality_rating: float     # 1.0 - 5.0
    status: str               # active | preferred | inactive

    def to_dict(self):
        d = asdict(self)
        d["last_order_date"] = self.last_order_date.strftime("%Y-%m-%d") if self.last_order_date else None
        return d


class RandomMetricsProvider:
    """Placeholder metrics: on-time 80-99 %, quality 3.0-5.0."""

    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def on_time_delivery(self, supplier, rows) -> int:
        return self.rng.randint(80, 99)

    def quality_rating(self, supplier, rows) -> float:
        return round(self.rng.random() * 2 + 3, 1)


class FixedMetricsProvider:
    def __init__(self, on_time=95, quality=4.5):
        self.on_time = on_time
        self.quality = quality

    def on_time_delivery(self, supplier, rows) -> int:
        return self.on_time

    def quality_rating(self, supplier, rows) -> float:
        return self.quality


def classify_supplier(total_purchases, on_time, quality) -> str:
    if (total_purchases > PREFERRED_MIN_PURCHASES
            and on_time > PREFERRED_MIN_ON_TIME
            and quality > PREFERRED_MIN_QUALITY):
        return "preferred"
    if total_purchases == 0:
        return "inactive"
    return "active"


def supplier_id(name: str) -> str:
    return "supplier-" + re.sub(r"\s+", "-", name)


def derive_supplier_performance(purchase_values, metrics=None, limit=SUPPLIER_ROW_LIMIT):
    """
    Group purchases by supplier and compute count / spend / average / last order.

    Args:
        purchase_values (list[list]): raw Purchases values, header first
        metrics: provider of on_time_delivery() / quality_rating()
        limit (int): purchase rows read

    Returns:
        list[SupplierPerformance]: highest total spent first
    """
    metrics = metrics or RandomMetricsProvider()

    groups = {}
    for rec in bind(PURCHASES_SCHEMA, purchase_values, limit).rows:
        name = text_or(rec["supplier"], UNKNOWN_SUPPLIER)
        groups.setdefault(name, []).append(rec)

    result = []
    for name, rows in groups.items():
        total_purchases = len(rows)
        total_spent = sum(parse_currency(r["amount"]) for r in rows)
        average = total_spent / total_purchases if total_purchases > 0 else 0.0

        dates = [d for d in (parse_sheet_date(r["date"]) for r in rows) if d is not None]
        last_order = max(dates) if dates else None

        on_time = metrics.on_time_delivery(name, rows)
        quality = metrics.quality_rating(name, rows)

        result.append(SupplierPerformance(
            id=supplier_id(name),
            name=name,
            total_purchases=total_purchases,
            total_spent=total_spent,
            average_order_value=average,
            last_order_date=last_order,
            on_time_delivery=on_time,
            quality_rating=quality,
            status=classify_supplier(total_purchases, on_time, quality),
        ))

    result.sort(key=lambda s: s.total_spent, reverse=True)
    return result


def summarize_suppliers(suppliers) -> dict:
    return {
        "count": len(suppliers),
        "preferred": sum(1 for s in suppliers if s.status == "preferred"),
        "total_spent": sum(s.total_spent for s in suppliers),
    }


def filter_suppliers(suppliers, search="", status="all"):
    term = (search or "").strip().lower()
    return [
        s for s in suppliers
        if (status == "all" or s.status == status) and (not term or term in s.name.lower())
    ]
