"""Supplier performance aggregation."""

import random
from datetime import datetime

from common.supplier_logic import (
    derive_supplier_performance, classify_supplier, summarize_suppliers, filter_suppliers,
    supplier_id, FixedMetricsProvider, RandomMetricsProvider,
)

PURCH_H = ["ID", "Receipt", "Date", "Time", "Product", "Category", "Qty", "Cost", "Amount", "Location", "Supplier"]


def purchase(supplier, amount, date="2024-01-01"):
    return ["", "B1", date, "08:00:00", "Soda", "Drinks", "1", "1", amount, "Store", supplier]


def test_group_count_sum_average():
    values = [PURCH_H, purchase("Acme", "100"), purchase("Acme", "200")]
    [acme] = derive_supplier_performance(values, metrics=FixedMetricsProvider())
    assert acme.name == "Acme"
    assert acme.total_purchases == 2
    assert acme.total_spent == 300
    assert acme.average_order_value == 150


def test_last_order_is_max_date():
    values = [PURCH_H,
              purchase("Acme", "1", "2024-01-05"),
              purchase("Acme", "1", "2024-03-01"),
              purchase("Acme", "1", "garbage")]
    [acme] = derive_supplier_performance(values, metrics=FixedMetricsProvider())
    assert acme.last_order_date == datetime(2024, 3, 1)
    assert acme.to_dict()["last_order_date"] == "2024-03-01"


def test_missing_supplier_is_grouped_as_unknown():
    values = [PURCH_H, purchase("", "10"), purchase("  ", "5")]
    [unknown] = derive_supplier_performance(values, metrics=FixedMetricsProvider())
    assert unknown.name == "Unknown Supplier"
    assert unknown.id == "supplier-Unknown-Supplier"
    assert unknown.total_spent == 15


def test_sorted_by_total_spent():
    values = [PURCH_H, purchase("Small", "10"), purchase("Big", "TSh1,000"), purchase("Mid", "100")]
    names = [s.name for s in derive_supplier_performance(values, metrics=FixedMetricsProvider())]
    assert names == ["Big", "Mid", "Small"]


def test_preferred_needs_all_three_thresholds():
    assert classify_supplier(11, 91, 4.1) == "preferred"
    assert classify_supplier(10, 99, 5.0) == "active"
    assert classify_supplier(11, 90, 5.0) == "active"
    assert classify_supplier(11, 99, 4.0) == "active"
    assert classify_supplier(0, 99, 5.0) == "inactive"


def test_preferred_status_from_provider():
    values = [PURCH_H] + [purchase("Acme", "10") for _ in range(11)]
    [acme] = derive_supplier_performance(values, metrics=FixedMetricsProvider(on_time=95, quality=4.5))
    assert acme.status == "preferred"

    [acme] = derive_supplier_performance(values, metrics=FixedMetricsProvider(on_time=85, quality=4.5))
    assert acme.status == "active"


def test_random_provider_ranges():
    provider = RandomMetricsProvider(rng=random.Random(7))
    for _ in range(200):
        on_time = provider.on_time_delivery("Acme", [])
        quality = provider.quality_rating("Acme", [])
        assert 80 <= on_time <= 99
        assert 3.0 <= quality <= 5.0
        assert round(quality, 1) == quality


def test_row_cap():
    values = [PURCH_H] + [purchase("Acme", "1") for _ in range(150)]
    [acme] = derive_supplier_performance(values, metrics=FixedMetricsProvider())
    assert acme.total_purchases == 100


def test_summary_and_filter():
    values = [PURCH_H] + [purchase("Acme", "10") for _ in range(11)] + [purchase("Beta", "5")]
    suppliers = derive_supplier_performance(values, metrics=FixedMetricsProvider())
    summary = summarize_suppliers(suppliers)
    assert summary == {"count": 2, "preferred": 1, "total_spent": 115}

    assert [s.name for s in filter_suppliers(suppliers, status="preferred")] == ["Acme"]
    assert [s.name for s in filter_suppliers(suppliers, search="bet")] == ["Beta"]


def test_supplier_id():
    assert supplier_id("Acme  Foods Ltd") == "supplier-Acme-Foods-Ltd"
