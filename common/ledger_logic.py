"""
common/ledger_logic.py
----------------------
Derived ledgers built from the raw sheets:
  - cashflow ledger (Sales / Purchases / Expenses) with running balance
  - inventory movement ledger (Purchases in / Sales out)
  - inventory audit trail (Purchases / Sales / Inventory)
Pure functions, no Flask. Every call rebuilds the list from the rows given.
"""
from dataclasses import dataclass, asdict

from .cell_logic import parse_currency, parse_int, parse_sheet_date, text_or, format_currency
from .sheet_schema import (
    bind, SALES_SCHEMA, PURCHASES_SCHEMA, EXPENSES_SCHEMA, INVENTORY_SCHEMA
)

# Rows read from each sheet per view
CASHFLOW_ROW_LIMIT = 50
MOVEMENT_ROW_LIMIT = 50
AUDIT_ROW_LIMIT = 30
AUDIT_INVENTORY_ROW_LIMIT = 20

UNKNOWN_DATE = "Unknown Date"
UNKNOWN_TIME = "Unknown Time"
UNKNOWN_PRODUCT = "Unknown Product"
UNCATEGORIZED = "Uncategorized"


@dataclass
class LedgerEntry:
    id: str
    date: str
    description: str
    category: str
    type: str            # "income" | "expense"
    amount: float
    running_balance: float = 0.0
    reference: str = ""

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == "income" else -self.amount

    def to_dict(self):
        return asdict(self)


@dataclass
class MovementRecord:
    id: str
    date: str
    product: str
    category: str
    direction: str       # "in" | "out"
    quantity: int
    unit_price: float
    total_value: float
    reason: str
    reference: str
    location: str

    def to_dict(self):
        return asdict(self)


@dataclass
class AuditRecord:
    id: str
    timestamp: str
    user: str
    action: str
    product: str
    old_value: str
    new_value: str
    reason: str
    reference: str

    def to_dict(self):
        return asdict(self)


def _row_id(prefix, rec):
    return f"{prefix}-{text_or(rec.get('id'), str(rec['_index']))}"


def _receipt(rec):
    return f"Receipt #{text_or(rec.get('receipt_no'), 'N/A')}"


# ===================================================
# Ordering
# ===================================================
def sort_newest_first(items, date_of):
    """
    Sort by parsed date, newest first.
    Items whose date does not parse go last, in their original order.
    """
    dated = []
    undated = []
    for item in items:
        parsed = parse_sheet_date(date_of(item))
        if parsed is None:
            undated.append(item)
        else:
            dated.append((parsed, item))

    # list.sort is stable with reverse=True as well
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in dated] + undated


def apply_running_balance(entries):
    """
    Fill running_balance on a newest-first ledger.
    The fold starts at the oldest entry (end of the list), so the balance of
    an entry is the signed sum of itself and everything older.
    """
    balance = 0.0
    for entry in reversed(entries):
        balance += entry.signed_amount
        entry.running_balance = balance
    return entries


# ===================================================
# Cashflow
# ===================================================
def derive_cashflow(sales_values, purchase_values, expense_values, limit=CASHFLOW_ROW_LIMIT):
    """
    Build the cashflow ledger.

    Args:
        sales_values / purchase_values / expense_values (list[list]):
            raw sheet values, header row first
        limit (int): data rows read from each sheet

    Returns:
        list[LedgerEntry]: newest first, running balance filled
    """
    entries = []

    for rec in bind(SALES_SCHEMA, sales_values, limit).rows:
        amount = parse_currency(rec["revenue"])
        if amount <= 0:
            continue
        entries.append(LedgerEntry(
            id=_row_id("sale", rec),
            date=text_or(rec["date"], UNKNOWN_DATE),
            description=f"Sale: {text_or(rec['product'], UNKNOWN_PRODUCT)}",
            category="Sales",
            type="income",
            amount=amount,
            reference=_receipt(rec),
        ))

    for rec in bind(PURCHASES_SCHEMA, purchase_values, limit).rows:
        amount = parse_currency(rec["amount"])
        if amount <= 0:
            continue
        entries.append(LedgerEntry(
            id=_row_id("purchase", rec),
            date=text_or(rec["date"], UNKNOWN_DATE),
            description=f"Purchase: {text_or(rec['product'], UNKNOWN_PRODUCT)}",
            category="Purchases",
            type="expense",
            amount=amount,
            reference=_receipt(rec),
        ))

    for rec in bind(EXPENSES_SCHEMA, expense_values, limit).rows:
        amount = parse_currency(rec["amount"])
        if amount <= 0:
            continue
        entries.append(LedgerEntry(
            id=_row_id("expense", rec),
            date=text_or(rec["date"], UNKNOWN_DATE),
            description=text_or(rec["description"], "No Description"),
            category=text_or(rec["category"], UNCATEGORIZED),
            type="expense",
            amount=amount,
            reference="Expense Record",
        ))

    entries = sort_newest_first(entries, lambda e: e.date)
    return apply_running_balance(entries)


def summarize_cashflow(entries) -> dict:
    total_income = sum(e.amount for e in entries if e.type == "income")
    total_expense = sum(e.amount for e in entries if e.type == "expense")
    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "net": total_income - total_expense,
        "current_balance": entries[0].running_balance if entries else 0.0,
        "count": len(entries),
    }


def filter_ledger(entries, search="", kind="all"):
    """Search description / category / reference, kind = all | income | expense."""
    term = (search or "").strip().lower()
    result = []
    for e in entries:
        if kind in ("income", "expense") and e.type != kind:
            continue
        if term and not any(term in s.lower() for s in (e.description, e.category, e.reference)):
            continue
        result.append(e)
    return result


# ===================================================
# Inventory movements
# ===================================================
def derive_movements(purchase_values, sales_values, limit=MOVEMENT_ROW_LIMIT):
    """Purchases are stock in, sales are stock out. Newest first."""
    movements = []

    for rec in bind(PURCHASES_SCHEMA, purchase_values, limit).rows:
        quantity = parse_int(rec["quantity"])
        if quantity <= 0:
            continue
        unit_price = parse_currency(rec["unit_cost"])
        movements.append(MovementRecord(
            id=_row_id("purchase", rec),
            date=text_or(rec["date"], UNKNOWN_DATE),
            product=text_or(rec["product"], UNKNOWN_PRODUCT),
            category=text_or(rec["category"], UNCATEGORIZED),
            direction="in",
            quantity=quantity,
            unit_price=unit_price,
            total_value=quantity * unit_price,
            reason="Purchase",
            reference=_receipt(rec),
            location=text_or(rec["location"], "Unknown"),
        ))

    for rec in bind(SALES_SCHEMA, sales_values, limit).rows:
        quantity = parse_int(rec["quantity"])
        if quantity <= 0:
            continue
        unit_price = parse_currency(rec["unit_price"])
        movements.append(MovementRecord(
            id=_row_id("sale", rec),
            date=text_or(rec["date"], UNKNOWN_DATE),
            product=text_or(rec["product"], UNKNOWN_PRODUCT),
            category=text_or(rec["category"], UNCATEGORIZED),
            direction="out",
            quantity=quantity,
            unit_price=unit_price,
            total_value=quantity * unit_price,
            reason="Sale",
            reference=_receipt(rec),
            location="POS",
        ))

    return sort_newest_first(movements, lambda m: m.date)


def summarize_movements(movements) -> dict:
    qty_in = sum(m.quantity for m in movements if m.direction == "in")
    qty_out = sum(m.quantity for m in movements if m.direction == "out")
    value_in = sum(m.total_value for m in movements if m.direction == "in")
    value_out = sum(m.total_value for m in movements if m.direction == "out")
    return {
        "quantity_in": qty_in,
        "quantity_out": qty_out,
        "net_quantity": qty_in - qty_out,
        "value_in": value_in,
        "value_out": value_out,
        "count": len(movements),
    }


def filter_movements(movements, search="", direction="all"):
    term = (search or "").strip().lower()
    result = []
    for m in movements:
        if direction in ("in", "out") and m.direction != direction:
            continue
        if term and not any(term in s.lower() for s in (m.product, m.category, m.reference, m.reason)):
            continue
        result.append(m)
    return result


# ===================================================
# Audit trail
# ===================================================
def derive_audit_trail(purchase_values, sales_values, inventory_values,
                       limit=AUDIT_ROW_LIMIT, inventory_limit=AUDIT_INVENTORY_ROW_LIMIT):
    """
    Audit records reconstructed from the business sheets
    (there is no dedicated audit sheet). Newest first.
    """
    records = []

    for rec in bind(PURCHASES_SCHEMA, purchase_values, limit).rows:
        quantity = parse_int(rec["quantity"])
        if quantity <= 0:
            continue
        cost = parse_currency(rec["unit_cost"])
        records.append(AuditRecord(
            id=f"audit-purchase-{rec['_index']}",
            timestamp=f"{text_or(rec['date'], UNKNOWN_DATE)} {text_or(rec['time'], UNKNOWN_TIME)}",
            user="System",
            action="Stock Added",
            product=text_or(rec["product"], UNKNOWN_PRODUCT),
            old_value="N/A",
            new_value=f"+{quantity} units @ {format_currency(cost)}",
            reason="Purchase",
            reference=_receipt(rec),
        ))

    for rec in bind(SALES_SCHEMA, sales_values, limit).rows:
        quantity = parse_int(rec["quantity"])
        if quantity <= 0:
            continue
        price = parse_currency(rec["unit_price"])
        records.append(AuditRecord(
            id=f"audit-sale-{rec['_index']}",
            timestamp=f"{text_or(rec['date'], UNKNOWN_DATE)} {text_or(rec['time'], UNKNOWN_TIME)}",
            user=text_or(rec["sold_by"], "Unknown User"),
            action="Stock Removed",
            product=text_or(rec["product"], UNKNOWN_PRODUCT),
            old_value="N/A",
            new_value=f"-{quantity} units @ {format_currency(price)}",
            reason="Sale",
            reference=_receipt(rec),
        ))

    for rec in bind(INVENTORY_SCHEMA, inventory_values, inventory_limit).rows:
        last_updated = text_or(rec["last_updated"], UNKNOWN_DATE)
        if last_updated == UNKNOWN_DATE:
            continue
        records.append(AuditRecord(
            id=f"audit-inventory-{rec['_index']}",
            # date-only cells get midnight, stamps that carry a time are kept
            timestamp=last_updated if ":" in last_updated else f"{last_updated} 00:00:00",
            user="System",
            action="Inventory Updated",
            product=text_or(rec["product"], UNKNOWN_PRODUCT),
            old_value="N/A",
            new_value="Stock level synchronized",
            reason="System Update",
            reference="Inventory Sync",
        ))

    return sort_newest_first(records, lambda r: r.timestamp)


def summarize_audit(records) -> dict:
    counts = {}
    for r in records:
        counts[r.action] = counts.get(r.action, 0) + 1
    return {"count": len(records), "by_action": counts}


def filter_audit(records, search="", action="all"):
    term = (search or "").strip().lower()
    result = []
    for r in records:
        if action != "all" and r.action != action:
            continue
        if term and not any(term in s.lower() for s in (r.product, r.user, r.reason, r.reference)):
            continue
        result.append(r)
    return result
