"""
common/sheet_schema.py
----------------------
Named column layout of each spreadsheet tab.
The remote sheets are positional (no column names in the API payload we can
rely on), so every page reads cells through these schemas instead of raw
indexes. Reordering a column in the spreadsheet only needs a change here.
"""
from dataclasses import dataclass, field

from .cell_logic import cell_at


@dataclass(frozen=True)
class SheetSchema:
    sheet_name: str
    columns: dict  # {column_index: field_name}

    @property
    def width(self) -> int:
        return max(self.columns) + 1

    def index_of(self, field_name: str) -> int:
        for idx, name in self.columns.items():
            if name == field_name:
                return idx
        raise KeyError(f"{self.sheet_name} has no column '{field_name}'")

    def validate(self, header) -> list:
        """
        Check the header row against the layout.

        Returns:
            list[str]: problems found (empty when the header looks right)
        """
        if not header:
            return [f"{self.sheet_name}: header row is missing"]

        issues = []
        missing = [name for idx, name in sorted(self.columns.items()) if idx >= len(header)]
        if missing:
            issues.append(
                f"{self.sheet_name}: header has {len(header)} columns, "
                f"expected {self.width} (missing: {', '.join(missing)})"
            )
        blank = [
            name for idx, name in sorted(self.columns.items())
            if idx < len(header) and not str(header[idx] or "").strip()
        ]
        if blank:
            issues.append(f"{self.sheet_name}: blank header cells for {', '.join(blank)}")
        return issues

    def read(self, row) -> dict:
        """Positional row -> {field_name: raw cell or None}."""
        return {name: cell_at(row, idx) for idx, name in self.columns.items()}

    def to_row(self, record: dict) -> list:
        """{field_name: value} -> positional row for append/update (gaps are "")."""
        row = [""] * self.width
        for idx, name in self.columns.items():
            value = record.get(name)
            row[idx] = "" if value is None else value
        return row


@dataclass
class SheetTable:
    schema: SheetSchema
    header: list
    rows: list = field(default_factory=list)  # field dicts, "_row" = sheet row number
    total_rows: int = 0                        # data rows in the sheet before the cap

    @property
    def truncated(self) -> bool:
        return self.total_rows > len(self.rows)


def bind(schema: SheetSchema, values, limit=None) -> SheetTable:
    """
    Map raw sheet values (header + data rows) through a schema.

    Args:
        schema (SheetSchema): layout of the tab
        values (list[list]): values as returned by the API, row 0 = header
        limit (int|None): only the first `limit` data rows are read

    Returns:
        SheetTable
    """
    values = values or []
    header = list(values[0]) if values else []
    data_rows = values[1:]
    capped = data_rows if limit is None else data_rows[:limit]

    rows = []
    for i, raw in enumerate(capped):
        rec = schema.read(raw or [])
        rec["_index"] = i
        # header is sheet row 1, so data row i lives on row i + 2
        rec["_row"] = i + 2
        rows.append(rec)

    return SheetTable(schema=schema, header=header, rows=rows, total_rows=len(data_rows))


# ---------------------------------------------------
# Layouts of the business sheets
# ---------------------------------------------------
SALES_SCHEMA = SheetSchema("Sales", {
    0: "id",
    1: "receipt_no",
    2: "date",
    3: "time",
    4: "category",
    5: "product",
    6: "unit_price",
    7: "discount",
    8: "quantity",
    9: "revenue",
    10: "sold_by",
})

PURCHASES_SCHEMA = SheetSchema("Purchases", {
    0: "id",
    1: "receipt_no",
    2: "date",
    3: "time",
    4: "product",
    5: "category",
    6: "quantity",
    7: "unit_cost",
    8: "amount",
    9: "location",
    10: "supplier",
})

EXPENSES_SCHEMA = SheetSchema("Expenses", {
    0: "id",
    1: "date",
    2: "category",
    3: "description",
    4: "amount",
})

INVENTORY_SCHEMA = SheetSchema("Inventory", {
    0: "id",
    1: "product",
    2: "category",
    3: "current_stock",
    4: "min_stock",
    5: "max_stock",
    6: "unit",
    10: "last_updated",
})

PRODUCTS_SCHEMA = SheetSchema("Products", {
    0: "id",
    1: "name",
    2: "category",
    3: "price",
    4: "cost",
    5: "stock",
    6: "supplier",
    7: "status",
    8: "description",
})

SUPPLIERS_SCHEMA = SheetSchema("Suppliers", {
    0: "id",
    1: "name",
    2: "contact_person",
    3: "email",
    4: "phone",
    5: "address",
    6: "city",
    7: "country",
    8: "status",
    9: "notes",
    10: "created_at",
    11: "updated_at",
})

SCHEMAS = {
    s.sheet_name: s
    for s in (SALES_SCHEMA, PURCHASES_SCHEMA, EXPENSES_SCHEMA, INVENTORY_SCHEMA, PRODUCTS_SCHEMA,
              SUPPLIERS_SCHEMA)
}


def check_sheets(values_by_sheet: dict) -> list:
    """Validate the header of every fetched sheet that has a known layout."""
    issues = []
    for sheet_name, values in values_by_sheet.items():
        schema = SCHEMAS.get(sheet_name)
        if schema is None:
            continue
        header = values[0] if values else []
        issues.extend(schema.validate(header))
    for msg in issues:
        print(f"[Schema] {msg}")
    return issues
